import logging

import requests

logger = logging.getLogger(__name__)


def announce_room(webhook_url: str, link: str, timeout: float = 5.0) -> bool:
    """Post a join link to a Discord webhook. Failures are logged, never raised."""
    try:
        resp = requests.post(
            webhook_url,
            json={'content': f"New Fluff (Liar's Dice) game created! Join: {link}"},
            timeout=timeout,
        )
        resp.raise_for_status()
    except requests.RequestException as exc:
        logger.warning(f"[webhook] discord webhook failed: {exc}")
        return False
    logger.info(f"[webhook] announced {link}")
    return True


def schedule_room_announcement(app, link: str) -> None:
    """Fire-and-forget announcement of a new room, if a webhook is configured."""
    url = app.config.get('DISCORD_WEBHOOK_URL')
    if not url:
        return
    from fluff import socketio
    socketio.start_background_task(announce_room, url, link, app.config.get('WEBHOOK_TIMEOUT_SEC', 5.0))
