NS = '/ws'


def _drain(sio_client):
    return sio_client.get_received(NS)


def _named(events, name):
    return [e['args'][0] for e in events if e['name'] == name]


def _join(sio_client, room_id, name):
    return sio_client.emit('join', {'room_id': room_id, 'name': name}, namespace=NS, callback=True)


def test_socket_connect(sio_factory):
    alice = sio_factory()
    assert alice.is_connected(NS)
    received = _drain(alice)
    assert any(pkt['name'] == 'connected' for pkt in received)


def test_join_creates_room_and_broadcasts_lobby(flask_app, sio_factory):
    alice, bob = sio_factory(), sio_factory()
    _drain(alice), _drain(bob)

    ack_a = _join(alice, 'table', 'Alice')
    assert ack_a['ok'] is True and ack_a['host'] is True
    ack_b = _join(bob, 'table', 'Bob')
    assert ack_b['ok'] is True and ack_b['host'] is False

    lobby = _named(_drain(alice), 'lobbyUpdate')
    assert lobby[-1]['hostId'] == ack_a['playerId']
    assert [p['name'] for p in lobby[-1]['players']] == ['Alice', 'Bob']
    assert 'table' in flask_app.extensions['room_registry']


def test_join_unknown_room_when_auto_create_disabled(flask_app, sio_factory):
    flask_app.config['AUTO_CREATE_ROOMS'] = False
    alice = sio_factory()
    ack = _join(alice, 'missing', 'Alice')
    assert ack['error'] == 'RoomNotFound'


def test_join_room_created_over_http(client, sio_factory):
    code = client.post('/api/games/create', json={'hand_size': 2}).get_json()['room_id']
    alice = sio_factory()
    assert _join(alice, code, 'Alice')['ok'] is True
    state = client.get(f'/api/games/{code}/state').get_json()
    assert state['players'][0]['handSize'] == 2


def test_full_round_over_sockets(client, sio_factory):
    alice, bob = sio_factory(), sio_factory()
    a_id = _join(alice, 'table', 'Alice')['playerId']
    b_id = _join(bob, 'table', 'Bob')['playerId']
    _drain(alice), _drain(bob)

    assert sio_call(bob, 'start')['error'] == 'NotHost'
    assert sio_call(alice, 'start') == {'ok': True}

    a_events, b_events = _drain(alice), _drain(bob)
    # Each player sees exactly one hand: their own
    assert len(_named(a_events, 'privateHand')) == 1
    assert len(_named(b_events, 'privateHand')) == 1
    assert len(_named(a_events, 'privateHand')[0]['dice']) == 5
    started = _named(b_events, 'gameStarted')[0]
    assert started['currentTurnPlayerId'] == a_id

    assert sio_call(bob, 'bid', count=1, face=2)['error'] == 'NotYourTurn'
    assert sio_call(alice, 'call')['error'] == 'NoActiveBid'
    assert sio_call(alice, 'bid', count=0, face=2)['error'] == 'InvalidBid'
    assert sio_call(alice, 'bid', count=2, face=3) == {'ok': True}
    assert sio_call(bob, 'bid', count=2, face=3)['error'] == 'DuplicateBid'

    new_bid = _named(_drain(bob), 'newBid')[0]
    assert new_bid == {'count': 2, 'face': 3, 'bidderId': a_id, 'nextTurnPlayerId': b_id}

    assert sio_call(bob, 'call') == {'ok': True}
    a_events, b_events = _drain(alice), _drain(bob)
    result = _named(a_events, 'roundResult')[0]
    assert result['loserId'] in (a_id, b_id)
    assert set(result['revealedHands']) == {a_id, b_id}
    assert result['bid'] == {'count': 2, 'face': 3, 'bidderId': a_id}
    sizes = {p['id']: p['handSize'] for p in result['players']}
    assert sorted(sizes.values()) == [4, 5]
    assert len(_named(b_events, 'privateHand')) == 1
    assert len(_named(b_events, 'privateHand')[0]['dice']) == sizes[b_id]

    state = client.get('/api/games/table/state').get_json()
    assert state['phase'] == 'bidding'
    assert state['current_bid'] is None
    assert 'hand' not in state['players'][0]


def test_disconnect_mid_game_declares_winner(flask_app, sio_factory):
    alice, bob = sio_factory(), sio_factory()
    _join(alice, 'table', 'Alice')
    b_id = _join(bob, 'table', 'Bob')['playerId']
    sio_call(alice, 'start')
    _drain(bob)

    alice.disconnect(namespace=NS)
    events = _drain(bob)
    over = _named(events, 'gameOver')
    assert over and over[0]['winnerId'] == b_id
    assert _named(events, 'lobbyUpdate')[-1]['hostId'] == b_id
    assert sio_call(bob, 'call')['error'] == 'GameNotRunning'


def test_room_destroyed_when_everyone_leaves(flask_app, sio_factory):
    alice = sio_factory()
    _join(alice, 'solo', 'Alice')
    registry = flask_app.extensions['room_registry']
    assert 'solo' in registry
    alice.disconnect(namespace=NS)
    assert 'solo' not in registry


def test_missing_room_id_rejected(sio_factory):
    alice = sio_factory()
    ack = alice.emit('start', {}, namespace=NS, callback=True)
    assert ack['error'] == 'RoomNotFound'


def sio_call(sio_client, event, room_id='table', **fields):
    payload = {'room_id': room_id}
    payload.update(fields)
    return sio_client.emit(event, payload, namespace=NS, callback=True)


def test_non_object_payloads_get_an_error_ack(sio_factory):
    alice = sio_factory()
    for event in ('join', 'start', 'bid', 'call'):
        for junk in ('garbage', ['table'], 7):
            ack = alice.emit(event, junk, namespace=NS, callback=True)
            assert ack['error'] == 'InvalidPayload'


def test_blank_room_id_does_not_create_a_room(flask_app, sio_factory):
    alice = sio_factory()
    ack = _join(alice, '   ', 'Alice')
    assert ack['error'] == 'RoomNotFound'
    assert len(flask_app.extensions['room_registry']) == 0


def test_room_id_is_trimmed(flask_app, sio_factory):
    alice = sio_factory()
    assert _join(alice, ' table ', 'Alice')['roomId'] == 'table'
    assert flask_app.extensions['room_registry'].room_ids() == ['table']


def test_join_retries_when_room_was_torn_down(flask_app, sio_factory, monkeypatch):
    from fluff.services.games.state import GameState

    registry = flask_app.extensions['room_registry']
    stale = GameState('table')
    real_get_or_create = registry.get_or_create
    handed_out = []

    def get_or_create(room_id):
        if not handed_out:
            handed_out.append(stale)
            return stale
        return real_get_or_create(room_id)

    monkeypatch.setattr(registry, 'get_or_create', get_or_create)
    alice = sio_factory()
    assert _join(alice, 'table', 'Alice')['ok'] is True
    assert stale.players == []
    assert [p.name for p in registry.get('table').players] == ['Alice']
