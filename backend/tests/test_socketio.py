from matchpairs.services.games import store


def test_socket_connect_and_join_leaderboard(sio_client):
    # Ensure we are connected to /ws
    if not sio_client.is_connected('/ws'):
        sio_client.connect(namespace='/ws')
    assert sio_client.is_connected('/ws')

    # Flush any initial events
    sio_client.get_received('/ws')

    sio_client.emit('join_leaderboard', {}, namespace='/ws')
    received = sio_client.get_received('/ws')
    names = [pkt['name'] for pkt in received]
    assert 'joined' in names
    snapshot = next(pkt for pkt in received if pkt['name'] == 'leaderboard_snapshot')
    assert snapshot['args'][0]['entries'] == []


def test_ping_pong(sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('ping', {'n': 1}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert any(pkt['name'] == 'pong' and pkt['args'][0] == {'n': 1} for pkt in received)


def test_score_submission_broadcasts(sio_client, client, clock):
    sio_client.emit('join_leaderboard', {}, namespace='/ws')
    sio_client.get_received('/ws')  # flush

    sid = client.post('/api/games/session').get_json()['session_id']
    clock.advance(60_000)
    created = store.get(sid).created_at_ms
    client.post(f'/api/games/session/{sid}/complete', json={'end_time': created + 9000, 'moves': 6})
    res = client.post(f'/api/games/session/{sid}/score', json={'name': 'Cy'})
    assert res.status_code == 201

    events = sio_client.get_received('/ws')
    updates = [e for e in events if e['name'] == 'leaderboard_update']
    assert updates
    assert updates[0]['args'][0]['entry']['name'] == 'Cy'
    assert updates[0]['args'][0]['entry']['time'] == 9000


def test_leave_leaderboard_stops_updates(sio_client, client, clock):
    sio_client.emit('join_leaderboard', {}, namespace='/ws')
    sio_client.emit('leave_leaderboard', {}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert any(pkt['name'] == 'left' for pkt in received)

    sid = client.post('/api/games/session').get_json()['session_id']
    clock.advance(60_000)
    created = store.get(sid).created_at_ms
    client.post(f'/api/games/session/{sid}/complete', json={'end_time': created + 9000, 'moves': 6})
    client.post(f'/api/games/session/{sid}/score', json={'name': 'Cy'})
    assert not any(e['name'] == 'leaderboard_update' for e in sio_client.get_received('/ws'))


def test_join_leaderboard_tolerates_non_object_payload(sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('join_leaderboard', 'abc', namespace='/ws')
    received = sio_client.get_received('/ws')
    names = [pkt['name'] for pkt in received]
    assert 'joined' in names
    snapshot = next(pkt for pkt in received if pkt['name'] == 'leaderboard_snapshot')
    assert snapshot['args'][0]['page_size'] == 10
