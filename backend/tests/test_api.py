from brushrush.server import origin_checker


def test_root_status_text(client):
    res = client.get('/')
    assert res.status_code == 200
    assert res.get_data(as_text=True) == 'Brush Rush Server'


def test_health_reports_counts(client, open_room):
    open_room(guests=2)
    res = client.get('/health')
    assert res.status_code == 200
    data = res.get_json()
    assert data['status'] == 'ok'
    assert data['rooms'] == 1
    assert data['players'] == 3
    assert data['uptime'] >= 0


def test_rooms_endpoint_lists_public_rooms(client, open_room):
    public_id, _, _ = open_room(guests=0, room_data={'name': 'Open'})
    open_room(guests=0, room_data={'name': 'Closed', 'isPrivate': True})

    res = client.get('/api/rooms')
    assert res.status_code == 200
    rooms = res.get_json()['rooms']
    assert [r['id'] for r in rooms] == [public_id]


def test_origin_checker_matches_exact_and_wildcard():
    allowed = origin_checker(['http://localhost:3000'], r'^https://.*\.vercel\.app$')
    assert allowed('http://localhost:3000')
    assert allowed('https://preview-123.vercel.app')
    assert not allowed('https://vercel.app.evil.com')
    assert not allowed('http://localhost:4000')
    assert not allowed(None)
