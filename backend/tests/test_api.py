from conftest import join


def test_index_and_health(client):
    assert client.get('/').status_code == 200
    res = client.get('/health')
    assert res.status_code == 200
    assert res.get_json() == {'status': 'ok'}


def test_unknown_room_is_404(client):
    assert client.get('/api/rooms/NOPE/state').status_code == 404
    assert client.get('/api/rooms/NOPE/ranking').status_code == 404


def test_state_and_ranking_for_live_room(client, sio_factory):
    join(sio_factory(), 'ABCD', 'host')
    join(sio_factory(), 'ABCD', 'ana')

    res = client.get('/api/rooms/ABCD/state')
    assert res.status_code == 200
    state = res.get_json()
    assert state['roomId'] == 'ABCD'
    assert state['status'] == 'waiting'
    assert {p['username'] for p in state['players']} == {'host', 'ana'}
    assert state['durations'] == {'questionMs': 120000}

    res = client.get('/api/rooms/ABCD/ranking')
    ranking = res.get_json()['ranking']
    assert [r['username'] for r in ranking] == ['ana', 'host']
    assert [r['position'] for r in ranking] == [1, 2]


def test_parse_questions_preview(client):
    res = client.post('/api/rooms/questions/parse', json={'csv': 'Q1,a,b,c,d,3\n"Q, 2",w,x,y,z,1'})
    assert res.status_code == 200
    data = res.get_json()
    assert data['questionCount'] == 2
    assert data['questions'][0]['correctOptionIndex'] == 2
    assert data['questions'][1]['title'] == 'Q, 2'


def test_parse_questions_rejects_bad_rows(client):
    res = client.post('/api/rooms/questions/parse', json={'csv': 'Q1,a,b,c,d,1\nQ2,a,b,c,d'})
    assert res.status_code == 400
    body = res.get_json()
    assert body['code'] == 'INVALID_QUESTION'
    assert body['index'] == 2
    assert body['field'] == 'columns'
    assert body['error']

    res = client.post('/api/rooms/questions/parse', json={'csv': ',a,b,c,d,1'})
    assert res.get_json()['field'] == 'title'


def test_parse_questions_requires_csv(client):
    res = client.post('/api/rooms/questions/parse', json={})
    assert res.status_code == 400
    assert res.get_json()['code'] == 'INVALID_PAYLOAD'

    res = client.post('/api/rooms/questions/parse', json={'csv': ''})
    assert res.get_json()['code'] == 'QUESTION_BANK_EMPTY'
