# pawtrail/api/walks/test_walk_routes.py
from datetime import datetime, timedelta, timezone

def test_walk_lifecycle(client, auth_headers):
    headers = auth_headers('mom')

    response = client.get('/api/walks/active', headers=headers)
    assert response.status_code == 200
    assert response.get_json() is None
    assert response.headers['X-Poll-Interval'] == '5'

    response = client.post('/api/walks', json={}, headers=headers)
    assert response.status_code == 201
    walk_id = response.get_json()['walk_id']

    response = client.post(f'/api/walks/{walk_id}/events', json={'event_type': 'pee'}, headers=headers)
    assert response.status_code == 201
    assert response.get_json()['event_type'] == 'pee'

    active = client.get('/api/walks/active', headers=headers).get_json()
    assert active['walk_id'] == walk_id
    assert [e['event_type'] for e in active['events']] == ['pee']

    response = client.put(f'/api/walks/{walk_id}', json={'is_completed': True, 'duration': 25}, headers=headers)
    assert response.status_code == 200
    body = response.get_json()
    assert body['is_completed'] is True
    assert body['duration'] == 25
    assert body['end_time'] is not None

    assert client.get('/api/walks/active', headers=headers).get_json() is None

def test_start_walk_conflict_returns_409(client, auth_headers):
    headers = auth_headers('mom')
    walk_id = client.post('/api/walks', headers=headers).get_json()['walk_id']

    response = client.post('/api/walks', json={}, headers=headers)
    assert response.status_code == 409
    body = response.get_json()
    assert body['error_code'] == 'ACTIVE_WALK_EXISTS'
    assert body['active_walk_id'] == walk_id
    assert body['retryable'] is True

def test_complete_without_duration_uses_elapsed_minutes(client, auth_headers):
    headers = auth_headers('mom')
    start = datetime(2024, 12, 20, 7, 0, tzinfo=timezone.utc)
    walk_id = client.post('/api/walks', json={'start_time': start.isoformat()}, headers=headers).get_json()['walk_id']

    end = start + timedelta(minutes=30, seconds=40)
    response = client.put(f'/api/walks/{walk_id}', json={'is_completed': True, 'end_time': end.isoformat()}, headers=headers)
    assert response.status_code == 200
    assert response.get_json()['duration'] == 30

def test_invalid_event_type_is_rejected(client, auth_headers):
    headers = auth_headers('mom')
    walk_id = client.post('/api/walks', headers=headers).get_json()['walk_id']
    response = client.post(f'/api/walks/{walk_id}/events', json={'event_type': 'sniff'}, headers=headers)
    assert response.status_code == 400
    assert response.get_json()['error_code'] == 'VALIDATION_ERROR'

def test_cannot_reopen_walk(client, auth_headers):
    headers = auth_headers('mom')
    walk_id = client.post('/api/walks', headers=headers).get_json()['walk_id']
    response = client.put(f'/api/walks/{walk_id}', json={'is_completed': False}, headers=headers)
    assert response.status_code == 400

def test_other_user_cannot_modify_walk(client, auth_headers):
    mom = auth_headers('mom')
    dad = auth_headers('dad')
    walk_id = client.post('/api/walks', headers=mom).get_json()['walk_id']

    assert client.post(f'/api/walks/{walk_id}/events', json={'event_type': 'poo'}, headers=dad).status_code == 403
    assert client.delete(f'/api/walks/{walk_id}', headers=dad).status_code == 403
    assert client.delete(f'/api/walks/{walk_id}', headers=mom).status_code == 204
    assert client.get(f'/api/walks/{walk_id}', headers=mom).status_code == 404

def test_walk_routes_require_token(client):
    assert client.get('/api/walks/active').status_code == 401
    assert client.post('/api/walks').status_code == 401

def test_list_walks_validates_limit(client, auth_headers):
    headers = auth_headers('mom')
    assert client.get('/api/walks?limit=0', headers=headers).status_code == 400
    response = client.get('/api/walks?limit=5', headers=headers)
    assert response.status_code == 200
    assert response.get_json() == []
