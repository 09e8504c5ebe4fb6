# pawtrail/api/feedings/test_feedings.py
from datetime import datetime, timedelta, timezone

import pytest

from pawtrail.api.feedings.services import FeedingService
from pawtrail.api.users.services import UserService
from pawtrail.models.feeding import MealType, Portion

T0 = datetime(2024, 12, 20, 8, 0, tzinfo=timezone.utc)

@pytest.fixture
def users(db):
    return UserService(db)

@pytest.fixture
def service(db, users):
    return FeedingService(db, user_service=users)

def _feed(service, user_id='mom', offset=0, **extra):
    data = {'meal_type': 'breakfast', 'portion': 'regular', 'timestamp': T0 + timedelta(minutes=offset)}
    data.update(extra)
    return service.create_feeding(user_id, data)

def test_filter_mutable_fields():
    payload = {'meal_type': 'dinner', 'user_id': 'dad', 'feeding_id': 'x', 'notes': 'ok'}
    assert FeedingService.filter_mutable_fields(payload) == {'meal_type': 'dinner', 'notes': 'ok'}

def test_update_ignores_unknown_fields(service):
    feeding = _feed(service)
    updated = service.update_feeding(feeding.feeding_id, {'portion': 'large', 'user_id': 'dad'})
    assert updated.portion is Portion.LARGE
    assert updated.user_id == 'mom'
    assert updated.meal_type is MealType.BREAKFAST

def test_update_with_no_valid_fields_raises(service):
    feeding = _feed(service)
    with pytest.raises(ValueError):
        service.update_feeding(feeding.feeding_id, {'created_at': T0})

def test_update_missing_feeding_raises(service):
    with pytest.raises(FileNotFoundError):
        service.update_feeding('missing', {'notes': 'x'})

def test_shared_edit_by_default(service):
    feeding = _feed(service, user_id='mom')
    updated = service.update_feeding(feeding.feeding_id, {'notes': 'half eaten'}, user_id='dad')
    assert updated.notes == 'half eaten'

def test_owner_only_mode(db, users):
    service = FeedingService(db, user_service=users, owner_only=True)
    feeding = _feed(service, user_id='mom')
    with pytest.raises(PermissionError):
        service.update_feeding(feeding.feeding_id, {'notes': 'x'}, user_id='dad')
    with pytest.raises(PermissionError):
        service.delete_feeding(feeding.feeding_id, user_id='dad')
    service.delete_feeding(feeding.feeding_id, user_id='mom')

def test_last_feeding_with_user_snapshot(service, users):
    users.create_user('mom', 'Mom')
    assert service.get_last_feeding() is None

    _feed(service, user_id='mom', offset=0)
    latest = _feed(service, user_id='dad', offset=30)

    feeding, user = service.get_last_feeding()
    assert feeding.feeding_id == latest.feeding_id
    # 사용자 문서가 없으면 user_id 를 표시 이름으로 사용
    assert user == {'user_id': 'dad', 'display_name': 'dad'}

def test_feeding_routes(client, auth_headers):
    headers = auth_headers('mom', 'Mom')

    response = client.post('/api/feedings', json={'meal_type': 'dinner', 'portion': 'small', 'notes': 'kibble'}, headers=headers)
    assert response.status_code == 201
    feeding_id = response.get_json()['feeding_id']

    response = client.get('/api/feedings/last', headers=headers)
    assert response.status_code == 200
    body = response.get_json()
    assert body['feeding_id'] == feeding_id
    assert body['user'] == {'user_id': 'mom', 'display_name': 'Mom'}

    response = client.put(f'/api/feedings/{feeding_id}', json={'portion': 'treats', 'user_id': 'dad'}, headers=headers)
    assert response.status_code == 200
    assert response.get_json()['portion'] == 'treats'
    assert response.get_json()['user_id'] == 'mom'

    response = client.put(f'/api/feedings/{feeding_id}', json={'feeding_id': 'x'}, headers=headers)
    assert response.status_code == 400
    assert response.get_json()['error_code'] == 'NO_VALID_FIELDS'

    assert client.delete(f'/api/feedings/{feeding_id}', headers=headers).status_code == 204
    assert client.delete(f'/api/feedings/{feeding_id}', headers=headers).status_code == 404

def test_create_feeding_validation(client, auth_headers):
    headers = auth_headers('mom')
    response = client.post('/api/feedings', json={'meal_type': 'brunch', 'portion': 'regular'}, headers=headers)
    assert response.status_code == 400
    assert 'meal_type' in response.get_json()['details']

def test_update_drops_unknown_keys_from_response(client, auth_headers):
    headers = auth_headers('mom')
    feeding_id = client.post('/api/feedings', json={'meal_type': 'breakfast', 'portion': 'regular'},
                             headers=headers).get_json()['feeding_id']
    response = client.put(f'/api/feedings/{feeding_id}', json={'meal_type': 'dinner', 'hacked': 'x'}, headers=headers)
    assert response.status_code == 200
    body = response.get_json()
    assert body['meal_type'] == 'dinner'
    assert 'hacked' not in body
