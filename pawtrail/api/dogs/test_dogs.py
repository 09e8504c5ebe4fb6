# pawtrail/api/dogs/test_dogs.py
def test_dog_profile_defaults_and_update(client, auth_headers):
    headers = auth_headers('mom')

    response = client.get('/api/dogs/profile', headers=headers)
    assert response.status_code == 200
    assert response.get_json() is None

    response = client.post('/api/dogs', json={'weight': 65}, headers=headers)
    assert response.status_code == 201
    dog = response.get_json()
    assert dog['name'] == 'Buddy'
    assert dog['breed'] == 'Golden Retriever'
    assert dog['weight'] == 65

    response = client.put(f"/api/dogs/{dog['dog_id']}", json={'name': 'Max'}, headers=headers)
    assert response.status_code == 200
    assert response.get_json()['name'] == 'Max'

    profile = client.get('/api/dogs/profile', headers=headers).get_json()
    assert profile['dog_id'] == dog['dog_id']
    assert profile['name'] == 'Max'

def test_deactivated_dog_is_not_profile(client, auth_headers):
    headers = auth_headers('mom')
    dog_id = client.post('/api/dogs', json={'name': 'Rex'}, headers=headers).get_json()['dog_id']
    client.put(f'/api/dogs/{dog_id}', json={'is_active': False}, headers=headers)
    assert client.get('/api/dogs/profile', headers=headers).get_json() is None

def test_only_owner_updates_dog(client, auth_headers):
    mom = auth_headers('mom')
    dad = auth_headers('dad')
    dog_id = client.post('/api/dogs', json={}, headers=mom).get_json()['dog_id']

    assert client.put(f'/api/dogs/{dog_id}', json={'name': 'Max'}, headers=dad).status_code == 403
    assert client.put(f'/api/dogs/{dog_id}', json={}, headers=mom).status_code == 400
    assert client.put('/api/dogs/missing', json={'name': 'Max'}, headers=mom).status_code == 404
