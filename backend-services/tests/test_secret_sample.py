import pytest

from tests.secret_helpers import API, create_many, create_secret


@pytest.mark.asyncio
async def test_limit_defaults_to_ten(client):
    await create_many(client, 12)
    r = await client.get(f'{API}/')
    assert r.status_code == 200
    body = r.json()
    assert body['status'] == 'success'
    assert body['results'] == 10
    assert len(body['data']['secrets']) == 10
    assert body['total'] == 12
    assert body['excluded'] == 0


@pytest.mark.asyncio
async def test_sample_never_exceeds_limit_or_eligible_count(client):
    await create_many(client, 4)
    r = await client.get(f'{API}/', params={'limit': '3'})
    assert r.json()['results'] == 3

    r = await client.get(f'{API}/', params={'limit': '50'})
    body = r.json()
    assert body['results'] == 4
    assert body['total'] == 4


@pytest.mark.asyncio
async def test_sample_returns_distinct_secrets(client):
    await create_many(client, 6)
    r = await client.get(f'{API}/', params={'limit': '6'})
    ids = [s['id'] for s in r.json()['data']['secrets']]
    assert len(ids) == len(set(ids)) == 6


@pytest.mark.asyncio
async def test_sample_hides_content_and_key(client):
    created = await create_secret(client, 'do not leak me')
    r = await client.get(f'{API}/')
    listed = r.json()['data']['secrets']
    assert len(listed) == 1
    item = listed[0]
    assert 'content' not in item
    assert 'key' not in item
    assert item['id'] == item['_id'] == created['id']
    assert item['isDeleted'] is False
    assert 'createdAt' in item and 'updatedAt' in item
    assert created['key'] not in r.text
    assert 'do not leak me' not in r.text


@pytest.mark.asyncio
async def test_seen_ids_in_query_are_excluded(client):
    created = await create_many(client, 5)
    seen = [c['id'] for c in created[:2]]
    r = await client.get(f'{API}/', params={'seenSecrets': ','.join(seen), 'limit': '10'})
    body = r.json()
    returned = {s['id'] for s in body['data']['secrets']}
    assert returned == {c['id'] for c in created[2:]}
    assert body['total'] == 3
    assert body['excluded'] == 2


@pytest.mark.asyncio
async def test_seen_ids_in_post_body_are_excluded(client):
    created = await create_many(client, 5)
    seen = [c['id'] for c in created[:3]]
    r = await client.post(f'{API}/', json={'seenSecrets': seen, 'limit': 10})
    assert r.status_code == 200
    body = r.json()
    returned = {s['id'] for s in body['data']['secrets']}
    assert returned == {c['id'] for c in created[3:]}
    assert body['total'] == 2
    assert body['excluded'] == 3


@pytest.mark.asyncio
async def test_body_takes_precedence_over_query(client):
    created = await create_many(client, 3)
    r = await client.post(
        f'{API}/',
        params={'seenSecrets': created[0]['id'], 'limit': '1'},
        json={'seenSecrets': [created[1]['id']], 'limit': 5},
    )
    body = r.json()
    returned = {s['id'] for s in body['data']['secrets']}
    assert returned == {created[0]['id'], created[2]['id']}
    assert body['excluded'] == 1


@pytest.mark.asyncio
async def test_blank_entries_in_seen_query_are_ignored(client):
    created = await create_many(client, 2)
    r = await client.get(f'{API}/', params={'seenSecrets': f' {created[0]["id"]} ,, '})
    body = r.json()
    assert body['excluded'] == 1
    assert [s['id'] for s in body['data']['secrets']] == [created[1]['id']]


@pytest.mark.asyncio
@pytest.mark.parametrize('seen', ['not-an-id', '123', 'zzzzzzzzzzzzzzzzzzzzzzzz'])
async def test_malformed_seen_id_rejects_whole_request(client, stored_docs, seen):
    created = await create_many(client, 2)
    before = stored_docs()
    r = await client.get(f'{API}/', params={'seenSecrets': f'{created[0]["id"]},{seen}'})
    assert r.status_code == 400
    body = r.json()
    assert body['status'] == 'fail'
    assert body['error_code'] == 'SCR002'
    assert body['message'] == 'Invalid secret IDs provided in seenSecrets'
    assert stored_docs() == before


@pytest.mark.asyncio
async def test_malformed_seen_id_in_body_is_rejected(client):
    r = await client.post(f'{API}/', json={'seenSecrets': ['bogus']})
    assert r.status_code == 400
    assert r.json()['error_code'] == 'SCR002'


@pytest.mark.asyncio
@pytest.mark.parametrize('body', [{'seenSecrets': 'a,b'}, {'seenSecrets': [1, 2]}, {'other': 1}])
async def test_mistyped_sample_body_is_invalid_input(client, body):
    r = await client.post(f'{API}/', json=body)
    assert r.status_code == 400
    assert r.json()['error_code'] == 'GEN002'


@pytest.mark.asyncio
async def test_unparseable_sample_body_is_invalid_input(client):
    r = await client.post(
        f'{API}/', content=b'{not json', headers={'content-type': 'application/json'}
    )
    assert r.status_code == 400
    assert r.json()['error_code'] == 'GEN001'


@pytest.mark.asyncio
@pytest.mark.parametrize('limit', ['0', '-3', 'ten', '2.5'])
async def test_invalid_limit_is_rejected(client, limit):
    r = await client.get(f'{API}/', params={'limit': limit})
    assert r.status_code == 400
    assert r.json()['error_code'] == 'SCR003'


@pytest.mark.asyncio
async def test_empty_limit_falls_back_to_default(client):
    await create_many(client, 11)
    r = await client.get(f'{API}/', params={'limit': ''})
    assert r.json()['results'] == 10


@pytest.mark.asyncio
async def test_deleted_secrets_never_sampled(client):
    created = await create_many(client, 3)
    r = await client.request('DELETE', f'{API}/delete', json={'key': created[0]['key']})
    assert r.status_code == 200

    for limit in ('1', '2', '3', '100'):
        r = await client.get(f'{API}/', params={'limit': limit})
        body = r.json()
        assert created[0]['id'] not in {s['id'] for s in body['data']['secrets']}
        assert body['total'] == 2


@pytest.mark.asyncio
async def test_empty_collection_samples_nothing(client):
    r = await client.get(f'{API}/')
    body = r.json()
    assert body['results'] == 0
    assert body['total'] == 0
    assert body['data']['secrets'] == []


@pytest.mark.asyncio
async def test_oversized_limit_is_rejected(client):
    await create_many(client, 1)
    r = await client.get(f'{API}/', params={'limit': str(10**30)})
    assert r.status_code == 400
    assert r.json()['error_code'] == 'SCR003'

    r = await client.post(f'{API}/', json={'limit': 2**31})
    assert r.status_code == 400
    assert r.json()['error_code'] == 'SCR003'

    r = await client.post(f'{API}/', json={'limit': 2**31 - 1})
    assert r.status_code == 200
    assert r.json()['results'] == 1
