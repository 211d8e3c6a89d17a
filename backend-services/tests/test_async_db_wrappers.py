import asyncio

import pytest
from bson import ObjectId

from utils.async_db import (
    db_aggregate_list,
    db_count,
    db_find_one,
    db_find_one_and_update,
    db_insert_one,
)
from utils.database import InMemoryCollection


@pytest.mark.asyncio
async def test_async_wrappers_with_inmemory_async_collections(database):
    coll = database.secrets  # AsyncInMemoryCollection

    result = await db_insert_one(coll, {'content': 'x', 'key': 'k1', 'isDeleted': False})
    assert isinstance(result.inserted_id, ObjectId)

    doc = await db_find_one(coll, {'_id': result.inserted_id}, {'key': 0})
    assert doc == {'_id': result.inserted_id, 'content': 'x', 'isDeleted': False}

    updated = await db_find_one_and_update(
        coll, {'key': 'k1', 'isDeleted': {'$ne': True}}, {'$set': {'isDeleted': True}}
    )
    assert updated['isDeleted'] is True
    assert await db_count(coll, {'isDeleted': {'$ne': True}}) == 0


@pytest.mark.asyncio
async def test_wrappers_run_sync_collections_in_thread():
    coll = InMemoryCollection('plain')
    await db_insert_one(coll, {'n': 1})
    await db_insert_one(coll, {'n': 2})
    assert await db_count(coll, {}) == 2
    docs = await db_aggregate_list(coll, [{'$match': {'n': 2}}])
    assert [d['n'] for d in docs] == [2]
    before = await db_find_one_and_update(
        coll, {'n': 1}, {'$set': {'n': 10}}, return_updated=False
    )
    assert before['n'] == 1
    assert (await db_find_one(coll, {'n': 10}))['n'] == 10


def test_match_operators():
    coll = InMemoryCollection('t')
    a = coll.insert_one({'isDeleted': False}).inserted_id
    b = coll.insert_one({'isDeleted': True}).inserted_id
    c = coll.insert_one({}).inserted_id

    visible = coll.count_documents({'isDeleted': {'$ne': True}})
    assert visible == 2
    assert coll.count_documents({'_id': {'$nin': [a, c]}}) == 1
    assert coll.find_one({'_id': {'$nin': [a, c]}})['_id'] == b
    with pytest.raises(ValueError):
        coll.count_documents({'isDeleted': {'$exists': True}})


def test_projection_inclusion_and_exclusion():
    coll = InMemoryCollection('t')
    oid = coll.insert_one({'content': 'c', 'key': 'k'}).inserted_id

    assert coll.find_one({'key': 'k'}, {'_id': 1}) == {'_id': oid}
    assert coll.find_one({'key': 'k'}, {'content': 1}) == {'_id': oid, 'content': 'c'}
    assert coll.find_one({'key': 'k'}, {'content': 1, '_id': 0}) == {'content': 'c'}
    assert coll.find_one({'key': 'k'}, {'key': 0}) == {'_id': oid, 'content': 'c'}


def test_find_one_and_update_returns_only_id():
    coll = InMemoryCollection('t')
    oid = coll.insert_one({'key': 'k', 'isDeleted': False}).inserted_id
    doc = coll.find_one_and_update(
        {'key': 'k'}, {'$set': {'isDeleted': True}}, projection={'_id': 1}, return_document=True
    )
    assert doc == {'_id': oid}


def test_aggregate_sample_and_project():
    coll = InMemoryCollection('t')
    for i in range(20):
        coll.insert_one({'i': i, 'content': 'c', 'key': 'k', 'isDeleted': i % 2 == 0})

    docs = coll.aggregate(
        [
            {'$match': {'isDeleted': {'$ne': True}}},
            {'$sample': {'size': 4}},
            {'$project': {'content': 0, 'key': 0}},
        ]
    ).to_list()
    assert len(docs) == 4
    assert len({d['i'] for d in docs}) == 4
    assert all(d['i'] % 2 == 1 for d in docs)
    assert all('content' not in d and 'key' not in d for d in docs)

    everything = coll.aggregate([{'$sample': {'size': 100}}]).to_list()
    assert len(everything) == 20


def test_unsupported_stage_is_an_error():
    coll = InMemoryCollection('t')
    with pytest.raises(ValueError):
        coll.aggregate([{'$group': {'_id': None}}])


def test_find_one_and_update_is_atomic_under_concurrency():
    coll = InMemoryCollection('t')
    coll.insert_one({'key': 'k', 'isDeleted': False})

    async def attempt():
        return await db_find_one_and_update(
            coll, {'key': 'k', 'isDeleted': {'$ne': True}}, {'$set': {'isDeleted': True}}
        )

    async def race():
        return await asyncio.gather(*(attempt() for _ in range(10)))

    results = asyncio.run(race())
    assert len([r for r in results if r is not None]) == 1
