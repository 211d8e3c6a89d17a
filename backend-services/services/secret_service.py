"""
The contents of this file are property of Doorman Dev, LLC
Review the Apache License 2.0 for valid authorization of use
See https://github.com/apidoorman/doorman for more information
"""

import logging

from fastapi import Request

from models.response_model import ResponseModel
from models.secret_model import (
    LIST_HIDDEN_FIELDS,
    generate_key,
    new_secret_document,
    serialize_secret,
    to_iso,
    utc_now,
)
from utils.async_db import (
    db_aggregate_list,
    db_count,
    db_find_one,
    db_find_one_and_update,
    db_insert_one,
)
from utils.database_async import AsyncDatabase
from utils.error_codes import ErrorCode
from utils.error_util import invalid_input, not_found
from utils.seen_util import parse_object_id, parse_object_ids

logger = logging.getLogger('murmur.api')

NOT_DELETED = {'isDeleted': {'$ne': True}}


class SecretService:
    """Create, browse, fetch and soft-delete secrets."""

    def __init__(self, database: AsyncDatabase):
        self.database = database

    @property
    def collection(self):
        return self.database.secrets

    async def create_secret(self, content: str | None, request_id: str) -> dict:
        """
        Store a new secret and hand back its one-time deletion key.

        Args:
            content: Secret text; rejected when missing or blank
            request_id: Request ID for logging

        Returns:
            ResponseModel dict with id, key and createdAt (status 201)
        """
        if content is None or content.strip() == '':
            logger.info(f'{request_id} | Rejected secret with empty content')
            raise invalid_input(
                'Content is required to create a secret', ErrorCode.SCR_CONTENT_REQUIRED
            )

        logger.debug(f'{request_id} | Creating secret ({len(content)} chars)')
        doc = new_secret_document(content, generate_key())
        result = await db_insert_one(self.collection, doc)
        logger.info(f'{request_id} | Secret created: {result.inserted_id}')
        return ResponseModel(
            status_code=201,
            response={
                'data': {
                    'secret': {
                        'id': str(result.inserted_id),
                        'key': doc['key'],
                        'createdAt': to_iso(doc['createdAt']),
                    }
                }
            },
        ).model_dump()

    async def sample_secrets(self, limit: int, seen_ids: list[str], request_id: str) -> dict:
        """
        Return up to ``limit`` random visible secrets the caller has not seen.

        Content and keys are projected out. ``total`` counts every eligible
        secret under the same filter, independent of the sample.
        """
        query = dict(NOT_DELETED)
        if seen_ids:
            query['_id'] = {'$nin': parse_object_ids(seen_ids)}

        pipeline = [
            {'$match': query},
            {'$sample': {'size': limit}},
            {'$project': {field: 0 for field in LIST_HIDDEN_FIELDS}},
        ]
        docs = await db_aggregate_list(self.collection, pipeline)
        total = await db_count(self.collection, query)
        secrets = [serialize_secret(d, hidden=LIST_HIDDEN_FIELDS) for d in docs]
        logger.info(
            f'{request_id} | Sampled {len(secrets)}/{total} secrets (limit={limit}, excluded={len(seen_ids)})'
        )
        return ResponseModel(
            status_code=200,
            response={
                'results': len(secrets),
                'total': total,
                'excluded': len(seen_ids),
                'data': {'secrets': secrets},
            },
        ).model_dump()

    async def get_secret(self, secret_id: str, request_id: str) -> dict:
        oid = parse_object_id(secret_id)
        doc = await db_find_one(self.collection, {'_id': oid}, {'key': 0})
        if not doc or doc.get('isDeleted'):
            logger.info(f'{request_id} | Secret not found: {secret_id}')
            raise not_found('No secret found with that ID', ErrorCode.SCR_NOT_FOUND)
        return ResponseModel(
            status_code=200, response={'data': {'secret': serialize_secret(doc)}}
        ).model_dump()

    async def delete_secret(self, key: str | None, request_id: str) -> dict:
        """
        Soft delete the secret owning ``key``.

        Matching and flagging happen in one find_one_and_update so two
        concurrent deletes with the same key cannot both succeed.
        """
        if not key:
            raise invalid_input('Key is required to delete a secret', ErrorCode.SCR_KEY_REQUIRED)

        doc = await db_find_one_and_update(
            self.collection,
            {'key': key, **NOT_DELETED},
            {'$set': {'isDeleted': True, 'updatedAt': utc_now()}},
            projection={'_id': 1},
        )
        if not doc:
            logger.info(f'{request_id} | Delete matched no active secret')
            raise not_found(
                'No secret found with that key or secret already deleted',
                ErrorCode.SCR_KEY_NOT_FOUND,
            )
        logger.info(f'{request_id} | Secret soft-deleted: {doc["_id"]}')
        return ResponseModel(status_code=200, message='Secret successfully deleted').model_dump()


def get_secret_service(request: Request) -> SecretService:
    """FastAPI dependency returning a service bound to the app's database handle."""
    return SecretService(request.app.state.database)
