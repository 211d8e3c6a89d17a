"""
Generic handler construction for simple entity endpoints.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Protocol

from models.response_model import ResponseModel
from utils.async_db import db_insert_one


class EntityOperations(Protocol):
    async def create(self, payload: dict[str, Any]) -> dict[str, Any]: ...

    def serialize(self, document: dict[str, Any]) -> dict[str, Any]: ...


class MongoEntityOperations:
    """EntityOperations backed by a Motor or in-memory collection."""

    def __init__(self, collection: Any, serializer: Callable[[dict[str, Any]], dict[str, Any]]):
        self.collection = collection
        self.serializer = serializer

    async def create(self, payload: dict[str, Any]) -> dict[str, Any]:
        doc = dict(payload)
        result = await db_insert_one(self.collection, doc)
        doc['_id'] = result.inserted_id
        return doc

    def serialize(self, document: dict[str, Any]) -> dict[str, Any]:
        return self.serializer(document)


def create_one(operations: EntityOperations) -> Callable[[dict[str, Any]], Awaitable[dict]]:
    """Build a handler that stores ``payload`` and responds 201 with the new document."""

    async def handler(payload: dict[str, Any]) -> dict:
        doc = await operations.create(payload)
        return ResponseModel(
            status_code=201, response={'data': {'data': operations.serialize(doc)}}
        ).model_dump()

    return handler
