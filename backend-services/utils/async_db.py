"""
Async DB helpers that transparently handle Motor (async) and in-memory/PyMongo (sync).

These wrappers detect whether a collection method is coroutine-based and either await it
directly (Motor, in-memory async view) or run the sync call in a thread (to avoid blocking
the event loop).
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any

from pymongo import ReturnDocument


def _is_async(collection: Any, fn: Any) -> bool:
    # Motor wraps driver calls in Futures rather than coroutine functions
    return inspect.iscoroutinefunction(fn) or type(collection).__module__.startswith('motor')


async def _call(collection: Any, name: str, *args: Any, **kwargs: Any) -> Any:
    fn = getattr(collection, name)
    if _is_async(collection, fn):
        return await fn(*args, **kwargs)
    return await asyncio.to_thread(fn, *args, **kwargs)


async def db_find_one(
    collection: Any, query: dict[str, Any], projection: dict[str, Any] | None = None
) -> dict[str, Any] | None:
    return await _call(collection, 'find_one', query, projection)


async def db_insert_one(collection: Any, doc: dict[str, Any]) -> Any:
    return await _call(collection, 'insert_one', doc)


async def db_find_one_and_update(
    collection: Any,
    query: dict[str, Any],
    update: dict[str, Any],
    *,
    projection: dict[str, Any] | None = None,
    return_updated: bool = True,
) -> dict[str, Any] | None:
    """Atomically update the first match and return it (after the update by default)."""
    return await _call(
        collection,
        'find_one_and_update',
        query,
        update,
        projection=projection,
        return_document=ReturnDocument.AFTER if return_updated else ReturnDocument.BEFORE,
    )


async def db_aggregate_list(collection: Any, pipeline: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Run an aggregation pipeline and return a list of docs.

    Works with both Motor (async) and PyMongo (sync) drivers.
    """
    if _is_async(collection, collection.aggregate):
        agg = collection.aggregate(pipeline)
        if inspect.isawaitable(agg):
            agg = await agg
        result = agg.to_list(length=None)
        if inspect.isawaitable(result):
            return await result
        return result
    return await asyncio.to_thread(lambda: list(collection.aggregate(pipeline)))


async def db_count(collection: Any, query: dict[str, Any]) -> int:
    """Count documents matching query using Motor/PyMongo.
    Falls back to running in a thread for sync drivers.
    """
    return await _call(collection, 'count_documents', query)
