"""
Normalization of the caller's "seen" set and the sample limit.

Clients send ``seenSecrets`` either as a JSON array in the body or as a
comma-separated query parameter. Both are reduced to one list of id strings
before any ObjectId parsing happens.
"""

from bson import ObjectId
from bson.errors import InvalidId

from utils.error_codes import ErrorCode
from utils.error_util import invalid_input

INVALID_SEEN_IDS_MESSAGE = 'Invalid secret IDs provided in seenSecrets'


def normalize_seen_ids(body_value: list[str] | None, query_value: str | None) -> list[str]:
    if body_value is not None:
        raw = list(body_value)
    elif query_value:
        raw = query_value.split(',')
    else:
        raw = []
    return [item.strip() for item in raw if item and item.strip()]


def parse_object_ids(ids: list[str]) -> list[ObjectId]:
    """Parse every id or reject the whole set."""
    try:
        return [ObjectId(i) for i in ids]
    except (InvalidId, TypeError) as e:
        raise invalid_input(INVALID_SEEN_IDS_MESSAGE, ErrorCode.SCR_INVALID_SEEN_IDS) from e


def parse_object_id(value: str) -> ObjectId:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError) as e:
        raise invalid_input(f'Invalid _id: {value}', ErrorCode.SCR_INVALID_ID) from e


def normalize_limit(
    body_value: int | str | None, query_value: str | None, default: int, maximum: int
) -> int:
    """Resolve ``limit`` from body or query; blank means ``default``."""
    raw = body_value if body_value is not None else query_value
    if raw is None or (isinstance(raw, str) and raw.strip() == ''):
        return default
    message = f'limit must be an integer between 1 and {maximum}'
    try:
        limit = int(raw.strip()) if isinstance(raw, str) else int(raw)
    except ValueError as e:
        raise invalid_input(message, ErrorCode.SCR_INVALID_LIMIT) from e
    if not 1 <= limit <= maximum:
        raise invalid_input(message, ErrorCode.SCR_INVALID_LIMIT)
    return limit
