"""
The contents of this file are property of Doorman Dev, LLC
Review the Apache License 2.0 for valid authorization of use
See https://github.com/apidoorman/doorman for more information
"""

from datetime import UTC, datetime
from typing import Any, Optional
import secrets

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr

KEY_BYTES = 16
DEFAULT_SAMPLE_LIMIT = 10
# Upper bound for the $sample size (int32 max)
MAX_SAMPLE_LIMIT = 2**31 - 1

# Never leave the server after creation
PRIVATE_FIELDS = ('key',)
# Hidden while browsing
LIST_HIDDEN_FIELDS = ('content', 'key')


class CreateSecretModel(BaseModel):
    """Body of POST /create."""

    model_config = ConfigDict(extra='forbid')

    content: Optional[StrictStr] = Field(
        None,
        description='Text of the secret; must contain a non-whitespace character',
        examples=['I never finished reading the book I recommend to everyone'],
    )


class DeleteSecretModel(BaseModel):
    """Body of DELETE /delete."""

    model_config = ConfigDict(extra='forbid')

    key: Optional[StrictStr] = Field(
        None,
        description='Deletion key returned once by POST /create',
        examples=['9f86d081884c7d659a2feaa0c55ad015'],
    )


class SampleSecretsBody(BaseModel):
    """Optional JSON body of GET|POST /; the query string carries the same fields."""

    model_config = ConfigDict(extra='forbid')

    limit: Optional[StrictInt | StrictStr] = None
    seenSecrets: Optional[list[StrictStr]] = None


def generate_key() -> str:
    return secrets.token_hex(KEY_BYTES)


def utc_now() -> datetime:
    # Mongo stores milliseconds; truncate so round trips compare equal
    now = datetime.now(UTC)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def new_secret_document(content: str, key: str) -> dict:
    now = utc_now()
    return {
        'content': content,
        'key': key,
        'isDeleted': False,
        'createdAt': now,
        'updatedAt': now,
    }


def to_iso(value: Any) -> Any:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.isoformat().replace('+00:00', 'Z')
    return value


def serialize_secret(doc: dict, hidden: tuple = PRIVATE_FIELDS) -> dict:
    """Shape a stored document for a response body.

    ``_id`` is rendered as a string under both ``_id`` and ``id``; fields named in
    ``hidden`` are dropped even if the query projection let them through.
    """
    out = {}
    for k, v in doc.items():
        if k in hidden:
            continue
        if k == '_id':
            out['_id'] = str(v)
            out['id'] = str(v)
        else:
            out[k] = to_iso(v)
    return out
