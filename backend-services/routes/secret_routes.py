"""
The contents of this file are property of Doorman Dev, LLC
Review the Apache License 2.0 for valid authorization of use
See https://github.com/apidoorman/doorman for more information
"""

import json
import logging
import time
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from models.secret_model import (
    DEFAULT_SAMPLE_LIMIT,
    MAX_SAMPLE_LIMIT,
    CreateSecretModel,
    DeleteSecretModel,
    SampleSecretsBody,
)
from services.secret_service import SecretService, get_secret_service
from utils.error_codes import ErrorCode
from utils.error_util import invalid_input
from utils.response_util import respond_rest
from utils.seen_util import normalize_limit, normalize_seen_ids

secret_router = APIRouter()

logger = logging.getLogger('murmur.api')


def _request_id(request: Request) -> str:
    return getattr(request.state, 'request_id', None) or str(uuid.uuid4())


async def _read_sample_body(request: Request) -> SampleSecretsBody:
    raw = await request.body()
    if not raw or not raw.strip():
        return SampleSecretsBody()
    try:
        data = json.loads(raw)
    except ValueError as e:
        raise invalid_input('Request body is not valid JSON', ErrorCode.GEN_INVALID_REQUEST) from e
    try:
        return SampleSecretsBody.model_validate(data)
    except ValidationError as e:
        raise RequestValidationError(e.errors()) from e


@secret_router.post(
    '/create',
    status_code=201,
    description='Create a secret and receive its one-time deletion key',
    responses={
        201: {
            'description': 'Secret created',
            'content': {
                'application/json': {
                    'example': {
                        'status': 'success',
                        'data': {
                            'secret': {
                                'id': '66f1c0e2a8b4c9d1e2f3a4b5',
                                'key': '9f86d081884c7d659a2feaa0c55ad015',
                                'createdAt': '2024-09-23T18:30:00.123Z',
                            }
                        },
                    }
                }
            },
        },
        400: {'description': 'Content missing or blank'},
    },
)
async def create_secret(
    request: Request,
    payload: Optional[CreateSecretModel] = None,
    service: SecretService = Depends(get_secret_service),
):
    request_id = _request_id(request)
    start_time = time.time() * 1000
    try:
        logger.info(f'{request_id} | Endpoint: {request.method} {str(request.url.path)}')
        content = payload.content if payload else None
        return respond_rest(await service.create_secret(content, request_id))
    finally:
        elapsed = time.time() * 1000 - start_time
        logger.info(f'{request_id} | Total time: {elapsed:.2f}ms')


@secret_router.api_route(
    '/',
    methods=['GET', 'POST'],
    description='Sample random unseen secrets (content and keys omitted). '
    'POST accepts the same fields in a JSON body for large seenSecrets lists.',
)
async def sample_secrets(
    request: Request,
    limit: Optional[str] = Query(None, description='Sample size, default 10'),
    seenSecrets: Optional[str] = Query(None, description='Comma-separated ids to exclude'),
    service: SecretService = Depends(get_secret_service),
):
    request_id = _request_id(request)
    start_time = time.time() * 1000
    try:
        logger.info(f'{request_id} | Endpoint: {request.method} {str(request.url.path)}')
        body = await _read_sample_body(request)
        sample_limit = normalize_limit(body.limit, limit, DEFAULT_SAMPLE_LIMIT, MAX_SAMPLE_LIMIT)
        seen_ids = normalize_seen_ids(body.seenSecrets, seenSecrets)
        return respond_rest(await service.sample_secrets(sample_limit, seen_ids, request_id))
    finally:
        elapsed = time.time() * 1000 - start_time
        logger.info(f'{request_id} | Total time: {elapsed:.2f}ms')


@secret_router.delete(
    '/delete',
    description='Soft delete a secret using its deletion key',
    responses={
        200: {
            'description': 'Secret deleted',
            'content': {
                'application/json': {
                    'example': {'status': 'success', 'message': 'Secret successfully deleted'}
                }
            },
        },
        400: {'description': 'Key missing'},
        404: {'description': 'Wrong key or secret already deleted'},
    },
)
async def delete_secret(
    request: Request,
    payload: Optional[DeleteSecretModel] = None,
    service: SecretService = Depends(get_secret_service),
):
    request_id = _request_id(request)
    start_time = time.time() * 1000
    try:
        logger.info(f'{request_id} | Endpoint: {request.method} {str(request.url.path)}')
        key = payload.key if payload else None
        return respond_rest(await service.delete_secret(key, request_id))
    finally:
        elapsed = time.time() * 1000 - start_time
        logger.info(f'{request_id} | Total time: {elapsed:.2f}ms')


@secret_router.get(
    '/{secret_id}',
    description='Get one secret with its content (never its key)',
    responses={404: {'description': 'Missing or deleted'}},
)
async def get_secret(
    secret_id: str, request: Request, service: SecretService = Depends(get_secret_service)
):
    request_id = _request_id(request)
    start_time = time.time() * 1000
    try:
        logger.info(f'{request_id} | Endpoint: {request.method} {str(request.url.path)}')
        return respond_rest(await service.get_secret(secret_id, request_id))
    finally:
        elapsed = time.time() * 1000 - start_time
        logger.info(f'{request_id} | Total time: {elapsed:.2f}ms')
