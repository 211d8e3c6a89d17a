"""
Operational errors and the central error responder.
"""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from models.response_model import ResponseModel
from utils.error_codes import ErrorCode, ErrorKind
from utils.response_util import respond_rest

logger = logging.getLogger('murmur.api')

GENERIC_SERVER_MESSAGE = 'Something went very wrong!'


class AppError(Exception):
    """Expected failure carrying the HTTP status that describes it."""

    is_operational = True

    def __init__(self, status_code: int, message: str, error_code: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.error_code = error_code

    @property
    def kind(self) -> str:
        if self.status_code == 404:
            return ErrorKind.NOT_FOUND
        if 400 <= self.status_code < 500:
            return ErrorKind.INVALID_INPUT
        return ErrorKind.UNHANDLED


def invalid_input(message: str, error_code: str = ErrorCode.GEN_VALIDATION_ERROR) -> AppError:
    return AppError(400, message, error_code)


def not_found(message: str, error_code: str) -> AppError:
    return AppError(404, message, error_code)


def _request_id(request: Request) -> str | None:
    return getattr(request.state, 'request_id', None)


def _headers(request: Request) -> dict | None:
    rid = _request_id(request)
    return {'X-Request-ID': rid} if rid else None


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return 'Invalid input data'
    first = errors[0]
    loc = [str(p) for p in first.get('loc', ()) if p not in ('body', 'query', 'path')]
    field = '.'.join(loc)
    msg = first.get('msg', 'invalid value')
    return f'Invalid input data: {field}: {msg}' if field else f'Invalid input data: {msg}'


async def app_error_handler(request: Request, exc: AppError):
    logger.info(
        f'{_request_id(request)} | {exc.kind} ({exc.status_code}) {exc.error_code}: {exc.message}'
    )
    return respond_rest(
        ResponseModel(
            status_code=exc.status_code,
            response_headers=_headers(request),
            error_code=exc.error_code,
            error_message=exc.message[:255],
        )
    )


async def validation_error_handler(request: Request, exc: RequestValidationError):
    message = _describe_validation_error(exc)
    logger.info(f'{_request_id(request)} | {ErrorKind.INVALID_INPUT} (400): {message}')
    return respond_rest(
        ResponseModel(
            status_code=400,
            response_headers=_headers(request),
            error_code=ErrorCode.GEN_VALIDATION_ERROR,
            error_message=message[:255],
        )
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        code, message = ErrorCode.GEN_NOT_FOUND, f"Can't find {request.url.path} on this server!"
    elif exc.status_code == 405:
        code, message = ErrorCode.GEN_METHOD_NOT_ALLOWED, f'{request.method} not allowed on {request.url.path}'
    else:
        code, message = ErrorCode.GEN_INVALID_REQUEST, str(exc.detail)
    return respond_rest(
        ResponseModel(
            status_code=exc.status_code,
            response_headers=_headers(request),
            error_code=code,
            error_message=message[:255],
        )
    )


def make_unhandled_error_handler(expose_details: bool):
    """Build the 500 responder; ``expose_details`` adds the exception text to the body."""

    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.critical(f'{_request_id(request)} | Unexpected error: {str(exc)}', exc_info=exc)
        return respond_rest(
            ResponseModel(
                status_code=500,
                response_headers=_headers(request),
                error_code=ErrorCode.ISE_INTERNAL_ERROR,
                error_message=GENERIC_SERVER_MESSAGE,
                error_detail=f'{type(exc).__name__}: {exc}'[:255] if expose_details else None,
            )
        )

    return unhandled_error_handler
