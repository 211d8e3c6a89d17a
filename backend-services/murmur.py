"""
The contents of this file are property of Doorman Dev, LLC
Review the Apache License 2.0 for valid authorization of use
See https://github.com/apidoorman/doorman for more information
"""

from contextlib import asynccontextmanager
import asyncio
import sys
import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from utils import process_util

process_util.install_uncaught_exception_hook()

from routes.monitor_routes import monitor_router
from routes.secret_routes import secret_router
from utils.config_util import AppConfig, apply_timezone, load_config
from utils.database_async import AsyncDatabase
from utils.error_util import (
    AppError,
    app_error_handler,
    http_error_handler,
    make_unhandled_error_handler,
    validation_error_handler,
)
from utils.logging_util import configure_logger

config = load_config()
apply_timezone(config)
gateway_logger = configure_logger(config)


@asynccontextmanager
async def app_lifespan(app: FastAPI):
    database = AsyncDatabase(app.state.config)
    await database.connect()
    app.state.database = database
    process_util.install_unhandled_rejection_handler(asyncio.get_running_loop())
    gateway_logger.info('Murmur started')
    try:
        yield
    finally:
        await database.close()
        gateway_logger.info('Murmur stopped')


def create_app(app_config: AppConfig) -> FastAPI:
    app = FastAPI(
        title='Murmur',
        description='Anonymous secret sharing API',
        version='1.0.0',
        lifespan=app_lifespan,
    )
    app.state.config = app_config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_config.allowed_origins,
        allow_credentials='*' not in app_config.allowed_origins,
        allow_methods=['GET', 'POST', 'DELETE', 'OPTIONS'],
        allow_headers=['*'],
        expose_headers=['X-Request-ID'],
    )

    @app.middleware('http')
    async def request_id_middleware(request: Request, call_next):
        rid = request.headers.get('x-request-id') or request.headers.get('request-id')
        if not rid:
            rid = str(uuid.uuid4())
        request.state.request_id = rid
        gateway_logger.info(
            f'{rid} | Entry: client_ip={getattr(request.client, "host", None)} '
            f'method={request.method} path={str(request.url.path)}'
        )
        response = await call_next(request)
        response.headers['X-Request-ID'] = rid
        return response

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, make_unhandled_error_handler(not app_config.is_production))

    app.include_router(monitor_router, tags=['Monitor'])
    app.include_router(secret_router, prefix=app_config.api_prefix, tags=['Secrets'])
    return app


murmur = create_app(config)


def run():
    gateway_logger.info(f'Server running on port {config.port}')
    uvicorn.run(
        murmur,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )
    if process_util.fatal_error_seen():
        sys.exit(1)


if __name__ == '__main__':
    run()
