"""
The contents of this file are property of Doorman Dev, LLC
Review the Apache License 2.0 for valid authorization of use
See https://github.com/apidoorman/doorman for more information
"""

import logging

from fastapi import APIRouter, Request

from models.response_model import ResponseModel
from utils.error_codes import ErrorCode
from utils.response_util import respond_rest

monitor_router = APIRouter()

logger = logging.getLogger('murmur.api')


@monitor_router.get('/monitor/liveness', description='Liveness probe endpoint')
async def liveness(request: Request):
    return {'status': 'alive'}


@monitor_router.get('/health', description='Readiness check including a database ping')
async def health(request: Request):
    database = request.app.state.database
    mode = database.get_mode_info()
    if await database.ping():
        return respond_rest(
            ResponseModel(
                status_code=200,
                response={'data': {'status': 'online', 'database': mode}},
            )
        )
    logger.error('Health check failed: database ping failed')
    return respond_rest(
        ResponseModel(
            status_code=503,
            error_code=ErrorCode.ISE_DATABASE_UNAVAILABLE,
            error_message='Database unavailable',
        )
    )
