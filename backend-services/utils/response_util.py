from fastapi.responses import JSONResponse
import logging

from models.response_model import ResponseModel

logger = logging.getLogger('murmur.api')


def _normalize_headers(hdrs: dict | None) -> dict | None:
    if not hdrs:
        return hdrs
    return {k: str(v) for k, v in hdrs.items() if v is not None}


def _error_status(status_code: int) -> str:
    return 'fail' if 400 <= status_code < 500 else 'error'


def respond_rest(model):
    """Return a REST JSONResponse using the normalized envelope logic.

    Accepts either a ResponseModel instance or a dict suitable for ResponseModel.
    """
    if isinstance(model, dict):
        rm = ResponseModel(**model)
    else:
        rm = model
    return process_rest_response(rm)


def process_rest_response(response: ResponseModel) -> JSONResponse:
    try:
        status_code = int(response.status_code or 200)
        headers = _normalize_headers(response.response_headers)

        if 200 <= status_code < 300:
            content = {'status': 'success'}
            if response.message:
                content['message'] = response.message
            if response.response is not None:
                content.update(response.response)
            return JSONResponse(content=content, status_code=status_code, headers=headers)

        content = {'status': _error_status(status_code)}
        if response.error_code:
            content['error_code'] = response.error_code
        content['message'] = response.error_message or response.message or 'Request failed'
        if response.error_detail:
            content['error'] = response.error_detail
        return JSONResponse(content=content, status_code=status_code, headers=headers)
    except Exception as e:
        logger.error(f'An error occurred while processing the response: {e}')
        return JSONResponse(
            content={'status': 'error', 'message': 'Unable to process response'},
            status_code=500,
        )
