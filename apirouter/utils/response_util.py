from fastapi.responses import JSONResponse, Response

from apirouter.utils.env_config import env_config
from apirouter.utils.error_codes import ErrorMessages

UNPROCESSABLE = 422


def respond_invalid_params(payload: dict | None) -> Response:
    """422 answer for a request whose parameters failed verification.

    The payload is only sent back in development mode; otherwise clients get
    an empty body so validation rules do not leak.
    """
    if payload and env_config.is_development():
        return JSONResponse(content=payload, status_code=UNPROCESSABLE)
    return Response(status_code=UNPROCESSABLE)


def missing_params_payload(errors: dict) -> dict:
    return {'error': ErrorMessages.MISSING_PARAMETERS, 'params': errors}


def extraction_error_payload(error: Exception) -> dict:
    return {'error': getattr(error, 'message', None) or str(error), 'params': {}}


def respond_api_map(api_map: dict) -> Response:
    if not api_map:
        return Response(status_code=204)
    return JSONResponse(content=api_map, status_code=200)
