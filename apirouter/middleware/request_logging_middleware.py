import logging
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger('apirouter.router')


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs method, path, resolved version, status and duration per request."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        try:
            response = await call_next(request)
            duration = (time.time() - start_time) * 1000
            version = getattr(request.state, 'incoming_version', None)
            logger.info(
                f'Endpoint: {request.method} {request.url.path} '
                f'| version: {version if version is not None else "-"} '
                f'| status_code: {response.status_code} '
                f'| Total time: {duration:.2f}ms'
            )
            return response
        except Exception as e:
            duration = (time.time() - start_time) * 1000
            logger.error(
                f'Request failed: {request.method} {request.url.path} '
                f'| Error: {str(e)} | Time: {duration:.2f}ms',
                exc_info=True
            )
            raise
