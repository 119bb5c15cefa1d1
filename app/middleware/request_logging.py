from fastapi import Request
import logging
import time
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("app")

class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every API call with its status and duration.

    Static image downloads are logged at debug level only.
    """

    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()
        target = f"{request.method} {request.url.path}"
        if request.url.query:
            target = f"{target}?{request.url.query}"
        log = logger.debug if request.url.path.startswith("/static/") else logger.info

        log(f"--> {target}")
        response = await call_next(request)

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        log(f"<-- {target} {response.status_code} ({elapsed_ms:.1f} ms)")
        return response
