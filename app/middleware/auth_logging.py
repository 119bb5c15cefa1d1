from fastapi import Request
import logging
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("app")

class AuthLoggingMiddleware(BaseHTTPMiddleware):
    """Warns about rejected calls, noting what kind of credentials were sent."""

    async def dispatch(self, request: Request, call_next):
        authorization = request.headers.get("Authorization")
        response = await call_next(request)

        if response.status_code in (401, 403):
            if authorization is None:
                credentials = "no Authorization header"
            elif authorization.lower().startswith("bearer "):
                credentials = "bearer token"
            else:
                credentials = "non-bearer Authorization header"
            client = request.client.host if request.client else "unknown"
            logger.warning(
                f"Rejected {request.method} {request.url.path} from {client}: "
                f"{response.status_code} with {credentials}"
            )
        return response
