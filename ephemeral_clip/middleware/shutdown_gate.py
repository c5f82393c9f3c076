from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.types import ASGIApp
import logging

logger = logging.getLogger(__name__)

LIVENESS_PATH = "/health/live"


class ShutdownGateMiddleware(BaseHTTPMiddleware):
    _is_shutting_down = False

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    @classmethod
    def set_shutting_down(cls, value: bool):
        cls._is_shutting_down = value
        if value:
            logger.info("Shutdown gate enabled: rejecting secret traffic.")

    async def dispatch(self, request: Request, call_next):
        if self._is_shutting_down and request.url.path != LIVENESS_PATH:
            return JSONResponse(
                status_code=503,
                content={
                    "error": {
                        "code": "SERVER_SHUTTING_DOWN",
                        "message": "Server is shutting down"
                    }
                }
            )

        return await call_next(request)
