import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from config.settings import settings

logger = logging.getLogger(__name__)


class TimingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        start = time.perf_counter()
        response = await call_next(request)
        latency_ms = int((time.perf_counter() - start) * 1000)
        response.headers["X-Latency-Ms"] = str(latency_ms)
        response.headers["X-Request-ID"] = request_id
        if latency_ms >= settings.SLOW_REQUEST_MS:
            logger.warning("느린 요청 %s %s %dms request_id=%s", request.method, request.url.path, latency_ms, request_id)
        return response
