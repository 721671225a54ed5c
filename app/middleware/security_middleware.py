"""Request middleware — access logging, response hardening headers, cache control."""
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.utils.logger import log


class SecurityMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        log.debug(
            f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f} ms)"
        )

        response.headers["X-Content-Type-Options"] = "nosniff"

        # --- Cache-Control ---
        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type:
            # API data is per-user: browser may store but must revalidate each time
            response.headers["Cache-Control"] = "private, no-cache"
        elif "application/pdf" in content_type:
            response.headers["Cache-Control"] = "private, no-store"

        return response
