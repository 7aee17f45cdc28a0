import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from menuforge.config import settings

logger = logging.getLogger(__name__)

SECURITY_HEADERS = [
    (b"X-Content-Type-Options", b"nosniff"),
    (b"X-Frame-Options", b"DENY"),
    (b"X-XSS-Protection", b"1; mode=block"),
    (b"Referrer-Policy", b"strict-origin-when-cross-origin"),
]


class SecurityHeadersMiddleware:
    """Pure ASGI middleware appending SECURITY_HEADERS to every HTTP response."""

    def __init__(self, app, headers=None):
        self.app = app
        self.headers = list(headers or SECURITY_HEADERS)

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                present = {name.lower() for name, _ in message.get("headers", [])}
                message.setdefault("headers", [])
                message["headers"].extend(
                    (name, value) for name, value in self.headers if name.lower() not in present
                )
            await send(message)

        await self.app(scope, receive, send_with_headers)


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
    detail = "Internal server error" if settings.is_production else str(exc)
    return JSONResponse(status_code=500, content={"detail": detail})
