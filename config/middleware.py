# middleware.py
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

ALLOW_METHODS = "GET,HEAD,POST,OPTIONS"
ALLOW_HEADERS = "Content-Type, Accept"


class CorsMiddleware(BaseHTTPMiddleware):
    """Answer preflight requests and stamp CORS headers on every response.

    Blobs are served to ``<img>`` tags and fetch() calls on other origins, so
    every route, errors included, carries the same header set.
    """

    def __init__(self, app, allow_origin: str = "*"):
        super().__init__(app)
        self.cors_headers = {
            "Access-Control-Allow-Origin": allow_origin,
            "Access-Control-Allow-Methods": ALLOW_METHODS,
            "Access-Control-Allow-Headers": ALLOW_HEADERS,
        }

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=204, headers=self.cors_headers)

        response: Response = await call_next(request)
        for name, value in self.cors_headers.items():
            response.headers.setdefault(name, value)
        return response
