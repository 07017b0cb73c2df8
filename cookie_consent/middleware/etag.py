"""
ETag Middleware

Adds ETag headers to cacheable GET JSON responses and answers
``If-None-Match`` with 304 Not Modified.
"""

import hashlib

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp


class ETagMiddleware(BaseHTTPMiddleware):
    """
    Middleware that tags GET JSON responses on the given paths.

    Only paths listed in ``cacheable_paths`` are tagged; per-visitor
    responses must not be cached by shared proxies.
    """

    def __init__(self, app: ASGIApp, cacheable_paths: frozenset[str] = frozenset()):
        super().__init__(app)
        self.cacheable_paths = cacheable_paths

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method != "GET" or request.url.path not in self.cacheable_paths:
            return await call_next(request)

        response = await call_next(request)

        content_type = response.headers.get("content-type", "")
        if response.status_code != 200 or "application/json" not in content_type:
            return response

        body = b""
        async for chunk in response.body_iterator:
            body += chunk if isinstance(chunk, bytes) else chunk.encode()

        etag = '"' + hashlib.md5(body).hexdigest() + '"'  # nosec S324

        headers = dict(response.headers)
        headers["ETag"] = etag

        if_none_match = request.headers.get("if-none-match")
        if if_none_match and if_none_match == etag:
            headers.pop("content-length", None)
            headers.pop("content-type", None)
            return Response(status_code=304, headers=headers)

        return Response(
            content=body,
            status_code=response.status_code,
            headers=headers,
            media_type=response.media_type,
        )
