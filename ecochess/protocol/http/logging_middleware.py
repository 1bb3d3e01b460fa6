from __future__ import annotations

import logging
import re
import time
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request


logger = logging.getLogger(__name__)

_GAME_PATH = re.compile(r"^/api/games/([^/]+)")


class RequestIDLoggingMiddleware(BaseHTTPMiddleware):
    """Tag each request with an ID (reusing a client ``x-request-id``) and log it.

    Requests under ``/api/games/{id}`` also carry the game id in the log record.
    """

    async def dispatch(self, request: Request, call_next: Callable):
        start = time.perf_counter()
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id
        match = _GAME_PATH.match(request.url.path)
        game_id = match.group(1) if match else None

        logger.info(
            "request %s %s",
            request.method,
            request.url.path,
            extra={"request_id": request_id, "game_id": game_id},
        )
        response = await call_next(request)
        duration_ms = int((time.perf_counter() - start) * 1000)
        response.headers["x-request-id"] = request_id
        logger.info(
            "response %d in %d ms",
            response.status_code,
            duration_ms,
            extra={"request_id": request_id, "game_id": game_id},
        )
        return response
