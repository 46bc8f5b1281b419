"""
=============================================================================
ACCESS LOG MIDDLEWARE
=============================================================================

One log line per dispatched request, on the `userserver.access` logger.

    TEXT FORMAT (default):
    ┌─────────────────────────────────────────────────────────────────────┐
    │ 10.0.0.7 - - [19/Oct/2026:10:55:36 +0000] "GET /users/1 HTTP/1.1"  │
    │     200 39 1.84ms                                                   │
    └─────────────────────────────────────────────────────────────────────┘

    JSON FORMAT (for log aggregators):
    ┌─────────────────────────────────────────────────────────────────────┐
    │ {"request_id": "a1b2c3d4", "client_ip": "10.0.0.7",                │
    │  "method": "GET", "path": "/users/1",                              │
    │  "request_line": "GET /users/1 HTTP/1.1", "status_code": 200,      │
    │  "content_length": 39, "duration_ms": 1.84, "timestamp": "..."}    │
    └─────────────────────────────────────────────────────────────────────┘

The request id only appears in the log; the response is not modified.

=============================================================================
"""

import json
import logging
import time
import uuid
from dataclasses import asdict, dataclass

from ..http.request import RawRequest
from ..http.response import Response
from .base import Middleware, NextHandler


logger = logging.getLogger("userserver.access")


@dataclass
class RequestLog:
    """Structured access log entry."""

    request_id: str
    client_ip: str
    method: str
    path: str
    request_line: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        entry = asdict(self)
        entry["duration_ms"] = round(self.duration_ms, 2)
        return entry

    def to_text(self) -> str:
        return (
            f'{self.client_ip or "-"} - - [{self.timestamp}] '
            f'"{self.request_line}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


class LoggingMiddleware(Middleware):
    """
    Request logging middleware.

    Should be the first middleware in the pipeline so its timing covers
    everything else.

        pipeline.add(LoggingMiddleware(log_format="json"))
    """

    def __init__(self, log_format: str = "text", log_level: int = logging.INFO):
        self.log_format = log_format
        self.log_level = log_level

    def __call__(self, request: RawRequest, next: NextHandler) -> Response:
        request_id = str(uuid.uuid4())[:8]
        start_time = time.perf_counter()

        try:
            response = next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"[{request_id}] Request failed: {request.method} {request.path} "
                f"- {type(e).__name__}: {e} ({duration_ms:.2f}ms)"
            )
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000

        log_entry = RequestLog(
            request_id=request_id,
            client_ip=request.client_address[0],
            method=request.method,
            path=request.path,
            request_line=request.request_line,
            status_code=response.status.code,
            content_length=len(response.body.encode("utf-8")),
            duration_ms=duration_ms,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

        if self.log_format == "json":
            logger.log(self.log_level, json.dumps(log_entry.to_dict()))
        else:
            logger.log(self.log_level, log_entry.to_text())

        return response
