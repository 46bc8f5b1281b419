"""
=============================================================================
RESPONSE COMPOSER
=============================================================================

Responses are a fixed status block followed by the body text:

    ┌─────────────────────────────────────────────────────────────────────┐
    │  OK                                                                 │
    │    HTTP/1.1 200 OK\r\n                                              │
    │    Content-Type: application/json\r\n                               │
    │    \r\n                                                             │
    │    <body>                                                           │
    ├─────────────────────────────────────────────────────────────────────┤
    │  NOT_FOUND                                                          │
    │    HTTP/1.1 404 NOT FOUND\r\n                                       │
    │    \r\n                                                             │
    │    <body>                                                           │
    ├─────────────────────────────────────────────────────────────────────┤
    │  INTERNAL_ERROR                                                     │
    │    HTTP/1.1 500 INTERNAL ERROR\r\n                                  │
    │    \r\n                                                             │
    │    <body>                                                           │
    └─────────────────────────────────────────────────────────────────────┘

There is no Content-Length. Clients read until the server closes the
connection.

=============================================================================
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict


class Status(Enum):
    """The three status blocks the service can send."""

    OK = (200, "OK", "application/json")
    NOT_FOUND = (404, "NOT FOUND", None)
    INTERNAL_ERROR = (500, "INTERNAL ERROR", None)

    def __init__(self, code: int, phrase: str, content_type):
        self.code = code
        self.phrase = phrase
        self.content_type = content_type

    @property
    def status_line(self) -> str:
        return f"HTTP/1.1 {self.code} {self.phrase}"

    @property
    def headers(self) -> Dict[str, str]:
        if self.content_type:
            return {"Content-Type": self.content_type}
        return {}

    @property
    def head(self) -> str:
        """Status line, headers and the blank line, ready to prepend."""
        lines = [self.status_line]
        lines.extend(f"{name}: {value}" for name, value in self.headers.items())
        return "\r\n".join(lines) + "\r\n\r\n"


@dataclass
class Response:
    """A status block plus body text."""

    status: Status = Status.OK
    body: str = ""

    def to_text(self) -> str:
        return self.status.head + self.body

    def to_bytes(self) -> bytes:
        """Serialize for socket.sendall()."""
        return self.to_text().encode("utf-8")


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def ok(body: str) -> Response:
    """200 with a JSON content type."""
    return Response(Status.OK, body)


def not_found(body: str = "404 Not Found") -> Response:
    """404, no headers."""
    return Response(Status.NOT_FOUND, body)


def internal_error(body: str = "Internal error") -> Response:
    """500, no headers."""
    return Response(Status.INTERNAL_ERROR, body)
