"""
=============================================================================
RAW REQUEST HELPERS
=============================================================================

The service does not parse HTTP. It treats the first read of a connection
as plain text and slices what it needs out of it:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   PUT /users/42 HTTP/1.1\r\n                                         │
    │   Host: localhost:8080\r\n                                           │
    │   Content-Type: application/json\r\n                                │
    │   \r\n                                                               │
    │   {"name":"Ann","email":"a@x.com"}                                   │
    │                                                                      │
    │   split("/")[2]          → "42 HTTP"    → first token → "42"         │
    │   after last \r\n\r\n    → '{"name":"Ann","email":"a@x.com"}'        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

No headers are interpreted, Content-Length is ignored and the body is
whatever follows the final blank line of the buffer.

=============================================================================
"""

import re
from dataclasses import dataclass
from typing import Tuple

from ..models.user import INT4_MAX, INT4_MIN


BLANK_LINE = "\r\n\r\n"

_ID_PATTERN = re.compile(r"[+-]?[0-9]+")


class InvalidIdError(ValueError):
    """The id segment of the path is not a 32-bit integer."""


def decode_request(data: bytes) -> str:
    """Decode raw bytes as UTF-8, replacing invalid sequences."""
    return data.decode("utf-8", errors="replace")


def extract_id(raw: str) -> str:
    """
    Return the id text of a `/users/<id>` path.

    Takes the third "/"-separated piece of the raw text and keeps its first
    whitespace-delimited token. Returns "" if either is missing.

    Examples:
        "GET /users/12 HTTP/1.1\\r\\n..."  → "12"
        "GET /users/abc HTTP/1.1"         → "abc"
        "DELETE /users"                   → ""
    """
    segments = raw.split("/")
    if len(segments) < 3:
        return ""
    tokens = segments[2].split()
    return tokens[0] if tokens else ""


def extract_body(raw: str) -> str:
    """Return the text after the last blank line, or "" if there is none."""
    if BLANK_LINE not in raw:
        return ""
    return raw.rsplit(BLANK_LINE, 1)[1]


def parse_id(text: str) -> int:
    """
    Parse an id segment.

    Accepts an optional sign followed by ASCII digits, within the range of
    a 32-bit signed integer.

    Raises:
        InvalidIdError: Anything else, including "".
    """
    if not _ID_PATTERN.fullmatch(text):
        raise InvalidIdError(f"Invalid ID: {text!r}")
    value = int(text)
    if not INT4_MIN <= value <= INT4_MAX:
        raise InvalidIdError(f"ID out of range: {text!r}")
    return value


@dataclass
class RawRequest:
    """
    One request, as read from the socket.

    Attributes:
        text: Decoded request buffer.
        client_address: (ip, port) of the peer.
    """

    text: str
    client_address: Tuple[str, int] = ("", 0)

    @classmethod
    def from_bytes(cls, data: bytes, client_address: Tuple[str, int] = ("", 0)) -> "RawRequest":
        return cls(text=decode_request(data), client_address=client_address)

    @property
    def request_line(self) -> str:
        """First line of the buffer (for logs)."""
        return self.text.split("\r\n", 1)[0].split("\n", 1)[0]

    @property
    def method(self) -> str:
        parts = self.request_line.split(" ", 1)
        return parts[0]

    @property
    def path(self) -> str:
        parts = self.request_line.split(" ")
        return parts[1] if len(parts) > 1 else ""

    @property
    def id_text(self) -> str:
        return extract_id(self.text)

    @property
    def body(self) -> str:
        return extract_body(self.text)

    def parse_id(self) -> int:
        """Parse the id segment. Raises InvalidIdError."""
        return parse_id(self.id_text)
