"""
=============================================================================
HTTP-LIKE PROTOCOL COMPONENTS
=============================================================================

    request.py   - Slicing ids and bodies out of the raw request text
    response.py  - Status blocks and response serialization
    router.py    - Ordered (method, path template) prefix router

=============================================================================
"""

from .request import (
    InvalidIdError,
    RawRequest,
    decode_request,
    extract_body,
    extract_id,
    parse_id,
)
from .response import Response, Status, internal_error, not_found, ok
from .router import Handler, Route, Router, literal_prefix

__all__ = [
    # Request
    "InvalidIdError",
    "RawRequest",
    "decode_request",
    "extract_body",
    "extract_id",
    "parse_id",
    # Response
    "Response",
    "Status",
    "internal_error",
    "not_found",
    "ok",
    # Router
    "Handler",
    "Route",
    "Router",
    "literal_prefix",
]
