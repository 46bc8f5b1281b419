"""
=============================================================================
MIDDLEWARE BASE
=============================================================================

Middleware wraps the router to add behaviour around every request
without touching the handlers:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   RawRequest ──► MW1 ──► MW2 ──► router.handle ──┐                  │
    │                                                   │                  │
    │   Response   ◄── MW1 ◄── MW2 ◄────────────────────┘                  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Middleware must not change the bytes the client receives beyond what the
handler produced; the wire format has no room for extra headers.

=============================================================================
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, Iterator, List

from ..http.request import RawRequest
from ..http.response import Response


logger = logging.getLogger(__name__)


# The next middleware, or the router itself
NextHandler = Callable[[RawRequest], Response]


class Middleware(ABC):
    """
    Abstract base class for middleware.

        class Timing(Middleware):
            def __call__(self, request, next):
                start = time.perf_counter()
                response = next(request)
                ...
                return response
    """

    @abstractmethod
    def __call__(self, request: RawRequest, next: NextHandler) -> Response:
        """Process the request; call next(request) to continue the chain."""

    @property
    def name(self) -> str:
        return self.__class__.__name__


class MiddlewarePipeline:
    """
    Chains middleware around a final handler.

    First added = outermost:

        pipeline = MiddlewarePipeline()
        pipeline.add(LoggingMiddleware())
        handler = pipeline.wrap(router.handle)
    """

    def __init__(self):
        self._middleware: List[Middleware] = []

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        self._middleware.append(middleware)
        logger.debug(f"Added middleware: {middleware.name}")
        return self

    def wrap(self, handler: NextHandler) -> NextHandler:
        """
        Wrap a handler with every middleware in the pipeline.

        Given [MW1, MW2] and handler, returns MW1 → MW2 → handler.
        """
        current = handler
        for middleware in reversed(self._middleware):
            current = self._create_wrapped_handler(middleware, current)
        return current

    def _create_wrapped_handler(self, middleware: Middleware, next_handler: NextHandler) -> NextHandler:
        def wrapped(request: RawRequest) -> Response:
            return middleware(request, next_handler)
        return wrapped

    def __len__(self) -> int:
        return len(self._middleware)

    def __iter__(self) -> Iterator[Middleware]:
        return iter(self._middleware)
