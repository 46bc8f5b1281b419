"""
=============================================================================
PREFIX ROUTER
=============================================================================

Routes are explicit (method, path template) pairs. A request matches a
route when its raw text STARTS WITH "<METHOD> <literal prefix>", where the
literal prefix is the template up to its first `:param` segment:

    Template            Literal prefix      Matches raw text starting with
    ─────────────────   ─────────────────   ──────────────────────────────
    POST /users         /users              "POST /users"
    GET  /users/:id     /users/             "GET /users/"
    GET  /users         /users              "GET /users"

=============================================================================
PRIORITY
=============================================================================

Prefix matching makes order matter: "GET /users/7" starts with both
"GET /users/" and "GET /users". The router keeps routes ordered so that a
route whose prefix extends another route's prefix is always tried first:

    ┌─────────────────────────────────────────────────────────────────────┐
    │   add GET /users          → [GET /users]                            │
    │   add GET /users/:id      → [GET /users/:id, GET /users]            │
    │                                 ▲ inserted ahead: more specific     │
    └─────────────────────────────────────────────────────────────────────┘

Routes that do not overlap keep their registration order. Anything that
matches nothing gets 404 with the body "404 Not Found".

=============================================================================
"""

from dataclasses import dataclass
from typing import Callable, List, Optional

from .request import RawRequest
from .response import Response, not_found


# Handler: takes the raw request, returns a response
Handler = Callable[[RawRequest], Response]


def literal_prefix(template: str) -> str:
    """
    Text of a path template before its first parameter segment.

        "/users"          → "/users"
        "/users/:id"      → "/users/"
        "/a/:x/b"         → "/a/"
    """
    marker = template.find("/:")
    if marker == -1:
        return template
    return template[:marker + 1]


@dataclass(frozen=True)
class Route:
    """
    A registered route.

    Attributes:
        method: HTTP method, upper case.
        template: Path template (e.g., /users/:id).
        handler: Function called on match.
        name: Optional route name (for listings and logs).
    """

    method: str
    template: str
    handler: Handler
    name: Optional[str] = None

    @property
    def prefix(self) -> str:
        """The text a matching request must start with."""
        return f"{self.method} {literal_prefix(self.template)}"

    def matches(self, raw: str) -> bool:
        return raw.startswith(self.prefix)

    def shadows(self, other: "Route") -> bool:
        """True if every request matching `other` would also match self."""
        return other.prefix.startswith(self.prefix)


class Router:
    """
    Ordered prefix router.

    Usage:
        router = Router()

        @router.post("/users")
        def create(request):
            return ok("User created")

        @router.get("/users/:id")
        def read(request):
            ...

        response = router.handle(RawRequest("GET /users/1 HTTP/1.1\\r\\n\\r\\n"))
    """

    def __init__(self):
        self._routes: List[Route] = []

    @property
    def routes(self) -> List[Route]:
        """Routes in evaluation order."""
        return list(self._routes)

    # =========================================================================
    # ROUTE REGISTRATION
    # =========================================================================

    def add_route(
        self,
        template: str,
        handler: Handler,
        method: str,
        name: Optional[str] = None,
    ) -> Route:
        """
        Register a route.

        The route is placed ahead of the first existing route that would
        otherwise shadow it, and appended otherwise.

        Returns:
            The registered Route.
        """
        route = Route(method=method.upper(), template=template, handler=handler, name=name)

        for index, existing in enumerate(self._routes):
            if existing.shadows(route) and existing.prefix != route.prefix:
                self._routes.insert(index, route)
                break
        else:
            self._routes.append(route)

        return route

    def route(self, template: str, method: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        """Decorator form of add_route()."""
        def decorator(handler: Handler) -> Handler:
            self.add_route(template, handler, method, name)
            return handler
        return decorator

    def get(self, template: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        return self.route(template, "GET", name)

    def post(self, template: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        return self.route(template, "POST", name)

    def put(self, template: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        return self.route(template, "PUT", name)

    def delete(self, template: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        return self.route(template, "DELETE", name)

    # =========================================================================
    # MATCHING
    # =========================================================================

    def match(self, raw: str) -> Optional[Route]:
        """First route whose prefix the raw text starts with, or None."""
        for route in self._routes:
            if route.matches(raw):
                return route
        return None

    def handle(self, request: RawRequest) -> Response:
        """Dispatch to the matching handler, or answer 404."""
        route = self.match(request.text)
        if route is None:
            return not_found()
        return route.handler(request)

    def describe(self) -> List[str]:
        """One line per route, in evaluation order."""
        return [f"{route.method:<7} {route.template}" for route in self._routes]
