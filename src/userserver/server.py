"""
=============================================================================
USER SERVER
=============================================================================

Wires the pieces together:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   ServerConfig ──┬──► UserGateway (SQLAlchemy engine)                │
    │                  │          ▲                                        │
    │                  │          │                                        │
    │                  │    UserHandlers ──► Router                        │
    │                  │                        ▲                          │
    │                  │          LoggingMiddleware (pipeline)             │
    │                  │                        ▲                          │
    │                  └──► SocketServer ──► process_connection()          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Startup order: logging, schema, then the socket. A store that cannot be
reached or a table that cannot be created stops the process before
anything listens.

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    1. SocketServer accepts the next connection
    2. Connection.read_once()         (1024 bytes, single recv)
    3. decode as UTF-8 (lossy)        → RawRequest
    4. middleware + router            → Response
    5. Connection.send_response()
    6. Connection.close()
    7. back to 1

=============================================================================
"""

import logging
from typing import Callable, List, Optional

from .config import ServerConfig
from .core import Connection, SocketServer
from .db import UserGateway
from .handlers import UserHandlers
from .http import RawRequest, Response, Router, internal_error
from .middleware import LoggingMiddleware, Middleware, MiddlewarePipeline


logger = logging.getLogger(__name__)


class UserServer:
    """
    The user service.

    Usage:
        config = ServerConfig.from_env()
        server = UserServer(config)
        server.run()   # Blocks until SIGINT/SIGTERM or shutdown()
    """

    def __init__(self, config: ServerConfig, gateway: Optional[UserGateway] = None):
        """
        Args:
            config: Server configuration (validated here).
            gateway: Store access. Built from config.database_url when omitted.
        """
        self.config = config
        self.config.validate()

        self.gateway = gateway or UserGateway(config.database_url, config.pool_policy)

        self._router = Router()
        UserHandlers(self.gateway).register(self._router)

        self._middleware = MiddlewarePipeline()
        self._middleware.add(LoggingMiddleware(log_format=config.log_format))

        self._socket_server = SocketServer(config)
        self._handler: Optional[Callable[[RawRequest], Response]] = None

    @property
    def router(self) -> Router:
        return self._router

    @property
    def socket_server(self) -> SocketServer:
        return self._socket_server

    def use(self, middleware: Middleware) -> "UserServer":
        """Add middleware (inside the access log)."""
        self._middleware.add(middleware)
        self._handler = None
        return self

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self):
        """
        Prepare the schema and serve until shut down.

        Raises:
            DatabaseError: The schema could not be ensured.
            OSError: The listening socket could not be bound.
        """
        self._setup_logging()
        self.gateway.ensure_schema()

        logger.info(f"Connection policy: {self.gateway.pool_policy}")
        for line in self.describe_routes():
            logger.debug(f"Route: {line}")

        try:
            self._socket_server.start(self.process_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def shutdown(self):
        """Ask the accept loop to stop."""
        self._socket_server.shutdown()

    def describe_routes(self) -> List[str]:
        return self._router.describe()

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)
        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("userserver").setLevel(level)

    def _shutdown(self):
        logger.info("Shutting down server...")
        self.gateway.dispose()
        logger.info("Server stopped")

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def dispatch(self, request: RawRequest) -> Response:
        """
        Run one request through middleware and router.

        An exception escaping a handler becomes 500 "Internal error".
        """
        if self._handler is None:
            self._handler = self._middleware.wrap(self._router.handle)

        try:
            return self._handler(request)
        except Exception:
            logger.exception(f"Handler error for \"{request.request_line}\"")
            return internal_error()

    def process_connection(self, conn: Connection):
        """Read once, dispatch, write once, close."""
        with conn:
            try:
                data = conn.read_once()
            except OSError as e:
                logger.error(f"[{conn.id}] Unable to read stream: {e}")
                return

            if not data:
                logger.warning(f"[{conn.id}] Received empty request")
                return

            request = RawRequest.from_bytes(data, conn.address)
            response = self.dispatch(request)
            conn.send_response(response.to_bytes())
