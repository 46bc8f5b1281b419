"""
=============================================================================
USERSERVER - User CRUD Service over a Raw TCP Socket
=============================================================================

A small service exposing create/read/update/delete on one "user" record
type, stored in a relational table, spoken over an HTTP-like text
protocol on a plain socket.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    userserver/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m userserver)
    ├── server.py            # UserServer: wiring and request lifecycle
    ├── config.py            # ServerConfig dataclass
    ├── core/
    │   ├── socket_server.py # Sequential accept loop
    │   └── connection.py    # Read-once / write-once client wrapper
    ├── http/
    │   ├── request.py       # Id and body slicing
    │   ├── response.py      # Status blocks
    │   └── router.py        # Ordered prefix router
    ├── middleware/
    │   ├── base.py          # Middleware pipeline
    │   └── logging.py       # Access log
    ├── handlers/
    │   └── users.py         # The five CRUD handlers
    ├── db/
    │   ├── schema.py        # users table (SQLAlchemy Core)
    │   └── gateway.py       # UserGateway
    └── models/
        └── user.py          # User model and JSON mapping (pydantic)

=============================================================================
QUICK START
=============================================================================

    from userserver import ServerConfig, UserServer

    config = ServerConfig(database_url="postgresql+psycopg2://app@db/app")
    UserServer(config).run()

    $ curl -X POST localhost:8080/users -d '{"name":"Ann","email":"a@x.com"}'
    User created
    $ curl localhost:8080/users
    [{"id":1,"name":"Ann","email":"a@x.com"}]

=============================================================================
"""

__version__ = "1.0.0"

from .config import ConfigError, ServerConfig
from .server import UserServer

__all__ = ["ConfigError", "ServerConfig", "UserServer", "__version__"]
