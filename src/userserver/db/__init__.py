"""
Persistence layer.

    UserGateway             - One SQL statement per operation on `users`
    DatabaseError           - Any store failure
    create_user_engine      - Engine factory honoring the pool policy
    normalize_database_url  - Pins postgres:// and postgresql:// to psycopg2
    users, metadata         - SQLAlchemy Core table definition
"""

from .gateway import DatabaseError, UserGateway, create_user_engine, normalize_database_url
from .schema import metadata, users

__all__ = [
    "DatabaseError",
    "UserGateway",
    "create_user_engine",
    "normalize_database_url",
    "metadata",
    "users",
]
