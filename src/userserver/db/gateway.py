"""
=============================================================================
PERSISTENCE GATEWAY
=============================================================================

Translates one logical operation into one parameterized SQL statement
against the `users` table.

=============================================================================
CONNECTION POLICY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    pooled (default)                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   insert()  ──► checkout ──► INSERT ──► return to pool              │
    │   get_all() ──► checkout ──► SELECT ──► return to pool              │
    │                  (same physical connection reused)                   │
    │                                                                      │
    ├─────────────────────────────────────────────────────────────────────┤
    │                    per-call (legacy)                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   insert()  ──► connect ──► INSERT ──► close                        │
    │   get_all() ──► connect ──► SELECT ──► close                        │
    │                  (NullPool: a new connection every time)             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Either way, each operation runs inside a `with` block so its connection is
released when the call ends, success or failure.

=============================================================================
FAILURE SEMANTICS
=============================================================================

Every SQLAlchemy error is re-raised as DatabaseError, with one exception:
when get_all() has a connection but its SELECT fails, it returns an empty
list instead. A failed listing shows up to clients as "no users".

=============================================================================
"""

import logging
from typing import List, Optional

from sqlalchemy import create_engine, delete, insert, select, update
from sqlalchemy.engine import URL, Connection, Engine, Row, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

from ..models.user import User
from .schema import metadata, users


logger = logging.getLogger(__name__)


class DatabaseError(Exception):
    """A store operation failed. Carries no detail meant for clients."""


# Schemes libpq accepts for PostgreSQL, mapped to the installed driver
POSTGRES_SCHEMES = ("postgres", "postgresql")
POSTGRES_DRIVER = "postgresql+psycopg2"


def normalize_database_url(database_url: str) -> URL:
    """
    Parse a database URL, pinning plain PostgreSQL schemes to psycopg2.

        postgres://app@db/app              → postgresql+psycopg2://app@db/app
        postgresql://app@db/app            → postgresql+psycopg2://app@db/app
        postgresql+psycopg2://app@db/app   → unchanged
        sqlite:///users.db                 → unchanged

    Raises:
        ArgumentError: The URL cannot be parsed.
    """
    url = make_url(database_url)
    if url.drivername in POSTGRES_SCHEMES:
        url = url.set(drivername=POSTGRES_DRIVER)
    return url


def create_user_engine(database_url: str, pool_policy: str = "pooled") -> Engine:
    """
    Build the SQLAlchemy engine for the given policy.

    Args:
        database_url: Database URL (see normalize_database_url()).
        pool_policy: "pooled" or "per-call".

    Raises:
        DatabaseError: The URL cannot be parsed or its driver is missing.
    """
    try:
        url = normalize_database_url(database_url)
        if pool_policy == "per-call":
            return create_engine(url, poolclass=NullPool)
        return create_engine(url, pool_pre_ping=True)
    except (SQLAlchemyError, ImportError) as e:
        raise DatabaseError(f"Cannot create engine: {e}") from e


def _row_to_user(row: Row) -> User:
    return User(id=row.id, name=row.name, email=row.email)


class UserGateway:
    """
    Synchronous data access for User records.

    Usage:
        gateway = UserGateway("postgresql+psycopg2://app@db/app")
        gateway.ensure_schema()
        gateway.insert("Ann", "a@x.com")
        gateway.get_all()   # [User(id=1, name='Ann', email='a@x.com')]
    """

    def __init__(self, database_url: str, pool_policy: str = "pooled"):
        self.pool_policy = pool_policy
        self._engine = create_user_engine(database_url, pool_policy)

    @property
    def engine(self) -> Engine:
        return self._engine

    # =========================================================================
    # SCHEMA
    # =========================================================================

    def ensure_schema(self) -> None:
        """
        Create the users table if it does not exist.

        Raises:
            DatabaseError: Connection or DDL failure. Fatal at startup.
        """
        try:
            metadata.create_all(self._engine, checkfirst=True)
        except SQLAlchemyError as e:
            raise DatabaseError(f"Cannot create schema: {e}") from e
        logger.info("Schema ready (table 'users')")

    # =========================================================================
    # STATEMENTS
    # =========================================================================

    def insert(self, name: str, email: str) -> None:
        """Append a row. The generated id is not returned."""
        try:
            with self._engine.begin() as conn:
                conn.execute(insert(users).values(name=name, email=email))
        except SQLAlchemyError as e:
            raise DatabaseError("insert failed") from e

    def get_by_id(self, user_id: int) -> Optional[User]:
        """Return the user with this id, or None."""
        query = select(users.c.id, users.c.name, users.c.email).where(users.c.id == user_id)
        try:
            with self._engine.connect() as conn:
                row = conn.execute(query).first()
        except SQLAlchemyError as e:
            raise DatabaseError("select by id failed") from e
        return _row_to_user(row) if row is not None else None

    def get_all(self) -> List[User]:
        """
        Return every user in store order.

        A connection failure raises DatabaseError. A failing SELECT on an
        established connection yields [].
        """
        with self._connect() as conn:
            try:
                rows = conn.execute(select(users.c.id, users.c.name, users.c.email)).all()
            except SQLAlchemyError as e:
                logger.warning(f"Listing users failed, returning no users: {e}")
                return []
        return [_row_to_user(row) for row in rows]

    def update(self, user_id: int, name: str, email: str) -> int:
        """Overwrite name and email. Returns the number of rows affected."""
        statement = update(users).where(users.c.id == user_id).values(name=name, email=email)
        try:
            with self._engine.begin() as conn:
                return conn.execute(statement).rowcount
        except SQLAlchemyError as e:
            raise DatabaseError("update failed") from e

    def delete(self, user_id: int) -> int:
        """Delete by id. Returns the number of rows affected."""
        try:
            with self._engine.begin() as conn:
                return conn.execute(delete(users).where(users.c.id == user_id)).rowcount
        except SQLAlchemyError as e:
            raise DatabaseError("delete failed") from e

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def _connect(self) -> Connection:
        try:
            return self._engine.connect()
        except SQLAlchemyError as e:
            raise DatabaseError("connection failed") from e

    def dispose(self) -> None:
        """Close pooled connections."""
        self._engine.dispose()
