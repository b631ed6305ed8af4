"""
auth/store.py -- Credential store interface and its SQLAlchemy Core implementation.

Pattern: Repository + Data Mapper.
CredentialStore is the named capability the auth service depends on; any
backend that provides create / find_by_id / find_by_email / update / delete /
list_users can be injected. UserStore is the SQL implementation and
_row_to_user is its mapper. Service and route code never touch SQL directly.

Contract:
  - find_* return None when the user is absent. Storage failures raise
    StoreError, so "not found" is never confused with "database down".
  - update() and delete() raise NotFoundError when no row matches.
  - A UNIQUE(email) violation on create() or update() raises ConflictError.
    The service checks for duplicates first; the constraint covers the race
    where two registrations for one email run at the same time.
  - No retries. A failed statement surfaces immediately.

Security:
  All queries use bound parameters. No f-strings in SQL.

Default DB: SQLite file from Settings.database_url. Any SQLAlchemy URL works
(e.g. postgresql+psycopg://...).

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Protocol

from sqlalchemy import Column, MetaData, String, Table, Text, create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from auth.errors import ConflictError, NotFoundError, StoreError
from auth.models import User
from auth.roles import Role

logger = logging.getLogger("trainingportal.store")


class CredentialStore(Protocol):
    """Durable mapping from user identity to User records."""

    def create(self, user: User) -> None: ...

    def find_by_id(self, user_id: str) -> User | None: ...

    def find_by_email(self, email: str) -> User | None: ...

    def update(self, user: User) -> None: ...

    def delete(self, user_id: str) -> None: ...

    def list_users(self) -> list[User]: ...


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", String(36), primary_key=True),  # UUID4 string
    Column("name", String(255), nullable=False),
    Column("email", String(255), nullable=False, unique=True),
    Column("password_hash", Text, nullable=False),
    Column("role", String(30), nullable=False, server_default=Role.employee.value),
    Column("created_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode so readers are not blocked during writes.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """SQL-backed CredentialStore.

    Usage:
        store = UserStore("sqlite:///portal.db")
        store.create(User(id=..., name="Ann", email="ann@x.com", password_hash=..., role=Role.employee))
        user = store.find_by_email("ann@x.com")
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite") and ":memory:" not in db_url and "mode=memory" not in db_url:
            event.listen(self.engine, "connect", _set_wal_mode)
        try:
            _metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise StoreError("could not initialize credential store") from exc

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def has_users(self) -> bool:
        """Return True if at least one user record exists."""
        try:
            with self.engine.connect() as conn:
                row = conn.execute(_users.select().limit(1)).fetchone()
        except SQLAlchemyError as exc:
            raise _store_error("has_users", exc) from exc
        return row is not None

    def find_by_id(self, user_id: str) -> User | None:
        """Look up a user by id. Returns None if not found."""
        try:
            with self.engine.connect() as conn:
                row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        except SQLAlchemyError as exc:
            raise _store_error("find_by_id", exc) from exc
        return _row_to_user(row) if row is not None else None

    def find_by_email(self, email: str) -> User | None:
        """Look up a user by exact email (case-sensitive). Returns None if not found."""
        try:
            with self.engine.connect() as conn:
                row = conn.execute(_users.select().where(_users.c.email == email)).fetchone()
        except SQLAlchemyError as exc:
            raise _store_error("find_by_email", exc) from exc
        return _row_to_user(row) if row is not None else None

    def list_users(self) -> list[User]:
        """Return all users ordered by name, then email."""
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(_users.select().order_by(_users.c.name, _users.c.email)).fetchall()
        except SQLAlchemyError as exc:
            raise _store_error("list_users", exc) from exc
        return [_row_to_user(r) for r in rows]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(self, user: User) -> None:
        """Insert a new user. Stamps user.created_at with the stored value."""
        created_at = user.created_at or _now_iso()
        try:
            with self.engine.connect() as conn:
                conn.execute(
                    _users.insert().values(
                        id=user.id,
                        name=user.name,
                        email=user.email,
                        password_hash=user.password_hash,
                        role=Role(user.role).value,
                        created_at=created_at,
                    )
                )
                conn.commit()
        except IntegrityError as exc:
            raise ConflictError("email already registered") from exc
        except SQLAlchemyError as exc:
            raise _store_error("create", exc) from exc
        user.created_at = created_at

    def update(self, user: User) -> None:
        """Overwrite name, email, password_hash and role for an existing user id."""
        try:
            with self.engine.connect() as conn:
                result = conn.execute(
                    _users.update()
                    .where(_users.c.id == user.id)
                    .values(
                        name=user.name,
                        email=user.email,
                        password_hash=user.password_hash,
                        role=Role(user.role).value,
                    )
                )
                conn.commit()
        except IntegrityError as exc:
            raise ConflictError("email already registered") from exc
        except SQLAlchemyError as exc:
            raise _store_error("update", exc) from exc
        if result.rowcount == 0:
            raise NotFoundError("user not found")

    def delete(self, user_id: str) -> None:
        """Permanently delete a user record."""
        try:
            with self.engine.connect() as conn:
                result = conn.execute(_users.delete().where(_users.c.id == user_id))
                conn.commit()
        except SQLAlchemyError as exc:
            raise _store_error("delete", exc) from exc
        if result.rowcount == 0:
            raise NotFoundError("user not found")

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _store_error(operation: str, exc: SQLAlchemyError) -> StoreError:
    logger.error("Credential store %s failed: %s", operation, type(exc).__name__)
    return StoreError()


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        name=row.name,
        email=row.email,
        password_hash=row.password_hash,
        role=Role(row.role),
        created_at=row.created_at,
    )
