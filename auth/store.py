"""
auth/store.py -- SQLAlchemy Core persistence layer for credential records.

Pattern: Repository + Data Mapper. CredentialStore is the repository;
_row_to_record is the mapper. Route and pipeline code never touches SQL.

Lookup semantics: find_by_identifier() is an exact, case-preserving match on
the email column. "Admin@Example.com" and "admin@example.com" are different
identifiers; no normalisation happens here or upstream.

Security:
  All queries use bound parameters. No f-strings in SQL.

DB path: auth/logingate_auth.db unless DATABASE_URL overrides it.

Layer rule: may import core.models; never api/.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, event, func, select
from sqlalchemy.engine import Engine

from core.models import CredentialRecord

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("password_hash", Text, nullable=False),
    Column("role", String(50), nullable=False),
)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode so login reads never block behind a writer.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class CredentialStore:
    """Repository for CredentialRecord entities.

    Usage:
        store = CredentialStore("sqlite:///./auth.db")
        store.create_user("admin@example.com", verifier.hash_secret("secret"), "Admin")
        record = store.find_by_identifier("admin@example.com")
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    def find_by_identifier(self, identifier: str) -> Optional[CredentialRecord]:
        """Look up a record by exact email (case-sensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.email == identifier)).fetchone()
        return _row_to_record(row) if row is not None else None

    def create_user(self, email: str, password_hash: str, role: str) -> int:
        """Insert a new record and return its assigned database ID.

        Raises sqlalchemy.exc.IntegrityError if the email already exists.
        """
        with self.engine.connect() as conn:
            result = conn.execute(_users.insert().values(email=email, password_hash=password_hash, role=role))
            conn.commit()
            return result.inserted_primary_key[0]

    def has_users(self) -> bool:
        with self.engine.connect() as conn:
            count = conn.execute(select(func.count()).select_from(_users)).scalar()
        return (count or 0) > 0

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_record(row) -> CredentialRecord:
    return CredentialRecord(
        id=row.id,
        identifier=row.email,
        secret_hash=row.password_hash,
        role=row.role,
    )
