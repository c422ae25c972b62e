"""Audit sinks.

Writers are synchronous and append-only. The audit logger runs them in
worker threads so a slow database never holds up a response.
"""

from __future__ import annotations

import threading
from collections.abc import Generator
from contextlib import contextmanager
from typing import Protocol

from loguru import logger
from sqlalchemy import create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from retire_strong.audit.db import AuditRecordRow, Base
from retire_strong.audit.models import AuditRecord
from retire_strong.core.errors import AuditWriteError


class AuditWriter(Protocol):
    def write(self, record: AuditRecord) -> None: ...


def _is_postgresql(database_url: str) -> bool:
    url = database_url.lower()
    return "postgresql" in url or "postgres" in url


def _validate_postgresql_driver() -> None:
    """Fail early when PostgreSQL is configured without its driver."""
    try:
        import psycopg2  # noqa: F401
    except ImportError as e:
        logger.error(
            "⚠️ CRITICAL: PostgreSQL driver (psycopg2) is not installed!\n"
            "Install it with: pip install psycopg2-binary"
        )
        raise ImportError("PostgreSQL driver required. Install with: pip install psycopg2-binary") from e


class SqlAuditWriter:
    """Writes audit records to a SQL table via SQLAlchemy.

    The engine is created on first use, not at construction, so building the
    service never opens a connection.
    """

    def __init__(self, database_url: str):
        self.database_url = database_url
        self._engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None
        self._lock = threading.Lock()

    def _get_engine(self) -> Engine:
        with self._lock:
            if self._engine is None:
                logger.info(f"Initializing audit database engine: {self.database_url}")
                kwargs: dict = {"echo": False, "pool_pre_ping": True}
                if "sqlite" in self.database_url.lower():
                    kwargs["connect_args"] = {"check_same_thread": False}
                    if ":memory:" in self.database_url or self.database_url.rstrip("/") == "sqlite:":
                        # One shared connection, otherwise each thread gets its own empty database
                        kwargs["poolclass"] = StaticPool
                    logger.warning("Using SQLite audit database (local development only)")
                elif _is_postgresql(self.database_url):
                    _validate_postgresql_driver()
                    kwargs["pool_recycle"] = 3600
                    kwargs["connect_args"] = {"connect_timeout": 10, "application_name": "retire-strong-audit"}

                engine = create_engine(self.database_url, **kwargs)
                Base.metadata.create_all(engine)
                self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
                self._engine = engine
                logger.info("Audit database engine initialized")
            return self._engine

    @contextmanager
    def _session(self) -> Generator[Session, None, None]:
        self._get_engine()
        assert self._session_factory is not None
        session = self._session_factory()
        try:
            yield session
        finally:
            session.close()

    def write(self, record: AuditRecord) -> None:
        """Append one record.

        Raises:
            AuditWriteError: If the insert fails
        """
        row = AuditRecordRow(
            pk=record.partition_key,
            sk=record.sort_key,
            record_type=record.record_type,
            record_id=record.id,
            user_id=record.user_id,
            payload=record.model_dump(mode="json"),
        )
        try:
            with self._session() as session:
                session.add(row)
                session.commit()
        except SQLAlchemyError as e:
            raise AuditWriteError(f"Failed to write {record.partition_key}: {e}") from e

    def get(self, record_type: str, record_id: str) -> dict | None:
        """Fetch one record payload by type and id."""
        with self._session() as session:
            row = session.get(AuditRecordRow, f"LOG#{record_type}#{record_id}")
            return dict(row.payload) if row is not None else None

    def list_for_user(self, user_id: str, record_type: str | None = None) -> list[dict]:
        """Records for one user, oldest first."""
        stmt = select(AuditRecordRow).where(AuditRecordRow.user_id == user_id)
        if record_type is not None:
            stmt = stmt.where(AuditRecordRow.record_type == record_type)
        stmt = stmt.order_by(AuditRecordRow.sk)
        with self._session() as session:
            return [dict(row.payload) for row in session.scalars(stmt)]

    def dispose(self) -> None:
        with self._lock:
            if self._engine is not None:
                self._engine.dispose()
                self._engine = None
                self._session_factory = None


class InMemoryAuditWriter:
    """List-backed writer for local development and tests."""

    def __init__(self) -> None:
        self.records: list[AuditRecord] = []
        self._lock = threading.Lock()

    def write(self, record: AuditRecord) -> None:
        with self._lock:
            self.records.append(record)

    def get(self, record_type: str, record_id: str) -> dict | None:
        for record in self.records:
            if record.record_type == record_type and record.id == record_id:
                return record.model_dump(mode="json")
        return None

    def list_for_user(self, user_id: str, record_type: str | None = None) -> list[dict]:
        matches = [
            r
            for r in self.records
            if r.user_id == user_id and (record_type is None or r.record_type == record_type)
        ]
        return [r.model_dump(mode="json") for r in sorted(matches, key=lambda r: r.sort_key)]
