from __future__ import annotations

from sqlalchemy import JSON, Index, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for audit tables."""


class AuditRecordRow(Base):
    """Append-only audit trail.

    Stores every record type in one table:
    - pk: LOG#<type>#<id>
    - sk: ISO timestamp (sort key)
    - record_type / record_id: lookup by type+id
    - user_id: nullable, indexed with sk for per-user ordering
    - payload: full record as JSON
    """

    __tablename__ = "audit_records"

    pk: Mapped[str] = mapped_column(String, primary_key=True)
    sk: Mapped[str] = mapped_column(String, nullable=False)
    record_type: Mapped[str] = mapped_column(String, nullable=False, index=True)
    record_id: Mapped[str] = mapped_column(String, nullable=False)
    user_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    payload: Mapped[dict] = mapped_column(JSON, nullable=False)

    __table_args__ = (Index("idx_audit_records_user_sk", "user_id", "sk"),)
