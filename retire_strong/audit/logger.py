"""Audit logger.

Assigns ids and timestamps to audit records and appends them through a
writer. Writes are best-effort: a failed write is reported to the
operational log and never reaches the caller. Audit durability must not
block or fail a user-facing response; compliance review relies on the
trail being complete under normal operation instead.
"""

import asyncio
from collections.abc import Coroutine
from typing import Any

from loguru import logger

from retire_strong.audit.models import (
    AuditRecord,
    EngineCallLog,
    LlmInteractionLog,
    RecommendationLog,
    SafetyInterventionLog,
)
from retire_strong.audit.writer import AuditWriter


class AuditLogger:
    """Append-only audit trail for recommendations, engine calls, model calls and safety interventions.

    Usage:
        audit = AuditLogger(SqlAuditWriter(settings.audit_database_url))
        audit.submit(audit.log_recommendation(user_id="u1", type="explanation", content="...", safety_modified=False))
        ...
        await audit.drain()
    """

    def __init__(self, writer: AuditWriter):
        self.writer = writer
        self._tasks: set[asyncio.Task] = set()

    async def _write(self, record: AuditRecord) -> bool:
        try:
            await asyncio.to_thread(self.writer.write, record)
        except Exception as e:
            logger.error(
                "Audit write failed",
                record_type=record.record_type,
                record_id=record.id,
                user_id=record.user_id,
                error=str(e),
            )
            return False
        logger.debug("Audit record written", record_type=record.record_type, record_id=record.id)
        return True

    async def log_recommendation(self, **data: Any) -> bool:
        """Log content the coach showed a user (post safety review)."""
        return await self._build_and_write(RecommendationLog, data)

    async def log_engine_call(self, **data: Any) -> bool:
        """Log one planning-engine call."""
        return await self._build_and_write(EngineCallLog, data)

    async def log_llm_interaction(self, **data: Any) -> bool:
        """Log one language-model call."""
        return await self._build_and_write(LlmInteractionLog, data)

    async def log_safety_intervention(self, **data: Any) -> bool:
        """Log a block, rewrite, escalation or warning from the safety engine."""
        return await self._build_and_write(SafetyInterventionLog, data)

    async def _build_and_write(self, model: type[AuditRecord], data: dict[str, Any]) -> bool:
        try:
            record = model(**data)
        except Exception as e:
            logger.error("Audit record rejected", record_type=model.record_type, error=str(e))
            return False
        return await self._write(record)

    def submit(self, coro: Coroutine[Any, Any, bool]) -> asyncio.Task:
        """Schedule an audit write without waiting for it.

        The task is tracked until it finishes so drain() can flush it.
        """
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for every submitted write to finish (call before shutdown)."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))
