"""Tests for audit sinks."""

import pytest

from retire_strong.audit.models import EngineCallLog, RecommendationLog
from retire_strong.audit.writer import InMemoryAuditWriter, SqlAuditWriter
from retire_strong.core.errors import AuditWriteError


def _recommendation(user_id: str, timestamp: str, content: str = "Nice work!") -> RecommendationLog:
    return RecommendationLog(
        user_id=user_id,
        timestamp=timestamp,
        type="motivation",
        content=content,
        safety_modified=False,
    )


def _engine_call(user_id: str, timestamp: str) -> EngineCallLog:
    return EngineCallLog(
        user_id=user_id,
        timestamp=timestamp,
        operation="update_plan",
        input={"session_id": "p-d1"},
        output={"substitutions": []},
        duration_ms=1.5,
    )


@pytest.fixture
def sql_writer():
    writer = SqlAuditWriter("sqlite://")
    yield writer
    writer.dispose()


class TestSqlAuditWriter:
    def test_write_and_get(self, sql_writer):
        record = _recommendation("u1", "2024-11-04T10:00:00+00:00")
        sql_writer.write(record)

        stored = sql_writer.get("recommendation", record.id)
        assert stored is not None
        assert stored["content"] == "Nice work!"
        assert stored["timestamp"] == "2024-11-04T10:00:00+00:00"
        assert sql_writer.get("recommendation", "missing") is None

    def test_list_for_user_is_time_ordered(self, sql_writer):
        sql_writer.write(_recommendation("u1", "2024-11-04T12:00:00+00:00", "later"))
        sql_writer.write(_engine_call("u1", "2024-11-04T11:00:00+00:00"))
        sql_writer.write(_recommendation("u1", "2024-11-04T09:00:00+00:00", "earlier"))
        sql_writer.write(_recommendation("u2", "2024-11-04T08:00:00+00:00", "someone else"))

        records = sql_writer.list_for_user("u1")
        assert [r["timestamp"][11:16] for r in records] == ["09:00", "11:00", "12:00"]

        recommendations = sql_writer.list_for_user("u1", record_type="recommendation")
        assert [r["content"] for r in recommendations] == ["earlier", "later"]

    def test_records_are_append_only(self, sql_writer):
        record = _recommendation("u1", "2024-11-04T10:00:00+00:00")
        sql_writer.write(record)
        with pytest.raises(AuditWriteError):
            sql_writer.write(record)

    def test_file_database(self, tmp_path):
        writer = SqlAuditWriter(f"sqlite:///{tmp_path / 'audit.db'}")
        record = _engine_call("u1", "2024-11-04T10:00:00+00:00")
        writer.write(record)
        assert writer.get("engine-call", record.id)["operation"] == "update_plan"
        writer.dispose()


class TestInMemoryAuditWriter:
    def test_write_get_and_list(self):
        writer = InMemoryAuditWriter()
        first = _recommendation("u1", "2024-11-04T12:00:00+00:00")
        second = _engine_call("u1", "2024-11-04T10:00:00+00:00")
        writer.write(first)
        writer.write(second)

        assert writer.get("recommendation", first.id)["content"] == "Nice work!"
        assert writer.get("engine-call", first.id) is None
        assert [r["id"] for r in writer.list_for_user("u1")] == [second.id, first.id]
        assert writer.list_for_user("u1", record_type="engine-call")[0]["operation"] == "update_plan"
