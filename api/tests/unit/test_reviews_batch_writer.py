"""
Tests del escritor de batches.

Usan SQLite en memoria (mismo ON CONFLICT que PostgreSQL) para verificar
idempotencia, atomicidad y el manejo de created_at/updated_at.
"""
from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from sqlalchemy import func, select

from reviews.infrastructure.database.models import ReviewModel
from reviews.infrastructure.external.reviews_import.batch_writer import (
    EXECUTE_FAILED,
    SUCCESS_NO_INFO,
    ReviewBatchWriter,
    build_upsert_statement,
    normalize_affected_counts,
)
from reviews.infrastructure.external.reviews_import.errors import BatchWriteError, ImportConfigError
from reviews.infrastructure.external.reviews_import.types import UpstreamRecord

TABLE = ReviewModel.__table__


class _Clock:
    def __init__(self, *instants: datetime) -> None:
        self._instants = list(instants)

    def __call__(self) -> datetime:
        return self._instants.pop(0)


def _rows(engine):
    with engine.connect() as conn:
        return conn.execute(select(TABLE).order_by(TABLE.c.external_id)).mappings().all()


def _count(engine) -> int:
    with engine.connect() as conn:
        return conn.execute(select(func.count()).select_from(TABLE)).scalar_one()


def test_upsert_inserts_batch(sync_engine) -> None:
    writer = ReviewBatchWriter(sync_engine)
    records = [
        UpstreamRecord(external_id="a1", source="yelp", author="Ana", rating=4, content="Bien", tag="food"),
        UpstreamRecord(external_id="a2", source="yelp", rating=2),
    ]

    affected = writer.upsert(records)

    assert affected == 2
    rows = _rows(sync_engine)
    assert [r["external_id"] for r in rows] == ["a1", "a2"]
    assert rows[0]["author"] == "Ana"
    assert rows[0]["tag"] == "food"


def test_upsert_is_idempotent_and_keeps_created_at(sync_engine) -> None:
    first = datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)
    second = datetime(2024, 1, 2, 10, 0, tzinfo=timezone.utc)
    writer = ReviewBatchWriter(sync_engine, clock=_Clock(first, second))

    writer.upsert([UpstreamRecord(external_id="a1", source="yelp", rating=3, content="v1")])
    writer.upsert([UpstreamRecord(external_id="a1", source="yelp", rating=5, content="v2")])

    assert _count(sync_engine) == 1
    row = _rows(sync_engine)[0]
    assert row["rating"] == 5
    assert row["content"] == "v2"
    # SQLite devuelve datetimes naive
    assert row["created_at"].replace(tzinfo=None) == datetime(2024, 1, 1, 10, 0)
    assert row["updated_at"].replace(tzinfo=None) == datetime(2024, 1, 2, 10, 0)


def test_same_external_id_in_different_sources_are_distinct(sync_engine) -> None:
    writer = ReviewBatchWriter(sync_engine)
    writer.upsert(
        [
            UpstreamRecord(external_id="x", source="yelp"),
            UpstreamRecord(external_id="x", source="google"),
        ]
    )
    assert _count(sync_engine) == 2


def test_batch_shares_one_timestamp(sync_engine) -> None:
    instant = datetime(2024, 5, 5, 8, 30, tzinfo=timezone.utc)
    clock = MagicMock(return_value=instant)
    writer = ReviewBatchWriter(sync_engine, clock=clock)

    writer.upsert([UpstreamRecord(external_id=f"r{i}", source="yelp") for i in range(3)])

    assert clock.call_count == 1
    assert {r["updated_at"].replace(tzinfo=None) for r in _rows(sync_engine)} == {datetime(2024, 5, 5, 8, 30)}


def test_failed_row_rolls_back_whole_batch(sync_engine) -> None:
    writer = ReviewBatchWriter(sync_engine)
    records = [
        UpstreamRecord(external_id="ok", source="yelp"),
        UpstreamRecord(external_id="bad", source=None),
    ]

    with pytest.raises(BatchWriteError) as exc_info:
        writer.upsert(records)

    assert exc_info.value.batch_size == 2
    assert _count(sync_engine) == 0


@pytest.mark.parametrize("records", [None, []])
def test_empty_batch_is_noop(records) -> None:
    engine = MagicMock()
    engine.dialect.name = "postgresql"
    writer = ReviewBatchWriter(engine)

    assert writer.upsert(records) == 0
    engine.begin.assert_not_called()


def test_upsert_normalizes_driver_rowcounts() -> None:
    engine = MagicMock()
    engine.dialect.name = "postgresql"
    conn = MagicMock()
    conn.execute.side_effect = [MagicMock(rowcount=1), MagicMock(rowcount=SUCCESS_NO_INFO), MagicMock(rowcount=1)]
    engine.begin.return_value.__enter__.return_value = conn
    engine.begin.return_value.__exit__.return_value = False

    writer = ReviewBatchWriter(engine)
    affected = writer.upsert([UpstreamRecord(external_id=f"r{i}", source="yelp") for i in range(3)])

    assert affected == 3
    assert conn.execute.call_count == 3


def test_normalize_affected_counts() -> None:
    assert normalize_affected_counts([1, SUCCESS_NO_INFO, 1]) == 3
    assert normalize_affected_counts([2, 1, 0]) == 3
    assert normalize_affected_counts([1, EXECUTE_FAILED, 1]) == 2
    assert normalize_affected_counts([]) == 0


def test_postgresql_statement_updates_only_mutable_columns() -> None:
    from sqlalchemy.dialects import postgresql

    sql = str(build_upsert_statement("postgresql", TABLE).compile(dialect=postgresql.dialect()))

    assert "ON CONFLICT (source, external_id) DO UPDATE" in sql
    assert "updated_at = excluded.updated_at" in sql
    assert "created_at = excluded.created_at" not in sql


def test_mysql_statement_uses_on_duplicate_key() -> None:
    from sqlalchemy.dialects import mysql

    sql = str(build_upsert_statement("mysql", TABLE).compile(dialect=mysql.dialect()))

    assert "ON DUPLICATE KEY UPDATE" in sql
    assert "created_at = " not in sql.split("ON DUPLICATE KEY UPDATE", 1)[1]


def test_unsupported_dialect_is_rejected() -> None:
    with pytest.raises(ImportConfigError):
        build_upsert_statement("oracle", TABLE)
