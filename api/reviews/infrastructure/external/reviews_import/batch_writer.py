"""
Escritura por batch (UPSERT) de reviews validadas.

- Una transaccion por batch: todas las filas se escriben o ninguna.
- Un unico timestamp por batch para created_at/updated_at.
- Clave natural (source, external_id): en conflicto se actualizan solo los
  campos mutables y updated_at; created_at no se toca.

Se usa SQLAlchemy Core con el INSERT especifico de cada dialecto
(ON CONFLICT / ON DUPLICATE KEY), no el ORM: el ORM no abstrae el upsert
y consultaria cada fila antes de escribirla.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Iterable, Optional, Sequence

from loguru import logger
from sqlalchemy import Table
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.dml import Insert

from reviews.infrastructure.database.models import ReviewModel

from .errors import BatchWriteError, ImportConfigError
from .types import UpstreamRecord, ensure_utc, utc_now

# Resultados por sentencia.
# DB-API reporta rowcount -1 cuando no puede determinarlo ("ejecutada, cantidad desconocida").
SUCCESS_NO_INFO = -1
EXECUTE_FAILED = -3

MUTABLE_COLUMNS = ("author", "rating", "content", "review_date", "tag", "updated_at")
CONFLICT_COLUMNS = ("source", "external_id")


def normalize_affected_counts(counts: Sequence[int]) -> int:
    """
    Convierte los resultados por sentencia en un total "amigable".

    Reglas:
    - >= 0: cantidad exacta (1 en insert; 2 en update con ON DUPLICATE KEY)
    - EXECUTE_FAILED: no suma; se loguea
    - cualquier otro negativo (p.ej. SUCCESS_NO_INFO): se ejecuto, cantidad desconocida -> 1

    El numero es solo informativo: la base de datos es la fuente de verdad.
    """
    normalized = 0
    failed = 0

    for count in counts:
        if count >= 0:
            normalized += count
        elif count == EXECUTE_FAILED:
            failed += 1
        else:
            normalized += 1

    if failed:
        logger.warning(f"El batch reporto {failed} sentencia(s) fallida(s); el total no las incluye")

    return normalized


def build_upsert_statement(dialect_name: str, table: Table) -> Insert:
    """
    Construye el INSERT ... ON CONFLICT para el dialecto del engine.

    Raises:
        ImportConfigError: dialecto sin soporte de upsert
    """
    if dialect_name in ("postgresql", "sqlite"):
        insert = postgresql.insert if dialect_name == "postgresql" else sqlite.insert
        stmt = insert(table)
        return stmt.on_conflict_do_update(
            index_elements=[table.c[name] for name in CONFLICT_COLUMNS],
            set_={name: stmt.excluded[name] for name in MUTABLE_COLUMNS},
        )

    if dialect_name in ("mysql", "mariadb"):
        stmt = mysql.insert(table)
        return stmt.on_duplicate_key_update(
            {name: stmt.inserted[name] for name in MUTABLE_COLUMNS}
        )

    raise ImportConfigError(f"Dialecto sin soporte de upsert: {dialect_name}")


def record_to_row(record: UpstreamRecord, *, written_at: datetime) -> dict[str, Any]:
    """Mapea un UpstreamRecord validado a los parametros del INSERT."""
    return {
        "source": record.source,
        "external_id": record.external_id,
        "author": record.author,
        "rating": record.rating,
        "content": record.content,
        "review_date": ensure_utc(record.review_date) if record.review_date else None,
        "tag": record.tag,
        "created_at": written_at,
        "updated_at": written_at,
    }


class ReviewBatchWriter:
    """
    Escritor de batches sobre un Engine sincrono.

    La conexion se toma y se libera en cada llamada a upsert(); nunca se
    mantiene una transaccion abierta entre paginas.
    """

    def __init__(
        self,
        engine: Engine,
        *,
        table: Optional[Table] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._engine = engine
        self._table = table if table is not None else ReviewModel.__table__
        self._clock = clock
        self._statement = build_upsert_statement(engine.dialect.name, self._table)

    def upsert(self, records: Optional[Iterable[UpstreamRecord]]) -> int:
        """
        UPSERT del batch en una sola transaccion.

        Returns:
            int: total de filas afectadas (normalizado, informativo)

        Raises:
            BatchWriteError: fallo la transaccion; nada del batch quedo escrito
        """
        rows_list = list(records or [])
        if not rows_list:
            return 0

        written_at = self._clock()
        params = [record_to_row(r, written_at=written_at) for r in rows_list]

        try:
            with self._engine.begin() as conn:
                counts = [conn.execute(self._statement, row).rowcount for row in params]
        except SQLAlchemyError as e:
            raise BatchWriteError(
                f"Fallo el UPSERT de un batch de {len(params)} review(s): {e}",
                batch_size=len(params),
            ) from e

        return normalize_affected_counts(counts)
