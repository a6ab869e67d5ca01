"""
Validacion por registro antes de escribir.

El batch de una pagina se escribe en una sola transaccion: si una fila
rompe una constraint, se cae el batch completo. Validando antes y
descartando las filas malas se protege el batch y se guardan las buenas.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from loguru import logger

from reviews.infrastructure.database.models import ReviewModel

from .types import UpstreamRecord

MIN_RATING = 1
MAX_RATING = 5

# Largo maximo por campo, tomado de las columnas de la tabla reviews.
# Un valor mas largo haria fallar el batch completo en PostgreSQL/MySQL.
MAX_LENGTHS = {
    name: ReviewModel.__table__.c[name].type.length
    for name in ("external_id", "source", "author", "tag")
}


@dataclass(frozen=True)
class ValidationSkip:
    """Registro descartado (se cuenta, nunca aborta la pagina)."""

    external_id: Optional[str]
    source: Optional[str]
    reason: str


@dataclass(frozen=True)
class FilterResult:
    valid: List[UpstreamRecord] = field(default_factory=list)
    skips: List[ValidationSkip] = field(default_factory=list)

    @property
    def skipped(self) -> int:
        return len(self.skips)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def skip_reason(record: UpstreamRecord) -> Optional[str]:
    """Retorna el motivo de descarte, o None si el registro es valido."""
    if _is_blank(record.external_id):
        return "id vacio"
    if _is_blank(record.source):
        return "source vacio"
    if record.rating is not None and not MIN_RATING <= record.rating <= MAX_RATING:
        return f"rating {record.rating} fuera de [{MIN_RATING}, {MAX_RATING}]"
    for name, max_length in MAX_LENGTHS.items():
        value = getattr(record, name)
        if value is not None and len(value) > max_length:
            return f"{name} excede {max_length} caracteres"
    return None


class ReviewValidator:
    """Filtra registros invalidos de una pagina."""

    def filter(self, items: Optional[Iterable[UpstreamRecord]]) -> FilterResult:
        valid: List[UpstreamRecord] = []
        skips: List[ValidationSkip] = []

        for record in items or []:
            reason = skip_reason(record)
            if reason is None:
                valid.append(record)
                continue

            skips.append(ValidationSkip(external_id=record.external_id, source=record.source, reason=reason))
            logger.debug(f"Omitiendo review invalida (source={record.source}, id={record.external_id}): {reason}")

        return FilterResult(valid=valid, skips=skips)
