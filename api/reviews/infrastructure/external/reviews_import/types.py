"""
Tipos y utilidades puras para el pipeline API upstream -> base de datos.

Se mantienen libres de I/O para poder testearlos fácilmente.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Retorna la hora actual en UTC, como datetime aware."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """
    Normaliza datetime a UTC (aware).

    El upstream puede mandar fechas con offset, con 'Z' o sin zona;
    las sin zona se interpretan como UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


@dataclass(frozen=True)
class UpstreamRecord:
    """
    Review normalizada desde el payload upstream, previa a validacion.

    external_id/source pueden venir vacios aqui: el Validator decide si
    el registro se descarta.
    """

    external_id: Optional[str]
    source: Optional[str]
    author: Optional[str] = None
    rating: Optional[int] = None
    content: Optional[str] = None
    review_date: Optional[datetime] = None
    tag: Optional[str] = None
