"""
Parser del payload upstream.

Formas aceptadas (en este orden):
1. Envelope: {"reviews": [...], "paging": {"totalPages": N}}
2. Array plano: [...], sin metadata de paginacion

El resultado de decodificar es una variante explicita:
WrappedPayload | BareArrayPayload | InvalidPayload.

InvalidPayload no es un error: se traduce a una pagina vacia sin
totalPages (fail-closed). Un glitch de formato del upstream termina la
corrida como "no hay mas datos" en lugar de romperla.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional, TypeVar, Union

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from .errors import PayloadParseError
from .types import UpstreamRecord, ensure_utc

T = TypeVar("T")


class UpstreamReviewDTO(BaseModel):
    """Registro tal como llega del upstream."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: Optional[str] = None
    source: Optional[str] = None
    author: Optional[str] = None
    rating: Optional[int] = None
    content: Optional[str] = None
    review_date: Optional[datetime] = Field(default=None, alias="reviewDate")
    tags: Any = None

    @field_validator("review_date", mode="before")
    @classmethod
    def _blank_as_none(cls, value: Any) -> Any:
        # "" o "   " en reviewDate equivale a sin fecha
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("review_date")
    @classmethod
    def _to_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value) if value is not None else None

    def to_record(self) -> UpstreamRecord:
        return UpstreamRecord(
            external_id=self.id,
            source=self.source,
            author=self.author,
            rating=self.rating,
            content=self.content,
            review_date=self.review_date,
            tag=normalize_tag(self.tags),
        )


class PagingDTO(BaseModel):
    model_config = ConfigDict(extra="ignore")

    page: Optional[int] = None
    size: Optional[int] = None
    total_pages: Optional[int] = Field(default=None, alias="totalPages")


class ReviewsEnvelopeDTO(BaseModel):
    model_config = ConfigDict(extra="ignore")

    reviews: Optional[List[UpstreamReviewDTO]] = None
    paging: Optional[PagingDTO] = None


_ENVELOPE_ADAPTER = TypeAdapter(ReviewsEnvelopeDTO)
_BARE_ARRAY_ADAPTER = TypeAdapter(List[UpstreamReviewDTO])


@dataclass(frozen=True)
class WrappedPayload:
    reviews: List[UpstreamReviewDTO]
    total_pages: Optional[int]


@dataclass(frozen=True)
class BareArrayPayload:
    reviews: List[UpstreamReviewDTO]


@dataclass(frozen=True)
class InvalidPayload:
    reason: PayloadParseError


PagePayload = Union[WrappedPayload, BareArrayPayload, InvalidPayload]


@dataclass(frozen=True)
class ParsedPage:
    """Resultado comun de ambas formas: items + totalPages opcional."""

    items: List[UpstreamRecord] = field(default_factory=list)
    total_pages: Optional[int] = None

    @property
    def received(self) -> int:
        return len(self.items)


def normalize_tag(raw: Any) -> Optional[str]:
    """
    Normaliza el campo tags del upstream a un unico tag.

    - string: se usa tal cual
    - lista: primer elemento que sea string
    - cualquier otra cosa: None
    """
    if isinstance(raw, str):
        return raw
    if isinstance(raw, list):
        for item in raw:
            if isinstance(item, str):
                return item
    return None


def _try_decode(adapter: TypeAdapter[T], raw_body: str) -> tuple[Optional[T], Optional[str]]:
    """Intenta decodificar; retorna (valor, None) o (None, motivo)."""
    try:
        return adapter.validate_json(raw_body), None
    except ValidationError as e:
        return None, f"{e.error_count()} error(es): {e.errors()[0]['msg']}"


def decode_payload(raw_body: Optional[str]) -> PagePayload:
    """
    Decodifica el body probando envelope y luego array plano.
    """
    if raw_body is None or not raw_body.strip():
        return InvalidPayload(PayloadParseError("body vacio"))

    envelope, envelope_error = _try_decode(_ENVELOPE_ADAPTER, raw_body)
    if envelope is not None:
        total_pages = envelope.paging.total_pages if envelope.paging is not None else None
        return WrappedPayload(reviews=envelope.reviews or [], total_pages=total_pages)

    bare, bare_error = _try_decode(_BARE_ARRAY_ADAPTER, raw_body)
    if bare is not None:
        return BareArrayPayload(reviews=bare)

    return InvalidPayload(
        PayloadParseError(f"envelope: {envelope_error}; array: {bare_error}")
    )


class PayloadParser:
    """Normaliza las dos formas del payload a ParsedPage."""

    def parse(self, raw_body: Optional[str]) -> ParsedPage:
        payload = decode_payload(raw_body)

        if isinstance(payload, WrappedPayload):
            return ParsedPage(
                items=[dto.to_record() for dto in payload.reviews],
                total_pages=payload.total_pages,
            )

        if isinstance(payload, BareArrayPayload):
            return ParsedPage(items=[dto.to_record() for dto in payload.reviews])

        logger.error(f"No se pudo parsear la respuesta upstream; la pagina se trata como vacia ({payload.reason})")
        return ParsedPage()
