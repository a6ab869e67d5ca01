"""
Filtros componibles para la busqueda de reviews.

Cada factory retorna un ReviewFilter; si el parametro viene vacio retorna
el filtro vacio (no restringe). Asi la composicion no necesita condicionales:

    f = by_source(source) & by_tag(tag) & min_rating(min_r)
    select(ReviewModel).where(f.to_clause())
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional, Tuple

from sqlalchemy import and_, func, or_, true
from sqlalchemy.sql.elements import ColumnElement

from reviews.infrastructure.database.models import ReviewModel


@dataclass(frozen=True, eq=False)
class ReviewFilter:
    """Conjuncion inmutable de predicados SQL sobre ReviewModel."""

    clauses: Tuple[ColumnElement, ...] = ()

    def __and__(self, other: "ReviewFilter") -> "ReviewFilter":
        return ReviewFilter(self.clauses + other.clauses)

    @classmethod
    def all_of(cls, filters: Iterable["ReviewFilter"]) -> "ReviewFilter":
        combined = cls()
        for f in filters:
            combined = combined & f
        return combined

    def to_clause(self) -> ColumnElement:
        if not self.clauses:
            return true()
        return and_(*self.clauses)


EMPTY = ReviewFilter()


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value.strip().lower()


def text_query(q: Optional[str]) -> ReviewFilter:
    """Substring case-insensitive en author o content."""
    term = _clean(q)
    if term is None:
        return EMPTY
    pattern = f"%{term}%"
    return ReviewFilter((
        or_(
            func.lower(ReviewModel.author).like(pattern),
            func.lower(ReviewModel.content).like(pattern),
        ),
    ))


def by_source(source: Optional[str]) -> ReviewFilter:
    value = _clean(source)
    if value is None:
        return EMPTY
    return ReviewFilter((func.lower(ReviewModel.source) == value,))


def by_tag(tag: Optional[str]) -> ReviewFilter:
    value = _clean(tag)
    if value is None:
        return EMPTY
    return ReviewFilter((func.lower(ReviewModel.tag) == value,))


def min_rating(value: Optional[int]) -> ReviewFilter:
    if value is None:
        return EMPTY
    return ReviewFilter((ReviewModel.rating >= value,))


def max_rating(value: Optional[int]) -> ReviewFilter:
    if value is None:
        return EMPTY
    return ReviewFilter((ReviewModel.rating <= value,))


def reviewed_from(value: Optional[datetime]) -> ReviewFilter:
    if value is None:
        return EMPTY
    return ReviewFilter((ReviewModel.review_date >= value,))


def reviewed_to(value: Optional[datetime]) -> ReviewFilter:
    if value is None:
        return EMPTY
    return ReviewFilter((ReviewModel.review_date <= value,))
