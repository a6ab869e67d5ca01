"""
DTOs relacionados con reviews.
Definen la estructura de datos para transferir informacion de reviews.
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, model_validator


class ReviewDTO(BaseModel):
    """DTO para representar una review importada del upstream."""
    id: int = Field(..., description="ID interno de la review")
    source: str = Field(..., description="Origen de la review (p.ej. yelp)")
    external_id: str = Field(..., description="ID de la review en el origen")
    author: Optional[str] = None
    rating: Optional[int] = Field(None, ge=1, le=5)
    content: Optional[str] = None
    tag: Optional[str] = None
    review_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ReviewSearchParamsDTO(BaseModel):
    """Filtros de busqueda; todos opcionales."""
    q: Optional[str] = None
    source: Optional[str] = None
    tag: Optional[str] = None
    min_rating: Optional[int] = Field(None, ge=1, le=5)
    max_rating: Optional[int] = Field(None, ge=1, le=5)
    from_date: Optional[datetime] = None
    to_date: Optional[datetime] = None

    @model_validator(mode="after")
    def _check_ranges(self) -> "ReviewSearchParamsDTO":
        if self.min_rating is not None and self.max_rating is not None and self.min_rating > self.max_rating:
            raise ValueError("min_rating no puede ser mayor que max_rating")
        if self.from_date is not None and self.to_date is not None and self.from_date > self.to_date:
            raise ValueError("from_date no puede ser posterior a to_date")
        return self


class PaginatedReviewsDTO(BaseModel):
    """Pagina de reviews (page es 1-based)."""
    page: int
    size: int
    total_pages: int
    total_items: int
    items: List[ReviewDTO]
