"""
Data Transfer Objects (DTOs) para la capa de aplicacion.
"""
from .review_dto import ReviewDTO, ReviewSearchParamsDTO, PaginatedReviewsDTO

__all__ = [
    "ReviewDTO",
    "ReviewSearchParamsDTO",
    "PaginatedReviewsDTO",
]
