"""
Endpoints de consulta de reviews importadas.
"""
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from pydantic import ValidationError

from reviews.application.dto.review_dto import (
    PaginatedReviewsDTO,
    ReviewDTO,
    ReviewSearchParamsDTO,
)
from reviews.application.use_cases.review_use_cases import ReviewUseCases
from reviews.api.v1.dependencies.use_case_deps import get_review_use_cases
from reviews.shared.exceptions.domain import ValidationException


router = APIRouter(prefix="/reviews", tags=["Reviews"])


def get_search_params(
    q: Optional[str] = Query(None, description="Texto a buscar en autor o contenido"),
    source: Optional[str] = Query(None),
    tag: Optional[str] = Query(None),
    min_rating: Optional[int] = Query(None, ge=1, le=5),
    max_rating: Optional[int] = Query(None, ge=1, le=5),
    from_date: Optional[datetime] = Query(None),
    to_date: Optional[datetime] = Query(None),
) -> ReviewSearchParamsDTO:
    """Agrupa los query params de busqueda en un DTO validado."""
    try:
        return ReviewSearchParamsDTO(
            q=q,
            source=source,
            tag=tag,
            min_rating=min_rating,
            max_rating=max_rating,
            from_date=from_date,
            to_date=to_date,
        )
    except ValidationError as e:
        raise ValidationException(e.errors()[0]["msg"]) from e


@router.get(
    "/",
    response_model=PaginatedReviewsDTO,
    summary="Buscar reviews"
)
async def list_reviews(
    params: ReviewSearchParamsDTO = Depends(get_search_params),
    page: int = Query(1, description="Pagina 1-based"),
    size: int = Query(10, description="Tamaño de pagina (1..200)"),
    use_cases: ReviewUseCases = Depends(get_review_use_cases)
) -> PaginatedReviewsDTO:
    """
    Lista reviews con filtros opcionales y paginacion.

    Args:
        params: Filtros de busqueda
        page: Pagina 1-based
        size: Tamaño de pagina
        use_cases: Casos de uso de reviews (inyectado)

    Returns:
        PaginatedReviewsDTO: Pagina de reviews
    """
    return await use_cases.search_reviews(params, page=page, size=size)


@router.get(
    "/{review_id}",
    response_model=ReviewDTO,
    summary="Obtener una review por ID"
)
async def get_review(
    review_id: int,
    use_cases: ReviewUseCases = Depends(get_review_use_cases)
) -> ReviewDTO:
    """
    Obtiene una review por su ID. 404 si no existe.
    """
    return await use_cases.get_review(review_id)


@router.delete(
    "/{review_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Eliminar una review"
)
async def delete_review(
    review_id: int,
    use_cases: ReviewUseCases = Depends(get_review_use_cases)
) -> None:
    """
    Elimina una review. Eliminar un ID inexistente no es un error.
    """
    await use_cases.delete_review(review_id)
