"""
Casos de uso relacionados con reviews.
Contiene la logica de negocio para consultar y eliminar reviews.
"""
import math
from typing import Tuple
from loguru import logger

from reviews.application.dto.review_dto import (
    PaginatedReviewsDTO,
    ReviewDTO,
    ReviewSearchParamsDTO,
)
from reviews.infrastructure.repositories import review_filters as filters
from reviews.infrastructure.repositories.review_repository import ReviewRepository
from reviews.shared.exceptions.domain import EntityNotFoundException

MIN_PAGE_SIZE = 1
MAX_PAGE_SIZE = 200


def clamp_pagination(page: int, size: int) -> Tuple[int, int, int]:
    """
    Normaliza la paginacion del cliente (page 1-based).

    Returns:
        Tuple[int, int, int]: (page, size, offset)
    """
    page = max(1, page)
    size = min(max(size, MIN_PAGE_SIZE), MAX_PAGE_SIZE)
    return page, size, (page - 1) * size


def build_review_filter(params: ReviewSearchParamsDTO) -> filters.ReviewFilter:
    """Compone el filtro a partir de los parametros de busqueda."""
    return filters.ReviewFilter.all_of([
        filters.text_query(params.q),
        filters.by_source(params.source),
        filters.by_tag(params.tag),
        filters.min_rating(params.min_rating),
        filters.max_rating(params.max_rating),
        filters.reviewed_from(params.from_date),
        filters.reviewed_to(params.to_date),
    ])


class ReviewUseCases:
    """
    Casos de uso para consulta de reviews.
    """

    def __init__(self, repository: ReviewRepository):
        self.repository = repository

    async def search_reviews(
        self,
        params: ReviewSearchParamsDTO,
        page: int = 1,
        size: int = 10
    ) -> PaginatedReviewsDTO:
        """
        Busca reviews con filtros opcionales y paginacion.

        Args:
            params: Filtros de busqueda
            page: Pagina 1-based
            size: Tamaño de pagina (se limita a [1, 200])

        Returns:
            PaginatedReviewsDTO: Pagina de resultados
        """
        page, size, offset = clamp_pagination(page, size)
        rows, total = await self.repository.search(
            build_review_filter(params), offset=offset, limit=size
        )
        return PaginatedReviewsDTO(
            page=page,
            size=size,
            total_pages=math.ceil(total / size) if total else 0,
            total_items=total,
            items=[ReviewDTO.model_validate(row) for row in rows],
        )

    async def get_review(self, review_id: int) -> ReviewDTO:
        """
        Obtiene una review por su ID.

        Raises:
            EntityNotFoundException: Si la review no existe
        """
        review = await self.repository.get_by_id(review_id)

        if not review:
            raise EntityNotFoundException("Review", review_id)

        return ReviewDTO.model_validate(review)

    async def delete_review(self, review_id: int) -> None:
        """
        Elimina una review. Si no existe no hace nada.
        """
        deleted = await self.repository.delete(review_id)
        if not deleted:
            logger.info(f"Review {review_id} no existe; nada que eliminar")
