"""
Dependencias para inyeccion de casos de uso.
"""
from fastapi import Depends

from reviews.application.use_cases.review_use_cases import ReviewUseCases
from reviews.api.v1.dependencies.repository_deps import get_review_repository
from reviews.infrastructure.repositories.review_repository import ReviewRepository


async def get_review_use_cases(
    repository: ReviewRepository = Depends(get_review_repository)
) -> ReviewUseCases:
    """
    Dependencia para obtener los casos de uso de reviews.

    Args:
        repository: Repositorio de reviews

    Returns:
        ReviewUseCases: Instancia de casos de uso de reviews
    """
    return ReviewUseCases(repository)
