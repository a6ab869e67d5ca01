"""
Dependencias para inyección de repositorios.
"""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from reviews.infrastructure.database.session import get_db
from reviews.infrastructure.repositories.review_repository import ReviewRepository


async def get_review_repository(
    session: AsyncSession = Depends(get_db)
) -> ReviewRepository:
    """
    Dependencia para obtener el repositorio de reviews.

    Args:
        session: Sesión de base de datos

    Returns:
        ReviewRepository: Instancia del repositorio de reviews
    """
    return ReviewRepository(session)
