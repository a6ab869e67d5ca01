"""
Implementación del repositorio de reviews.
Maneja las operaciones de lectura y borrado para la entidad ReviewModel.
La escritura la hace exclusivamente el importador (ReviewBatchWriter).
"""
from typing import List, Optional, Tuple
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from reviews.infrastructure.database.models import ReviewModel
from reviews.infrastructure.repositories.review_filters import EMPTY, ReviewFilter


class ReviewRepository:
    """Repositorio para consultar reviews en la base de datos."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def search(
        self,
        review_filter: ReviewFilter = EMPTY,
        *,
        offset: int = 0,
        limit: int = 10
    ) -> Tuple[List[ReviewModel], int]:
        """
        Busca reviews que cumplan el filtro, paginadas.

        Returns:
            Tuple[List[ReviewModel], int]: filas de la pagina y total de coincidencias
        """
        where = review_filter.to_clause()

        total = await self.db.scalar(
            select(func.count()).select_from(ReviewModel).where(where)
        )
        result = await self.db.execute(
            select(ReviewModel)
            .where(where)
            .order_by(ReviewModel.review_date.desc(), ReviewModel.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), int(total or 0)

    async def get_by_id(self, review_id: int) -> Optional[ReviewModel]:
        """
        Obtiene una review por su ID surrogate.
        """
        result = await self.db.execute(
            select(ReviewModel).where(ReviewModel.id == review_id)
        )
        return result.scalars().first()

    async def delete(self, review_id: int) -> bool:
        """
        Elimina una review. Retorna False si no existia.
        """
        result = await self.db.execute(
            delete(ReviewModel).where(ReviewModel.id == review_id)
        )
        return (result.rowcount or 0) > 0
