"""
Modelos de base de datos (ORM).
"""
from sqlalchemy import Column, String, Integer, DateTime, Text, UniqueConstraint

from reviews.infrastructure.database.session import Base


class ReviewModel(Base):
    """
    Modelo de base de datos para reviews importadas del API upstream.

    Identidad natural: (source, external_id), unica globalmente.
    El importador hace UPSERT sobre esa clave:
    - created_at se fija en la primera escritura y no cambia
    - updated_at se refresca en cada escritura (mismo valor para todo el batch)
    """

    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("source", "external_id", name="uk_source_external"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    external_id = Column(String(64), nullable=False)
    source = Column(String(32), nullable=False, index=True)
    author = Column(String(255), nullable=True)
    rating = Column(Integer, nullable=True)
    content = Column(Text, nullable=True)
    tag = Column(String(64), nullable=True, index=True)
    review_date = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return f"<Review(id={self.id}, source={self.source}, external_id={self.external_id})>"
