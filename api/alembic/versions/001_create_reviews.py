"""Crear tabla reviews

Revision ID: 001_create_reviews
Revises:
Create Date: 2026-10-19

Cambios:
- Tabla reviews con clave natural unica (source, external_id)
- Indices por source y tag para los filtros de la API
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = '001_create_reviews'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    # init_db() pudo haber creado la tabla en el arranque
    if inspector.has_table('reviews'):
        return

    op.create_table(
        'reviews',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('external_id', sa.String(length=64), nullable=False),
        sa.Column('source', sa.String(length=32), nullable=False),
        sa.Column('author', sa.String(length=255), nullable=True),
        sa.Column('rating', sa.Integer(), nullable=True),
        sa.Column('content', sa.Text(), nullable=True),
        sa.Column('tag', sa.String(length=64), nullable=True),
        sa.Column('review_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('source', 'external_id', name='uk_source_external'),
    )
    op.create_index(op.f('ix_reviews_id'), 'reviews', ['id'], unique=False)
    op.create_index(op.f('ix_reviews_source'), 'reviews', ['source'], unique=False)
    op.create_index(op.f('ix_reviews_tag'), 'reviews', ['tag'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    if inspector.has_table('reviews'):
        op.drop_index(op.f('ix_reviews_tag'), table_name='reviews')
        op.drop_index(op.f('ix_reviews_source'), table_name='reviews')
        op.drop_index(op.f('ix_reviews_id'), table_name='reviews')
        op.drop_table('reviews')
