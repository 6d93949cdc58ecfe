"""Tour catalog schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade database schema."""
    op.create_table('users',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('photo', sa.String(length=255), server_default='default.jpg', nullable=False),
        sa.Column('role', sa.String(length=20), server_default='user', nullable=False),
        sa.Column('password_changed_at', sa.DateTime(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.CheckConstraint("role IN ('user', 'guide', 'lead-guide', 'admin')", name='ck_user_role_valid'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email')
    )

    op.create_table('tours',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('name', sa.String(length=40), nullable=False),
        sa.Column('slug', sa.String(length=64), nullable=False),
        sa.Column('duration', sa.Float(), nullable=False),
        sa.Column('max_group_size', sa.Float(), nullable=False),
        sa.Column('difficulty', sa.String(length=16), nullable=False),
        sa.Column('summary', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('ratings_average', sa.Float(), server_default='4.5', nullable=False),
        sa.Column('ratings_quantity', sa.Float(), server_default='0', nullable=False),
        sa.Column('price', sa.Float(), nullable=False),
        sa.Column('price_discount', sa.Float(), nullable=True),
        sa.Column('image_cover', sa.String(length=255), nullable=False),
        sa.Column('images', sa.JSON(), nullable=False),
        sa.Column('start_dates', sa.JSON(), nullable=False),
        sa.Column('secret_tour', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('guides', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )
    op.create_index(op.f('ix_tours_slug'), 'tours', ['slug'], unique=False)
    op.create_index('ix_tours_price_ratings_average', 'tours', ['price', 'ratings_average'], unique=False)

    op.create_table('reviews',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('review', sa.Text(), nullable=False),
        sa.Column('rating', sa.Float(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('tour_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.CheckConstraint('rating >= 1 AND rating <= 5', name='ck_review_rating_range'),
        sa.ForeignKeyConstraint(['tour_id'], ['tours.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_reviews_tour_id'), 'reviews', ['tour_id'], unique=False)
    op.create_index(op.f('ix_reviews_user_id'), 'reviews', ['user_id'], unique=False)


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_table('reviews')
    op.drop_table('tours')
    op.drop_table('users')
