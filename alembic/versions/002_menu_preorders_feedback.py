"""Menu, pre-orders and feedback

Revision ID: 002
Revises: 001
Create Date: 2025-11-24 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '002'
down_revision: Union[str, None] = '001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'menu_items',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('category', sa.String(20), nullable=False),
        sa.Column('price_cents', sa.Integer(), nullable=False),
        sa.Column('is_available', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('preparation_time_minutes', sa.Integer()),
        sa.Column('calories', sa.Integer()),
        sa.Column('allergens', sa.JSON()),
        sa.Column('tags', sa.JSON()),
        sa.Column('image_url', sa.String(500)),
        sa.Column('order_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
        sa.CheckConstraint('price_cents >= 0', name='ck_menu_items_price'),
    )
    op.create_index('ix_menu_items_category_available', 'menu_items', ['category', 'is_available'])

    # One pre-order per reservation, removed with it
    op.create_table(
        'menu_orders',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            'reservation_id',
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey('reservations.id', ondelete='CASCADE'),
            unique=True,
            nullable=False,
        ),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('items_json', sa.JSON(), nullable=False),
        sa.Column('total_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('estimated_preparation_minutes', sa.Integer(), server_default='0'),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('special_requests', sa.Text()),
        sa.Column('dietary_restrictions', sa.Text()),
        sa.Column('is_paid', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('confirmed_at', sa.DateTime()),
        sa.Column('prepared_at', sa.DateTime()),
        sa.Column('served_at', sa.DateTime()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
    )

    op.create_table(
        'feedback',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            'reservation_id',
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey('reservations.id', ondelete='CASCADE'),
            unique=True,
            nullable=False,
        ),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('food_quality', sa.Integer()),
        sa.Column('service_quality', sa.Integer()),
        sa.Column('ambience', sa.Integer()),
        sa.Column('value_for_money', sa.Integer()),
        sa.Column('title', sa.String(100)),
        sa.Column('review', sa.Text(), nullable=False),
        sa.Column('would_recommend', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('images', sa.JSON()),
        sa.Column('admin_response', sa.Text()),
        sa.Column(
            'responded_by',
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey('users.id', ondelete='SET NULL'),
        ),
        sa.Column('responded_at', sa.DateTime()),
        sa.Column('status', sa.String(20), nullable=False, server_default='approved'),
        sa.Column('moderation_note', sa.Text()),
        sa.Column('is_public', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('is_verified', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
        sa.CheckConstraint('rating BETWEEN 1 AND 5', name='ck_feedback_rating'),
    )
    op.create_index('ix_feedback_status_public', 'feedback', ['status', 'is_public'])


def downgrade() -> None:
    op.drop_index('ix_feedback_status_public', table_name='feedback')
    op.drop_table('feedback')
    op.drop_table('menu_orders')
    op.drop_index('ix_menu_items_category_available', table_name='menu_items')
    op.drop_table('menu_items')
