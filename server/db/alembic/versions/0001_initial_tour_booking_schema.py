"""Initial database schema

Revision ID: 0001
Revises:
Create Date: 2025-08-02 12:30:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade database schema."""
    # Create users table
    op.create_table('users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    # Create catalog tables
    op.create_table('tours',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('adult_price', sa.Integer(), nullable=False),
        sa.Column('child_price', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('destination_country', sa.String(length=100), nullable=False),
        sa.Column('destination_city', sa.String(length=100), nullable=False),
        sa.Column('hotels', sa.JSON(), nullable=False),
        sa.Column('images', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('adult_price >= 0', name='ck_tour_adult_price_non_negative'),
        sa.CheckConstraint('child_price >= 0', name='ck_tour_child_price_non_negative'),
        sa.CheckConstraint('length(currency) = 3', name='ck_tour_currency_length'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_tours_name'), 'tours', ['name'], unique=True)
    op.create_index(op.f('ix_tours_status'), 'tours', ['status'], unique=False)

    op.create_table('tags',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=32), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_tags_name'), 'tags', ['name'], unique=True)

    op.create_table('included_items',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('type', sa.String(length=100), nullable=False),
        sa.Column('icon', sa.String(length=255), nullable=True),
        sa.Column('details', sa.String(length=255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_included_items_type'), 'included_items', ['type'], unique=True)

    op.create_table('tour_tags',
        sa.Column('tour_id', sa.Integer(), nullable=False),
        sa.Column('tag_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['tour_id'], ['tours.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['tag_id'], ['tags.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('tour_id', 'tag_id')
    )

    op.create_table('tour_included_items',
        sa.Column('tour_id', sa.Integer(), nullable=False),
        sa.Column('included_item_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['tour_id'], ['tours.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['included_item_id'], ['included_items.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('tour_id', 'included_item_id')
    )

    # Create availabilities table
    op.create_table('availabilities',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('tour_id', sa.Integer(), nullable=False),
        sa.Column('available_date', sa.DateTime(), nullable=False),
        sa.Column('available_slots', sa.Integer(), nullable=False),
        sa.Column('departure_time', sa.Time(), nullable=False),
        sa.Column('return_time', sa.Time(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('available_slots >= 0', name='ck_availability_slots_non_negative'),
        sa.ForeignKeyConstraint(['tour_id'], ['tours.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tour_id', 'available_date', name='uq_availability_tour_date')
    )
    op.create_index(op.f('ix_availabilities_available_date'), 'availabilities', ['available_date'], unique=False)
    op.create_index(op.f('ix_availabilities_tour_id'), 'availabilities', ['tour_id'], unique=False)

    # Create accommodation and payment tables
    op.create_table('accommodations',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('room_type', sa.String(length=20), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('room_type')
    )

    op.create_table('payment_methods',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_payment_methods_name'), 'payment_methods', ['name'], unique=True)

    op.create_table('pays',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('payment_method_id', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('payment_date', sa.DateTime(), nullable=False),
        sa.CheckConstraint('amount >= 0', name='ck_pay_amount_non_negative'),
        sa.ForeignKeyConstraint(['payment_method_id'], ['payment_methods.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_pays_payment_method_id'), 'pays', ['payment_method_id'], unique=False)

    # Create bookings table
    op.create_table('bookings',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('tour_id', sa.Integer(), nullable=False),
        sa.Column('availability_id', sa.Integer(), nullable=False),
        sa.Column('accommodation_id', sa.Integer(), nullable=True),
        sa.Column('pay_id', sa.Integer(), nullable=True),
        sa.Column('start_date', sa.DateTime(), nullable=False),
        sa.Column('end_date', sa.DateTime(), nullable=False),
        sa.Column('adults', sa.Integer(), nullable=False),
        sa.Column('children', sa.Integer(), nullable=False),
        sa.Column('price', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('adults >= 1', name='ck_booking_adults_positive'),
        sa.CheckConstraint('children >= 0', name='ck_booking_children_non_negative'),
        sa.CheckConstraint('price >= 0', name='ck_booking_price_non_negative'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['tour_id'], ['tours.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['availability_id'], ['availabilities.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['accommodation_id'], ['accommodations.id']),
        sa.ForeignKeyConstraint(['pay_id'], ['pays.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('pay_id'),
        sa.UniqueConstraint('user_id', 'availability_id', name='uq_booking_user_availability')
    )
    op.create_index(op.f('ix_bookings_availability_id'), 'bookings', ['availability_id'], unique=False)
    op.create_index(op.f('ix_bookings_start_date'), 'bookings', ['start_date'], unique=False)
    op.create_index(op.f('ix_bookings_tour_id'), 'bookings', ['tour_id'], unique=False)
    op.create_index(op.f('ix_bookings_user_id'), 'bookings', ['user_id'], unique=False)


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_table('bookings')
    op.drop_table('pays')
    op.drop_table('payment_methods')
    op.drop_table('accommodations')
    op.drop_table('availabilities')
    op.drop_table('tour_included_items')
    op.drop_table('tour_tags')
    op.drop_table('included_items')
    op.drop_table('tags')
    op.drop_table('tours')
    op.drop_table('users')
