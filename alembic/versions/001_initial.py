"""Initial migration

Revision ID: 001
Revises: 
Create Date: 2024-01-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role = postgresql.ENUM('admin', 'manager', 'employee', name='user_role', create_type=False)
dish_status = postgresql.ENUM('available', 'unavailable', 'out_of_stock', name='dish_status', create_type=False)
order_status = postgresql.ENUM(
    'new', 'preparing', 'ready', 'picked_up', 'cancelled', name='order_status', create_type=False
)
payment_method = postgresql.ENUM('on_site', 'online', name='payment_method', create_type=False)
payment_status = postgresql.ENUM(
    'pending', 'authorized', 'captured', 'refunded', 'failed', name='payment_status', create_type=False
)

ENUMS = (user_role, dish_status, order_status, payment_method, payment_status)


def upgrade() -> None:
    bind = op.get_bind()
    for enum_type in ENUMS:
        enum_type.create(bind, checkfirst=True)

    # Create users table
    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('email', sa.String(255), unique=True, nullable=False),
        sa.Column('hashed_password', sa.String(255)),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('phone', sa.String(20), nullable=False),
        sa.Column('role', user_role, nullable=False, server_default='employee'),
        sa.Column('is_active', sa.Boolean(), default=True),
        sa.Column('refresh_token', sa.String(500)),
        sa.Column('last_login', sa.DateTime()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
    )

    # Create customers table
    op.create_table(
        'customers',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(20), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
    )

    # Create dishes table
    op.create_table(
        'dishes',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('ingredients', sa.Text()),
        sa.Column('allergens', postgresql.JSON(), default=[]),
        sa.Column('tags', postgresql.JSON(), default=[]),
        sa.Column('photo_url', sa.String(500)),
        sa.Column('status', dish_status, nullable=False, server_default='available'),
        sa.Column('preparation_time_minutes', sa.Integer(), nullable=False, server_default='20'),
        sa.Column('stock_quantity', sa.Integer()),
        sa.Column('stock_threshold', sa.Integer()),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
        sa.CheckConstraint('price > 0', name='ck_dishes_price_positive'),
        sa.CheckConstraint(
            'stock_quantity IS NULL OR stock_quantity >= 0',
            name='ck_dishes_stock_non_negative',
        ),
    )

    # Create dish_variants table
    op.create_table(
        'dish_variants',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('dish_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('dishes.id'), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('price_modifier', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('is_default', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
    )

    # Create time_slots table
    op.create_table(
        'time_slots',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('max_capacity', sa.Integer(), nullable=False),
        sa.Column('current_bookings', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_available', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.CheckConstraint('end_time > start_time', name='ck_time_slots_range'),
        sa.CheckConstraint('max_capacity > 0', name='ck_time_slots_capacity_positive'),
        sa.CheckConstraint(
            'current_bookings >= 0 AND current_bookings <= max_capacity',
            name='ck_time_slots_bookings_within_capacity',
        ),
    )

    # Create promo_codes table
    op.create_table(
        'promo_codes',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('code', sa.String(50), unique=True, nullable=False),
        sa.Column('discount_percentage', sa.Numeric(5, 2)),
        sa.Column('discount_amount', sa.Numeric(10, 2)),
        sa.Column('minimum_order_amount', sa.Numeric(10, 2)),
        sa.Column('max_uses', sa.Integer()),
        sa.Column('used_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('valid_from', sa.DateTime(), nullable=False),
        sa.Column('valid_until', sa.DateTime(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.CheckConstraint(
            '(discount_percentage IS NULL) <> (discount_amount IS NULL)',
            name='ck_promo_codes_single_discount_kind',
        ),
        sa.CheckConstraint(
            'discount_percentage IS NULL OR (discount_percentage >= 0 AND discount_percentage <= 100)',
            name='ck_promo_codes_percentage_range',
        ),
        sa.CheckConstraint(
            'discount_amount IS NULL OR discount_amount > 0',
            name='ck_promo_codes_amount_positive',
        ),
        sa.CheckConstraint('valid_from < valid_until', name='ck_promo_codes_window'),
        sa.CheckConstraint(
            'max_uses IS NULL OR used_count <= max_uses',
            name='ck_promo_codes_usage_within_limit',
        ),
    )

    # Create orders table
    op.create_table(
        'orders',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('order_number', sa.String(50), unique=True, nullable=False),
        sa.Column('customer_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('customers.id')),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id')),
        sa.Column('is_guest_order', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('status', order_status, nullable=False, server_default='new'),
        sa.Column('pickup_slot', sa.DateTime(), nullable=False),
        sa.Column('time_slot_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('time_slots.id')),
        sa.Column('total_amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('tax_amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('special_notes', sa.Text()),
        sa.Column('internal_notes', sa.Text()),
        sa.Column('qr_code', sa.String(80), unique=True, nullable=False),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
        sa.CheckConstraint(
            '(customer_id IS NULL) <> (user_id IS NULL)',
            name='ck_orders_single_owner',
        ),
        sa.CheckConstraint(
            'total_amount >= 0 AND tax_amount >= 0',
            name='ck_orders_amounts_non_negative',
        ),
    )

    # Create order_items table
    op.create_table(
        'order_items',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('order_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('orders.id'), nullable=False),
        sa.Column('dish_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('dishes.id'), nullable=False),
        sa.Column('variant_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('dish_variants.id')),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('total_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('special_requests', sa.Text()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.CheckConstraint('quantity > 0', name='ck_order_items_quantity_positive'),
    )

    # Create order_promo_codes table
    op.create_table(
        'order_promo_codes',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('order_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('orders.id'), unique=True, nullable=False),
        sa.Column('promo_code_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('promo_codes.id'), nullable=False),
        sa.Column('discount_applied', sa.Numeric(10, 2), nullable=False),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
    )

    # Create payments table
    op.create_table(
        'payments',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('order_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('orders.id'), nullable=False),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('tax_amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('method', payment_method, nullable=False),
        sa.Column('status', payment_status, nullable=False, server_default='pending'),
        sa.Column('transaction_id', sa.String(100)),
        sa.Column('processed_at', sa.DateTime()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
    )

    # Create business_settings table
    op.create_table(
        'business_settings',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('key', sa.String(100), unique=True, nullable=False),
        sa.Column('value', sa.Text(), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
    )

    # Create indexes
    op.create_index('ix_time_slots_date', 'time_slots', ['date'])
    op.create_index('ix_orders_status', 'orders', ['status'])
    op.create_index('ix_orders_pickup_slot', 'orders', ['pickup_slot'])
    op.create_index('ix_orders_created_at', 'orders', ['created_at'])
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])
    op.create_index('ix_payments_order_id', 'payments', ['order_id'])
    op.create_index(
        'uq_dish_variants_default',
        'dish_variants',
        ['dish_id'],
        unique=True,
        postgresql_where=sa.text('is_default'),
    )


def downgrade() -> None:
    op.drop_table('business_settings')
    op.drop_table('payments')
    op.drop_table('order_promo_codes')
    op.drop_table('order_items')
    op.drop_table('orders')
    op.drop_table('promo_codes')
    op.drop_table('time_slots')
    op.drop_table('dish_variants')
    op.drop_table('dishes')
    op.drop_table('customers')
    op.drop_table('users')

    bind = op.get_bind()
    for enum_type in reversed(ENUMS):
        enum_type.drop(bind, checkfirst=True)
