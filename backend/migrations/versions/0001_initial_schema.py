"""Initial FoodHub admin schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
    ]


def upgrade():
    op.create_table('admins',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=True),
        sa.Column('credential_ref', sa.String(length=64), nullable=True),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_admins_email', 'admins', ['email'], unique=True)
    op.create_index('ix_admins_credential_ref', 'admins', ['credential_ref'])

    op.create_table('vendors',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('restaurant_name', sa.String(length=200), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        sa.Column('lifecycle_state', sa.String(length=20), server_default='pending', nullable=False),
        sa.Column('credential_ref', sa.String(length=64), nullable=True),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('rejected_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('suspended_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reinstated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "lifecycle_state IN ('pending', 'active', 'suspended', 'rejected', 'deleted')",
            name='vendors_lifecycle_state_check'
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_vendors_email', 'vendors', ['email'])
    op.create_index('ix_vendors_lifecycle_state', 'vendors', ['lifecycle_state'])
    op.create_index('ix_vendors_credential_ref', 'vendors', ['credential_ref'])

    op.create_table('categories',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('image_url', sa.String(length=500), nullable=True),
        sa.Column('food_type', sa.String(length=20), server_default='both', nullable=False),
        sa.Column('owner_id', sa.String(length=64), nullable=False),
        sa.Column('parent_id', sa.String(length=36), nullable=True),
        sa.Column('is_global', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('approval_state', sa.String(length=20), server_default='pending', nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_categories_parent_id', 'categories', ['parent_id'])
    op.create_index('categories_owner_parent_idx', 'categories', ['owner_id', 'parent_id'])

    op.create_table('products',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('owner_id', sa.String(length=64), nullable=False),
        sa.Column('category_id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('image_url', sa.String(length=500), nullable=True),
        sa.Column('food_type', sa.String(length=20), server_default='veg', nullable=False),
        sa.Column('unit', sa.String(length=50), nullable=True),
        sa.Column('size', sa.String(length=50), nullable=True),
        sa.Column('priority', sa.Integer(), server_default='0', nullable=False),
        sa.Column('original_price', sa.Float(), nullable=False),
        sa.Column('selling_price', sa.Float(), nullable=False),
        sa.Column('discount', sa.Float(), server_default='0.0', nullable=False),
        sa.Column('status', sa.String(length=20), server_default='available', nullable=False),
        sa.Column('approval_state', sa.String(length=20), server_default='approved', nullable=False),
        sa.Column('offer', postgresql.JSONB(astext_type=sa.Text()), server_default=sa.text("'{\"kind\": \"none\"}'::jsonb"), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('selling_price <= original_price', name='products_non_negative_discount'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_products_owner_id', 'products', ['owner_id'])
    op.create_index('ix_products_category_id', 'products', ['category_id'])

    op.create_table('coupons',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('code', sa.String(length=50), nullable=False),
        sa.Column('owner_id', sa.String(length=64), nullable=False),
        sa.Column('discount_type', sa.String(length=20), nullable=False),
        sa.Column('discount_value', sa.Float(), nullable=False),
        sa.Column('min_order_value', sa.Float(), server_default='0.0', nullable=False),
        sa.Column('max_discount', sa.Float(), nullable=True),
        sa.Column('max_uses_per_customer', sa.Integer(), nullable=True),
        sa.Column('active_from', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('category_id', sa.String(length=36), nullable=True),
        sa.Column('subcategory_id', sa.String(length=36), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('used_count', sa.Integer(), server_default='0', nullable=False),
        *_timestamps(),
        sa.CheckConstraint('expires_at > active_from', name='coupons_validity_window_check'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_coupons_code', 'coupons', ['code'], unique=True)
    op.create_index('ix_coupons_owner_id', 'coupons', ['owner_id'])

    op.create_table('orders',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('owner_id', sa.String(length=64), nullable=True),
        sa.Column('customer_id', sa.String(length=64), nullable=True),
        sa.Column('vendor_name', sa.String(length=200), nullable=True),
        sa.Column('status', sa.String(length=30), server_default='placed', nullable=False),
        sa.Column('order_date', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('total_amount', sa.Float(), server_default='0.0', nullable=False),
        sa.Column('customer', postgresql.JSONB(astext_type=sa.Text()), server_default=sa.text("'{}'::jsonb"), nullable=False),
        sa.Column('items', postgresql.JSONB(astext_type=sa.Text()), server_default=sa.text("'[]'::jsonb"), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_orders_owner_id', 'orders', ['owner_id'])
    op.create_index('ix_orders_customer_id', 'orders', ['customer_id'])

    op.create_table('feedback',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_type', sa.String(length=20), nullable=False),
        sa.Column('author_id', sa.String(length=64), nullable=True),
        sa.Column('user_name', sa.String(length=200), nullable=True),
        sa.Column('vendor_id', sa.String(length=36), nullable=True),
        sa.Column('type', sa.String(length=20), server_default='general', nullable=False),
        sa.Column('rating', sa.Integer(), nullable=True),
        sa.Column('message', sa.Text(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('rating IS NULL OR (rating >= 1 AND rating <= 5)', name='feedback_rating_check'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_feedback_vendor_id', 'feedback', ['vendor_id'])

    op.create_table('notifications',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('type', sa.String(length=20), server_default='info', nullable=False),
        sa.Column('target_audience', sa.String(length=20), nullable=False),
        sa.Column('vendor_ids', postgresql.JSONB(astext_type=sa.Text()), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column('image_url', sa.String(length=500), nullable=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('created_by', sa.String(length=64), nullable=False),
        sa.Column('created_by_role', sa.String(length=20), nullable=False),
        sa.Column('read_by', postgresql.JSONB(astext_type=sa.Text()), server_default=sa.text("'[]'::jsonb"), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table('sliders',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('kind', sa.String(length=20), server_default='home', nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('subtitle', sa.String(length=300), nullable=True),
        sa.Column('image_url', sa.String(length=500), nullable=True),
        sa.Column('category_id', sa.String(length=36), nullable=True),
        sa.Column('link', sa.String(length=500), nullable=True),
        sa.Column('position', sa.Integer(), server_default='0', nullable=False),
        sa.Column('status', sa.String(length=20), server_default='active', nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )


def downgrade():
    op.drop_table('sliders')
    op.drop_table('notifications')
    op.drop_index('ix_feedback_vendor_id', table_name='feedback')
    op.drop_table('feedback')
    op.drop_index('ix_orders_customer_id', table_name='orders')
    op.drop_index('ix_orders_owner_id', table_name='orders')
    op.drop_table('orders')
    op.drop_index('ix_coupons_owner_id', table_name='coupons')
    op.drop_index('ix_coupons_code', table_name='coupons')
    op.drop_table('coupons')
    op.drop_index('ix_products_category_id', table_name='products')
    op.drop_index('ix_products_owner_id', table_name='products')
    op.drop_table('products')
    op.drop_index('categories_owner_parent_idx', table_name='categories')
    op.drop_index('ix_categories_parent_id', table_name='categories')
    op.drop_table('categories')
    op.drop_index('ix_vendors_credential_ref', table_name='vendors')
    op.drop_index('ix_vendors_lifecycle_state', table_name='vendors')
    op.drop_index('ix_vendors_email', table_name='vendors')
    op.drop_table('vendors')
    op.drop_index('ix_admins_credential_ref', table_name='admins')
    op.drop_index('ix_admins_email', table_name='admins')
    op.drop_table('admins')
