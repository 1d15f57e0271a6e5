from sqlalchemy import (
    Boolean,
    String,
    Text,
    DateTime,
    CheckConstraint,
    Index,
    Float,
    Integer
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.ext.declarative import declarative_base
from datetime import datetime, timezone
from typing import Optional
import uuid

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(True),
        default=_utcnow,
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False
    )


class AdminAccount(TimestampMixin, Base):
    """
    Dashboard administrators backed by a Supabase Auth account.
    The main admin is configured through the environment and has no row here.
    """
    __tablename__ = "admins"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    name: Mapped[Optional[str]] = mapped_column(String(100))

    # Supabase Auth user id, repaired on login when stale
    credential_ref: Mapped[Optional[str]] = mapped_column(String(64), index=True)
    last_login_at: Mapped[Optional[datetime]] = mapped_column(DateTime(True))


class Vendor(TimestampMixin, Base):
    """
    Restaurant / seller account. Rows are never removed; `deleted` is a soft state.
    """
    __tablename__ = "vendors"
    __table_args__ = (
        CheckConstraint(
            "lifecycle_state IN ('pending', 'active', 'suspended', 'rejected', 'deleted')",
            name="vendors_lifecycle_state_check",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    restaurant_name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(20))
    address: Mapped[Optional[str]] = mapped_column(Text)
    latitude: Mapped[Optional[float]] = mapped_column(Float)
    longitude: Mapped[Optional[float]] = mapped_column(Float)

    lifecycle_state: Mapped[str] = mapped_column(String(20), default="pending", nullable=False, index=True)
    credential_ref: Mapped[Optional[str]] = mapped_column(String(64), index=True)

    approved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(True))
    rejected_at: Mapped[Optional[datetime]] = mapped_column(DateTime(True))
    suspended_at: Mapped[Optional[datetime]] = mapped_column(DateTime(True))
    reinstated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(True))
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(True))


class Category(TimestampMixin, Base):
    """
    Product category. Main categories have no parent; two nested levels are allowed below them.
    """
    __tablename__ = "categories"
    __table_args__ = (
        Index("categories_owner_parent_idx", "owner_id", "parent_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    image_url: Mapped[Optional[str]] = mapped_column(String(500))
    food_type: Mapped[str] = mapped_column(String(20), default="both", nullable=False)

    # Vendor id, or "admin" for global categories
    owner_id: Mapped[str] = mapped_column(String(64), nullable=False)
    parent_id: Mapped[Optional[str]] = mapped_column(String(36), index=True)
    is_global: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    approval_state: Mapped[str] = mapped_column(String(20), default="pending", nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class Product(TimestampMixin, Base):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("selling_price <= original_price", name="products_non_negative_discount"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    owner_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    category_id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    image_url: Mapped[Optional[str]] = mapped_column(String(500))
    food_type: Mapped[str] = mapped_column(String(20), default="veg", nullable=False)
    unit: Mapped[Optional[str]] = mapped_column(String(50))
    size: Mapped[Optional[str]] = mapped_column(String(50))
    priority: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    original_price: Mapped[float] = mapped_column(Float, nullable=False)
    selling_price: Mapped[float] = mapped_column(Float, nullable=False)
    discount: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)

    status: Mapped[str] = mapped_column(String(20), default="available", nullable=False)
    approval_state: Mapped[str] = mapped_column(String(20), default="approved", nullable=False)

    # Tagged offer variant, e.g. {"kind": "buy_x_get_y", "buy_quantity": 2, "get_quantity": 1}
    offer: Mapped[dict] = mapped_column(JSONB, default=lambda: {"kind": "none"}, nullable=False)


class Coupon(TimestampMixin, Base):
    __tablename__ = "coupons"
    __table_args__ = (
        CheckConstraint("expires_at > active_from", name="coupons_validity_window_check"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    code: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)
    owner_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)

    discount_type: Mapped[str] = mapped_column(String(20), nullable=False)
    discount_value: Mapped[float] = mapped_column(Float, nullable=False)
    min_order_value: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    max_discount: Mapped[Optional[float]] = mapped_column(Float)
    max_uses_per_customer: Mapped[Optional[int]] = mapped_column(Integer)

    active_from: Mapped[datetime] = mapped_column(DateTime(True), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(True), nullable=False)

    # Both empty means the coupon applies to all products
    category_id: Mapped[Optional[str]] = mapped_column(String(36))
    subcategory_id: Mapped[Optional[str]] = mapped_column(String(36))

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    used_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)


class Order(TimestampMixin, Base):
    """
    Completed purchase written by the customer app. Read-only for the dashboard.
    """
    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    owner_id: Mapped[Optional[str]] = mapped_column(String(64), index=True)
    customer_id: Mapped[Optional[str]] = mapped_column(String(64), index=True)
    vendor_name: Mapped[Optional[str]] = mapped_column(String(200))
    status: Mapped[str] = mapped_column(String(30), default="placed", nullable=False)
    order_date: Mapped[datetime] = mapped_column(DateTime(True), default=_utcnow, nullable=False)
    total_amount: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)

    # receiver_name, receiver_phone, email, building_name, full_address, city, ...
    customer: Mapped[dict] = mapped_column(JSONB, default=dict, nullable=False)
    # [{product_id, name, price, quantity, discount, category_name}]
    items: Mapped[list] = mapped_column(JSONB, default=list, nullable=False)


class Feedback(TimestampMixin, Base):
    __tablename__ = "feedback"
    __table_args__ = (
        CheckConstraint("rating IS NULL OR (rating >= 1 AND rating <= 5)", name="feedback_rating_check"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_type: Mapped[str] = mapped_column(String(20), nullable=False)
    author_id: Mapped[Optional[str]] = mapped_column(String(64))
    user_name: Mapped[Optional[str]] = mapped_column(String(200))
    vendor_id: Mapped[Optional[str]] = mapped_column(String(36), index=True)
    type: Mapped[str] = mapped_column(String(20), default="general", nullable=False)
    rating: Mapped[Optional[int]] = mapped_column(Integer)
    message: Mapped[str] = mapped_column(Text, nullable=False)


class Notification(TimestampMixin, Base):
    __tablename__ = "notifications"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(20), default="info", nullable=False)
    target_audience: Mapped[str] = mapped_column(String(20), nullable=False)
    vendor_ids: Mapped[list] = mapped_column(JSONB, default=list, nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(String(500))
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(True))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_by: Mapped[str] = mapped_column(String(64), nullable=False)
    created_by_role: Mapped[str] = mapped_column(String(20), nullable=False)
    read_by: Mapped[list] = mapped_column(JSONB, default=list, nullable=False)


class Slider(TimestampMixin, Base):
    """
    Promotional banner shown on the home screen or on a category page.
    """
    __tablename__ = "sliders"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    kind: Mapped[str] = mapped_column(String(20), default="home", nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    subtitle: Mapped[Optional[str]] = mapped_column(String(300))
    image_url: Mapped[Optional[str]] = mapped_column(String(500))
    category_id: Mapped[Optional[str]] = mapped_column(String(36))
    link: Mapped[Optional[str]] = mapped_column(String(500))
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="active", nullable=False)
