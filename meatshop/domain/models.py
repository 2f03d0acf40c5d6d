import enum

from sqlalchemy import (
    Boolean, Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from werkzeug.security import check_password_hash, generate_password_hash

from meatshop.infrastructure.database import Base


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# completed and cancelled are terminal
ORDER_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.COMPLETED, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.COMPLETED, OrderStatus.CANCELLED},
    OrderStatus.COMPLETED: set(),
    OrderStatus.CANCELLED: set(),
}


def can_transition(current: OrderStatus, requested: OrderStatus) -> bool:
    return current == requested or requested in ORDER_TRANSITIONS[current]


class PaymentMethod(str, enum.Enum):
    BANK_TRANSFER = "bank_transfer"


PASSWORD_HASH_METHOD = "pbkdf2:sha256:100000"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(120), unique=True, nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    password = Column(String(255), nullable=False)  # werkzeug "method$salt$hash"
    name = Column(String(120))
    phone = Column(String(50))
    is_admin = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def set_password(self, raw: str) -> None:
        self.password = generate_password_hash(raw, method=PASSWORD_HASH_METHOD)

    def check_password(self, raw: str) -> bool:
        return bool(self.password) and check_password_hash(self.password, raw)


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    # Default (Mongolian) text plus translations
    name = Column(String(200), nullable=False)
    name_ru = Column(String(200))
    name_en = Column(String(200))
    description = Column(Text, nullable=False, default="")
    description_ru = Column(Text)
    description_en = Column(Text)

    category = Column(String(120), nullable=False, index=True)
    price = Column(Numeric(12, 2), nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    min_order_quantity = Column(Numeric(10, 2), default=1)  # kg
    image_url = Column(Text, nullable=False, default="")
    store_id = Column(Integer)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)  # NULL for guests
    customer_name = Column(String(120), nullable=False)
    customer_email = Column(String(255), nullable=False)
    customer_phone = Column(String(50), nullable=False)
    customer_address = Column(Text, nullable=False)
    payment_method = Column(String(30), nullable=False, default=PaymentMethod.BANK_TRANSFER.value)
    total_amount = Column(Numeric(12, 2), nullable=False)
    status = Column(String(20), nullable=False, default=OrderStatus.PENDING.value, index=True)
    idempotency_key = Column(String(128), unique=True, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    items = relationship(
        "OrderItem", back_populates="order", cascade="all, delete-orphan", order_by="OrderItem.id"
    )


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    # No FK: items outlive deleted products
    product_id = Column(Integer, nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)  # unit price at order time

    order = relationship("Order", back_populates="items")
    product = relationship(
        "Product",
        primaryjoin="foreign(OrderItem.product_id) == Product.id",
        viewonly=True,
    )


class NonDeliveryDay(Base):
    __tablename__ = "non_delivery_days"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, nullable=False)
    reason = Column(String(255), nullable=False)
    is_recurring_yearly = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class DeliverySetting(Base):
    __tablename__ = "delivery_settings"

    id = Column(Integer, primary_key=True, index=True)
    cutoff_hour = Column(Integer, nullable=False, default=18)
    cutoff_minute = Column(Integer, nullable=False, default=30)
    processing_days = Column(Integer, nullable=False, default=1)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class BankAccount(Base):
    __tablename__ = "bank_accounts"

    id = Column(Integer, primary_key=True, index=True)
    bank_name = Column(String(120), nullable=False)
    account_number = Column(String(64), nullable=False)
    account_holder = Column(String(120), nullable=False)
    description = Column(Text)
    is_default = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class MediaItem(Base):
    __tablename__ = "media_library"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    type = Column(String(120), nullable=False)
    url = Column(Text, nullable=False)
    storage_key = Column(Text, nullable=False)
    size = Column(Integer)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
