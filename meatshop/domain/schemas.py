"""
API Schemas

Pydantic models for request bodies and responses. JSON uses camelCase
(the storefront client's convention); snake_case is accepted on input too.
"""
import hashlib
import json
from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, PlainSerializer, field_validator
from pydantic.alias_generators import to_camel

from meatshop.domain.models import OrderStatus, PaymentMethod

# Decimals travel as JSON numbers
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        extra="ignore",
    )


# --- Users / session ---
class UserOut(CamelModel):
    id: int
    username: str
    email: str
    name: Optional[str] = None
    phone: Optional[str] = None
    is_admin: bool = False
    created_at: Optional[datetime] = None


class LoginRequest(CamelModel):
    username: str = Field(..., min_length=1, description="Username or email")
    password: str = Field(..., min_length=1)


class RegisterRequest(CamelModel):
    username: str = Field(..., min_length=1, max_length=120)
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: Optional[str] = ""
    phone: Optional[str] = None


# --- Products ---
class ProductCreate(CamelModel):
    name: str = Field(..., min_length=1)
    name_ru: Optional[str] = ""
    name_en: Optional[str] = ""
    description: str = ""
    description_ru: Optional[str] = ""
    description_en: Optional[str] = ""
    category: str = Field(..., min_length=1)
    price: Money = Field(Decimal("0"), ge=0)
    stock: int = Field(999, ge=0)
    min_order_quantity: Money = Field(Decimal("1"), gt=0)
    image_url: str = ""
    store_id: Optional[int] = None


class ProductUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    name_ru: Optional[str] = None
    name_en: Optional[str] = None
    description: Optional[str] = None
    description_ru: Optional[str] = None
    description_en: Optional[str] = None
    category: Optional[str] = Field(None, min_length=1)
    price: Optional[Money] = Field(None, ge=0)
    stock: Optional[int] = Field(None, ge=0)
    min_order_quantity: Optional[Money] = Field(None, gt=0)
    image_url: Optional[str] = None
    store_id: Optional[int] = None


class ProductOut(CamelModel):
    id: int
    name: str
    name_ru: Optional[str] = None
    name_en: Optional[str] = None
    description: str = ""
    description_ru: Optional[str] = None
    description_en: Optional[str] = None
    category: str
    price: Money
    stock: int
    min_order_quantity: Optional[Money] = None
    image_url: str = ""
    store_id: Optional[int] = None
    created_at: Optional[datetime] = None


# --- Orders ---
class OrderItemIn(CamelModel):
    product_id: int
    quantity: int = Field(..., ge=1)
    price: Money = Field(..., ge=0, description="Unit price the customer saw")


class OrderHeaderIn(CamelModel):
    customer_name: str = Field(..., min_length=1)
    customer_email: EmailStr
    customer_phone: str = Field(..., min_length=1)
    customer_address: str = Field(..., min_length=1)
    payment_method: PaymentMethod = PaymentMethod.BANK_TRANSFER
    total_amount: Optional[Money] = Field(None, ge=0)


class NewOrder(OrderHeaderIn):
    """The one internal shape every accepted order payload is normalized to."""
    user_id: Optional[int] = None
    items: List[OrderItemIn] = []

    def items_total(self) -> Decimal:
        return sum((item.price * item.quantity for item in self.items), Decimal("0"))

    def resolved_total(self) -> Decimal:
        return self.total_amount if self.total_amount is not None else self.items_total()

    def fingerprint(self) -> str:
        """Stable hash of the order content, used to detect idempotency key reuse."""
        body = self.model_dump(mode="json", by_alias=False)
        return hashlib.sha256(json.dumps(body, sort_keys=True).encode()).hexdigest()


class OrderItemOut(CamelModel):
    id: int
    order_id: int
    product_id: int
    quantity: int
    price: Money
    product: Optional[ProductOut] = None


class OrderOut(CamelModel):
    id: int
    user_id: Optional[int] = None
    customer_name: str
    customer_email: str
    customer_phone: str
    customer_address: str
    payment_method: str
    total_amount: Money
    status: str
    created_at: Optional[datetime] = None
    items: List[OrderItemOut] = []


class OrderStatusUpdate(CamelModel):
    status: OrderStatus


class PendingCount(CamelModel):
    count: int


# --- Delivery ---
class DeliverySettingsIn(CamelModel):
    cutoff_hour: Optional[int] = Field(None, ge=0, le=23)
    cutoff_minute: Optional[int] = Field(None, ge=0, le=59)
    processing_days: Optional[int] = Field(None, ge=1)


class DeliverySettingsOut(CamelModel):
    id: Optional[int] = None
    cutoff_hour: int = Field(18, ge=0, le=23)
    cutoff_minute: int = Field(30, ge=0, le=59)
    processing_days: int = Field(1, ge=1)
    updated_at: Optional[datetime] = None


class NonDeliveryDayIn(CamelModel):
    date: date
    reason: str = Field(..., min_length=1)
    is_recurring_yearly: bool = False

    @field_validator("date", mode="before")
    @classmethod
    def _strip_time(cls, value):
        # The admin UI sends full ISO timestamps
        if isinstance(value, str) and len(value) > 10:
            return value[:10]
        if isinstance(value, datetime):
            return value.date()
        return value


class NonDeliveryDayOut(CamelModel):
    id: Optional[int] = None
    date: date
    reason: str = ""
    is_recurring_yearly: bool = False


class DeliveryEstimate(CamelModel):
    date: date
    formatted: str
    message: str
    language: str


# --- Bank accounts ---
class BankAccountIn(CamelModel):
    bank_name: str = Field(..., min_length=1)
    account_number: str = Field(..., min_length=1)
    account_holder: str = Field(..., min_length=1)
    description: Optional[str] = None
    is_default: bool = False
    is_active: bool = True

    @field_validator("description")
    @classmethod
    def _blank_is_none(cls, value):
        return value or None


class BankAccountUpdate(CamelModel):
    bank_name: Optional[str] = Field(None, min_length=1)
    account_number: Optional[str] = Field(None, min_length=1)
    account_holder: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    is_default: Optional[bool] = None
    is_active: Optional[bool] = None


class BankAccountOut(CamelModel):
    id: int
    bank_name: str
    account_number: str
    account_holder: str
    description: Optional[str] = None
    is_default: bool
    is_active: bool
    created_at: Optional[datetime] = None


# --- Media ---
class MediaItemOut(CamelModel):
    id: int
    name: str
    type: str
    url: str
    size: Optional[int] = None
    created_at: Optional[datetime] = None


class SuccessResponse(CamelModel):
    success: bool = True
    message: Optional[str] = None
