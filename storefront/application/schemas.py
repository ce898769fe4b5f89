import math
from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Any, Optional

# Largest value the INTEGER columns hold
MAX_DB_INT = 2**31 - 1

def round_half_up(number: float) -> int:
    return int(math.floor(number + 0.5))

def parse_price(value: Any) -> int:
    """Round a submitted price to a whole number of minor units (half up)."""
    if isinstance(value, bool):
        raise ValueError("price must be a number")
    number = float(value)
    if math.isnan(number) or math.isinf(number):
        raise ValueError("price must be a finite number")
    if number < 0:
        raise ValueError("price must not be negative")
    rounded = round_half_up(number)
    if rounded > MAX_DB_INT:
        raise ValueError(f"price must not exceed {MAX_DB_INT}")
    return rounded

class CamelModel(BaseModel):
    """Snake-case attributes, camelCase on the wire."""
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True

# Articles

class ArticleCreate(CamelModel):
    title: str
    description: Optional[str] = None
    price: int
    image_url: Optional[str] = None

class ArticleUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[int] = None
    image_url: Optional[str] = None
    glb_url: Optional[str] = None

    @field_validator("price", mode="before")
    @classmethod
    def _round_price(cls, value):
        if value is None:
            return None
        try:
            return parse_price(value)
        except (TypeError, ValueError) as e:
            raise ValueError(str(e)) from e

class ArticleRead(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    price: int
    image_url: Optional[str] = None
    glb_url: Optional[str] = None
    created_at: Optional[datetime] = None

class DeleteResult(BaseModel):
    success: bool

# Orders

class OrderItemIn(CamelModel):
    article_id: int = Field(ge=1, le=MAX_DB_INT)
    quantity: int = Field(gt=0, le=MAX_DB_INT)

class OrderCreate(CamelModel):
    items: Optional[list[OrderItemIn]] = None

class OrderPatch(CamelModel):
    items: Optional[list[OrderItemIn]] = None
    status: Optional[str] = Field(None, min_length=1, max_length=255)

class OrderItemRead(CamelModel):
    id: int
    order_id: int
    article_id: int
    quantity: int
    created_at: Optional[datetime] = None

class OrderItemDetail(OrderItemRead):
    article: Optional[ArticleRead] = None

class SubmittedItem(CamelModel):
    order_id: int
    article_id: int
    quantity: int

class OrderBase(CamelModel):
    id: int
    user_id: int
    created_at: Optional[datetime] = None
    status: str

class OrderRead(OrderBase):
    items: list[OrderItemRead] = []

class OrderDetail(OrderBase):
    items: list[OrderItemDetail] = []

class OrderCreated(OrderBase):
    # Echo of the submitted items; they carry no generated ids
    items: list[SubmittedItem] = []

# Payments

class PaymentSheetRequest(CamelModel):
    amount: float = Field(gt=0, le=MAX_DB_INT / 100)
    currency: str = Field(min_length=3, max_length=3)
    email: Optional[str] = None

class PaymentSheetResponse(CamelModel):
    payment_intent: str
    ephemeral_key: str
    customer: str
    publishable_key: str

# Identity provider webhooks (payload keys are snake_case on the wire)

class ClerkEmailAddress(BaseModel):
    id: Optional[str] = None
    email_address: Optional[str] = None

class ClerkUserData(BaseModel):
    id: Optional[str] = None
    primary_email_address_id: Optional[str] = None
    email_addresses: list[ClerkEmailAddress] = []

class ClerkWebhookEvent(BaseModel):
    type: Optional[str] = None
    data: Optional[ClerkUserData] = None

class WebhookResult(BaseModel):
    created: bool
