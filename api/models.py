"""
API request and response models for Lampshop Admin REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in catalog/models.py,
which own the internal domain representation. Route handlers map between the
two with the to_domain() / from_domain() helpers defined here.

Wire format: camelCase JSON (categoryId, stockQty, createdAt, ...) to match
the admin frontend. Requests may also use the snake_case field names.
"""

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictFloat, StrictInt, StrictStr
from pydantic.alias_generators import to_camel

from catalog.models import AttributeOption, Category, Order, OrderItem, OrderStatus, Product

# Attribute bag values on the wire: number, string or boolean. Strict types
# keep pydantic from coercing "7" to 7 or 1 to True.
AttributeValueIn = Union[StrictBool, StrictInt, StrictFloat, StrictStr]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    """Request body for POST /login."""

    username: str = Field(max_length=255)
    password: str = Field(max_length=255)


class LoginResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    token: str


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------


class ProductIn(_CamelModel):
    """Request body for POST /products and PUT /products/{id}.

    PUT is a full replace: omitted fields fall back to these defaults rather
    than keeping the stored value.
    """

    sku: str = ""
    name: str = ""
    description: str = ""
    category_id: str = ""
    is_active: bool = False
    image_url: str = ""
    price: float = Field(default=0, ge=0)
    stock_qty: int = 0
    attributes: dict[str, AttributeValueIn] = Field(default_factory=dict)

    def to_domain(self) -> Product:
        return Product(
            sku=self.sku,
            name=self.name,
            description=self.description,
            category_id=self.category_id,
            is_active=self.is_active,
            image_url=self.image_url,
            price=self.price,
            stock_qty=self.stock_qty,
            attributes=dict(self.attributes),
        )


class ProductResponse(_CamelModel):
    id: int
    sku: str
    name: str
    description: str
    category_id: str
    is_active: bool
    image_url: str
    price: float
    stock_qty: int
    attributes: dict[str, AttributeValueIn]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, product: Product) -> "ProductResponse":
        return cls(
            id=product.id,
            sku=product.sku,
            name=product.name,
            description=product.description,
            category_id=product.category_id,
            is_active=product.is_active,
            image_url=product.image_url,
            price=product.price,
            stock_qty=product.stock_qty,
            attributes=product.attributes,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


class OrderItemModel(_CamelModel):
    product_id: int
    quantity: int = Field(gt=0)


class OrderIn(_CamelModel):
    """Request body for POST /orders."""

    customer_name: str = Field(default="", max_length=255)
    items: list[OrderItemModel] = Field(default_factory=list)
    total_price: float = Field(default=0, ge=0)
    status: OrderStatus = OrderStatus.pending

    def to_domain(self) -> Order:
        return Order(
            customer_name=self.customer_name,
            items=[OrderItem(product_id=i.product_id, quantity=i.quantity) for i in self.items],
            total_price=self.total_price,
            status=self.status,
        )


class OrderStatusUpdate(BaseModel):
    """Request body for PUT /orders/{id}/status. Any status may follow any other."""

    status: OrderStatus


class OrderResponse(_CamelModel):
    id: int
    customer_name: str
    items: list[OrderItemModel]
    total_price: float
    status: OrderStatus
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, order: Order) -> "OrderResponse":
        return cls(
            id=order.id,
            customer_name=order.customer_name,
            items=[OrderItemModel(product_id=i.product_id, quantity=i.quantity) for i in order.items],
            total_price=order.total_price,
            status=order.status,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


# ---------------------------------------------------------------------------
# Reference data
# ---------------------------------------------------------------------------


class CategoryResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str

    @classmethod
    def from_domain(cls, category: Category) -> "CategoryResponse":
        return cls(id=category.id, name=category.name)


class AttributeOptionResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    type: str

    @classmethod
    def from_domain(cls, option: AttributeOption) -> "AttributeOptionResponse":
        return cls(key=option.key, label=option.label, type=option.type)


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str
    counts: dict[str, int] = Field(default_factory=dict)
