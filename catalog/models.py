"""
catalog/models.py -- Domain dataclasses for the Lampshop catalog.

These are pure data containers with zero logic. Identifier assignment,
timestamps and locking live in catalog/store.py; category reference data lives
in catalog/reference.py.

Separation of concerns: these dataclasses are the catalog's domain truth. The
Pydantic models in api/models.py are the HTTP contract and map to/from these.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Union

# Attribute bag values: a tagged union of number, string and boolean.
# bool is listed first because bool is a subclass of int.
AttributeValue = Union[bool, int, float, str]


class OrderStatus(str, Enum):
    """Order lifecycle labels. Any value may follow any other value."""

    pending = "Pending"
    processing = "Processing"
    shipped = "Shipped"
    delivered = "Delivered"


@dataclass
class Product:
    """A catalog item.

    category_id is informational -- it is not checked against the category
    reference data. attributes is category-dependent and opaque to the store.

    id, created_at and updated_at are assigned by the store; values supplied
    by the caller on create are ignored.
    """

    sku: str
    name: str
    price: float
    stock_qty: int
    description: str = ""
    category_id: str = ""
    is_active: bool = True
    image_url: str = ""
    attributes: dict[str, AttributeValue] = field(default_factory=dict)
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class OrderItem:
    product_id: int  # not validated against the product store
    quantity: int


@dataclass
class Order:
    """A customer order.

    status transitions are unconstrained -- patch_status() accepts any
    OrderStatus regardless of the current one.
    """

    customer_name: str
    items: list[OrderItem] = field(default_factory=list)
    total_price: float = 0.0
    status: OrderStatus = OrderStatus.pending
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class Category:
    id: str
    name: str


@dataclass(frozen=True)
class AttributeOption:
    """One attribute a product in a category may carry."""

    key: str
    label: str
    type: str  # "text" | "number"
