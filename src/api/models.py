# provide dataclass models for the gateway payloads

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import FrozenSet, Literal, Optional, Tuple

Role = Literal["ADMIN", "USER"]
OrderStatus = Literal["CREATED", "CONFIRMED", "CANCELED"]

ORDER_STATUSES: Tuple[OrderStatus, ...] = ("CREATED", "CONFIRMED", "CANCELED")


@dataclass(frozen=True)
class User:
    id: int
    username: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    roles: FrozenSet[str] = frozenset()
    permissions: FrozenSet[str] = frozenset()
    shipping_address: Optional[str] = None
    phone: Optional[str] = None

    @property
    def display_name(self) -> str:
        full = " ".join(p for p in (self.first_name, self.last_name) if p)
        return full or self.username


@dataclass(frozen=True)
class Session:
    is_authenticated: bool = False
    user: Optional[User] = None
    role: Optional[Role] = None

    @classmethod
    def anonymous(cls) -> "Session":
        return cls()


@dataclass(frozen=True)
class LoginResult:
    token: str
    user_id: int
    email: str
    role: str


@dataclass(frozen=True)
class Category:
    id: int
    name: str


@dataclass(frozen=True)
class ProductSummary:
    id: int
    name: str
    price: Decimal
    image_url: Optional[str] = None
    stock_quantity: int = 0  # not returned by the cart service
    manufacturer: str = ""
    category: Optional[Category] = None


@dataclass(frozen=True)
class Product(ProductSummary):
    description: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class ProductDraft:
    """Body for product create/update."""

    name: str
    price: Decimal
    stock_quantity: int
    category_id: int
    description: str = ""
    image_url: Optional[str] = None
    manufacturer: str = ""


@dataclass(frozen=True)
class CartItem:
    product: ProductSummary
    quantity: int
    subtotal: Decimal


@dataclass(frozen=True)
class Cart:
    items: Tuple[CartItem, ...] = ()

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def total(self) -> Decimal:
        return sum((item.subtotal for item in self.items), Decimal("0"))

    def find(self, product_id: int) -> Optional[CartItem]:
        for item in self.items:
            if item.product.id == product_id:
                return item
        return None

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class OrderLineItem:
    id: int
    product_id: int
    quantity: int
    price: Decimal


@dataclass(frozen=True)
class Order:
    id: int
    order_number: str
    total_price: Decimal
    order_date: Optional[datetime]
    status: OrderStatus
    user_id: Optional[int] = None
    line_items: Tuple[OrderLineItem, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class NewUser:
    """Body for self-registration."""

    email: str
    password: str
    first_name: str = ""
    last_name: str = ""
    shipping_address: Optional[str] = None
    phone: Optional[str] = None


@dataclass(frozen=True)
class ProfileUpdate:
    """Only the fields that are not None are sent."""

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    shipping_address: Optional[str] = None
    phone: Optional[str] = None
