# parse gateway JSON into models, and models back into request bodies
from __future__ import annotations

import json
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from api import models
from api.errors import MalformedPayload


def _require(data: Any, key: str, what: str) -> Any:
    if not isinstance(data, dict):
        raise MalformedPayload(f"Unexpected {what} payload from server.")
    if data.get(key) is None:
        raise MalformedPayload(f"Unexpected {what} payload from server (missing '{key}').")
    return data[key]


def _to_int(val, what: str) -> int:
    try:
        return int(val)
    except (TypeError, ValueError, OverflowError):
        raise MalformedPayload(f"Unexpected {what} payload from server.") from None


def _to_decimal(val, what: str) -> Decimal:
    # go through str() so 19.99 stays 19.99
    try:
        amount = Decimal(str(val))
    except (InvalidOperation, ValueError):
        raise MalformedPayload(f"Unexpected {what} payload from server.") from None
    if not amount.is_finite():
        raise MalformedPayload(f"Unexpected {what} payload from server.")
    return amount


def _to_datetime(val, what: str) -> Optional[datetime]:
    if not val:
        return None
    if isinstance(val, list):
        # jackson without JavaTimeModule: [y, m, d, h, mi, s, ns]
        try:
            return datetime(*[int(p) for p in val[:6]])
        except (TypeError, ValueError, OverflowError):
            raise MalformedPayload(f"Unexpected {what} payload from server (bad date).") from None
    try:
        return datetime.fromisoformat(str(val).replace("Z", "+00:00"))
    except ValueError:
        return None


def _as_list(data: Any, what: str) -> List[Any]:
    if data is None:
        return []
    if not isinstance(data, list):
        raise MalformedPayload(f"Unexpected {what} payload from server.")
    return data


# ---------------------------
# Auth & Users
# ---------------------------


def parse_login(data: Any) -> models.LoginResult:
    return models.LoginResult(
        token=str(_require(data, "token", "login")),
        user_id=_to_int(_require(data, "userId", "login"), "login"),
        email=str(_require(data, "email", "login")),
        role=str(data.get("role") or ""),
    )


def parse_user(data: Any) -> models.User:
    """Parse a user-service record (UserResponseDTO) into a User."""
    user_id = _to_int(_require(data, "id", "user"), "user")
    email = str(data.get("email") or "")
    roles = data.get("roles")
    if roles is None:
        roles = [data["role"]] if data.get("role") else []
    permissions = data.get("permissions") or []
    if not isinstance(roles, list) or not isinstance(permissions, list):
        raise MalformedPayload("Unexpected user payload from server (roles).")
    return models.User(
        id=user_id,
        username=data.get("username") or email,
        email=email,
        first_name=data.get("firstName"),
        last_name=data.get("lastName"),
        roles=frozenset(str(r) for r in roles),
        permissions=frozenset(str(p) for p in permissions),
        shipping_address=data.get("shippingAddress"),
        phone=data.get("phone"),
    )


def parse_users(data: Any) -> List[models.User]:
    return [parse_user(u) for u in _as_list(data, "user list")]


def user_from_login(result: models.LoginResult) -> models.User:
    return models.User(
        id=result.user_id,
        username=result.email,
        email=result.email,
        roles=frozenset([result.role]) if result.role else frozenset(),
    )


def dump_user(user: models.User) -> str:
    """Serialize a User for the credential store."""
    return json.dumps(
        {
            "id": user.id,
            "username": user.username,
            "email": user.email,
            "firstName": user.first_name,
            "lastName": user.last_name,
            "roles": sorted(user.roles),
            "permissions": sorted(user.permissions),
            "shippingAddress": user.shipping_address,
            "phone": user.phone,
        }
    )


def load_user(raw: str) -> models.User:
    """Inverse of dump_user. Raises MalformedPayload on a corrupt record."""
    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        raise MalformedPayload("Stored user record is corrupt.") from None
    return parse_user(data)


def new_user_body(new_user: models.NewUser) -> Dict[str, Any]:
    body = {
        "email": new_user.email,
        "password": new_user.password,
        "firstName": new_user.first_name,
        "lastName": new_user.last_name,
        "shippingAddress": new_user.shipping_address,
        "phone": new_user.phone,
    }
    return {k: v for k, v in body.items() if v is not None}


def profile_update_body(update: models.ProfileUpdate) -> Dict[str, Any]:
    body = {
        "firstName": update.first_name,
        "lastName": update.last_name,
        "shippingAddress": update.shipping_address,
        "phone": update.phone,
    }
    return {k: v for k, v in body.items() if v is not None}


# ---------------------------
# Products & Categories
# ---------------------------


def parse_category(data: Any) -> models.Category:
    return models.Category(
        id=_to_int(_require(data, "id", "category"), "category"),
        name=str(data.get("name") or ""),
    )


def parse_product(data: Any) -> models.Product:
    category = data.get("productCategory") if isinstance(data, dict) else None
    return models.Product(
        id=_to_int(_require(data, "id", "product"), "product"),
        name=str(_require(data, "name", "product")),
        price=_to_decimal(_require(data, "price", "product"), "product"),
        description=data.get("description") or "",
        image_url=data.get("imageUrl"),
        stock_quantity=_to_int(data.get("stockQuantity") or 0, "product"),
        manufacturer=data.get("manufacturer") or "",
        category=parse_category(category) if category else None,
        created_at=_to_datetime(data.get("createdAt"), "product"),
        updated_at=_to_datetime(data.get("updatedAt"), "product"),
    )


def parse_products(data: Any) -> List[models.Product]:
    return [parse_product(p) for p in _as_list(data, "product list")]


def parse_categories(data: Any) -> List[models.Category]:
    return [parse_category(c) for c in _as_list(data, "category list")]


def product_draft_body(draft: models.ProductDraft) -> Dict[str, Any]:
    return {
        "name": draft.name,
        "description": draft.description,
        "price": float(draft.price),
        "stockQuantity": draft.stock_quantity,
        "imageUrl": draft.image_url,
        "manufacturer": draft.manufacturer,
        "categoryId": draft.category_id,
    }


# ---------------------------
# Cart
# ---------------------------


def parse_cart_item(data: Any) -> models.CartItem:
    quantity = _to_int(_require(data, "quantity", "cart item"), "cart item")
    if quantity < 1:
        raise MalformedPayload("Unexpected cart item payload from server (quantity < 1).")
    product = models.ProductSummary(
        id=_to_int(_require(data, "productId", "cart item"), "cart item"),
        name=str(data.get("productName") or ""),
        price=_to_decimal(_require(data, "price", "cart item"), "cart item"),
        image_url=data.get("productImageUrl"),
    )
    return models.CartItem(
        product=product,
        quantity=quantity,
        subtotal=_to_decimal(_require(data, "subtotal", "cart item"), "cart item"),
    )


def parse_cart(data: Any) -> models.Cart:
    if not isinstance(data, dict):
        raise MalformedPayload("Unexpected cart payload from server.")
    items = _as_list(data.get("items"), "cart")
    return models.Cart(items=tuple(parse_cart_item(i) for i in items))


# ---------------------------
# Orders
# ---------------------------


def parse_order_line(data: Any) -> models.OrderLineItem:
    return models.OrderLineItem(
        id=_to_int(_require(data, "id", "order line"), "order line"),
        product_id=_to_int(_require(data, "productId", "order line"), "order line"),
        quantity=_to_int(_require(data, "quantity", "order line"), "order line"),
        price=_to_decimal(data.get("price") or 0, "order line"),
    )


def parse_order(data: Any) -> models.Order:
    status = str(_require(data, "status", "order")).upper()
    if status not in models.ORDER_STATUSES:
        raise MalformedPayload(f"Unknown order status '{status}'.")
    user_id = data.get("userId")
    return models.Order(
        id=_to_int(_require(data, "id", "order"), "order"),
        order_number=str(data.get("orderNumber") or ""),
        total_price=_to_decimal(data.get("totalPrice") or 0, "order"),
        order_date=_to_datetime(data.get("orderDate"), "order"),
        status=status,  # type: ignore[arg-type]
        user_id=_to_int(user_id, "order") if user_id is not None else None,
        line_items=tuple(
            parse_order_line(li) for li in _as_list(data.get("orderLineItems"), "order")
        ),
    )


def parse_orders(data: Any) -> List[models.Order]:
    return [parse_order(o) for o in _as_list(data, "order list")]


def order_request_body(cart: models.Cart) -> Dict[str, Any]:
    return {
        "orderLineItemsDtoList": [
            {"productId": item.product.id, "quantity": item.quantity}
            for item in cart.items
        ]
    }
