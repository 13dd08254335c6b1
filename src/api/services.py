# src/api/services.py
# one coroutine per backend endpoint; callers own the state, these only talk http
from __future__ import annotations

from typing import List

from api import gateway as gw
from api import models, payloads
from api.gateway import Gateway

AUTH_MESSAGES = {
    400: "Please check the information you entered.",
    401: "Invalid email or password.",
    500: "Authentication service is currently unavailable, please try again later.",
}

USER_MESSAGES = {
    400: "Invalid profile data.",
    404: "User not found.",
    500: "User service unavailable. Please try again later.",
}

CART_MESSAGES = {
    400: "Product unavailable or insufficient stock.",
    404: "Item is not in your cart.",
    500: "Cart service unavailable. Please try again later.",
}

ORDER_MESSAGES = {
    400: "Cart validation failed (empty cart, unavailable product, or insufficient stock).",
    404: "Order not found.",
    500: "Order service unavailable. Please try again later.",
}

PRODUCT_MESSAGES = {
    400: "Invalid product data.",
    404: "Product not found.",
    500: "Product service unavailable. Please try again later.",
}


# ---------------------------
# Auth & Registration
# ---------------------------


async def login(api: Gateway, email: str, password: str) -> models.LoginResult:
    data = await api.post(
        f"{gw.AUTH}/login",
        json={"email": email, "password": password},
        messages=AUTH_MESSAGES,
    )
    return payloads.parse_login(data)


async def register(api: Gateway, new_user: models.NewUser) -> models.User:
    data = await api.post(
        f"{gw.AUTH}/register",
        json=payloads.new_user_body(new_user),
        messages=AUTH_MESSAGES,
    )
    return payloads.parse_user(data)


async def logout(api: Gateway, refresh_token: str) -> None:
    await api.post(
        f"{gw.AUTH}/logout",
        json={"refreshToken": refresh_token},
        messages=AUTH_MESSAGES,
    )


# ---------------------------
# Users
# ---------------------------


async def get_user(api: Gateway, user_id: int) -> models.User:
    data = await api.get(f"{gw.USERS}/{user_id}", messages=USER_MESSAGES)
    return payloads.parse_user(data)


async def update_user(
    api: Gateway, user_id: int, update: models.ProfileUpdate
) -> models.User:
    data = await api.put(
        f"{gw.USERS}/{user_id}",
        json=payloads.profile_update_body(update),
        messages=USER_MESSAGES,
    )
    return payloads.parse_user(data)


async def delete_user(api: Gateway, user_id: int) -> None:
    await api.delete(f"{gw.USERS}/{user_id}", messages=USER_MESSAGES)


async def list_users(api: Gateway) -> List[models.User]:
    return payloads.parse_users(await api.get(gw.USERS, messages=USER_MESSAGES))


async def update_user_role(api: Gateway, user_id: int, role: str) -> models.User:
    data = await api.put(
        f"{gw.USERS}/{user_id}/role",
        params={"role": role},
        messages=USER_MESSAGES,
    )
    return payloads.parse_user(data)


# ---------------------------
# Cart
# ---------------------------


async def get_cart(api: Gateway) -> models.Cart:
    return payloads.parse_cart(await api.get(gw.CART, messages=CART_MESSAGES))


async def add_cart_item(api: Gateway, product_id: int, quantity: int) -> models.Cart:
    data = await api.post(
        f"{gw.CART}/items",
        params={"productId": product_id, "quantity": quantity},
        messages=CART_MESSAGES,
    )
    return payloads.parse_cart(data)


async def update_cart_item(api: Gateway, product_id: int, quantity: int) -> models.Cart:
    data = await api.put(
        f"{gw.CART}/items",
        params={"productId": product_id, "quantity": quantity},
        messages=CART_MESSAGES,
    )
    return payloads.parse_cart(data)


async def remove_cart_item(api: Gateway, product_id: int) -> models.Cart:
    data = await api.delete(f"{gw.CART}/items/{product_id}", messages=CART_MESSAGES)
    return payloads.parse_cart(data)


async def clear_cart(api: Gateway) -> None:
    await api.delete(gw.CART, messages=CART_MESSAGES)


# ---------------------------
# Orders
# ---------------------------


async def create_order(api: Gateway, cart: models.Cart) -> models.Order:
    data = await api.post(
        gw.ORDERS, json=payloads.order_request_body(cart), messages=ORDER_MESSAGES
    )
    return payloads.parse_order(data)


async def list_orders(api: Gateway) -> List[models.Order]:
    return payloads.parse_orders(await api.get(gw.ORDERS, messages=ORDER_MESSAGES))


async def get_order(api: Gateway, order_id: int) -> models.Order:
    data = await api.get(f"{gw.ORDERS}/{order_id}", messages=ORDER_MESSAGES)
    return payloads.parse_order(data)


async def update_order_status(
    api: Gateway, order_id: int, status: models.OrderStatus
) -> models.Order:
    # the order service strips the quotes off the JSON string body
    data = await api.put(
        f"{gw.ORDERS}/{order_id}/status", json=status, messages=ORDER_MESSAGES
    )
    return payloads.parse_order(data)


# ---------------------------
# Products & Categories
# ---------------------------


async def product_service_status(api: Gateway) -> str:
    """Plain-text status line of the product service."""
    text = await api.get(
        f"{gw.PRODUCTS}/status", messages=PRODUCT_MESSAGES, expect_json=False
    )
    return text or ""


async def list_products(api: Gateway) -> List[models.Product]:
    return payloads.parse_products(await api.get(gw.PRODUCTS, messages=PRODUCT_MESSAGES))


async def get_product(api: Gateway, product_id: int) -> models.Product:
    data = await api.get(f"{gw.PRODUCTS}/{product_id}", messages=PRODUCT_MESSAGES)
    return payloads.parse_product(data)


async def create_product(api: Gateway, draft: models.ProductDraft) -> models.Product:
    data = await api.post(
        gw.PRODUCTS, json=payloads.product_draft_body(draft), messages=PRODUCT_MESSAGES
    )
    return payloads.parse_product(data)


async def update_product(
    api: Gateway, product_id: int, draft: models.ProductDraft
) -> models.Product:
    data = await api.put(
        f"{gw.PRODUCTS}/{product_id}",
        json=payloads.product_draft_body(draft),
        messages=PRODUCT_MESSAGES,
    )
    return payloads.parse_product(data)


async def delete_product(api: Gateway, product_id: int) -> None:
    await api.delete(f"{gw.PRODUCTS}/{product_id}", messages=PRODUCT_MESSAGES)


async def list_categories(api: Gateway) -> List[models.Category]:
    data = await api.get(gw.CATEGORIES, messages=PRODUCT_MESSAGES)
    return payloads.parse_categories(data)
