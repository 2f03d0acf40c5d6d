"""
Order payload normalization.

Two body shapes reach POST /api/orders:

  1. checkout page:  {"orderData": {...}, "cartItems": [...]}
  2. direct clients: {"customerName": ..., ..., "items": [...]}

Both are turned into a single NewOrder here so nothing past the router
has to care which one arrived.
"""
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from meatshop.domain.errors import EmptyOrderError, InvalidOrderPayload
from meatshop.domain.schemas import NewOrder

CHECKOUT_SHAPE = "checkout"
DIRECT_SHAPE = "direct"


def detect_shape(body: Any) -> str:
    if not isinstance(body, dict):
        raise InvalidOrderPayload("Order payload must be a JSON object")
    if "orderData" in body and "cartItems" in body:
        return CHECKOUT_SHAPE
    if "items" in body:
        return DIRECT_SHAPE
    raise EmptyOrderError()


def parse_order_payload(body: Any, user_id: Optional[int] = None) -> NewOrder:
    shape = detect_shape(body)

    if shape == CHECKOUT_SHAPE:
        header, items = body["orderData"], body["cartItems"]
        if not isinstance(header, dict):
            raise InvalidOrderPayload("orderData must be an object")
    else:
        header = {k: v for k, v in body.items() if k != "items"}
        items = body["items"]

    if not isinstance(items, list) or not items:
        raise EmptyOrderError()

    # The owner comes from the session, never from the body
    header = {k: v for k, v in header.items() if k not in ("userId", "user_id")}

    try:
        return NewOrder.model_validate({**header, "items": items, "user_id": user_id})
    except PydanticValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise InvalidOrderPayload(f"Invalid order: {problems}") from e
