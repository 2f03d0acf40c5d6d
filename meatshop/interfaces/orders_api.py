import json
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from meatshop.application.container import Services
from meatshop.domain.errors import InvalidOrderPayload, PermissionDenied
from meatshop.domain.schemas import OrderOut, OrderStatusUpdate, PendingCount
from meatshop.interfaces.dependencies import (
    RequestContext, get_request_context, get_services, require_admin, require_auth,
)
from meatshop.interfaces.order_payload import parse_order_payload

router = APIRouter(prefix="/api", tags=["orders"])
logger = logging.getLogger(__name__)


@router.get("/orders", response_model=List[OrderOut])
def list_orders(
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    services: Services = Depends(get_services),
    ctx: RequestContext = Depends(require_admin),
):
    return services.orders.list_orders(start=start_date, end=end_date)


@router.get("/orders/pending-count", response_model=PendingCount)
def pending_count(services: Services = Depends(get_services), ctx: RequestContext = Depends(require_admin)):
    return PendingCount(count=services.orders.pending_count())


@router.get("/orders/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    services: Services = Depends(get_services),
    ctx: RequestContext = Depends(require_auth),
):
    order = services.orders.get_order_with_items(order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")

    # Admins see everything, customers only their own orders
    if not ctx.can_view_order(order.user_id):
        raise PermissionDenied("Unauthorized")
    return order


@router.post("/orders", response_model=OrderOut, status_code=201)
async def create_order(
    request: Request,
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key", max_length=128),
    services: Services = Depends(get_services),
    ctx: RequestContext = Depends(get_request_context),
):
    """
    Guest checkout is allowed. Accepts {orderData, cartItems} or {..., items}.
    Resending the same body with the same Idempotency-Key returns the first order.
    """
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise InvalidOrderPayload("Invalid JSON body")

    new_order = parse_order_payload(body, user_id=ctx.user.id if ctx.user else None)
    order, created = await run_in_threadpool(services.checkout.place_order, new_order, idempotency_key)

    headers = {"Location": f"/api/orders/{order.id}"}
    if not created:
        headers["Idempotent-Replayed"] = "true"
    return JSONResponse(
        content=order.model_dump(mode="json", by_alias=True),
        status_code=201,
        headers=headers,
    )


@router.patch("/orders/{order_id}/status", response_model=OrderOut)
def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    services: Services = Depends(get_services),
    ctx: RequestContext = Depends(require_admin),
):
    order = services.orders.update_status(order_id, payload.status.value)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    logger.info("Admin %s set order %s to %s", ctx.user.id, order_id, order.status)
    return order
