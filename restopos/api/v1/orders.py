import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import PlainTextResponse

from restopos.api.deps import Actor, bus_for, get_actor
from restopos.models import OrderStatus
from restopos.schemas.order import (
    OrderCreatedResponse,
    OrderRequest,
    OrderStatusUpdate,
    OrderView,
    SaleRequest,
)
from restopos.schemas.response import SuccessResponse
from restopos.services.order_queries import get_order_details, load_kitchen_orders, load_orders
from restopos.services.order_service import create_order, transition_order
from restopos.services.receipt import format_receipt
from restopos.services.sale_service import sell

router = APIRouter()
log = logging.getLogger(__name__)


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def create_order_endpoint(request_data: OrderRequest, actor: Actor = Depends(get_actor)):
    """Sends a table-service order to the kitchen and seats the table."""
    order_id = await create_order(
        table_id=request_data.table_id,
        items=request_data.items,
        creator_id=actor.id,
        bus=bus_for(actor),
    )
    log.info(f"Order {order_id} sent to kitchen by {actor.id}.")
    order = await get_order_details(order_id)
    data = OrderCreatedResponse(
        order_id=order.id,
        status=order.status,
        final_total=order.final_total,
        message="Order sent to kitchen!",
    )
    return SuccessResponse(data=data.model_dump(mode="json"))


@router.post("/sale", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def sale_endpoint(request_data: SaleRequest, actor: Actor = Depends(get_actor)):
    """Point-of-sale checkout: deducts stock and records the payment."""
    order_id = await sell(
        table_id=request_data.table_id,
        items=request_data.items,
        creator_id=actor.id,
        bus=bus_for(actor),
        payment_method=request_data.payment_method,
        discount=request_data.discount,
    )
    order = await get_order_details(order_id)
    data = OrderCreatedResponse(
        order_id=order.id,
        status=order.status,
        final_total=order.final_total,
        message="Order processed successfully!",
    )
    return SuccessResponse(data=data.model_dump(mode="json"))


@router.get("/", response_model=SuccessResponse)
async def list_orders_endpoint(status_filter: Optional[OrderStatus] = Query(None, alias="status")):
    orders = await load_orders(status_filter)
    return SuccessResponse(data=[o.model_dump(mode="json") for o in orders])


@router.get("/kitchen", response_model=SuccessResponse)
async def kitchen_orders_endpoint():
    orders = await load_kitchen_orders()
    return SuccessResponse(data=[o.model_dump(mode="json") for o in orders])


@router.get("/{order_id}", response_model=SuccessResponse)
async def get_order_endpoint(order_id: str):
    """Fetches an order joined with its table and lines."""
    order: OrderView = await get_order_details(order_id)
    return SuccessResponse(data=order.model_dump(mode="json"))


@router.get("/{order_id}/receipt", response_class=PlainTextResponse)
async def receipt_endpoint(order_id: str):
    return format_receipt(await get_order_details(order_id))


@router.patch("/{order_id}/status", response_model=SuccessResponse)
async def update_status_endpoint(order_id: str, payload: OrderStatusUpdate, actor: Actor = Depends(get_actor)):
    """Moves the order one step (e.g. 'in-progress', 'ready', 'served', 'cancelled')."""
    order = await transition_order(order_id, payload.status, actor.role, bus_for(actor))
    data = OrderCreatedResponse(
        order_id=order.id,
        status=order.status,
        final_total=order.final_total,
        message=f"Order marked as {order.status.value}",
    )
    return SuccessResponse(data=data.model_dump(mode="json"))
