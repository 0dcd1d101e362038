import logging

from fastapi import APIRouter, Depends, HTTPException, status

from restopos.api.deps import Actor, get_actor
from restopos.core import store
from restopos.models import Role
from restopos.schemas.inventory import StockDeductRequest, StockResponse, StockUpdateRequest
from restopos.schemas.response import SuccessResponse
from restopos.services.stock_ledger import low_stock_items, reserve_and_deduct, set_stock, stock_level

log = logging.getLogger(__name__)

router = APIRouter()


def _stock_response(item) -> dict:
    return StockResponse(
        menu_item_id=item.id,
        name=item.name,
        stock=item.stock,
        level=stock_level(item.stock),
    ).model_dump()


@router.get("/low-stock", response_model=SuccessResponse)
async def low_stock_endpoint():
    """Items that are still sellable but running low."""
    return SuccessResponse(data=[_stock_response(i) for i in await low_stock_items()])


@router.get("/{menu_item_id}", response_model=SuccessResponse)
async def get_stock_endpoint(menu_item_id: str):
    """Fetches the recorded stock for a specific menu item."""
    item = await store.require("menuItems", menu_item_id)
    return SuccessResponse(data=_stock_response(item))


@router.post("/{menu_item_id}/deduct", response_model=SuccessResponse)
async def deduct_stock_endpoint(menu_item_id: str, payload: StockDeductRequest):
    item = await reserve_and_deduct(menu_item_id, payload.quantity)
    return SuccessResponse(data=_stock_response(item))


@router.put("/{menu_item_id}", response_model=SuccessResponse)
async def set_stock_endpoint(menu_item_id: str, payload: StockUpdateRequest, actor: Actor = Depends(get_actor)):
    """Manual stock correction; admin only."""
    if actor.role != Role.ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only admins can adjust stock.")
    item = await set_stock(menu_item_id, payload.stock)
    log.info(f"Stock for {menu_item_id} adjusted by {actor.id}")
    return SuccessResponse(data=_stock_response(item))
