from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from restopos.models import OrderStatus, PaymentMethod


class CartLine(BaseModel):
    """Schema for a single line in a cart."""
    menu_item_id: str
    quantity: int
    modifiers: List[str] = Field(default_factory=list)


class OrderRequest(BaseModel):
    """Schema for sending a table-service order to the kitchen."""
    table_id: str
    items: List[CartLine]


class SaleRequest(OrderRequest):
    """Schema for an immediate point-of-sale checkout."""
    payment_method: PaymentMethod = PaymentMethod.CASH
    discount: Decimal = Decimal("0")


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderTotals(BaseModel):
    total: Decimal
    tax: Decimal
    service_charge: Decimal
    discount: Decimal
    final_total: Decimal


class OrderCreatedResponse(BaseModel):
    order_id: str
    status: OrderStatus
    final_total: Decimal
    message: str


class OrderItemView(BaseModel):
    """An order line joined with its menu item."""
    id: str
    menu_item_id: str
    name: str
    quantity: int
    unit_price: Decimal
    modifiers: List[str]
    total_price: Decimal


class OrderView(BaseModel):
    """An order joined with its table and lines, as the list views show it."""
    id: str
    table_id: str
    table_number: Optional[int] = None
    creator_id: str
    status: OrderStatus
    total: Decimal
    discount: Decimal
    tax: Decimal
    service_charge: Decimal
    final_total: Decimal
    created_at: datetime
    updated_at: datetime
    items: List[OrderItemView] = Field(default_factory=list)
