from pydantic import BaseModel, Field


class StockResponse(BaseModel):
    """Schema for a menu item's stock."""
    menu_item_id: str
    name: str
    stock: int
    level: str


class StockDeductRequest(BaseModel):
    quantity: int = Field(..., gt=0, description="Units sold.")


class StockUpdateRequest(BaseModel):
    stock: int = Field(..., ge=0, description="Counted on-hand quantity.")
