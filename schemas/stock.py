from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class StockItemOut(BaseModel):
    id: int
    item_name: str
    quantity: int
    cost_price: float
    selling_price: float
    last_updated: Optional[datetime] = None

    class Config:
        from_attributes = True
