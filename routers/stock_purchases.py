"""
Stock Purchases Router - buying stock from suppliers
Each purchase increases the item's quantity and blends its cost price
with the new batch (weighted average by quantity).
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import or_
from pydantic import BaseModel, Field
from typing import List, Optional
import datetime
import logging

from database import get_db, utcnow
from models.stock import StockItem
from models.purchases import StockPurchase
from routers.stock import get_item_or_404

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/stock-purchases", tags=["Stock Purchases"])


# =====================
# PYDANTIC SCHEMAS
# =====================

class StockPurchaseCreate(BaseModel):
    item_id: int
    quantity: int = Field(gt=0)
    cost_per_unit: float = Field(ge=0)
    supplier_name: str
    purchase_date: Optional[datetime.date] = None
    notes: Optional[str] = None

class StockPurchaseOut(BaseModel):
    id: int
    item_id: int
    quantity: int
    cost_per_unit: float
    total_cost: float
    supplier_name: str
    purchase_date: datetime.date
    notes: Optional[str] = None
    created_at: Optional[datetime.datetime] = None
    item_name: str
    selling_price: float
    expected_profit: float
    profit_margin: float


# =====================
# HELPER FUNCTIONS
# =====================

def weighted_average_cost(old_qty: int, old_cost: float, new_qty: int, new_cost: float) -> float:
    """(Q*C + q*c) / (Q + q); falls back to the new cost when there is no stock at all."""
    total_qty = old_qty + new_qty
    if total_qty <= 0:
        return new_cost
    return (old_qty * old_cost + new_qty * new_cost) / total_qty


def expected_profit(selling_price: float, cost_per_unit: float, quantity: int) -> float:
    return (selling_price - cost_per_unit) * quantity


def profit_margin(selling_price: float, cost_per_unit: float) -> float:
    """Markup over cost in percent; 0 for free stock."""
    if cost_per_unit == 0:
        return 0.0
    return (selling_price - cost_per_unit) / cost_per_unit * 100


def serialize_stock_purchase(sp: StockPurchase) -> dict:
    item = sp.stock_item
    selling_price = item.selling_price if item else 0.0
    return {
        "id": sp.id,
        "item_id": sp.item_id,
        "quantity": sp.quantity,
        "cost_per_unit": sp.cost_per_unit,
        "total_cost": sp.total_cost,
        "supplier_name": sp.supplier_name,
        "purchase_date": sp.purchase_date,
        "notes": sp.notes,
        "created_at": sp.created_at,
        "item_name": item.item_name if item else "Unknown",
        "selling_price": selling_price,
        "expected_profit": round(expected_profit(selling_price, sp.cost_per_unit, sp.quantity), 2),
        "profit_margin": round(profit_margin(selling_price, sp.cost_per_unit), 2),
    }


# =====================
# API ENDPOINTS
# =====================

@router.get("", response_model=List[StockPurchaseOut])
def list_stock_purchases(search: str = "", db: Session = Depends(get_db)):
    query = db.query(StockPurchase).join(StockItem).options(joinedload(StockPurchase.stock_item))

    if search:
        search_fmt = f"%{search.strip()}%"
        query = query.filter(
            or_(
                StockItem.item_name.ilike(search_fmt),
                StockPurchase.supplier_name.ilike(search_fmt),
            )
        )

    rows = query.order_by(StockPurchase.purchase_date.desc(), StockPurchase.id.desc()).all()
    return [serialize_stock_purchase(sp) for sp in rows]


@router.post("", response_model=StockPurchaseOut, status_code=201)
def record_stock_purchase(data: StockPurchaseCreate, db: Session = Depends(get_db)):
    supplier_name = data.supplier_name.strip()
    if not supplier_name:
        raise HTTPException(status_code=400, detail="Please fill in all required fields")

    try:
        item = get_item_or_404(db, data.item_id, lock=True)

        stock_purchase = StockPurchase(
            item_id=item.id,
            quantity=data.quantity,
            cost_per_unit=data.cost_per_unit,
            total_cost=round(data.quantity * data.cost_per_unit, 2),
            supplier_name=supplier_name,
            purchase_date=data.purchase_date or datetime.date.today(),
            notes=(data.notes or "").strip() or None,
        )
        db.add(stock_purchase)

        # Recost before bumping the quantity: the average needs the old Q
        item.cost_price = weighted_average_cost(item.quantity, item.cost_price, data.quantity, data.cost_per_unit)
        item.quantity += data.quantity
        item.last_updated = utcnow()

        db.commit()
    except HTTPException:
        db.rollback()
        raise
    except Exception:
        db.rollback()
        logger.exception("Error recording stock purchase for item %s", data.item_id)
        raise HTTPException(status_code=500, detail="Failed to record stock purchase")

    db.refresh(stock_purchase)
    logger.info("Stock purchase %d: %d x %s from %s, new cost %.2f",
                stock_purchase.id, data.quantity, item.item_name, supplier_name, item.cost_price)
    return serialize_stock_purchase(stock_purchase)
