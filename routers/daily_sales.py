from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import func
from pydantic import BaseModel, Field
from typing import List, Optional
import datetime
import logging

from database import get_db, utcnow
from models.stock import StockItem
from models.sales import DailySale
from routers.stock import get_item_or_404

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/daily-sales", tags=["Daily Sales"])


# --- Schemas ---
class DailySaleCreate(BaseModel):
    item_id: int
    quantity_sold: int = Field(gt=0)
    sale_date: Optional[datetime.date] = None
    notes: Optional[str] = None

class DailySaleOut(BaseModel):
    id: int
    item_id: int
    quantity_sold: int
    selling_price_per_unit: float
    total_revenue: float
    cost_price_per_unit: float
    total_cost: float
    profit: float
    sale_date: datetime.date
    notes: Optional[str] = None
    created_at: Optional[datetime.datetime] = None
    item_name: str

class SalesSummary(BaseModel):
    sale_date: datetime.date
    total_items: int
    total_revenue: float
    total_profit: float


def sale_figures(quantity: int, selling_price: float, cost_price: float) -> dict:
    """Revenue, cost and profit for `quantity` units at the given unit prices."""
    total_revenue = round(quantity * selling_price, 2)
    total_cost = round(quantity * cost_price, 2)
    return {
        "total_revenue": total_revenue,
        "total_cost": total_cost,
        "profit": round(total_revenue - total_cost, 2),
    }


def serialize_sale(sale: DailySale) -> dict:
    return {
        "id": sale.id,
        "item_id": sale.item_id,
        "quantity_sold": sale.quantity_sold,
        "selling_price_per_unit": sale.selling_price_per_unit,
        "total_revenue": sale.total_revenue,
        "cost_price_per_unit": sale.cost_price_per_unit,
        "total_cost": sale.total_cost,
        "profit": sale.profit,
        "sale_date": sale.sale_date,
        "notes": sale.notes,
        "created_at": sale.created_at,
        "item_name": sale.stock_item.item_name if sale.stock_item else "Unknown",
    }


# --- API 1: SALES LIST ---
@router.get("", response_model=List[DailySaleOut])
def list_daily_sales(search: str = "", sale_date: Optional[datetime.date] = None, db: Session = Depends(get_db)):
    query = db.query(DailySale).join(StockItem).options(joinedload(DailySale.stock_item))

    if search:
        query = query.filter(StockItem.item_name.ilike(f"%{search.strip()}%"))
    if sale_date:
        query = query.filter(DailySale.sale_date == sale_date)

    sales = query.order_by(DailySale.sale_date.desc(), DailySale.created_at.desc(), DailySale.id.desc()).all()
    return [serialize_sale(s) for s in sales]


# --- API 2: DAY SUMMARY (defaults to today) ---
@router.get("/summary", response_model=SalesSummary)
def daily_summary(sale_date: Optional[datetime.date] = None, db: Session = Depends(get_db)):
    day = sale_date or datetime.date.today()

    total_items, total_revenue, total_profit = db.query(
        func.coalesce(func.sum(DailySale.quantity_sold), 0),
        func.coalesce(func.sum(DailySale.total_revenue), 0.0),
        func.coalesce(func.sum(DailySale.profit), 0.0),
    ).filter(DailySale.sale_date == day).one()

    return {
        "sale_date": day,
        "total_items": int(total_items),
        "total_revenue": round(float(total_revenue), 2),
        "total_profit": round(float(total_profit), 2),
    }


# --- API 3: RECORD SALE ---
@router.post("", response_model=DailySaleOut, status_code=201)
def record_daily_sale(data: DailySaleCreate, db: Session = Depends(get_db)):
    try:
        item = get_item_or_404(db, data.item_id, lock=True)

        if item.quantity < data.quantity_sold:
            raise HTTPException(status_code=400, detail=f"Insufficient stock. Available: {item.quantity}")

        sale = DailySale(
            item_id=item.id,
            quantity_sold=data.quantity_sold,
            selling_price_per_unit=item.selling_price,
            cost_price_per_unit=item.cost_price,
            sale_date=data.sale_date or datetime.date.today(),
            notes=(data.notes or "").strip() or None,
            **sale_figures(data.quantity_sold, item.selling_price, item.cost_price),
        )
        db.add(sale)

        item.quantity -= data.quantity_sold
        item.last_updated = utcnow()

        db.commit()
    except HTTPException:
        db.rollback()
        raise
    except Exception:
        db.rollback()
        logger.exception("Error recording daily sale for item %s", data.item_id)
        raise HTTPException(status_code=500, detail="Failed to record daily sale")

    db.refresh(sale)
    logger.info("Daily sale %d: %d x %s, profit %.2f", sale.id, sale.quantity_sold, item.item_name, sale.profit)
    return serialize_sale(sale)
