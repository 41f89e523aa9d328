from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from pydantic import BaseModel, Field
from typing import List
import logging

from database import get_db, utcnow
from models.stock import StockItem
from schemas.stock import StockItemOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/stock", tags=["Stock Items"])


# =======================
# 1. PYDANTIC SCHEMAS
# =======================
class StockItemCreate(BaseModel):
    item_name: str
    quantity: int = Field(default=0, ge=0)
    cost_price: float = Field(ge=0)
    selling_price: float = Field(ge=0)


def get_item_or_404(db: Session, item_id: int, lock: bool = False) -> StockItem:
    query = db.query(StockItem).filter(StockItem.id == item_id)
    if lock:
        query = query.with_for_update()
    item = query.first()
    if not item:
        raise HTTPException(status_code=404, detail="Stock item not found")
    return item


def clean_item_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise HTTPException(status_code=400, detail="Please fill in all required fields")
    return name


# =======================
# 2. STOCK ITEM APIs
# =======================
@router.get("", response_model=List[StockItemOut])
def list_stock_items(search: str = "", db: Session = Depends(get_db)):
    query = db.query(StockItem)
    if search:
        query = query.filter(StockItem.item_name.ilike(f"%{search.strip()}%"))
    return query.order_by(StockItem.item_name).all()


@router.get("/{id}", response_model=StockItemOut)
def get_stock_item(id: int, db: Session = Depends(get_db)):
    return get_item_or_404(db, id)


@router.post("", response_model=StockItemOut, status_code=201)
def create_stock_item(item: StockItemCreate, db: Session = Depends(get_db)):
    new_item = StockItem(
        item_name=clean_item_name(item.item_name),
        quantity=item.quantity,
        cost_price=item.cost_price,
        selling_price=item.selling_price,
        last_updated=utcnow(),
    )
    db.add(new_item)
    db.commit()
    db.refresh(new_item)
    logger.info("Stock item %s created (qty %d)", new_item.item_name, new_item.quantity)
    return new_item


@router.put("/{id}", response_model=StockItemOut)
def update_stock_item(id: int, item: StockItemCreate, db: Session = Depends(get_db)):
    existing = get_item_or_404(db, id)

    existing.item_name = clean_item_name(item.item_name)
    existing.quantity = item.quantity
    existing.cost_price = item.cost_price
    existing.selling_price = item.selling_price
    existing.last_updated = utcnow()

    db.commit()
    db.refresh(existing)
    logger.info("Stock item %s updated", existing.item_name)
    return existing


@router.delete("/{id}")
def delete_stock_item(id: int, db: Session = Depends(get_db)):
    item = get_item_or_404(db, id)
    item_name = item.item_name
    db.delete(item)
    db.commit()
    logger.info("Stock item %s deleted", item_name)
    return {"message": "Deleted"}
