"""
Student Purchases Router
A student buys items from the store, paid out of their wallet.
Purchase row, stock decrement, wallet debit and the matching spend
transaction are committed together or not at all.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import or_
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
import logging

from database import get_db, utcnow
from models.students import Student
from models.stock import StockItem
from models.purchases import Purchase
from models.transactions import Transaction
from routers.transactions import apply_wallet_movement, lock_student
from routers.stock import get_item_or_404

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/purchases", tags=["Purchases"])

# Wallet spends created by a purchase are booked against store credit
PURCHASE_METHOD = "credit"


# =====================
# PYDANTIC SCHEMAS
# =====================

class PurchaseCreate(BaseModel):
    student_id: int
    item_id: int
    quantity: int = Field(gt=0)

class PurchaseOut(BaseModel):
    id: int
    student_id: int
    item_id: int
    quantity: int
    total_price: float
    timestamp: Optional[datetime] = None
    student_name: Optional[str] = None
    admission_no: Optional[str] = None
    item_name: Optional[str] = None


def serialize_purchase(p: Purchase) -> dict:
    return {
        "id": p.id,
        "student_id": p.student_id,
        "item_id": p.item_id,
        "quantity": p.quantity,
        "total_price": p.total_price,
        "timestamp": p.timestamp,
        "student_name": p.student.name if p.student else "Unknown",
        "admission_no": p.student.admission_no if p.student else "",
        "item_name": p.stock_item.item_name if p.stock_item else "Unknown",
    }


# =====================
# API ENDPOINTS
# =====================

@router.get("", response_model=List[PurchaseOut])
def list_purchases(search: str = "", db: Session = Depends(get_db)):
    query = db.query(Purchase).join(Student).join(StockItem).options(
        joinedload(Purchase.student),
        joinedload(Purchase.stock_item)
    )

    if search:
        search_fmt = f"%{search.strip()}%"
        query = query.filter(
            or_(
                Student.name.ilike(search_fmt),
                Student.admission_no.ilike(search_fmt),
                StockItem.item_name.ilike(search_fmt),
            )
        )

    purchases = query.order_by(Purchase.timestamp.desc(), Purchase.id.desc()).all()
    return [serialize_purchase(p) for p in purchases]


@router.post("", response_model=PurchaseOut, status_code=201)
def record_purchase(data: PurchaseCreate, db: Session = Depends(get_db)):
    try:
        # 1. Lock both rows we are about to change
        item = get_item_or_404(db, data.item_id, lock=True)
        student = lock_student(db, data.student_id)

        # 2. Validate before any write
        if item.quantity < data.quantity:
            raise HTTPException(status_code=400, detail=f"Insufficient stock. Available: {item.quantity}")

        total_price = round(data.quantity * item.selling_price, 2)
        if total_price <= 0:
            raise HTTPException(status_code=400, detail="Item has no selling price")
        if total_price > round(student.balance or 0.0, 2):
            raise HTTPException(status_code=400, detail="Insufficient balance")

        # 3. Purchase row
        purchase = Purchase(
            student_id=student.id,
            item_id=item.id,
            quantity=data.quantity,
            total_price=total_price,
        )
        db.add(purchase)

        # 4. Stock
        item.quantity -= data.quantity
        item.last_updated = utcnow()

        # 5. Wallet + ledger entry
        apply_wallet_movement(student, total_price, "spend")
        db.add(Transaction(
            student_id=student.id,
            amount=total_price,
            type="spend",
            method=PURCHASE_METHOD,
            note=f"Purchase: {data.quantity} x {item.item_name}",
        ))

        db.commit()
    except HTTPException:
        db.rollback()
        raise
    except Exception:
        db.rollback()
        logger.exception("Error recording purchase for student %s", data.student_id)
        raise HTTPException(status_code=500, detail="Failed to record purchase")

    db.refresh(purchase)
    logger.info("Purchase %d: %s bought %d x %s for %.2f",
                purchase.id, student.admission_no, data.quantity, item.item_name, total_price)
    return serialize_purchase(purchase)
