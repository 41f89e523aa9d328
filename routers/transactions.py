from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import or_
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional, Literal
from datetime import datetime
import logging

from database import get_db, utcnow
from models.students import Student
from models.transactions import Transaction
from schemas.students import StudentRef

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/transactions", tags=["Transactions"])


# --- Schemas ---
class TransactionCreate(BaseModel):
    student_id: int
    amount: float = Field(gt=0)
    type: Literal["deposit", "spend"]
    method: Literal["online", "cash", "credit"]
    note: Optional[str] = None

    @field_validator("amount")
    @classmethod
    def round_to_cents(cls, value: float) -> float:
        value = round(value, 2)
        if value <= 0:
            raise ValueError("Amount must be at least 0.01")
        return value

class TransactionOut(BaseModel):
    id: int
    student_id: int
    amount: float
    type: str
    method: str
    note: Optional[str] = None
    timestamp: Optional[datetime] = None
    student: Optional[StudentRef] = None

    class Config:
        from_attributes = True


# --- HELPER: move money in or out of a wallet ---
def apply_wallet_movement(student: Student, amount: float, tx_type: str) -> None:
    """
    Updates the cached wallet fields for one deposit or spend.
    Keeps balance == total_paid - total_spent; a spend larger than the
    balance raises 400 and leaves the student untouched.
    """
    if tx_type == "deposit":
        student.total_paid = round((student.total_paid or 0.0) + amount, 2)
        student.balance = round((student.balance or 0.0) + amount, 2)
        student.last_payment = utcnow()
    elif tx_type == "spend":
        if amount > round(student.balance or 0.0, 2):
            raise HTTPException(status_code=400, detail="Insufficient balance")
        student.total_spent = round((student.total_spent or 0.0) + amount, 2)
        student.balance = round((student.balance or 0.0) - amount, 2)
    else:
        raise HTTPException(status_code=400, detail=f"Unknown transaction type '{tx_type}'")


def lock_student(db: Session, student_id: int) -> Student:
    """SELECT ... FOR UPDATE on the student row (no-op on SQLite)."""
    student = db.query(Student).filter(Student.id == student_id).with_for_update().first()
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")
    return student


# ==========================
#   API ENDPOINTS
# ==========================

@router.get("", response_model=List[TransactionOut])
def list_transactions(type: str = "", method: str = "", search: str = "", db: Session = Depends(get_db)):
    query = db.query(Transaction).join(Student).options(joinedload(Transaction.student))

    if type:
        query = query.filter(Transaction.type == type)
    if method:
        query = query.filter(Transaction.method == method)
    if search:
        search_fmt = f"%{search.strip()}%"
        query = query.filter(
            or_(
                Student.name.ilike(search_fmt),
                Student.admission_no.ilike(search_fmt),
                Transaction.note.ilike(search_fmt),
            )
        )

    return query.order_by(Transaction.timestamp.desc(), Transaction.id.desc()).all()


@router.post("", response_model=TransactionOut, status_code=201)
def record_transaction(data: TransactionCreate, db: Session = Depends(get_db)):
    try:
        student = lock_student(db, data.student_id)
        apply_wallet_movement(student, data.amount, data.type)

        transaction = Transaction(
            student_id=student.id,
            amount=data.amount,
            type=data.type,
            method=data.method,
            note=(data.note or "").strip() or None,
        )
        db.add(transaction)
        db.commit()
    except HTTPException:
        db.rollback()
        raise
    except Exception:
        db.rollback()
        logger.exception("Error recording %s for student %s", data.type, data.student_id)
        raise HTTPException(status_code=500, detail="Failed to record transaction")

    db.refresh(transaction)
    logger.info("%s of %.2f recorded for %s", data.type.capitalize(), data.amount, student.admission_no)
    return transaction
