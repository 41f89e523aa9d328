from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import func
from database import get_db
from models.students import Student
from models.transactions import Transaction
from models.stock import StockItem
from models.purchases import StockPurchase
from models.sales import DailySale

router = APIRouter(prefix="/api/v1/dashboard", tags=["Dashboard"])


def _sum(db: Session, column, *filters) -> float:
    value = db.query(func.coalesce(func.sum(column), 0.0)).filter(*filters).scalar()
    return round(float(value or 0.0), 2)


@router.get("/stats")
def dashboard_stats(db: Session = Depends(get_db)):
    # 1. Wallets
    total_students = db.query(Student).count()
    total_balance = _sum(db, Student.balance)
    total_deposits = _sum(db, Transaction.amount, Transaction.type == "deposit")
    total_spends = _sum(db, Transaction.amount, Transaction.type == "spend")

    # 2. Store
    net_profit = _sum(db, DailySale.profit)
    total_stock_value = _sum(db, StockItem.quantity * StockItem.cost_price)
    total_purchase_cost = _sum(db, StockPurchase.total_cost)

    # 3. Recent 5 transactions
    recent = db.query(Transaction).options(joinedload(Transaction.student))\
        .order_by(Transaction.timestamp.desc(), Transaction.id.desc()).limit(5).all()

    return {
        "total_students": total_students,
        "total_balance": total_balance,
        "total_deposits": total_deposits,
        "total_spends": total_spends,
        "net_profit": net_profit,
        "total_stock_value": total_stock_value,
        "total_purchase_cost": total_purchase_cost,
        "recent_transactions": [
            {
                "id": t.id,
                "student_name": t.student.name if t.student else "Unknown",
                "admission_no": t.student.admission_no if t.student else "",
                "amount": t.amount,
                "type": t.type,
                "method": t.method,
                "timestamp": t.timestamp,
            }
            for t in recent
        ],
    }
