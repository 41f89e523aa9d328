"""
Recomputes every student's wallet from the transaction log.

    python reconcile_balances.py          # report drift only
    python reconcile_balances.py --fix    # report and rewrite the cached fields
"""
import argparse
import logging
import sys
from sqlalchemy import func, case

from database import SessionLocal
from models.students import Student
from models.transactions import Transaction
from models.stock import StockItem
from models.purchases import Purchase, StockPurchase
from models.sales import DailySale

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s", stream=sys.stdout)
logger = logging.getLogger(__name__)


def ledger_totals(db) -> dict:
    """student_id -> (total_paid, total_spent) summed from transactions."""
    rows = db.query(
        Transaction.student_id,
        func.coalesce(func.sum(case((Transaction.type == "deposit", Transaction.amount), else_=0.0)), 0.0),
        func.coalesce(func.sum(case((Transaction.type == "spend", Transaction.amount), else_=0.0)), 0.0),
    ).group_by(Transaction.student_id).all()
    return {sid: (round(float(paid), 2), round(float(spent), 2)) for sid, paid, spent in rows}


def reconcile(db, fix: bool = False) -> list:
    """Returns one entry per student whose cached fields disagree with the ledger."""
    totals = ledger_totals(db)
    drift = []

    for student in db.query(Student).order_by(Student.admission_no).all():
        paid, spent = totals.get(student.id, (0.0, 0.0))
        expected_balance = round(paid - spent, 2)

        if (round(student.total_paid or 0.0, 2), round(student.total_spent or 0.0, 2), round(student.balance or 0.0, 2)) \
                == (paid, spent, expected_balance):
            continue

        drift.append({
            "admission_no": student.admission_no,
            "balance": student.balance,
            "expected_balance": expected_balance,
            "total_paid": student.total_paid,
            "expected_total_paid": paid,
            "total_spent": student.total_spent,
            "expected_total_spent": spent,
        })
        logger.warning(
            "%s: balance %.2f (ledger %.2f), paid %.2f (ledger %.2f), spent %.2f (ledger %.2f)",
            student.admission_no, student.balance or 0.0, expected_balance,
            student.total_paid or 0.0, paid, student.total_spent or 0.0, spent,
        )

        if fix:
            student.total_paid = paid
            student.total_spent = spent
            student.balance = expected_balance

    if fix and drift:
        db.commit()
        logger.info("Fixed %d student wallet(s)", len(drift))
    elif not drift:
        logger.info("All wallets match the transaction log")

    return drift


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--fix", action="store_true", help="rewrite cached wallet fields from the ledger")
    args = parser.parse_args()

    db = SessionLocal()
    try:
        problems = reconcile(db, fix=args.fix)
    finally:
        db.close()
    sys.exit(1 if problems and not args.fix else 0)
