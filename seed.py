import logging
import sys

from database import SessionLocal, engine, Base
from models.students import Student
from models.transactions import Transaction
from models.stock import StockItem
from models.purchases import Purchase, StockPurchase
from models.sales import DailySale

logging.basicConfig(level=logging.INFO, format="%(message)s", stream=sys.stdout)
logger = logging.getLogger(__name__)

SAMPLE_STUDENTS = [
    {"name": "John Doe", "admission_no": "ASO/2024/001", "class_code": "ND1A"},
    {"name": "Jane Smith", "admission_no": "ASO/2024/002", "class_code": "ND1B"},
    {"name": "Mike Johnson", "admission_no": "ASO/2024/003", "class_code": "HND2A"},
]

SAMPLE_STOCK = [
    {"item_name": "Exercise Book", "quantity": 200, "cost_price": 25.0, "selling_price": 35.0},
    {"item_name": "Ball Pen", "quantity": 500, "cost_price": 8.0, "selling_price": 10.0},
    {"item_name": "Water Bottle", "quantity": 50, "cost_price": 60.0, "selling_price": 80.0},
]


def seed_data(db):
    logger.info("Seeding sample data...")

    # 1. STUDENTS
    for s in SAMPLE_STUDENTS:
        exists = db.query(Student).filter_by(admission_no=s["admission_no"]).first()
        if not exists:
            db.add(Student(**s))
            logger.info(f"Added student: {s['name']} ({s['admission_no']})")
        else:
            logger.info(f"Exists: {s['admission_no']}")
    db.commit()

    # 2. STOCK ITEMS
    for item in SAMPLE_STOCK:
        exists = db.query(StockItem).filter_by(item_name=item["item_name"]).first()
        if not exists:
            db.add(StockItem(**item))
            logger.info(f"Added stock item: {item['item_name']}")
    db.commit()

    logger.info("All sample data seeded")


if __name__ == "__main__":
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_data(db)
    finally:
        db.close()
