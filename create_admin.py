import logging
import sys
from sqlalchemy import text

from config import Config
from database import SessionLocal, engine, Base
from models.users import AdminUser
from models.students import Student
from models.transactions import Transaction
from models.stock import StockItem
from models.purchases import Purchase, StockPurchase
from models.sales import DailySale

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
    stream=sys.stdout
)
logger = logging.getLogger(__name__)


def check_database_connection(db) -> bool:
    try:
        db.execute(text("SELECT 1"))
        logger.info("Database connection OK")
        return True
    except Exception as e:
        logger.error(f"Database connection failed: {str(e)}")
        return False


def create_admin(db, email: str, password: str, full_name: str = "Store Admin"):
    """Creates the admin account unless the email is already taken. Returns the admin."""
    email = email.strip().lower()
    admin = db.query(AdminUser).filter(AdminUser.email == email).first()
    if admin:
        logger.info(f"Admin already exists: {admin.email}")
        return admin

    admin = AdminUser(email=email, full_name=full_name)
    admin.set_password(password)
    db.add(admin)
    try:
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to create admin: {str(e)}")
        raise

    logger.info(f"Admin account created: {email}")
    return admin


if __name__ == "__main__":
    if not Config.ADMIN_PASSWORD:
        logger.error("Set ADMIN_PASSWORD (and optionally ADMIN_EMAIL) before running this script")
        sys.exit(1)

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        if not check_database_connection(db):
            sys.exit(1)
        create_admin(db, Config.ADMIN_EMAIL, Config.ADMIN_PASSWORD)
    except Exception as e:
        logger.error(f"Script failed: {str(e)}")
        sys.exit(1)
    finally:
        db.close()
