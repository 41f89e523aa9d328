import logging
import sys
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from config import Config
from database import engine, Base, SessionLocal

# --- IMPORT ROUTERS (APIs) ---
from routers import auth, students, bulk_import, transactions, stock, purchases, stock_purchases, daily_sales, balance, dashboard

# --- IMPORT MODELS (registers every table on Base) ---
from models.users import AdminUser
from models.students import Student
from models.transactions import Transaction
from models.stock import StockItem
from models.purchases import Purchase, StockPurchase
from models.sales import DailySale

logging.basicConfig(
    stream=sys.stdout,
    level=Config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# --- CREATE DATABASE TABLES ---
Base.metadata.create_all(bind=engine)


# --- AUTO MIGRATION: bring older production databases up to date ---
def run_migrations():
    """
    Adds columns and indexes introduced after the first schema version.
    Every statement is idempotent, so this is safe to run on each start.
    """
    if engine.dialect.name != "postgresql":
        logger.info("%s detected - skipping PostgreSQL migrations", engine.dialect.name)
        return

    migrations = [
        # stock_purchases / daily_sales gained notes after launch
        "ALTER TABLE stock_purchases ADD COLUMN IF NOT EXISTS notes TEXT",
        "ALTER TABLE daily_sales ADD COLUMN IF NOT EXISTS notes TEXT",
        "ALTER TABLE students ADD COLUMN IF NOT EXISTS last_payment TIMESTAMPTZ",

        # Composite / sort indexes used by the list screens
        "CREATE INDEX IF NOT EXISTS idx_transactions_timestamp ON transactions(timestamp DESC)",
        "CREATE INDEX IF NOT EXISTS idx_purchases_timestamp ON purchases(timestamp DESC)",
        "CREATE INDEX IF NOT EXISTS idx_stock_purchases_date ON stock_purchases(purchase_date DESC)",
        "CREATE INDEX IF NOT EXISTS idx_daily_sales_sale_date ON daily_sales(sale_date)",
    ]

    db = SessionLocal()
    try:
        for sql in migrations:
            try:
                db.execute(text(sql))
                db.commit()
            except Exception as e:
                db.rollback()
                logger.warning("Migration note: %s", str(e)[:100])
        logger.info("Database migrations completed")
    finally:
        db.close()


# Run migrations on startup
run_migrations()

app = FastAPI(title="Campus Store Wallet", root_path=Config.BASE_PATH)


# ==========================================
#   AUTH MIDDLEWARE (admin session gate)
# ==========================================
PUBLIC_PATHS = {"/auth/login", "/health", "/docs", "/redoc", "/openapi.json"}
PUBLIC_PREFIXES = ("/api/v1/balance",)


def is_public_path(path: str) -> bool:
    base = Config.BASE_PATH
    if base and (path == base or path.startswith(base + "/")):
        path = path[len(base):] or "/"
    return path in PUBLIC_PATHS or path.startswith(PUBLIC_PREFIXES)


def has_active_session(request: Request) -> bool:
    token = auth.read_token(request)
    if not token:
        return False
    db = SessionLocal()
    try:
        return auth.load_active_admin(db, token) is not None
    finally:
        db.close()


@app.middleware("http")
async def auth_middleware(request: Request, call_next):
    if request.method != "OPTIONS" and not is_public_path(request.url.path):
        if not has_active_session(request):
            return JSONResponse(status_code=401, content={"detail": "Not authenticated"})

    return await call_next(request)


# ==========================================
#   CORS MIDDLEWARE
# ==========================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- REGISTER ROUTERS ---
app.include_router(auth.router)
app.include_router(students.router)
app.include_router(bulk_import.router)
app.include_router(transactions.router)
app.include_router(stock.router)
app.include_router(purchases.router)
app.include_router(stock_purchases.router)
app.include_router(daily_sales.router)
app.include_router(balance.router)
app.include_router(dashboard.router)


@app.get("/health")
def health():
    return {"status": "ok"}
