from sqlalchemy import Column, Integer, String, Float, DateTime, CheckConstraint
from sqlalchemy.orm import relationship
from database import Base, utcnow


class StockItem(Base):
    __tablename__ = "stock_items"

    id = Column(Integer, primary_key=True, index=True)
    item_name = Column(String(150), nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=0, index=True)
    cost_price = Column(Float, nullable=False, default=0.0)      # weighted average of supplier purchases
    selling_price = Column(Float, nullable=False, default=0.0)   # price charged to students
    last_updated = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint("length(trim(item_name)) > 0", name="ck_stock_items_name"),
        CheckConstraint("quantity >= 0", name="ck_stock_items_quantity"),
        CheckConstraint("cost_price >= 0", name="ck_stock_items_cost_price"),
        CheckConstraint("selling_price >= 0", name="ck_stock_items_selling_price"),
    )

    purchases = relationship("Purchase", back_populates="stock_item", cascade="all, delete-orphan")
    stock_purchases = relationship("StockPurchase", back_populates="stock_item", cascade="all, delete-orphan")
    daily_sales = relationship("DailySale", back_populates="stock_item", cascade="all, delete-orphan")
