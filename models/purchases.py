"""
Purchase Models
- Purchase: a student buying items from the store, paid from the wallet
- StockPurchase: the store buying items from a supplier
"""
from sqlalchemy import Column, Integer, String, Float, Date, DateTime, Text, ForeignKey, CheckConstraint, Index
from sqlalchemy.orm import relationship
from database import Base, utcnow
import datetime


# 1. STUDENT PURCHASE
class Purchase(Base):
    __tablename__ = "purchases"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    item_id = Column(Integer, ForeignKey("stock_items.id", ondelete="CASCADE"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    total_price = Column(Float, nullable=False)
    timestamp = Column(DateTime(timezone=True), default=utcnow, index=True)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_purchases_quantity"),
        CheckConstraint("total_price > 0", name="ck_purchases_total_price"),
        Index("idx_purchases_student_timestamp", "student_id", "timestamp"),
    )

    student = relationship("Student", back_populates="purchases")
    stock_item = relationship("StockItem", back_populates="purchases")


# 2. SUPPLIER (STOCK) PURCHASE
class StockPurchase(Base):
    __tablename__ = "stock_purchases"

    id = Column(Integer, primary_key=True, index=True)
    item_id = Column(Integer, ForeignKey("stock_items.id", ondelete="CASCADE"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    cost_per_unit = Column(Float, nullable=False)
    total_cost = Column(Float, nullable=False)          # quantity * cost_per_unit
    supplier_name = Column(String(150), nullable=False, index=True)
    purchase_date = Column(Date, nullable=False, default=datetime.date.today, index=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_stock_purchases_quantity"),
        CheckConstraint("cost_per_unit >= 0", name="ck_stock_purchases_cost_per_unit"),
        CheckConstraint("total_cost >= 0", name="ck_stock_purchases_total_cost"),
        CheckConstraint("length(trim(supplier_name)) > 0", name="ck_stock_purchases_supplier"),
    )

    stock_item = relationship("StockItem", back_populates="stock_purchases")
