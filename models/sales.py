from sqlalchemy import Column, Integer, Float, Date, DateTime, Text, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from database import Base, utcnow
import datetime


class DailySale(Base):
    __tablename__ = "daily_sales"

    id = Column(Integer, primary_key=True, index=True)
    item_id = Column(Integer, ForeignKey("stock_items.id", ondelete="CASCADE"), nullable=False, index=True)
    quantity_sold = Column(Integer, nullable=False)

    # Price snapshots taken from the stock item at the time of sale
    selling_price_per_unit = Column(Float, nullable=False)
    total_revenue = Column(Float, nullable=False)
    cost_price_per_unit = Column(Float, nullable=False)
    total_cost = Column(Float, nullable=False)
    profit = Column(Float, nullable=False)  # total_revenue - total_cost, may be negative

    sale_date = Column(Date, nullable=False, default=datetime.date.today, index=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)

    __table_args__ = (
        CheckConstraint("quantity_sold > 0", name="ck_daily_sales_quantity"),
        CheckConstraint("selling_price_per_unit >= 0", name="ck_daily_sales_selling_price"),
        CheckConstraint("total_revenue >= 0", name="ck_daily_sales_revenue"),
        CheckConstraint("cost_price_per_unit >= 0", name="ck_daily_sales_cost_price"),
        CheckConstraint("total_cost >= 0", name="ck_daily_sales_total_cost"),
    )

    stock_item = relationship("StockItem", back_populates="daily_sales")
