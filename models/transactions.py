from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, Text, CheckConstraint, Index
from sqlalchemy.orm import relationship
from database import Base, utcnow

TRANSACTION_TYPES = ("deposit", "spend")
PAYMENT_METHODS = ("online", "cash", "credit")


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)

    amount = Column(Float, nullable=False)
    type = Column(String(10), nullable=False, index=True)     # deposit, spend
    method = Column(String(10), nullable=False, index=True)   # online, cash, credit
    note = Column(Text, nullable=True)

    timestamp = Column(DateTime(timezone=True), default=utcnow, index=True)

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transactions_amount"),
        CheckConstraint("type IN ('deposit', 'spend')", name="ck_transactions_type"),
        CheckConstraint("method IN ('online', 'cash', 'credit')", name="ck_transactions_method"),
        Index("idx_transactions_student_type", "student_id", "type"),
    )

    # Relationship
    student = relationship("Student", back_populates="transactions")
