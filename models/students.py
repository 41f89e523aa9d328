from sqlalchemy import Column, Integer, String, Float, DateTime, CheckConstraint
from sqlalchemy.orm import relationship
from database import Base, utcnow


class Student(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(150), nullable=False, index=True)
    admission_no = Column(String(50), unique=True, nullable=False, index=True)
    class_code = Column(String(30), nullable=False, index=True)  # e.g. ND1A, HND2B

    # --- WALLET ---
    # balance is kept equal to total_paid - total_spent by every write that touches it
    balance = Column(Float, nullable=False, default=0.0, index=True)
    total_paid = Column(Float, nullable=False, default=0.0)
    total_spent = Column(Float, nullable=False, default=0.0)
    last_payment = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)

    __table_args__ = (
        CheckConstraint("length(trim(name)) > 0", name="ck_students_name"),
        CheckConstraint("length(trim(admission_no)) > 0", name="ck_students_admission_no"),
        CheckConstraint("length(trim(class_code)) > 0", name="ck_students_class_code"),
        CheckConstraint("balance >= 0", name="ck_students_balance"),
        CheckConstraint("total_paid >= 0", name="ck_students_total_paid"),
        CheckConstraint("total_spent >= 0", name="ck_students_total_spent"),
    )

    # --- RELATIONSHIPS ---
    transactions = relationship("Transaction", back_populates="student", cascade="all, delete-orphan")
    purchases = relationship("Purchase", back_populates="student", cascade="all, delete-orphan")
