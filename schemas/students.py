from pydantic import BaseModel
from datetime import datetime
from typing import Optional


# 1. Full student row for the admin panel
class StudentOut(BaseModel):
    id: int
    name: str
    admission_no: str
    class_code: str
    balance: float
    total_paid: float
    total_spent: float
    last_payment: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# 2. Public balance check - no internal ids
class StudentBalance(BaseModel):
    name: str
    admission_no: str
    class_code: str
    balance: float
    total_paid: float
    total_spent: float
    last_payment: Optional[datetime] = None

    class Config:
        from_attributes = True


class StudentRef(BaseModel):
    name: str
    admission_no: str

    class Config:
        from_attributes = True
