from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
import logging

from database import get_db
from models.students import Student
from schemas.students import StudentBalance

logger = logging.getLogger(__name__)

# Public router: the auth middleware lets everything under this prefix through
router = APIRouter(prefix="/api/v1/balance", tags=["Balance Check (Public)"])


def require_value(value: str) -> str:
    value = (value or "").strip()
    if not value:
        raise HTTPException(status_code=400, detail="Please enter a search value")
    return value


# 1. BY ADMISSION NUMBER - exactly one student or 404
@router.get("/student", response_model=StudentBalance)
def balance_by_admission_no(admission_no: str = "", db: Session = Depends(get_db)):
    admission_no = require_value(admission_no)

    student = db.query(Student).filter(Student.admission_no == admission_no).first()
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")
    return student


# 2. BY CLASS CODE - everyone in the class, possibly nobody
@router.get("/class", response_model=List[StudentBalance])
def balance_by_class_code(class_code: str = "", db: Session = Depends(get_db)):
    class_code = require_value(class_code)
    return db.query(Student).filter(Student.class_code == class_code).order_by(Student.name).all()
