from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import or_
from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
import logging

from database import get_db
from models.students import Student
from models.transactions import Transaction
from schemas.students import StudentOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/students", tags=["Students"])


# --- Schemas ---
class StudentCreate(BaseModel):
    name: str
    admission_no: str
    class_code: str

class TransactionRow(BaseModel):
    id: int
    amount: float
    type: str
    method: str
    note: Optional[str] = None
    timestamp: Optional[datetime] = None

    class Config:
        from_attributes = True


def clean_student_fields(data: StudentCreate) -> dict:
    """Strips every field; all three are required."""
    fields = {
        "name": data.name.strip(),
        "admission_no": data.admission_no.strip(),
        "class_code": data.class_code.strip(),
    }
    if not all(fields.values()):
        raise HTTPException(status_code=400, detail="Please fill in all fields")
    return fields


def get_student_or_404(db: Session, student_id: int) -> Student:
    student = db.query(Student).filter(Student.id == student_id).first()
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")
    return student


# ===============================
#   1. SPECIFIC ROUTES (before /{id})
# ===============================

@router.get("/classes", response_model=List[str])
def list_class_codes(db: Session = Depends(get_db)):
    rows = db.query(Student.class_code).distinct().order_by(Student.class_code).all()
    return [r[0] for r in rows]


@router.get("", response_model=List[StudentOut])
def list_students(search: str = "", class_code: str = "", db: Session = Depends(get_db)):
    query = db.query(Student)

    if class_code:
        query = query.filter(Student.class_code == class_code)

    if search:
        search_fmt = f"%{search.strip()}%"
        query = query.filter(
            or_(
                Student.name.ilike(search_fmt),
                Student.admission_no.ilike(search_fmt),
            )
        )

    return query.order_by(Student.name).all()


# ===============================
#   2. STUDENT CRUD OPERATIONS
# ===============================

@router.post("", response_model=StudentOut, status_code=201)
def add_student(data: StudentCreate, db: Session = Depends(get_db)):
    new_student = Student(**clean_student_fields(data))

    try:
        db.add(new_student)
        db.commit()
        db.refresh(new_student)
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Admission number already exists")

    logger.info("Student %s (%s) added", new_student.name, new_student.admission_no)
    return new_student


@router.get("/{id}", response_model=StudentOut)
def get_student_detail(id: int, db: Session = Depends(get_db)):
    return get_student_or_404(db, id)


@router.put("/{id}", response_model=StudentOut)
def update_student(id: int, data: StudentCreate, db: Session = Depends(get_db)):
    student = get_student_or_404(db, id)

    fields = clean_student_fields(data)
    student.name = fields["name"]
    student.admission_no = fields["admission_no"]
    student.class_code = fields["class_code"]

    try:
        db.commit()
        db.refresh(student)
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Admission number already exists")

    logger.info("Student %s updated", student.admission_no)
    return student


# DELETE STUDENT (transactions and purchases go with it)
@router.delete("/{id}")
def delete_student(id: int, db: Session = Depends(get_db)):
    student = get_student_or_404(db, id)
    admission_no = student.admission_no
    db.delete(student)
    db.commit()
    logger.info("Student %s deleted", admission_no)
    return {"message": "Deleted"}


@router.get("/{id}/transactions", response_model=List[TransactionRow])
def student_transaction_history(id: int, db: Session = Depends(get_db)):
    get_student_or_404(db, id)
    return db.query(Transaction).filter(
        Transaction.student_id == id
    ).order_by(Transaction.timestamp.desc(), Transaction.id.desc()).all()
