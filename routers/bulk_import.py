"""
Student Bulk Import Router
Allows administrators to upload a CSV (or Excel) file of student accounts
and import them in one go. The file is validated up front: a single bad
row rejects the whole upload, and nothing is written unless every row
can be inserted.
"""

from fastapi import APIRouter, Depends, HTTPException, File, UploadFile
from fastapi.responses import Response
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import List, Dict, Tuple, Optional
import csv
import io
import logging

import pandas as pd

from database import get_db
from models.students import Student

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/bulk-import", tags=["Bulk Import"])

REQUIRED_COLUMNS = ["name", "admission_no", "class_code"]

TEMPLATE_CSV = (
    "name,admission_no,class_code\n"
    "John Doe,ASO/2024/001,ND1A\n"
    "Jane Smith,ASO/2024/002,ND1B\n"
    "Mike Johnson,ASO/2024/003,HND2A"
)


# ==========================================
#   PARSING HELPERS
# ==========================================

def normalize_headers(raw_headers) -> List[str]:
    return [str(h).strip().lower() for h in raw_headers]


def check_headers(headers: List[str]) -> Optional[str]:
    """Header must be exactly name, admission_no, class_code (any order)."""
    missing = [h for h in REQUIRED_COLUMNS if h not in headers]
    if missing:
        return f"Missing required columns: {', '.join(missing)}"

    unexpected = [h for h in headers if h not in REQUIRED_COLUMNS]
    if unexpected:
        return f"Unexpected columns: {', '.join(unexpected)}"

    if len(set(headers)) != len(headers):
        return "Duplicate columns in header"
    return None


def parse_student_rows(headers: List[str], rows: List[list]) -> Tuple[List[Dict[str, str]], List[str]]:
    """
    Validates data rows against the header.
    Row numbers are 1-indexed file rows, so the first data row is "Row 2".
    """
    students: List[Dict[str, str]] = []
    errors: List[str] = []

    for idx, values in enumerate(rows):
        row_num = idx + 2
        values = [str(v).strip() for v in values]

        if len(values) != len(headers):
            errors.append(f"Row {row_num}: Incorrect number of columns")
            continue

        record = dict(zip(headers, values))
        if not all(record.get(col) for col in REQUIRED_COLUMNS):
            errors.append(f"Row {row_num}: Missing required fields")
            continue

        students.append({col: record[col] for col in REQUIRED_COLUMNS})

    return students, errors


def read_csv_upload(contents: bytes) -> Tuple[List[str], List[list]]:
    try:
        text_data = contents.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="CSV file must be UTF-8 encoded")

    lines = [line for line in text_data.splitlines() if line.strip()]
    if len(lines) < 2:
        raise HTTPException(status_code=400, detail="CSV file must contain at least a header and one data row")

    reader = csv.reader(lines)
    headers = normalize_headers(next(reader))
    return headers, list(reader)


def read_excel_upload(contents: bytes) -> Tuple[List[str], List[list]]:
    try:
        df = pd.read_excel(io.BytesIO(contents), engine="openpyxl", dtype=str)
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Error reading Excel file: {str(e)}")

    # Skip completely empty rows
    df = df.dropna(how="all").fillna("")
    if df.empty:
        raise HTTPException(status_code=400, detail="Excel file must contain at least a header and one data row")

    return normalize_headers(df.columns), df.values.tolist()


# ==========================================
#   MAIN BULK IMPORT ENDPOINT
# ==========================================

@router.post("/students")
async def bulk_import_students(file: UploadFile = File(...), db: Session = Depends(get_db)):
    filename = (file.filename or "").lower()
    contents = await file.read()

    if filename.endswith(".csv"):
        headers, rows = read_csv_upload(contents)
    elif filename.endswith(".xlsx"):
        headers, rows = read_excel_upload(contents)
    else:
        raise HTTPException(
            status_code=400,
            detail="Invalid file format. Please upload a CSV file (.csv) or an Excel file (.xlsx)"
        )

    header_error = check_headers(headers)
    if header_error:
        raise HTTPException(status_code=400, detail=header_error)

    students, errors = parse_student_rows(headers, rows)

    if errors:
        logger.warning("Bulk import of %s rejected with %d row errors", file.filename, len(errors))
        raise HTTPException(status_code=400, detail={"message": "Import errors", "errors": errors})

    if not students:
        raise HTTPException(status_code=400, detail="No valid students found in file")

    # All-or-nothing insert
    try:
        db.add_all([Student(**s) for s in students])
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning("Bulk import of %s hit duplicate admission numbers", file.filename)
        raise HTTPException(status_code=409, detail="Some admission numbers already exist")

    logger.info("Bulk imported %d students from %s", len(students), file.filename)
    return {
        "success": True,
        "total_rows": len(rows),
        "imported_count": len(students),
    }


# ==========================================
#   SAMPLE TEMPLATE DOWNLOAD
# ==========================================

@router.get("/template")
def download_template():
    return Response(
        content=TEMPLATE_CSV,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="students_template.csv"'},
    )
