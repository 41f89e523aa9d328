from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.orm import Session
from jose import JWTError, jwt
from datetime import datetime, timedelta, timezone
from typing import Optional
from pydantic import BaseModel
import logging

from config import Config
from database import get_db
from models.users import AdminUser

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])

TOKEN_COOKIE = "user_token"


# ===========================
#          SCHEMAS
# ===========================

class LoginSchema(BaseModel):
    email: str
    password: str

class Token(BaseModel):
    access_token: str
    token_type: str

class AdminOut(BaseModel):
    id: int
    email: str
    full_name: Optional[str] = None

    class Config:
        from_attributes = True


# ===========================
#     HELPER FUNCTIONS
# ===========================

def create_access_token(data: dict) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=Config.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, Config.SECRET_KEY, algorithm=Config.ALGORITHM)


def read_token(request: Request) -> Optional[str]:
    """Token from the Authorization header, falling back to the session cookie."""
    auth_header = request.headers.get("Authorization", "")
    if auth_header.lower().startswith("bearer "):
        return auth_header[7:].strip()
    return request.cookies.get(TOKEN_COOKIE)


def decode_token(token: str) -> Optional[int]:
    """Returns the admin id carried by a valid token, else None."""
    try:
        payload = jwt.decode(token, Config.SECRET_KEY, algorithms=[Config.ALGORITHM])
    except JWTError:
        return None
    if payload.get("role") != "admin" or payload.get("sub") is None:
        return None
    try:
        return int(payload["sub"])
    except (TypeError, ValueError):
        return None


def load_active_admin(db: Session, token: Optional[str]) -> Optional[AdminUser]:
    """Admin behind a valid token, or None if the account is gone or deactivated."""
    admin_id = decode_token(token) if token else None
    if admin_id is None:
        return None
    admin = db.query(AdminUser).filter(AdminUser.id == admin_id).first()
    if not admin or not admin.is_active:
        return None
    return admin


def get_current_admin(request: Request, db: Session = Depends(get_db)) -> AdminUser:
    admin = load_active_admin(db, read_token(request))
    if admin is None:
        raise HTTPException(status_code=401, detail="Session expired, please login again")
    return admin


# ===========================
#        API ENDPOINTS
# ===========================

@router.post("/login", response_model=Token)
def process_login(data: LoginSchema, response: Response, db: Session = Depends(get_db)):
    admin = db.query(AdminUser).filter(AdminUser.email == data.email.strip().lower()).first()

    if not admin or not admin.is_active or not admin.check_password(data.password):
        logger.warning("Failed login for %s", data.email)
        raise HTTPException(status_code=401, detail="Invalid credentials")

    access_token = create_access_token(data={"sub": str(admin.id), "role": "admin"})
    response.set_cookie(
        key=TOKEN_COOKIE,
        value=access_token,
        max_age=Config.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite="lax",
    )
    logger.info("Admin %s logged in", admin.email)
    return {"access_token": access_token, "token_type": "bearer"}


@router.post("/logout")
def logout(response: Response):
    response.delete_cookie(TOKEN_COOKIE)
    return {"message": "Logged out"}


@router.get("/me", response_model=AdminOut)
def read_session(admin: AdminUser = Depends(get_current_admin)):
    return admin
