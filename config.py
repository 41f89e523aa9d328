import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "change-this-secret-key")
    ALGORITHM = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 1440))  # 24 hours

    # Render/Heroku hand out postgres:// URLs, SQLAlchemy wants postgresql://
    database_url = os.getenv("DATABASE_URL")
    if database_url and database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql://", 1)
    SQLALCHEMY_DATABASE_URI = database_url or "sqlite:///./wallet.db"

    # Path prefix the API is served under, e.g. "/asostore"
    BASE_PATH = os.getenv("BASE_PATH", "").rstrip("/")

    CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",") if o.strip()]

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@asostore.com")
    ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")
