"""
Application configuration and settings
"""
import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# Database
MONGODB_URL = os.getenv("MONGODB_URL", "mongodb://localhost:27017")
MONGODB_DB = os.getenv("MONGODB_DB", "travel-agency")

# Tokens
SECRET_KEY = os.getenv("SECRET_KEY", "your-secret-key-here")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))  # 24 hours
REQUIRE_ADMIN_ROLE = _env_bool("REQUIRE_ADMIN_ROLE")

# CORS
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:3001").split(",")
    if origin.strip()
]

# Object storage (S3 / MinIO)
S3_ENDPOINT_URL = os.getenv("S3_ENDPOINT_URL") or None
S3_ACCESS_KEY = os.getenv("S3_ACCESS_KEY", "")
S3_SECRET_KEY = os.getenv("S3_SECRET_KEY", "")
S3_REGION = os.getenv("S3_REGION", "us-east-1")
S3_BUCKET_NAME = os.getenv("S3_BUCKET_NAME", "travel-agency-images")
S3_PUBLIC_BASE = os.getenv("S3_PUBLIC_BASE", "http://localhost:9000/travel-agency-images").rstrip("/")
MAX_IMAGE_SIZE = int(os.getenv("MAX_IMAGE_SIZE", str(5 * 1024 * 1024)))  # 5MB

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


class Settings:
    PROJECT_NAME: str = "Travel Agency API"
    VERSION: str = "1.0.0"
    MONGODB_URL = MONGODB_URL
    MONGODB_DB = MONGODB_DB
    SECRET_KEY = SECRET_KEY
    ACCESS_TOKEN_EXPIRE_MINUTES = ACCESS_TOKEN_EXPIRE_MINUTES
    REQUIRE_ADMIN_ROLE = REQUIRE_ADMIN_ROLE
    ALLOWED_ORIGINS = ALLOWED_ORIGINS
    S3_ENDPOINT_URL = S3_ENDPOINT_URL
    S3_ACCESS_KEY = S3_ACCESS_KEY
    S3_SECRET_KEY = S3_SECRET_KEY
    S3_REGION = S3_REGION
    S3_BUCKET_NAME = S3_BUCKET_NAME
    S3_PUBLIC_BASE = S3_PUBLIC_BASE
    MAX_IMAGE_SIZE = MAX_IMAGE_SIZE
    LOG_LEVEL = LOG_LEVEL


settings = Settings()
