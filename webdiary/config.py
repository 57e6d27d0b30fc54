"""Application configuration for the web diary."""

from __future__ import annotations

import os
from datetime import timedelta
from typing import Dict, Type

from dotenv import load_dotenv
from sqlalchemy.engine.url import make_url

load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes")


def _database_url(default: str) -> str:
    url = os.environ.get("DATABASE_URL", default)
    # Hosted Postgres providers hand out "postgres://", SQLAlchemy wants "postgresql://"
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    return url


def _engine_options_from_uri(uri: str) -> dict:
    url = make_url(uri)
    # Always keep pool_pre_ping, vary connect_args by dialect.
    if url.get_backend_name() == "sqlite":
        return {"pool_pre_ping": True, "connect_args": {"timeout": 30}}
    if url.get_backend_name() in {"postgresql", "postgres"}:
        timeout = int(os.environ.get("DB_CONNECT_TIMEOUT_SECONDS", "10"))
        return {"pool_pre_ping": True, "connect_args": {"connect_timeout": timeout}}
    return {"pool_pre_ping": True}


class BaseConfig:
    """Base configuration loaded for all environments."""

    SECRET_KEY = os.environ.get("SECRET_KEY", "change-me")
    SQLALCHEMY_DATABASE_URI = _database_url("sqlite:///instance/webdiary.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = _engine_options_from_uri(SQLALCHEMY_DATABASE_URI)

    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", SECRET_KEY)
    JWT_TOKEN_LOCATION = ["headers"]
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(days=int(os.environ.get("JWT_ACCESS_DAYS", "7")))

    RATELIMIT_DEFAULT = "200/hour"
    RATELIMIT_STORAGE_URI = os.environ.get("REDIS_URL", "memory://")
    RATELIMIT_ENABLED = _flag("RATELIMIT_ENABLED", "true")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Attachments
    UPLOAD_MAX_FILES = int(os.environ.get("UPLOAD_MAX_FILES", "10"))
    UPLOAD_MAX_FILE_BYTES = int(os.environ.get("UPLOAD_MAX_FILE_BYTES", str(10 * 1024 * 1024)))
    MAX_CONTENT_LENGTH = int(
        os.environ.get("MAX_CONTENT_LENGTH", str(UPLOAD_MAX_FILES * UPLOAD_MAX_FILE_BYTES + 1024 * 1024))
    )
    UPLOAD_ALLOWED_EXTENSIONS = set(
        (os.environ.get("UPLOAD_ALLOWED_EXTENSIONS") or "jpeg,jpg,png,gif,webp,pdf,txt,doc,docx").split(",")
    )
    UPLOAD_ALLOWED_MIME_TYPES = {
        "image/jpeg",
        "image/jpg",
        "image/png",
        "image/gif",
        "image/webp",
        "application/pdf",
        "text/plain",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    }
    UPLOAD_WORKERS = int(os.environ.get("UPLOAD_WORKERS", "4"))

    # Blob storage (S3-compatible: AWS S3, Cloudflare R2, Supabase, Spaces)
    STORAGE_BACKEND = os.environ.get("STORAGE_BACKEND", "s3")
    STORAGE_BUCKET = os.environ.get("STORAGE_BUCKET", "")
    STORAGE_REGION = os.environ.get("STORAGE_REGION", "us-east-1")
    STORAGE_ENDPOINT = os.environ.get("STORAGE_ENDPOINT", "")
    STORAGE_ACCESS_KEY_ID = os.environ.get("STORAGE_ACCESS_KEY_ID", "")
    STORAGE_SECRET_ACCESS_KEY = os.environ.get("STORAGE_SECRET_ACCESS_KEY", "")
    STORAGE_PUBLIC_URL = os.environ.get("STORAGE_PUBLIC_URL", "")
    STORAGE_KEY_PREFIX = os.environ.get("STORAGE_KEY_PREFIX", "uploads")

    # Search and views
    SEARCH_SNIPPET_CONTEXT = int(os.environ.get("SEARCH_SNIPPET_CONTEXT", "40"))
    SEARCH_PREVIEW_LENGTH = int(os.environ.get("SEARCH_PREVIEW_LENGTH", "160"))
    SEARCH_DEFAULT_LIMIT = 20
    SEARCH_MAX_LIMIT = 100
    TIMELINE_DEFAULT_LIMIT = 20


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    ENV = "development"


class TestingConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.environ.get("TEST_DATABASE_URL", "sqlite://")
    SQLALCHEMY_ENGINE_OPTIONS: dict = {}
    RATELIMIT_ENABLED = False
    JWT_SECRET_KEY = "test-jwt-secret-key-with-enough-length"
    STORAGE_BACKEND = "memory"
    STORAGE_PUBLIC_URL = "https://files.test"
    UPLOAD_WORKERS = 2


class ProductionConfig(BaseConfig):
    ENV = "production"


config_by_name: Dict[str, Type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    # CI pipelines set APP_ENV=ci; map to testing defaults.
    "ci": TestingConfig,
}
