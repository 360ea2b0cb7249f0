import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    secret_key: str
    env: str
    database_url: str

    storage_backend: str
    storage_root: str
    storage_url_prefix: str
    s3_endpoint: str
    s3_region: str
    s3_bucket: str
    s3_access_key_id: str
    s3_secret_access_key: str

    csrf_enabled: bool
    animals_per_page: int
    photos_per_page: int
    photo_max_bytes: int
    max_content_length: int


def _getenv(name: str, default: str = "") -> str:
    return (os.environ.get(name) or default).strip()


def _getint(name: str, default: int) -> int:
    raw = _getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer (got {raw!r}).") from None


def load_settings() -> Settings:
    return Settings(
        secret_key=_getenv("SECRET_KEY", "change-me"),
        env=_getenv("ENV", "development"),
        database_url=_getenv("DATABASE_URL", "sqlite:///menagerie.db"),
        storage_backend=_getenv("STORAGE_BACKEND", "local"),
        storage_root=_getenv("STORAGE_ROOT", os.path.join("storage", "app", "public")),
        storage_url_prefix=_getenv("STORAGE_URL_PREFIX", "/storage"),
        s3_endpoint=_getenv("S3_ENDPOINT", ""),
        s3_region=_getenv("S3_REGION", "nyc3"),
        s3_bucket=_getenv("S3_BUCKET", ""),
        s3_access_key_id=_getenv("S3_ACCESS_KEY_ID", ""),
        s3_secret_access_key=_getenv("S3_SECRET_ACCESS_KEY", ""),
        csrf_enabled=_getenv("CSRF_ENABLED", "1") not in ("0", "false", "no"),
        animals_per_page=_getint("ANIMALS_PER_PAGE", 10),
        photos_per_page=_getint("PHOTOS_PER_PAGE", 12),
        photo_max_bytes=_getint("PHOTO_MAX_BYTES", 2 * 1024 * 1024),
        max_content_length=_getint("MAX_CONTENT_LENGTH", 8 * 1024 * 1024),
    )


def load_config() -> dict:
    s = load_settings()
    is_production = s.env in ("prod", "production")
    return {
        "SECRET_KEY": s.secret_key,
        "ENV": s.env,
        "DATABASE_URL": s.database_url,
        "STORAGE_BACKEND": s.storage_backend,
        "STORAGE_ROOT": s.storage_root,
        "STORAGE_URL_PREFIX": s.storage_url_prefix.rstrip("/") or "/storage",
        "S3_ENDPOINT": s.s3_endpoint,
        "S3_REGION": s.s3_region,
        "S3_BUCKET": s.s3_bucket,
        "S3_ACCESS_KEY_ID": s.s3_access_key_id,
        "S3_SECRET_ACCESS_KEY": s.s3_secret_access_key,
        "CSRF_ENABLED": s.csrf_enabled,
        # list page sizes
        "ANIMALS_PER_PAGE": max(1, s.animals_per_page),
        "PHOTOS_PER_PAGE": max(1, s.photos_per_page),
        # per-image limit; MAX_CONTENT_LENGTH caps the whole request body
        "PHOTO_MAX_BYTES": s.photo_max_bytes,
        "MAX_CONTENT_LENGTH": s.max_content_length,
        # security defaults
        "SESSION_COOKIE_HTTPONLY": True,
        "SESSION_COOKIE_SAMESITE": "Lax",
        "SESSION_COOKIE_SECURE": is_production,
    }
