from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    pass


class Storage:
    def put_bytes(self, key: str, data: bytes, *, content_type: str | None = None) -> None:
        raise NotImplementedError

    def open(self, key: str) -> BinaryIO:
        raise NotImplementedError

    def exists(self, key: str) -> bool:
        raise NotImplementedError

    def delete(self, key: str) -> bool:
        """Remove an object. Returns False if it was already gone."""
        raise NotImplementedError


def normalize_key(key: str) -> str:
    """
    Canonical form of a storage key: forward slashes, no leading slash.
    Rejects keys that would escape the storage root.
    """
    safe_key = (key or "").replace("\\", "/").lstrip("/")
    parts = [p for p in safe_key.split("/") if p not in ("", ".")]
    if not parts or any(p == ".." for p in parts):
        raise StorageError(f"Invalid storage key: {key!r}")
    return "/".join(parts)


@dataclass(frozen=True)
class LocalStorage(Storage):
    root: Path

    def _path(self, key: str) -> Path:
        return self.root / normalize_key(key)

    def put_bytes(self, key: str, data: bytes, *, content_type: str | None = None) -> None:
        p = self._path(key)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_bytes(data)

    def open(self, key: str) -> BinaryIO:
        p = self._path(key)
        try:
            return p.open("rb")
        except FileNotFoundError as e:
            raise StorageError(f"Storage object not found: {key}") from e

    def exists(self, key: str) -> bool:
        return self._path(key).is_file()

    def delete(self, key: str) -> bool:
        p = self._path(key)
        try:
            p.unlink()
        except FileNotFoundError:
            return False
        return True


@dataclass(frozen=True)
class S3Storage(Storage):
    endpoint: str
    region: str
    bucket: str
    access_key_id: str
    secret_access_key: str

    def _client(self):
        try:
            import boto3  # type: ignore
        except ImportError as e:  # pragma: no cover
            raise StorageError("boto3 required for S3 storage. Install menagerie[s3].") from e
        return boto3.client(
            "s3",
            endpoint_url=f"https://{self.endpoint}" if self.endpoint else None,
            region_name=self.region or None,
            aws_access_key_id=self.access_key_id,
            aws_secret_access_key=self.secret_access_key,
        )

    def put_bytes(self, key: str, data: bytes, *, content_type: str | None = None) -> None:
        extra: dict[str, object] = {}
        if content_type:
            extra["ContentType"] = content_type
        self._client().put_object(Bucket=self.bucket, Key=normalize_key(key), Body=data, **extra)

    def open(self, key: str) -> BinaryIO:
        from botocore.exceptions import ClientError  # type: ignore

        try:
            obj = self._client().get_object(Bucket=self.bucket, Key=normalize_key(key))
        except ClientError as e:
            raise StorageError(f"Storage object not found: {key}") from e
        return obj["Body"]  # type: ignore[return-value]

    def exists(self, key: str) -> bool:
        from botocore.exceptions import ClientError  # type: ignore

        try:
            self._client().head_object(Bucket=self.bucket, Key=normalize_key(key))
            return True
        except ClientError:
            return False

    def delete(self, key: str) -> bool:
        # S3 deletes are idempotent; check first so callers get the same answer as LocalStorage.
        if not self.exists(key):
            return False
        self._client().delete_object(Bucket=self.bucket, Key=normalize_key(key))
        return True


def storage_from_config(config: dict) -> Storage:
    backend = (config.get("STORAGE_BACKEND") or "local").strip().lower()
    if backend == "s3":
        return S3Storage(
            endpoint=(config.get("S3_ENDPOINT") or "").strip(),
            region=(config.get("S3_REGION") or "nyc3").strip(),
            bucket=(config.get("S3_BUCKET") or "").strip(),
            access_key_id=(config.get("S3_ACCESS_KEY_ID") or "").strip(),
            secret_access_key=(config.get("S3_SECRET_ACCESS_KEY") or "").strip(),
        )
    if backend != "local":
        raise StorageError(f"Unknown STORAGE_BACKEND: {backend!r}")
    root = Path(config.get("STORAGE_ROOT") or os.path.join("storage", "app", "public"))
    if not root.is_absolute():
        root = Path(os.getcwd()) / root
    return LocalStorage(root=root)


def public_url(config: dict, key: str) -> str:
    """URL under which the storage route serves `key`."""
    prefix = (config.get("STORAGE_URL_PREFIX") or "/storage").rstrip("/")
    return f"{prefix}/{normalize_key(key)}"
