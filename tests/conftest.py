import io

import pytest
from PIL import Image

from app.menagerie import create_app
from app.menagerie.models import Base


@pytest.fixture()
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("STORAGE_BACKEND", "local")
    monkeypatch.setenv("STORAGE_ROOT", str(tmp_path / "storage"))
    monkeypatch.setenv("CSRF_ENABLED", "0")
    for k in ("S3_ENDPOINT", "S3_REGION", "S3_BUCKET", "S3_ACCESS_KEY_ID", "S3_SECRET_ACCESS_KEY",
              "ANIMALS_PER_PAGE", "PHOTOS_PER_PAGE", "PHOTO_MAX_BYTES", "MAX_CONTENT_LENGTH"):
        monkeypatch.delenv(k, raising=False)

    app = create_app()
    engine = app.extensions["sqlalchemy_engine"]
    Base.metadata.create_all(bind=engine)
    return app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def storage_root(tmp_path):
    return tmp_path / "storage"


def image_bytes(color: str = "red", fmt: str = "PNG", size: tuple[int, int] = (8, 8)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture()
def make_image():
    return image_bytes
