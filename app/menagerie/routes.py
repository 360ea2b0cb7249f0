import mimetypes

from flask import Blueprint, abort, current_app, render_template, send_file

from app.menagerie.db import db_session
from app.menagerie.modules.animals.models import Animal
from app.menagerie.modules.photos.models import Photo
from app.menagerie.modules.todos.models import Todo
from app.menagerie.storage import StorageError, normalize_key, storage_from_config

bp = Blueprint("routes", __name__)


@bp.get("/")
def index():
    s = db_session()
    counts = {
        "todos": s.query(Todo).count(),
        "animals": s.query(Animal).count(),
        "photos": s.query(Photo).count(),
    }
    return render_template("public/index.html", counts=counts)


@bp.get("/health")
def health():
    """Health check endpoint. Returns JSON."""
    return {"ok": True}


@bp.get("/healthz")
def healthz():
    """Fast liveness probe. No DB access."""
    return "ok", 200


def storage_file(key: str):
    """
    Serves uploaded files from the configured storage backend
    (stands in for a public/storage symlink).
    """
    try:
        key = normalize_key(key)
    except StorageError:
        abort(404)
    storage = storage_from_config(current_app.config)
    if not storage.exists(key):
        abort(404)
    mimetype = mimetypes.guess_type(key)[0] or "application/octet-stream"
    return send_file(storage.open(key), mimetype=mimetype, max_age=3600)


def register_storage_route(app) -> None:
    """Mount `storage_file` under STORAGE_URL_PREFIX (default /storage)."""
    prefix = app.config.get("STORAGE_URL_PREFIX") or "/storage"
    app.add_url_rule(f"{prefix}/<path:key>", endpoint="storage_file", view_func=storage_file, methods=["GET"])
