import logging
import os

from flask import Flask, flash, redirect, render_template, request, url_for
from dotenv import load_dotenv

# Models first: registers every table on Base.metadata before blueprints import them.
from app.menagerie.models import Base  # noqa: F401
from app.menagerie.config import load_config
from app.menagerie.db import init_db, teardown_db_session
from app.menagerie.routes import bp as routes_bp, register_storage_route
from app.menagerie.modules.todos.routes import bp as todos_bp
from app.menagerie.modules.animals.admin import bp as animals_bp
from app.menagerie.modules.photos.admin import bp as photos_bp
from app.menagerie.security import MethodOverrideMiddleware, ensure_csrf_token, validate_csrf
from app.menagerie.storage import StorageError, public_url

logger = logging.getLogger(__name__)


def _check_production_guardrails(app: Flask) -> None:
    env = (app.config.get("ENV") or "").strip().lower()
    if env not in ("prod", "production"):
        return
    db_url = str(app.config.get("DATABASE_URL") or "").strip()
    if not db_url:
        raise RuntimeError("DATABASE_URL is required in production.")
    if db_url.startswith("sqlite"):
        raise RuntimeError("DATABASE_URL must be Postgres in production (not sqlite).")
    if str(app.config.get("SECRET_KEY") or "") in ("", "change-me"):
        raise RuntimeError("SECRET_KEY must be set to a strong value in production (not default).")


def _check_storage(app: Flask) -> None:
    if app.config.get("STORAGE_BACKEND") != "s3":
        return
    missing = [
        key
        for key in ("S3_ENDPOINT", "S3_BUCKET", "S3_ACCESS_KEY_ID", "S3_SECRET_ACCESS_KEY")
        if not app.config.get(key)
    ]
    if missing:
        app.logger.error("STORAGE CONFIG ERROR: Missing required S3 env vars: %s", ", ".join(missing))
        return
    from app.menagerie.storage import S3Storage, storage_from_config

    storage = storage_from_config(app.config)
    if isinstance(storage, S3Storage):
        try:
            storage._client().head_bucket(Bucket=storage.bucket)
        except Exception as e:
            app.logger.error("STORAGE CONFIG ERROR: Cannot access S3 bucket: %s", e)
        else:
            app.logger.info("Storage health check PASSED: S3 bucket '%s' accessible", storage.bucket)


def create_app() -> Flask:
    load_dotenv()
    app = Flask(__name__, template_folder="templates", static_folder="static")
    app.config.from_mapping(load_config())
    _check_production_guardrails(app)

    app.wsgi_app = MethodOverrideMiddleware(
        app.wsgi_app, max_body_bytes=lambda: app.config.get("MAX_CONTENT_LENGTH")
    )

    @app.context_processor
    def _inject_globals() -> dict:
        return {
            "csrf_token": ensure_csrf_token(),
            "storage_url": lambda key: public_url(app.config, key),
        }

    @app.template_filter("dateformat")
    def _dateformat_filter(value, format: str = "%Y-%m-%d %H:%M") -> str:
        if value is None:
            return "—"
        if hasattr(value, "strftime"):
            return value.strftime(format)
        return str(value)

    @app.before_request
    def _csrf_guard():
        storage_prefix = app.config["STORAGE_URL_PREFIX"] + "/"
        if request.path.startswith(("/static/", storage_prefix, "/health", "/healthz")):
            return None
        ensure_csrf_token()
        if not app.config.get("CSRF_ENABLED"):
            return None
        if request.method in ("POST", "PUT", "PATCH", "DELETE") and not validate_csrf(request):
            app.logger.warning("CSRF rejected: %s %s", request.method, request.path)
            return render_template("errors/400.html", message="CSRF token missing or invalid."), 400
        return None

    init_db(app)

    def _dispose_engine_on_fork() -> None:
        if hasattr(os, "register_at_fork"):
            def _after_fork_child():
                engine = app.extensions.get("sqlalchemy_engine")
                if engine:
                    engine.dispose()
                    app.logger.info("Disposed DB engine after fork (pid=%s)", os.getpid())

            os.register_at_fork(after_in_child=_after_fork_child)

    _dispose_engine_on_fork()
    _check_storage(app)

    app.register_blueprint(routes_bp)
    register_storage_route(app)
    app.register_blueprint(todos_bp)
    app.register_blueprint(animals_bp, url_prefix="/admin")
    app.register_blueprint(photos_bp, url_prefix="/admin")

    app.teardown_appcontext(teardown_db_session)

    @app.errorhandler(404)
    def _err_404(e):  # type: ignore[no-redef]
        return render_template("errors/404.html"), 404

    @app.errorhandler(StorageError)
    def _err_storage(e):  # type: ignore[no-redef]
        app.logger.error("Storage error on %s %s: %s", request.method, request.path, e)
        return render_template("errors/500.html", message="File storage is unavailable."), 500

    @app.errorhandler(500)
    def _err_500(e):  # type: ignore[no-redef]
        app.logger.error(
            "Unhandled 500 on %s %s: %r", request.method, request.path, getattr(e, "original_exception", e)
        )
        return render_template("errors/500.html"), 500

    @app.errorhandler(413)
    def _err_413(e):  # type: ignore[no-redef]
        limit_kb = (app.config.get("MAX_CONTENT_LENGTH") or 0) // 1024
        flash(f"File too large. Maximum request size is {limit_kb} KB.", "danger")
        referrer = request.referrer
        if referrer and referrer.startswith(request.host_url):
            return redirect(referrer), 302
        return redirect(url_for("routes.index")), 302

    logger.info("create_app() complete; app ready to serve")
    return app
