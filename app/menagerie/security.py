import io
import secrets
from urllib.parse import parse_qs

from flask import session, Request

OVERRIDABLE_METHODS = frozenset({"PUT", "PATCH", "DELETE"})
_URLENCODED = "application/x-www-form-urlencoded"


def ensure_csrf_token() -> str:
    """Ensure a CSRF token exists in the session and return it."""
    token = session.get("csrf_token")
    if not token:
        token = secrets.token_urlsafe(32)
        session["csrf_token"] = token
    return token


def validate_csrf(req: Request) -> bool:
    """Validate CSRF token from form or header."""
    token = req.headers.get("X-CSRF-Token") or req.form.get("csrf_token")
    expected = session.get("csrf_token")
    return bool(token and expected and secrets.compare_digest(token, expected))


class MethodOverrideMiddleware:
    """
    HTML forms can only GET or POST; a POST carrying `_method=PATCH|PUT|DELETE`
    is routed as that method. The override is read from the
    X-HTTP-Method-Override header, the query string, or a urlencoded body.
    Multipart forms (file uploads) carry it in the action query string instead.

    `max_body_bytes` is an int or a callable returning one, so the limit can
    follow config changes after the app is built.
    """

    def __init__(self, wsgi_app, max_body_bytes=None):
        self.wsgi_app = wsgi_app
        self.max_body_bytes = max_body_bytes

    def _body_limit(self) -> int | None:
        limit = self.max_body_bytes
        return limit() if callable(limit) else limit

    def _method_from_body(self, environ) -> str:
        content_type = (environ.get("CONTENT_TYPE") or "").lower()
        if not content_type.startswith(_URLENCODED):
            return ""
        try:
            length = int(environ.get("CONTENT_LENGTH") or 0)
        except ValueError:
            return ""
        limit = self._body_limit()
        if length <= 0 or (limit is not None and length > limit):
            return ""
        # The body can only be read once; buffer it so the app still sees the full form.
        body = environ["wsgi.input"].read(length)
        environ["wsgi.input"] = io.BytesIO(body)
        fields = parse_qs(body.decode("latin-1"))
        return ((fields.get("_method") or [""])[0]).upper()

    def __call__(self, environ, start_response):
        if environ.get("REQUEST_METHOD", "").upper() == "POST":
            method = (environ.get("HTTP_X_HTTP_METHOD_OVERRIDE") or "").upper()
            if not method:
                qs = parse_qs(environ.get("QUERY_STRING") or "")
                method = ((qs.get("_method") or [""])[0]).upper()
            if not method:
                method = self._method_from_body(environ)
            if method in OVERRIDABLE_METHODS:
                environ["REQUEST_METHOD"] = method
        return self.wsgi_app(environ, start_response)
