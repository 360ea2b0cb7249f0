"""
Validation round-trip helpers.

A failed POST stores its field errors and submitted values in the session and
redirects back to the form; the next render pops them into `errors` / `old`.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from flask import flash, session

_ERRORS_KEY = "form_errors"
_OLD_KEY = "form_old"


def clean_str(value: Any) -> str | None:
    """Strip a form value; blank becomes None."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def parse_optional_int(value: Any) -> tuple[int | None, bool]:
    """Returns (value, ok). Blank input is (None, True)."""
    raw = clean_str(value)
    if raw is None:
        return None, True
    try:
        return int(raw), True
    except ValueError:
        return None, False


def parse_checkbox(value: Any) -> bool:
    return (str(value or "").strip().lower()) in ("1", "on", "true", "yes")


def remember_failed_form(errors: Mapping[str, str], form: Mapping[str, Any]) -> None:
    session[_ERRORS_KEY] = dict(errors)
    # Never keep file payloads or hidden plumbing fields.
    session[_OLD_KEY] = {k: v for k, v in form.items() if k not in ("csrf_token", "_method")}
    flash("Please correct the errors below.", "danger")


def pop_form_state() -> dict[str, dict[str, Any]]:
    return {
        "errors": session.pop(_ERRORS_KEY, None) or {},
        "old": session.pop(_OLD_KEY, None) or {},
    }
