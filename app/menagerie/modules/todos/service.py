from __future__ import annotations

from typing import TYPE_CHECKING

from app.menagerie.forms import clean_str, parse_checkbox

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.menagerie.modules.todos.models import Todo


def validate_todo_payload(payload: dict, *, partial: bool = False) -> dict[str, str]:
    """
    `partial=True` (updates) only validates the title when the form sends one.
    """
    errors: dict[str, str] = {}
    if partial and "title" not in payload:
        return errors
    title = clean_str(payload.get("title"))
    if not title:
        errors["title"] = "Title is required."
    elif len(title) > 255:
        errors["title"] = "Title may not be longer than 255 characters."
    return errors


def create_todo(s: "Session", payload: dict) -> "Todo":
    from app.menagerie.modules.todos.models import Todo

    todo = Todo(title=clean_str(payload.get("title")) or "", completed=parse_checkbox(payload.get("completed")))
    s.add(todo)
    s.flush()
    return todo


def update_todo(s: "Session", todo: "Todo", payload: dict) -> "Todo":
    if "title" in payload:
        todo.title = clean_str(payload.get("title")) or todo.title
    # An unchecked checkbox is simply absent from the form; the edit form sends a hidden "0".
    if "completed" in payload:
        todo.completed = parse_checkbox(payload.get("completed"))
    s.flush()
    return todo


def toggle_todo(s: "Session", todo: "Todo") -> "Todo":
    todo.completed = not todo.completed
    s.flush()
    return todo


def delete_todo(s: "Session", todo: "Todo") -> None:
    s.delete(todo)
