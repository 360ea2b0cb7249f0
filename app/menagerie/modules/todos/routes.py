from __future__ import annotations

from flask import Blueprint, flash, redirect, render_template, request, url_for

from app.menagerie.db import db_session, get_or_404
from app.menagerie.forms import pop_form_state, remember_failed_form
from app.menagerie.modules.todos.models import Todo
from app.menagerie.modules.todos.service import (
    create_todo,
    delete_todo,
    toggle_todo,
    update_todo,
    validate_todo_payload,
)

bp = Blueprint("todos", __name__)


def _get_todo_or_404(todo_id: int) -> Todo:
    return get_or_404(Todo, todo_id)


def _form_payload() -> dict:
    payload: dict = {}
    if "title" in request.form:
        payload["title"] = request.form.get("title")
    completed = request.form.getlist("completed")
    if completed:
        # hidden "0" followed by the checkbox; the last value wins
        payload["completed"] = completed[-1]
    return payload


# ---------- Index ----------
@bp.get("/todos")
def index():
    s = db_session()
    todos = s.query(Todo).order_by(Todo.created_at.desc(), Todo.id.desc()).all()
    remaining = sum(1 for t in todos if not t.completed)
    return render_template("todos/index.html", todos=todos, remaining=remaining, **pop_form_state())


# ---------- Store ----------
@bp.post("/todos")
def store():
    s = db_session()
    payload = _form_payload()

    errors = validate_todo_payload(payload)
    if errors:
        remember_failed_form(errors, request.form)
        return redirect(url_for("todos.index"))

    todo = create_todo(s, payload)
    s.commit()

    flash(f"Todo \"{todo.title}\" created.", "success")
    return redirect(url_for("todos.index"))


# ---------- Show ----------
@bp.get("/todos/<int:todo_id>")
def show(todo_id: int):
    return render_template("todos/show.html", todo=_get_todo_or_404(todo_id))


# ---------- Edit ----------
@bp.get("/todos/<int:todo_id>/edit")
def edit(todo_id: int):
    return render_template("todos/edit.html", todo=_get_todo_or_404(todo_id), **pop_form_state())


@bp.route("/todos/<int:todo_id>", methods=["PUT", "PATCH"])
def update(todo_id: int):
    s = db_session()
    todo = _get_todo_or_404(todo_id)
    payload = _form_payload()

    errors = validate_todo_payload(payload, partial=True)
    if errors:
        remember_failed_form(errors, request.form)
        return redirect(url_for("todos.edit", todo_id=todo_id))

    update_todo(s, todo, payload)
    s.commit()

    flash("Todo updated.", "success")
    return redirect(url_for("todos.index"))


@bp.patch("/todos/<int:todo_id>/toggle")
def toggle(todo_id: int):
    s = db_session()
    todo = _get_todo_or_404(todo_id)
    toggle_todo(s, todo)
    s.commit()
    return redirect(url_for("todos.index"))


# ---------- Destroy ----------
@bp.delete("/todos/<int:todo_id>")
def destroy(todo_id: int):
    s = db_session()
    todo = _get_todo_or_404(todo_id)
    delete_todo(s, todo)
    s.commit()

    flash("Todo deleted.", "success")
    return redirect(url_for("todos.index"))
