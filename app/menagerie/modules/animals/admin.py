from __future__ import annotations

from flask import Blueprint, current_app, flash, redirect, render_template, request, url_for

from app.menagerie.db import db_session, get_or_404
from app.menagerie.forms import pop_form_state, remember_failed_form
from app.menagerie.listing import ListParams, apply_search, apply_sort, page_url, paginate, sort_url
from app.menagerie.modules.animals.models import SPECIES, Animal
from app.menagerie.modules.animals.service import (
    SORTABLE_COLUMNS,
    create_animal,
    delete_animal,
    update_animal,
    validate_animal_payload,
)
from app.menagerie.modules.photos.models import Photo

bp = Blueprint("animals", __name__)

_FIELDS = ("name", "species", "age", "description", "photo_id")


def _get_animal_or_404(animal_id: int) -> Animal:
    return get_or_404(Animal, animal_id)


def _form_payload() -> dict:
    return {k: request.form.get(k) for k in _FIELDS}


def _photo_choices() -> list[Photo]:
    return db_session().query(Photo).order_by(Photo.title.asc(), Photo.id.asc()).all()


# ---------- List ----------
@bp.get("/animals")
def animals_list():
    s = db_session()
    params = ListParams.from_args(request.args)
    args = request.args.to_dict()

    q = s.query(Animal)
    q = apply_search(q, params.search, [Animal.name, Animal.species])
    q = apply_sort(
        q, Animal, params.sort, params.direction, SORTABLE_COLUMNS,
        default=(Animal.created_at.desc(), Animal.id.desc()),
    )
    page = paginate(q, params.page, current_app.config["ANIMALS_PER_PAGE"])

    def build_url(p: int) -> str:
        return page_url("animals.animals_list", p, args)

    def build_sort_url(column: str) -> str:
        return sort_url("animals.animals_list", column, params, args)

    return render_template(
        "admin/animals/list.html",
        animals=page.items,
        page=page,
        params=params,
        build_url=build_url,
        build_sort_url=build_sort_url,
    )


# ---------- New ----------
@bp.get("/animals/create")
def animals_new_get():
    return render_template(
        "admin/animals/new.html",
        species=SPECIES,
        photos=_photo_choices(),
        **pop_form_state(),
    )


@bp.post("/animals")
def animals_new_post():
    s = db_session()
    payload = _form_payload()

    errors = validate_animal_payload(s, payload)
    if errors:
        remember_failed_form(errors, request.form)
        return redirect(url_for("animals.animals_new_get"))

    animal = create_animal(s, payload)
    s.commit()

    flash(f"Animal \"{animal.name}\" created.", "success")
    return redirect(url_for("animals.animal_detail", animal_id=animal.id))


# ---------- Detail ----------
@bp.get("/animals/<int:animal_id>")
def animal_detail(animal_id: int):
    return render_template("admin/animals/detail.html", animal=_get_animal_or_404(animal_id))


# ---------- Edit ----------
@bp.get("/animals/<int:animal_id>/edit")
def animal_edit_get(animal_id: int):
    return render_template(
        "admin/animals/edit.html",
        animal=_get_animal_or_404(animal_id),
        species=SPECIES,
        photos=_photo_choices(),
        **pop_form_state(),
    )


@bp.route("/animals/<int:animal_id>", methods=["PUT", "PATCH"])
def animal_edit_post(animal_id: int):
    s = db_session()
    animal = _get_animal_or_404(animal_id)
    payload = _form_payload()

    errors = validate_animal_payload(s, payload)
    if errors:
        remember_failed_form(errors, request.form)
        return redirect(url_for("animals.animal_edit_get", animal_id=animal_id))

    update_animal(s, animal, payload)
    s.commit()

    flash("Animal updated.", "success")
    return redirect(url_for("animals.animal_detail", animal_id=animal_id))


# ---------- Delete ----------
@bp.delete("/animals/<int:animal_id>")
def animal_delete(animal_id: int):
    s = db_session()
    animal = _get_animal_or_404(animal_id)
    name = animal.name
    delete_animal(s, animal)
    s.commit()

    flash(f"Animal \"{name}\" deleted.", "success")
    return redirect(url_for("animals.animals_list"))
