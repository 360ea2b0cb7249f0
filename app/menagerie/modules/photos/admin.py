from __future__ import annotations

from flask import Blueprint, current_app, flash, redirect, render_template, request, url_for

from app.menagerie.db import db_session, get_or_404
from app.menagerie.forms import pop_form_state, remember_failed_form
from app.menagerie.listing import ListParams, apply_search, apply_sort, page_url, paginate, sort_url
from app.menagerie.modules.photos.models import Photo
from app.menagerie.modules.photos.service import (
    create_photo,
    delete_photo,
    discard_file,
    update_photo,
    validate_image,
    validate_photo_payload,
)
from app.menagerie.storage import storage_from_config

bp = Blueprint("photos", __name__)

SORTABLE_COLUMNS = ("title", "created_at")


def _get_photo_or_404(photo_id: int) -> Photo:
    return get_or_404(Photo, photo_id)


def _form_payload() -> dict:
    return {"title": request.form.get("title")}


def _read_upload(*, required: bool):
    """Returns (upload, error) for the `image` field; (None, None) when optional and absent."""
    f = request.files.get("image")
    if not f or not f.filename:
        if required:
            return None, "Please choose an image to upload."
        return None, None
    return validate_image(f.filename, f.read(), max_bytes=current_app.config["PHOTO_MAX_BYTES"])


# ---------- List ----------
@bp.get("/photos")
def photos_list():
    s = db_session()
    params = ListParams.from_args(request.args)
    args = request.args.to_dict()

    q = s.query(Photo)
    q = apply_search(q, params.search, [Photo.title, Photo.path])
    q = apply_sort(
        q, Photo, params.sort, params.direction, SORTABLE_COLUMNS,
        default=(Photo.created_at.desc(), Photo.id.desc()),
    )
    page = paginate(q, params.page, current_app.config["PHOTOS_PER_PAGE"])

    def build_url(p: int) -> str:
        return page_url("photos.photos_list", p, args)

    def build_sort_url(column: str) -> str:
        return sort_url("photos.photos_list", column, params, args)

    return render_template(
        "admin/photos/list.html",
        photos=page.items,
        page=page,
        params=params,
        build_url=build_url,
        build_sort_url=build_sort_url,
    )


# ---------- New ----------
@bp.get("/photos/create")
def photos_new_get():
    return render_template("admin/photos/new.html", **pop_form_state())


@bp.post("/photos")
def photos_new_post():
    s = db_session()
    payload = _form_payload()

    errors = validate_photo_payload(payload)
    upload, upload_error = _read_upload(required=True)
    if upload_error:
        errors["image"] = upload_error
    if errors:
        remember_failed_form(errors, request.form)
        return redirect(url_for("photos.photos_new_get"))

    storage = storage_from_config(current_app.config)
    photo = create_photo(s, storage, upload, payload)
    s.commit()

    flash("Photo uploaded.", "success")
    return redirect(url_for("photos.photo_detail", photo_id=photo.id))


# ---------- Detail ----------
@bp.get("/photos/<int:photo_id>")
def photo_detail(photo_id: int):
    return render_template("admin/photos/detail.html", photo=_get_photo_or_404(photo_id))


# ---------- Edit ----------
@bp.get("/photos/<int:photo_id>/edit")
def photo_edit_get(photo_id: int):
    return render_template("admin/photos/edit.html", photo=_get_photo_or_404(photo_id), **pop_form_state())


@bp.route("/photos/<int:photo_id>", methods=["PUT", "PATCH"])
def photo_edit_post(photo_id: int):
    s = db_session()
    photo = _get_photo_or_404(photo_id)
    payload = _form_payload()

    errors = validate_photo_payload(payload)
    upload, upload_error = _read_upload(required=False)
    if upload_error:
        errors["image"] = upload_error
    if errors:
        remember_failed_form(errors, request.form)
        return redirect(url_for("photos.photo_edit_get", photo_id=photo_id))

    storage = storage_from_config(current_app.config)
    old_key = update_photo(s, storage, photo, payload, upload)
    s.commit()
    discard_file(storage, old_key)

    flash("Photo updated.", "success")
    return redirect(url_for("photos.photo_detail", photo_id=photo_id))


# ---------- Delete ----------
@bp.delete("/photos/<int:photo_id>")
def photo_delete(photo_id: int):
    s = db_session()
    photo = _get_photo_or_404(photo_id)
    key = delete_photo(s, photo)
    s.commit()
    discard_file(storage_from_config(current_app.config), key)

    flash("Photo deleted.", "success")
    return redirect(url_for("photos.photos_list"))
