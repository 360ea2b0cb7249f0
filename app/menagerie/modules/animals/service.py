from __future__ import annotations

from typing import TYPE_CHECKING

from app.menagerie.db import id_in_range
from app.menagerie.forms import clean_str, parse_optional_int
from app.menagerie.modules.animals.models import SPECIES

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.menagerie.modules.animals.models import Animal


MAX_AGE = 200

# Columns the list view may sort on; anything else falls back to the default order.
SORTABLE_COLUMNS = ("name", "species", "age", "created_at")


def validate_animal_payload(s: "Session", payload: dict) -> dict[str, str]:
    """Validate animal create/update payload. Returns field -> message."""
    from app.menagerie.modules.photos.models import Photo

    errors: dict[str, str] = {}

    name = clean_str(payload.get("name"))
    if not name:
        errors["name"] = "Name is required."
    elif len(name) > 255:
        errors["name"] = "Name may not be longer than 255 characters."

    species = clean_str(payload.get("species"))
    if not species:
        errors["species"] = "Species is required."
    elif species not in SPECIES:
        errors["species"] = f"Species must be one of: {', '.join(SPECIES)}."

    age, ok = parse_optional_int(payload.get("age"))
    if not ok:
        errors["age"] = "Age must be a whole number."
    elif age is not None and not (0 <= age <= MAX_AGE):
        errors["age"] = f"Age must be between 0 and {MAX_AGE}."

    photo_id, ok = parse_optional_int(payload.get("photo_id"))
    if not ok or (photo_id is not None and (not id_in_range(photo_id) or s.get(Photo, photo_id) is None)):
        errors["photo_id"] = "The selected photo does not exist."

    return errors


def _apply(animal: "Animal", payload: dict) -> None:
    animal.name = clean_str(payload.get("name")) or ""
    animal.species = clean_str(payload.get("species")) or ""
    animal.age = parse_optional_int(payload.get("age"))[0]
    animal.description = clean_str(payload.get("description"))
    animal.photo_id = parse_optional_int(payload.get("photo_id"))[0]


def create_animal(s: "Session", payload: dict) -> "Animal":
    from app.menagerie.modules.animals.models import Animal

    animal = Animal()
    _apply(animal, payload)
    s.add(animal)
    s.flush()
    return animal


def update_animal(s: "Session", animal: "Animal", payload: dict) -> "Animal":
    _apply(animal, payload)
    # Drop the cached relationship so templates see the new photo_id.
    s.flush()
    s.expire(animal, ["photo"])
    return animal


def delete_animal(s: "Session", animal: "Animal") -> None:
    s.delete(animal)
