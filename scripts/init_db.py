"""
Create tables straight from the ORM metadata (no Alembic) and optionally seed demo rows.

Usage:
  python scripts/init_db.py            # tables only
  python scripts/init_db.py --demo     # tables + sample todos/animals (idempotent)
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Ensure repo root is on sys.path when running as a script.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.menagerie.db import build_engine  # noqa: E402
from app.menagerie.models import Base  # noqa: E402
from app.menagerie.modules.animals.models import Animal  # noqa: E402
from app.menagerie.modules.todos.models import Todo  # noqa: E402
from scripts._db_utils import resolve_database_url, script_session  # noqa: E402

DEMO_TODOS = (
    ("Read the routing docs", True),
    ("Write the Todo model", True),
    ("Build the Animal admin", False),
    ("Upload some photos", False),
)

DEMO_ANIMALS = (
    ("Rex", "dog", 4, "Loves fetch."),
    ("Misty", "cat", 2, None),
    ("Kiwi", "bird", 1, "Whistles at dawn."),
    ("Clover", "horse", 11, None),
    ("Bubbles", "fish", None, "Goldfish, age unknown."),
)


def create_tables(database_url: str | None = None) -> str:
    db_url = resolve_database_url(database_url)
    engine = build_engine(db_url)
    try:
        Base.metadata.create_all(bind=engine)
    finally:
        engine.dispose()
    return db_url


def seed_demo(database_url: str | None = None) -> tuple[int, int]:
    """Insert demo rows that are not already present (matched by title/name). Returns (todos, animals) added."""
    db_url = resolve_database_url(database_url)
    added_todos = added_animals = 0
    with script_session(db_url) as s:
        existing_titles = {t for (t,) in s.query(Todo.title).all()}
        for title, completed in DEMO_TODOS:
            if title not in existing_titles:
                s.add(Todo(title=title, completed=completed))
                added_todos += 1

        existing_names = {n for (n,) in s.query(Animal.name).all()}
        for name, species, age, description in DEMO_ANIMALS:
            if name not in existing_names:
                s.add(Animal(name=name, species=species, age=age, description=description))
                added_animals += 1
    return added_todos, added_animals


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--database-url", default=None, help="Defaults to $DATABASE_URL")
    parser.add_argument("--demo", action="store_true", help="Seed sample todos and animals")
    args = parser.parse_args(argv)

    db_url = create_tables(args.database_url)
    print(f"Initialized database tables ({db_url.split('://', 1)[0]}).")
    if args.demo:
        todos, animals = seed_demo(db_url)
        print(f"Seeded demo data: {todos} todos, {animals} animals.")


if __name__ == "__main__":
    main()
