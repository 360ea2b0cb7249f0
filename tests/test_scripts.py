from sqlalchemy import create_engine, inspect

from scripts.init_db import DEMO_ANIMALS, DEMO_TODOS, create_tables, seed_demo


def test_init_db_creates_tables_and_seeds_idempotently(tmp_path):
    db_url = f"sqlite:///{tmp_path/'init.db'}"
    create_tables(db_url)

    engine = create_engine(db_url)
    try:
        assert {"todos", "animals", "photos"} <= set(inspect(engine).get_table_names())
    finally:
        engine.dispose()

    assert seed_demo(db_url) == (len(DEMO_TODOS), len(DEMO_ANIMALS))
    assert seed_demo(db_url) == (0, 0)
