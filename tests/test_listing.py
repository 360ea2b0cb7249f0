"""Search / sort / paginate composition used by the admin lists."""
from app.menagerie.db import session_scope
from app.menagerie.listing import ListParams, Page, apply_search, apply_sort, page_url, paginate
from app.menagerie.modules.animals.models import Animal


def _seed(app):
    with session_scope(app) as s:
        s.add_all(
            [
                Animal(name="Rex", species="dog", age=4),
                Animal(name="Misty", species="cat", age=2),
                Animal(name="Catalina", species="horse", age=9),
                Animal(name="Kiwi", species="bird", age=None),
                Animal(name="Bubbles", species="fish", age=1),
            ]
        )


def test_list_params_degrade_to_defaults():
    p = ListParams.from_args({"q": "  rex ", "sort": "age", "direction": "DESC", "page": "3"})
    assert (p.search, p.sort, p.direction, p.page) == ("rex", "age", "desc", 3)

    p = ListParams.from_args({"direction": "sideways", "page": "abc"})
    assert (p.search, p.sort, p.direction, p.page) == ("", "", "asc", 1)

    assert ListParams.from_args({"page": "-4"}).page == 1
    assert ListParams.from_args({"page": "0"}).page == 1


def test_search_matches_either_column_case_insensitive(app):
    _seed(app)
    with session_scope(app) as s:
        q = apply_search(s.query(Animal), "CAT", [Animal.name, Animal.species])
        names = sorted(a.name for a in q.all())
    # "Misty" is a cat; "Catalina" matches by name.
    assert names == ["Catalina", "Misty"]


def test_blank_search_is_no_filter(app):
    _seed(app)
    with session_scope(app) as s:
        assert apply_search(s.query(Animal), "   ", [Animal.name]).count() == 5
        assert apply_search(s.query(Animal), None, [Animal.name]).count() == 5


def test_sort_on_allowed_column_both_directions(app):
    _seed(app)
    with session_scope(app) as s:
        asc = apply_sort(s.query(Animal), Animal, "name", "asc", ("name", "age")).all()
        desc = apply_sort(s.query(Animal), Animal, "name", "desc", ("name", "age")).all()
    assert [a.name for a in asc] == ["Bubbles", "Catalina", "Kiwi", "Misty", "Rex"]
    assert [a.name for a in desc] == ["Rex", "Misty", "Kiwi", "Catalina", "Bubbles"]


def test_sort_on_unknown_column_is_ignored(app):
    _seed(app)
    with session_scope(app) as s:
        rows = apply_sort(s.query(Animal), Animal, "description; DROP TABLE animals", "desc", ("name",)).all()
    # falls back to primary-key order
    assert [a.name for a in rows] == ["Rex", "Misty", "Catalina", "Kiwi", "Bubbles"]


def test_paginate_slices_and_reports_totals(app):
    _seed(app)
    with session_scope(app) as s:
        q = apply_sort(s.query(Animal), Animal, "name", "asc", ("name",))
        first = paginate(q, 1, 2)
        last = paginate(q, 3, 2)
        beyond = paginate(q, 9, 2)

    assert [a.name for a in first.items] == ["Bubbles", "Catalina"]
    assert (first.total, first.pages, first.has_prev, first.has_next) == (5, 3, False, True)
    assert (first.first_index, first.last_index, first.next_num) == (1, 2, 2)

    assert [a.name for a in last.items] == ["Rex"]
    assert (last.has_next, last.prev_num, last.first_index, last.last_index) == (False, 2, 5, 5)

    assert beyond.items == []
    assert beyond.first_index == 0


def test_empty_page_still_has_one_page():
    page = Page(items=[], page=1, per_page=10, total=0)
    assert page.pages == 1
    assert not page.has_next and not page.has_prev


def test_page_url_keeps_current_query_string(app):
    with app.test_request_context("/admin/animals?q=rex&sort=name&direction=desc&page=1"):
        from flask import request

        url = page_url("animals.animals_list", 3, request.args.to_dict())
    assert url.startswith("/admin/animals?")
    for part in ("q=rex", "sort=name", "direction=desc", "page=3"):
        assert part in url
    assert "page=1" not in url


def test_paginate_huge_page_skips_the_query(app):
    _seed(app)
    with session_scope(app) as s:
        page = paginate(apply_sort(s.query(Animal), Animal, "", "", ()), 10**20, 2)
    assert page.items == []
    assert page.total == 5
    assert page.has_prev and not page.has_next


def test_default_ordering_replaces_the_id_tiebreak(app):
    _seed(app)
    with session_scope(app) as s:
        rows = apply_sort(
            s.query(Animal), Animal, "nope", "asc", ("name",), default=(Animal.id.desc(),)
        ).all()
    assert [a.name for a in rows] == ["Bubbles", "Kiwi", "Catalina", "Misty", "Rex"]
