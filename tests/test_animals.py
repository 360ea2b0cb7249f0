"""Tests for the Animals admin."""
import re

from app.menagerie.db import session_scope
from app.menagerie.modules.animals.models import Animal
from app.menagerie.modules.photos.models import Photo


def _animal(app, **kw) -> int:
    values = {"name": "Rex", "species": "dog", "age": 3}
    values.update(kw)
    with session_scope(app) as s:
        a = Animal(**values)
        s.add(a)
        s.flush()
        return a.id


def _photo(app, path="photos/a.png", title="A") -> int:
    with session_scope(app) as s:
        p = Photo(path=path, title=title)
        s.add(p)
        s.flush()
        return p.id


def _get(app, animal_id):
    with session_scope(app) as s:
        return s.get(Animal, animal_id)


def _names_in_order(html: bytes) -> list[str]:
    return re.findall(r'/admin/animals/\d+">([^<]+)</a>', html.decode())


def test_list_ok(client):
    r = client.get("/admin/animals")
    assert r.status_code == 200
    assert b"Animals" in r.data
    assert b"Showing" in r.data


def test_list_paginates_at_fixed_size(app, client):
    for i in range(12):
        _animal(app, name=f"Pet {i:02d}")
    r = client.get("/admin/animals?sort=name")
    assert len(_names_in_order(r.data)) == 10
    assert b"of 12" in r.data

    r = client.get("/admin/animals?sort=name&page=2")
    assert _names_in_order(r.data) == ["Pet 10", "Pet 11"]


def test_pagination_links_keep_search_and_sort(app, client):
    for i in range(12):
        _animal(app, name=f"Pet {i:02d}")
    r = client.get("/admin/animals?q=Pet&sort=name&direction=asc")
    html = r.data.decode()
    next_links = [h for h in re.findall(r'href="([^"]+)"', html) if "page=2" in h]
    assert next_links
    assert "q=Pet" in next_links[0]
    assert "sort=name" in next_links[0]


def test_search_matches_name_or_species(app, client):
    _animal(app, name="Misty", species="cat")
    _animal(app, name="Catalina", species="horse")
    _animal(app, name="Rex", species="dog")
    r = client.get("/admin/animals?q=cat")
    assert sorted(_names_in_order(r.data)) == ["Catalina", "Misty"]


def test_sort_by_age_desc(app, client):
    _animal(app, name="Young", age=1)
    _animal(app, name="Old", age=12)
    _animal(app, name="Middle", age=5)
    r = client.get("/admin/animals?sort=age&direction=desc")
    assert _names_in_order(r.data) == ["Old", "Middle", "Young"]


def test_unknown_sort_column_is_ignored(app, client):
    _animal(app, name="Rex")
    r = client.get("/admin/animals?sort=photo_id;drop&direction=sideways&page=abc")
    assert r.status_code == 200
    assert _names_in_order(r.data) == ["Rex"]


def test_create_form_lists_species_and_photos(app, client):
    _photo(app, title="Sunny portrait")
    r = client.get("/admin/animals/create")
    assert r.status_code == 200
    for sp in (b"dog", b"cat", b"bird", b"horse", b"fish", b"other"):
        assert b'value="' + sp + b'"' in r.data
    assert b"Sunny portrait" in r.data


def test_create_animal(app, client):
    photo_id = _photo(app)
    r = client.post(
        "/admin/animals",
        data={"name": "Biscuit", "species": "dog", "age": "7", "description": "Good boy", "photo_id": str(photo_id)},
    )
    assert r.status_code == 302
    with session_scope(app) as s:
        a = s.query(Animal).one()
        assert (a.name, a.species, a.age, a.description, a.photo_id) == ("Biscuit", "dog", 7, "Good boy", photo_id)
    assert r.headers["Location"].endswith(f"/admin/animals/{a.id}")


def test_create_animal_optional_fields_blank(app, client):
    client.post("/admin/animals", data={"name": "Nemo", "species": "fish", "age": "", "description": "", "photo_id": ""})
    with session_scope(app) as s:
        a = s.query(Animal).one()
        assert a.age is None
        assert a.description is None
        assert a.photo_id is None


def test_create_animal_validation_errors_keep_old_input(app, client):
    r = client.post(
        "/admin/animals",
        data={"name": "Nessie", "species": "dragon", "age": "-2", "photo_id": "999"},
        follow_redirects=True,
    )
    assert r.status_code == 200
    assert b"Species must be one of" in r.data
    assert b"Age must be between 0 and 200." in r.data
    assert b"The selected photo does not exist." in r.data
    assert b'value="Nessie"' in r.data
    with session_scope(app) as s:
        assert s.query(Animal).count() == 0


def test_create_animal_requires_name_and_integer_age(app, client):
    r = client.post("/admin/animals", data={"name": "", "species": "cat", "age": "two"}, follow_redirects=True)
    assert b"Name is required." in r.data
    assert b"Age must be a whole number." in r.data


def test_errors_are_shown_once(app, client):
    client.post("/admin/animals", data={"name": "", "species": "cat"}, follow_redirects=True)
    r = client.get("/admin/animals/create")
    assert b"Name is required." not in r.data


def test_detail_and_edit_pages(app, client):
    animal_id = _animal(app, name="Clover", species="horse", description="Fast")
    r = client.get(f"/admin/animals/{animal_id}")
    assert b"Clover" in r.data and b"Fast" in r.data
    r = client.get(f"/admin/animals/{animal_id}/edit")
    assert r.status_code == 200
    assert b'value="Clover"' in r.data
    assert b'value="horse" selected' in r.data


def test_update_animal(app, client):
    animal_id = _animal(app)
    photo_id = _photo(app)
    r = client.patch(
        f"/admin/animals/{animal_id}",
        data={"name": "Rex II", "species": "other", "age": "", "description": "Renamed", "photo_id": str(photo_id)},
    )
    assert r.status_code == 302
    a = _get(app, animal_id)
    assert (a.name, a.species, a.age, a.description, a.photo_id) == ("Rex II", "other", None, "Renamed", photo_id)


def test_update_animal_invalid_leaves_row_untouched(app, client):
    animal_id = _animal(app)
    r = client.patch(f"/admin/animals/{animal_id}", data={"name": "", "species": "dog"})
    assert r.status_code == 302
    assert r.headers["Location"].endswith(f"/admin/animals/{animal_id}/edit")
    assert _get(app, animal_id).name == "Rex"


def test_delete_animal(app, client):
    animal_id = _animal(app)
    r = client.delete(f"/admin/animals/{animal_id}")
    assert r.status_code == 302
    assert _get(app, animal_id) is None


def test_huge_page_number_is_an_empty_page(app, client):
    _animal(app, name="Rex")
    r = client.get("/admin/animals?page=99999999999999999999")
    assert r.status_code == 200
    assert _names_in_order(r.data) == []


def test_out_of_range_photo_id_is_a_field_error(app, client):
    r = client.post(
        "/admin/animals",
        data={"name": "Rex", "species": "dog", "photo_id": "99999999999999999999"},
    )
    assert r.status_code == 302
    with client.session_transaction() as sess:
        assert sess["form_errors"]["photo_id"] == "The selected photo does not exist."
    with session_scope(app) as s:
        assert s.query(Animal).count() == 0


def test_huge_animal_id_is_404(client):
    assert client.get("/admin/animals/99999999999999999999").status_code == 404
    assert client.delete("/admin/animals/99999999999999999999").status_code == 404


def test_default_order_is_newest_first_with_id_tiebreak(app, client):
    # same created_at: the later insert has the larger id and comes first
    from datetime import datetime

    stamp = datetime(2024, 1, 1, 12, 0, 0)
    _animal(app, name="First", created_at=stamp)
    _animal(app, name="Second", created_at=stamp)
    _animal(app, name="Older", created_at=datetime(2023, 1, 1))
    r = client.get("/admin/animals")
    assert _names_in_order(r.data) == ["Second", "First", "Older"]
