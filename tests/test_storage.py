import pytest

from app.menagerie.storage import LocalStorage, S3Storage, StorageError, normalize_key, public_url, storage_from_config


def test_normalize_key():
    assert normalize_key("/photos//a.png") == "photos/a.png"
    assert normalize_key("photos\\b.png") == "photos/b.png"
    assert normalize_key("./photos/c.png") == "photos/c.png"
    for bad in ("", "/", "../secret", "photos/../../etc/passwd"):
        with pytest.raises(StorageError):
            normalize_key(bad)


def test_local_storage_roundtrip_and_delete(tmp_path):
    st = LocalStorage(root=tmp_path)
    st.put_bytes("photos/a.bin", b"abc")
    assert st.exists("photos/a.bin")
    with st.open("photos/a.bin") as fh:
        assert fh.read() == b"abc"
    assert st.delete("photos/a.bin") is True
    assert st.delete("photos/a.bin") is False
    assert not st.exists("photos/a.bin")


def test_local_storage_open_missing_raises(tmp_path):
    with pytest.raises(StorageError):
        LocalStorage(root=tmp_path).open("photos/none.png")


def test_storage_from_config(tmp_path):
    local = storage_from_config({"STORAGE_BACKEND": "local", "STORAGE_ROOT": str(tmp_path)})
    assert isinstance(local, LocalStorage)
    assert local.root == tmp_path

    s3 = storage_from_config({"STORAGE_BACKEND": "S3", "S3_BUCKET": " pics "})
    assert isinstance(s3, S3Storage)
    assert s3.bucket == "pics"

    with pytest.raises(StorageError):
        storage_from_config({"STORAGE_BACKEND": "ftp"})


def test_public_url():
    assert public_url({"STORAGE_URL_PREFIX": "/media/"}, "photos/a.png") == "/media/photos/a.png"
    assert public_url({}, "/photos/a.png") == "/storage/photos/a.png"


def test_storage_route_404s(client, storage_root):
    storage_root.mkdir(parents=True, exist_ok=True)
    (storage_root.parent / "secret.txt").write_text("nope")
    assert client.get("/storage/photos/missing.png").status_code == 404
    assert client.get("/storage/..%2Fsecret.txt").status_code == 404
