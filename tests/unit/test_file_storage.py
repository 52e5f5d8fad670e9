import os

from storefront.services.file_storage import FileStorage, safe_filename, unique_filename


def test_safe_filename_replaces_unsafe_characters():
    assert safe_filename("my photo (1).png") == "my_photo__1_.png"
    assert safe_filename("ok-name_1.jpg") == "ok-name_1.jpg"


def test_safe_filename_defaults_to_image():
    assert safe_filename("") == "image"
    assert safe_filename(None) == "image"


def test_unique_filenames_differ_for_same_original():
    first = unique_filename("a.png")
    second = unique_filename("a.png")

    assert first != second
    assert first.endswith("_a.png")


def test_save_returns_public_path(tmp_path):
    storage = FileStorage(str(tmp_path))

    url = storage.save("p1", "a.png", b"data")

    assert url.startswith("/uploads/products/p1/")
    path = storage.local_path(url)
    with open(path, "rb") as fh:
        assert fh.read() == b"data"


def test_remove_ignores_remote_urls(tmp_path):
    storage = FileStorage(str(tmp_path))

    assert storage.remove("https://cdn.example.com/a.png") is False


def test_remove_missing_file_is_not_an_error(tmp_path):
    storage = FileStorage(str(tmp_path))

    assert storage.remove("/uploads/products/p1/nothing.png") is False


def test_local_path_stays_inside_base_dir(tmp_path):
    storage = FileStorage(str(tmp_path))

    assert storage.local_path("/uploads/../../etc/passwd") is None


def test_remove_deletes_stored_file(tmp_path):
    storage = FileStorage(str(tmp_path))
    url = storage.save("p1", "a.png", b"data")

    assert storage.remove(url) is True
    assert not os.path.exists(storage.local_path(url))
