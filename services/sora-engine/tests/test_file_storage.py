import pytest

from sora.services.file_storage import FileCategory, LocalFileStorage, StorageError

BASE_URL = "http://files.example.test/storage"


@pytest.fixture
def storage(tmp_path) -> LocalFileStorage:
    return LocalFileStorage(tmp_path, "sora-file", BASE_URL)


def test_object_path_layout(storage) -> None:
    path = storage.object_path("study-1", FileCategory.GEO, "area.kml", 1700000000000)
    assert path == "study-1/geo/1700000000000_area.kml"


def test_object_path_drops_client_directories(storage) -> None:
    path = storage.object_path("study-1", FileCategory.TECHNICAL, "../../etc/passwd", 1)
    assert path == "study-1/technical/1_passwd"


def test_upload_and_delete(storage) -> None:
    ref = storage.upload("study-1", FileCategory.TRAJECTORY, "route.geojson", b"{}", "application/geo+json")
    assert ref.name == "route.geojson"
    assert ref.size == 2
    assert ref.url.startswith(f"{BASE_URL}/sora-file/study-1/trajectory/")
    assert storage.belongs_to(ref.url, "study-1")
    assert not storage.belongs_to(ref.url, "study-2")

    storage.delete(ref.url)
    with pytest.raises(StorageError):
        storage.delete(ref.url)


def test_delete_outside_bucket_is_rejected(storage) -> None:
    with pytest.raises(StorageError):
        storage.delete("http://elsewhere.test/other-bucket/study-1/geo/1_a.kml")
    with pytest.raises(StorageError):
        storage.delete(f"{BASE_URL}/sora-file/../secrets.txt")


def test_delete_study_files(storage) -> None:
    storage.upload("study-1", FileCategory.GEO, "a.kml", b"a")
    storage.upload("study-1", FileCategory.DROSERA, "b.pdf", b"b")
    storage.upload("study-2", FileCategory.GEO, "c.kml", b"c")

    assert storage.delete_study_files("study-1") == 2
    assert storage.delete_study_files("study-1") == 0
    assert (storage.bucket_dir / "study-2").is_dir()


def test_look_alike_base_url_is_not_in_bucket(storage) -> None:
    ref = storage.upload("study-1", FileCategory.GEO, "a.kml", b"a")
    look_alike = ref.url.replace(BASE_URL, f"{BASE_URL}-evil")
    assert not storage.belongs_to(look_alike, "study-1")
    with pytest.raises(StorageError):
        storage.delete(look_alike)
    with pytest.raises(StorageError):
        storage.delete(f"{BASE_URL}/sora-file-old/study-1/geo/1_a.kml")
