import asyncio
import re
from datetime import datetime

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from storage_naming.backends import LocalFileStorage
from storage_naming.models import FileDescriptor
from storage_naming.storage import StorageError


@pytest.fixture
def upload(tmp_path):
    source = tmp_path / "upload" / "holiday photo_o.jpg"
    source.parent.mkdir()
    source.write_bytes(b"jpeg-bytes")
    return source


@pytest.fixture
def storage(tmp_path):
    return LocalFileStorage(tmp_path / "content")


def test_save_copies_into_dated_folder(storage, upload):
    stored = asyncio.run(storage.save(FileDescriptor(name=upload.name, path=upload)))

    now = datetime.now()
    assert re.fullmatch(rf"{now:%Y}/{now:%m}/holiday-photo-[0-9a-f]{{16}}_o\.jpg", stored)
    assert (storage.storage_path / stored).read_bytes() == b"jpeg-bytes"


def test_save_into_explicit_target_dir(storage, upload):
    target_dir = storage.storage_path / "images"
    stored = asyncio.run(storage.save(FileDescriptor(name="a.png", path=upload), target_dir))

    assert re.fullmatch(r"images/a-[0-9a-f]{16}\.png", stored)


def test_save_without_source_raises(storage):
    with pytest.raises(StorageError):
        asyncio.run(storage.save(FileDescriptor(name="missing.png")))


def test_exists_and_delete(storage, upload):
    target_dir = storage.storage_path / "files"
    stored = asyncio.run(storage.save(FileDescriptor(name="doc.pdf", path=upload), target_dir))
    filename = stored.split("/")[-1]

    assert asyncio.run(storage.exists(filename, target_dir)) is True
    asyncio.run(storage.delete(filename, target_dir))
    assert asyncio.run(storage.exists(filename, target_dir)) is False

    # Deleting twice is harmless.
    asyncio.run(storage.delete(filename, target_dir))


def test_read_returns_stored_bytes(storage, upload):
    stored = asyncio.run(storage.save(FileDescriptor(name="doc.pdf", path=upload)))
    assert asyncio.run(storage.read(stored)) == b"jpeg-bytes"


def test_read_rejects_paths_outside_root(storage):
    with pytest.raises(StorageError):
        asyncio.run(storage.read("../secret.txt"))


def test_read_missing_file_raises(storage):
    with pytest.raises(StorageError):
        asyncio.run(storage.read("2020/01/nothing.png"))


def test_get_unique_file_name_against_disk(storage, upload):
    target_dir = storage.storage_path / "legacy"
    target_dir.mkdir(parents=True)
    (target_dir / "report.pdf").write_bytes(b"x")

    result = asyncio.run(storage.get_unique_file_name(FileDescriptor(name="report.pdf"), target_dir))
    assert result == str(target_dir / "report-1.pdf")


def test_serve_exposes_stored_files(storage, upload):
    stored = asyncio.run(storage.save(FileDescriptor(name="pic.jpg", path=upload)))

    app = FastAPI()
    app.mount("/content/files", storage.serve(), name="files")
    client = TestClient(app)

    response = client.get(f"/content/files/{stored}")
    assert response.status_code == 200
    assert response.content == b"jpeg-bytes"
    assert client.get("/content/files/nope.jpg").status_code == 404


def test_relative_target_dir_lives_under_storage_root(storage, upload):
    stored = asyncio.run(storage.save(FileDescriptor(name="doc.pdf", path=upload), "images"))

    assert re.fullmatch(r"images/doc-[0-9a-f]{16}\.pdf", stored)
    assert asyncio.run(storage.read(stored)) == b"jpeg-bytes"

    filename = stored.split("/")[-1]
    assert asyncio.run(storage.exists(filename, "images")) is True
    asyncio.run(storage.delete(filename, "images"))
    assert asyncio.run(storage.exists(filename, "images")) is False
