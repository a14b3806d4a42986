import pytest

from kiosk.storage import AttachmentStorage


@pytest.mark.asyncio
async def test_store_writes_file_and_returns_public_path(storage: AttachmentStorage):
    path = await storage.store(b"hello", filename="Photo.JPG")

    assert path.startswith("/uploads/")
    assert path.endswith(".jpg")
    stored = storage.directory / path.rsplit("/", 1)[-1]
    assert stored.read_bytes() == b"hello"


@pytest.mark.asyncio
async def test_store_ignores_suspicious_suffix(storage: AttachmentStorage):
    path = await storage.store(b"x", filename="evil.p$p")

    assert "." not in path.rsplit("/", 1)[-1]


@pytest.mark.asyncio
async def test_discard_removes_file(storage: AttachmentStorage):
    path = await storage.store(b"bye")

    await storage.discard(path)

    assert list(storage.directory.iterdir()) == []


@pytest.mark.asyncio
async def test_discard_refuses_paths_outside_storage(storage: AttachmentStorage, tmp_path):
    outside = tmp_path / "keep.txt"
    outside.write_text("keep")

    await storage.discard("/uploads/../keep.txt")
    await storage.discard("/elsewhere/keep.txt")

    assert outside.exists()
