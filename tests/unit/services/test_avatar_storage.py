"""
Unit tests for ProfileImageStorage.
"""

import io
import logging

import pytest

from muza_accounts.core.exceptions import InputError
from muza_accounts.services.avatar_storage import ProfileImageStorage


PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture
def storage(tmp_path):
    return ProfileImageStorage(upload_dir=str(tmp_path), max_bytes=1024)


class TestValidate:
    def test_accepts_image(self, storage):
        assert storage.validate(io.BytesIO(PNG_BYTES), "image/png") == len(PNG_BYTES)

    def test_rejects_non_image(self, storage):
        with pytest.raises(InputError):
            storage.validate(io.BytesIO(b"%PDF-1.4"), "application/pdf")

    def test_rejects_missing_type(self, storage):
        with pytest.raises(InputError):
            storage.validate(io.BytesIO(PNG_BYTES), None)

    def test_rejects_empty_file(self, storage):
        with pytest.raises(InputError):
            storage.validate(io.BytesIO(b""), "image/png")

    def test_rejects_oversize(self, storage):
        with pytest.raises(InputError):
            storage.validate(io.BytesIO(b"\x00" * 2048), "image/png")


class TestSaveAndDelete:
    @pytest.mark.asyncio
    async def test_save_writes_under_profiles(self, storage, tmp_path):
        path = await storage.save(io.BytesIO(PNG_BYTES), "Me.PNG", "image/png")

        assert path.startswith("/uploads/profiles/profile-")
        assert path.endswith(".png")
        stored = tmp_path / "profiles" / path.rsplit("/", 1)[1]
        assert stored.read_bytes() == PNG_BYTES

    @pytest.mark.asyncio
    async def test_filenames_are_unique(self, storage):
        first = await storage.save(io.BytesIO(PNG_BYTES), "a.png", "image/png")
        second = await storage.save(io.BytesIO(PNG_BYTES), "a.png", "image/png")

        assert first != second

    @pytest.mark.asyncio
    async def test_delete_removes_file(self, storage):
        path = await storage.save(io.BytesIO(PNG_BYTES), "a.png", "image/png")

        assert await storage.delete(path) is True
        assert storage.resolve(path).exists() is False

    @pytest.mark.asyncio
    async def test_delete_missing_file(self, storage):
        assert await storage.delete("/uploads/profiles/missing.png") is False

    @pytest.mark.asyncio
    async def test_delete_ignores_paths_outside_root(self, storage):
        """
        Test stored paths cannot reach files outside the upload root.

        WHY: avatar_url may hold a legacy absolute URL or a crafted value.
        """
        assert await storage.delete("/uploads/../../etc/passwd") is False
        assert await storage.delete("https://cdn.example.com/a.png") is False
        assert await storage.delete(None) is False

    @pytest.mark.asyncio
    async def test_save_logs_stored_file_at_info(self, storage, caplog):
        caplog.set_level(logging.INFO, logger="muza_accounts.services.avatar_storage")

        path = await storage.save(io.BytesIO(PNG_BYTES), "a.png", "image/png")

        record = next(r for r in caplog.records if r.getMessage() == "Profile image stored")
        assert path.endswith(record.stored_filename)
        assert record.size == len(PNG_BYTES)
