"""
QuickAI Backend - File Service Unit Tests
==========================================

What:  Tests for upload spooling: size limits, stored names, cleanup.
How:   Each test spools into pytest's tmp_path.
"""

import pytest
from pathlib import Path

from quickai.services.file_service import FileService, UploadTooLargeError


class TestSizeValidation:

    def setup_method(self):
        self.service = FileService()

    def test_within_limit(self):
        self.service.validate_size(b"x" * 1000)

    def test_exactly_at_limit(self):
        self.service.validate_size(b"x" * 2048, max_size=2048)

    def test_over_limit(self):
        with pytest.raises(UploadTooLargeError, match="exceeds 1MB limit"):
            self.service.validate_size(b"x" * (1024 * 1024 + 1), max_size=1024 * 1024)

    def test_default_limit_from_settings(self):
        with pytest.raises(UploadTooLargeError, match="10MB"):
            self.service.validate_size(b"x" * (10 * 1024 * 1024 + 1))


class TestStorage:

    @pytest.mark.asyncio
    async def test_store_upload_writes_content(self, tmp_path, sample_image_bytes):
        service = FileService(upload_root=str(tmp_path))

        path = await service.store_upload(sample_image_bytes, "holiday.JPG")

        stored = Path(path)
        assert stored.parent == tmp_path.resolve()
        assert stored.suffix == ".jpg"
        assert stored.read_bytes() == sample_image_bytes

    @pytest.mark.asyncio
    async def test_client_filename_not_used(self, tmp_path):
        service = FileService(upload_root=str(tmp_path))

        path = await service.store_upload(b"data", "../../etc/passwd")

        stored = Path(path)
        assert stored.parent == tmp_path.resolve()
        assert "passwd" not in stored.name
        assert stored.suffix == ""

    @pytest.mark.asyncio
    async def test_cleanup_removes_file(self, tmp_path):
        service = FileService(upload_root=str(tmp_path))
        path = await service.store_upload(b"data", "a.png")

        await service.cleanup_file(path)

        assert not Path(path).exists()

    @pytest.mark.asyncio
    async def test_cleanup_missing_file_is_quiet(self, tmp_path):
        service = FileService(upload_root=str(tmp_path))
        await service.cleanup_file(str(tmp_path / "never-existed.png"))
