"""Tests for upload storage and cleanup."""

import logging
import shutil
from io import BytesIO
from pathlib import Path

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from credisphere.common.uploads import UploadField, UploadSession

PHOTO = UploadField("profileImage", max_size=16)


def make_upload(content: bytes, filename: str = "photo.png", content_type: str = "image/png") -> UploadFile:
    return UploadFile(
        file=BytesIO(content),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


class TestUploadSession:
    @pytest.mark.asyncio
    async def test_save(self, tmp_path: Path) -> None:
        async with UploadSession(tmp_path, "players", (PHOTO,), request_id="req-1") as session:
            stored = await session.save("profileImage", make_upload(b"png-bytes"))

        assert stored is not None
        assert stored.relative_path == "uploads/players/profileImage/req-1/photo.png"
        assert stored.size == len(b"png-bytes")
        assert (tmp_path / "players" / "profileImage" / "req-1" / "photo.png").read_bytes() == b"png-bytes"
        assert session.errors == {}

    @pytest.mark.asyncio
    async def test_filename_is_stripped_of_directories(self, tmp_path: Path) -> None:
        async with UploadSession(tmp_path, "players", (PHOTO,), request_id="req-1") as session:
            stored = await session.save("profileImage", make_upload(b"x", filename="../../etc/passwd"))

        assert stored is not None
        assert stored.path == tmp_path / "players" / "profileImage" / "req-1" / "passwd"

    @pytest.mark.asyncio
    async def test_invalid_type(self, tmp_path: Path) -> None:
        async with UploadSession(tmp_path, "players", (PHOTO,)) as session:
            stored = await session.save("profileImage", make_upload(b"x", content_type="application/pdf"))

        assert stored is None
        error = session.errors["profileImage"]
        assert error["type"] == "invalid_type"
        assert error["message"].endswith("Received: application/pdf")

    @pytest.mark.asyncio
    async def test_too_large_is_removed(self, tmp_path: Path) -> None:
        async with UploadSession(tmp_path, "players", (PHOTO,), request_id="req-2") as session:
            stored = await session.save("profileImage", make_upload(b"x" * 17))

        assert stored is None
        assert session.errors["profileImage"]["type"] == "invalid_size"
        assert not (tmp_path / "players" / "profileImage" / "req-2").exists()

    @pytest.mark.asyncio
    async def test_unexpected_field(self, tmp_path: Path) -> None:
        async with UploadSession(tmp_path, "players", (PHOTO,)) as session:
            stored = await session.save("resume", make_upload(b"x"))

        assert stored is None
        assert session.errors["resume"] == {
            "type": "unexpected_field",
            "message": "Unexpected file field: resume",
        }

    @pytest.mark.asyncio
    async def test_cleanup_when_block_raises(self, tmp_path: Path) -> None:
        with pytest.raises(RuntimeError):
            async with UploadSession(tmp_path, "players", (PHOTO,), request_id="req-3") as session:
                await session.save("profileImage", make_upload(b"x"))
                raise RuntimeError("database unavailable")

        assert not (tmp_path / "players" / "profileImage" / "req-3").exists()

    @pytest.mark.asyncio
    async def test_failed_cleanup_is_reported(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        def fail_rmtree(path: Path, *args: object, **kwargs: object) -> None:
            raise PermissionError(f"cannot remove {path}")

        monkeypatch.setattr(shutil, "rmtree", fail_rmtree)

        with caplog.at_level(logging.WARNING, logger="credisphere.common.uploads"):
            async with UploadSession(tmp_path, "players", (PHOTO,), request_id="req-4") as session:
                await session.save("profileImage", make_upload(b"x" * 17))

        directory = tmp_path / "players" / "profileImage" / "req-4"
        assert directory.exists()
        assert session.errors["profileImage"]["type"] == "invalid_size"
        assert session.errors["general"] == {
            "type": "cleanup_error",
            "message": "One or more upload directories could not be fully cleaned up.",
        }
        [record] = [r for r in caplog.records if r.getMessage() == "Failed to remove upload directory"]
        assert record.levelno == logging.WARNING
        assert record.upload_request_id == "req-4"
        assert record.upload_directory == str(directory)
        assert "cannot remove" in record.error

    @pytest.mark.asyncio
    async def test_cleanup_returns_true_when_nothing_was_written(self, tmp_path: Path) -> None:
        session = UploadSession(tmp_path, "players", (PHOTO,))

        assert await session.cleanup() is True
        assert session.errors == {}

    def test_module_name_is_sanitised(self, tmp_path: Path) -> None:
        session = UploadSession(tmp_path, "../players", (PHOTO,), request_id="req")

        assert session.module == "___players"
        assert session.directory_for("profileImage") == tmp_path / "___players" / "profileImage" / "req"

    def test_empty_module_name(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="must not be empty"):
            UploadSession(tmp_path, "", (PHOTO,))
