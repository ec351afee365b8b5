"""Per-request file uploads with cleanup on failure.

Files land in ``<root>/<module>/<field>/<request uuid>/<original filename>``.
An :class:`UploadSession` owns the request's directories: when validation
fails, or the block raises, every directory it created is removed again.
"""

import asyncio
import logging
import re
import shutil
import uuid
from dataclasses import dataclass, field
from pathlib import Path, PurePath
from typing import Any

from fastapi import UploadFile

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)

MEGABYTE = 1024 * 1024
IMAGE_TYPES = ("image/jpeg", "image/png", "image/webp")
# Upload root is served under this URL path.
PUBLIC_PREFIX = PurePath("uploads")

_UNSAFE_MODULE_CHARS = re.compile(r"[^a-zA-Z0-9_-]")


@dataclass(frozen=True)
class UploadField:
    """Accepted upload field.

    :param name: Multipart field name
    :param allowed_types: Accepted MIME types
    :param max_size: Maximum size in bytes
    """

    name: str
    allowed_types: tuple[str, ...] = IMAGE_TYPES
    max_size: int = 2 * MEGABYTE


@dataclass
class StoredFile:
    field_name: str
    filename: str
    path: Path
    relative_path: str
    size: int


def _safe_filename(filename: str | None) -> str:
    name = PurePath((filename or "").replace("\\", "/")).name
    return name or "upload"


def _write_file(path: Path, upload: UploadFile) -> int:
    path.parent.mkdir(parents=True, exist_ok=True)
    upload.file.seek(0)
    with path.open("wb") as destination:
        shutil.copyfileobj(upload.file, destination)
    return path.stat().st_size


@dataclass
class UploadSession:
    """Stores the files of one request and cleans up after failures.

    Use as an async context manager::

        async with UploadSession(root, "players", fields) as session:
            await session.save("profileImage", upload)
            if session.errors:
                ...  # directories are removed on exit

    :param root: Upload root directory
    :param module: Resource name, sanitised for use as a directory
    :param fields: Accepted upload fields
    """

    root: Path
    module: str
    fields: tuple[UploadField, ...]
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    stored: dict[str, list[StoredFile]] = field(default_factory=dict)
    errors: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.root = Path(self.root)
        safe_module = _UNSAFE_MODULE_CHARS.sub("_", self.module)
        if not safe_module:
            msg = "Upload module name must not be empty"
            raise ValueError(msg)
        if safe_module != self.module:
            LOGGER.warning(
                "Upload module name %r sanitised to %r",
                self.module,
                safe_module,
            )
        self.module = safe_module
        self._fields = {upload_field.name: upload_field for upload_field in self.fields}

    async def __aenter__(self) -> "UploadSession":
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        if exc_type is not None or self.errors:
            await self.cleanup()

    def directory_for(self, field_name: str) -> Path:
        return self.root / self.module / field_name / self.request_id

    def _add_error(self, field_name: str, error_type: str, message: str) -> None:
        self.errors.setdefault(field_name, {"type": error_type, "message": message})

    async def save(self, field_name: str, upload: UploadFile) -> StoredFile | None:
        """Validate and store one uploaded file.

        :param field_name: Multipart field the file arrived in
        :param upload: Uploaded file
        :return: The stored file, or None when it failed validation
        """
        config = self._fields.get(field_name)
        if config is None:
            self._add_error(
                field_name,
                "unexpected_field",
                f"Unexpected file field: {field_name}",
            )
            return None

        if upload.content_type not in config.allowed_types:
            self._add_error(
                field_name,
                "invalid_type",
                f"Invalid file type for field '{field_name}'. "
                f"Allowed: {', '.join(config.allowed_types)}. "
                f"Received: {upload.content_type or 'N/A'}",
            )
            return None

        filename = _safe_filename(upload.filename)
        path = self.directory_for(field_name) / filename
        size = await asyncio.to_thread(_write_file, path, upload)

        if size > config.max_size:
            self._add_error(
                field_name,
                "invalid_size",
                f"File too large for field '{field_name}'. "
                f"Max size: {config.max_size / MEGABYTE:.2f} MB. "
                f"Received: {size / MEGABYTE:.2f} MB",
            )

        stored = StoredFile(
            field_name=field_name,
            filename=filename,
            path=path,
            relative_path=(PUBLIC_PREFIX / path.relative_to(self.root)).as_posix(),
            size=size,
        )
        self.stored.setdefault(field_name, []).append(stored)
        return stored if field_name not in self.errors else None

    async def cleanup(self) -> bool:
        """Remove every directory this request created.

        A failure is logged as a structured warning and reported under the
        ``general`` key of :attr:`errors`; it never raises.

        :return: True when every directory was removed
        """
        succeeded = True
        for field_name in self._fields:
            target = self.directory_for(field_name)
            if not target.exists():
                continue
            try:
                await asyncio.to_thread(shutil.rmtree, target)
            except OSError as e:
                succeeded = False
                LOGGER.warning(
                    "Failed to remove upload directory",
                    extra={
                        "upload_request_id": self.request_id,
                        "upload_directory": str(target),
                        "error": str(e),
                    },
                )
        if not succeeded:
            self.errors.setdefault(
                "general",
                {
                    "type": "cleanup_error",
                    "message": "One or more upload directories could not be fully cleaned up.",
                },
            )
        return succeeded
