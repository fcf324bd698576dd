from __future__ import annotations

import mimetypes
import os
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from fastapi import UploadFile
from watchwatch.core import settings


class UploadTooLarge(Exception):
    def __init__(self, limit: int):
        super().__init__(f"upload exceeds {limit} bytes")
        self.limit = limit


@dataclass(frozen=True)
class StoredObject:
    """
    filename: generated name under STORAGE_DIR (e.g. "<uuid>.mp4")
    original_name: name the client sent
    abs_path: absolute filesystem path to the stored file
    url: public URL path (e.g. "/uploads/<uuid>.mp4"), usable as videoUrl
    """
    filename: str
    original_name: str
    abs_path: str
    url: str
    mime: str


class StorageService:
    """
    Local filesystem storage for uploaded media.

    Guarantees:
    - Generates safe file names (no user path traversal)
    - Enforces max_bytes while streaming, removing partial files
    - Writes atomically (tmp file + replace)
    """

    def __init__(
        self,
        storage_dir: str | Path | None = None,
        base_url: str | None = None,
        max_bytes: int | None = None,
    ):
        self.storage_dir = Path(storage_dir or settings.STORAGE_DIR)
        self.base_url = (base_url or settings.STORAGE_BASE_URL).rstrip("/")
        self.max_bytes = max_bytes if max_bytes is not None else settings.MAX_UPLOAD_BYTES
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    # ---------- public API ----------

    async def save_upload(self, upload: UploadFile) -> StoredObject:
        mime = self._resolve_mime(upload.filename, upload.content_type)
        suffix = self._resolve_suffix(upload.filename, mime)
        filename = f"{uuid.uuid4().hex}{suffix}"
        abs_path = self.storage_dir / filename
        tmp_path = abs_path.with_suffix(abs_path.suffix + ".tmp")

        try:
            await self._write_upload_to_path(upload, tmp_path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise
        os.replace(tmp_path, abs_path)

        return StoredObject(
            filename=filename,
            original_name=upload.filename or "",
            abs_path=str(abs_path),
            url=self.public_url(filename),
            mime=mime,
        )

    def public_url(self, key: str) -> str:
        key_norm = key.replace("\\", "/").lstrip("/")
        return f"{self.base_url}/{key_norm}"

    # ---------- internals ----------

    def _resolve_mime(self, filename: Optional[str], content_type: Optional[str]) -> str:
        if content_type and content_type != "application/octet-stream":
            return content_type
        if filename:
            guess, _ = mimetypes.guess_type(filename)
            if guess:
                return guess
        return "application/octet-stream"

    def _resolve_suffix(self, filename: Optional[str], mime: str) -> str:
        if filename:
            suf = Path(filename).suffix
            if suf and len(suf) <= 10:
                return suf
        return mimetypes.guess_extension(mime) or ".bin"

    async def _write_upload_to_path(self, upload: UploadFile, path: Path) -> None:
        chunk_size = 1024 * 1024  # 1MB
        written = 0
        with path.open("wb") as f:
            while True:
                chunk = await upload.read(chunk_size)
                if not chunk:
                    break
                written += len(chunk)
                if written > self.max_bytes:
                    raise UploadTooLarge(self.max_bytes)
                f.write(chunk)
