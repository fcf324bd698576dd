from __future__ import annotations

import os
from mimetypes import guess_type
from pathlib import Path
from typing import NamedTuple, Optional

import anyio
from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.responses import StreamingResponse

from watchwatch.api.deps import get_storage
from watchwatch.services.storage_service import StorageService


class ByteRange(NamedTuple):
    start: int
    end: int  # inclusive

    @property
    def length(self) -> int:
        return self.end - self.start + 1


class RangeNotSatisfiable(ValueError):
    pass


def parse_range(header: str, *, size: int) -> Optional[ByteRange]:
    """
    Parse a single "bytes=" range against a file of `size` bytes.
    Returns None when the header is empty; raises RangeNotSatisfiable otherwise
    on anything that cannot be served (multi-range included).
    """
    if not header:
        return None

    unit, _, spec = header.partition("=")
    spec = spec.strip()
    if unit.strip().lower() != "bytes" or not spec:
        raise RangeNotSatisfiable("invalid range unit")
    if "," in spec:
        raise RangeNotSatisfiable("multiple ranges not supported")
    if "-" not in spec:
        raise RangeNotSatisfiable("invalid range spec")

    first, last = (s.strip() for s in spec.split("-", 1))
    try:
        start = int(first) if first else None
        end = int(last) if last else None
    except ValueError:
        raise RangeNotSatisfiable("invalid range bounds")

    if start is None:
        # bytes=-N, the last N bytes
        if end is None or end <= 0:
            raise RangeNotSatisfiable("invalid suffix range")
        return ByteRange(max(0, size - end), size - 1)

    if start < 0 or start >= size:
        raise RangeNotSatisfiable("range start out of bounds")
    if end is None:
        return ByteRange(start, size - 1)
    if end < start:
        raise RangeNotSatisfiable("range end before start")
    return ByteRange(start, min(end, size - 1))


def _resolve(base_dir: Path, rel_path: str) -> Path:
    base = base_dir.resolve()
    target = (base / rel_path).resolve()
    if not target.is_relative_to(base) or not target.is_file():
        raise HTTPException(status_code=404, detail="not found")
    return target


async def _iter_file(path: Path, *, start: int, count: int, chunk_size: int = 64 * 1024):
    async with await anyio.open_file(path, mode="rb") as f:
        await f.seek(start)
        remaining = count
        while remaining > 0:
            chunk = await f.read(min(chunk_size, remaining))
            if not chunk:
                break
            remaining -= len(chunk)
            yield chunk


async def get_uploaded_file(
    rel_path: str,
    request: Request,
    storage: StorageService = Depends(get_storage),
) -> Response:
    """
    Serve uploaded media with HTTP Range (bytes) support so players can seek.
    """
    path = _resolve(storage.storage_dir, rel_path)
    size = (await anyio.to_thread.run_sync(os.stat, path)).st_size

    headers = {
        "Accept-Ranges": "bytes",
        "Content-Type": guess_type(str(path))[0] or "application/octet-stream",
    }

    try:
        byte_range = parse_range(request.headers.get("range", ""), size=size)
    except RangeNotSatisfiable:
        return Response(
            status_code=416,
            headers={"Content-Range": f"bytes */{size}", "Accept-Ranges": "bytes"},
        )

    if byte_range is None:
        status_code = 200
        byte_range = ByteRange(0, size - 1)
    else:
        status_code = 206
        headers["Content-Range"] = f"bytes {byte_range.start}-{byte_range.end}/{size}"
    headers["Content-Length"] = str(max(0, byte_range.length))

    if request.method.upper() == "HEAD":
        return Response(status_code=status_code, headers=headers)

    return StreamingResponse(
        _iter_file(path, start=byte_range.start, count=max(0, byte_range.length)),
        status_code=status_code,
        headers=headers,
    )


def make_router(base_url: str) -> APIRouter:
    """Media routes mounted under the configured public prefix (e.g. "/uploads")."""
    router = APIRouter()
    path = f"{base_url.rstrip('/')}/{{rel_path:path}}"
    router.add_api_route(path, get_uploaded_file, methods=["GET", "HEAD"])
    return router
