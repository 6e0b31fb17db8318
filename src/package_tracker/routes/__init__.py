"""HTTP routes."""

from __future__ import annotations

from fastapi import UploadFile


async def read_upload(file: UploadFile | None, limit: int) -> bytes | None:
    """Read at most ``limit + 1`` bytes so oversize is detectable."""
    if file is None:
        return None
    return await file.read(limit + 1)
