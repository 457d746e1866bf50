import asyncio
import os
import time
import uuid
import aiofiles
import aiofiles.os
from pathlib import Path
from typing import Callable, Optional
from loguru import logger

from vidsentry.exceptions import CleanupException
from vidsentry.models import UploadedAsset


def _now_ms() -> int:
    return int(time.time() * 1000)


def safe_filename(original_name: str) -> str:
    """Strip directory components from a client supplied filename."""
    name = os.path.basename((original_name or "").replace("\\", "/")).strip()
    return name or "video"


class TemporaryAssetStore:
    """Writes uploaded videos to uniquely named files under one shared directory."""

    def __init__(self, upload_dir: str, clock: Optional[Callable[[], int]] = None):
        self.upload_dir = Path(upload_dir).resolve()
        self.clock = clock or _now_ms

    def unique_name(self, original_name: str) -> str:
        return f"{self.clock()}-{uuid.uuid4().hex[:8]}-{safe_filename(original_name)}"

    async def persist(self, payload: bytes, original_name: str, mime_type: str) -> UploadedAsset:
        await asyncio.to_thread(self.upload_dir.mkdir, parents=True, exist_ok=True)
        name = self.unique_name(original_name)
        path = self.upload_dir / name
        # "xb" so a name collision can never overwrite another invocation's file
        async with aiofiles.open(path, "xb") as f:
            await f.write(payload)
        logger.info(f"Stored upload {original_name!r} at {path} ({len(payload)} bytes)")
        return UploadedAsset(name=name, path=path, mime_type=mime_type, size=len(payload))

    async def remove(self, asset: UploadedAsset):
        """Delete the asset's file. Raises CleanupException on failure."""
        try:
            await aiofiles.os.remove(asset.path)
            logger.info(f"Removed temporary file {asset.path}")
        except Exception as e:
            raise CleanupException(f"Error cleaning up file {asset.path}: {e}") from e

    async def discard(self, asset: UploadedAsset) -> bool:
        """Best-effort removal; failures are logged and never propagated."""
        try:
            await self.remove(asset)
            return True
        except CleanupException as e:
            logger.error(str(e))
            return False
