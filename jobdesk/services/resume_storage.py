"""Filesystem storage for uploaded resumes."""

import asyncio
import logging
import secrets
import time
from pathlib import Path

from jobdesk.core.config import settings
from jobdesk.utils.validators import ValidatedUpload

logger = logging.getLogger(__name__)


class ResumeStorage:
    """Writes validated resumes under ``<upload_dir>/resumes``.

    Locators are paths relative to the upload root; the original file name is
    never used on disk.
    """

    SUBDIR = "resumes"

    def __init__(self, root: str | Path | None = None):
        self.root = Path(root or settings.upload_dir)

    def _new_locator(self, extension: str) -> str:
        unique = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}"
        return f"{self.SUBDIR}/resume-{unique}{extension}"

    def resolve(self, locator: str) -> Path:
        path = (self.root / locator).resolve()
        if self.root.resolve() not in path.parents:
            raise ValueError(f"Locator escapes storage root: {locator}")
        return path

    async def save(self, upload: ValidatedUpload) -> str:
        """Persist the upload and return its locator."""
        locator = self._new_locator(upload.extension)
        path = self.resolve(locator)
        write = asyncio.ensure_future(asyncio.to_thread(self._write, path, upload.content))
        try:
            await asyncio.shield(write)
        except BaseException:
            # The write thread cannot be stopped; remove the file once it finishes
            write.add_done_callback(lambda _: path.unlink(missing_ok=True))
            logger.warning(f"Resume write for {locator} interrupted, discarding")
            raise
        logger.info(f"Stored resume {upload.filename} as {locator} ({upload.size} bytes)")
        return locator

    async def delete(self, locator: str) -> None:
        """Remove a stored resume; missing files are ignored."""
        path = self.resolve(locator)
        await asyncio.to_thread(path.unlink, missing_ok=True)
        logger.info(f"Removed stored resume {locator}")

    @staticmethod
    def _write(path: Path, content: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
