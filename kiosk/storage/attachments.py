from __future__ import annotations

import asyncio
import logging
import uuid
from pathlib import Path, PurePosixPath

logger = logging.getLogger(__name__)


class AttachmentStorage:
    """Store uploaded attachment bytes on disk and hand back their public path.

    Paths are returned as ``<url_prefix>/<name>`` so they can be embedded verbatim
    in a message and served by the static ``/uploads`` mount.
    """

    def __init__(self, directory: str | Path, *, url_prefix: str = "/uploads") -> None:
        self._directory = Path(directory)
        self._url_prefix = "/" + url_prefix.strip("/")

    @property
    def directory(self) -> Path:
        return self._directory

    def ensure_directory(self) -> None:
        self._directory.mkdir(parents=True, exist_ok=True)

    async def store(self, data: bytes, *, filename: str | None = None) -> str:
        name = uuid.uuid4().hex + _suffix(filename)
        target = self._directory / name
        await asyncio.to_thread(self._write, target, data)
        logger.debug("Stored attachment %s (%d bytes)", name, len(data))
        return f"{self._url_prefix}/{name}"

    async def discard(self, path: str) -> None:
        target = self._resolve(path)
        if target is None:
            logger.warning("Refusing to discard attachment outside storage: %s", path)
            return
        await asyncio.to_thread(target.unlink, missing_ok=True)
        logger.info("Discarded attachment %s", path)

    def _write(self, target: Path, data: bytes) -> None:
        self.ensure_directory()
        target.write_bytes(data)

    def _resolve(self, path: str) -> Path | None:
        prefix = self._url_prefix + "/"
        if not path.startswith(prefix):
            return None
        name = PurePosixPath(path[len(prefix):]).name
        if not name or name != path[len(prefix):]:
            return None
        return self._directory / name


def _suffix(filename: str | None) -> str:
    if not filename:
        return ""
    suffix = PurePosixPath(filename).suffix.lower()
    if len(suffix) > 10 or not suffix[1:].isalnum():
        return ""
    return suffix
