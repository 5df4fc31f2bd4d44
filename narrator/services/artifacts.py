"""
Audio artifacts on disk: generated job audio and cached voice previews.
"""
import asyncio
import enum
import functools
import logging
from pathlib import Path
from typing import List, Optional
from urllib.parse import quote

from narrator.config import (
    ARTIFACT_DIR,
    AUDIO_EXTENSION,
    FILES_URL_PREFIX,
    GENERATED_PREFIX,
    PREVIEW_PREFIX,
)
from narrator.errors import ArtifactNotFound, PathTraversalRejected

logger = logging.getLogger(__name__)


class ArtifactKind(str, enum.Enum):
    """Artifact classes, told apart by filename prefix."""
    generated = GENERATED_PREFIX
    preview = PREVIEW_PREFIX


def check_untrusted_name(name: str) -> str:
    """Reject names that could resolve outside the artifact directory."""
    if not name or '..' in name or '/' in name or '\\' in name or '\x00' in name:
        raise PathTraversalRejected(name)
    return name


class ArtifactManager:
    """
    Owns the artifact directory.

    At most one generated artifact exists at a time: publishing a new one
    clears every previous ``audio-*`` file first. Previews are written once
    per voice and reused afterwards.
    """

    def __init__(self, root: Path = ARTIFACT_DIR, extension: str = AUDIO_EXTENSION):
        self.root = Path(root)
        self.extension = extension
        self._lock = asyncio.Lock()

    def filename(self, kind: ArtifactKind, key: str) -> str:
        check_untrusted_name(key)
        return f'{kind.value}-{key}.{self.extension}'

    def path(self, kind: ArtifactKind, key: str) -> Path:
        return self.root / self.filename(kind, key)

    def url_for(self, filename: str) -> str:
        return f'{FILES_URL_PREFIX}/{quote(filename)}'

    def exists(self, kind: ArtifactKind, key: str) -> bool:
        return self.path(kind, key).is_file()

    def resolve(self, filename: str) -> Path:
        """
        Map a requested filename to a file inside the artifact directory.

        Raises:
            PathTraversalRejected: before touching the filesystem
            ArtifactNotFound: the file does not exist
        """
        check_untrusted_name(filename)
        path = self.root / filename
        if not path.is_file():
            raise ArtifactNotFound(filename)
        return path

    def _generated_files(self) -> List[Path]:
        if not self.root.exists():
            return []
        return sorted(self.root.glob(f'{ArtifactKind.generated.value}-*.{self.extension}'))

    def _clear_generation_sync(self) -> List[str]:
        removed = []
        for path in self._generated_files():
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            removed.append(path.name)
            logger.info('Deleted previous file to save space: %s', path.name)
        return removed

    def _write_sync(self, path: Path, data: bytes, overwrite: bool = True) -> bool:
        if not overwrite and path.exists():
            return False
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return True

    def _publish_sync(self, path: Path, data: bytes) -> List[str]:
        removed = self._clear_generation_sync()
        self._write_sync(path, data)
        return removed

    async def _run(self, func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(func, *args))

    async def write(self, kind: ArtifactKind, key: str, data: bytes) -> Path:
        """
        Write an artifact and return its path.

        Preview writes are skipped when the voice already has one.
        """
        path = self.path(kind, key)
        if kind == ArtifactKind.preview:
            written = await self._run(self._write_sync, path, data, False)
            if not written:
                logger.debug('Preview already cached: %s', path.name)
        else:
            await self._run(self._write_sync, path, data)
        return path

    async def clear_generation(self) -> List[str]:
        """Delete every generated artifact; previews are left alone."""
        async with self._lock:
            return await self._run(self._clear_generation_sync)

    async def publish_generation(self, key: str, data: bytes) -> Path:
        """Clear all generated artifacts, then write the new one, as one step."""
        path = self.path(ArtifactKind.generated, key)
        async with self._lock:
            await self._run(self._publish_sync, path, data)
        logger.info('Wrote %s (%d bytes)', path.name, len(data))
        return path

    async def delete(self, kind: ArtifactKind, key: str) -> bool:
        path = self.path(kind, key)
        try:
            await self._run(path.unlink)
        except FileNotFoundError:
            return False
        logger.info('Deleted expired file: %s', path.name)
        return True


# Singleton instance
_artifact_manager: Optional[ArtifactManager] = None


def get_artifact_manager() -> ArtifactManager:
    """Get the artifact manager singleton instance."""
    global _artifact_manager
    if _artifact_manager is None:
        _artifact_manager = ArtifactManager()
    return _artifact_manager


def reset_artifact_manager():
    """Reset the artifact manager singleton (for testing)."""
    global _artifact_manager
    _artifact_manager = None
