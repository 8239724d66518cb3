"""
Swagger Manager Backend - Local Artifact Storage
==================================================

What:  Stores generated Swagger documents as `<artifact_root>/<project_id>.json`.
How:   Async file I/O with aiofiles. Each write goes to a unique temporary
       file in the same directory and is then renamed over the target with
       os.replace, so readers see either the old or the new document, never
       a half-written one. Concurrent writers: last rename wins.
Who:   Created by the app factory; used by ArtifactPublisher.

Directory Structure:
    swagger-files/
    ├── 3f2b...-9c1d.json
    └── a81e...-77f0.json
"""

import logging
import os
import uuid
from pathlib import Path
from typing import Optional

import aiofiles

from swagger_manager.config import settings
from swagger_manager.exceptions import ArtifactNotFoundError, ArtifactStorageError
from swagger_manager.services.storage_base import ArtifactStorage, validate_key

logger = logging.getLogger(__name__)

ARTIFACT_SUFFIX = ".json"


class LocalArtifactStorage(ArtifactStorage):
    """
    Filesystem-backed artifact storage.

    Args:
        storage_root: Override the configured ARTIFACT_ROOT (used in tests).
    """

    def __init__(self, storage_root: Optional[str] = None):
        self.storage_root = Path(storage_root or settings.artifact_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("LocalArtifactStorage initialized with storage_root=%s", self.storage_root)

    def path_for(self, key: str) -> Path:
        """Absolute file path for a validated key."""
        return self.storage_root / f"{validate_key(key)}{ARTIFACT_SUFFIX}"

    async def write(self, key: str, data: bytes) -> None:
        target = self.path_for(key)
        temp_path = target.with_name(f".{target.stem}.{uuid.uuid4().hex}.tmp")
        try:
            async with aiofiles.open(temp_path, "wb") as f:
                await f.write(data)
            os.replace(temp_path, target)
            logger.info("Artifact stored: %s (%d bytes)", target.name, len(data))
        except OSError as e:
            logger.error("Failed to store artifact at %s: %s", target, str(e))
            self._discard(temp_path)
            raise ArtifactStorageError(
                message="Failed to save the Swagger file. Please try again.",
                context={"key": key, "os_error": str(e)},
            )

    async def read(self, key: str) -> bytes:
        target = self.path_for(key)
        try:
            async with aiofiles.open(target, "rb") as f:
                return await f.read()
        except FileNotFoundError:
            raise ArtifactNotFoundError(project_id=key)
        except OSError as e:
            logger.error("Failed to read artifact %s: %s", target, str(e))
            raise ArtifactStorageError(
                message="Failed to read the Swagger file. Please try again.",
                context={"key": key, "os_error": str(e)},
            )

    async def exists(self, key: str) -> bool:
        return self.path_for(key).is_file()

    async def delete(self, key: str) -> None:
        target = self.path_for(key)
        try:
            target.unlink()
            logger.info("Artifact removed: %s", target.name)
        except FileNotFoundError:
            logger.debug("Artifact already gone: %s", target.name)
        except OSError as e:
            logger.error("Failed to remove artifact %s: %s", target, str(e))
            raise ArtifactStorageError(
                message="Failed to remove the Swagger file.",
                context={"key": key, "os_error": str(e)},
            )

    async def health_check(self) -> bool:
        return self.storage_root.is_dir() and os.access(self.storage_root, os.W_OK)

    @staticmethod
    def _discard(temp_path: Path) -> None:
        try:
            temp_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Failed to clean up temp file %s: %s", temp_path.name, str(e))
