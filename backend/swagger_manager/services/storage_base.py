"""
Swagger Manager Backend - Abstract Artifact Storage Interface
===============================================================

What:  Contract for storing generated Swagger documents as bytes by key.
How:   Concrete backends inherit from ArtifactStorage. The key is the
       project id rendered as a file-safe string; every backend validates
       it with `validate_key` before touching storage.
Who:   Used by ArtifactPublisher and the health check.

Implementations:
    - LocalArtifactStorage: one JSON file per key under ARTIFACT_ROOT
"""

import re
from abc import ABC, abstractmethod

from swagger_manager.exceptions import ValidationError

_KEY_RE = re.compile(r"^[A-Za-z0-9_-]{1,128}$")


def validate_key(key: str) -> str:
    """
    Reject keys that are not file-safe.

    Keys only ever contain letters, digits, '-' and '_', which rules out
    path traversal ('..', '/') and hidden files.
    """
    if not isinstance(key, str) or not _KEY_RE.match(key):
        raise ValidationError(
            message="Invalid artifact key; expected letters, digits, '-' or '_'",
            field="project_id",
            context={"key": str(key)[:128]},
        )
    return key


class ArtifactStorage(ABC):
    """
    Byte storage addressed solely by key. Writes fully replace prior content.

    Contract:
        - write() replaces any previous bytes atomically (no partial reads)
        - read() raises ArtifactNotFoundError for unknown keys
        - delete() is a no-op for unknown keys
        - backend failures are wrapped in ArtifactStorageError
    """

    @abstractmethod
    async def write(self, key: str, data: bytes) -> None:
        """Store `data` under `key`, replacing any previous version."""
        ...

    @abstractmethod
    async def read(self, key: str) -> bytes:
        """
        Return the bytes stored under `key`.

        Raises:
            ArtifactNotFoundError: nothing was ever written for the key
            ArtifactStorageError: the backend failed
        """
        ...

    @abstractmethod
    async def exists(self, key: str) -> bool:
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """True when the backend can currently accept writes."""
        ...
