"""
Swagger Manager Backend - Artifact Publisher
==============================================

What:  Regenerates and persists the Swagger document of a project, and reads
       it back for the raw-JSON and viewer routes.
How:   regenerate() re-reads the committed project and its full endpoint set,
       runs the pure generator, serializes the result and hands the bytes to
       ArtifactStorage under the project id. Never patches a prior document.
Who:   Called by ProjectService / EndpointService after every committed
       endpoint mutation, by the explicit regeneration route, and by the
       artifact routes for reads.

Consistency Model:
    Mutations commit BEFORE regeneration, and regeneration of one project is
    serialized in-process by a per-project asyncio.Lock. The last
    regeneration to run therefore reads every mutation committed before it,
    so once mutations stop the artifact matches the endpoint set.
    Last write wins; regeneration is idempotent and safe to repeat.

Retry Strategy:
    Reading the endpoint set is retried with tenacity (exponential backoff
    with jitter) on PersistenceError. When retries run out the caller gets a
    ConsistencyError (503, retryable); the mutation stays committed.
"""

import asyncio
import json
import logging
import uuid
from collections import defaultdict
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession
from tenacity import (
    AsyncRetrying,
    RetryError,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from swagger_manager.config import settings
from swagger_manager.exceptions import (
    ArtifactStorageError,
    ConsistencyError,
    NotFoundError,
    PersistenceError,
)
from swagger_manager.models.endpoint import Endpoint
from swagger_manager.models.project import Project
from swagger_manager.services.storage_base import ArtifactStorage
from swagger_manager.services.swagger_generator import (
    generate_swagger_document,
    list_operations,
)
from swagger_manager.stores import EndpointStore, ProjectStore

logger = logging.getLogger(__name__)


class ArtifactPublisher:
    """
    Publishes generated documents to artifact storage keyed by project id.

    Args:
        storage:          Byte storage backend
        server_url:       Optional `servers` entry for generated documents
        document_version: `info.version` of generated documents
        retry_attempts / retry_min_wait / retry_max_wait:
                          Tenacity settings for reading the endpoint set
    """

    def __init__(
        self,
        storage: ArtifactStorage,
        server_url: Optional[str] = None,
        document_version: Optional[str] = None,
        retry_attempts: Optional[int] = None,
        retry_min_wait: Optional[float] = None,
        retry_max_wait: Optional[float] = None,
    ):
        self.storage = storage
        self.server_url = server_url if server_url is not None else settings.swagger_server_url
        self.document_version = document_version or settings.document_version
        self.retry_attempts = retry_attempts or settings.regen_retry_attempts
        self.retry_min_wait = (
            retry_min_wait if retry_min_wait is not None else settings.regen_retry_min_wait
        )
        self.retry_max_wait = (
            retry_max_wait if retry_max_wait is not None else settings.regen_retry_max_wait
        )
        self._locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    # ── Serialization ─────────────────────────────────────────────────────

    @staticmethod
    def serialize(document: Dict[str, Any]) -> bytes:
        """Stable JSON encoding: same document, same bytes."""
        return json.dumps(document, indent=2, ensure_ascii=False).encode("utf-8")

    @staticmethod
    def deserialize(data: bytes, project_id: str) -> Dict[str, Any]:
        try:
            return json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.error("Stored Swagger file for %s is corrupt: %s", project_id, str(e))
            raise ArtifactStorageError(
                message="The stored Swagger file is unreadable. Regenerate it.",
                context={"project_id": project_id, "error_type": type(e).__name__},
            )

    # ── Publish / Fetch ───────────────────────────────────────────────────

    async def publish(self, project_id: str, document: Dict[str, Any]) -> None:
        """Write `document` as the only version of the project's artifact."""
        await self.storage.write(str(project_id), self.serialize(document))

    async def fetch_bytes(self, project_id: str) -> bytes:
        return await self.storage.read(str(project_id))

    async def fetch(self, project_id: str) -> Dict[str, Any]:
        """
        Return the stored document.

        Raises:
            ArtifactNotFoundError: not generated yet (message names the fix)
        """
        key = str(project_id)
        return self.deserialize(await self.storage.read(key), key)

    async def exists(self, project_id: str) -> bool:
        return await self.storage.exists(str(project_id))

    async def remove(self, project_id: str) -> None:
        """Delete the artifact of a deleted project."""
        key = str(project_id)
        # The lock stays registered: a regeneration may already be waiting on it
        async with self._locks[key]:
            await self.storage.delete(key)

    # ── Regeneration ──────────────────────────────────────────────────────

    async def regenerate(self, db: AsyncSession, project_id: uuid.UUID) -> Dict[str, Any]:
        """
        Rebuild and publish the document from committed state.

        Must be called after the triggering mutation has been committed.

        Returns:
            The published document.

        Raises:
            NotFoundError: the project no longer exists (artifact is removed)
            ConsistencyError: project/endpoints unreadable after retries
            ArtifactStorageError: the document could not be written
        """
        key = str(project_id)
        async with self._locks[key]:
            project, endpoints = await self._load_snapshot(db, project_id)
            if project is None:
                # Deleted concurrently; publishing now would resurrect its artifact
                await self.storage.delete(key)
                raise NotFoundError(resource="project", resource_id=key)

            document = generate_swagger_document(
                project,
                endpoints,
                server_url=self.server_url or None,
                version=self.document_version,
            )
            await self.publish(key, document)

        logger.info(
            "Swagger document regenerated: project=%s endpoints=%d operations=%d",
            key,
            len(endpoints),
            len(list_operations(document)),
        )
        return document

    async def _load_snapshot(
        self, db: AsyncSession, project_id: uuid.UUID
    ) -> Tuple[Optional[Project], List[Endpoint]]:
        project_store = ProjectStore(db)
        endpoint_store = EndpointStore(db)
        try:
            async for attempt in AsyncRetrying(
                retry=retry_if_exception_type(PersistenceError),
                stop=stop_after_attempt(self.retry_attempts),
                wait=wait_exponential_jitter(
                    initial=self.retry_min_wait,
                    max=self.retry_max_wait,
                ),
                before_sleep=before_sleep_log(logger, logging.WARNING),
            ):
                with attempt:
                    try:
                        project = await project_store.find_by_id(project_id, fresh=True)
                        if project is None:
                            return None, []
                        endpoints = await endpoint_store.find_many(project_id, newest_first=False)
                        return project, endpoints
                    except PersistenceError:
                        # A failed statement can poison the transaction; start clean
                        await db.rollback()
                        raise
        except RetryError as e:
            last = e.last_attempt.exception() if e.last_attempt else None
            logger.error(
                "Could not read endpoint set of project %s after %d attempts: %s",
                project_id,
                self.retry_attempts,
                str(last) if last else "unknown error",
            )
            raise ConsistencyError(
                context={"project_id": str(project_id), "attempts": self.retry_attempts},
            )
        # AsyncRetrying either returns from inside the loop or raises RetryError
        raise ConsistencyError(context={"project_id": str(project_id)})
