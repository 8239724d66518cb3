"""
Swagger Manager Backend - Endpoint Service
============================================

What:  Create, read, list, update and delete the endpoints of a project, and
       keep the project's Swagger document in step with them.
How:   Every mutation follows the same pipeline:

    ┌───────────┐   ┌──────────────┐   ┌───────────┐   ┌────────┐   ┌──────────────┐
    │ Validate  │──▶│ Load project │──▶│  Access   │──▶│ Mutate │──▶│   Commit,    │
    │ (fields)  │   │  (404 if no) │   │ (403 if no)│  │ (store)│   │  regenerate  │
    └───────────┘   └──────────────┘   └───────────┘   └────────┘   └──────────────┘

       Validation and access failures are raised before anything is written.
       Regeneration reads committed state only (see ArtifactPublisher).
Who:   Called by routes/endpoints.py.

Partial Updates:
    Only fields the client actually sent are applied (`model_fields_set`),
    so `[]`, `""` and `false` are real values. `request_body: null` removes
    the request body; null for any other field is rejected.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from swagger_manager.exceptions import ValidationError
from swagger_manager.models.endpoint import Endpoint
from swagger_manager.models.project import Project
from swagger_manager.schemas.endpoint import EndpointCreate, EndpointResponse, EndpointUpdate
from swagger_manager.services.access_control import require_access
from swagger_manager.services.artifact_publisher import ArtifactPublisher
from swagger_manager.services.validation import (
    clean_endpoint_fields,
    default_responses,
    default_security,
    default_tags,
)
from swagger_manager.stores import EndpointStore, ProjectStore, commit

logger = logging.getLogger(__name__)


def _endpoint_defaults() -> Dict[str, Any]:
    return {
        "description": "",
        "tags": default_tags(),
        "parameters": [],
        "request_body": None,
        "responses": default_responses(),
        "security": default_security(),
        "deprecated": False,
    }


class EndpointService:
    """Business logic for endpoints. Any project member may manage endpoints."""

    def __init__(self, publisher: ArtifactPublisher):
        self.publisher = publisher

    async def _load_accessible_project(
        self, db: AsyncSession, principal: str, project_id: uuid.UUID
    ) -> Project:
        project = await ProjectStore(db).get(project_id)
        require_access(principal, project)
        return project

    @staticmethod
    async def _ensure_route_free(
        store: EndpointStore,
        project_id: uuid.UUID,
        path: str,
        method: str,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> None:
        clash = await store.find_route(project_id, path, method, exclude_id=exclude_id)
        if clash is not None:
            raise ValidationError(
                message=f"Endpoint {method} {path} already exists in this project",
                field="path",
                context={"method": method, "path": path, "existing_id": str(clash.id)},
            )

    # ── Create ────────────────────────────────────────────────────────────

    async def create_endpoint(
        self, db: AsyncSession, principal: str, payload: EndpointCreate
    ) -> EndpointResponse:
        """
        Store a new endpoint and regenerate the project's document.

        Raises:
            ValidationError:     bad field, or (path, method) already documented
            NotFoundError:       project does not exist
            AccessDeniedError:   principal is not a project member
            ConsistencyError:    saved, but the document could not be rebuilt
        """
        # null on create means "use the default"; updates reject it instead
        sent = payload.model_dump(
            include=payload.model_fields_set - {"project_id"}, exclude_none=True
        )
        values = {**_endpoint_defaults(), **clean_endpoint_fields(sent)}

        project = await self._load_accessible_project(db, principal, payload.project_id)
        store = EndpointStore(db)
        await self._ensure_route_free(store, project.id, values["path"], values["method"])

        endpoint = Endpoint(project_id=project.id, **values)
        await store.create(endpoint)
        project.updated_at = datetime.now(timezone.utc)
        await ProjectStore(db).save(project)

        response = EndpointResponse.model_validate(endpoint)
        await commit(db, "endpoint.create", endpoint_id=str(endpoint.id))
        logger.info(
            "Endpoint created: %s %s %s (project=%s)",
            endpoint.id,
            endpoint.method,
            endpoint.path,
            project.id,
        )

        await self.publisher.regenerate(db, project.id)
        return response

    # ── Read ──────────────────────────────────────────────────────────────

    async def list_endpoints(
        self, db: AsyncSession, principal: str, project_id: uuid.UUID
    ) -> List[EndpointResponse]:
        """Endpoints of a project, newest first."""
        project = await self._load_accessible_project(db, principal, project_id)
        endpoints = await EndpointStore(db).find_many(project.id)
        return [EndpointResponse.model_validate(e) for e in endpoints]

    async def get_endpoint(
        self, db: AsyncSession, principal: str, endpoint_id: uuid.UUID
    ) -> EndpointResponse:
        endpoint = await EndpointStore(db).get(endpoint_id)
        await self._load_accessible_project(db, principal, endpoint.project_id)
        return EndpointResponse.model_validate(endpoint)

    # ── Update ────────────────────────────────────────────────────────────

    async def update_endpoint(
        self,
        db: AsyncSession,
        principal: str,
        endpoint_id: uuid.UUID,
        payload: EndpointUpdate,
    ) -> EndpointResponse:
        """Apply the fields present in `payload`, then regenerate."""
        values = clean_endpoint_fields(payload.model_dump(include=payload.model_fields_set))

        store = EndpointStore(db)
        endpoint = await store.get(endpoint_id)
        project = await self._load_accessible_project(db, principal, endpoint.project_id)

        path = values.get("path", endpoint.path)
        method = values.get("method", endpoint.method)
        if (path, method) != (endpoint.path, endpoint.method):
            await self._ensure_route_free(store, project.id, path, method, exclude_id=endpoint.id)

        for field, value in values.items():
            setattr(endpoint, field, value)
        now = datetime.now(timezone.utc)
        endpoint.updated_at = now
        project.updated_at = now
        await store.save(endpoint)

        response = EndpointResponse.model_validate(endpoint)
        await commit(db, "endpoint.update", endpoint_id=str(endpoint.id))
        logger.info("Endpoint updated: %s fields=%s", endpoint.id, sorted(values))

        await self.publisher.regenerate(db, project.id)
        return response

    # ── Delete ────────────────────────────────────────────────────────────

    async def delete_endpoint(
        self, db: AsyncSession, principal: str, endpoint_id: uuid.UUID
    ) -> None:
        """Remove the endpoint; its path disappears from the regenerated document."""
        store = EndpointStore(db)
        endpoint = await store.get(endpoint_id)
        project = await self._load_accessible_project(db, principal, endpoint.project_id)

        await store.delete_by_id(endpoint.id)
        project.updated_at = datetime.now(timezone.utc)
        await ProjectStore(db).save(project)
        await commit(db, "endpoint.delete", endpoint_id=str(endpoint_id))
        logger.info("Endpoint deleted: %s (project=%s)", endpoint_id, project.id)

        await self.publisher.regenerate(db, project.id)
