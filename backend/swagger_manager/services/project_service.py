"""
Swagger Manager Backend - Project Service
===========================================

What:  Create, read, list, update and delete projects; explicit regeneration
       of a project's Swagger document.
How:   Validate input, load the project, check access, mutate through the
       stores, commit, then let ArtifactPublisher rebuild from committed
       state. Responses are built before regeneration, so a regeneration
       failure never touches an already-built response.
Who:   Called by routes/projects.py.

Design Decision:
    ProjectService is stateless apart from the publisher; it receives the
    request's session for each call, just like the endpoint service.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy.ext.asyncio import AsyncSession

from swagger_manager.models.project import Project, ProjectCollaborator
from swagger_manager.schemas.project import (
    ProjectCreate,
    ProjectResponse,
    ProjectUpdate,
    SwaggerUrlResponse,
)
from swagger_manager.services.access_control import require_access, require_owner
from swagger_manager.services.artifact_publisher import ArtifactPublisher
from swagger_manager.services.validation import (
    clean_project_fields,
    normalize_collaborators,
    validate_principal_id,
)
from swagger_manager.stores import EndpointStore, ProjectStore, commit

logger = logging.getLogger(__name__)


def build_project_response(project: Project, endpoint_ids: List[uuid.UUID]) -> ProjectResponse:
    return ProjectResponse(
        id=project.id,
        name=project.name,
        description=project.description,
        owner_id=project.owner_id,
        collaborators=project.collaborators,
        endpoint_ids=endpoint_ids,
        created_at=project.created_at,
        updated_at=project.updated_at,
    )


class ProjectService:
    """
    Business logic for projects.

    Access rules:
        get / regenerate / swagger URLs: owner or collaborator
        update / delete:                owner only
    """

    def __init__(self, publisher: ArtifactPublisher):
        self.publisher = publisher

    async def create_project(
        self, db: AsyncSession, principal: str, payload: ProjectCreate
    ) -> ProjectResponse:
        """
        Create a project owned by `principal`; the owner is its first collaborator.

        No document is generated until the first endpoint mutation (or an
        explicit regeneration).
        """
        owner_id = validate_principal_id(principal)
        values = clean_project_fields(payload.model_dump(exclude_none=True))
        project = Project(
            name=values["name"],
            description=values.get("description", ""),
            owner_id=owner_id,
            collaborator_rows=[ProjectCollaborator(principal_id=owner_id)],
        )
        await ProjectStore(db).create(project)
        response = build_project_response(project, [])
        await commit(db, "project.create", project_id=str(project.id))

        logger.info("Project created: %s (owner=%s)", project.id, owner_id)
        return response

    async def get_project(
        self, db: AsyncSession, principal: str, project_id: uuid.UUID
    ) -> ProjectResponse:
        project = await ProjectStore(db).get(project_id)
        require_access(principal, project)
        endpoint_ids = await EndpointStore(db).list_ids(project.id)
        return build_project_response(project, endpoint_ids)

    async def list_projects(self, db: AsyncSession, principal: str) -> List[ProjectResponse]:
        """Projects the principal owns or collaborates on, newest first."""
        projects = await ProjectStore(db).find_many(principal)
        endpoint_ids = await EndpointStore(db).list_ids_by_project([p.id for p in projects])
        return [build_project_response(p, endpoint_ids[p.id]) for p in projects]

    async def update_project(
        self,
        db: AsyncSession,
        principal: str,
        project_id: uuid.UUID,
        payload: ProjectUpdate,
    ) -> ProjectResponse:
        """
        Apply the fields present in `payload` (owner only).

        A change of name or description regenerates the document, since both
        appear in its `info` block.
        """
        fields: Dict[str, Any] = payload.model_dump(include=payload.model_fields_set)
        raw_collaborators = fields.pop("collaborators", None)
        collaborators_sent = "collaborators" in payload.model_fields_set
        values = clean_project_fields(fields)

        store = ProjectStore(db)
        project = await store.get(project_id)
        require_owner(principal, project, action="update")

        if collaborators_sent:
            ProjectStore.set_collaborators(
                project, normalize_collaborators(project.owner_id, raw_collaborators)
            )
        for field, value in values.items():
            setattr(project, field, value)
        project.updated_at = datetime.now(timezone.utc)
        await store.save(project)

        endpoint_ids = await EndpointStore(db).list_ids(project.id)
        response = build_project_response(project, endpoint_ids)
        await commit(db, "project.update", project_id=str(project.id))
        logger.info(
            "Project updated: %s fields=%s",
            project.id,
            sorted(payload.model_fields_set),
        )

        if values:
            await self.publisher.regenerate(db, project.id)
        return response

    async def delete_project(
        self, db: AsyncSession, principal: str, project_id: uuid.UUID
    ) -> None:
        """
        Delete the project, all its endpoints and its document (owner only).

        Rows go in one transaction; the document is removed once the
        transaction has committed.
        """
        store = ProjectStore(db)
        project = await store.get(project_id)
        require_owner(principal, project, action="delete")

        await store.delete_by_id(project.id)
        await commit(db, "project.delete", project_id=str(project_id))
        await self.publisher.remove(str(project_id))
        logger.info("Project deleted: %s", project_id)

    async def regenerate_swagger(
        self, db: AsyncSession, principal: str, project_id: uuid.UUID
    ) -> Dict[str, Any]:
        """Rebuild the document from the current endpoint set and return it."""
        project = await ProjectStore(db).get(project_id)
        require_access(principal, project)
        return await self.publisher.regenerate(db, project.id)

    async def get_swagger_urls(
        self,
        db: AsyncSession,
        principal: str,
        project_id: uuid.UUID,
        public_base_url: str,
    ) -> SwaggerUrlResponse:
        project = await ProjectStore(db).get(project_id)
        require_access(principal, project)
        base = public_base_url.rstrip("/")
        return SwaggerUrlResponse(
            project_id=project.id,
            swagger_url=f"{base}/swagger-files/{project.id}",
            viewer_url=f"{base}/api-docs/{project.id}",
        )
