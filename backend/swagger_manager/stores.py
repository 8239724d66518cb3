"""
Swagger Manager Backend - Project and Endpoint Stores
=======================================================

What:  Thin persistence handles over an AsyncSession: create, find_by_id,
       find_many, save, delete_by_id for each entity.
How:   Each store is constructed around the request's session, so a service
       operation's writes share one transaction. SQLAlchemy failures are
       translated into PersistenceError; missing rows into NotFoundError.
Who:   Used by ProjectService, EndpointService and ArtifactPublisher.
"""

import logging
import uuid
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from sqlalchemy import delete, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from swagger_manager.exceptions import NotFoundError, PersistenceError
from swagger_manager.models.endpoint import Endpoint
from swagger_manager.models.project import Project, ProjectCollaborator

logger = logging.getLogger(__name__)


@contextmanager
def persistence_errors(operation: str, **context) -> Iterator[None]:
    """Translate SQLAlchemy exceptions raised inside the block into PersistenceError."""
    try:
        yield
    except SQLAlchemyError as e:
        logger.error("Store operation '%s' failed: %s | %s", operation, str(e), context)
        raise PersistenceError(
            context={"operation": operation, "error_type": type(e).__name__, **context},
        ) from e


async def commit(db: AsyncSession, operation: str, **context) -> None:
    """Commit the session's transaction; failures surface as PersistenceError."""
    with persistence_errors(f"{operation}.commit", **context):
        await db.commit()


class ProjectStore:
    """Persistence operations for Project rows and their collaborator rows."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, project: Project) -> Project:
        with persistence_errors("project.create"):
            self.db.add(project)
            await self.db.flush()
        return project

    async def find_by_id(self, project_id: uuid.UUID, fresh: bool = False) -> Optional[Project]:
        """
        Load one project, or None.

        fresh=True overwrites any copy already held by the session with the
        committed row (used right before regenerating a document).
        """
        query = select(Project).where(Project.id == project_id)
        if fresh:
            query = query.execution_options(populate_existing=True)
        with persistence_errors("project.find_by_id", project_id=str(project_id)):
            result = await self.db.execute(query)
            return result.scalar_one_or_none()

    async def get(self, project_id: uuid.UUID) -> Project:
        """Like find_by_id, but a missing project raises NotFoundError."""
        project = await self.find_by_id(project_id)
        if project is None:
            raise NotFoundError(resource="project", resource_id=str(project_id))
        return project

    async def find_many(self, principal: str) -> List[Project]:
        """Projects the principal owns or collaborates on, newest first."""
        member_of = select(ProjectCollaborator.project_id).where(
            ProjectCollaborator.principal_id == principal
        )
        query = (
            select(Project)
            .where(or_(Project.owner_id == principal, Project.id.in_(member_of)))
            .order_by(Project.created_at.desc(), Project.id)
        )
        with persistence_errors("project.find_many", principal=principal):
            result = await self.db.execute(query)
            return list(result.scalars().all())

    async def save(self, project: Project) -> Project:
        with persistence_errors("project.save", project_id=str(project.id)):
            await self.db.flush()
        return project

    async def delete_by_id(self, project_id: uuid.UUID) -> None:
        """
        Delete a project and everything that belongs to it.

        Endpoints are removed first, then the project (its collaborator rows
        cascade). Both statements run in the caller's transaction.
        """
        project = await self.get(project_id)
        with persistence_errors("project.delete", project_id=str(project_id)):
            await self.db.execute(delete(Endpoint).where(Endpoint.project_id == project_id))
            await self.db.delete(project)
            await self.db.flush()

    @staticmethod
    def set_collaborators(project: Project, principals: List[str]) -> None:
        """
        Replace the membership of `project` with `principals`.

        Rows for principals that stay are reused, so a membership change never
        deletes and re-inserts the same (project, principal) pair.
        """
        existing = {row.principal_id: row for row in project.collaborator_rows}
        project.collaborator_rows = [
            existing.get(principal) or ProjectCollaborator(principal_id=principal)
            for principal in principals
        ]


class EndpointStore:
    """Persistence operations for Endpoint rows."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, endpoint: Endpoint) -> Endpoint:
        with persistence_errors("endpoint.create", project_id=str(endpoint.project_id)):
            self.db.add(endpoint)
            await self.db.flush()
        return endpoint

    async def find_by_id(self, endpoint_id: uuid.UUID) -> Optional[Endpoint]:
        with persistence_errors("endpoint.find_by_id", endpoint_id=str(endpoint_id)):
            result = await self.db.execute(select(Endpoint).where(Endpoint.id == endpoint_id))
            return result.scalar_one_or_none()

    async def get(self, endpoint_id: uuid.UUID) -> Endpoint:
        endpoint = await self.find_by_id(endpoint_id)
        if endpoint is None:
            raise NotFoundError(resource="endpoint", resource_id=str(endpoint_id))
        return endpoint

    async def find_many(self, project_id: uuid.UUID, newest_first: bool = True) -> List[Endpoint]:
        """
        All endpoints of a project.

        populate_existing refreshes rows already held by this session, so the
        result always reflects committed state (regeneration depends on it).
        """
        order = Endpoint.created_at.desc() if newest_first else Endpoint.created_at.asc()
        query = (
            select(Endpoint)
            .where(Endpoint.project_id == project_id)
            .order_by(order, Endpoint.id)
            .execution_options(populate_existing=True)
        )
        with persistence_errors("endpoint.find_many", project_id=str(project_id)):
            result = await self.db.execute(query)
            return list(result.scalars().all())

    async def list_ids(self, project_id: uuid.UUID) -> List[uuid.UUID]:
        """Endpoint references of a project, oldest first."""
        query = (
            select(Endpoint.id)
            .where(Endpoint.project_id == project_id)
            .order_by(Endpoint.created_at.asc(), Endpoint.id)
        )
        with persistence_errors("endpoint.list_ids", project_id=str(project_id)):
            result = await self.db.execute(query)
            return list(result.scalars().all())

    async def list_ids_by_project(
        self, project_ids: List[uuid.UUID]
    ) -> Dict[uuid.UUID, List[uuid.UUID]]:
        """Endpoint references of several projects in one query, oldest first."""
        grouped: Dict[uuid.UUID, List[uuid.UUID]] = {pid: [] for pid in project_ids}
        if not project_ids:
            return grouped
        query = (
            select(Endpoint.project_id, Endpoint.id)
            .where(Endpoint.project_id.in_(project_ids))
            .order_by(Endpoint.created_at.asc(), Endpoint.id)
        )
        with persistence_errors("endpoint.list_ids_by_project", projects=len(project_ids)):
            result = await self.db.execute(query)
            for project_id, endpoint_id in result.all():
                grouped[project_id].append(endpoint_id)
        return grouped

    async def find_route(
        self,
        project_id: uuid.UUID,
        path: str,
        method: str,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> Optional[Endpoint]:
        """Another endpoint of the project already documenting (path, method), if any."""
        query = select(Endpoint).where(
            Endpoint.project_id == project_id,
            Endpoint.path == path,
            Endpoint.method == method,
        )
        if exclude_id is not None:
            query = query.where(Endpoint.id != exclude_id)
        with persistence_errors("endpoint.find_route", project_id=str(project_id)):
            result = await self.db.execute(query.limit(1))
            return result.scalar_one_or_none()

    async def save(self, endpoint: Endpoint) -> Endpoint:
        with persistence_errors("endpoint.save", endpoint_id=str(endpoint.id)):
            await self.db.flush()
        return endpoint

    async def delete_by_id(self, endpoint_id: uuid.UUID) -> None:
        endpoint = await self.get(endpoint_id)
        with persistence_errors("endpoint.delete", endpoint_id=str(endpoint_id)):
            await self.db.delete(endpoint)
            await self.db.flush()
