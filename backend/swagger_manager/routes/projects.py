"""
Swagger Manager Backend - Project Route Handlers
==================================================

What:  CRUD for projects, explicit Swagger regeneration and Swagger URLs.
How:   Thin handlers: read principal and body, delegate to ProjectService.
Who:   Called by the dashboard frontend and API clients.

Routes:
    POST   /api/projects                    create (201)
    GET    /api/projects                    list visible projects
    GET    /api/projects/{id}               detail with endpoint references
    PUT    /api/projects/{id}               partial update (owner only)
    DELETE /api/projects/{id}               delete with endpoints and document
    GET    /api/projects/{id}/swagger       regenerate and return the document
    GET    /api/projects/{id}/swagger-url   raw JSON and viewer addresses
"""

import logging
from typing import Any, Dict, List
from uuid import UUID

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from swagger_manager.database import get_db_session
from swagger_manager.routes.dependencies import get_principal, get_project_service
from swagger_manager.schemas.common import ErrorResponse, MessageResponse
from swagger_manager.schemas.project import (
    ProjectCreate,
    ProjectResponse,
    ProjectUpdate,
    SwaggerUrlResponse,
)
from swagger_manager.services.project_service import ProjectService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/projects", tags=["Projects"])

_ERRORS = {
    400: {"description": "Invalid input", "model": ErrorResponse},
    401: {"description": "Missing principal", "model": ErrorResponse},
    403: {"description": "Access denied", "model": ErrorResponse},
    404: {"description": "Project not found", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}


@router.post(
    "",
    response_model=ProjectResponse,
    status_code=status.HTTP_201_CREATED,
    responses={k: v for k, v in _ERRORS.items() if k in (400, 401, 500)},
    summary="Create a project",
    description="Creates a project owned by the calling principal.",
)
async def create_project(
    payload: ProjectCreate,
    principal: str = Depends(get_principal),
    service: ProjectService = Depends(get_project_service),
    db: AsyncSession = Depends(get_db_session),
) -> ProjectResponse:
    return await service.create_project(db, principal, payload)


@router.get(
    "",
    response_model=List[ProjectResponse],
    responses={k: v for k, v in _ERRORS.items() if k in (401, 500)},
    summary="List projects",
    description="Projects the calling principal owns or collaborates on, newest first.",
)
async def list_projects(
    response: Response,
    principal: str = Depends(get_principal),
    service: ProjectService = Depends(get_project_service),
    db: AsyncSession = Depends(get_db_session),
) -> List[ProjectResponse]:
    projects = await service.list_projects(db, principal)
    response.headers["X-Total-Count"] = str(len(projects))
    return projects


@router.get(
    "/{project_id}",
    response_model=ProjectResponse,
    responses=_ERRORS,
    summary="Get a project",
)
async def get_project(
    project_id: UUID,
    principal: str = Depends(get_principal),
    service: ProjectService = Depends(get_project_service),
    db: AsyncSession = Depends(get_db_session),
) -> ProjectResponse:
    return await service.get_project(db, principal, project_id)


@router.put(
    "/{project_id}",
    response_model=ProjectResponse,
    responses=_ERRORS,
    summary="Update a project",
    description=(
        "Partial update. Only fields present in the body change. "
        "Renaming and membership changes are restricted to the owner."
    ),
)
async def update_project(
    project_id: UUID,
    payload: ProjectUpdate,
    principal: str = Depends(get_principal),
    service: ProjectService = Depends(get_project_service),
    db: AsyncSession = Depends(get_db_session),
) -> ProjectResponse:
    return await service.update_project(db, principal, project_id, payload)


@router.delete(
    "/{project_id}",
    response_model=MessageResponse,
    responses=_ERRORS,
    summary="Delete a project",
    description="Deletes the project, all of its endpoints and its Swagger file.",
)
async def delete_project(
    project_id: UUID,
    principal: str = Depends(get_principal),
    service: ProjectService = Depends(get_project_service),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await service.delete_project(db, principal, project_id)
    return MessageResponse(message="Project deleted successfully")


@router.get(
    "/{project_id}/swagger",
    responses={
        **_ERRORS,
        503: {"description": "Endpoint set temporarily unreadable", "model": ErrorResponse},
    },
    summary="Regenerate the Swagger document",
    description=(
        "Rebuilds the project's OpenAPI document from its current endpoints, "
        "stores it, and returns it."
    ),
)
async def generate_swagger(
    project_id: UUID,
    principal: str = Depends(get_principal),
    service: ProjectService = Depends(get_project_service),
    db: AsyncSession = Depends(get_db_session),
) -> Dict[str, Any]:
    return await service.regenerate_swagger(db, principal, project_id)


@router.get(
    "/{project_id}/swagger-url",
    response_model=SwaggerUrlResponse,
    responses=_ERRORS,
    summary="Get Swagger file URLs",
)
async def get_swagger_url(
    project_id: UUID,
    request: Request,
    principal: str = Depends(get_principal),
    service: ProjectService = Depends(get_project_service),
    db: AsyncSession = Depends(get_db_session),
) -> SwaggerUrlResponse:
    base_url = request.app.state.settings.public_base_url
    return await service.get_swagger_urls(db, principal, project_id, base_url)
