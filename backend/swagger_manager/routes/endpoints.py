"""
Swagger Manager Backend - Endpoint Route Handlers
===================================================

What:  CRUD for the endpoints documented in a project.
How:   Thin handlers over EndpointService. Every successful mutation has
       already regenerated the project's Swagger file when it returns.

Routes:
    POST   /api/endpoints                       create (201)
    GET    /api/endpoints/project/{project_id}  list a project's endpoints
    GET    /api/endpoints/{id}                  detail
    PUT    /api/endpoints/{id}                  partial update
    DELETE /api/endpoints/{id}                  delete
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from swagger_manager.database import get_db_session
from swagger_manager.routes.dependencies import get_endpoint_service, get_principal
from swagger_manager.schemas.common import ErrorResponse, MessageResponse
from swagger_manager.schemas.endpoint import EndpointCreate, EndpointResponse, EndpointUpdate
from swagger_manager.services.endpoint_service import EndpointService

router = APIRouter(prefix="/api/endpoints", tags=["Endpoints"])

_ERRORS = {
    400: {"description": "Invalid input or duplicate route", "model": ErrorResponse},
    401: {"description": "Missing principal", "model": ErrorResponse},
    403: {"description": "Not a project member", "model": ErrorResponse},
    404: {"description": "Project or endpoint not found", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}

_MUTATION_ERRORS = {
    **_ERRORS,
    503: {
        "description": "Change saved, Swagger file not regenerated; retry",
        "model": ErrorResponse,
    },
}


@router.post(
    "",
    response_model=EndpointResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_MUTATION_ERRORS,
    summary="Create an endpoint",
)
async def create_endpoint(
    payload: EndpointCreate,
    principal: str = Depends(get_principal),
    service: EndpointService = Depends(get_endpoint_service),
    db: AsyncSession = Depends(get_db_session),
) -> EndpointResponse:
    return await service.create_endpoint(db, principal, payload)


@router.get(
    "/project/{project_id}",
    response_model=List[EndpointResponse],
    responses=_ERRORS,
    summary="List the endpoints of a project",
)
async def list_endpoints(
    project_id: UUID,
    principal: str = Depends(get_principal),
    service: EndpointService = Depends(get_endpoint_service),
    db: AsyncSession = Depends(get_db_session),
) -> List[EndpointResponse]:
    return await service.list_endpoints(db, principal, project_id)


@router.get(
    "/{endpoint_id}",
    response_model=EndpointResponse,
    responses=_ERRORS,
    summary="Get an endpoint",
)
async def get_endpoint(
    endpoint_id: UUID,
    principal: str = Depends(get_principal),
    service: EndpointService = Depends(get_endpoint_service),
    db: AsyncSession = Depends(get_db_session),
) -> EndpointResponse:
    return await service.get_endpoint(db, principal, endpoint_id)


@router.put(
    "/{endpoint_id}",
    response_model=EndpointResponse,
    responses=_MUTATION_ERRORS,
    summary="Update an endpoint",
    description=(
        "Partial update. Fields present in the body are applied even when "
        "empty or false; `request_body: null` removes the request body."
    ),
)
async def update_endpoint(
    endpoint_id: UUID,
    payload: EndpointUpdate,
    principal: str = Depends(get_principal),
    service: EndpointService = Depends(get_endpoint_service),
    db: AsyncSession = Depends(get_db_session),
) -> EndpointResponse:
    return await service.update_endpoint(db, principal, endpoint_id, payload)


@router.delete(
    "/{endpoint_id}",
    response_model=MessageResponse,
    responses=_MUTATION_ERRORS,
    summary="Delete an endpoint",
)
async def delete_endpoint(
    endpoint_id: UUID,
    principal: str = Depends(get_principal),
    service: EndpointService = Depends(get_endpoint_service),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await service.delete_endpoint(db, principal, endpoint_id)
    return MessageResponse(message="Endpoint deleted successfully")
