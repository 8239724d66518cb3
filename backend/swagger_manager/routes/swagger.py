"""
Swagger Manager Backend - Swagger File and Viewer Routes
==========================================================

What:  Serves generated Swagger documents and a Swagger UI page for each.
How:   Reads straight from artifact storage through ArtifactPublisher; never
       regenerates. These URLs are what `/api/projects/{id}/swagger-url`
       hands out, so they are open to anyone who has the link (browsers
       opening the viewer cannot send the principal header).

Routes:
    GET /swagger-files/{project_id}   raw JSON (404 + hint when absent)
    GET /api-docs/{project_id}        Swagger UI (HTML 404 page when absent)
"""

import html
import logging

from fastapi import APIRouter, Depends, Response
from fastapi.openapi.docs import get_swagger_ui_html
from fastapi.responses import HTMLResponse

from swagger_manager.exceptions import ArtifactNotFoundError
from swagger_manager.routes.dependencies import get_publisher
from swagger_manager.schemas.common import ErrorResponse
from swagger_manager.services.artifact_publisher import ArtifactPublisher

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Swagger Files"])

_MISSING_PAGE = """<!DOCTYPE html>
<html>
<head><title>Swagger file not found</title></head>
<body>
<h1>Swagger file not found</h1>
<p>No Swagger document has been generated for project <code>{project_id}</code> yet.</p>
<p>{hint}</p>
</body>
</html>
"""


@router.get(
    "/swagger-files/{project_id}",
    responses={
        200: {"description": "OpenAPI 3 document", "content": {"application/json": {}}},
        400: {"description": "Malformed project id", "model": ErrorResponse},
        404: {"description": "Not generated yet", "model": ErrorResponse},
    },
    summary="Get the generated Swagger file",
)
async def get_swagger_file(
    project_id: str,
    publisher: ArtifactPublisher = Depends(get_publisher),
) -> Response:
    # Served as stored: the bytes are already canonical JSON
    data = await publisher.fetch_bytes(project_id)
    return Response(
        content=data,
        media_type="application/json",
        headers={"Cache-Control": "no-cache"},
    )


@router.get(
    "/api-docs/{project_id}",
    response_class=HTMLResponse,
    summary="View the generated Swagger file in Swagger UI",
)
async def view_swagger(
    project_id: str,
    publisher: ArtifactPublisher = Depends(get_publisher),
) -> HTMLResponse:
    if not await publisher.exists(project_id):
        hint = ArtifactNotFoundError(project_id=project_id).hint
        logger.info("Viewer requested for ungenerated Swagger file: %s", project_id)
        return HTMLResponse(
            content=_MISSING_PAGE.format(
                project_id=html.escape(project_id),
                hint=html.escape(hint),
            ),
            status_code=404,
        )
    return get_swagger_ui_html(
        openapi_url=f"/swagger-files/{project_id}",
        title=f"API Docs - {project_id}",
    )
