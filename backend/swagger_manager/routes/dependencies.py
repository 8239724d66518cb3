"""
Swagger Manager Backend - Route Dependencies
==============================================

What:  FastAPI dependencies shared by the route modules.
How:   Services are created once by create_app() and stored on app.state;
       these helpers hand them to route handlers. The principal comes from a
       header set by the trusted gateway in front of the service.
"""

from fastapi import Request

from swagger_manager.exceptions import AuthenticationError
from swagger_manager.services.artifact_publisher import ArtifactPublisher
from swagger_manager.services.endpoint_service import EndpointService
from swagger_manager.services.project_service import ProjectService


def get_principal(request: Request) -> str:
    """
    Identifier of the calling principal.

    Raises:
        AuthenticationError: header missing or blank (401)
    """
    header = request.app.state.settings.principal_header
    principal = (request.headers.get(header) or "").strip()
    if not principal:
        raise AuthenticationError(
            message=f"Missing principal. Send your user id in the '{header}' header.",
            context={"header": header},
        )
    return principal


def get_project_service(request: Request) -> ProjectService:
    return request.app.state.project_service


def get_endpoint_service(request: Request) -> EndpointService:
    return request.app.state.endpoint_service


def get_publisher(request: Request) -> ArtifactPublisher:
    return request.app.state.publisher
