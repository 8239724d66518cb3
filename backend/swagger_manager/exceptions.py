"""
Swagger Manager Backend - Custom Exception Hierarchy
======================================================

What:  Application-specific exceptions for the error kinds the API reports.
How:   Each exception carries a user-facing message and an optional context
       dict. Global exception handlers (registered in main.py) translate them
       into structured JSON responses with the matching HTTP status code.
Who:   Raised by validators, stores and services; caught by global handlers.

Exception Hierarchy:
    SwaggerManagerError (base)
    ├── ValidationError          → 400 Bad Request
    ├── AuthenticationError      → 401 Unauthorized
    ├── AccessDeniedError        → 403 Forbidden
    ├── NotFoundError            → 404 Not Found
    │   └── ArtifactNotFoundError → 404 Not Found (with a hint)
    ├── PersistenceError         → 500 Internal Server Error
    ├── ArtifactStorageError     → 500 Internal Server Error
    └── ConsistencyError         → 503 Service Unavailable (retryable)
"""

from typing import Any, Dict, Optional


class SwaggerManagerError(Exception):
    """
    Base exception for all Swagger Manager application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only for 4xx errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(SwaggerManagerError):
    """
    Raised when client input fails a data-model rule.

    When:    Missing required field, path without a leading slash, unknown
             HTTP method or security scheme, over-long summary, duplicate
             (path, method) within a project.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Path must start with '/'",
            "details": {"field": "path", "value": "items"}
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AuthenticationError(SwaggerManagerError):
    """
    Raised when a request arrives without a principal identifier.

    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AccessDeniedError(SwaggerManagerError):
    """
    Raised when the principal lacks the relationship a project operation needs.

    When:    A non-member reads or writes a project, or a collaborator tries
             an owner-only operation (rename, delete, membership change).
    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "Access denied to this project",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(SwaggerManagerError):
    """
    Raised when a requested resource does not exist.

    When:    Unknown project id or endpoint id.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        message: Optional[str] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id:
                message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class ArtifactNotFoundError(NotFoundError):
    """
    Raised when a project's Swagger document has not been generated yet.

    The message tells the client which operation produces the artifact.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        project_id: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.hint = (
            f"Generate it first by calling GET /api/projects/{project_id}/swagger, "
            "or create, update or delete an endpoint of the project."
        )
        ctx = context or {}
        ctx["hint"] = self.hint
        super().__init__(
            resource="swagger file",
            resource_id=project_id,
            context=ctx,
            message=f"Swagger file for project '{project_id}' was not found",
        )


class PersistenceError(SwaggerManagerError):
    """
    Raised when the storage engine fails (connection lost, constraint, deadlock).

    HTTP:    500 Internal Server Error
    The client only ever sees a generic message; context is logged server-side.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ArtifactStorageError(SwaggerManagerError):
    """
    Raised when writing, reading or deleting a generated document fails.

    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "Swagger file storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ConsistencyError(SwaggerManagerError):
    """
    Raised when the endpoint set of a project could not be read for regeneration.

    The triggering mutation is already committed. Regeneration is idempotent,
    so the client may retry (or call GET /api/projects/{id}/swagger).
    HTTP:    503 Service Unavailable, with Retry-After
    """

    def __init__(
        self,
        message: str = (
            "The Swagger document could not be regenerated. "
            "Your change was saved; retry the regeneration shortly."
        ),
        retry_after: int = 5,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
