"""
Swagger Manager Backend - Access Control Evaluator
====================================================

What:  Pure predicates deciding whether a principal may read or change a project.
How:   Compares the principal id with the project's owner and collaborators
       as currently loaded. No caching, no side effects: every request
       re-evaluates against the freshly loaded project.
Who:   Called by ProjectService and EndpointService before any mutation.

Rules:
    can_access  (read project, manage its endpoints): owner or collaborator
    can_mutate  (rename, describe, change membership, delete): owner only
"""

import logging
from typing import Any

from swagger_manager.exceptions import AccessDeniedError

logger = logging.getLogger(__name__)


def can_access(principal: str, project: Any) -> bool:
    """True iff principal is the owner or one of the collaborators."""
    if not principal:
        return False
    return principal == project.owner_id or principal in project.collaborators


def can_mutate(principal: str, project: Any) -> bool:
    """True iff principal owns the project."""
    if not principal:
        return False
    return principal == project.owner_id


def require_access(principal: str, project: Any) -> None:
    """Raise AccessDeniedError unless `can_access` holds."""
    if not can_access(principal, project):
        logger.info("Access denied: principal=%s project=%s", principal, project.id)
        raise AccessDeniedError(
            message="Access denied to this project",
            context={"project_id": str(project.id)},
        )


def require_owner(principal: str, project: Any, action: str = "modify") -> None:
    """Raise AccessDeniedError unless `can_mutate` holds."""
    if not can_mutate(principal, project):
        logger.info(
            "Owner-only action '%s' denied: principal=%s project=%s",
            action,
            principal,
            project.id,
        )
        raise AccessDeniedError(
            message=f"Only the project owner can {action} this project",
            context={"project_id": str(project.id), "action": action},
        )
