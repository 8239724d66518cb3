"""
Swagger Manager Backend - Project Request/Response Schemas
============================================================

What:  Pydantic models for the project API contract.
How:   Request models only describe shape; data-model rules (non-empty name,
       owner membership) live in services/validation.py so they fail with
       our ValidationError. Partial updates read `model_fields_set` to tell
       an omitted field from one explicitly sent.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ProjectCreate(BaseModel):
    """Body of POST /api/projects."""
    name: str = Field(description="Project name (required, non-empty)")
    description: Optional[str] = Field(
        default=None,
        description="Optional description; defaults to an empty string",
    )


class ProjectUpdate(BaseModel):
    """
    Body of PUT /api/projects/{id}. Every field is optional.

    Omitted fields keep their value; `"description": ""` clears the
    description; `collaborators` replaces the membership (owner is re-added
    automatically).
    """
    name: Optional[str] = Field(default=None, description="New project name")
    description: Optional[str] = Field(default=None, description="New description")
    collaborators: Optional[List[str]] = Field(
        default=None,
        description="Complete list of collaborator principal ids",
    )


class ProjectResponse(BaseModel):
    """Full representation of a project, including its endpoint references."""
    id: uuid.UUID = Field(description="Unique project identifier")
    name: str
    description: str
    owner_id: str = Field(description="Principal that created the project")
    collaborators: List[str] = Field(description="Principals with access (owner included)")
    endpoint_ids: List[uuid.UUID] = Field(
        default_factory=list,
        description="Identifiers of the project's endpoints, oldest first",
    )
    created_at: datetime
    updated_at: datetime


class SwaggerUrlResponse(BaseModel):
    """Stable addresses of a project's generated document."""
    project_id: uuid.UUID
    swagger_url: str = Field(description="Raw Swagger JSON")
    viewer_url: str = Field(description="Swagger UI rendering of the document")
