"""
Swagger Manager Backend - Endpoint Request/Response Schemas
=============================================================

What:  Pydantic models for the endpoint API contract.
How:   Shapes only. Normalization (method upper-casing, tag lower-casing,
       default responses/security) happens in services/validation.py.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class EndpointCreate(BaseModel):
    """
    Body of POST /api/endpoints.

    Defaults applied when a field is omitted:
        description → ""            tags      → ["default"]
        parameters  → []            responses → {"200": {"description": "Successful response"}}
        request_body → null         security  → ["bearerAuth"]
        deprecated  → false
    """
    project_id: uuid.UUID = Field(description="Owning project")
    path: str = Field(description="Route path, must start with '/'", examples=["/items/{id}"])
    method: str = Field(description="HTTP method (any case)", examples=["get"])
    summary: str = Field(description="Short summary, at most 200 characters")
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    parameters: Optional[List[Dict[str, Any]]] = None
    request_body: Optional[Dict[str, Any]] = Field(
        default=None,
        description="OpenAPI requestBody object",
    )
    responses: Optional[Dict[str, Dict[str, Any]]] = Field(
        default=None,
        description="Status code → OpenAPI response object",
    )
    security: Optional[List[str]] = Field(
        default=None,
        description="Scheme names: bearerAuth, apiKey, oauth2",
    )
    deprecated: Optional[bool] = None


class EndpointUpdate(BaseModel):
    """
    Body of PUT /api/endpoints/{id}. Every field is optional.

    Only fields present in the body are applied, including falsy values
    (`[]`, `""`, `false`); `"request_body": null` removes the body.
    """
    path: Optional[str] = None
    method: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    parameters: Optional[List[Dict[str, Any]]] = None
    request_body: Optional[Dict[str, Any]] = None
    responses: Optional[Dict[str, Dict[str, Any]]] = None
    security: Optional[List[str]] = None
    deprecated: Optional[bool] = None


class EndpointResponse(BaseModel):
    """Full representation of a stored endpoint."""
    id: uuid.UUID
    project_id: uuid.UUID
    path: str
    method: str
    summary: str
    description: str
    tags: List[str]
    parameters: List[Dict[str, Any]]
    request_body: Optional[Dict[str, Any]]
    responses: Dict[str, Any]
    security: List[str]
    deprecated: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
