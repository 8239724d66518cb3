"""
Swagger Manager Backend - Endpoint SQLAlchemy Model
=====================================================

What:  ORM model for the `endpoints` table: one documented route + method.
How:   Structured OpenAPI fragments (parameters, request body, responses) are
       stored as JSON exactly as received, so they can be copied into the
       generated document unchanged.
Who:   Used by EndpointStore and read by the Swagger document generator.

Column notes:
    - project_id is the single source of truth for Project 1-N Endpoint
    - method is stored upper case (GET, POST, ...)
    - request_body is NULL when the operation has no body
    - updated_at decides which record wins if two share (path, method)
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from swagger_manager.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Endpoint(Base):
    """
    An HTTP route + method documented inside a project.

    Query Patterns:
        - All endpoints of a project: WHERE project_id = :id
          → idx_endpoints_project_id
        - Duplicate route check: WHERE project_id = :id AND path = :p AND method = :m
    """

    __tablename__ = "endpoints"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        comment="Owning project (immutable)",
    )

    path: Mapped[str] = mapped_column(String(500), nullable=False)

    method: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        comment="Upper-case HTTP method",
    )

    summary: Mapped[str] = mapped_column(String(200), nullable=False)

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
    )

    tags: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    parameters: Mapped[List[Dict[str, Any]]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
    )

    request_body: Mapped[Optional[Dict[str, Any]]] = mapped_column(
        JSON,
        nullable=True,
        default=None,
    )

    responses: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False)

    security: Mapped[List[str]] = mapped_column(JSON, nullable=False)

    deprecated: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_endpoints_project_id", "project_id"),
        Index("idx_endpoints_route", "project_id", "path", "method"),
    )

    def __repr__(self) -> str:
        return f"<Endpoint(id={self.id}, {self.method} {self.path}, project={self.project_id})>"
