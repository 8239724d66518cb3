"""
Swagger Manager Backend - Project SQLAlchemy Models
=====================================================

What:  ORM models for the `projects` and `project_collaborators` tables.
How:   Inherit from the shared DeclarativeBase; Alembic migration 001 mirrors them.
Who:   Used by ProjectStore for CRUD and by the access-control evaluator.

Table Design:
    - UUID primary key, generated in Python (portable across PostgreSQL/SQLite)
    - owner_id: opaque principal identifier of the creator, never updated
    - Collaborators live in their own table so "projects visible to principal X"
      is an indexed join instead of a scan over JSON arrays
    - Endpoint references are not stored on the project; they are read from
      the endpoints table (Endpoint.project_id is the only relation)
"""

import uuid
from datetime import datetime, timezone
from typing import List

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from swagger_manager.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Project(Base):
    """
    A named collection of endpoint definitions with an owner and collaborators.

    Lifecycle:
        1. Created by a principal, who becomes owner and first collaborator
        2. Renamed / re-described / re-membered by the owner only
        3. Deleted by the owner; its endpoints are deleted first in the same
           transaction, then its generated Swagger file is removed
    """

    __tablename__ = "projects"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        comment="Unique project identifier",
    )

    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        comment="Human-readable project name; becomes the document title",
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        comment="Free-text description; becomes the document description",
    )

    owner_id: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
        index=True,
        comment="Principal that created the project (immutable)",
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

    # selectin: the collection is loaded eagerly with the project, which keeps
    # attribute access free of implicit I/O under AsyncSession
    collaborator_rows: Mapped[List["ProjectCollaborator"]] = relationship(
        back_populates="project",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="ProjectCollaborator.id",
    )

    __table_args__ = (
        Index("idx_projects_created_at", created_at.desc()),
    )

    @property
    def collaborators(self) -> List[str]:
        """Principal ids with access, in the order they were added."""
        return [row.principal_id for row in self.collaborator_rows]

    def __repr__(self) -> str:
        return f"<Project(id={self.id}, name='{self.name}', owner='{self.owner_id}')>"


class ProjectCollaborator(Base):
    """One principal's membership in one project."""

    __tablename__ = "project_collaborators"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
    )

    principal_id: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
        index=True,
    )

    project: Mapped[Project] = relationship(back_populates="collaborator_rows")

    __table_args__ = (
        UniqueConstraint("project_id", "principal_id", name="uq_project_collaborator"),
    )

    def __repr__(self) -> str:
        return f"<ProjectCollaborator(project={self.project_id}, principal='{self.principal_id}')>"
