"""Create projects, project_collaborators and endpoints tables

Revision ID: 001
Revises: None
Create Date: 2024-06-01 00:00:00.000000+00:00

What:  Initial schema: projects, their collaborator memberships, and the
       endpoints documented in each project.
How:   PostgreSQL UUID primary keys, TIMESTAMP WITH TIME ZONE, JSON columns
       for the structured endpoint fields. Child rows reference projects
       with ON DELETE CASCADE.

Rollback: downgrade() drops all three tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "projects",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
            comment="Unique project identifier",
        ),
        sa.Column(
            "name",
            sa.String(200),
            nullable=False,
            comment="Human-readable project name; becomes the document title",
        ),
        sa.Column(
            "description",
            sa.Text(),
            nullable=False,
            server_default=sa.text("''"),
            comment="Free-text description; becomes the document description",
        ),
        sa.Column(
            "owner_id",
            sa.String(128),
            nullable=False,
            comment="Principal that created the project (immutable)",
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_projects_owner_id", "projects", ["owner_id"])
    op.create_index("idx_projects_created_at", "projects", [sa.text("created_at DESC")])

    op.create_table(
        "project_collaborators",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("project_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("principal_id", sa.String(128), nullable=False),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("project_id", "principal_id", name="uq_project_collaborator"),
    )
    # "Which projects can this principal see?" is the listing query
    op.create_index(
        "ix_project_collaborators_principal_id",
        "project_collaborators",
        ["principal_id"],
    )

    op.create_table(
        "endpoints",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column(
            "project_id",
            postgresql.UUID(as_uuid=True),
            nullable=False,
            comment="Owning project (immutable)",
        ),
        sa.Column("path", sa.String(500), nullable=False),
        sa.Column("method", sa.String(10), nullable=False, comment="Upper-case HTTP method"),
        sa.Column("summary", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("parameters", sa.JSON(), nullable=False),
        sa.Column("request_body", sa.JSON(), nullable=True),
        sa.Column("responses", sa.JSON(), nullable=False),
        sa.Column("security", sa.JSON(), nullable=False),
        sa.Column("deprecated", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        *_timestamps(),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_endpoints_project_id", "endpoints", ["project_id"])
    # Not unique: duplicates are rejected by the service, and the generator
    # resolves any that slip through by recency
    op.create_index("idx_endpoints_route", "endpoints", ["project_id", "path", "method"])


def downgrade() -> None:
    """Drop all tables. Destructive: every project and endpoint is lost."""
    op.drop_index("idx_endpoints_route", table_name="endpoints")
    op.drop_index("idx_endpoints_project_id", table_name="endpoints")
    op.drop_table("endpoints")
    op.drop_index("ix_project_collaborators_principal_id", table_name="project_collaborators")
    op.drop_table("project_collaborators")
    op.drop_index("idx_projects_created_at", table_name="projects")
    op.drop_index("ix_projects_owner_id", table_name="projects")
    op.drop_table("projects")
