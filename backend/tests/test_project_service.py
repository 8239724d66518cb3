"""
Swagger Manager Backend - Project Service Tests
=================================================

What:  ProjectService against a real (in-memory) database and a temp
       artifact directory.

What we test:
    ✅ Creation: owner is first collaborator, no document yet
    ✅ Listing only shows projects the principal belongs to
    ✅ Owner-only rename / membership change / delete
    ✅ Delete removes endpoints and the Swagger file
    ✅ Explicit regeneration is idempotent (byte-identical file)
"""

import uuid

import pytest

from swagger_manager.exceptions import AccessDeniedError, NotFoundError, ValidationError
from swagger_manager.schemas.endpoint import EndpointCreate
from swagger_manager.schemas.project import ProjectCreate, ProjectUpdate
from swagger_manager.stores import EndpointStore


async def create_project(service, db, owner="U1", name="Shop API"):
    return await service.create_project(db, owner, ProjectCreate(name=name))


class TestCreateAndRead:

    @pytest.mark.asyncio
    async def test_create_sets_owner_and_collaborators(self, project_service, db_session, publisher):
        project = await create_project(project_service, db_session)

        assert project.name == "Shop API"
        assert project.description == ""
        assert project.owner_id == "U1"
        assert project.collaborators == ["U1"]
        assert project.endpoint_ids == []
        assert not await publisher.exists(str(project.id))

    @pytest.mark.asyncio
    async def test_blank_name_rejected(self, project_service, db_session):
        with pytest.raises(ValidationError):
            await project_service.create_project(db_session, "U1", ProjectCreate(name="   "))

    @pytest.mark.asyncio
    async def test_get_missing_project(self, project_service, db_session):
        with pytest.raises(NotFoundError):
            await project_service.get_project(db_session, "U1", uuid.uuid4())

    @pytest.mark.asyncio
    async def test_stranger_cannot_read(self, project_service, db_session):
        project = await create_project(project_service, db_session)
        with pytest.raises(AccessDeniedError):
            await project_service.get_project(db_session, "U2", project.id)

    @pytest.mark.asyncio
    async def test_list_is_scoped_to_membership(self, project_service, db_session):
        mine = await create_project(project_service, db_session, owner="U1", name="Mine")
        await create_project(project_service, db_session, owner="U2", name="Theirs")
        shared = await create_project(project_service, db_session, owner="U3", name="Shared")
        await project_service.update_project(
            db_session, "U3", shared.id, ProjectUpdate(collaborators=["U1"])
        )

        listed = await project_service.list_projects(db_session, "U1")
        assert {p.id for p in listed} == {mine.id, shared.id}


class TestUpdate:

    @pytest.mark.asyncio
    async def test_owner_renames_and_document_follows(
        self, project_service, endpoint_service, db_session, publisher
    ):
        project = await create_project(project_service, db_session)
        await endpoint_service.create_endpoint(
            db_session,
            "U1",
            EndpointCreate(project_id=project.id, path="/items", method="get", summary="List items"),
        )

        updated = await project_service.update_project(
            db_session, "U1", project.id, ProjectUpdate(name="Shop API v2", description="")
        )

        assert updated.name == "Shop API v2"
        document = await publisher.fetch(str(project.id))
        assert document["info"]["title"] == "Shop API v2"

    @pytest.mark.asyncio
    async def test_omitted_fields_are_kept(self, project_service, db_session):
        project = await project_service.create_project(
            db_session, "U1", ProjectCreate(name="Shop API", description="Catalogue")
        )
        updated = await project_service.update_project(
            db_session, "U1", project.id, ProjectUpdate(name="Shop")
        )
        assert updated.description == "Catalogue"

    @pytest.mark.asyncio
    async def test_collaborator_replacement_keeps_owner(self, project_service, db_session):
        project = await create_project(project_service, db_session)
        updated = await project_service.update_project(
            db_session, "U1", project.id, ProjectUpdate(collaborators=["U2", "U3"])
        )
        assert updated.collaborators == ["U1", "U2", "U3"]

        updated = await project_service.update_project(
            db_session, "U1", project.id, ProjectUpdate(collaborators=["U3"])
        )
        assert updated.collaborators == ["U1", "U3"]

    @pytest.mark.asyncio
    async def test_collaborator_cannot_rename(self, project_service, db_session):
        project = await create_project(project_service, db_session)
        await project_service.update_project(
            db_session, "U1", project.id, ProjectUpdate(collaborators=["U2"])
        )
        with pytest.raises(AccessDeniedError):
            await project_service.update_project(
                db_session, "U2", project.id, ProjectUpdate(name="Hijacked")
            )

    @pytest.mark.asyncio
    async def test_null_name_rejected(self, project_service, db_session):
        project = await create_project(project_service, db_session)
        with pytest.raises(ValidationError):
            await project_service.update_project(
                db_session, "U1", project.id, ProjectUpdate(name=None)
            )


class TestDeleteAndRegenerate:

    @pytest.mark.asyncio
    async def test_delete_cascades_to_endpoints_and_artifact(
        self, project_service, endpoint_service, db_session, publisher
    ):
        project = await create_project(project_service, db_session)
        endpoint = await endpoint_service.create_endpoint(
            db_session,
            "U1",
            EndpointCreate(project_id=project.id, path="/items", method="GET", summary="List"),
        )
        assert await publisher.exists(str(project.id))

        await project_service.delete_project(db_session, "U1", project.id)

        assert not await publisher.exists(str(project.id))
        assert await EndpointStore(db_session).find_by_id(endpoint.id) is None
        with pytest.raises(NotFoundError):
            await project_service.get_project(db_session, "U1", project.id)

    @pytest.mark.asyncio
    async def test_collaborator_cannot_delete(self, project_service, db_session):
        project = await create_project(project_service, db_session)
        await project_service.update_project(
            db_session, "U1", project.id, ProjectUpdate(collaborators=["U2"])
        )
        with pytest.raises(AccessDeniedError):
            await project_service.delete_project(db_session, "U2", project.id)

    @pytest.mark.asyncio
    async def test_regeneration_is_byte_identical(
        self, project_service, endpoint_service, db_session, artifact_storage
    ):
        project = await create_project(project_service, db_session)
        for path in ("/items", "/orders"):
            await endpoint_service.create_endpoint(
                db_session,
                "U1",
                EndpointCreate(project_id=project.id, path=path, method="GET", summary="List"),
            )

        await project_service.regenerate_swagger(db_session, "U1", project.id)
        first = await artifact_storage.read(str(project.id))
        document = await project_service.regenerate_swagger(db_session, "U1", project.id)
        second = await artifact_storage.read(str(project.id))

        assert first == second
        assert sorted(document["paths"]) == ["/items", "/orders"]

    @pytest.mark.asyncio
    async def test_regenerating_empty_project_creates_document(
        self, project_service, db_session, publisher
    ):
        project = await create_project(project_service, db_session)
        document = await project_service.regenerate_swagger(db_session, "U1", project.id)
        assert document["paths"] == {}
        assert await publisher.exists(str(project.id))

    @pytest.mark.asyncio
    async def test_swagger_urls(self, project_service, db_session):
        project = await create_project(project_service, db_session)
        urls = await project_service.get_swagger_urls(
            db_session, "U1", project.id, "https://docs.example.com/"
        )
        assert urls.swagger_url == f"https://docs.example.com/swagger-files/{project.id}"
        assert urls.viewer_url == f"https://docs.example.com/api-docs/{project.id}"
