"""
Swagger Manager Backend - HTTP API Tests
==========================================

What:  Full request/response cycle through create_app() with an in-memory
       database, using HTTPX over ASGITransport.

What we test:
    ✅ Status codes for every error category (400/401/403/404)
    ✅ Error body format with request_id
    ✅ Project and endpoint CRUD, with the Swagger file kept in step
    ✅ Concurrent endpoint mutations leave a Swagger file with every path
    ✅ /swagger-files and /api-docs, including the not-generated-yet cases
    ✅ Health and service index
"""

import asyncio
import uuid

import pytest


async def create_project(client, headers, name="Shop API"):
    response = await client.post("/api/projects", json={"name": name}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


async def create_endpoint(client, headers, project_id, **fields):
    body = {"project_id": project_id, "path": "/items", "method": "get", "summary": "List items"}
    body.update(fields)
    response = await client.post("/api/endpoints", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestAuthentication:

    @pytest.mark.asyncio
    async def test_missing_principal_is_401(self, test_client):
        response = await test_client.get("/api/projects")
        assert response.status_code == 401
        body = response.json()
        assert body["error"] == "authentication_required"
        assert "X-Principal-ID" in body["message"]
        assert body["request_id"] == response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_blank_principal_is_401(self, test_client):
        response = await test_client.get("/api/projects", headers={"X-Principal-ID": "  "})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_client_request_id_is_echoed(self, test_client, as_principal):
        headers = {**as_principal("U1"), "X-Request-ID": "trace-42"}
        response = await test_client.get("/api/projects", headers=headers)
        assert response.headers["X-Request-ID"] == "trace-42"


class TestProjectsApi:

    @pytest.mark.asyncio
    async def test_create_and_get(self, test_client, as_principal):
        project = await create_project(test_client, as_principal("U1"))
        assert project["owner_id"] == "U1"
        assert project["collaborators"] == ["U1"]
        assert project["endpoint_ids"] == []

        response = await test_client.get(f"/api/projects/{project['id']}", headers=as_principal("U1"))
        assert response.status_code == 200
        assert response.json()["name"] == "Shop API"

    @pytest.mark.asyncio
    async def test_missing_name_is_400(self, test_client, as_principal):
        response = await test_client.post("/api/projects", json={}, headers=as_principal("U1"))
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["details"]["errors"][0]["loc"] == ["body", "name"]

    @pytest.mark.asyncio
    async def test_blank_name_is_400(self, test_client, as_principal):
        response = await test_client.post("/api/projects", json={"name": " "}, headers=as_principal("U1"))
        assert response.status_code == 400
        assert response.json()["details"]["field"] == "name"

    @pytest.mark.asyncio
    async def test_unknown_project_is_404(self, test_client, as_principal):
        response = await test_client.get(f"/api/projects/{uuid.uuid4()}", headers=as_principal("U1"))
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_malformed_project_id_is_400(self, test_client, as_principal):
        response = await test_client.get("/api/projects/not-a-uuid", headers=as_principal("U1"))
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_stranger_is_403(self, test_client, as_principal):
        project = await create_project(test_client, as_principal("U1"))
        response = await test_client.get(f"/api/projects/{project['id']}", headers=as_principal("U2"))
        assert response.status_code == 403
        assert response.json()["error"] == "access_denied"

    @pytest.mark.asyncio
    async def test_list_only_own_projects(self, test_client, as_principal):
        await create_project(test_client, as_principal("U1"), name="One")
        await create_project(test_client, as_principal("U2"), name="Two")

        response = await test_client.get("/api/projects", headers=as_principal("U1"))
        assert response.status_code == 200
        assert [p["name"] for p in response.json()] == ["One"]
        assert response.headers["X-Total-Count"] == "1"

    @pytest.mark.asyncio
    async def test_collaborator_flow(self, test_client, as_principal):
        project = await create_project(test_client, as_principal("U1"))
        pid = project["id"]

        response = await test_client.put(
            f"/api/projects/{pid}", json={"collaborators": ["U2"]}, headers=as_principal("U1")
        )
        assert response.status_code == 200
        assert response.json()["collaborators"] == ["U1", "U2"]

        await create_endpoint(test_client, as_principal("U2"), pid)

        response = await test_client.put(
            f"/api/projects/{pid}", json={"name": "Mine now"}, headers=as_principal("U2")
        )
        assert response.status_code == 403
        response = await test_client.delete(f"/api/projects/{pid}", headers=as_principal("U2"))
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_delete_project_removes_swagger_file(self, test_client, as_principal):
        project = await create_project(test_client, as_principal("U1"))
        await create_endpoint(test_client, as_principal("U1"), project["id"])
        assert (await test_client.get(f"/swagger-files/{project['id']}")).status_code == 200

        response = await test_client.delete(f"/api/projects/{project['id']}", headers=as_principal("U1"))
        assert response.status_code == 200

        assert (await test_client.get(f"/swagger-files/{project['id']}")).status_code == 404
        response = await test_client.get(f"/api/projects/{project['id']}", headers=as_principal("U1"))
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_explicit_regeneration(self, test_client, as_principal):
        project = await create_project(test_client, as_principal("U1"))
        response = await test_client.get(f"/api/projects/{project['id']}/swagger", headers=as_principal("U1"))
        assert response.status_code == 200
        document = response.json()
        assert document["openapi"] == "3.0.3"
        assert document["info"]["title"] == "Shop API"
        assert document["paths"] == {}

    @pytest.mark.asyncio
    async def test_swagger_url(self, test_client, as_principal, test_settings):
        base = test_settings.public_base_url
        project = await create_project(test_client, as_principal("U1"))
        response = await test_client.get(
            f"/api/projects/{project['id']}/swagger-url", headers=as_principal("U1")
        )
        assert response.status_code == 200
        assert response.json()["swagger_url"] == f"{base}/swagger-files/{project['id']}"
        assert response.json()["viewer_url"] == f"{base}/api-docs/{project['id']}"


class TestEndpointsApi:

    @pytest.mark.asyncio
    async def test_shop_api_walkthrough(self, test_client, as_principal):
        headers = as_principal("U1")
        project = await create_project(test_client, headers)
        endpoint = await create_endpoint(test_client, headers, project["id"])
        assert endpoint["method"] == "GET"

        document = (await test_client.get(f"/swagger-files/{project['id']}")).json()
        assert document["paths"]["/items"]["get"]["summary"] == "List items"

        detail = (await test_client.get(f"/api/projects/{project['id']}", headers=headers)).json()
        assert detail["endpoint_ids"] == [endpoint["id"]]

        response = await test_client.delete(f"/api/endpoints/{endpoint['id']}", headers=headers)
        assert response.status_code == 200

        document = (await test_client.get(f"/swagger-files/{project['id']}")).json()
        assert "/items" not in document["paths"]

    @pytest.mark.asyncio
    async def test_invalid_path_is_400(self, test_client, as_principal):
        project = await create_project(test_client, as_principal("U1"))
        response = await test_client.post(
            "/api/endpoints",
            json={"project_id": project["id"], "path": "items", "method": "GET", "summary": "x"},
            headers=as_principal("U1"),
        )
        assert response.status_code == 400
        assert response.json()["details"]["field"] == "path"

    @pytest.mark.asyncio
    async def test_missing_summary_is_400(self, test_client, as_principal):
        project = await create_project(test_client, as_principal("U1"))
        response = await test_client.post(
            "/api/endpoints",
            json={"project_id": project["id"], "path": "/items", "method": "GET"},
            headers=as_principal("U1"),
        )
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_stranger_cannot_add_endpoint(self, test_client, as_principal):
        project = await create_project(test_client, as_principal("U1"))
        response = await test_client.post(
            "/api/endpoints",
            json={"project_id": project["id"], "path": "/items", "method": "GET", "summary": "x"},
            headers=as_principal("U2"),
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_partial_update_and_list(self, test_client, as_principal):
        headers = as_principal("U1")
        project = await create_project(test_client, headers)
        endpoint = await create_endpoint(
            test_client, headers, project["id"], tags=["items"], deprecated=True,
            request_body={"content": {"application/json": {}}},
        )

        response = await test_client.put(
            f"/api/endpoints/{endpoint['id']}",
            json={"tags": [], "deprecated": False, "request_body": None},
            headers=headers,
        )
        assert response.status_code == 200
        updated = response.json()
        assert updated["tags"] == []
        assert updated["deprecated"] is False
        assert updated["request_body"] is None
        assert updated["summary"] == "List items"

        response = await test_client.get(f"/api/endpoints/project/{project['id']}", headers=headers)
        assert [e["id"] for e in response.json()] == [endpoint["id"]]

        operation = (await test_client.get(f"/swagger-files/{project['id']}")).json()["paths"]["/items"]["get"]
        assert operation["tags"] == []
        assert "requestBody" not in operation

    @pytest.mark.asyncio
    async def test_null_optional_fields_get_defaults(self, test_client, as_principal):
        project = await create_project(test_client, as_principal("U1"))
        response = await test_client.post(
            "/api/endpoints",
            json={
                "project_id": project["id"],
                "path": "/items",
                "method": "get",
                "summary": "x",
                "description": None,
                "tags": None,
            },
            headers=as_principal("U1"),
        )
        assert response.status_code == 201, response.text
        assert response.json()["description"] == ""
        assert response.json()["tags"] == ["default"]

    @pytest.mark.asyncio
    async def test_null_on_update_is_400(self, test_client, as_principal):
        headers = as_principal("U1")
        project = await create_project(test_client, headers)
        endpoint = await create_endpoint(test_client, headers, project["id"])
        response = await test_client.put(
            f"/api/endpoints/{endpoint['id']}", json={"tags": None}, headers=headers
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_endpoint_is_404(self, test_client, as_principal):
        response = await test_client.get(f"/api/endpoints/{uuid.uuid4()}", headers=as_principal("U1"))
        assert response.status_code == 404


class TestConcurrentMutations:

    @pytest.mark.asyncio
    async def test_parallel_creates_all_reach_the_document(self, test_client, as_principal):
        headers = as_principal("U1")
        project = await create_project(test_client, headers)
        paths = [f"/items{i}" for i in range(8)]

        responses = await asyncio.gather(*(
            test_client.post(
                "/api/endpoints",
                json={"project_id": project["id"], "path": path, "method": "GET", "summary": "x"},
                headers=headers,
            )
            for path in paths
        ))

        assert [r.status_code for r in responses] == [201] * len(paths)
        document = (await test_client.get(f"/swagger-files/{project['id']}")).json()
        assert sorted(document["paths"]) == sorted(paths)

    @pytest.mark.asyncio
    async def test_interleaved_creates_and_deletes(self, test_client, as_principal):
        headers = as_principal("U1")
        project = await create_project(test_client, headers)
        doomed = [
            await create_endpoint(test_client, headers, project["id"], path=f"/old{i}")
            for i in range(4)
        ]
        fresh = [f"/new{i}" for i in range(4)]

        deletes = [
            test_client.delete(f"/api/endpoints/{e['id']}", headers=headers) for e in doomed
        ]
        creates = [
            test_client.post(
                "/api/endpoints",
                json={"project_id": project["id"], "path": path, "method": "GET", "summary": "x"},
                headers=headers,
            )
            for path in fresh
        ]
        interleaved = [call for pair in zip(deletes, creates) for call in pair]
        responses = await asyncio.gather(*interleaved)

        assert sorted(r.status_code for r in responses) == [200] * 4 + [201] * 4
        document = (await test_client.get(f"/swagger-files/{project['id']}")).json()
        assert sorted(document["paths"]) == sorted(fresh)


class TestSwaggerFiles:

    @pytest.mark.asyncio
    async def test_not_generated_yet_has_hint(self, test_client, as_principal):
        project = await create_project(test_client, as_principal("U1"))
        response = await test_client.get(f"/swagger-files/{project['id']}")
        assert response.status_code == 404
        hint = response.json()["details"]["hint"]
        assert f"/api/projects/{project['id']}/swagger" in hint

    @pytest.mark.asyncio
    async def test_bad_project_key_is_400(self, test_client):
        response = await test_client.get("/swagger-files/not..a..key")
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_viewer_missing_page(self, test_client, as_principal):
        project = await create_project(test_client, as_principal("U1"))
        response = await test_client.get(f"/api-docs/{project['id']}")
        assert response.status_code == 404
        assert "text/html" in response.headers["content-type"]
        assert "/swagger" in response.text

    @pytest.mark.asyncio
    async def test_viewer_renders_swagger_ui(self, test_client, as_principal):
        project = await create_project(test_client, as_principal("U1"))
        await create_endpoint(test_client, as_principal("U1"), project["id"])

        response = await test_client.get(f"/api-docs/{project['id']}")
        assert response.status_code == 200
        assert "swagger-ui" in response.text
        assert f"/swagger-files/{project['id']}" in response.text


class TestServiceRoutes:

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["artifact_storage"] == "writable"

    @pytest.mark.asyncio
    async def test_index(self, test_client):
        response = await test_client.get("/")
        assert response.status_code == 200
        assert response.json()["health"] == "/health"

    @pytest.mark.asyncio
    async def test_unknown_route_uses_error_format(self, test_client):
        response = await test_client.get("/nope")
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"
