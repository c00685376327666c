"""HTTP tests for /api/projects."""

import http
import uuid

from httpx import AsyncClient
import pytest


async def _create(client: AsyncClient, headers, **body) -> dict:
    response = await client.post("/api/projects", json=body, headers=headers)
    assert response.status_code == http.HTTPStatus.CREATED
    return response.json()["project"]


async def _list(client: AsyncClient, headers, status: str | None = None) -> list[dict]:
    params = {"status": status} if status else None
    response = await client.get("/api/projects", params=params, headers=headers)
    assert response.status_code == http.HTTPStatus.OK
    return response.json()["projects"]


@pytest.mark.asyncio
async def test_requires_session(client: AsyncClient):
    assert (await client.get("/api/projects")).status_code == http.HTTPStatus.UNAUTHORIZED
    assert (await client.post("/api/projects", json={})).status_code == http.HTTPStatus.UNAUTHORIZED


@pytest.mark.asyncio
async def test_create_project(client: AsyncClient, alice):
    project = await _create(client, alice, name="  Match day  ")

    assert project["name"] == "Match day"
    assert project["status"] == "active"
    assert project["stageCount"] == 1
    assert project["backgroundImage"] is None
    uuid.UUID(project["uploadId"])

    untitled = await _create(client, alice)
    assert untitled["name"] == "Untitled Project"


@pytest.mark.asyncio
async def test_create_project_without_body(client: AsyncClient, alice):
    response = await client.post("/api/projects", headers=alice)
    assert response.status_code == http.HTTPStatus.CREATED
    assert response.json()["project"]["name"] == "Untitled Project"


@pytest.mark.asyncio
async def test_archive_moves_project_between_lists(client: AsyncClient, alice):
    project = await _create(client, alice, name="Season opener")
    assert [p["uploadId"] for p in await _list(client, alice)] == [project["uploadId"]]

    response = await client.patch(
        f"/api/projects/{project['uploadId']}", json={"status": "archive"}, headers=alice
    )
    assert response.status_code == http.HTTPStatus.OK
    patched = response.json()["project"]
    assert patched["status"] == "archive"
    assert patched["name"] == "Season opener"

    assert await _list(client, alice, "active") == []
    archived = await _list(client, alice, "archive")
    assert [p["uploadId"] for p in archived] == [project["uploadId"]]


@pytest.mark.asyncio
async def test_list_reports_stage_count(client: AsyncClient, alice):
    payload = [
        {"button": {"stageParentTag": "a"}},
        {"toggle-switch": {"stageParentTag": "b"}},
    ]
    saved = (
        await client.post(
            "/api/field-configs", json={"payload": payload, "isDraft": False}, headers=alice
        )
    ).json()

    [project] = await _list(client, alice)
    assert project["uploadId"] == saved["uploadId"]
    assert project["stageCount"] == 3
    assert project["name"] == f"Project {saved['contentHash'][-4:]}"


@pytest.mark.asyncio
async def test_patch_validation(client: AsyncClient, alice):
    project = await _create(client, alice)

    response = await client.patch(
        f"/api/projects/{project['uploadId']}", json={"status": "deleted"}, headers=alice
    )
    assert response.status_code == http.HTTPStatus.BAD_REQUEST
    assert response.json() == {"error": "No valid updates provided."}

    response = await client.patch(
        f"/api/projects/{project['uploadId']}", json={}, headers=alice
    )
    assert response.status_code == http.HTTPStatus.BAD_REQUEST


@pytest.mark.asyncio
async def test_patch_rename(client: AsyncClient, alice):
    project = await _create(client, alice, name="Old")
    response = await client.patch(
        f"/api/projects/{project['uploadId']}", json={"name": "New"}, headers=alice
    )
    assert response.json()["project"]["name"] == "New"
    assert response.json()["project"]["status"] == "active"


@pytest.mark.asyncio
async def test_other_users_projects_are_hidden(client: AsyncClient, alice, bob):
    project = await _create(client, alice)
    path = f"/api/projects/{project['uploadId']}"

    assert (await client.get(path, headers=bob)).status_code == http.HTTPStatus.NOT_FOUND
    response = await client.patch(path, json={"status": "trash"}, headers=bob)
    assert response.status_code == http.HTTPStatus.NOT_FOUND
    assert (await client.delete(path, headers=bob)).status_code == http.HTTPStatus.NOT_FOUND
    assert await _list(client, bob) == []


@pytest.mark.asyncio
async def test_delete_project(client: AsyncClient, alice):
    project = await _create(client, alice)
    path = f"/api/projects/{project['uploadId']}"

    response = await client.delete(path, headers=alice)
    assert response.status_code == http.HTTPStatus.OK
    assert response.json() == {"ok": True}

    response = await client.get(path, headers=alice)
    assert response.status_code == http.HTTPStatus.NOT_FOUND
    assert response.json() == {"error": "Project not found."}

    public = await client.get(f"/api/field-configs/public/{project['uploadId']}")
    assert public.status_code == http.HTTPStatus.NOT_FOUND

    assert (await client.delete(path, headers=alice)).status_code == http.HTTPStatus.NOT_FOUND


@pytest.mark.asyncio
async def test_get_project_unknown_ids(client: AsyncClient, alice):
    response = await client.get(f"/api/projects/{uuid.uuid4()}", headers=alice)
    assert response.status_code == http.HTTPStatus.NOT_FOUND
    response = await client.get("/api/projects/garbage", headers=alice)
    assert response.status_code == http.HTTPStatus.NOT_FOUND
