"""
Tests the HTTP surface: routing, payload handling and status codes.
"""

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from studygroups.api.app import app
from studygroups.api.dependencies import SETTINGS, get_repository
from studygroups.config.settings import Settings
from studygroups.service.database import DatabaseStudyGroupRepository
from studygroups.service.memory import InMemoryStore, InMemoryStudyGroupRepository


@pytest_asyncio.fixture(params=["database", "memory"])
async def client(request, session_manager):
    if request.param == "memory":
        store = InMemoryStore()

        async def repository():
            yield InMemoryStudyGroupRepository(store=store)
    else:

        async def repository():
            async with session_manager.session() as conn:
                async with conn.begin():
                    yield DatabaseStudyGroupRepository(conn=conn)

    app.dependency_overrides[get_repository] = repository

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        yield client

    app.dependency_overrides.clear()


def payload(study_group_id, name, subject="Math", users=None, created_at=None):
    created_at = created_at or datetime.now(tz=timezone.utc)
    content = {
        "study_group_id": study_group_id,
        "name": name,
        "subject": subject,
        "created_at": created_at.isoformat(),
    }
    if users is not None:
        content["users"] = [
            {"user_id": user_id, "name": name} for user_id, name in users
        ]
    return content


@pytest.mark.asyncio
async def test_create_and_list(client):
    response = await client.post(
        "/api/studygroups/create",
        json=payload(1, "Math Club", users=[(1, "TestUser")]),
    )
    assert response.status_code == 200

    response = await client.get("/api/studygroups")
    assert response.status_code == 200

    content = response.json()
    assert len(content) == 1
    assert content[0]["name"] == "Math Club"
    assert content[0]["subject"] == "Math"
    assert content[0]["users"] == [{"user_id": 1, "name": "TestUser"}]


@pytest.mark.asyncio
async def test_create_without_payload(client):
    response = await client.post("/api/studygroups/create")
    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "content",
    [
        payload(2, "Math"),
        payload(3, "ThisIsAVeryLongStudyGroupNameThatExceeds30Chars"),
        payload(4, "Genetics Research", subject="Biology"),
        payload(-5, "Invalid ID Group"),
        payload(
            6,
            "Organic Chemistry Lab",
            created_at=datetime.now(tz=timezone.utc) - timedelta(days=1),
        ),
        payload(7, "Duplicate Members", users=[(1, "Alice"), (1, "Alice")]),
        {"name": "No Identifier", "subject": "Math"},
    ],
)
async def test_create_invalid(client, content):
    response = await client.post("/api/studygroups/create", json=content)
    assert response.status_code == 400

    response = await client.get("/api/studygroups")
    assert response.json() == []


@pytest.mark.asyncio
async def test_create_duplicate_id(client):
    response = await client.post("/api/studygroups/create", json=payload(1, "Math Club"))
    assert response.status_code == 200

    response = await client.post(
        "/api/studygroups/create", json=payload(1, "Physics Club", subject="Physics")
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_list_is_ordered_by_creation(client):
    now = datetime.now(tz=timezone.utc)

    await client.post(
        "/api/studygroups/create",
        json=payload(1, "Physics Club", "Physics", created_at=now + timedelta(days=2)),
    )
    await client.post(
        "/api/studygroups/create",
        json=payload(2, "Chemistry Club", "Chemistry", created_at=now),
    )

    response = await client.get("/api/studygroups")

    assert [group["name"] for group in response.json()] == [
        "Chemistry Club",
        "Physics Club",
    ]


@pytest.mark.asyncio
async def test_search(client):
    await client.post(
        "/api/studygroups/create", json=payload(1, "Math Club", users=[(1, "Alice")])
    )
    await client.post(
        "/api/studygroups/create",
        json=payload(2, "Physics Group", "Physics", users=[(2, "Bob")]),
    )

    response = await client.get("/api/studygroups/search", params={"subject": "Math"})
    assert response.status_code == 200
    assert [group["study_group_id"] for group in response.json()] == [1]

    response = await client.get(
        "/api/studygroups/search", params={"subject": "Biology"}
    )
    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.asyncio
async def test_join_and_leave(client):
    await client.post(
        "/api/studygroups/create", json=payload(1, "Math Club", users=[(1, "Alice")])
    )
    await client.post(
        "/api/studygroups/create", json=payload(2, "Physics Club", "Physics")
    )

    response = await client.post(
        "/api/studygroups/join", params={"studyGroupId": 2, "userId": 1}
    )
    assert response.status_code == 200

    response = await client.post(
        "/api/studygroups/join", params={"studyGroupId": 2, "userId": 1}
    )
    assert response.status_code == 400

    response = await client.get("/api/studygroups/search", params={"subject": "Physics"})
    assert response.json()[0]["users"] == [{"user_id": 1, "name": "Alice"}]

    response = await client.post(
        "/api/studygroups/leave", params={"studyGroupId": 2, "userId": 1}
    )
    assert response.status_code == 200

    response = await client.post(
        "/api/studygroups/leave", params={"studyGroupId": 2, "userId": 1}
    )
    assert response.status_code == 400

    response = await client.get("/api/studygroups/search", params={"subject": "Physics"})
    assert response.json()[0]["users"] == []


@pytest.mark.asyncio
async def test_join_missing_group(client):
    response = await client.post(
        "/api/studygroups/join", params={"studyGroupId": 999, "userId": 1}
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_join_unknown_user(client):
    await client.post("/api/studygroups/create", json=payload(1, "Math Club"))

    response = await client.post(
        "/api/studygroups/join", params={"studyGroupId": 1, "userId": 999}
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_leave_missing_group(client):
    response = await client.post(
        "/api/studygroups/leave", params={"studyGroupId": 999, "userId": 1}
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_members_keep_insertion_order(client):
    await client.post(
        "/api/studygroups/create",
        json=payload(1, "Math Club", users=[(5, "Eve"), (4, "Dave")]),
    )

    response = await client.get("/api/studygroups")

    assert [user["user_id"] for user in response.json()[0]["users"]] == [5, 4]


@pytest.mark.asyncio
async def test_configured_memory_repository():
    app.dependency_overrides[SETTINGS] = lambda: Settings(repository_type="memory")

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        response = await client.get("/api/studygroups/search", params={"subject": "Math"})

    app.dependency_overrides.clear()

    assert response.status_code == 200
