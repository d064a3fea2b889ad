"""Tests for the owner-scoped session API."""

from datetime import datetime, timedelta, timezone

import pytest
from bson import ObjectId
from httpx import AsyncClient

from conftest import create_session

URL = "https://x.example/y.json"


@pytest.mark.asyncio
async def test_save_draft_creates_one_owned_draft(
    client: AsyncClient, auth_headers: dict, database
) -> None:
    session = await create_session(client, auth_headers, tags=["yoga", "beginner"])

    assert session["id"]
    assert session["status"] == "draft"
    assert session["tags"] == ["yoga", "beginner"]
    assert await database.sessions.count_documents({}) == 1

    me = (await client.get("/api/auth/me", headers=auth_headers)).json()["user"]
    assert session["user_id"] == me["id"]


@pytest.mark.asyncio
async def test_save_draft_trims_and_drops_empty_tags(
    client: AsyncClient, auth_headers: dict
) -> None:
    session = await create_session(
        client, auth_headers, title="  Breathe  ", tags=[" calm ", "", "  "]
    )
    assert session["title"] == "Breathe"
    assert session["tags"] == ["calm"]


@pytest.mark.asyncio
async def test_save_draft_with_id_updates_in_place(
    client: AsyncClient, auth_headers: dict, database
) -> None:
    draft = await create_session(client, auth_headers)
    updated = await create_session(
        client, auth_headers, id=draft["id"], title="Renamed", tags=[]
    )

    assert updated["id"] == draft["id"]
    assert updated["title"] == "Renamed"
    assert updated["status"] == "draft"
    assert updated["created_at"] == draft["created_at"]
    assert await database.sessions.count_documents({}) == 1


@pytest.mark.asyncio
async def test_save_draft_with_empty_id_creates_new(
    client: AsyncClient, auth_headers: dict, database
) -> None:
    await create_session(client, auth_headers, id="")
    assert await database.sessions.count_documents({}) == 1


@pytest.mark.asyncio
async def test_save_draft_cannot_touch_other_users_session(
    client: AsyncClient, auth_headers: dict, other_headers: dict
) -> None:
    draft = await create_session(client, auth_headers)
    response = await client.post(
        "/api/my-sessions/save-draft",
        json={
            "id": draft["id"],
            "title": "Hijacked",
            "json_file_url": "https://evil.example/x.json",
        },
        headers=other_headers,
    )
    assert response.status_code == 404

    original = await client.get(
        f"/api/my-sessions/{draft['id']}", headers=auth_headers
    )
    assert original.json()["session"]["title"] == "Morning Flow"


@pytest.mark.asyncio
async def test_save_draft_cannot_edit_published_session(
    client: AsyncClient, auth_headers: dict
) -> None:
    published = await create_session(client, auth_headers, publish=True)
    response = await client.post(
        "/api/my-sessions/save-draft",
        json={
            "id": published["id"],
            "title": "Back to draft?",
            "json_file_url": "https://cdn.example.com/morning.json",
        },
        headers=auth_headers,
    )
    assert response.status_code == 404
    assert response.json() == {"message": "Draft session not found"}


@pytest.mark.asyncio
async def test_save_draft_unknown_id(client: AsyncClient, auth_headers: dict) -> None:
    response = await client.post(
        "/api/my-sessions/save-draft",
        json={
            "id": str(ObjectId()),
            "title": "T",
            "json_file_url": "https://x.example/y.json",
        },
        headers=auth_headers,
    )
    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload, field",
    [
        ({"json_file_url": URL}, "title"),
        ({"title": "t" * 201, "json_file_url": URL}, "title"),
        ({"title": "T"}, "json_file_url"),
        ({"title": "T", "json_file_url": "not a url"}, "json_file_url"),
        ({"title": "T", "json_file_url": URL, "tags": ["t" * 51]}, "tags.0"),
        ({"title": "T", "json_file_url": URL, "tags": ["", "t" * 51]}, "tags.1"),
        ({"title": "T", "json_file_url": URL, "id": "nope"}, "id"),
        ({"title": "T", "json_file_url": URL, "tags": "yoga"}, "tags"),
    ],
)
@pytest.mark.parametrize("path", ["save-draft", "publish"])
async def test_write_validation(
    client: AsyncClient,
    auth_headers: dict,
    database,
    path: str,
    payload: dict,
    field: str,
) -> None:
    response = await client.post(
        f"/api/my-sessions/{path}", json=payload, headers=auth_headers
    )
    assert response.status_code == 400

    data = response.json()
    assert field in {error["field"] for error in data["errors"]}
    assert await database.sessions.count_documents({}) == 0


@pytest.mark.asyncio
async def test_publish_new_session(client: AsyncClient, auth_headers: dict) -> None:
    session = await create_session(client, auth_headers, publish=True)
    assert session["status"] == "published"


@pytest.mark.asyncio
async def test_publish_existing_draft_flips_status(
    client: AsyncClient, auth_headers: dict, database
) -> None:
    draft = await create_session(client, auth_headers)
    published = await create_session(
        client, auth_headers, publish=True, id=draft["id"], title="Final"
    )

    assert published["id"] == draft["id"]
    assert published["status"] == "published"
    assert published["title"] == "Final"
    assert await database.sessions.count_documents({}) == 1


@pytest.mark.asyncio
async def test_publish_already_published_session(
    client: AsyncClient, auth_headers: dict
) -> None:
    """Publish accepts an owned id whatever its current status."""
    first = await create_session(client, auth_headers, publish=True)
    again = await create_session(
        client, auth_headers, publish=True, id=first["id"], tags=["updated"]
    )
    assert again["status"] == "published"
    assert again["tags"] == ["updated"]


@pytest.mark.asyncio
async def test_publish_other_users_session(
    client: AsyncClient, auth_headers: dict, other_headers: dict
) -> None:
    draft = await create_session(client, auth_headers)
    response = await client.post(
        "/api/my-sessions/publish",
        json={
            "id": draft["id"],
            "title": "Mine now",
            "json_file_url": "https://x.example/y.json",
        },
        headers=other_headers,
    )
    assert response.status_code == 404
    assert response.json() == {"message": "Session not found"}


@pytest.mark.asyncio
async def test_get_own_session(client: AsyncClient, auth_headers: dict) -> None:
    draft = await create_session(client, auth_headers)
    response = await client.get(f"/api/my-sessions/{draft['id']}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["session"] == draft
    assert list(response.json()) == ["session"]


@pytest.mark.asyncio
async def test_get_hides_other_users_and_bad_ids(
    client: AsyncClient, auth_headers: dict, other_headers: dict
) -> None:
    draft = await create_session(client, auth_headers)

    foreign = await client.get(f"/api/my-sessions/{draft['id']}", headers=other_headers)
    malformed = await client.get("/api/my-sessions/not-an-id", headers=auth_headers)

    assert foreign.status_code == 404
    assert malformed.status_code == 404


@pytest.mark.asyncio
async def test_delete_own_session(client: AsyncClient, auth_headers: dict) -> None:
    draft = await create_session(client, auth_headers)

    response = await client.delete(
        f"/api/my-sessions/{draft['id']}", headers=auth_headers
    )
    assert response.status_code == 200
    assert response.json() == {"message": "Session deleted successfully"}

    gone = await client.get(f"/api/my-sessions/{draft['id']}", headers=auth_headers)
    assert gone.status_code == 404


@pytest.mark.asyncio
async def test_delete_other_users_session(
    client: AsyncClient, auth_headers: dict, other_headers: dict, database
) -> None:
    draft = await create_session(client, auth_headers)
    response = await client.delete(
        f"/api/my-sessions/{draft['id']}", headers=other_headers
    )
    assert response.status_code == 404
    assert await database.sessions.count_documents({}) == 1


@pytest.mark.asyncio
async def test_list_is_owner_scoped_and_filtered(
    client: AsyncClient, auth_headers: dict, other_headers: dict
) -> None:
    await create_session(client, auth_headers, title="Draft A")
    await create_session(client, auth_headers, title="Published B", publish=True)
    await create_session(client, other_headers, title="Someone else's")

    everything = await client.get("/api/my-sessions", headers=auth_headers)
    drafts = await client.get("/api/my-sessions?status=draft", headers=auth_headers)
    bogus = await client.get("/api/my-sessions?status=archived", headers=auth_headers)

    assert {s["title"] for s in everything.json()["sessions"]} == {
        "Draft A",
        "Published B",
    }
    assert [s["title"] for s in drafts.json()["sessions"]] == ["Draft A"]
    # Unknown status values are ignored
    assert bogus.json()["pagination"]["total"] == 2


@pytest.mark.asyncio
async def test_list_sorted_by_last_modified_and_paginated(
    client: AsyncClient, auth_headers: dict, database
) -> None:
    me = (await client.get("/api/auth/me", headers=auth_headers)).json()["user"]
    base = datetime(2026, 1, 1, tzinfo=timezone.utc)
    await database.sessions.insert_many(
        [
            {
                "user_id": ObjectId(me["id"]),
                "title": f"Session {i}",
                "tags": [],
                "json_file_url": "https://x.example/y.json",
                "status": "draft",
                "created_at": base,
                "updated_at": base + timedelta(minutes=i),
            }
            for i in range(5)
        ]
    )

    first = await client.get("/api/my-sessions?limit=2", headers=auth_headers)
    last = await client.get("/api/my-sessions?limit=2&page=3", headers=auth_headers)

    assert [s["title"] for s in first.json()["sessions"]] == ["Session 4", "Session 3"]
    assert first.json()["pagination"] == {"current": 1, "pages": 3, "total": 5}
    assert [s["title"] for s in last.json()["sessions"]] == ["Session 0"]


@pytest.mark.asyncio
async def test_list_rejects_bad_pagination(
    client: AsyncClient, auth_headers: dict
) -> None:
    response = await client.get("/api/my-sessions?page=0", headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "page"
