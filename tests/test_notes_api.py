"""Notes HTTP API: tenant isolation, ownership, quota, validation."""

import uuid

import pytest

from helpers import create_note


@pytest.mark.asyncio
async def test_requires_authentication(client, world):
    resp = await client.get("/v1/notes")
    assert resp.status_code == 401
    assert resp.json()["error"] == "missing_token"
    assert resp.headers["www-authenticate"] == "Bearer"

    resp = await client.get("/v1/notes", headers={"Authorization": "Bearer junk"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "invalid_token"


@pytest.mark.asyncio
async def test_create_and_read_back(client, world):
    headers = world.headers("acme_user")
    resp = await create_note(client, headers, "Hello", content="World", tags=["A", "a", "b"])
    assert resp.status_code == 201
    body = resp.json()
    assert body["title"] == "Hello"
    assert body["tags"] == ["a", "b"]
    assert body["status"] == "active"
    assert body["tenant_id"] == str(world.acme.id)
    assert body["user_id"] == str(world.acme_user.id)

    got = await client.get(f"/v1/notes/{body['id']}", headers=headers)
    assert got.status_code == 200
    assert got.json()["content"] == "World"


@pytest.mark.asyncio
async def test_ownership_fields_in_payload_are_ignored(client, world):
    resp = await create_note(
        client,
        world.headers("acme_user"),
        "Sneaky",
        tenant_id=str(world.globex.id),
        user_id=str(world.globex_user.id),
    )
    assert resp.status_code == 201
    assert resp.json()["tenant_id"] == str(world.acme.id)
    assert resp.json()["user_id"] == str(world.acme_user.id)


@pytest.mark.asyncio
async def test_cross_tenant_access_is_not_found(client, world):
    resp = await create_note(client, world.headers("acme_admin"), "Acme secret")
    note_id = resp.json()["id"]

    for who in ("globex_admin", "globex_user"):
        headers = world.headers(who)
        assert (await client.get(f"/v1/notes/{note_id}", headers=headers)).status_code == 404
        patched = await client.patch(f"/v1/notes/{note_id}", json={"title": "x"}, headers=headers)
        assert patched.status_code == 404
        assert (await client.delete(f"/v1/notes/{note_id}", headers=headers)).status_code == 404

    listed = await client.get("/v1/notes", headers=world.headers("globex_admin"))
    assert listed.json()["notes"] == []

    # still intact for its owner
    again = await client.get(f"/v1/notes/{note_id}", headers=world.headers("acme_admin"))
    assert again.json()["title"] == "Acme secret"


@pytest.mark.asyncio
async def test_member_cannot_see_colleagues_notes_but_admin_can(client, world):
    admin_note = (await create_note(client, world.headers("acme_admin"), "Admin's")).json()
    member_note = (await create_note(client, world.headers("acme_user"), "Member's")).json()
    member = world.headers("acme_user")
    admin = world.headers("acme_admin")

    assert (await client.get(f"/v1/notes/{admin_note['id']}", headers=member)).status_code == 404
    assert (
        await client.put(f"/v1/notes/{admin_note['id']}", json={"title": "x"}, headers=member)
    ).status_code == 404
    assert (await client.delete(f"/v1/notes/{admin_note['id']}", headers=member)).status_code == 404

    assert (await client.get(f"/v1/notes/{member_note['id']}", headers=admin)).status_code == 200
    edited = await client.patch(
        f"/v1/notes/{member_note['id']}", json={"title": "Edited by admin"}, headers=admin
    )
    assert edited.status_code == 200
    assert edited.json()["user_id"] == str(world.acme_user.id)


@pytest.mark.asyncio
async def test_list_scope_and_order(client, world):
    member = world.headers("acme_user")
    await create_note(client, member, "first")
    await create_note(client, world.headers("acme_admin"), "admin")
    await create_note(client, member, "second")

    mine = (await client.get("/v1/notes", headers=member)).json()
    assert [n["title"] for n in mine["notes"]] == ["second", "first"]
    assert mine["pagination"]["total_count"] == 2

    everything = (await client.get("/v1/notes", headers=world.headers("acme_admin"))).json()
    assert [n["title"] for n in everything["notes"]] == ["second", "admin", "first"]


@pytest.mark.asyncio
async def test_list_query_parameters(client, world):
    headers = world.headers("acme_user")
    await create_note(client, headers, "Alpha", tags=["work"])
    beta = (await create_note(client, headers, "Beta")).json()
    await client.patch(f"/v1/notes/{beta['id']}", json={"is_archived": True}, headers=headers)

    active = (await client.get("/v1/notes", headers=headers)).json()
    assert [n["title"] for n in active["notes"]] == ["Alpha"]

    archived = (await client.get("/v1/notes?archived=true", headers=headers)).json()
    assert [n["title"] for n in archived["notes"]] == ["Beta"]
    assert archived["notes"][0]["status"] == "archived"

    found = (await client.get("/v1/notes?search=WORK", headers=headers)).json()
    assert [n["title"] for n in found["notes"]] == ["Alpha"]

    paged = (await client.get("/v1/notes?limit=500", headers=headers)).json()
    assert paged["pagination"]["page_size"] == 100

    assert (await client.get("/v1/notes?page=0", headers=headers)).status_code == 422


@pytest.mark.asyncio
async def test_free_plan_quota_then_upgrade(client, world):
    member = world.headers("acme_user")
    for i in range(3):
        assert (await create_note(client, member, f"n{i}")).status_code == 201

    blocked = await create_note(client, member, "n3")
    assert blocked.status_code == 403
    body = blocked.json()
    assert body["error"] == "limit_exceeded"
    assert body["used"] == 3
    assert body["limit"] == 3
    assert body["upgrade_required"] is True

    # a member cannot lift the limit
    assert (await client.post("/v1/tenants/acme/upgrade", headers=member)).status_code == 403

    upgraded = await client.post("/v1/tenants/acme/upgrade", headers=world.headers("acme_admin"))
    assert upgraded.status_code == 200
    assert upgraded.json()["plan"] == "pro"

    assert (await create_note(client, member, "n3")).status_code == 201

    # other tenant still on free
    globex = world.headers("globex_user")
    for i in range(3):
        await create_note(client, globex, f"g{i}")
    assert (await create_note(client, globex, "g3")).status_code == 403


@pytest.mark.asyncio
async def test_deleting_frees_quota_and_second_delete_is_404(client, world):
    headers = world.headers("acme_user")
    ids = [(await create_note(client, headers, f"n{i}")).json()["id"] for i in range(3)]

    assert (await client.delete(f"/v1/notes/{ids[0]}", headers=headers)).status_code == 204
    assert (await client.delete(f"/v1/notes/{ids[0]}", headers=headers)).status_code == 404
    assert (await client.get(f"/v1/notes/{ids[0]}", headers=headers)).status_code == 404

    assert (await create_note(client, headers, "replacement")).status_code == 201


@pytest.mark.asyncio
async def test_update_keeps_unsent_fields(client, world):
    headers = world.headers("acme_user")
    note = (await create_note(client, headers, "Title", content="Body", tags=["keep"])).json()

    resp = await client.put(f"/v1/notes/{note['id']}", json={"content": "New body"}, headers=headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["title"] == "Title"
    assert body["content"] == "New body"
    assert body["tags"] == ["keep"]
    assert body["updated_at"] >= note["updated_at"]


@pytest.mark.asyncio
@pytest.mark.parametrize("payload, field", [
    ({"title": "", "content": "x"}, "title"),
    ({"title": "   ", "content": "x"}, "title"),
    ({"content": "x"}, "title"),
    ({"title": "t"}, "content"),
    ({"title": "x" * 256, "content": "x"}, "title"),
    ({"title": "t", "content": "x", "tags": "not-a-list"}, "tags"),
    ({"title": "t", "content": "x", "tags": ["y" * 51]}, "tags"),
])
async def test_create_validation(client, world, payload, field):
    resp = await client.post("/v1/notes", json=payload, headers=world.headers("acme_user"))
    assert resp.status_code == 422
    body = resp.json()
    assert body["error"] == "validation_error"
    assert any(f["field"] == field for f in body["fields"])


@pytest.mark.asyncio
async def test_malformed_note_id_and_unknown_note(client, world):
    headers = world.headers("acme_user")
    assert (await client.get("/v1/notes/not-a-uuid", headers=headers)).status_code == 422
    missing = await client.get(f"/v1/notes/{uuid.uuid4()}", headers=headers)
    assert missing.status_code == 404
    assert missing.json() == {"detail": "Note not found", "error": "not_found"}


@pytest.mark.asyncio
async def test_stats_are_admin_only(client, world):
    member = world.headers("acme_user")
    await create_note(client, member, "one")
    two = (await create_note(client, member, "two")).json()
    await client.patch(f"/v1/notes/{two['id']}", json={"is_archived": True}, headers=member)

    denied = await client.get("/v1/notes/stats", headers=member)
    assert denied.status_code == 403
    assert denied.json()["error"] == "insufficient_permissions"

    stats = (await client.get("/v1/notes/stats", headers=world.headers("acme_admin"))).json()
    assert stats == {
        "total": 2, "active": 1, "archived": 1, "limit": 3, "remaining": 1, "plan": "free",
    }
