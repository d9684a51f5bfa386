"""HTTP surface: status mapping, camelCase validation output, bulk shape, correlation id."""
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from schedule_engine.db import get_db
from schedule_engine.main import app
from schedule_engine.schemas.plan_document import UploadProgress

from factories import CLIENT_UID, SCHEDULE_END, SCHEDULE_START, USER_UID, at, make_show


@pytest_asyncio.fixture
async def client(store, db):
    async def _db():
        yield db

    app.dependency_overrides[get_db] = _db
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
            yield c
    finally:
        app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_health_echoes_correlation_id(client) -> None:
    r = await client.get("/health", headers={"X-Correlation-ID": "req-42"})
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}
    assert r.headers["X-Correlation-ID"] == "req-42"


@pytest.mark.asyncio
async def test_correlation_id_generated_when_missing(client) -> None:
    r = await client.get("/")
    assert r.json()["name"] == "show_scheduler"
    assert r.headers["X-Correlation-ID"]


@pytest.mark.asyncio
async def test_create_and_get_schedule(client, store) -> None:
    r = await client.post(
        "/api/schedules",
        json={
            "name": "January",
            "start_date": SCHEDULE_START.isoformat(),
            "end_date": SCHEDULE_END.isoformat(),
            "client_id": CLIENT_UID,
            "created_by": USER_UID,
        },
    )
    assert r.status_code == 201
    body = r.json()
    assert body["id"].startswith("schedule_")
    assert body["client_id"] == CLIENT_UID
    assert body["client_name"] == "Acme"
    assert body["version"] == 1

    r = await client.get(f"/api/schedules/{body['id']}")
    assert r.status_code == 200
    assert r.json()["name"] == "January"


@pytest.mark.asyncio
async def test_unknown_schedule_is_404(client) -> None:
    r = await client.get("/api/schedules/schedule_nope")
    assert r.status_code == 404
    assert r.json()["detail"]["code"] == "not_found"


@pytest.mark.asyncio
async def test_validate_reports_problems_in_camel_case(client, store) -> None:
    store.add_schedule(
        uid="schedule_v",
        shows=[
            make_show(tempId="temp_a"),
            make_show(tempId="temp_b", startTime=at(10, 11).isoformat(), endTime=at(10, 13).isoformat()),
        ],
    )
    r = await client.post("/api/schedules/schedule_v/validate")
    assert r.status_code == 200
    body = r.json()
    assert body["isValid"] is False
    conflict = next(e for e in body["errors"] if e["type"] == "internal_conflict")
    assert conflict["showIndex"] == 0
    assert conflict["showTempId"] == "temp_a"


@pytest.mark.asyncio
async def test_publish_with_stale_version_is_409(client, store) -> None:
    store.add_schedule(uid="schedule_p", version=3, shows=[make_show()])
    r = await client.post("/api/schedules/schedule_p/publish", json={"version": 2, "actor_id": USER_UID})
    assert r.status_code == 409
    detail = r.json()["detail"]
    assert detail["code"] == "version_mismatch"
    assert detail["details"] == {"expected_version": 2, "current_version": 3}
    assert store.shows == []


@pytest.mark.asyncio
async def test_publish_returns_counts(client, store) -> None:
    store.add_schedule(uid="schedule_p", shows=[make_show()])
    r = await client.post("/api/schedules/schedule_p/publish", json={"version": 1, "actor_id": USER_UID})
    assert r.status_code == 200
    body = r.json()
    assert (body["shows_created"], body["shows_deleted"]) == (1, 0)
    assert body["schedule"]["status"] == "published"
    assert body["schedule"]["version"] == 2


@pytest.mark.asyncio
async def test_publish_invalid_plan_is_400_with_errors(client, store) -> None:
    store.add_schedule(uid="schedule_p", shows=[make_show(studioRoomUid="srm_missing")])
    r = await client.post("/api/schedules/schedule_p/publish", json={"version": 1, "actor_id": USER_UID})
    assert r.status_code == 400
    detail = r.json()["detail"]
    assert detail["code"] == "validation_failed"
    assert detail["details"]["errors"][0]["type"] == "reference_not_found"


@pytest.mark.asyncio
async def test_append_out_of_order_chunk_is_409(client, store) -> None:
    store.add_schedule(
        uid="schedule_u",
        plan_document={"metadata": {"uploadProgress": UploadProgress.start(3).to_document()}, "shows": []},
    )
    r = await client.post(
        "/api/schedules/schedule_u/shows/append",
        json={"shows": [make_show()], "chunk_index": 2, "version": 1},
    )
    assert r.status_code == 409
    detail = r.json()["detail"]
    assert detail["code"] == "chunk_out_of_order"
    assert detail["message"] == "Expected chunk 1, but received chunk 2"


@pytest.mark.asyncio
async def test_append_rejects_bad_reference_prefix(client, store) -> None:
    store.add_schedule(
        uid="schedule_u",
        plan_document={"metadata": {"uploadProgress": UploadProgress.start(1).to_document()}, "shows": []},
    )
    r = await client.post(
        "/api/schedules/schedule_u/shows/append",
        json={"shows": [make_show(studioRoomUid="room_a")], "chunk_index": 1, "version": 1},
    )
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_bulk_create_omits_successful_schedules_when_all_fail(client, store) -> None:
    item = {
        "name": "January",
        "start_date": SCHEDULE_START.isoformat(),
        "end_date": SCHEDULE_END.isoformat(),
        "client_id": "client_missing",
        "created_by": USER_UID,
    }
    r = await client.post("/api/schedules/bulk", json={"schedules": [item]})
    assert r.status_code == 200
    body = r.json()
    assert (body["total"], body["successful"], body["failed"]) == (1, 0, 1)
    assert "successful_schedules" not in body
    assert body["results"][0]["error_code"] == "NOT_FOUND"

    item["client_id"] = CLIENT_UID
    r = await client.post("/api/schedules/bulk", json={"schedules": [item]})
    assert len(r.json()["successful_schedules"]) == 1


@pytest.mark.asyncio
async def test_published_schedule_cannot_be_edited(client, store) -> None:
    store.add_schedule(uid="schedule_p", status="published", version=2)
    r = await client.patch("/api/schedules/schedule_p", json={"name": "Renamed"})
    assert r.status_code == 400
    assert r.json()["detail"]["code"] == "schedule_published"


@pytest.mark.asyncio
async def test_snapshot_then_restore(client, store) -> None:
    store.add_schedule(uid="schedule_s", shows=[make_show(name="Kept")])
    r = await client.post("/api/schedules/schedule_s/snapshots", json={"actor_id": USER_UID})
    assert r.status_code == 201
    snapshot_uid = r.json()["id"]
    assert r.json()["snapshot_reason"] == "manual"

    r = await client.post(f"/api/snapshots/{snapshot_uid}/restore", json={"actor_id": USER_UID})
    assert r.status_code == 200
    assert r.json()["version"] == 2

    r = await client.get("/api/schedules/schedule_s/snapshots")
    reasons = [s["snapshot_reason"] for s in r.json()["snapshots"]]
    assert reasons == ["before_restore", "manual"]


@pytest.mark.asyncio
async def test_error_responses_documented_in_openapi(client) -> None:
    r = await client.get("/openapi.json")
    paths = r.json()["paths"]
    publish = paths["/api/schedules/{schedule_uid}/publish"]["post"]["responses"]
    for code in ("400", "404", "409"):
        schema = publish[code]["content"]["application/json"]["schema"]
        assert schema == {"$ref": "#/components/schemas/ErrorResponse"}
    restore = paths["/api/snapshots/{snapshot_uid}/restore"]["post"]["responses"]
    assert restore["404"]["content"]["application/json"]["schema"] == {"$ref": "#/components/schemas/ErrorResponse"}


@pytest.mark.asyncio
async def test_naive_dates_are_read_as_utc(client, store) -> None:
    store.add_schedule(uid="schedule_jan")
    r = await client.get(
        "/api/schedules/overview/monthly",
        params={"start_date": "2025-01-01T00:00:00", "end_date": "2025-01-31T00:00:00"},
    )
    assert r.status_code == 200, r.text
    assert r.json()["total_schedules"] == 1

    r = await client.patch("/api/schedules/schedule_jan", json={"start_date": "2025-01-02T00:00:00", "version": 1})
    assert r.status_code == 200, r.text
    assert store.schedules["schedule_jan"].start_date.tzinfo is not None
