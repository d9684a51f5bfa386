"""Snapshots and restore."""
import pytest

from schedule_engine.errors import BadRequestError, NotFoundError
from schedule_engine.services.snapshot_service import (
    create_manual_snapshot,
    get_snapshot,
    get_snapshots_by_schedule,
    restore_from_snapshot,
)

from factories import make_show


@pytest.mark.asyncio
async def test_manual_snapshot_copies_current_state(store, db) -> None:
    schedule = store.add_schedule(uid="schedule_s", version=4, shows=[make_show()])
    snapshot = await create_manual_snapshot(db, "schedule_s", reason="before big edit", actor_uid="user_planner")

    assert snapshot.uid.startswith("snapshot_")
    assert snapshot.snapshot_reason == "before big edit"
    assert snapshot.version == 4
    assert snapshot.status == "draft"
    assert snapshot.created_by == store.user.id
    assert snapshot.plan_document == schedule.plan_document
    assert snapshot.plan_document is not schedule.plan_document


@pytest.mark.asyncio
async def test_blank_reason_defaults_to_manual(store, db) -> None:
    store.add_schedule(uid="schedule_s")
    snapshot = await create_manual_snapshot(db, "schedule_s", reason="  ", actor_uid="user_planner")
    assert snapshot.snapshot_reason == "manual"


@pytest.mark.asyncio
async def test_restore_snapshots_current_state_then_replaces_plan(store, db) -> None:
    schedule = store.add_schedule(uid="schedule_s", shows=[make_show(name="Old")])
    snapshot = await create_manual_snapshot(db, "schedule_s", reason=None, actor_uid="user_planner")
    schedule.plan_document = {"metadata": {}, "shows": [make_show(name="New")]}
    schedule.version = 2

    restored = await restore_from_snapshot(db, snapshot.uid, actor_uid="user_planner")

    assert restored is schedule
    assert restored.version == 3
    assert [s["name"] for s in restored.plan_document["shows"]] == ["Old"]
    before_restore = store.snapshots[-1]
    assert before_restore.snapshot_reason == "before_restore"
    assert before_restore.version == 2
    assert [s["name"] for s in before_restore.plan_document["shows"]] == ["New"]
    assert db.savepoints == 1


@pytest.mark.asyncio
async def test_restore_of_published_schedule_is_rejected(store, db) -> None:
    schedule = store.add_schedule(uid="schedule_s")
    snapshot = await create_manual_snapshot(db, "schedule_s", reason=None, actor_uid="user_planner")
    schedule.status = "published"

    with pytest.raises(BadRequestError) as exc_info:
        await restore_from_snapshot(db, snapshot.uid, actor_uid="user_planner")

    assert exc_info.value.code == "schedule_published"
    assert len(store.snapshots) == 1
    assert schedule.version == 1


@pytest.mark.asyncio
async def test_restore_unknown_snapshot(store, db) -> None:
    with pytest.raises(NotFoundError) as exc_info:
        await restore_from_snapshot(db, "snapshot_missing", actor_uid="user_planner")
    assert exc_info.value.resource == "ScheduleSnapshot"


@pytest.mark.asyncio
async def test_restore_when_schedule_is_gone(store, db) -> None:
    schedule = store.add_schedule(uid="schedule_s")
    snapshot = await create_manual_snapshot(db, "schedule_s", reason=None, actor_uid="user_planner")
    schedule.deleted_at = store.tick()
    with pytest.raises(NotFoundError) as exc_info:
        await restore_from_snapshot(db, snapshot.uid, actor_uid="user_planner")
    assert exc_info.value.resource == "Schedule"


@pytest.mark.asyncio
async def test_list_snapshots_newest_first_with_limit(store, db) -> None:
    store.add_schedule(uid="schedule_s")
    for reason in ("one", "two", "three"):
        await create_manual_snapshot(db, "schedule_s", reason=reason, actor_uid="user_planner")

    newest = await get_snapshots_by_schedule(db, "schedule_s", limit=2)
    assert [s.snapshot_reason for s in newest] == ["three", "two"]
    oldest = await get_snapshots_by_schedule(db, "schedule_s", order="asc")
    assert [s.snapshot_reason for s in oldest] == ["one", "two", "three"]


@pytest.mark.asyncio
async def test_get_snapshot(store, db) -> None:
    store.add_schedule(uid="schedule_s")
    created = await create_manual_snapshot(db, "schedule_s", reason=None, actor_uid="user_planner")
    assert (await get_snapshot(db, created.uid)) is created
    with pytest.raises(NotFoundError):
        await get_snapshot(db, "snapshot_missing")
