"""
Shared fixtures: an in-memory store patched over the repository functions, so service
and router tests run without PostgreSQL.
"""
import copy
from contextlib import ExitStack, asynccontextmanager
from datetime import datetime, timedelta
from itertools import count
from types import SimpleNamespace
from typing import Any, Dict, List, Optional
from unittest.mock import patch

import pytest

from schedule_engine.models import (
    Client,
    Mc,
    Platform,
    Schedule,
    ScheduleSnapshot,
    ShowStandard,
    ShowStatus,
    ShowType,
    Studio,
    StudioRoom,
    User,
)
from schedule_engine.repositories import (
    reference_repository,
    schedule_repository,
    show_repository,
    snapshot_repository,
)
from schedule_engine.utils.time_ranges import overlaps

from factories import (
    CLIENT_UID,
    MC_UID,
    OTHER_CLIENT_UID,
    OTHER_MC_UID,
    OTHER_ROOM_UID,
    PLATFORM_UID,
    ROOM_UID,
    SCHEDULE_END,
    SCHEDULE_START,
    SHOW_STANDARD_UID,
    SHOW_STATUS_UID,
    SHOW_TYPE_UID,
    USER_UID,
    UTC,
)


_SCHEDULE_FIELDS = (
    "name",
    "start_date",
    "end_date",
    "status",
    "version",
    "plan_document",
    "metadata_",
    "published_at",
    "published_by",
    "updated_at",
    "deleted_at",
)


class FakeSession:
    """
    Stands in for AsyncSession; only begin_nested is used by the services. Like a
    SAVEPOINT, a block that raises leaves the store as it was when the block began.
    """

    def __init__(self, store: "FakeStore") -> None:
        self.store = store
        self.savepoints = 0
        self.rollbacks = 0

    @asynccontextmanager
    async def begin_nested(self):
        self.savepoints += 1
        state = self.store.checkpoint()
        try:
            yield self
        except BaseException:
            self.rollbacks += 1
            self.store.restore(state)
            raise


class FakeStore:
    """
    In-memory rows behind the repository API. Reference entities are real (transient)
    model instances so services see the same attributes they would from the database.
    """

    def __init__(self) -> None:
        self._ids = count(1)
        self.references: Dict[type, Dict[str, Any]] = {}
        self.schedules: Dict[str, Schedule] = {}
        self.snapshots: List[ScheduleSnapshot] = []
        self.shows: List[Dict[str, Any]] = []
        self.show_mcs: List[Dict[str, Any]] = []
        self.show_platforms: List[Dict[str, Any]] = []
        self.published_shows: List[SimpleNamespace] = []
        self._clock = datetime(2025, 1, 1, tzinfo=UTC)

    def checkpoint(self) -> Dict[str, Any]:
        return {
            "schedules": {
                uid: (schedule, {f: copy.deepcopy(getattr(schedule, f)) for f in _SCHEDULE_FIELDS})
                for uid, schedule in self.schedules.items()
            },
            "snapshots": list(self.snapshots),
            "shows": copy.deepcopy(self.shows),
            "show_mcs": copy.deepcopy(self.show_mcs),
            "show_platforms": copy.deepcopy(self.show_platforms),
        }

    def restore(self, state: Dict[str, Any]) -> None:
        self.schedules = {}
        for uid, (schedule, values) in state["schedules"].items():
            for f, value in values.items():
                setattr(schedule, f, value)
            self.schedules[uid] = schedule
        self.snapshots = state["snapshots"]
        self.shows = state["shows"]
        self.show_mcs = state["show_mcs"]
        self.show_platforms = state["show_platforms"]

    def next_id(self) -> int:
        return next(self._ids)

    def tick(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    # seeding

    def add_reference(self, model: type, uid: str, **fields: Any) -> Any:
        entity = model(id=self.next_id(), uid=uid, **fields)
        self.references.setdefault(model, {})[uid] = entity
        return entity

    def seed_references(self) -> None:
        self.client = self.add_reference(Client, CLIENT_UID, name="Acme")
        self.other_client = self.add_reference(Client, OTHER_CLIENT_UID, name="Globex")
        self.user = self.add_reference(User, USER_UID, name="Planner", email="planner@example.com")
        studio = self.add_reference(Studio, "std_main", name="Main Studio")
        self.add_reference(StudioRoom, ROOM_UID, name="Room A", studio_id=studio.id)
        self.add_reference(StudioRoom, OTHER_ROOM_UID, name="Room B", studio_id=studio.id)
        self.add_reference(ShowType, SHOW_TYPE_UID, name="Live")
        self.add_reference(ShowStatus, SHOW_STATUS_UID, name="Confirmed")
        self.add_reference(ShowStandard, SHOW_STANDARD_UID, name="Standard")
        self.add_reference(Mc, MC_UID, name="Anna")
        self.add_reference(Mc, OTHER_MC_UID, name="Ben")
        self.add_reference(Platform, PLATFORM_UID, name="TikTok")

    def reference_id(self, model: type, uid: str) -> int:
        return self.references[model][uid].id

    def add_schedule(
        self,
        shows: Optional[List[Dict[str, Any]]] = None,
        status: str = "draft",
        version: int = 1,
        plan_document: Optional[Dict[str, Any]] = None,
        uid: Optional[str] = None,
        **fields: Any,
    ) -> Schedule:
        if plan_document is None:
            plan_document = {"metadata": {}, "shows": shows if shows is not None else []}
        schedule = Schedule(
            id=self.next_id(),
            uid=uid or f"schedule_test{len(self.schedules) + 1}",
            name=fields.pop("name", "January"),
            start_date=fields.pop("start_date", SCHEDULE_START),
            end_date=fields.pop("end_date", SCHEDULE_END),
            status=status,
            version=version,
            plan_document=plan_document,
            metadata_={},
            client_id=self.client.id,
            created_by=self.user.id,
            **fields,
        )
        schedule.client = self.client
        schedule.created_by_user = self.user
        schedule.created_at = self.tick()
        schedule.updated_at = schedule.created_at
        self.schedules[schedule.uid] = schedule
        return schedule

    def add_published_show(self, uid: str, name: str, start: datetime, end: datetime, **fields: Any) -> SimpleNamespace:
        show = SimpleNamespace(
            id=self.next_id(),
            uid=uid,
            name=name,
            start_time=start,
            end_time=end,
            studio_room_id=fields.get("studio_room_id"),
            mc_ids=set(fields.get("mc_ids", ())),
            schedule_id=fields.get("schedule_id"),
            deleted_at=None,
        )
        self.published_shows.append(show)
        return show

    def active_shows(self, schedule_id: int) -> List[Dict[str, Any]]:
        return [s for s in self.shows if s["schedule_id"] == schedule_id and s["deleted_at"] is None]

    # reference_repository

    async def find_ids_by_uids(self, db, model, uids) -> Dict[str, int]:
        rows = self.references.get(model, {})
        return {uid: rows[uid].id for uid in set(uids) if uid in rows and rows[uid].deleted_at is None}

    async def find_reference_by_uid(self, db, model, uid):
        entity = self.references.get(model, {}).get(uid)
        return entity if entity is not None and entity.deleted_at is None else None

    async def find_reference_by_id(self, db, model, id_):
        for entity in self.references.get(model, {}).values():
            if entity.id == id_ and entity.deleted_at is None:
                return entity
        return None

    # schedule_repository

    async def find_schedule_by_uid(self, db, uid, include_deleted=False):
        schedule = self.schedules.get(uid)
        if schedule is None or (schedule.deleted_at is not None and not include_deleted):
            return None
        return schedule

    async def find_schedule_by_id(self, db, schedule_id):
        for schedule in self.schedules.values():
            if schedule.id == schedule_id and schedule.deleted_at is None:
                return schedule
        return None

    async def get_version(self, db, schedule_id):
        for schedule in self.schedules.values():
            if schedule.id == schedule_id:
                return schedule.version
        return None

    async def create_schedule(self, db, schedule):
        schedule.id = self.next_id()
        schedule.created_at = self.tick()
        schedule.updated_at = schedule.created_at
        self.schedules[schedule.uid] = schedule
        return schedule

    async def compare_and_set(self, db, schedule, expected_version, values):
        stored = self.schedules[schedule.uid]
        if stored.version != expected_version:
            return False
        for key, value in values.items():
            setattr(schedule, key, value)
        schedule.updated_at = self.tick()
        return True

    async def soft_delete_schedule(self, db, schedule):
        schedule.deleted_at = self.tick()
        return schedule

    def _filtered(self, client_uids=None, status=None, include_deleted=False):
        result = []
        for schedule in self.schedules.values():
            if schedule.deleted_at is not None and not include_deleted:
                continue
            if client_uids and (schedule.client is None or schedule.client.uid not in client_uids):
                continue
            if status and schedule.status != status:
                continue
            result.append(schedule)
        return result

    async def find_many(self, db, filters, skip=0, take=50, order_by="created_at", order_direction="desc"):
        rows = self._filtered(filters.client_uids, filters.status, filters.include_deleted)
        rows.sort(key=lambda s: getattr(s, order_by), reverse=order_direction == "desc")
        return rows[skip:skip + take]

    async def count(self, db, filters):
        return len(self._filtered(filters.client_uids, filters.status, filters.include_deleted))

    async def find_in_range(self, db, start, end, client_uids=None, status=None, include_deleted=False):
        rows = [
            s
            for s in self._filtered(client_uids, status, include_deleted)
            if s.start_date <= end and s.end_date >= start
        ]
        return sorted(rows, key=lambda s: s.start_date)

    # snapshot_repository

    async def create_snapshot(self, db, snapshot):
        snapshot.id = self.next_id()
        snapshot.created_at = self.tick()
        self.snapshots.append(snapshot)
        return snapshot

    async def find_snapshot_by_uid(self, db, uid):
        return next((s for s in self.snapshots if s.uid == uid), None)

    async def find_snapshots_by_schedule(self, db, schedule_id, limit=None, order="desc"):
        rows = sorted(
            (s for s in self.snapshots if s.schedule_id == schedule_id),
            key=lambda s: (s.created_at, s.id),
            reverse=order != "asc",
        )
        return rows[:limit] if limit is not None else rows

    # show_repository

    async def soft_delete_by_schedule(self, db, schedule_id):
        now = self.tick()
        deleted = self.active_shows(schedule_id)
        ids = {s["id"] for s in deleted}
        for row in deleted:
            row["deleted_at"] = now
        for row in self.show_mcs + self.show_platforms:
            if row["show_id"] in ids and row.get("deleted_at") is None:
                row["deleted_at"] = now
        return len(deleted)

    async def bulk_insert_shows(self, db, rows):
        for row in rows:
            self.shows.append({**copy.deepcopy(row), "id": self.next_id(), "deleted_at": None})

    async def find_show_ids_by_uids(self, db, uids):
        wanted = set(uids)
        return {s["uid"]: s["id"] for s in self.shows if s["uid"] in wanted}

    async def bulk_insert_show_mcs(self, db, rows):
        self.show_mcs.extend({**row, "id": self.next_id(), "deleted_at": None} for row in rows)

    async def bulk_insert_show_platforms(self, db, rows):
        self.show_platforms.extend({**row, "id": self.next_id(), "deleted_at": None} for row in rows)

    def _overlapping(self, start, end, exclude_schedule_id, exclude_show_uid, match):
        return [
            s
            for s in self.published_shows
            if s.deleted_at is None
            and match(s)
            and overlaps(s.start_time, s.end_time, start, end)
            and (exclude_schedule_id is None or s.schedule_id != exclude_schedule_id)
            and (not exclude_show_uid or s.uid != exclude_show_uid)
        ]

    async def find_overlapping_in_room(self, db, studio_room_id, start, end, exclude_schedule_id=None, exclude_show_uid=None):
        return self._overlapping(
            start, end, exclude_schedule_id, exclude_show_uid, lambda s: s.studio_room_id == studio_room_id
        )

    async def find_overlapping_for_mc(self, db, mc_id, start, end, exclude_schedule_id=None, exclude_show_uid=None):
        return self._overlapping(
            start, end, exclude_schedule_id, exclude_show_uid, lambda s: mc_id in s.mc_ids
        )

    def patches(self) -> List[Any]:
        return [
            patch.object(reference_repository, "find_ids_by_uids", self.find_ids_by_uids),
            patch.object(reference_repository, "find_by_uid", self.find_reference_by_uid),
            patch.object(reference_repository, "find_by_id", self.find_reference_by_id),
            patch.object(schedule_repository, "find_by_uid", self.find_schedule_by_uid),
            patch.object(schedule_repository, "find_by_id", self.find_schedule_by_id),
            patch.object(schedule_repository, "get_version", self.get_version),
            patch.object(schedule_repository, "create", self.create_schedule),
            patch.object(schedule_repository, "compare_and_set", self.compare_and_set),
            patch.object(schedule_repository, "soft_delete", self.soft_delete_schedule),
            patch.object(schedule_repository, "find_many", self.find_many),
            patch.object(schedule_repository, "count", self.count),
            patch.object(schedule_repository, "find_in_range", self.find_in_range),
            patch.object(snapshot_repository, "create", self.create_snapshot),
            patch.object(snapshot_repository, "find_by_uid", self.find_snapshot_by_uid),
            patch.object(snapshot_repository, "find_by_schedule", self.find_snapshots_by_schedule),
            patch.object(show_repository, "soft_delete_by_schedule", self.soft_delete_by_schedule),
            patch.object(show_repository, "bulk_insert_shows", self.bulk_insert_shows),
            patch.object(show_repository, "find_ids_by_uids", self.find_show_ids_by_uids),
            patch.object(show_repository, "bulk_insert_show_mcs", self.bulk_insert_show_mcs),
            patch.object(show_repository, "bulk_insert_show_platforms", self.bulk_insert_show_platforms),
            patch.object(show_repository, "find_overlapping_in_room", self.find_overlapping_in_room),
            patch.object(show_repository, "find_overlapping_for_mc", self.find_overlapping_for_mc),
        ]


@pytest.fixture
def store():
    fake = FakeStore()
    fake.seed_references()
    with ExitStack() as stack:
        for p in fake.patches():
            stack.enter_context(p)
        yield fake


@pytest.fixture
def db(store) -> FakeSession:
    return FakeSession(store)
