"""
Reference lookup gateway: resolves external uids used in drafts to internal ids.

Lookups are batched per category (one query over the distinct uids), so validating or
publishing N shows costs a fixed number of queries.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Set, Union

from sqlalchemy.ext.asyncio import AsyncSession

from schedule_engine.errors import BadRequestError, NotFoundError
from schedule_engine.logging_config import get_logger
from schedule_engine.models import (
    Client,
    Mc,
    Platform,
    ShowStandard,
    ShowStatus,
    ShowType,
    Studio,
    StudioMembership,
    StudioRoom,
    User,
)
from schedule_engine.repositories import reference_repository
from schedule_engine.schemas.plan_document import ShowPlanItem

logger = get_logger(__name__)


@dataclass
class ReferenceMaps:
    """uid -> internal id per category; a uid missing from a map does not exist (or is deleted)."""

    clients: Dict[str, int] = field(default_factory=dict)
    studio_rooms: Dict[str, int] = field(default_factory=dict)
    show_types: Dict[str, int] = field(default_factory=dict)
    show_statuses: Dict[str, int] = field(default_factory=dict)
    show_standards: Dict[str, int] = field(default_factory=dict)
    mcs: Dict[str, int] = field(default_factory=dict)
    platforms: Dict[str, int] = field(default_factory=dict)


def collect_reference_uids(shows: Iterable[ShowPlanItem]) -> Dict[str, Set[str]]:
    uids: Dict[str, Set[str]] = {
        "clients": set(),
        "studio_rooms": set(),
        "show_types": set(),
        "show_statuses": set(),
        "show_standards": set(),
        "mcs": set(),
        "platforms": set(),
    }
    for show in shows:
        uids["clients"].add(show.client_uid)
        if show.studio_room_uid:
            uids["studio_rooms"].add(show.studio_room_uid)
        uids["show_types"].add(show.show_type_uid)
        uids["show_statuses"].add(show.show_status_uid)
        uids["show_standards"].add(show.show_standard_uid)
        uids["mcs"].update(mc.mc_uid for mc in show.mcs)
        uids["platforms"].update(p.platform_uid for p in show.platforms)
    return uids


_CATEGORY_MODELS = (
    ("clients", Client),
    ("studio_rooms", StudioRoom),
    ("show_types", ShowType),
    ("show_statuses", ShowStatus),
    ("show_standards", ShowStandard),
    ("mcs", Mc),
    ("platforms", Platform),
)


async def build_reference_maps(db: AsyncSession, shows: Iterable[ShowPlanItem]) -> ReferenceMaps:
    """One lookup per category. Queries run one after another on the single session."""
    uids = collect_reference_uids(shows)
    maps = ReferenceMaps()
    for category, model in _CATEGORY_MODELS:
        setattr(maps, category, await reference_repository.find_ids_by_uids(db, model, uids[category]))
    logger.debug(
        "references.resolved",
        **{category: len(getattr(maps, category)) for category, _ in _CATEGORY_MODELS},
    )
    return maps


async def resolve_user(db: AsyncSession, user_uid: str) -> User:
    user = await reference_repository.find_by_uid(db, User, user_uid)
    if user is None:
        raise NotFoundError("User", user_uid)
    return user


async def resolve_client(db: AsyncSession, client_uid: str) -> Client:
    client = await reference_repository.find_by_uid(db, Client, client_uid)
    if client is None:
        raise NotFoundError("Client", client_uid)
    return client


class GroupType(str, Enum):
    CLIENT = "client"
    PLATFORM = "platform"
    STUDIO = "studio"


@dataclass(frozen=True)
class GroupRef:
    """Which entity a membership belongs to: exactly one of client, platform or studio."""

    group_type: GroupType
    group_id: int


Group = Union[Client, Platform, Studio]

_GROUP_MODELS = {
    GroupType.CLIENT: Client,
    GroupType.PLATFORM: Platform,
    GroupType.STUDIO: Studio,
}


def group_ref_for(membership: StudioMembership) -> GroupRef:
    try:
        group_type = GroupType(membership.group_type)
    except ValueError:
        raise BadRequestError(
            f"Unknown membership group type '{membership.group_type}'",
            code="invalid_group_type",
        ) from None
    return GroupRef(group_type=group_type, group_id=membership.group_id)


async def resolve_group(db: AsyncSession, ref: GroupRef) -> Group:
    model = _GROUP_MODELS[ref.group_type]
    entity = await reference_repository.find_by_id(db, model, ref.group_id)
    if entity is None:
        raise NotFoundError(model.__name__, ref.group_id)
    return entity
