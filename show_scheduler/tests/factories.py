"""Test data: uids seeded by the store fixture and a draft show builder."""
from datetime import datetime, timezone
from typing import Any, Dict

UTC = timezone.utc
SCHEDULE_START = datetime(2025, 1, 1, tzinfo=UTC)
SCHEDULE_END = datetime(2025, 1, 31, 23, 59, tzinfo=UTC)

CLIENT_UID = "client_acme"
OTHER_CLIENT_UID = "client_globex"
USER_UID = "user_planner"
ROOM_UID = "srm_room_a"
OTHER_ROOM_UID = "srm_room_b"
SHOW_TYPE_UID = "sht_live"
SHOW_STATUS_UID = "shst_confirmed"
SHOW_STANDARD_UID = "shsd_standard"
MC_UID = "mc_anna"
OTHER_MC_UID = "mc_ben"
PLATFORM_UID = "plt_tiktok"


def at(day: int, hour: int, minute: int = 0) -> datetime:
    return datetime(2025, 1, day, hour, minute, tzinfo=UTC)


def make_show(**overrides: Any) -> Dict[str, Any]:
    """A valid camelCase draft item on 2025-01-10 10:00-12:00 in room A."""
    show = {
        "tempId": "temp_1",
        "name": "Morning Live",
        "startTime": at(10, 10).isoformat(),
        "endTime": at(10, 12).isoformat(),
        "clientUid": CLIENT_UID,
        "studioRoomUid": ROOM_UID,
        "showTypeUid": SHOW_TYPE_UID,
        "showStatusUid": SHOW_STATUS_UID,
        "showStandardUid": SHOW_STANDARD_UID,
        "mcs": [],
        "platforms": [],
        "metadata": {},
    }
    show.update(overrides)
    return show
