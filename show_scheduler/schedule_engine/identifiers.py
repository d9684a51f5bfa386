"""External identifier registry: one prefix per entity kind."""
import secrets
import string
from enum import Enum

_ALPHABET = string.ascii_lowercase + string.digits
_RANDOM_LENGTH = 20


class EntityKind(str, Enum):
    SCHEDULE = "schedule"
    SNAPSHOT = "snapshot"
    SHOW = "show"
    SHOW_MC = "show_mc"
    SHOW_PLATFORM = "show_platform"
    CLIENT = "client"
    STUDIO = "studio"
    STUDIO_ROOM = "studio_room"
    SHOW_TYPE = "show_type"
    SHOW_STATUS = "show_status"
    SHOW_STANDARD = "show_standard"
    MC = "mc"
    PLATFORM = "platform"
    USER = "user"
    MEMBERSHIP = "membership"


UID_PREFIXES: dict[EntityKind, str] = {
    EntityKind.SCHEDULE: "schedule",
    EntityKind.SNAPSHOT: "snapshot",
    EntityKind.SHOW: "show",
    EntityKind.SHOW_MC: "show_mc",
    EntityKind.SHOW_PLATFORM: "show_plt",
    EntityKind.CLIENT: "client",
    EntityKind.STUDIO: "std",
    EntityKind.STUDIO_ROOM: "srm",
    EntityKind.SHOW_TYPE: "sht",
    EntityKind.SHOW_STATUS: "shst",
    EntityKind.SHOW_STANDARD: "shsd",
    EntityKind.MC: "mc",
    EntityKind.PLATFORM: "plt",
    EntityKind.USER: "user",
    EntityKind.MEMBERSHIP: "smb",
}


def uid_prefix(kind: EntityKind) -> str:
    return UID_PREFIXES[kind]


def generate_uid(kind: EntityKind) -> str:
    """`<prefix>_<20 lowercase alphanumerics>`, e.g. `schedule_k3v9...`."""
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(_RANDOM_LENGTH))
    return f"{UID_PREFIXES[kind]}_{suffix}"


def has_prefix(kind: EntityKind, value: str) -> bool:
    """True when `value` is a well-formed external id for `kind`."""
    prefix = UID_PREFIXES[kind] + "_"
    return isinstance(value, str) and value.startswith(prefix) and len(value) > len(prefix)
