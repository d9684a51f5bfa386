"""External id registry: prefixes per entity kind."""
from schedule_engine.identifiers import EntityKind, UID_PREFIXES, generate_uid, has_prefix, uid_prefix


def test_every_kind_has_a_prefix() -> None:
    assert set(UID_PREFIXES) == set(EntityKind)


def test_generated_uid_carries_prefix() -> None:
    uid = generate_uid(EntityKind.STUDIO_ROOM)
    assert uid.startswith("srm_")
    assert has_prefix(EntityKind.STUDIO_ROOM, uid)
    assert len(uid) == len("srm_") + 20


def test_generated_uids_are_unique() -> None:
    uids = {generate_uid(EntityKind.SHOW) for _ in range(200)}
    assert len(uids) == 200


def test_known_prefixes() -> None:
    assert uid_prefix(EntityKind.SHOW_PLATFORM) == "show_plt"
    assert uid_prefix(EntityKind.SHOW_STANDARD) == "shsd"
    assert uid_prefix(EntityKind.MEMBERSHIP) == "smb"


def test_has_prefix_rejects_other_kinds_and_bare_prefix() -> None:
    assert has_prefix(EntityKind.CLIENT, "client_abc") is True
    assert has_prefix(EntityKind.CLIENT, "user_abc") is False
    assert has_prefix(EntityKind.CLIENT, "client_") is False
    assert has_prefix(EntityKind.MC, None) is False
