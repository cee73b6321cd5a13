"""测试会话注册表与主控端查找规则"""

import pytest

from relay_hub.exceptions import UnknownSessionError
from relay_hub.hub import Session, SessionRegistry
from relay_hub.protocol import Role


def make_master(registry: SessionRegistry, session_id: str) -> Session:
    session = Session(id=session_id, role=Role.MASTER)
    registry.put(session)
    registry.record_master_declaration(session_id)
    return session


def test_put_is_keyed_by_id():
    registry = SessionRegistry()
    registry.put(Session(id="a"))
    registry.put(Session(id="a", device_name="tablet"))

    assert len(registry) == 1
    assert registry.get("a").device_name == "tablet"


def test_remove_and_get():
    registry = SessionRegistry()
    registry.put(Session(id="a"))

    assert registry.remove("a").id == "a"
    assert registry.remove("a") is None
    assert registry.get("a") is None
    assert "a" not in registry


def test_require_unknown_session():
    with pytest.raises(UnknownSessionError) as excinfo:
        SessionRegistry().require("ghost")
    assert excinfo.value.session_id == "ghost"
    assert excinfo.value.error_code == "SESSION002"


def test_all_except():
    registry = SessionRegistry()
    for session_id in ("a", "b", "c"):
        registry.put(Session(id=session_id))

    assert sorted(s.id for s in registry.all()) == ["a", "b", "c"]
    assert sorted(s.id for s in registry.all_except("b")) == ["a", "c"]
    assert len(registry.all_except("missing")) == 3


def test_find_master_none():
    registry = SessionRegistry()
    registry.put(Session(id="a", role=Role.CLIENT))
    assert registry.find_master() is None


def test_find_master_ignores_role_without_declaration():
    registry = SessionRegistry()
    registry.put(Session(id="a", role=Role.MASTER))
    assert registry.find_master() is None


def test_most_recent_master_declaration_wins():
    registry = SessionRegistry()
    make_master(registry, "m1")
    make_master(registry, "m2")

    assert registry.find_master().id == "m2"
    assert registry.is_current_master("m2")
    assert not registry.is_current_master("m1")
    # 被取代的主控端仍保留 MASTER 角色字段
    assert registry.get("m1").role is Role.MASTER
    assert [d.session_id for d in registry.master_history()] == ["m1", "m2"]


def test_superseded_master_is_not_restored():
    registry = SessionRegistry()
    make_master(registry, "m1")
    make_master(registry, "m2")

    registry.remove("m2")

    assert registry.find_master() is None


def test_redeclared_master_becomes_current_again():
    registry = SessionRegistry()
    make_master(registry, "m1")
    make_master(registry, "m2")
    registry.record_master_declaration("m1")

    assert registry.find_master().id == "m1"
    sequences = [d.sequence for d in registry.master_history()]
    assert sequences == sorted(sequences)


def test_stats():
    registry = SessionRegistry()
    make_master(registry, "m1")
    registry.put(Session(id="c1", role=Role.CLIENT))
    registry.put(Session(id="u1"))

    stats = registry.stats()
    assert stats["total"] == 3
    assert stats["masters"] == 1
    assert stats["clients"] == 1
    assert stats["unassigned"] == 1
    assert stats["current_master"] == "m1"
    assert stats["master_declarations"] == 1


def test_session_role_properties():
    master = Session(id="m", role=Role.MASTER)
    client = Session(id="c", role=Role.CLIENT)
    unassigned = Session(id="u")

    assert master.is_master and not master.is_client
    assert client.is_client and not client.is_master
    assert not unassigned.is_master and not unassigned.is_client


def test_master_history_stays_bounded():
    registry = SessionRegistry(history_limit=4)
    registry.put(Session(id="c", role=Role.CLIENT))

    for round_number in range(50):
        master = make_master(registry, f"m{round_number}")
        registry.record_master_declaration(master.id)
        registry.remove(master.id)

    assert len(registry.master_history()) == 4
    assert registry.stats()["master_declarations"] == 100
    assert registry.find_master() is None
    assert len(registry) == 1


def test_superseded_master_is_not_restored_after_history_rolls_over():
    registry = SessionRegistry(history_limit=1)
    make_master(registry, "m1")
    make_master(registry, "m2")

    assert [d.session_id for d in registry.master_history()] == ["m2"]
    registry.remove("m2")

    assert registry.find_master() is None
    assert registry.get("m1").is_master
