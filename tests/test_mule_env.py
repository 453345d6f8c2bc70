import pytest

from mule.mule_env import Environment
from mule.mule_errors import NotDefined


def test_environment_init():
    parent = Environment()
    child = Environment(parent)
    assert child.parent is parent
    assert not child.bindings
    assert parent.parent is None


def test_define_then_resolve():
    env = Environment()
    env.define("a", "1")
    assert env.resolve("a") == "1"
    env.define("a", "2")
    assert env.resolve("a") == "2"


def test_resolve_from_parent():
    parent = Environment()
    parent.define("a", "100")
    child = parent.enclosed()
    assert child.resolve("a") == "100"


def test_shadowing_leaves_parent_untouched():
    parent = Environment()
    parent.define("b", "200")
    child = parent.enclosed()
    child.define("b", "20")
    assert child.resolve("b") == "20"
    assert parent.resolve("b") == "200"


def test_resolve_undefined_raises():
    child = Environment().enclosed()
    with pytest.raises(NotDefined) as ei:
        child.resolve("nope")
    assert ei.value.name == "nope"
    assert str(ei.value) == "nope: not defined"


def test_assign_updates_nearest_owner():
    root = Environment()
    root.define("token", "old")
    mid = root.enclosed()
    leaf = mid.enclosed()
    leaf.assign("token", "new")
    assert root.resolve("token") == "new"
    assert "token" not in leaf.bindings
    assert "token" not in mid.bindings


def test_assign_prefers_shadowing_binding():
    root = Environment()
    root.define("x", "root")
    child = root.enclosed()
    child.define("x", "child")
    child.assign("x", "updated")
    assert child.resolve("x") == "updated"
    assert root.resolve("x") == "root"


def test_assign_never_creates_bindings():
    env = Environment().enclosed()
    with pytest.raises(NotDefined):
        env.assign("x", "1")
    assert env.identifiers() == []
    assert env.parent.identifiers() == []


def test_identifiers_are_local_only():
    parent = Environment.from_mapping({"a": "1", "b": "2"})
    child = Environment.from_mapping({"c": "3"}, parent)
    assert child.identifiers() == ["c"]
    assert sorted(parent.identifiers()) == ["a", "b"]


def test_mapping_protocol():
    parent = Environment()
    parent["a"] = "1"
    child = parent.enclosed()
    assert child["a"] == "1"
    assert "a" in child
    assert "z" not in child
    assert 1 not in child
    with pytest.raises(NotDefined):
        _ = child["z"]


def test_request_scopes_share_a_populated_parent():
    collection = Environment.from_mapping({"host": "example.com"})
    first = collection.enclosed()
    second = collection.enclosed()
    first.define("id", "1")
    second.define("id", "2")
    assert first.resolve("id") == "1"
    assert second.resolve("id") == "2"
    assert "id" not in collection
