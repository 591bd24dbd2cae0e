"""Tests for plan identity hashing and completion state."""
from __future__ import annotations

import json

from profitbot.services.completion_state import (
    CompletionStateManager,
    checks_key,
    fnv1a_32,
    plan_identity,
)
from profitbot.services.plan_normalizer import normalize_plan
from profitbot.services.plan_store import InMemoryStore


def test_fnv1a_matches_reference_vectors() -> None:
    assert fnv1a_32("") == 0x811C9DC5
    assert fnv1a_32("a") == 0xE40C292C
    assert fnv1a_32("foobar") == 0xBF9CF968


def test_fnv1a_hashes_utf16_code_units() -> None:
    expected = 0x811C9DC5
    for unit in (0xD83D, 0xDE00):
        expected ^= unit
        expected = (expected * 0x01000193) & 0xFFFFFFFF

    assert fnv1a_32("\U0001F600") == expected


def test_fnv1a_hashes_unpaired_surrogates() -> None:
    assert fnv1a_32("caf\ud83d") == 0xDF945540
    assert plan_identity({"idea": "caf\ud83d"}) == "plan_df945540"


def test_identity_is_deterministic() -> None:
    assert plan_identity({"id": "x"}) == plan_identity({"id": "x"})
    assert plan_identity({"id": "a"}) == "plan_e40c292c"


def test_identity_is_case_sensitive_on_idea() -> None:
    assert plan_identity({"idea": "Coffee cart"}) != plan_identity({"idea": "Coffee Cart"})


def test_identity_prefers_id_over_idea() -> None:
    lower = {"id": "plan_1", "idea": "Coffee cart"}
    upper = {"id": "plan_1", "idea": "Coffee Cart"}

    assert plan_identity(lower) == plan_identity(upper)


def test_identity_falls_back_to_latest() -> None:
    assert plan_identity(None) == plan_identity({}) == plan_identity({"id": "", "idea": ""})
    assert plan_identity(None) == f"plan_{fnv1a_32('latest'):x}"


def test_identity_skips_non_string_candidates() -> None:
    assert plan_identity({"id": 5, "idea": "Coffee cart"}) == plan_identity({"idea": "Coffee cart"})
    assert plan_identity({"id": None, "idea": ["Coffee"]}) == plan_identity(None)


def test_identity_accepts_plan_models() -> None:
    plan = normalize_plan({"id": "plan_1", "idea": "Coffee cart"}, "Coffee cart")

    assert plan_identity(plan) == plan_identity({"id": "plan_1"})


def test_toggle_twice_restores_original_value() -> None:
    store = InMemoryStore()
    manager = CompletionStateManager(store, "plan_abc")
    manager.load()

    assert manager.toggle(3, 1) is True
    assert manager.is_done(3, 1)
    assert manager.toggle(3, 1) is False
    assert manager.is_done(3, 1) is False


def test_toggle_writes_through_immediately() -> None:
    store = InMemoryStore()
    manager = CompletionStateManager(store, "plan_abc")

    manager.toggle(1, 0)

    assert json.loads(store.get(checks_key("plan_abc"))) == {"d1_t0": True}
    reloaded = CompletionStateManager(store, "plan_abc")
    assert reloaded.load() == {"d1_t0": True}


def test_reset_empties_mapping_and_removes_entry() -> None:
    store = InMemoryStore()
    manager = CompletionStateManager(store, "plan_abc")
    manager.toggle(2, 0)
    manager.toggle(5, 1)

    manager.reset()

    assert manager.checks == {}
    assert store.get(checks_key("plan_abc")) is None


def test_corrupt_or_missing_state_loads_empty() -> None:
    store = InMemoryStore({checks_key("broken"): "{not json", checks_key("list"): "[1, 2]"})

    assert CompletionStateManager(store, "broken").load() == {}
    assert CompletionStateManager(store, "list").load() == {}
    assert CompletionStateManager(store, "absent").load() == {}


def test_non_boolean_values_are_dropped_on_load() -> None:
    store = InMemoryStore({checks_key("mixed"): json.dumps({"d1_t0": True, "d1_t1": "yes", "d2_t0": False})})

    assert CompletionStateManager(store, "mixed").load() == {"d1_t0": True, "d2_t0": False}


def test_same_idea_regeneration_reuses_checks() -> None:
    store = InMemoryStore()
    first = {"idea": "Dog walking in Leeds"}
    CompletionStateManager(store, plan_identity(first)).toggle(1, 0)

    regenerated = CompletionStateManager(store, plan_identity({"idea": "Dog walking in Leeds"}))
    different = CompletionStateManager(store, plan_identity({"idea": "Cat sitting in Leeds"}))

    assert regenerated.load() == {"d1_t0": True}
    assert different.load() == {}
