"""Tests for the SQL-backed key-value store and the latest-plan slot."""
from __future__ import annotations

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from profitbot.db.models.kv_entry import KeyValueEntry
from profitbot.services.plan_normalizer import normalize_plan
from profitbot.services.plan_store import LATEST_PLAN_KEY, InMemoryStore, PlanRepository, SqlKeyValueStore


@pytest.fixture()
def session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    TestingSession = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    KeyValueEntry.__table__.create(bind=engine)
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


def test_sql_store_set_get_overwrite_remove(session) -> None:
    store = SqlKeyValueStore(session)

    assert store.get("k") is None
    store.set("k", "one")
    store.set("k", "two")
    assert store.get("k") == "two"
    assert session.query(KeyValueEntry).count() == 1

    store.remove("k")
    store.remove("k")
    assert store.get("k") is None


def test_repository_round_trips_latest_plan(session) -> None:
    repository = PlanRepository(SqlKeyValueStore(session))
    plan = normalize_plan(
        {"id": "plan_1", "idea": "Coffee cart", "steps": [{"title": "A", "howTo": ["x", "y"]}]},
        "Coffee cart",
    )

    repository.save_latest(plan)
    loaded = repository.load_latest()

    assert loaded == plan


def test_repository_overwrites_and_clears() -> None:
    store = InMemoryStore()
    repository = PlanRepository(store)
    repository.save_latest(normalize_plan({"id": "one"}, "First"))
    repository.save_latest(normalize_plan({"id": "two"}, "Second"))

    assert repository.load_latest().id == "two"

    repository.clear()
    assert repository.load_latest() is None
    assert store.get(LATEST_PLAN_KEY) is None


def test_repository_ignores_unreadable_payloads() -> None:
    assert PlanRepository(InMemoryStore({LATEST_PLAN_KEY: "not json"})).load_latest() is None
    assert PlanRepository(InMemoryStore({LATEST_PLAN_KEY: "[1, 2, 3]"})).load_latest() is None


def test_repository_normalizes_partial_stored_plans() -> None:
    store = InMemoryStore({LATEST_PLAN_KEY: '{"id": "old", "idea": "Bakery", "steps": [{"title": "Bake"}]}'})

    plan = PlanRepository(store).load_latest()

    assert plan.id == "old"
    assert [step.title for step in plan.steps] == ["Bake", "Step 2", "Step 3"]


def test_repository_exposes_raw_payload_for_id_less_plans() -> None:
    store = InMemoryStore({LATEST_PLAN_KEY: '{"idea": "Bakery"}'})
    repository = PlanRepository(store)

    assert repository.load_payload() == {"idea": "Bakery"}
    assert repository.load_latest().idea == "Bakery"
    assert PlanRepository(InMemoryStore()).load_payload() is None
