"""Pytest fixtures for tests."""

from datetime import datetime, timezone

import pytest

from abtest.experimentation import (
    Experiment,
    ExperimentEngine,
    ExperimentStatus,
    InMemoryDocumentStore,
    TargetingRule,
    Variant,
    assignment_doc_id,
)

FIXED_NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_experiment(
    weights: tuple[int, ...] = (50, 50),
    targeting_rules: list[TargetingRule] | None = None,
    status: ExperimentStatus = ExperimentStatus.DRAFT,
    name: str = "Checkout button color",
) -> Experiment:
    """Build an experiment with variants var_a, var_b, ... for the given weights."""
    variants = [
        Variant(id=f"var_{chr(ord('a') + i)}", name=f"Variant {chr(ord('A') + i)}", weight=w)
        for i, w in enumerate(weights)
    ]
    return Experiment(
        name=name,
        variants=variants,
        status=status,
        targeting_rules=targeting_rules or [],
    )


@pytest.fixture
def store() -> InMemoryDocumentStore:
    """Fresh in-memory document store."""
    return InMemoryDocumentStore()


@pytest.fixture
def engine(store) -> ExperimentEngine:
    """Engine over the in-memory store with a frozen clock."""
    return ExperimentEngine(store, clock=lambda: FIXED_NOW)


@pytest.fixture
def active_experiment(engine):
    """Factory creating an experiment and switching it to active."""

    async def _create(**kwargs) -> str:
        experiment_id = await engine.create_experiment(make_experiment(**kwargs))
        await engine.update_experiment_status(experiment_id, ExperimentStatus.ACTIVE)
        return experiment_id

    return _create


@pytest.fixture
def seed_variant(store):
    """Factory writing assignments and conversions for one variant directly."""

    async def _seed(
        experiment_id: str,
        variant_id: str,
        users: int,
        conversions: int = 0,
        value: float | None = None,
    ) -> None:
        for i in range(users):
            user_id = f"{variant_id}_user_{i}"
            await store.set(
                "assignments",
                assignment_doc_id(experiment_id, user_id),
                {
                    "experimentId": experiment_id,
                    "userId": user_id,
                    "variantId": variant_id,
                    "assignedAt": FIXED_NOW.isoformat(),
                },
            )
        for i in range(conversions):
            doc = {
                "experimentId": experiment_id,
                "userId": f"{variant_id}_user_{i % max(users, 1)}",
                "variantId": variant_id,
                "eventName": "purchase",
                "timestamp": FIXED_NOW.isoformat(),
            }
            if value is not None:
                doc["value"] = value
            await store.add("conversions", doc)

    return _seed
