"""Tests for experiment creation and status updates."""

from datetime import datetime, timezone

import pytest

from conftest import FIXED_NOW, make_experiment

from abtest.experimentation import (
    DocumentNotFoundError,
    ExperimentEngine,
    ExperimentStatus,
    InMemoryDocumentStore,
    NotFoundError,
    TargetingRule,
    ValidationError,
    Variant,
)


class RecordingStore(InMemoryDocumentStore):
    """In-memory store that remembers update calls."""

    def __init__(self):
        super().__init__()
        self.updates = []

    async def update(self, collection, doc_id, fields):
        self.updates.append((collection, doc_id, fields))
        await super().update(collection, doc_id, fields)


class TestCreateExperiment:
    """Tests for create_experiment."""

    @pytest.mark.asyncio
    async def test_returns_generated_id(self, engine, store):
        """Created experiment is stored under the returned id."""
        experiment_id = await engine.create_experiment(make_experiment())

        assert experiment_id
        assert await store.get("experiments", experiment_id) is not None

    @pytest.mark.asyncio
    async def test_defaults_to_draft_and_stamps_times(self, engine, store):
        """Status defaults to draft; createdAt and updatedAt are set."""
        experiment_id = await engine.create_experiment(make_experiment())

        doc = await store.get("experiments", experiment_id)
        assert doc["status"] == "draft"
        assert doc["createdAt"] == FIXED_NOW.isoformat()
        assert doc["updatedAt"] == FIXED_NOW.isoformat()
        assert doc["startDate"] == FIXED_NOW.isoformat()

    @pytest.mark.asyncio
    async def test_keeps_given_status(self, engine):
        """An explicit status is persisted as given."""
        experiment_id = await engine.create_experiment(
            make_experiment(status=ExperimentStatus.ACTIVE)
        )

        experiment = await engine.get_experiment(experiment_id)
        assert experiment.status == ExperimentStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_round_trips_definition(self, engine):
        """Variants and targeting rules load back unchanged."""
        rules = [TargetingRule("country", "in", ["US", "CA"])]
        experiment_id = await engine.create_experiment(
            make_experiment(weights=(20, 30, 50), targeting_rules=rules)
        )

        experiment = await engine.get_experiment(experiment_id)
        assert experiment.id == experiment_id
        assert [v.id for v in experiment.variants] == ["var_a", "var_b", "var_c"]
        assert [v.weight for v in experiment.variants] == [20, 30, 50]
        assert experiment.targeting_rules == rules

    @pytest.mark.asyncio
    async def test_caller_experiment_left_untouched(self, engine):
        """Creating twice from one definition yields two independent experiments."""
        definition = make_experiment()

        first_id = await engine.create_experiment(definition)

        assert definition.id is None
        assert definition.created_at is None
        assert definition.updated_at is None
        assert definition.start_date is None

        second_id = await engine.create_experiment(definition)
        assert second_id != first_id

    @pytest.mark.asyncio
    @pytest.mark.parametrize("weights", [(60, 30), (50, 60), (100, 10), ()])
    async def test_weights_must_sum_to_100(self, engine, store, weights):
        """Any total other than 100 is rejected and nothing is stored."""
        with pytest.raises(ValidationError, match="must sum to 100"):
            await engine.create_experiment(make_experiment(weights=weights))

        assert store.count("experiments") == 0

    @pytest.mark.asyncio
    async def test_single_variant_with_full_weight(self, engine):
        """One variant holding all traffic is valid."""
        experiment_id = await engine.create_experiment(make_experiment(weights=(100,)))
        assert experiment_id

    @pytest.mark.asyncio
    async def test_negative_weight_rejected(self, engine, store):
        """Negative weights are rejected even if the total is 100."""
        with pytest.raises(ValidationError, match="non-negative"):
            await engine.create_experiment(make_experiment(weights=(-10, 110)))

        assert store.count("experiments") == 0

    @pytest.mark.asyncio
    async def test_fractional_weight_rejected(self, engine):
        """Weights must be integers."""
        experiment = make_experiment()
        experiment.variants = [
            Variant("var_a", "A", 50.5),
            Variant("var_b", "B", 49.5),
        ]

        with pytest.raises(ValidationError):
            await engine.create_experiment(experiment)


class TestUpdateExperimentStatus:
    """Tests for update_experiment_status."""

    @pytest.mark.asyncio
    async def test_persists_only_status_and_updated_at(self):
        """Only status and updatedAt are written."""
        later = datetime(2025, 3, 2, 8, 30, tzinfo=timezone.utc)
        times = iter([FIXED_NOW, later])
        store = RecordingStore()
        engine = ExperimentEngine(store, clock=lambda: next(times))

        experiment_id = await engine.create_experiment(make_experiment())
        before = await store.get("experiments", experiment_id)

        await engine.update_experiment_status(experiment_id, ExperimentStatus.PAUSED)

        assert store.updates == [
            (
                "experiments",
                experiment_id,
                {"status": "paused", "updatedAt": later.isoformat()},
            )
        ]

        after = await store.get("experiments", experiment_id)
        assert after["status"] == "paused"
        assert after["updatedAt"] == later.isoformat()
        for key in ("name", "variants", "targetingRules", "createdAt", "startDate"):
            assert after[key] == before[key]

    @pytest.mark.asyncio
    async def test_accepts_any_status_value(self, engine):
        """Transitions are not validated; unknown values are stored as-is."""
        experiment_id = await engine.create_experiment(make_experiment())

        await engine.update_experiment_status(experiment_id, "archived")

        experiment = await engine.get_experiment(experiment_id)
        assert experiment.status == "archived"
        assert not experiment.is_active

    @pytest.mark.asyncio
    async def test_missing_experiment_propagates_store_error(self, engine):
        """The store's own error surfaces unchanged."""
        with pytest.raises(DocumentNotFoundError):
            await engine.update_experiment_status("missing", ExperimentStatus.ACTIVE)


class TestGetExperiment:
    """Tests for get_experiment."""

    @pytest.mark.asyncio
    async def test_unknown_experiment(self, engine):
        """Unknown ids raise NotFoundError."""
        with pytest.raises(NotFoundError, match="Experiment not found"):
            await engine.get_experiment("missing")
