"""Experimentation engine facade.

Wires the registry, assignment resolver, conversion recorder and results
analyzer over one injected document store.
"""

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Callable

from abtest.experimentation.assignment import AssignmentResolver
from abtest.experimentation.conversions import ConversionRecorder
from abtest.experimentation.models import (
    Assignment,
    ConversionEvent,
    Experiment,
    ExperimentResults,
    ExperimentStatus,
)
from abtest.experimentation.registry import ExperimentRegistry
from abtest.experimentation.results import ResultsAnalyzer
from abtest.experimentation.store import DocumentStore


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ExperimentEngine:
    """A/B testing engine over a document store.

    Usage:
        engine = ExperimentEngine(InMemoryDocumentStore())

        experiment_id = await engine.create_experiment(
            Experiment(
                name="Checkout button color",
                variants=[
                    Variant("control", "Blue", 50),
                    Variant("treatment", "Green", 50),
                ],
            )
        )
        await engine.update_experiment_status(experiment_id, ExperimentStatus.ACTIVE)

        assignment = await engine.assign_user_to_experiment("user_42", experiment_id)
        await engine.track_conversion("user_42", experiment_id, "purchase", 19.99)
        results = await engine.get_experiment_results(experiment_id)
    """

    def __init__(
        self,
        store: DocumentStore,
        clock: Callable[[], datetime] | None = None,
        min_sample_size: int | None = None,
        confidence_threshold: float | None = None,
    ):
        """Initialize engine.

        Args:
            store: Document store shared by all components.
            clock: Source of timestamps (UTC now by default).
            min_sample_size: Users per variant required for winner selection.
            confidence_threshold: Confidence percent to exceed for a winner.
        """
        self.store = store
        self.clock = clock or utc_now

        self.registry = ExperimentRegistry(store, self.clock)
        self.resolver = AssignmentResolver(store, self.registry, self.clock)
        self.recorder = ConversionRecorder(store, self.resolver, self.clock)
        self.analyzer = ResultsAnalyzer(
            store,
            self.registry,
            min_sample_size=min_sample_size,
            confidence_threshold=confidence_threshold,
        )

    async def create_experiment(self, experiment: Experiment) -> str:
        return await self.registry.create_experiment(experiment)

    async def update_experiment_status(
        self,
        experiment_id: str,
        status: ExperimentStatus | str,
    ) -> None:
        await self.registry.update_experiment_status(experiment_id, status)

    async def get_experiment(self, experiment_id: str) -> Experiment:
        return await self.registry.get_experiment(experiment_id)

    async def assign_user_to_experiment(
        self,
        user_id: str,
        experiment_id: str,
        user_context: Mapping[str, Any] | None = None,
    ) -> Assignment:
        return await self.resolver.assign_user_to_experiment(
            user_id, experiment_id, user_context
        )

    async def track_conversion(
        self,
        user_id: str,
        experiment_id: str,
        event_name: str,
        value: float | None = None,
    ) -> ConversionEvent:
        return await self.recorder.track_conversion(
            user_id, experiment_id, event_name, value
        )

    async def get_experiment_results(self, experiment_id: str) -> ExperimentResults:
        return await self.analyzer.get_experiment_results(experiment_id)

    async def get_user_experiments(self, user_id: str) -> list[Assignment]:
        return await self.resolver.get_user_experiments(user_id)
