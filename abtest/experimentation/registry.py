"""Experiment definitions: creation, status changes and lookup."""

from dataclasses import replace
from datetime import datetime
from typing import Callable

from loguru import logger

from abtest.config import settings
from abtest.experimentation.errors import NotFoundError, ValidationError
from abtest.experimentation.models import Experiment, ExperimentStatus, Variant
from abtest.experimentation.store import DocumentStore

TOTAL_WEIGHT = 100


def validate_weights(variants: list[Variant]) -> None:
    """Check that variant weights are non-negative integers summing to 100.

    Raises:
        ValidationError: If any weight is invalid or the total is not 100.
    """
    for variant in variants:
        weight = variant.weight
        if isinstance(weight, bool) or not isinstance(weight, int) or weight < 0:
            raise ValidationError(
                f"Variant weights must be non-negative integers, "
                f"got {weight!r} for '{variant.id}'"
            )

    if sum(v.weight for v in variants) != TOTAL_WEIGHT:
        raise ValidationError("Variant weights must sum to 100")


class ExperimentRegistry:
    """Creates and updates experiment documents."""

    def __init__(
        self,
        store: DocumentStore,
        clock: Callable[[], datetime],
        collection: str | None = None,
    ):
        self.store = store
        self.clock = clock
        self.collection = collection or settings.experiments_collection

    async def create_experiment(self, experiment: Experiment) -> str:
        """Persist a new experiment.

        Args:
            experiment: Experiment definition. Status defaults to draft.

        Returns:
            Generated experiment id.
        """
        try:
            validate_weights(experiment.variants)
        except ValidationError as e:
            logger.warning(f"Rejected experiment '{experiment.name}': {e}")
            raise

        now = self.clock()
        stored = replace(
            experiment,
            status=experiment.status or ExperimentStatus.DRAFT,
            start_date=experiment.start_date or now,
            created_at=now,
            updated_at=now,
        )

        experiment_id = await self.store.add(self.collection, stored.to_dict())
        logger.info(
            f"Created experiment {experiment_id} ('{stored.name}') "
            f"with {len(stored.variants)} variants"
        )
        return experiment_id

    async def update_experiment_status(
        self,
        experiment_id: str,
        status: ExperimentStatus | str,
    ) -> None:
        """Set the experiment status. Transitions are not validated."""
        value = status.value if isinstance(status, ExperimentStatus) else status
        await self.store.update(
            self.collection,
            experiment_id,
            {"status": value, "updatedAt": self.clock().isoformat()},
        )
        logger.info(f"Experiment {experiment_id} status set to {value}")

    async def get_experiment(self, experiment_id: str) -> Experiment:
        """Load an experiment or raise NotFoundError."""
        data = await self.store.get(self.collection, experiment_id)
        if data is None:
            raise NotFoundError("Experiment not found")
        return Experiment.from_dict(data, experiment_id=experiment_id)
