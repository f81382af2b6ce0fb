"""Results aggregation and winner selection for experiments."""

from collections import defaultdict

import numpy as np
from loguru import logger

from abtest.config import settings
from abtest.experimentation.models import ExperimentResults, VariantMetrics
from abtest.experimentation.registry import ExperimentRegistry
from abtest.experimentation.statistical import StatisticalAnalyzer
from abtest.experimentation.store import DocumentStore


class ResultsAnalyzer:
    """Computes per-variant metrics and declares a winner.

    Only variants with at least ``min_sample_size`` assigned users take part
    in winner selection. The two eligible variants with the highest
    conversion rates are compared with a two-proportion z-test; the better
    one wins when the confidence strictly exceeds ``confidence_threshold``.
    """

    def __init__(
        self,
        store: DocumentStore,
        registry: ExperimentRegistry,
        min_sample_size: int | None = None,
        confidence_threshold: float | None = None,
        assignments_collection: str | None = None,
        conversions_collection: str | None = None,
    ):
        self.store = store
        self.registry = registry
        self.min_sample_size = (
            settings.min_sample_size if min_sample_size is None else min_sample_size
        )
        self.analyzer = StatisticalAnalyzer(
            confidence_threshold=(
                settings.confidence_threshold
                if confidence_threshold is None
                else confidence_threshold
            )
        )
        self.assignments_collection = (
            assignments_collection or settings.assignments_collection
        )
        self.conversions_collection = (
            conversions_collection or settings.conversions_collection
        )

    async def get_experiment_results(self, experiment_id: str) -> ExperimentResults:
        """Aggregate assignments and conversions for an experiment.

        Raises:
            NotFoundError: Experiment does not exist.
        """
        experiment = await self.registry.get_experiment(experiment_id)

        metrics_by_variant = {
            v.id: VariantMetrics(variant_id=v.id, variant_name=v.name)
            for v in experiment.variants
        }

        assignments = await self.store.query(
            self.assignments_collection, "experimentId", experiment_id
        )
        for doc in assignments:
            metrics = metrics_by_variant.get(doc.get("variantId"))
            if metrics:
                metrics.total_users += 1

        conversions = await self.store.query(
            self.conversions_collection, "experimentId", experiment_id
        )
        values_by_variant: dict[str, list[float]] = defaultdict(list)
        for doc in conversions:
            metrics = metrics_by_variant.get(doc.get("variantId"))
            if metrics:
                metrics.conversions += 1
                if doc.get("value") is not None:
                    values_by_variant[metrics.variant_id].append(doc["value"])

        for metrics in metrics_by_variant.values():
            if metrics.total_users > 0:
                metrics.conversion_rate = metrics.conversions / metrics.total_users * 100

            values = values_by_variant.get(metrics.variant_id)
            if values:
                metrics.total_value = float(np.sum(values))
                metrics.average_value = float(np.mean(values))

        variants = list(metrics_by_variant.values())
        winner, confidence_level = self._determine_winner(variants)

        logger.debug(
            f"Results for {experiment_id}: {len(assignments)} assignments, "
            f"{len(conversions)} conversions, winner={winner}, "
            f"confidence={confidence_level:.2f}"
        )

        return ExperimentResults(
            experiment_id=experiment_id,
            variants=variants,
            winner=winner,
            confidence_level=confidence_level,
        )

    def _determine_winner(
        self,
        variants: list[VariantMetrics],
    ) -> tuple[str | None, float]:
        """Return (winner id or None, confidence percent)."""
        eligible = [v for v in variants if v.total_users >= self.min_sample_size]
        if len(eligible) < 2:
            return None, 0.0
        if sum(v.conversions for v in eligible) == 0:
            return None, 0.0

        # sorted() is stable, so ties keep declaration order
        best, runner_up = sorted(eligible, key=lambda v: v.conversion_rate, reverse=True)[:2]

        # Conversions count events, not users; cap so rates stay proportions
        result = self.analyzer.compare_proportions(
            control_successes=min(runner_up.conversions, runner_up.total_users),
            control_total=runner_up.total_users,
            treatment_successes=min(best.conversions, best.total_users),
            treatment_total=best.total_users,
        )
        logger.debug(f"{best.variant_id} vs {runner_up.variant_id}\n{result.summary()}")

        winner = best.variant_id if result.is_significant else None
        return winner, result.confidence_level
