"""Statistical analysis for A/B test experiments.

Provides a two-proportion z-test for comparing conversion rates.
"""

import math
from dataclasses import dataclass

from scipy import stats


@dataclass
class StatisticalResult:
    """Result of statistical significance test."""

    control_rate: float
    treatment_rate: float
    relative_lift: float  # (treatment - control) / control
    z_score: float
    p_value: float
    confidence_level: float  # Percent, (1 - p_value) * 100
    is_significant: bool
    control_n: int
    treatment_n: int
    test_type: str = "two_proportion_z_test"

    def summary(self) -> str:
        """Get human-readable summary."""
        significance = "SIGNIFICANT" if self.is_significant else "NOT significant"
        return (
            f"Treatment vs Control: {self.relative_lift * 100:+.2f}% lift\n"
            f"Control: {self.control_rate:.4f} (n={self.control_n})\n"
            f"Treatment: {self.treatment_rate:.4f} (n={self.treatment_n})\n"
            f"z={self.z_score:.3f}, p-value: {self.p_value:.4f}\n"
            f"Result: {significance} at {self.confidence_level:.2f}% confidence"
        )


class StatisticalAnalyzer:
    """Significance testing for conversion experiments."""

    def __init__(self, confidence_threshold: float = 95.0):
        """Initialize analyzer.

        Args:
            confidence_threshold: Confidence (percent) that must be exceeded
                for a difference to count as significant.
        """
        self.confidence_threshold = confidence_threshold

    def compare_proportions(
        self,
        control_successes: int,
        control_total: int,
        treatment_successes: int,
        treatment_total: int,
    ) -> StatisticalResult:
        """Compare proportions using a two-sided, pooled two-proportion z-test.

        Args:
            control_successes: Number of successes in control.
            control_total: Total samples in control.
            treatment_successes: Number of successes in treatment.
            treatment_total: Total samples in treatment.

        Returns:
            Statistical result.
        """
        control_rate = control_successes / control_total if control_total > 0 else 0.0
        treatment_rate = treatment_successes / treatment_total if treatment_total > 0 else 0.0

        if control_rate != 0:
            relative_lift = (treatment_rate - control_rate) / control_rate
        else:
            relative_lift = 0.0

        z_score = 0.0
        p_value = 1.0
        if control_total > 0 and treatment_total > 0:
            pooled_rate = (control_successes + treatment_successes) / (
                control_total + treatment_total
            )
            se = math.sqrt(
                pooled_rate * (1 - pooled_rate) * (1 / control_total + 1 / treatment_total)
            )
            if se > 0:
                z_score = (treatment_rate - control_rate) / se
                p_value = float(2 * stats.norm.sf(abs(z_score)))

        confidence_level = (1 - p_value) * 100

        return StatisticalResult(
            control_rate=control_rate,
            treatment_rate=treatment_rate,
            relative_lift=relative_lift,
            z_score=z_score,
            p_value=p_value,
            confidence_level=confidence_level,
            is_significant=confidence_level > self.confidence_threshold,
            control_n=control_total,
            treatment_n=treatment_total,
        )
