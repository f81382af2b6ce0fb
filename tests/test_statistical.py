"""Tests for the two-proportion z-test."""

import pytest

from abtest.experimentation import StatisticalAnalyzer


@pytest.fixture
def analyzer() -> StatisticalAnalyzer:
    return StatisticalAnalyzer(confidence_threshold=95.0)


class TestCompareProportions:
    """Tests for compare_proportions."""

    def test_significant_difference(self, analyzer):
        result = analyzer.compare_proportions(10, 50, 20, 50)

        assert result.control_rate == pytest.approx(0.2)
        assert result.treatment_rate == pytest.approx(0.4)
        assert result.relative_lift == pytest.approx(1.0)
        assert result.z_score == pytest.approx(2.182, abs=1e-3)
        assert result.p_value == pytest.approx(0.0291, abs=1e-3)
        assert result.is_significant
        assert result.test_type == "two_proportion_z_test"

    def test_direction_does_not_change_confidence(self, analyzer):
        """The test is two-sided."""
        forward = analyzer.compare_proportions(10, 50, 20, 50)
        backward = analyzer.compare_proportions(20, 50, 10, 50)

        assert backward.z_score == pytest.approx(-forward.z_score)
        assert backward.confidence_level == pytest.approx(forward.confidence_level)

    def test_equal_rates(self, analyzer):
        result = analyzer.compare_proportions(15, 60, 15, 60)

        assert result.z_score == 0
        assert result.p_value == pytest.approx(1.0)
        assert result.confidence_level == pytest.approx(0.0)
        assert not result.is_significant

    def test_degenerate_inputs(self, analyzer):
        """Empty groups or zero variance give no confidence instead of failing."""
        for args in [(0, 0, 0, 0), (0, 40, 0, 40), (40, 40, 40, 40)]:
            result = analyzer.compare_proportions(*args)
            assert result.p_value == 1.0
            assert result.confidence_level == 0.0
            assert not result.is_significant

    def test_threshold_is_strict(self):
        """Confidence must exceed the threshold, not merely reach it."""
        result = StatisticalAnalyzer(confidence_threshold=0.0).compare_proportions(
            10, 40, 10, 40
        )

        assert result.confidence_level == pytest.approx(0.0)
        assert not result.is_significant

    def test_summary(self, analyzer):
        result = analyzer.compare_proportions(10, 50, 20, 50)

        summary = result.summary()
        assert "+100.00% lift" in summary
        assert "(n=50)" in summary
        assert "SIGNIFICANT" in summary
