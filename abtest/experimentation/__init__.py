"""Experimentation engine for A/B testing.

Components:
- ExperimentRegistry: Creates experiments and updates their status
- AssignmentResolver: Deterministic, exactly-once variant assignment
- ConversionRecorder: Attributes conversion events to assignments
- ResultsAnalyzer: Per-variant metrics and statistical winner selection
- ExperimentEngine: Facade wiring the above over one document store
"""

from abtest.experimentation.assignment import (
    AssignmentResolver,
    assignment_doc_id,
    compute_bucket,
    matches_targeting_rules,
    select_variant,
)
from abtest.experimentation.conversions import ConversionRecorder
from abtest.experimentation.engine import ExperimentEngine
from abtest.experimentation.errors import (
    ExperimentError,
    InvalidStateError,
    NotAssignedError,
    NotFoundError,
    TargetingError,
    ValidationError,
)
from abtest.experimentation.models import (
    Assignment,
    ConversionEvent,
    Experiment,
    ExperimentResults,
    ExperimentStatus,
    TargetingOperator,
    TargetingRule,
    Variant,
    VariantMetrics,
)
from abtest.experimentation.registry import ExperimentRegistry
from abtest.experimentation.results import ResultsAnalyzer
from abtest.experimentation.statistical import StatisticalAnalyzer, StatisticalResult
from abtest.experimentation.store import (
    DocumentNotFoundError,
    DocumentStore,
    InMemoryDocumentStore,
)

__all__ = [
    "Assignment",
    "AssignmentResolver",
    "ConversionEvent",
    "ConversionRecorder",
    "DocumentNotFoundError",
    "DocumentStore",
    "Experiment",
    "ExperimentEngine",
    "ExperimentError",
    "ExperimentRegistry",
    "ExperimentResults",
    "ExperimentStatus",
    "InMemoryDocumentStore",
    "InvalidStateError",
    "NotAssignedError",
    "NotFoundError",
    "ResultsAnalyzer",
    "StatisticalAnalyzer",
    "StatisticalResult",
    "TargetingError",
    "TargetingOperator",
    "TargetingRule",
    "ValidationError",
    "Variant",
    "VariantMetrics",
    "assignment_doc_id",
    "compute_bucket",
    "matches_targeting_rules",
    "select_variant",
]
