"""Experiment schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from abtest.experimentation.models import (
    Assignment,
    ConversionEvent,
    Experiment,
    ExperimentResults,
    ExperimentStatus,
    TargetingRule,
    Variant,
    VariantMetrics,
)


class VariantSchema(BaseModel):
    """Variant configuration."""

    id: str = Field(..., description="Variant ID")
    name: str = Field(..., description="Display name")
    weight: int = Field(..., ge=0, le=100, description="Traffic percentage")
    config: dict[str, Any] = Field(default_factory=dict)

    def to_variant(self) -> Variant:
        return Variant(id=self.id, name=self.name, weight=self.weight, config=self.config)


class TargetingRuleSchema(BaseModel):
    """Targeting rule over one user-context key."""

    type: str = Field(..., description="User context key, e.g. country")
    operator: str = Field(..., description="equals, not_equals, in or not_in")
    value: Any = Field(None, description="Scalar or list of scalars")

    def to_rule(self) -> TargetingRule:
        return TargetingRule(type=self.type, operator=self.operator, value=self.value)


class ExperimentCreate(BaseModel):
    """Experiment creation request."""

    name: str
    variants: list[VariantSchema]
    status: ExperimentStatus = ExperimentStatus.DRAFT
    targeting_rules: list[TargetingRuleSchema] = Field(default_factory=list)
    start_date: datetime | None = None
    end_date: datetime | None = None

    model_config = {"json_schema_extra": {
        "example": {
            "name": "Checkout button color",
            "variants": [
                {"id": "var_a", "name": "Blue", "weight": 50},
                {"id": "var_b", "name": "Green", "weight": 50},
            ],
            "targeting_rules": [
                {"type": "country", "operator": "in", "value": ["US", "CA"]},
            ],
        }
    }}

    def to_experiment(self) -> Experiment:
        return Experiment(
            name=self.name,
            variants=[v.to_variant() for v in self.variants],
            status=self.status,
            targeting_rules=[r.to_rule() for r in self.targeting_rules],
            start_date=self.start_date,
            end_date=self.end_date,
        )


class ExperimentResponse(BaseModel):
    """Experiment response."""

    id: str
    name: str
    variants: list[VariantSchema]
    status: str
    targeting_rules: list[TargetingRuleSchema]
    start_date: datetime | None
    end_date: datetime | None
    created_at: datetime | None
    updated_at: datetime | None

    @classmethod
    def from_experiment(cls, experiment: Experiment) -> "ExperimentResponse":
        status = experiment.status
        return cls(
            id=experiment.id,
            name=experiment.name,
            variants=[VariantSchema(**v.to_dict()) for v in experiment.variants],
            status=status.value if isinstance(status, ExperimentStatus) else str(status),
            targeting_rules=[
                TargetingRuleSchema(**r.to_dict()) for r in experiment.targeting_rules
            ],
            start_date=experiment.start_date,
            end_date=experiment.end_date,
            created_at=experiment.created_at,
            updated_at=experiment.updated_at,
        )


class StatusUpdate(BaseModel):
    """Status update request. Any value is stored as given."""

    status: str


class AssignmentRequest(BaseModel):
    """Assignment request."""

    user_id: str
    context: dict[str, Any] = Field(default_factory=dict)


class AssignmentResponse(BaseModel):
    """Assignment response."""

    experiment_id: str
    user_id: str
    variant_id: str
    assigned_at: datetime

    @classmethod
    def from_assignment(cls, assignment: Assignment) -> "AssignmentResponse":
        return cls(
            experiment_id=assignment.experiment_id,
            user_id=assignment.user_id,
            variant_id=assignment.variant_id,
            assigned_at=assignment.assigned_at,
        )


class ConversionRequest(BaseModel):
    """Conversion tracking request."""

    user_id: str
    event_name: str
    value: float | None = None


class ConversionResponse(BaseModel):
    """Conversion response."""

    experiment_id: str
    user_id: str
    variant_id: str
    event_name: str
    value: float | None
    timestamp: datetime

    @classmethod
    def from_event(cls, event: ConversionEvent) -> "ConversionResponse":
        return cls(
            experiment_id=event.experiment_id,
            user_id=event.user_id,
            variant_id=event.variant_id,
            event_name=event.event_name,
            value=event.value,
            timestamp=event.timestamp,
        )


class VariantMetricsResponse(BaseModel):
    """Aggregated metrics for one variant."""

    variant_id: str
    variant_name: str
    total_users: int
    conversions: int
    conversion_rate: float = Field(..., description="Percent")
    total_value: float
    average_value: float

    @classmethod
    def from_metrics(cls, metrics: VariantMetrics) -> "VariantMetricsResponse":
        return cls(
            variant_id=metrics.variant_id,
            variant_name=metrics.variant_name,
            total_users=metrics.total_users,
            conversions=metrics.conversions,
            conversion_rate=metrics.conversion_rate,
            total_value=metrics.total_value,
            average_value=metrics.average_value,
        )


class ExperimentResultsResponse(BaseModel):
    """Experiment results response."""

    experiment_id: str
    variants: list[VariantMetricsResponse]
    winner: str | None
    confidence_level: float = Field(..., description="Percent, 0-100")

    @classmethod
    def from_results(cls, results: ExperimentResults) -> "ExperimentResultsResponse":
        return cls(
            experiment_id=results.experiment_id,
            variants=[VariantMetricsResponse.from_metrics(m) for m in results.variants],
            winner=results.winner,
            confidence_level=results.confidence_level,
        )


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Service status")
    version: str = Field(..., description="API version")
