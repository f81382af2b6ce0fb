"""Experiment, assignment and conversion records.

Documents in the store use camelCase field names; each record converts
with ``to_dict`` / ``from_dict``.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ExperimentStatus(Enum):
    """Experiment status enum."""

    DRAFT = "draft"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"


class TargetingOperator(Enum):
    """Operators understood by targeting rules."""

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    IN = "in"
    NOT_IN = "not_in"


def _format_time(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _parse_time(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


@dataclass
class Variant:
    """One arm of an experiment."""

    id: str
    name: str
    weight: int  # Traffic percentage (0-100)
    config: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "weight": self.weight,
            "config": self.config,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Variant":
        return cls(
            id=data["id"],
            name=data.get("name", data["id"]),
            weight=data["weight"],
            config=dict(data.get("config") or {}),
        )


@dataclass
class TargetingRule:
    """Predicate over one key of the user context.

    ``operator`` is kept as the raw string so that rules written with an
    operator this version does not know still load (and never match).
    """

    type: str
    operator: str
    value: Any

    def __post_init__(self):
        if isinstance(self.operator, TargetingOperator):
            self.operator = self.operator.value

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"type": self.type, "operator": self.operator, "value": self.value}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TargetingRule":
        return cls(type=data["type"], operator=data["operator"], value=data.get("value"))


@dataclass
class Experiment:
    """Experiment configuration."""

    name: str
    variants: list[Variant]
    status: ExperimentStatus | str = ExperimentStatus.DRAFT
    targeting_rules: list[TargetingRule] = field(default_factory=list)
    id: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.status == ExperimentStatus.ACTIVE

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary (without the id, which is the document key)."""
        status = self.status.value if isinstance(self.status, ExperimentStatus) else self.status
        return {
            "name": self.name,
            "variants": [v.to_dict() for v in self.variants],
            "status": status,
            "targetingRules": [r.to_dict() for r in self.targeting_rules],
            "startDate": _format_time(self.start_date),
            "endDate": _format_time(self.end_date),
            "createdAt": _format_time(self.created_at),
            "updatedAt": _format_time(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], experiment_id: str | None = None) -> "Experiment":
        raw_status = data.get("status", ExperimentStatus.DRAFT.value)
        try:
            status = ExperimentStatus(raw_status)
        except ValueError:
            # Status updates accept any value; keep unknown ones as-is
            status = raw_status

        return cls(
            id=experiment_id or data.get("id"),
            name=data["name"],
            variants=[Variant.from_dict(v) for v in data.get("variants", [])],
            status=status,
            targeting_rules=[
                TargetingRule.from_dict(r) for r in data.get("targetingRules") or []
            ],
            start_date=_parse_time(data.get("startDate")),
            end_date=_parse_time(data.get("endDate")),
            created_at=_parse_time(data.get("createdAt")),
            updated_at=_parse_time(data.get("updatedAt")),
        )


@dataclass
class Assignment:
    """Durable binding of one user to one variant of one experiment."""

    experiment_id: str
    user_id: str
    variant_id: str
    assigned_at: datetime

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "experimentId": self.experiment_id,
            "userId": self.user_id,
            "variantId": self.variant_id,
            "assignedAt": _format_time(self.assigned_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Assignment":
        return cls(
            experiment_id=data["experimentId"],
            user_id=data["userId"],
            variant_id=data["variantId"],
            assigned_at=_parse_time(data["assignedAt"]),
        )


@dataclass
class ConversionEvent:
    """A tracked action performed by a user under their assigned variant."""

    experiment_id: str
    user_id: str
    variant_id: str
    event_name: str
    timestamp: datetime
    value: float | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = {
            "experimentId": self.experiment_id,
            "userId": self.user_id,
            "variantId": self.variant_id,
            "eventName": self.event_name,
            "timestamp": _format_time(self.timestamp),
        }
        if self.value is not None:
            data["value"] = self.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ConversionEvent":
        return cls(
            experiment_id=data["experimentId"],
            user_id=data["userId"],
            variant_id=data["variantId"],
            event_name=data["eventName"],
            timestamp=_parse_time(data["timestamp"]),
            value=data.get("value"),
        )


@dataclass
class VariantMetrics:
    """Aggregated metrics for a variant."""

    variant_id: str
    variant_name: str
    total_users: int = 0
    conversions: int = 0
    conversion_rate: float = 0.0  # Percent
    total_value: float = 0.0
    average_value: float = 0.0


@dataclass
class ExperimentResults:
    """Per-variant metrics plus the winner, if one can be declared."""

    experiment_id: str
    variants: list[VariantMetrics]
    winner: str | None = None
    confidence_level: float = 0.0

    def get_variant(self, variant_id: str) -> VariantMetrics | None:
        for metrics in self.variants:
            if metrics.variant_id == variant_id:
                return metrics
        return None
