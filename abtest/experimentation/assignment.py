"""Deterministic user-to-variant assignment.

Bucketing is hash-based: the first 4 bytes of
``md5(f"{user_id}:{experiment_id}")`` read as a big-endian unsigned int,
modulo 100. Variants are walked in their declared order, accumulating
weights, and the first variant whose cumulative weight exceeds the bucket
is chosen. The same user therefore always lands in the same variant for a
given variant layout, independent of call order or timing.

Once an assignment document exists it is authoritative: later changes to
weights, targeting rules or status do not move the user.
"""

import hashlib
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Callable

from loguru import logger

from abtest.config import settings
from abtest.experimentation.errors import InvalidStateError, TargetingError
from abtest.experimentation.models import (
    Assignment,
    TargetingOperator,
    TargetingRule,
    Variant,
)
from abtest.experimentation.registry import ExperimentRegistry
from abtest.experimentation.store import DocumentStore

NUM_BUCKETS = 100
_COLLECTION_TYPES = (list, tuple, set, frozenset)


def compute_bucket(user_id: str, experiment_id: str) -> int:
    """Compute consistent bucket for a user-experiment pair.

    Returns:
        Bucket in range [0, 100).
    """
    hash_input = f"{user_id}:{experiment_id}"
    hash_bytes = hashlib.md5(hash_input.encode()).digest()
    hash_int = int.from_bytes(hash_bytes[:4], byteorder="big")
    return hash_int % NUM_BUCKETS


def select_variant(variants: list[Variant], bucket: int) -> Variant:
    """Select the variant whose cumulative weight range contains the bucket."""
    cumulative = 0
    for variant in variants:
        cumulative += variant.weight
        if bucket < cumulative:
            return variant

    # Only reachable if weights were altered to sum below 100 after creation
    return variants[0]


def values_equal(a: Any, b: Any) -> bool:
    """Equality that never equates booleans with numbers (True != 1)."""
    if isinstance(a, bool) != isinstance(b, bool):
        return False
    return a == b


def rule_matches(rule: TargetingRule, context: Mapping[str, Any]) -> bool:
    """Evaluate one targeting rule. Unknown operators never match."""
    if rule.type not in context:
        return False
    user_value = context[rule.type]

    try:
        operator = TargetingOperator(rule.operator)
    except ValueError:
        return False

    if operator is TargetingOperator.EQUALS:
        return values_equal(user_value, rule.value)
    if operator is TargetingOperator.NOT_EQUALS:
        return not values_equal(user_value, rule.value)
    if not isinstance(rule.value, _COLLECTION_TYPES):
        return False
    is_member = any(values_equal(user_value, v) for v in rule.value)
    if operator is TargetingOperator.IN:
        return is_member
    return not is_member


def matches_targeting_rules(
    context: Mapping[str, Any] | None,
    rules: list[TargetingRule] | None,
) -> bool:
    """Check that every rule matches the user context."""
    if not rules:
        return True
    context = context or {}
    return all(rule_matches(rule, context) for rule in rules)


def assignment_doc_id(experiment_id: str, user_id: str) -> str:
    """Document id enforcing one assignment per (experiment, user).

    The experiment id is length-prefixed so ids containing ':' cannot
    collide, e.g. ("E", "google:123") and ("E:google", "123").
    """
    return f"{len(experiment_id)}:{experiment_id}:{user_id}"


class AssignmentResolver:
    """Assigns users to variants of active experiments, exactly once."""

    def __init__(
        self,
        store: DocumentStore,
        registry: ExperimentRegistry,
        clock: Callable[[], datetime],
        collection: str | None = None,
    ):
        self.store = store
        self.registry = registry
        self.clock = clock
        self.collection = collection or settings.assignments_collection

    async def get_assignment(self, user_id: str, experiment_id: str) -> Assignment | None:
        """Return the stored assignment for the pair, if any."""
        data = await self.store.get(self.collection, assignment_doc_id(experiment_id, user_id))
        if data is None:
            return None
        if data.get("experimentId") != experiment_id or data.get("userId") != user_id:
            logger.warning(
                f"Assignment document for {experiment_id}/{user_id} belongs to "
                f"{data.get('experimentId')}/{data.get('userId')}, ignoring it"
            )
            return None
        return Assignment.from_dict(data)

    async def assign_user_to_experiment(
        self,
        user_id: str,
        experiment_id: str,
        user_context: Mapping[str, Any] | None = None,
    ) -> Assignment:
        """Get or create the user's assignment.

        Args:
            user_id: User ID.
            experiment_id: Experiment ID.
            user_context: Attributes checked against targeting rules.

        Returns:
            The stored assignment, existing or new.

        Raises:
            NotFoundError: Experiment does not exist.
            InvalidStateError: Experiment is not active.
            TargetingError: User context fails a targeting rule.
        """
        existing = await self.get_assignment(user_id, experiment_id)
        if existing is not None:
            logger.debug(
                f"User {user_id} already in {experiment_id}/{existing.variant_id}"
            )
            return existing

        experiment = await self.registry.get_experiment(experiment_id)

        if not experiment.is_active:
            logger.warning(f"Assignment to inactive experiment {experiment_id} rejected")
            raise InvalidStateError("Experiment is not active")

        if not matches_targeting_rules(user_context, experiment.targeting_rules):
            logger.warning(
                f"User {user_id} does not meet targeting for experiment {experiment_id}"
            )
            raise TargetingError("User does not meet targeting criteria")

        variant = select_variant(
            experiment.variants, compute_bucket(user_id, experiment_id)
        )
        assignment = Assignment(
            experiment_id=experiment_id,
            user_id=user_id,
            variant_id=variant.id,
            assigned_at=self.clock(),
        )

        doc_id = assignment_doc_id(experiment_id, user_id)
        created = await self.store.create(self.collection, doc_id, assignment.to_dict())
        if not created:
            # A concurrent request stored first; that assignment wins
            stored = await self.get_assignment(user_id, experiment_id)
            if stored is None:
                raise InvalidStateError(
                    f"Assignment document {doc_id} is held by another user or experiment"
                )
            logger.debug(f"Lost assignment race for {doc_id}, using stored variant")
            return stored

        logger.info(f"Assigned user {user_id} to {experiment_id}/{variant.id}")
        return assignment

    async def get_user_experiments(self, user_id: str) -> list[Assignment]:
        """All assignments held by a user, in store order."""
        docs = await self.store.query(self.collection, "userId", user_id)
        return [Assignment.from_dict(d) for d in docs]
