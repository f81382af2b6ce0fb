"""Conversion tracking against existing assignments."""

from datetime import datetime
from typing import Callable

from loguru import logger

from abtest.config import settings
from abtest.experimentation.assignment import AssignmentResolver
from abtest.experimentation.errors import NotAssignedError
from abtest.experimentation.models import ConversionEvent
from abtest.experimentation.store import DocumentStore


class ConversionRecorder:
    """Appends conversion events under the user's assigned variant."""

    def __init__(
        self,
        store: DocumentStore,
        resolver: AssignmentResolver,
        clock: Callable[[], datetime],
        collection: str | None = None,
    ):
        self.store = store
        self.resolver = resolver
        self.clock = clock
        self.collection = collection or settings.conversions_collection

    async def track_conversion(
        self,
        user_id: str,
        experiment_id: str,
        event_name: str,
        value: float | None = None,
    ) -> ConversionEvent:
        """Log a conversion event for an assigned user.

        Raises:
            NotAssignedError: User has no assignment for the experiment.
        """
        assignment = await self.resolver.get_assignment(user_id, experiment_id)
        if assignment is None:
            logger.warning(
                f"Cannot track '{event_name}': user {user_id} "
                f"not assigned to experiment {experiment_id}"
            )
            raise NotAssignedError("User is not assigned to this experiment")

        event = ConversionEvent(
            experiment_id=experiment_id,
            user_id=user_id,
            variant_id=assignment.variant_id,
            event_name=event_name,
            value=value,
            timestamp=self.clock(),
        )
        await self.store.add(self.collection, event.to_dict())

        logger.debug(
            f"Conversion logged: {experiment_id}/{assignment.variant_id}/"
            f"{event_name}={value}"
        )
        return event
