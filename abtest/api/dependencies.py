"""FastAPI dependencies."""

from functools import lru_cache

from abtest.experimentation import ExperimentEngine, InMemoryDocumentStore


@lru_cache
def get_engine() -> ExperimentEngine:
    """Engine shared by the API process.

    Backed by the in-memory store; deployments override this dependency
    with an engine over their own document store.
    """
    return ExperimentEngine(InMemoryDocumentStore())
