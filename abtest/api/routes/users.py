"""User-scoped experiment endpoints."""

from fastapi import APIRouter, Depends

from abtest.api.dependencies import get_engine
from abtest.api.schemas.experiments import AssignmentResponse
from abtest.experimentation import ExperimentEngine

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/{user_id}/experiments", response_model=list[AssignmentResponse])
async def get_user_experiments(
    user_id: str,
    engine: ExperimentEngine = Depends(get_engine),
):
    """List every experiment assignment held by a user."""
    assignments = await engine.get_user_experiments(user_id)
    return [AssignmentResponse.from_assignment(a) for a in assignments]
