"""API routes for A/B experiments.

Provides endpoints for creating experiments, assigning users, tracking
conversions and reading results.
"""

from fastapi import APIRouter, Depends, HTTPException

from abtest.api.dependencies import get_engine
from abtest.api.schemas.experiments import (
    AssignmentRequest,
    AssignmentResponse,
    ConversionRequest,
    ConversionResponse,
    ExperimentCreate,
    ExperimentResponse,
    ExperimentResultsResponse,
    StatusUpdate,
)
from abtest.experimentation import (
    DocumentNotFoundError,
    ExperimentEngine,
    ExperimentError,
    InvalidStateError,
    NotAssignedError,
    NotFoundError,
    TargetingError,
    ValidationError,
)

router = APIRouter(prefix="/experiments", tags=["experiments"])

ERROR_STATUS_CODES: dict[type[ExperimentError], int] = {
    ValidationError: 400,
    TargetingError: 403,
    NotFoundError: 404,
    InvalidStateError: 409,
    NotAssignedError: 409,
}


def to_http_error(error: ExperimentError) -> HTTPException:
    """Translate an engine error into an HTTP error."""
    for error_type, status_code in ERROR_STATUS_CODES.items():
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(status_code=400, detail=str(error))


@router.post("", response_model=ExperimentResponse, status_code=201)
async def create_experiment(
    request: ExperimentCreate,
    engine: ExperimentEngine = Depends(get_engine),
):
    """Create a new experiment.

    Args:
        request: Experiment configuration.
    """
    try:
        experiment_id = await engine.create_experiment(request.to_experiment())
        experiment = await engine.get_experiment(experiment_id)
    except ExperimentError as e:
        raise to_http_error(e)

    return ExperimentResponse.from_experiment(experiment)


@router.get("/{experiment_id}", response_model=ExperimentResponse)
async def get_experiment(
    experiment_id: str,
    engine: ExperimentEngine = Depends(get_engine),
):
    """Get experiment details."""
    try:
        experiment = await engine.get_experiment(experiment_id)
    except ExperimentError as e:
        raise to_http_error(e)

    return ExperimentResponse.from_experiment(experiment)


@router.patch("/{experiment_id}/status")
async def update_experiment_status(
    experiment_id: str,
    request: StatusUpdate,
    engine: ExperimentEngine = Depends(get_engine),
):
    """Change experiment status (draft, active, paused, completed)."""
    try:
        await engine.update_experiment_status(experiment_id, request.status)
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail="Experiment not found")

    return {"status": request.status, "experiment": experiment_id}


@router.post("/{experiment_id}/assignments", response_model=AssignmentResponse)
async def assign_user(
    experiment_id: str,
    request: AssignmentRequest,
    engine: ExperimentEngine = Depends(get_engine),
):
    """Get or create the user's variant assignment."""
    try:
        assignment = await engine.assign_user_to_experiment(
            request.user_id, experiment_id, request.context
        )
    except ExperimentError as e:
        raise to_http_error(e)

    return AssignmentResponse.from_assignment(assignment)


@router.post(
    "/{experiment_id}/conversions",
    response_model=ConversionResponse,
    status_code=201,
)
async def track_conversion(
    experiment_id: str,
    request: ConversionRequest,
    engine: ExperimentEngine = Depends(get_engine),
):
    """Record a conversion for an assigned user."""
    try:
        event = await engine.track_conversion(
            request.user_id, experiment_id, request.event_name, request.value
        )
    except ExperimentError as e:
        raise to_http_error(e)

    return ConversionResponse.from_event(event)


@router.get("/{experiment_id}/results", response_model=ExperimentResultsResponse)
async def get_experiment_results(
    experiment_id: str,
    engine: ExperimentEngine = Depends(get_engine),
):
    """Per-variant metrics, confidence level and winner."""
    try:
        results = await engine.get_experiment_results(experiment_id)
    except ExperimentError as e:
        raise to_http_error(e)

    return ExperimentResultsResponse.from_results(results)
