from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List, Optional
import uuid

from app.core.config import settings
from app.core.deps import get_budget_service, get_current_user_id, get_update_tracker
from app.core.exceptions import (
    AggregationFailureError,
    BudgetOverlapError,
    BudgetReactivationError,
    NotFoundError,
    ValidationError,
)
from app.schemas.budget import (
    BoundaryResult,
    Budget as BudgetSchema,
    BudgetCandidate,
    BudgetCreate,
    BudgetUpdate,
    BudgetUpdates,
    BudgetView,
    CategoryDeactivationResult,
    PortfolioSummary,
)
from app.services.budget_service import BudgetService
from app.services.update_tracker import UpdateTracker

router = APIRouter()


def _overlap_exception(e: BudgetOverlapError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail={
            "error": e.message,
            "error_code": e.error_code,
            "blocking_budget_id": str(e.blocking_budget_id),
            "blocking_period": e.blocking_period,
            "blocking_window": e.blocking_window,
        },
    )


def _aggregation_exception(e: AggregationFailureError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail={"error": e.message, "error_code": e.error_code, "retryable": True},
        headers={"Retry-After": str(settings.AGGREGATION_RETRY_AFTER_SECONDS)},
    )


@router.get("/", response_model=List[BudgetView])
def get_budgets(
    period: Optional[str] = Query(None),
    include_inactive: bool = Query(False),
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: BudgetService = Depends(get_budget_service),
):
    """Get the user's budgets with spending data"""
    try:
        return service.list_budgets_with_spend(user_id, period=period, include_inactive=include_inactive)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AggregationFailureError as e:
        raise _aggregation_exception(e)


@router.get("/summary", response_model=PortfolioSummary)
def get_budget_summary(
    period: str = Query("monthly"),
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: BudgetService = Depends(get_budget_service),
):
    """Get budget totals and status counts for the dashboard"""
    try:
        return service.get_summary(user_id, period)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AggregationFailureError as e:
        raise _aggregation_exception(e)


@router.get("/updates", response_model=BudgetUpdates)
def check_budget_updates(
    since: Optional[int] = Query(None, ge=0),
    user_id: uuid.UUID = Depends(get_current_user_id),
    tracker: UpdateTracker = Depends(get_update_tracker),
):
    """Tell a polling client whether its budget data is stale"""
    return BudgetUpdates(
        has_updates=tracker.has_updates(user_id, since),
        version=tracker.version(user_id),
    )


@router.post("/validate", response_model=BoundaryResult)
def validate_budget_window(
    candidate: BudgetCandidate,
    budget_id: Optional[uuid.UUID] = Query(None),
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: BudgetService = Depends(get_budget_service),
):
    """Dry-run a budget window: derived end date or the reason it is rejected"""
    try:
        return service.validate_and_derive_boundaries(user_id, candidate, budget_id)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except BudgetOverlapError as e:
        raise _overlap_exception(e)


@router.delete("/clear-category/{category_id}", response_model=CategoryDeactivationResult)
def clear_category_budgets(
    category_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: BudgetService = Depends(get_budget_service),
):
    """Deactivate all budgets of a category"""
    modified = service.deactivate_category_budgets(user_id, category_id)
    return CategoryDeactivationResult(
        message=f"Deactivated {modified} budgets for the category",
        modified_count=modified,
    )


@router.get("/{budget_id}", response_model=BudgetView)
def get_budget(
    budget_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: BudgetService = Depends(get_budget_service),
):
    """Get a specific budget with spending data"""
    try:
        return service.get_budget_with_spend(user_id, budget_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AggregationFailureError as e:
        raise _aggregation_exception(e)


@router.post("/", response_model=BudgetSchema, status_code=status.HTTP_201_CREATED)
def create_budget(
    budget_create: BudgetCreate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: BudgetService = Depends(get_budget_service),
):
    """Create a new budget"""
    try:
        return service.create_budget(user_id, budget_create)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except BudgetOverlapError as e:
        raise _overlap_exception(e)


@router.put("/{budget_id}", response_model=BudgetSchema)
def update_budget(
    budget_id: uuid.UUID,
    budget_update: BudgetUpdate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: BudgetService = Depends(get_budget_service),
):
    """Update a budget"""
    try:
        return service.update_budget(user_id, budget_id, budget_update)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except BudgetOverlapError as e:
        raise _overlap_exception(e)
    except BudgetReactivationError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.delete("/{budget_id}")
def delete_budget(
    budget_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: BudgetService = Depends(get_budget_service),
):
    """Delete a budget (soft delete)"""
    try:
        service.deactivate_budget(user_id, budget_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"message": "Budget deleted successfully"}
