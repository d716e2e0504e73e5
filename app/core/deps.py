from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.orm import Session
from typing import Optional
import uuid

from app.core.database import get_db
from app.services.budget_service import BudgetService
from app.services.update_tracker import UpdateTracker


async def get_current_user_id(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id")
) -> uuid.UUID:
    """Owner of the request, as resolved by the upstream gateway"""
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing user identity",
        )
    try:
        return uuid.UUID(x_user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user identity",
        )


def get_update_tracker(request: Request) -> UpdateTracker:
    return request.app.state.update_tracker


def get_budget_service(
    db: Session = Depends(get_db),
    tracker: UpdateTracker = Depends(get_update_tracker),
) -> BudgetService:
    return BudgetService(db, tracker=tracker)
