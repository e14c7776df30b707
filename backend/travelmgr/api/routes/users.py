"""
User directory routes.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List
from travelmgr.db.session import get_db
from travelmgr.schemas.user import UserResponse, UserSummary
from travelmgr.models.user import User
from travelmgr.api.dependencies import get_current_user
from travelmgr.services.user_service import search_by_email_substring

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserResponse)
def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current user information."""
    return current_user


@router.get("/search", response_model=List[UserSummary])
def search_users(
    email: str = Query("", description="Part of the email address, case-insensitive"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Find other users to add to a split expense or a group trip."""
    return search_by_email_substring(email, current_user.id, db)
