"""
User directory lookups.
"""
from typing import Iterable, List
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from travelmgr.core.config import settings
from travelmgr.core.exceptions import StoreError, ValidationError
from travelmgr.models.user import User
import logging

logger = logging.getLogger(__name__)


def search_by_email_substring(query: str, exclude_user_id: int, db: Session) -> List[User]:
    """
    Case-insensitive partial match on email, excluding the requesting user.
    Returns at most ``settings.USER_SEARCH_LIMIT`` users.
    """
    query = (query or "").strip()
    if not query:
        raise ValidationError("Email query parameter is required")

    # Escape LIKE wildcards so the query is matched literally
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    try:
        return db.query(User).filter(
            User.email.ilike(f"%{escaped}%", escape="\\"),
            User.id != exclude_user_id,
            User.is_active.is_(True),
        ).order_by(User.email).limit(settings.USER_SEARCH_LIMIT).all()
    except SQLAlchemyError as e:
        logger.error(f"User search failed: {e}", exc_info=True)
        raise StoreError("A storage error occurred")


def ensure_users_exist(user_ids: Iterable[int], db: Session) -> None:
    """Reject references to users that are not in the directory."""
    wanted = set(user_ids)
    if not wanted:
        return
    try:
        found = {row.id for row in db.query(User.id).filter(User.id.in_(wanted)).all()}
    except SQLAlchemyError as e:
        logger.error(f"User lookup failed: {e}", exc_info=True)
        raise StoreError("A storage error occurred")
    missing = sorted(wanted - found)
    if missing:
        raise ValidationError(
            f"Unknown user(s): {', '.join(str(uid) for uid in missing)}",
            details={"missing_user_ids": missing},
        )
