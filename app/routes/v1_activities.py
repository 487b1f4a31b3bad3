"""
Activity feed

Endpoints:
- GET /api/v1/activities?limit=   - recent activity by or about the requester
"""
import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from app.models import ActivityResponse
from app.db.database import get_db
from app.db.models import Activity, Idea
from app.db.repositories import parse_uuid
from app.auth.auth import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/activities", tags=["activities"])

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


def activity_response(activity: Activity) -> ActivityResponse:
    return ActivityResponse(
        id=str(activity.id),
        type=activity.type,
        description=activity.description,
        user_id=str(activity.user_id) if activity.user_id else None,
        idea_id=str(activity.idea_id) if activity.idea_id else None,
        metadata=activity.metadata_json,
        created_at=activity.created_at.isoformat() if activity.created_at else None,
    )


@router.get("", response_model=List[ActivityResponse])
def list_activities(
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    GET /api/v1/activities
    The requester's own activity plus activity on ideas they authored, newest first
    """
    user_id = parse_uuid(current_user["user_id"])

    try:
        own_ideas = select(Idea.id).where(Idea.author_id == user_id)
        activities = (
            db.query(Activity)
            .filter(or_(Activity.user_id == user_id, Activity.idea_id.in_(own_ideas)))
            .order_by(Activity.created_at.desc())
            .limit(limit)
            .all()
        )
        logger.info(f"Activity feed for user {user_id}: {len(activities)} items")
        return [activity_response(a) for a in activities]
    except Exception as e:
        logger.error(f"=== ACTIVITY FEED ERROR === User: {user_id}, Error: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch activities")
