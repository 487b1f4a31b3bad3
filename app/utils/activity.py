"""
Activity tracking for social interactions
"""
import logging
from datetime import datetime
from typing import Optional, Dict, Any
from sqlalchemy.orm import Session

from app.db.models import Activity
from app.db.repositories import parse_uuid

logger = logging.getLogger(__name__)


# Activity types (for consistency)
class ActivityType:
    IDEA_CREATED = "IDEA_CREATED"
    CONTRIBUTION_REQUESTED = "CONTRIBUTION_REQUESTED"
    CONTRIBUTION_WITHDRAWN = "CONTRIBUTION_WITHDRAWN"
    CONTRIBUTION_ACCEPTED = "CONTRIBUTION_ACCEPTED"
    CONTRIBUTION_REJECTED = "CONTRIBUTION_REJECTED"
    IDEA_UPDATED = "IDEA_UPDATED"
    PROFILE_UPDATED = "PROFILE_UPDATED"


def track_activity(
    db: Session,
    activity_type: str,
    user_id=None,
    idea_id=None,
    description: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Optional[Activity]:
    """
    Record an activity row.

    Failures are logged and rolled back, never raised: the request that
    triggered the activity has already succeeded.
    """
    try:
        activity = Activity(
            type=activity_type,
            description=description,
            user_id=parse_uuid(user_id) if user_id else None,
            idea_id=parse_uuid(idea_id) if idea_id else None,
            metadata_json=metadata,
            created_at=datetime.utcnow(),
        )
        db.add(activity)
        db.commit()

        logger.debug(f"Activity tracked: {activity_type} for user {user_id}")
        return activity

    except Exception as e:
        logger.error(f"Failed to track activity {activity_type}: {e}")
        db.rollback()
        return None
