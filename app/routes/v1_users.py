"""
User routes - profiles, completeness, search and idea matches

Endpoints:
- GET   /api/v1/users/search?q=           - find other users by name/username
- GET   /api/v1/users/{id}                - view a profile (no auth required)
- PATCH /api/v1/users/{id}                - edit own profile
- GET   /api/v1/users/{id}/completeness   - completeness score and tips
- PATCH /api/v1/users/{id}/completeness   - store a cached completeness value
- GET   /api/v1/users/{id}/matches        - ideas matching own skills
- GET   /api/v1/users/{id}/contributions  - own contribution requests by status
"""
import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.models import (
    UserSummary, UserProfileResponse, ProfileUpdateRequest,
    CompletenessResponse, CompletenessUpdateRequest, IdeaMatchResponse,
    ContributionResponse, UserContributionsResponse,
)
from app.db.database import get_db
from app.db.models import User, ContributionRequest
from app.db.repositories import UserRepository, IdeaRepository, parse_uuid
from app.auth.auth import get_current_user
from app.core.matching import match_ideas
from app.utils.completeness import calculate_completeness, completeness_breakdown
from app.utils.activity import track_activity, ActivityType

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/users", tags=["users"])

MATCH_LIMIT = 10
SEARCH_LIMIT = 5

PROFILE_TEXT_FIELDS = ("name", "username", "bio", "image", "location", "website")


def user_summary(user: User) -> UserSummary:
    return UserSummary(
        id=str(user.id),
        name=user.name,
        username=user.username,
        image=user.image,
        skills=user.skill_names,
    )


def user_profile(user: User) -> UserProfileResponse:
    return UserProfileResponse(
        id=str(user.id),
        name=user.name,
        username=user.username,
        bio=user.bio,
        image=user.image,
        location=user.location,
        website=user.website,
        skills=user.skill_names,
        industries=user.industry_names,
        profile_completeness=user.profile_completeness or 0,
        created_at=user.created_at.isoformat() if user.created_at else None,
    )


def _require_self(current_user: dict, user_id: str):
    requester = parse_uuid(current_user["user_id"])
    if requester is None or requester != parse_uuid(user_id):
        logger.warning(f"User {current_user['user_id']} tried to access user {user_id}")
        raise HTTPException(status_code=403, detail="Forbidden")


def _load_user(db: Session, user_id: str) -> User:
    user = UserRepository(db).get(user_id)
    if not user:
        logger.warning(f"User not found: {user_id}")
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("/search", response_model=List[UserSummary])
def search_users(
    q: str = "",
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    GET /api/v1/users/search?q=
    Case-insensitive match on name or username, excluding the requester
    """
    if not q.strip():
        return []

    logger.info(f"=== USER SEARCH === Query: {q!r}, Requester: {current_user['user_id']}")
    try:
        repo = UserRepository(db)
        requester = repo.get(current_user["user_id"])
        users = repo.search(q, exclude_user_id=requester.id if requester else None, limit=SEARCH_LIMIT)
        return [user_summary(u) for u in users]
    except Exception as e:
        logger.error(f"=== USER SEARCH ERROR === Query: {q!r}, Error: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to search users")


@router.get("/{user_id}", response_model=UserProfileResponse)
def get_user(user_id: str, db: Session = Depends(get_db)):
    """
    GET /api/v1/users/{id}
    Public profile view - NO AUTHENTICATION REQUIRED
    """
    try:
        return user_profile(_load_user(db, user_id))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"=== GET USER ERROR === User: {user_id}, Error: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to load user")


@router.patch("/{user_id}", response_model=UserProfileResponse)
def update_user(
    user_id: str,
    request: ProfileUpdateRequest,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    PATCH /api/v1/users/{id}
    Update profile fields and skill/industry sets, then recompute completeness
    """
    _require_self(current_user, user_id)
    logger.info(f"=== UPDATE PROFILE START === User ID: {user_id}")

    try:
        repo = UserRepository(db)
        user = _load_user(db, user_id)

        if request.username and repo.username_taken(request.username.strip(), exclude_user_id=user.id):
            logger.warning(f"Username already taken: {request.username}")
            raise HTTPException(status_code=400, detail="Username is already taken")

        for field in PROFILE_TEXT_FIELDS:
            value = getattr(request, field)
            if value is not None:
                # Empty string clears the field
                setattr(user, field, value.strip() or None)

        if request.skills is not None:
            user.skills = repo.get_or_create_skills(request.skills)
        if request.industries is not None:
            user.industries = repo.get_or_create_industries(request.industries)

        completeness, tips = calculate_completeness(user)
        user.profile_completeness = completeness
        logger.info(f"Profile completeness: {completeness}% - Tips: {tips}")

        db.commit()
        db.refresh(user)

        track_activity(
            db=db,
            activity_type=ActivityType.PROFILE_UPDATED,
            user_id=user.id,
            description="Updated profile",
            metadata={"completeness": completeness},
        )

        logger.info(f"=== UPDATE PROFILE SUCCESS === User: {user_id}, Completeness: {completeness}%")
        return user_profile(user)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"=== UPDATE PROFILE ERROR === User: {user_id}, Error: {str(e)}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Failed to update profile: {str(e)}")


@router.get("/{user_id}/completeness", response_model=CompletenessResponse)
def get_completeness(
    user_id: str,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    GET /api/v1/users/{id}/completeness
    Calculate and return profile completeness with breakdown and tips
    """
    _require_self(current_user, user_id)

    try:
        user = _load_user(db, user_id)
        completeness, tips = calculate_completeness(user)
        logger.info(f"Completeness for user {user_id}: {completeness}%, {len(tips)} tips")
        return CompletenessResponse(
            completeness=completeness,
            breakdown=completeness_breakdown(user),
            tips=tips,
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"=== GET COMPLETENESS ERROR === User: {user_id}, Error: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to get completeness: {str(e)}")


@router.patch("/{user_id}/completeness")
def update_completeness(
    user_id: str,
    request: CompletenessUpdateRequest,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    PATCH /api/v1/users/{id}/completeness
    Persist a cached completeness value computed by the client
    """
    _require_self(current_user, user_id)

    try:
        user = _load_user(db, user_id)
        user.profile_completeness = request.completeness
        db.commit()
        return {"success": True}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"=== UPDATE COMPLETENESS ERROR === User: {user_id}, Error: {str(e)}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Failed to update completeness")


@router.get("/{user_id}/matches", response_model=List[IdeaMatchResponse])
def get_idea_matches(
    user_id: str,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    GET /api/v1/users/{id}/matches
    Published public ideas ranked by overlap with the user's skills
    """
    _require_self(current_user, user_id)
    logger.info(f"=== USER MATCHES START === User ID: {user_id}")

    try:
        user = _load_user(db, user_id)
        pool = IdeaRepository(db).eligible_for_user(user)
        matches = match_ideas(user.skill_names, pool, limit=MATCH_LIMIT)

        logger.info(f"=== USER MATCHES SUCCESS === User: {user_id}, Pool: {len(pool)}, Matches: {len(matches)}")
        return [
            IdeaMatchResponse(
                id=str(m.subject.id),
                title=m.subject.title,
                overlap_count=m.overlap_count,
                match_score=m.score,
                required_skills=m.subject.skill_names,
                matched_skills=m.matched_skills,
            )
            for m in matches
        ]
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"=== USER MATCHES ERROR === User: {user_id}, Error: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to compute matches")


@router.get("/{user_id}/contributions", response_model=UserContributionsResponse)
def get_user_contributions(
    user_id: str,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    GET /api/v1/users/{id}/contributions
    The user's own contribution requests grouped by status
    """
    _require_self(current_user, user_id)

    try:
        user = _load_user(db, user_id)
        requests = (
            db.query(ContributionRequest)
            .filter(ContributionRequest.user_id == user.id)
            .order_by(ContributionRequest.created_at.desc())
            .all()
        )

        grouped = {"pending": [], "accepted": [], "rejected": []}
        for req in requests:
            grouped[req.status.lower()].append(ContributionResponse(
                id=str(req.id),
                idea_id=str(req.idea_id),
                user_id=str(req.user_id),
                message=req.message,
                status=req.status,
                created_at=req.created_at.isoformat() if req.created_at else None,
            ))

        logger.info(f"Contributions for user {user_id}: " + ", ".join(f"{k}={len(v)}" for k, v in grouped.items()))
        return UserContributionsResponse(**grouped)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"=== USER CONTRIBUTIONS ERROR === User: {user_id}, Error: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to load contributions")
