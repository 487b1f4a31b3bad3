"""
Idea routes - publishing, visibility, skill matches and social interactions

Endpoints:
- GET    /api/v1/ideas                      - browse visible ideas (auth optional)
- POST   /api/v1/ideas                      - publish an idea
- GET    /api/v1/ideas/{id}                 - view one idea
- PUT    /api/v1/ideas/{id}                 - author edits an idea
- POST   /api/v1/ideas/{id}/visibility      - author toggles PUBLIC/PRIVATE
- GET    /api/v1/ideas/{id}/matches         - author sees matching users
- POST/DELETE /api/v1/ideas/{id}/bookmark,  GET /bookmark/check
- POST/DELETE /api/v1/ideas/{id}/spark,     GET /spark/check
- POST/DELETE/GET /api/v1/ideas/{id}/contribute
- GET    /api/v1/ideas/{id}/contributions   - author lists received requests
- POST   /api/v1/ideas/{id}/contributions/{request_id}/respond - accept or reject
"""
import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.models import (
    IdeaCreateRequest, IdeaUpdateRequest, IdeaResponse, VisibilityUpdateRequest,
    CandidateMatchResponse, ContributionCreateRequest, ContributionResponse,
    ContributionDecisionRequest,
)
from app.db.database import get_db
from app.db.models import (
    Idea, Skill, Bookmark, Spark, ContributionRequest,
    IdeaStatus, IdeaVisibility, ContributionStatus,
)
from app.db.repositories import UserRepository, IdeaRepository, parse_uuid
from app.auth.auth import get_current_user, get_optional_user
from app.core.matching import match_candidates
from app.routes.v1_users import user_summary
from app.utils.activity import track_activity, ActivityType

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/ideas", tags=["ideas"])

LIST_LIMIT = 50
MATCH_LIMIT = 10

SORT_ORDERS = {
    "newest": Idea.created_at.desc(),
    "oldest": Idea.created_at.asc(),
    "most_sparked": Idea.spark_count.desc(),
}


def idea_response(idea: Idea) -> IdeaResponse:
    return IdeaResponse(
        id=str(idea.id),
        title=idea.title,
        description=idea.description,
        category=idea.category,
        status=idea.status,
        visibility=idea.visibility,
        skills=idea.skill_names,
        spark_count=idea.spark_count or 0,
        author=user_summary(idea.author),
        created_at=idea.created_at.isoformat() if idea.created_at else None,
    )


def contribution_response(req: ContributionRequest) -> ContributionResponse:
    return ContributionResponse(
        id=str(req.id),
        idea_id=str(req.idea_id),
        user_id=str(req.user_id),
        message=req.message,
        status=req.status,
        created_at=req.created_at.isoformat() if req.created_at else None,
    )


def _requester_id(current_user: Optional[dict]):
    if not current_user:
        return None
    return parse_uuid(current_user["user_id"])


def _can_view(idea: Idea, viewer_id) -> bool:
    if viewer_id is not None and idea.author_id == viewer_id:
        return True
    return idea.status == IdeaStatus.PUBLISHED and idea.visibility == IdeaVisibility.PUBLIC


def _load_idea(db: Session, idea_id: str) -> Idea:
    idea = IdeaRepository(db).get(idea_id)
    if not idea:
        logger.warning(f"Idea not found: {idea_id}")
        raise HTTPException(status_code=404, detail="Idea not found")
    return idea


def _load_requester(db: Session, current_user: dict):
    user = UserRepository(db).get(current_user["user_id"])
    if not user:
        logger.warning(f"Authenticated user no longer exists: {current_user['user_id']}")
        raise HTTPException(status_code=404, detail="User not found")
    return user


# ============================================
# Ideas
# ============================================

@router.get("", response_model=List[IdeaResponse])
def list_ideas(
    search: Optional[str] = None,
    category: Optional[str] = None,
    skills: Optional[str] = None,
    sort: str = "newest",
    current_user: Optional[dict] = Depends(get_optional_user),
    db: Session = Depends(get_db)
):
    """
    GET /api/v1/ideas
    Published ideas visible to the requester, newest first by default
    """
    try:
        query = IdeaRepository(db).visible_query(_requester_id(current_user))

        if search and search.strip():
            term = search.strip().lower()
            query = query.filter(or_(
                func.lower(Idea.title).contains(term, autoescape=True),
                func.lower(Idea.description).contains(term, autoescape=True),
            ))
        if category:
            query = query.filter(Idea.category == category)
        if skills:
            names = [s.strip().lower() for s in skills.split(",") if s.strip()]
            if names:
                query = query.filter(Idea.skills.any(func.lower(Skill.name).in_(names)))

        order = SORT_ORDERS.get(sort, SORT_ORDERS["newest"])
        ideas = query.order_by(order, Idea.created_at.desc()).limit(LIST_LIMIT).all()
        return [idea_response(i) for i in ideas]
    except Exception as e:
        logger.error(f"=== LIST IDEAS ERROR === Error: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch ideas")


@router.post("", response_model=IdeaResponse)
def create_idea(
    request: IdeaCreateRequest,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    POST /api/v1/ideas
    Publish a new idea with its required skills
    """
    logger.info(f"=== CREATE IDEA START === User ID: {current_user['user_id']}")

    try:
        author = _load_requester(db, current_user)
        idea = Idea(
            author_id=author.id,
            title=request.title,
            description=request.description,
            category=request.category,
            status=request.status,
            visibility=request.visibility,
        )
        idea.skills = UserRepository(db).get_or_create_skills(request.skills)
        db.add(idea)
        db.commit()
        db.refresh(idea)

        track_activity(
            db=db,
            activity_type=ActivityType.IDEA_CREATED,
            user_id=author.id,
            idea_id=idea.id,
            description=f'Created "{idea.title}"',
        )

        logger.info(f"=== CREATE IDEA SUCCESS === Idea: {idea.id}, Skills: {idea.skill_names}")
        return idea_response(idea)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"=== CREATE IDEA ERROR === User: {current_user['user_id']}, Error: {str(e)}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Failed to create idea: {str(e)}")


@router.get("/{idea_id}", response_model=IdeaResponse)
def get_idea(
    idea_id: str,
    current_user: Optional[dict] = Depends(get_optional_user),
    db: Session = Depends(get_db)
):
    """
    GET /api/v1/ideas/{id}
    Private and draft ideas are only visible to their author
    """
    try:
        idea = _load_idea(db, idea_id)
        if not _can_view(idea, _requester_id(current_user)):
            # Don't reveal that a private idea exists
            raise HTTPException(status_code=404, detail="Idea not found")
        return idea_response(idea)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"=== GET IDEA ERROR === Idea: {idea_id}, Error: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to load idea")


@router.put("/{idea_id}", response_model=IdeaResponse)
def update_idea(
    idea_id: str,
    request: IdeaUpdateRequest,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    PUT /api/v1/ideas/{id}
    Author edits text fields, status or the required skill set
    """
    logger.info(f"=== UPDATE IDEA START === Idea: {idea_id}, Requester: {current_user['user_id']}")

    try:
        idea = _load_idea(db, idea_id)
        if idea.author_id != _requester_id(current_user):
            logger.warning(f"Non-owner {current_user['user_id']} tried to edit idea {idea_id}")
            raise HTTPException(status_code=403, detail="Only the idea owner can edit it")

        changed = []
        for field in ("title", "description", "category", "status"):
            value = getattr(request, field)
            if value is not None:
                setattr(idea, field, value)
                changed.append(field)
        if request.skills is not None:
            idea.skills = UserRepository(db).get_or_create_skills(request.skills)
            changed.append("skills")

        db.commit()
        db.refresh(idea)

        track_activity(
            db=db,
            activity_type=ActivityType.IDEA_UPDATED,
            user_id=idea.author_id,
            idea_id=idea.id,
            description=f'Updated "{idea.title}"',
            metadata={"fields": changed},
        )

        logger.info(f"=== UPDATE IDEA SUCCESS === Idea: {idea_id}, Changed: {changed}")
        return idea_response(idea)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"=== UPDATE IDEA ERROR === Idea: {idea_id}, Error: {str(e)}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Failed to update idea: {str(e)}")


@router.post("/{idea_id}/visibility", response_model=IdeaResponse)
def update_visibility(
    idea_id: str,
    request: VisibilityUpdateRequest,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    POST /api/v1/ideas/{id}/visibility
    Author switches an idea between PUBLIC and PRIVATE
    """
    try:
        idea = _load_idea(db, idea_id)
        if idea.author_id != _requester_id(current_user):
            raise HTTPException(status_code=403, detail="Only the idea owner can change visibility")

        idea.visibility = request.visibility
        db.commit()
        db.refresh(idea)
        logger.info(f"Idea {idea_id} visibility set to {idea.visibility}")
        return idea_response(idea)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"=== VISIBILITY ERROR === Idea: {idea_id}, Error: {str(e)}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Failed to update visibility")


@router.get("/{idea_id}/matches", response_model=List[CandidateMatchResponse])
def get_skill_matches(
    idea_id: str,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    GET /api/v1/ideas/{id}/matches
    Users whose skills overlap the idea's required skills - author only
    """
    logger.info(f"=== SKILL MATCHES START === Idea: {idea_id}, Requester: {current_user['user_id']}")

    try:
        idea = _load_idea(db, idea_id)
        if idea.author_id != _requester_id(current_user):
            logger.warning(f"Non-owner {current_user['user_id']} requested matches for idea {idea_id}")
            raise HTTPException(status_code=403, detail="Only the idea owner can view skill matches")

        candidates = UserRepository(db).skill_candidates(idea)
        matches = match_candidates(idea.skill_names, candidates, limit=MATCH_LIMIT)

        logger.info(f"=== SKILL MATCHES SUCCESS === Idea: {idea_id}, Candidates: {len(candidates)}, Matches: {len(matches)}")
        return [
            CandidateMatchResponse(
                user=user_summary(m.subject),
                overlap_count=m.overlap_count,
                match_score=m.score,
                matched_skills=m.matched_skills,
                additional_skills=m.additional_skills,
            )
            for m in matches
        ]
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"=== SKILL MATCHES ERROR === Idea: {idea_id}, Error: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to compute matches")


# ============================================
# Bookmarks
# ============================================

def _find_bookmark(db: Session, user_id, idea_id) -> Optional[Bookmark]:
    return db.query(Bookmark).filter(Bookmark.user_id == user_id, Bookmark.idea_id == idea_id).first()


@router.post("/{idea_id}/bookmark")
def create_bookmark(
    idea_id: str,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        user = _load_requester(db, current_user)
        idea = _load_idea(db, idea_id)
        if not _can_view(idea, user.id):
            raise HTTPException(status_code=404, detail="Idea not found")
        if _find_bookmark(db, user.id, idea.id):
            raise HTTPException(status_code=400, detail="Already bookmarked")

        bookmark = Bookmark(user_id=user.id, idea_id=idea.id)
        db.add(bookmark)
        db.commit()
        logger.info(f"User {user.id} bookmarked idea {idea.id}")
        return {"id": str(bookmark.id), "idea_id": str(idea.id), "user_id": str(user.id)}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating bookmark for idea {idea_id}: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/{idea_id}/bookmark")
def delete_bookmark(
    idea_id: str,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        bookmark = _find_bookmark(db, _requester_id(current_user), parse_uuid(idea_id))
        if not bookmark:
            raise HTTPException(status_code=404, detail="Bookmark not found")

        db.delete(bookmark)
        db.commit()
        return {"message": "Bookmark removed"}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting bookmark for idea {idea_id}: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/{idea_id}/bookmark/check")
def check_bookmark(
    idea_id: str,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    bookmark = _find_bookmark(db, _requester_id(current_user), parse_uuid(idea_id))
    return {"isBookmarked": bookmark is not None}


# ============================================
# Sparks
# ============================================

def _find_spark(db: Session, user_id, idea_id) -> Optional[Spark]:
    return db.query(Spark).filter(Spark.user_id == user_id, Spark.idea_id == idea_id).first()


@router.post("/{idea_id}/spark")
def create_spark(
    idea_id: str,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        user = _load_requester(db, current_user)
        idea = _load_idea(db, idea_id)
        if not _can_view(idea, user.id):
            raise HTTPException(status_code=404, detail="Idea not found")
        if _find_spark(db, user.id, idea.id):
            raise HTTPException(status_code=400, detail="Already sparked")

        db.add(Spark(user_id=user.id, idea_id=idea.id))
        # Increment in SQL so concurrent sparks are not lost
        db.query(Idea).filter(Idea.id == idea.id).update(
            {Idea.spark_count: Idea.spark_count + 1}, synchronize_session=False
        )
        db.commit()
        logger.info(f"User {user.id} sparked idea {idea.id}, count: {idea.spark_count}")
        return {"message": "Sparked successfully", "spark_count": idea.spark_count}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error sparking idea {idea_id}: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/{idea_id}/spark")
def delete_spark(
    idea_id: str,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        idea = _load_idea(db, idea_id)
        spark = _find_spark(db, _requester_id(current_user), idea.id)
        if not spark:
            raise HTTPException(status_code=404, detail="Spark not found")

        db.delete(spark)
        db.query(Idea).filter(Idea.id == idea.id, Idea.spark_count > 0).update(
            {Idea.spark_count: Idea.spark_count - 1}, synchronize_session=False
        )
        db.commit()
        return {"message": "Unsparked successfully", "spark_count": idea.spark_count}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error unsparking idea {idea_id}: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/{idea_id}/spark/check")
def check_spark(
    idea_id: str,
    current_user: Optional[dict] = Depends(get_optional_user),
    db: Session = Depends(get_db)
):
    viewer_id = _requester_id(current_user)
    if viewer_id is None:
        return {"hasSparked": False}
    return {"hasSparked": _find_spark(db, viewer_id, parse_uuid(idea_id)) is not None}


# ============================================
# Contribution requests
# ============================================

def _pending_request(db: Session, user_id, idea_id) -> Optional[ContributionRequest]:
    return (
        db.query(ContributionRequest)
        .filter(ContributionRequest.idea_id == idea_id)
        .filter(ContributionRequest.user_id == user_id)
        .filter(ContributionRequest.status == ContributionStatus.PENDING)
        .first()
    )


@router.post("/{idea_id}/contribute", response_model=ContributionResponse)
def request_contribution(
    idea_id: str,
    request: ContributionCreateRequest,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    POST /api/v1/ideas/{id}/contribute
    Ask the idea's author to join; one pending request per user and idea
    """
    message = request.message.strip()
    if not message:
        raise HTTPException(status_code=400, detail="Message is required")

    try:
        user = _load_requester(db, current_user)
        idea = _load_idea(db, idea_id)

        if not _can_view(idea, user.id):
            raise HTTPException(status_code=404, detail="Idea not found")
        if idea.author_id == user.id:
            raise HTTPException(status_code=400, detail="Cannot request to contribute to your own idea")
        if _pending_request(db, user.id, idea.id):
            raise HTTPException(status_code=400, detail="Contribution request already exists")

        contribution = ContributionRequest(
            idea_id=idea.id,
            user_id=user.id,
            message=message,
            status=ContributionStatus.PENDING,
        )
        db.add(contribution)
        db.commit()
        db.refresh(contribution)

        track_activity(
            db=db,
            activity_type=ActivityType.CONTRIBUTION_REQUESTED,
            user_id=user.id,
            idea_id=idea.id,
            description=f'Requested to contribute to "{idea.title}"',
            metadata={
                "request_id": str(contribution.id),
                "message": message,
                "idea_title": idea.title,
                "author_name": idea.author.name,
            },
        )

        logger.info(f"Contribution request {contribution.id} created for idea {idea.id}")
        return contribution_response(contribution)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"=== CONTRIBUTION REQUEST ERROR === Idea: {idea_id}, Error: {str(e)}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/{idea_id}/contribute", status_code=204)
def withdraw_contribution(
    idea_id: str,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    DELETE /api/v1/ideas/{id}/contribute
    Withdraw the requester's pending request
    """
    try:
        idea = _load_idea(db, idea_id)
        user_id = _requester_id(current_user)
        contribution = _pending_request(db, user_id, idea.id)
        if not contribution:
            raise HTTPException(status_code=404, detail="Contribution request not found")

        request_id = str(contribution.id)
        db.delete(contribution)
        db.commit()

        track_activity(
            db=db,
            activity_type=ActivityType.CONTRIBUTION_WITHDRAWN,
            user_id=user_id,
            idea_id=idea.id,
            description=f'Withdrew contribution request for "{idea.title}"',
            metadata={"request_id": request_id, "idea_title": idea.title},
        )
        return Response(status_code=204)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"=== CONTRIBUTION WITHDRAW ERROR === Idea: {idea_id}, Error: {str(e)}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/{idea_id}/contribute", response_model=Optional[ContributionResponse])
def get_contribution(
    idea_id: str,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Latest contribution request from the requester for this idea, or null"""
    contribution = (
        db.query(ContributionRequest)
        .filter(ContributionRequest.idea_id == parse_uuid(idea_id))
        .filter(ContributionRequest.user_id == _requester_id(current_user))
        .order_by(ContributionRequest.created_at.desc())
        .first()
    )
    return contribution_response(contribution) if contribution else None


@router.get("/{idea_id}/contributions", response_model=List[ContributionResponse])
def list_idea_contributions(
    idea_id: str,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    GET /api/v1/ideas/{id}/contributions
    All requests received for an idea, newest first - author only
    """
    try:
        idea = _load_idea(db, idea_id)
        if idea.author_id != _requester_id(current_user):
            raise HTTPException(status_code=403, detail="Only the idea owner can view contribution requests")

        requests = (
            db.query(ContributionRequest)
            .filter(ContributionRequest.idea_id == idea.id)
            .order_by(ContributionRequest.created_at.desc())
            .all()
        )
        return [contribution_response(r) for r in requests]
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"=== LIST CONTRIBUTIONS ERROR === Idea: {idea_id}, Error: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/{idea_id}/contributions/{request_id}/respond", response_model=ContributionResponse)
def respond_to_contribution(
    idea_id: str,
    request_id: str,
    request: ContributionDecisionRequest,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    POST /api/v1/ideas/{id}/contributions/{request_id}/respond
    Author accepts or rejects a pending request
    """
    logger.info(f"=== CONTRIBUTION RESPONSE START === Idea: {idea_id}, Request: {request_id}, Status: {request.status}")

    try:
        idea = _load_idea(db, idea_id)
        if idea.author_id != _requester_id(current_user):
            raise HTTPException(status_code=403, detail="Only the idea owner can respond to requests")

        contribution = (
            db.query(ContributionRequest)
            .filter(ContributionRequest.id == parse_uuid(request_id))
            .filter(ContributionRequest.idea_id == idea.id)
            .filter(ContributionRequest.status == ContributionStatus.PENDING)
            .first()
        )
        if not contribution:
            raise HTTPException(status_code=404, detail="Contribution request not found")

        contribution.status = request.status
        db.commit()
        db.refresh(contribution)

        accepted = request.status == ContributionStatus.ACCEPTED
        track_activity(
            db=db,
            activity_type=ActivityType.CONTRIBUTION_ACCEPTED if accepted else ActivityType.CONTRIBUTION_REJECTED,
            user_id=contribution.user_id,
            idea_id=idea.id,
            description=f'Request to contribute to "{idea.title}" was {request.status.lower()}',
            metadata={"request_id": str(contribution.id), "idea_title": idea.title},
        )

        logger.info(f"=== CONTRIBUTION RESPONSE SUCCESS === Request: {contribution.id}, Status: {contribution.status}")
        return contribution_response(contribution)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"=== CONTRIBUTION RESPONSE ERROR === Request: {request_id}, Error: {str(e)}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Internal server error")
