"""
User and idea repositories.

Responsibilities:
- Row lookups for users and ideas.
- Eligibility filtering for skill matching (visibility, authorship,
  open contribution requests).
- Get-or-create for skill / industry tags.

Scoring lives in app.core.matching; nothing here ranks anything.
"""
import logging
import uuid
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from app.db.models import (
    User, Idea, Skill, Industry, ContributionRequest,
    IdeaStatus, IdeaVisibility, ContributionStatus,
)

logger = logging.getLogger(__name__)

OPEN_REQUEST_STATUSES = (ContributionStatus.PENDING, ContributionStatus.ACCEPTED)


def parse_uuid(value) -> Optional[uuid.UUID]:
    """Return a UUID for a str/UUID value, or None if it isn't one"""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (ValueError, TypeError):
        return None


def _clean_names(names: Iterable[str]) -> List[str]:
    seen = set()
    cleaned = []
    for name in names or []:
        if not isinstance(name, str) or not name.strip():
            continue
        key = name.strip().casefold()
        if key in seen:
            continue
        seen.add(key)
        cleaned.append(name.strip())
    return cleaned


class UserRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id) -> Optional[User]:
        user_uuid = parse_uuid(user_id)
        if user_uuid is None:
            return None
        return self.db.query(User).filter(User.id == user_uuid).first()

    def username_taken(self, username: str, exclude_user_id=None) -> bool:
        query = self.db.query(User).filter(User.username == username)
        if exclude_user_id is not None:
            query = query.filter(User.id != exclude_user_id)
        return query.first() is not None

    def search(self, query: str, exclude_user_id=None, limit: int = 5) -> List[User]:
        term = query.strip().lower()
        q = self.db.query(User).filter(
            or_(
                func.lower(User.name).contains(term, autoescape=True),
                func.lower(User.username).contains(term, autoescape=True),
            )
        )
        if exclude_user_id is not None:
            q = q.filter(User.id != exclude_user_id)
        return q.order_by(User.created_at.asc()).limit(limit).all()

    def get_or_create_skills(self, names: Iterable[str]) -> List[Skill]:
        return [self._get_or_create(Skill, name) for name in _clean_names(names)]

    def get_or_create_industries(self, names: Iterable[str]) -> List[Industry]:
        return [self._get_or_create(Industry, name) for name in _clean_names(names)]

    def _get_or_create(self, model, name: str):
        row = self.db.query(model).filter(func.lower(model.name) == name.lower()).first()
        if row is None:
            logger.info(f"Creating {model.__tablename__} tag: {name}")
            row = model(name=name)
            self.db.add(row)
            self.db.flush()
        return row

    def skill_candidates(self, idea: Idea) -> List[Tuple[User, List[str]]]:
        """
        Users holding at least one of the idea's skills, minus the author and
        anyone with a pending/accepted contribution request on the idea.
        """
        skill_ids = [s.id for s in idea.skills]
        if not skill_ids:
            return []

        open_requesters = (
            select(ContributionRequest.user_id)
            .where(ContributionRequest.idea_id == idea.id)
            .where(ContributionRequest.status.in_(OPEN_REQUEST_STATUSES))
        )
        users = (
            self.db.query(User)
            .filter(User.skills.any(Skill.id.in_(skill_ids)))
            .filter(User.id != idea.author_id)
            .filter(~User.id.in_(open_requesters))
            .all()
        )
        logger.debug(f"Found {len(users)} skill candidates for idea {idea.id}")
        return [(user, user.skill_names) for user in users]


class IdeaRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, idea_id) -> Optional[Idea]:
        idea_uuid = parse_uuid(idea_id)
        if idea_uuid is None:
            return None
        return self.db.query(Idea).filter(Idea.id == idea_uuid).first()

    def visible_query(self, viewer_id=None):
        """Published ideas the viewer may see: public ones plus their own"""
        query = self.db.query(Idea).filter(Idea.status == IdeaStatus.PUBLISHED)
        if viewer_id is not None:
            return query.filter(or_(Idea.visibility == IdeaVisibility.PUBLIC, Idea.author_id == viewer_id))
        return query.filter(Idea.visibility == IdeaVisibility.PUBLIC)

    def eligible_for_user(self, user: User) -> List[Tuple[Idea, List[str]]]:
        """
        Published public ideas sharing a skill with the user, excluding the
        user's own ideas and ideas they already asked to contribute to.
        """
        skill_ids = [s.id for s in user.skills]
        if not skill_ids:
            return []

        requested = (
            select(ContributionRequest.idea_id)
            .where(ContributionRequest.user_id == user.id)
            .where(ContributionRequest.status.in_(OPEN_REQUEST_STATUSES))
        )
        ideas = (
            self.db.query(Idea)
            .filter(Idea.status == IdeaStatus.PUBLISHED)
            .filter(Idea.visibility == IdeaVisibility.PUBLIC)
            .filter(Idea.author_id != user.id)
            .filter(~Idea.id.in_(requested))
            .filter(Idea.skills.any(Skill.id.in_(skill_ids)))
            .all()
        )
        logger.debug(f"Found {len(ideas)} eligible ideas for user {user.id}")
        return [(idea, idea.skill_names) for idea in ideas]
