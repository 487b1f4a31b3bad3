from sqlalchemy import (
    Column, String, Text, JSON, DateTime, ForeignKey, Integer, Index, Table, UniqueConstraint, Uuid
)
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid
from .database import Base


# Status / visibility values stored as plain strings
class IdeaStatus:
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"


class IdeaVisibility:
    PUBLIC = "PUBLIC"
    PRIVATE = "PRIVATE"


class ContributionStatus:
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


user_skills = Table(
    "user_skills",
    Base.metadata,
    Column("user_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("skill_id", Integer, ForeignKey("skills.id", ondelete="CASCADE"), primary_key=True),
)

user_industries = Table(
    "user_industries",
    Base.metadata,
    Column("user_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("industry_id", Integer, ForeignKey("industries.id", ondelete="CASCADE"), primary_key=True),
)

idea_skills = Table(
    "idea_skills",
    Base.metadata,
    Column("idea_id", Uuid, ForeignKey("ideas.id", ondelete="CASCADE"), primary_key=True),
    Column("skill_id", Integer, ForeignKey("skills.id", ondelete="CASCADE"), primary_key=True),
)


class Skill(Base):
    __tablename__ = "skills"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, unique=True, nullable=False)


class Industry(Base):
    __tablename__ = "industries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, unique=True, nullable=False)


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    # Profile fields (all optional, scored by app.utils.completeness)
    name = Column(String, nullable=True)
    username = Column(String, unique=True, nullable=True)
    bio = Column(Text, nullable=True)
    image = Column(String, nullable=True)  # avatar URL, storage handled elsewhere
    location = Column(String, nullable=True)
    website = Column(String, nullable=True)
    # Cached copy; authoritative value is always recomputed
    profile_completeness = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    skills = relationship("Skill", secondary=user_skills, lazy="selectin")
    industries = relationship("Industry", secondary=user_industries, lazy="selectin")
    ideas = relationship("Idea", back_populates="author")

    @property
    def skill_names(self):
        return [s.name for s in self.skills]

    @property
    def industry_names(self):
        return [i.name for i in self.industries]


class Idea(Base):
    __tablename__ = "ideas"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    author_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String, nullable=True)
    status = Column(String, default=IdeaStatus.PUBLISHED, nullable=False)
    visibility = Column(String, default=IdeaVisibility.PUBLIC, nullable=False)
    spark_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    author = relationship("User", back_populates="ideas", lazy="joined")
    skills = relationship("Skill", secondary=idea_skills, lazy="selectin")

    __table_args__ = (
        Index('ix_ideas_author_id', 'author_id'),
        Index('ix_ideas_status_visibility', 'status', 'visibility'),
    )

    @property
    def skill_names(self):
        return [s.name for s in self.skills]


# ============================================
# Social interactions
# ============================================

class Bookmark(Base):
    __tablename__ = "bookmarks"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    idea_id = Column(Uuid, ForeignKey("ideas.id"), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint('user_id', 'idea_id', name='uq_bookmarks_user_idea'),
    )


class Spark(Base):
    __tablename__ = "sparks"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    idea_id = Column(Uuid, ForeignKey("ideas.id"), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint('user_id', 'idea_id', name='uq_sparks_user_idea'),
    )


class ContributionRequest(Base):
    __tablename__ = "contribution_requests"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    idea_id = Column(Uuid, ForeignKey("ideas.id"), nullable=False)
    message = Column(Text, nullable=False)
    status = Column(String, default=ContributionStatus.PENDING, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index('ix_contribution_requests_idea_id', 'idea_id'),
        Index('ix_contribution_requests_user_id', 'user_id'),
    )


class Activity(Base):
    """Social activity log (contribution requests, idea creation, ...)"""
    __tablename__ = "activities"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    type = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=True)
    idea_id = Column(Uuid, ForeignKey("ideas.id"), nullable=True)
    metadata_json = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index('ix_activities_user_id', 'user_id'),
        Index('ix_activities_created_at', 'created_at'),
    )
