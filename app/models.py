from pydantic import BaseModel, Field, field_validator
from typing import List, Optional, Literal, Dict, Any

# ============================================
# Users
# ============================================

class UserSummary(BaseModel):
    id: str
    name: Optional[str] = None
    username: Optional[str] = None
    image: Optional[str] = None
    skills: List[str] = []

class UserProfileResponse(BaseModel):
    id: str
    name: Optional[str] = None
    username: Optional[str] = None
    bio: Optional[str] = None
    image: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    skills: List[str] = []
    industries: List[str] = []
    profile_completeness: int = 0
    created_at: Optional[str] = None

class ProfileUpdateRequest(BaseModel):
    """Fields left as None are not touched; skills/industries replace the whole set"""
    name: Optional[str] = None
    username: Optional[str] = None
    bio: Optional[str] = None
    image: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    skills: Optional[List[str]] = None
    industries: Optional[List[str]] = None

    @field_validator("username")
    @classmethod
    def username_has_no_spaces(cls, v):
        if v is not None and " " in v.strip():
            raise ValueError("username must not contain spaces")
        return v

class CompletenessResponse(BaseModel):
    completeness: int
    breakdown: Dict[str, int]
    tips: List[str]

class CompletenessUpdateRequest(BaseModel):
    completeness: int = Field(ge=0, le=100)

# ============================================
# Ideas
# ============================================

IdeaStatusLiteral = Literal["DRAFT", "PUBLISHED"]
VisibilityLiteral = Literal["PUBLIC", "PRIVATE"]

class IdeaCreateRequest(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    category: Optional[str] = None
    status: IdeaStatusLiteral = "PUBLISHED"
    visibility: VisibilityLiteral = "PUBLIC"
    skills: List[str] = []

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v):
        if not v.strip():
            raise ValueError("title must not be blank")
        return v.strip()

class IdeaResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    status: str
    visibility: str
    skills: List[str] = []
    spark_count: int = 0
    author: UserSummary
    created_at: Optional[str] = None

class VisibilityUpdateRequest(BaseModel):
    visibility: VisibilityLiteral

class IdeaUpdateRequest(BaseModel):
    """Fields left as None are not touched; skills replaces the whole set"""
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    status: Optional[IdeaStatusLiteral] = None
    skills: Optional[List[str]] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v):
        if v is not None and not v.strip():
            raise ValueError("title must not be blank")
        return v.strip() if v is not None else v

# ============================================
# Matching
# ============================================

class CandidateMatchResponse(BaseModel):
    user: UserSummary
    overlap_count: int
    match_score: float
    matched_skills: List[str]
    additional_skills: List[str]

class IdeaMatchResponse(BaseModel):
    id: str
    title: str
    overlap_count: int
    match_score: float
    required_skills: List[str]
    matched_skills: List[str]

# ============================================
# Social interactions
# ============================================

class ContributionCreateRequest(BaseModel):
    message: str

class ContributionResponse(BaseModel):
    id: str
    idea_id: str
    user_id: str
    message: str
    status: str
    created_at: Optional[str] = None

class ContributionDecisionRequest(BaseModel):
    status: Literal["ACCEPTED", "REJECTED"]

class UserContributionsResponse(BaseModel):
    """A user's own requests, newest first within each group"""
    pending: List[ContributionResponse] = []
    accepted: List[ContributionResponse] = []
    rejected: List[ContributionResponse] = []

class ActivityResponse(BaseModel):
    id: str
    type: str
    description: Optional[str] = None
    user_id: Optional[str] = None
    idea_id: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    created_at: Optional[str] = None
