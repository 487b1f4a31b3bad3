"""
Skill matching between users and ideas.

Both directions score the same way: the overlap between the idea's required
skills and the user's skills, as a raw count and as a fraction of the idea's
required skills. Eligibility (visibility, authorship, existing requests) is
decided by the caller before anything reaches this module.
"""
import logging
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)


class SkillMatch(NamedTuple):
    subject: Any  # the matched User (candidates) or Idea (ideas)
    overlap_count: int
    score: float  # overlap_count / number of required skills
    matched_skills: List[str]
    additional_skills: List[str]


def normalize_skills(names: Optional[Iterable[Any]]) -> Dict[str, str]:
    """
    Map normalized key -> display name for a skill collection.
    Keys are trimmed and case-folded; the first spelling seen wins.
    Non-string and blank entries are dropped.
    """
    normalized = {}
    if names is None or isinstance(names, (str, bytes)):
        return normalized
    try:
        iterator = iter(names)
    except TypeError:
        return normalized
    for name in iterator:
        if not isinstance(name, str):
            continue
        display = name.strip()
        if not display:
            continue
        normalized.setdefault(display.casefold(), display)
    return normalized


def _subject_key(subject: Any) -> str:
    if isinstance(subject, dict):
        value = subject.get("id")
    else:
        value = getattr(subject, "id", None)
    return "" if value is None else str(value)


def _unpack(entry: Any) -> Optional[Tuple[Any, Dict[str, str]]]:
    if not isinstance(entry, (tuple, list)) or len(entry) != 2:
        return None
    subject, skills = entry
    if skills is None or isinstance(skills, (str, bytes)):
        return None
    try:
        iter(skills)
    except TypeError:
        return None
    return subject, normalize_skills(skills)


def _score(required: Dict[str, str], other: Dict[str, str]) -> Tuple[int, float, List[str], List[str]]:
    overlap_keys = sorted(required.keys() & other.keys())
    overlap_count = len(overlap_keys)
    score = overlap_count / len(required) if required else 0.0
    matched = [required[k] for k in overlap_keys]
    additional = [other[k] for k in sorted(other.keys() - required.keys())]
    return overlap_count, score, matched, additional


def _rank(matches: List[SkillMatch], limit: Optional[int]) -> List[SkillMatch]:
    matches.sort(key=lambda m: (-m.score, -m.overlap_count, _subject_key(m.subject)))
    if limit is not None:
        matches = matches[:max(limit, 0)]
    return matches


def match_candidates(
    required_skills: Iterable[str],
    candidates: Sequence[Tuple[Any, Iterable[str]]],
    limit: Optional[int] = None,
) -> List[SkillMatch]:
    """
    Rank candidate users against an idea's required skills.

    Candidates without any overlapping skill are dropped, so an empty
    required set always yields an empty list. Malformed entries are skipped.
    """
    required = normalize_skills(required_skills)
    if not required:
        return []

    matches = []
    for entry in candidates or ():
        unpacked = _unpack(entry)
        if unpacked is None:
            logger.debug(f"Skipping malformed candidate entry: {entry!r}")
            continue
        user, user_skills = unpacked
        overlap_count, score, matched, additional = _score(required, user_skills)
        if overlap_count == 0:
            continue
        matches.append(SkillMatch(user, overlap_count, score, matched, additional))

    return _rank(matches, limit)


def match_ideas(
    user_skills: Iterable[str],
    idea_pool: Sequence[Tuple[Any, Iterable[str]]],
    limit: Optional[int] = None,
) -> List[SkillMatch]:
    """
    Rank ideas by how well their required skills fit one user's skills.

    The pool must already be restricted to ideas the user may see.
    Scores are relative to each idea's own required skills, and matched
    names are spelled as on the idea, mirroring match_candidates.
    """
    skills = normalize_skills(user_skills)
    if not skills:
        return []

    matches = []
    for entry in idea_pool or ():
        unpacked = _unpack(entry)
        if unpacked is None:
            logger.debug(f"Skipping malformed idea entry: {entry!r}")
            continue
        idea, required = unpacked
        overlap_count, score, matched, additional = _score(required, skills)
        if overlap_count == 0:
            continue
        # additional = the user's skills the idea doesn't ask for
        matches.append(SkillMatch(idea, overlap_count, score, matched, additional))

    return _rank(matches, limit)
