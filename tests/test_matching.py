"""Unit tests for skill matching - pure functions, no database."""

import os
import sys

import pytest

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.core.matching import match_candidates, match_ideas, normalize_skills


def _user(user_id, name=None):
    return {"id": user_id, "name": name or user_id}


class TestNormalizeSkills:
    def test_case_and_whitespace_are_folded(self):
        assert normalize_skills([" React ", "react", "REACT"]) == {"react": "React"}

    def test_junk_entries_are_dropped(self):
        assert normalize_skills(["Go", None, 3, "", "   "]) == {"go": "Go"}

    def test_non_collections_yield_nothing(self):
        assert normalize_skills(None) == {}
        assert normalize_skills("React") == {}
        assert normalize_skills(5) == {}


class TestMatchCandidates:
    def test_example_overlap(self):
        results = match_candidates(
            {"Go", "SQL", "Rust"},
            [(_user("u1"), {"React", "Go", "SQL"})],
        )

        assert len(results) == 1
        match = results[0]
        assert match.overlap_count == 2
        assert match.score == pytest.approx(2 / 3)
        assert match.matched_skills == ["Go", "SQL"]
        assert match.additional_skills == ["React"]

    def test_zero_overlap_excluded_and_sorted_descending(self):
        results = match_candidates(
            ["A", "B", "C", "D"],
            [
                (_user("one"), ["A"]),
                (_user("none"), ["X", "Y"]),
                (_user("three"), ["A", "B", "C"]),
                (_user("two"), ["c", "d"]),
            ],
        )

        assert [m.subject["id"] for m in results] == ["three", "two", "one"]
        assert all(m.overlap_count > 0 for m in results)
        scores = [m.score for m in results]
        assert scores == sorted(scores, reverse=True)

    def test_ties_are_broken_by_subject_id(self):
        candidates = [
            (_user("c"), ["Go"]),
            (_user("a"), ["Go"]),
            (_user("b"), ["go"]),
        ]

        first = match_candidates(["Go"], candidates)
        second = match_candidates(["Go"], list(reversed(candidates)))

        assert [m.subject["id"] for m in first] == ["a", "b", "c"]
        assert [m.subject["id"] for m in second] == ["a", "b", "c"]

    def test_empty_required_skills_returns_empty_list(self):
        assert match_candidates(set(), [(_user("u1"), ["Go"])]) == []
        assert match_candidates(["  "], [(_user("u1"), ["Go"])]) == []

    def test_malformed_entries_are_skipped(self):
        results = match_candidates(
            ["Go"],
            [
                None,
                ("lonely",),
                (_user("bad"), None),
                (_user("worse"), 12),
                (_user("str"), "Go"),
                (_user("ok"), ["Go"]),
            ],
        )

        assert [m.subject["id"] for m in results] == ["ok"]

    def test_limit_truncates_after_ranking(self):
        candidates = [(_user(f"u{i}"), ["Go"] + (["SQL"] if i == 4 else [])) for i in range(6)]

        results = match_candidates(["Go", "SQL"], candidates, limit=2)

        assert len(results) == 2
        assert results[0].subject["id"] == "u4"

    def test_duplicate_skills_count_once(self):
        results = match_candidates(["Go", "go"], [(_user("u1"), ["GO", "Go", "go"])])

        assert results[0].overlap_count == 1
        assert results[0].score == 1.0


class TestMatchIdeas:
    def test_example_overlap(self):
        idea = {"id": "i1", "title": "Ledger"}

        results = match_ideas({"React", "Go", "SQL"}, [(idea, {"Go", "SQL", "Rust"})])

        assert len(results) == 1
        assert results[0].subject is idea
        assert results[0].overlap_count == 2
        assert results[0].score == pytest.approx(0.667, abs=1e-3)
        assert results[0].matched_skills == ["Go", "SQL"]

    def test_empty_inputs_return_empty_list(self):
        assert match_ideas([], [({"id": "i1"}, ["Go"])]) == []
        assert match_ideas(["Go"], []) == []
        assert match_ideas(["Go"], None) == []

    def test_score_is_relative_to_each_idea(self):
        small = {"id": "small"}
        large = {"id": "large"}

        results = match_ideas(
            ["Go", "SQL"],
            [(large, ["Go", "SQL", "Rust", "K8s"]), (small, ["Go"])],
        )

        assert [m.subject["id"] for m in results] == ["small", "large"]
        assert results[0].score == 1.0
        assert results[1].score == 0.5


def test_both_directions_yield_the_same_overlap():
    user = _user("u1")
    idea = {"id": "i1"}
    idea_skills = {"A", "B"}
    user_skills = {"A", "B", "C"}

    by_candidate = match_candidates(idea_skills, [(user, user_skills)])[0]
    by_idea = match_ideas(user_skills, [(idea, idea_skills)])[0]

    assert set(by_candidate.matched_skills) == {"A", "B"}
    assert by_candidate.matched_skills == by_idea.matched_skills
    assert by_candidate.overlap_count == by_idea.overlap_count
    assert by_candidate.score == by_idea.score


def test_matched_names_use_idea_spelling_in_both_directions():
    by_candidate = match_candidates(["PostgreSQL"], [(_user("u1"), ["postgresql"])])[0]
    by_idea = match_ideas(["postgresql"], [({"id": "i1"}, ["PostgreSQL"])])[0]

    assert by_candidate.matched_skills == ["PostgreSQL"]
    assert by_idea.matched_skills == ["PostgreSQL"]
