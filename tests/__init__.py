"""
IdeaHub - Test Suite
====================

Test Categories:
- Scoring unit tests: test_completeness.py, test_matching.py
- Repository tests: test_repositories.py
- API tests (TestClient + in-memory SQLite): test_users_api.py, test_ideas_api.py

Usage:
  python -m pytest tests/
"""
