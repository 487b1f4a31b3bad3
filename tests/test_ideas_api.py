#!/usr/bin/env python3
from app.db.models import Activity, ContributionRequest, ContributionStatus, Idea, IdeaStatus, IdeaVisibility


def test_create_idea_records_activity(client, db_session, make_user, auth_headers):
    author = make_user(name="Author")

    response = client.post(
        "/api/v1/ideas",
        json={"title": "  Ledger  ", "description": "Shared books", "skills": ["Go", "go", "SQL"]},
        headers=auth_headers(author),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["title"] == "Ledger"
    assert body["status"] == "PUBLISHED"
    assert body["visibility"] == "PUBLIC"
    assert sorted(body["skills"]) == ["Go", "SQL"]
    assert body["author"]["id"] == str(author.id)

    activity = db_session.query(Activity).one()
    assert activity.type == "IDEA_CREATED"


def test_create_idea_requires_title(client, make_user, auth_headers):
    author = make_user()

    response = client.post("/api/v1/ideas", json={"title": "   "}, headers=auth_headers(author))

    assert response.status_code == 422


def test_list_ideas_hides_private_ideas_from_others(client, make_user, make_idea, auth_headers):
    author = make_user(name="Author")
    viewer = make_user(name="Viewer")
    make_idea(author, title="Open", skills=["Go"])
    make_idea(author, title="Secret", visibility=IdeaVisibility.PRIVATE)
    make_idea(author, title="Draft", status=IdeaStatus.DRAFT)

    anonymous = client.get("/api/v1/ideas")
    as_viewer = client.get("/api/v1/ideas", headers=auth_headers(viewer))
    as_author = client.get("/api/v1/ideas", headers=auth_headers(author))

    assert [i["title"] for i in anonymous.json()] == ["Open"]
    assert [i["title"] for i in as_viewer.json()] == ["Open"]
    assert sorted(i["title"] for i in as_author.json()) == ["Open", "Secret"]


def test_list_ideas_filters(client, make_user, make_idea):
    author = make_user()
    make_idea(author, title="Payments ledger", category="fintech", skills=["Go"])
    make_idea(author, title="Garden planner", category="home", skills=["React"])

    by_search = client.get("/api/v1/ideas", params={"search": "LEDGER"}).json()
    by_category = client.get("/api/v1/ideas", params={"category": "home"}).json()
    by_skill = client.get("/api/v1/ideas", params={"skills": "react, rust"}).json()

    assert [i["title"] for i in by_search] == ["Payments ledger"]
    assert [i["title"] for i in by_category] == ["Garden planner"]
    assert [i["title"] for i in by_skill] == ["Garden planner"]


def test_list_ideas_search_treats_wildcards_literally(client, make_user, make_idea):
    author = make_user()
    make_idea(author, title="Half off: 50% coupons")
    make_idea(author, title="Plain ledger")
    make_idea(author, title="snake_case linter")

    percent = client.get("/api/v1/ideas", params={"search": "%"}).json()
    underscore = client.get("/api/v1/ideas", params={"search": "_"}).json()

    assert [i["title"] for i in percent] == ["Half off: 50% coupons"]
    assert [i["title"] for i in underscore] == ["snake_case linter"]


def test_private_idea_is_404_for_non_author(client, make_user, make_idea, auth_headers):
    author = make_user()
    other = make_user()
    idea = make_idea(author, visibility=IdeaVisibility.PRIVATE)

    assert client.get(f"/api/v1/ideas/{idea.id}", headers=auth_headers(other)).status_code == 404
    assert client.get(f"/api/v1/ideas/{idea.id}", headers=auth_headers(author)).status_code == 200


def test_visibility_toggle_is_author_only(client, make_user, make_idea, auth_headers):
    author = make_user()
    other = make_user()
    idea = make_idea(author)

    forbidden = client.post(
        f"/api/v1/ideas/{idea.id}/visibility", json={"visibility": "PRIVATE"}, headers=auth_headers(other)
    )
    invalid = client.post(
        f"/api/v1/ideas/{idea.id}/visibility", json={"visibility": "HIDDEN"}, headers=auth_headers(author)
    )
    ok = client.post(
        f"/api/v1/ideas/{idea.id}/visibility", json={"visibility": "PRIVATE"}, headers=auth_headers(author)
    )

    assert forbidden.status_code == 403
    assert invalid.status_code == 422
    assert ok.status_code == 200
    assert ok.json()["visibility"] == "PRIVATE"


def test_skill_matches_for_author(client, db_session, make_user, make_idea, auth_headers):
    author = make_user(name="Author", skills=["Go"])
    strong = make_user(name="Strong", skills=["Go", "SQL", "React"])
    weak = make_user(name="Weak", skills=["sql"])
    twin = make_user(name="Twin", skills=["SQL"])
    make_user(name="None", skills=["Python"])
    applied = make_user(name="Applied", skills=["Go", "SQL", "Rust"])
    idea = make_idea(author, skills=["Go", "SQL", "Rust"], visibility=IdeaVisibility.PRIVATE)
    db_session.add(ContributionRequest(user_id=applied.id, idea_id=idea.id, message="me!"))
    db_session.commit()

    response = client.get(f"/api/v1/ideas/{idea.id}/matches", headers=auth_headers(author))

    assert response.status_code == 200
    body = response.json()
    # Equal scores fall back to id order
    assert [m["user"]["id"] for m in body] == [str(strong.id)] + sorted([str(weak.id), str(twin.id)])
    assert body[0]["overlap_count"] == 2
    assert round(body[0]["match_score"], 3) == 0.667
    assert body[0]["matched_skills"] == ["Go", "SQL"]
    assert body[0]["additional_skills"] == ["React"]
    assert body[1]["matched_skills"] == ["SQL"]
    assert body[1]["match_score"] == body[2]["match_score"]


def test_skill_matches_forbidden_for_non_author(client, make_user, make_idea, auth_headers):
    author = make_user()
    other = make_user(skills=["Go"])
    idea = make_idea(author, skills=["Go"])

    response = client.get(f"/api/v1/ideas/{idea.id}/matches", headers=auth_headers(other))

    assert response.status_code == 403


def test_bookmark_lifecycle(client, make_user, make_idea, auth_headers):
    user = make_user()
    idea = make_idea(make_user())
    headers = auth_headers(user)
    url = f"/api/v1/ideas/{idea.id}/bookmark"

    assert client.post(url, headers=headers).status_code == 200
    assert client.post(url, headers=headers).status_code == 400
    assert client.get(f"{url}/check", headers=headers).json() == {"isBookmarked": True}
    assert client.delete(url, headers=headers).status_code == 200
    assert client.delete(url, headers=headers).status_code == 404
    assert client.get(f"{url}/check", headers=headers).json() == {"isBookmarked": False}


def test_bookmark_unknown_idea_is_404(client, make_user, auth_headers):
    user = make_user()

    response = client.post(
        "/api/v1/ideas/00000000-0000-0000-0000-000000000000/bookmark", headers=auth_headers(user)
    )

    assert response.status_code == 404


def test_spark_lifecycle_keeps_count(client, db_session, make_user, make_idea, auth_headers):
    user = make_user()
    idea = make_idea(make_user())
    headers = auth_headers(user)
    url = f"/api/v1/ideas/{idea.id}/spark"

    first = client.post(url, headers=headers)
    again = client.post(url, headers=headers)

    assert first.json()["spark_count"] == 1
    assert again.status_code == 400
    assert client.get(f"{url}/check", headers=headers).json() == {"hasSparked": True}
    assert client.get(f"{url}/check").json() == {"hasSparked": False}

    removed = client.delete(url, headers=headers)
    assert removed.json()["spark_count"] == 0
    assert client.delete(url, headers=headers).status_code == 404

    db_session.refresh(idea)
    assert idea.spark_count == 0


def test_contribution_request_lifecycle(client, db_session, make_user, make_idea, auth_headers):
    author = make_user(name="Author")
    user = make_user(name="Helper")
    idea = make_idea(author, title="Ledger")
    headers = auth_headers(user)
    url = f"/api/v1/ideas/{idea.id}/contribute"

    assert client.get(url, headers=headers).json() is None

    created = client.post(url, json={"message": "  I can help  "}, headers=headers)
    assert created.status_code == 200
    assert created.json()["status"] == "PENDING"
    assert created.json()["message"] == "I can help"

    duplicate = client.post(url, json={"message": "again"}, headers=headers)
    assert duplicate.status_code == 400

    assert client.get(url, headers=headers).json()["id"] == created.json()["id"]

    withdrawn = client.delete(url, headers=headers)
    assert withdrawn.status_code == 204
    assert client.delete(url, headers=headers).status_code == 404
    assert db_session.query(ContributionRequest).count() == 0

    types = sorted(a.type for a in db_session.query(Activity).all())
    assert types == ["CONTRIBUTION_REQUESTED", "CONTRIBUTION_WITHDRAWN"]


def test_contribution_request_validation(client, make_user, make_idea, auth_headers):
    author = make_user()
    idea = make_idea(author)
    url = f"/api/v1/ideas/{idea.id}/contribute"

    blank = client.post(url, json={"message": "   "}, headers=auth_headers(make_user()))
    own = client.post(url, json={"message": "mine"}, headers=auth_headers(author))

    assert blank.status_code == 400
    assert own.status_code == 400
    assert own.json()["detail"] == "Cannot request to contribute to your own idea"


def test_hidden_ideas_reject_interactions_from_non_author(client, make_user, make_idea, auth_headers):
    author = make_user()
    headers = auth_headers(make_user())
    private = make_idea(author, visibility=IdeaVisibility.PRIVATE)
    draft = make_idea(author, status=IdeaStatus.DRAFT)

    for idea in (private, draft):
        assert client.post(f"/api/v1/ideas/{idea.id}/bookmark", headers=headers).status_code == 404
        assert client.post(f"/api/v1/ideas/{idea.id}/spark", headers=headers).status_code == 404
        contribute = client.post(f"/api/v1/ideas/{idea.id}/contribute", json={"message": "hi"}, headers=headers)
        assert contribute.status_code == 404

    # The author can still bookmark their own private idea
    assert client.post(f"/api/v1/ideas/{private.id}/bookmark", headers=auth_headers(author)).status_code == 200


def test_spark_count_counts_every_user_and_never_goes_negative(client, db_session, make_user, make_idea, auth_headers):
    idea = make_idea(make_user())
    first, second = make_user(), make_user()
    url = f"/api/v1/ideas/{idea.id}/spark"

    assert client.post(url, headers=auth_headers(first)).json()["spark_count"] == 1
    assert client.post(url, headers=auth_headers(second)).json()["spark_count"] == 2

    # Counter drifted below the number of spark rows
    db_session.query(Idea).filter(Idea.id == idea.id).update({Idea.spark_count: 0})
    db_session.commit()

    assert client.delete(url, headers=auth_headers(first)).json()["spark_count"] == 0
    db_session.refresh(idea)
    assert idea.spark_count == 0


def test_update_idea_changes_fields_and_skills(client, db_session, make_user, make_idea, auth_headers):
    author = make_user()
    candidate = make_user(skills=["Rust"])
    idea = make_idea(author, title="Old", description="keep me", skills=["Go"])

    response = client.put(
        f"/api/v1/ideas/{idea.id}",
        json={"title": " New ", "status": "DRAFT", "skills": ["Rust", "rust"]},
        headers=auth_headers(author),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["title"] == "New"
    assert body["description"] == "keep me"
    assert body["status"] == "DRAFT"
    assert body["skills"] == ["Rust"]

    matches = client.get(f"/api/v1/ideas/{idea.id}/matches", headers=auth_headers(author)).json()
    assert [m["user"]["id"] for m in matches] == [str(candidate.id)]

    activity = db_session.query(Activity).filter(Activity.type == "IDEA_UPDATED").one()
    assert activity.metadata_json == {"fields": ["title", "status", "skills"]}


def test_update_idea_is_author_only_and_validated(client, make_user, make_idea, auth_headers):
    author = make_user()
    idea = make_idea(author)
    url = f"/api/v1/ideas/{idea.id}"

    forbidden = client.put(url, json={"title": "Mine now"}, headers=auth_headers(make_user()))
    blank = client.put(url, json={"title": "  "}, headers=auth_headers(author))
    bad_status = client.put(url, json={"status": "ARCHIVED"}, headers=auth_headers(author))
    missing = client.put(
        "/api/v1/ideas/00000000-0000-0000-0000-000000000000", json={"title": "x"}, headers=auth_headers(author)
    )

    assert forbidden.status_code == 403
    assert blank.status_code == 422
    assert bad_status.status_code == 422
    assert missing.status_code == 404


def test_author_accepts_and_rejects_contribution_requests(client, db_session, make_user, make_idea, auth_headers):
    author = make_user(name="Author")
    idea = make_idea(author, title="Ledger")
    helper = make_user(name="Helper")
    other = make_user(name="Other")
    accepted = ContributionRequest(user_id=helper.id, idea_id=idea.id, message="me")
    rejected = ContributionRequest(user_id=other.id, idea_id=idea.id, message="me too")
    db_session.add_all([accepted, rejected])
    db_session.commit()
    base = f"/api/v1/ideas/{idea.id}/contributions"

    listed = client.get(base, headers=auth_headers(author))
    assert listed.status_code == 200
    assert sorted(r["id"] for r in listed.json()) == sorted([str(accepted.id), str(rejected.id)])

    ok = client.post(f"{base}/{accepted.id}/respond", json={"status": "ACCEPTED"}, headers=auth_headers(author))
    no = client.post(f"{base}/{rejected.id}/respond", json={"status": "REJECTED"}, headers=auth_headers(author))

    assert ok.status_code == 200
    assert ok.json()["status"] == "ACCEPTED"
    assert no.json()["status"] == "REJECTED"

    # Only pending requests can be decided
    again = client.post(f"{base}/{accepted.id}/respond", json={"status": "REJECTED"}, headers=auth_headers(author))
    assert again.status_code == 404

    db_session.refresh(accepted)
    assert accepted.status == ContributionStatus.ACCEPTED
    types = sorted(a.type for a in db_session.query(Activity).all())
    assert types == ["CONTRIBUTION_ACCEPTED", "CONTRIBUTION_REJECTED"]


def test_contribution_decisions_are_author_only(client, db_session, make_user, make_idea, auth_headers):
    author = make_user()
    helper = make_user()
    idea = make_idea(author)
    req = ContributionRequest(user_id=helper.id, idea_id=idea.id, message="me")
    db_session.add(req)
    db_session.commit()
    base = f"/api/v1/ideas/{idea.id}/contributions"

    self_accept = client.post(f"{base}/{req.id}/respond", json={"status": "ACCEPTED"}, headers=auth_headers(helper))
    invalid = client.post(f"{base}/{req.id}/respond", json={"status": "PENDING"}, headers=auth_headers(author))
    listing = client.get(base, headers=auth_headers(helper))

    assert self_accept.status_code == 403
    assert invalid.status_code == 422
    assert listing.status_code == 403
