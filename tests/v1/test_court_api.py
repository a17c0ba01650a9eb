# tests/v1/test_court_api.py
"""Tests for Open Court endpoints."""

from fastapi import status


def _file_report(client, auth_headers, reporter, post, reason="Harassment") -> int:
    response = client.post(
        "/api/v1/reports",
        json={"targetType": "post", "targetId": post.id, "reason": reason},
        headers=auth_headers(reporter),
    )
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()["id"]


def test_cases_require_auth(client) -> None:
    response = client.get("/api/v1/court/cases")
    assert response.status_code in {status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN}


def test_case_queue(client, post, make_user, jurors, auth_headers) -> None:
    reporter = make_user("reporter")
    report_id = _file_report(client, auth_headers, reporter, post)

    response = client.get("/api/v1/court/cases", headers=auth_headers(jurors[0]))
    assert response.status_code == status.HTTP_200_OK
    case = response.json()["cases"][0]
    assert case["id"] == report_id
    assert case["reason"] == "Harassment"
    assert case["reporter"] == "Community Member"
    assert case["content"]["type"] == "Post"
    assert case["content"]["author"] == "author"
    assert case["content"]["community"] == "General"
    assert case["content"]["timestamp"].endswith("ago")
    assert case["aiAnalysis"]["flaggedKeywords"] == ["idiot"]
    assert case["verdictCounts"] == {"guilty": 0, "innocent": 0}

    # Reporters never see their own reports.
    own = client.get("/api/v1/court/cases", headers=auth_headers(reporter)).json()
    assert own["cases"] == []


def test_verdict_flow_removes_content(client, post, make_user, jurors, auth_headers) -> None:
    report_id = _file_report(client, auth_headers, make_user("reporter"), post)

    results = []
    for juror, vote in zip(jurors, ["guilty", "guilty", "innocent", "guilty", "innocent"]):
        response = client.post(
            "/api/v1/court/verdict",
            json={"reportId": report_id, "vote": vote},
            headers=auth_headers(juror),
        )
        assert response.status_code == status.HTTP_200_OK
        results.append(response.json())

    assert results[0]["stats"]["casesReviewed"] == 1
    assert results[0]["resolution"] is None
    assert results[-1]["resolution"] == "reviewed"

    late = client.post(
        "/api/v1/court/verdict",
        json={"reportId": report_id, "vote": "guilty"},
        headers=auth_headers(jurors[5]),
    )
    assert late.status_code == status.HTTP_400_BAD_REQUEST
    assert late.json()["detail"] == "Case already closed"

    feed = client.get("/api/v1/feed/signal").json()
    assert post.id not in [p["id"] for p in feed["posts"]]


def test_duplicate_verdict(client, post, make_user, jurors, auth_headers) -> None:
    report_id = _file_report(client, auth_headers, make_user("reporter"), post)
    body = {"reportId": report_id, "vote": "innocent"}
    headers = auth_headers(jurors[0])
    assert client.post("/api/v1/court/verdict", json=body, headers=headers).status_code == 200

    response = client.post("/api/v1/court/verdict", json=body, headers=headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    stats = client.get("/api/v1/court/stats", headers=headers).json()
    assert stats["casesReviewed"] == 1


def test_invalid_vote(client, post, make_user, jurors, auth_headers) -> None:
    report_id = _file_report(client, auth_headers, make_user("reporter"), post)
    response = client.post(
        "/api/v1/court/verdict",
        json={"reportId": report_id, "vote": "abstain"},
        headers=auth_headers(jurors[0]),
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "Invalid vote"


def test_verdict_on_unknown_report(client, jurors, auth_headers) -> None:
    response = client.post(
        "/api/v1/court/verdict",
        json={"reportId": 777, "vote": "guilty"},
        headers=auth_headers(jurors[0]),
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_stats_for_new_juror(client, post, make_user, jurors, auth_headers) -> None:
    _file_report(client, auth_headers, make_user("reporter"), post)
    response = client.get("/api/v1/court/stats", headers=auth_headers(jurors[0]))
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "casesReviewed": 0,
        "guiltyVotes": 0,
        "innocentVotes": 0,
        "accuracy": 50.0,
        "rank": "Novice Juror",
        "pendingCases": 1,
    }


def test_history(client, post, make_user, jurors, auth_headers) -> None:
    report_id = _file_report(client, auth_headers, make_user("reporter"), post, reason="Spam")
    headers = auth_headers(jurors[0])
    client.post("/api/v1/court/verdict", json={"reportId": report_id, "vote": "guilty"}, headers=headers)

    response = client.get("/api/v1/court/history", headers=headers)
    assert response.status_code == status.HTTP_200_OK
    entry = response.json()["history"][0]
    assert entry["reportId"] == report_id
    assert entry["vote"] == "guilty"
    assert entry["reason"] == "Spam"
    assert entry["status"] == "pending"
    assert entry["targetInfo"]["preview"] == "Is this allowed?"
    assert entry["outcome"] == {"total": 1, "guilty": 1, "innocent": 0, "wasCorrect": None}
