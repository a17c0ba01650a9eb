# tests/v1/test_reports_api.py
"""Tests for report intake endpoints."""

from fastapi import status


def test_report_post(client, post, make_user, auth_headers) -> None:
    response = client.post(
        "/api/v1/reports",
        json={"targetType": "post", "targetId": post.id, "reason": "Harassment"},
        headers=auth_headers(make_user()),
    )
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["status"] == "pending"
    assert data["message"].startswith("Post reported successfully")


def test_report_comment_with_snake_case_body(
    client, post, make_comment, make_user, auth_headers,
) -> None:
    comment = make_comment(post, make_user())
    response = client.post(
        "/api/v1/reports",
        json={
            "target_type": "comment",
            "target_id": comment.id,
            "reason": "Spam",
            "description": "link farm",
        },
        headers=auth_headers(make_user()),
    )
    assert response.status_code == status.HTTP_201_CREATED


def test_report_requires_auth(client, post) -> None:
    response = client.post(
        "/api/v1/reports",
        json={"targetType": "post", "targetId": post.id, "reason": "Spam"},
    )
    assert response.status_code in {status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN}


def test_self_report_is_rejected(client, post, author, auth_headers) -> None:
    response = client.post(
        "/api/v1/reports",
        json={"targetType": "post", "targetId": post.id, "reason": "Spam"},
        headers=auth_headers(author),
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "You cannot report your own post"


def test_duplicate_report_is_rejected(client, post, make_user, auth_headers) -> None:
    headers = auth_headers(make_user())
    body = {"targetType": "post", "targetId": post.id, "reason": "Spam"}
    assert client.post("/api/v1/reports", json=body, headers=headers).status_code == 201

    response = client.post("/api/v1/reports", json=body, headers=headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "already reported" in response.json()["detail"]


def test_missing_reason(client, post, make_user, auth_headers) -> None:
    response = client.post(
        "/api/v1/reports",
        json={"targetType": "post", "targetId": post.id},
        headers=auth_headers(make_user()),
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "Please select a reason"


def test_missing_target(client, make_user, auth_headers) -> None:
    response = client.post(
        "/api/v1/reports",
        json={"targetType": "post", "targetId": 4242, "reason": "Spam"},
        headers=auth_headers(make_user()),
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["detail"] == "Post not found"
