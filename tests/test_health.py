# tests/test_health.py
"""Smoke tests for the service's unversioned endpoints."""

from fastapi import status


def test_health_check(client) -> None:
    """Health endpoint reports ok."""
    response = client.get("/health")
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "ok"}


def test_root_describes_service(client) -> None:
    """Root endpoint names the API and points at the docs."""
    response = client.get("/")
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["name"] == "Townsquare API"
    assert data["docs"] == "/docs"
