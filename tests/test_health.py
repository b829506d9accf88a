# tests/test_health.py
from typing import Any

from fastapi import status


def test_health_check(client: Any) -> None:
    """The liveness probe answers without touching the store."""
    r = client.get("/health")
    assert r.status_code == status.HTTP_200_OK
    assert r.json() == {"status": "ok"}


def test_root_describes_api(client: Any) -> None:
    """The root endpoint names the service and links the docs."""
    r = client.get("/")
    assert r.status_code == status.HTTP_200_OK
    data = r.json()
    assert data["name"] == "PulseVote API"
    assert data["docs"] == "/docs"
