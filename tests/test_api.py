"""Tests for API functionality."""

import pytest

try:
    from fastapi.testclient import TestClient

    from mocgen.api.app import create_app, generate_token
    FASTAPI_AVAILABLE = True
except ImportError:
    FASTAPI_AVAILABLE = False
    TestClient = None  # type: ignore

from mocgen import __version__
from mocgen.runtime import build_runtime


@pytest.fixture
def runtime(vault_dir, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return build_runtime(vault_path=vault_dir)


@pytest.mark.skipif(not FASTAPI_AVAILABLE, reason="fastapi not installed")
def test_health_endpoint(runtime):
    client = TestClient(create_app(runtime, token=None))

    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "version": __version__}


@pytest.mark.skipif(not FASTAPI_AVAILABLE, reason="fastapi not installed")
def test_auth_required(runtime):
    token = generate_token()
    client = TestClient(create_app(runtime, token=token))

    assert client.get("/health").status_code == 401
    bad = client.get("/health", headers={"Authorization": "Bearer wrong"})
    assert bad.status_code == 401
    ok = client.get("/health", headers={"Authorization": f"Bearer {token}"})
    assert ok.status_code == 200


@pytest.mark.skipif(not FASTAPI_AVAILABLE, reason="fastapi not installed")
def test_moc_endpoint(runtime):
    client = TestClient(create_app(runtime))

    response = client.get("/moc", params={"folder": "Videos/", "index": "tags:Tag"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    text = response.text
    assert text.startswith("> - [Videos](<#Videos>)\n")
    assert "### Deep Dive" in text
    assert "## By Tag" in text
    assert "- [python](<#python>) \\(2\\)" in text


@pytest.mark.skipif(not FASTAPI_AVAILABLE, reason="fastapi not installed")
def test_moc_endpoint_requires_folders(runtime):
    client = TestClient(create_app(runtime))
    assert client.get("/moc").status_code == 400
    bad = client.get("/moc", params={"folder": "Videos/", "index": ":x"})
    assert bad.status_code == 400


@pytest.mark.skipif(not FASTAPI_AVAILABLE, reason="fastapi not installed")
def test_pages_endpoint(runtime):
    client = TestClient(create_app(runtime))

    response = client.get("/pages", params={"folder": "Videos/"})
    assert response.status_code == 200
    data = response.json()
    assert data["heading"] == "Videos"
    assert [p["basename"] for p in data["pages"]] == ["Deep Dive", "Intro"]
    intro = data["pages"][1]
    assert intro["tags"] == ["python", "beginner"]
    assert intro["categories"] == ["[[Tutorials]]"]
    assert intro["image"] == "[[cover.png]]"
