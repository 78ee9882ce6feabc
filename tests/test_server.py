"""Tests for the Flask capture/analyze server."""

from __future__ import annotations

import pytest

from gemcam import server
from gemcam.camera import DummyCamera
from gemcam.errors import GeminiAPIError


class StubClient:
    def __init__(self, text="A test pattern.", error=None):
        self.text = text
        self.error = error
        self.payloads = []

    def generate(self, payload):
        self.payloads.append(payload.getvalue())
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def camera():
    cam = DummyCamera(frame_size="QQVGA")
    cam.start()
    yield cam
    cam.stop()


@pytest.fixture
def http(monkeypatch, camera):
    stub = StubClient()
    monkeypatch.setattr(server, "_camera", camera)
    monkeypatch.setattr(server, "_client", stub)
    server.app.config["TESTING"] = True
    with server.app.test_client() as c:
        c.stub = stub
        yield c


def test_index(http) -> None:
    response = http.get("/")
    assert response.status_code == 200
    assert b"/capture" in response.data


def test_capture_returns_jpeg(http) -> None:
    response = http.get("/capture")
    assert response.status_code == 200
    assert response.mimetype == "image/jpeg"
    assert response.data[:2] == b"\xff\xd8"


def test_analyze_get(http) -> None:
    response = http.get("/analyze?prompt=What%20is%20it%3F&max_tokens=20")
    assert response.status_code == 200
    assert response.get_json() == {"text": "A test pattern.", "found": True}
    sent = http.stub.payloads[0]
    assert b'"text":"What is it?"' in sent
    assert b'"maxOutputTokens":20' in sent


def test_analyze_post(http) -> None:
    response = http.post("/analyze", json={"prompt": "Count the objects"})
    assert response.status_code == 200
    assert b'"text":"Count the objects"' in http.stub.payloads[0]


@pytest.mark.parametrize(
    "body",
    [
        {"max_tokens": "abc"},
        {"max_tokens": 1.5},
        {"max_tokens": True},
        {"prompt": 5},
        {"prompt": ["a"]},
        [1, 2],
        "just a string",
    ],
)
def test_analyze_post_rejects_bad_body(http, body) -> None:
    response = http.post("/analyze", json=body)
    assert response.status_code == 400
    assert "error" in response.get_json()
    assert http.stub.payloads == []


def test_analyze_post_rejects_non_positive_tokens(http) -> None:
    response = http.post("/analyze", json={"max_tokens": 0})
    assert response.status_code == 400
    assert "maxOutputTokens" in response.get_json()["error"]


def test_analyze_get_rejects_non_integer_tokens(http) -> None:
    response = http.get("/analyze?max_tokens=abc")
    assert response.status_code == 400
    assert http.stub.payloads == []


def test_analyze_without_text(http) -> None:
    http.stub.text = None
    response = http.get("/analyze")
    assert response.get_json() == {"text": None, "found": False}


def test_analyze_api_error(http) -> None:
    http.stub.error = GeminiAPIError("quota exceeded", status=429)
    response = http.get("/analyze")
    assert response.status_code == 502
    assert response.get_json()["error"] == "quota exceeded"


def test_analyze_without_client(http, monkeypatch) -> None:
    monkeypatch.setattr(server, "_client", None)
    assert http.get("/analyze").status_code == 503


def test_capture_without_camera(http, monkeypatch) -> None:
    monkeypatch.setattr(server, "_camera", None)
    assert http.get("/capture").status_code == 500


def test_health(http) -> None:
    data = http.get("/health").get_json()
    assert data["status"] == "ok"
    assert data["camera"] == "ok"
    assert data["gemini"] == "configured"
    assert data["stats"]["dummy"] is True
