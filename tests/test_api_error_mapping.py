from __future__ import annotations

import pytest
from conftest import JPEG_B64, FakeVisionClient
from fastapi.testclient import TestClient

from diagnosis.analyzer import ImageAnalyzer
from diagnosis.errors import UpstreamUnavailableError

BODY = {"base64Image": JPEG_B64, "mimeType": "image/jpeg", "language": "hi"}


def _post(app, vision: FakeVisionClient, **client_options):
    import api.dependencies as deps

    app.dependency_overrides[deps.get_analyzer] = lambda: ImageAnalyzer(vision)
    try:
        with TestClient(app, **client_options) as client:
            return client.post("/api/analyze-image", json=BODY)
    finally:
        app.dependency_overrides.clear()


def test_malformed_upstream_json_maps_to_502_without_leaking_raw_text(app):
    vision = FakeVisionClient(text='{"objectType": "leaf"')

    response = _post(app, vision)

    assert response.status_code == 502
    payload = response.json()
    assert payload["code"] == "upstream_format"
    assert '"objectType"' not in payload["error"]


def test_transport_failure_maps_to_503(app):
    vision = FakeVisionClient(error=UpstreamUnavailableError())

    response = _post(app, vision)

    assert response.status_code == 503
    assert response.json()["code"] == "upstream_unavailable"
    assert len(vision.calls) == 1


def test_unexpected_failure_keeps_json_error_shape(app):
    vision = FakeVisionClient(error=ValueError("sdk blew up"))

    response = _post(app, vision, raise_server_exceptions=False)

    assert response.status_code == 500
    assert response.headers["content-type"].startswith("application/json")
    assert response.json() == {"error": "Failed to analyze image", "code": "analysis_error"}


def test_missing_api_key_is_fatal_at_startup(app, monkeypatch):
    import main
    from config.settings import Settings

    monkeypatch.setattr(main, "get_settings", lambda: Settings(gemini_api_key=None, _env_file=None))

    with pytest.raises(RuntimeError, match="GEMINI_API_KEY"):
        with TestClient(app):
            pass
