from __future__ import annotations

import base64
import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = REPO_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from llm.base import BaseVisionClient, VisionReply  # noqa: E402

DISEASED_LEAF_REPLY = (
    '{"objectType":"leaf","isHealthy":false,'
    '"diseaseName":"Colletotrichum gloeosporioides","commonName":"Anthracnose",'
    '"description":"Dark sunken lesions on the leaf blade.",'
    '"cure":{"products":[{"name":"Copper fungicide","usage":"Spray biweekly"}],'
    '"preventativeMeasures":"Prune for airflow"}}'
)

JPEG_B64 = base64.b64encode(b"\xff\xd8\xff\xe0\x00\x10JFIF\x00fake-jpeg-body\xff\xd9").decode("ascii")


class FakeVisionClient(BaseVisionClient):
    def __init__(self, *, text: str = DISEASED_LEAF_REPLY, sources=None, error: Exception | None = None) -> None:
        self.text = text
        self.sources = sources or []
        self.error = error
        self.calls: list[dict] = []

    async def describe_image(self, *, image_b64: str, mime_type: str, instruction: str) -> VisionReply:
        self.calls.append({"image_b64": image_b64, "mime_type": mime_type, "instruction": instruction})
        if self.error is not None:
            raise self.error
        return VisionReply(text=self.text, sources=list(self.sources))


@pytest.fixture(scope="session")
def app():
    # Must be set before importing modules that read the settings.
    os.environ["GEMINI_API_KEY"] = "test-key"
    os.environ["LOG_LEVEL"] = "DEBUG"

    import importlib

    for module_name in [
        "config.settings",
        "api.dependencies",
        "api.routes",
        "api.live_routes",
        "main",
    ]:
        sys.modules.pop(module_name, None)

    main = importlib.import_module("main")
    return main.app


@pytest.fixture()
def vision() -> FakeVisionClient:
    return FakeVisionClient()


@pytest.fixture()
def client(app, vision):
    # Override the analyzer so tests never instantiate the Gemini SDK.
    import api.dependencies as deps
    from diagnosis.analyzer import ImageAnalyzer

    app.dependency_overrides[deps.get_analyzer] = lambda: ImageAnalyzer(vision)

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
