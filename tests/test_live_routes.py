from __future__ import annotations

import asyncio

import numpy as np
import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from live.pcm import encode_pcm16
from live.session import AudioData, InputTranscript, OutputTranscript, TurnComplete

ASSISTANT_PCM = np.arange(-1200, 1200, dtype=np.int16)


class ScriptedSession:
    """Replays a fixed script once the first microphone frame arrives."""

    def __init__(self, script) -> None:
        self.script = script
        self.sent = []
        self.closed = False
        self._first_frame = asyncio.Event()
        self._released = asyncio.Event()

    async def send(self, chunk) -> None:
        self.sent.append(chunk)
        self._first_frame.set()

    async def events(self):
        await self._first_frame.wait()
        for event in self.script:
            yield event
        await self._released.wait()

    async def close(self) -> None:
        self.closed = True
        self._released.set()


class ScriptedConnector:
    def __init__(self, script) -> None:
        self.script = script
        self.instructions: list[str] = []
        self.sessions: list[ScriptedSession] = []

    async def connect(self, system_instruction: str) -> ScriptedSession:
        self.instructions.append(system_instruction)
        session = ScriptedSession(self.script)
        self.sessions.append(session)
        return session


@pytest.fixture()
def live_client(app):
    import api.dependencies as deps

    connector = ScriptedConnector(
        [
            InputTranscript("Hello"),
            OutputTranscript("Namaste"),
            AudioData(encode_pcm16(ASSISTANT_PCM)),
            TurnComplete(),
        ]
    )
    app.dependency_overrides[deps.get_live_connector] = lambda: connector

    with TestClient(app) as test_client:
        yield test_client, connector

    app.dependency_overrides.clear()


def test_live_session_relays_frames_audio_and_turns(live_client):
    client, connector = live_client
    report = {
        "objectType": "leaf",
        "isHealthy": False,
        "diseaseName": "Colletotrichum gloeosporioides",
        "commonName": "Anthracnose",
        "description": "Dark lesions.",
        "cure": None,
    }

    with client.websocket_connect("/api/live") as ws:
        ws.send_json({"type": "start", "language": "hi", "analysisResult": report})
        assert ws.receive_json() == {"type": "status", "status": "connecting"}

        ws.send_json({"type": "microphone", "granted": True})
        assert ws.receive_json() == {"type": "status", "status": "connected"}

        ws.send_bytes(np.full(4096, 0.5, dtype="<f4").tobytes())

        audio = ws.receive_json()
        assert audio["type"] == "audio"
        assert audio["id"] == 0
        assert audio["sampleRate"] == 24000
        assert audio["startTime"] >= 0
        assert audio["data"] == encode_pcm16(ASSISTANT_PCM)

        assert ws.receive_json() == {"type": "turn", "author": "user", "text": "Hello"}
        assert ws.receive_json() == {"type": "turn", "author": "assistant", "text": "Namaste"}

        ws.send_json({"type": "close"})

    session = connector.sessions[0]
    assert session.closed is True
    assert session.sent[0].mime_type == "audio/pcm;rate=16000"
    assert int(session.sent[0].pcm[0]) == 16384
    assert "Hindi" in connector.instructions[0]
    assert "Anthracnose" in connector.instructions[0]


def test_live_session_reports_denied_microphone(live_client):
    client, connector = live_client

    with client.websocket_connect("/api/live") as ws:
        ws.send_json({"type": "start", "language": "en"})
        assert ws.receive_json()["status"] == "connecting"

        ws.send_json({"type": "microphone", "granted": False})
        message = ws.receive_json()
        assert message["type"] == "status"
        assert message["status"] == "error"
        assert message["code"] == "media_access"

        ws.send_json({"type": "close"})

    assert connector.sessions == []


def test_live_session_rejects_invalid_start_message(live_client):
    client, connector = live_client

    with client.websocket_connect("/api/live") as ws:
        ws.send_json({"type": "hello"})
        with pytest.raises(WebSocketDisconnect) as excinfo:
            ws.receive_json()

    assert excinfo.value.code == 1003
    assert connector.instructions == []
