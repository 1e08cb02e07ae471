"""Adapters exposing a browser WebSocket as microphone and speaker of the relay.

Client messages are JSON text frames (``start``, ``microphone``, ``close``)
or binary frames carrying one capture block of little-endian float32 samples.
Server messages are JSON (``status``, ``turn``, ``audio``, ``stop``).
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator, Callable
from typing import Any, Literal

import numpy as np
from fastapi import WebSocket, WebSocketDisconnect
from pydantic import Field

from diagnosis.schemas import AnalysisResult, CamelModel, Language
from live.errors import LiveError, MediaAccessError
from live.pcm import encode_pcm16, float_to_pcm16
from live.relay import RelayStatus
from live.transcript import ConversationTurn

LOGGER = logging.getLogger(__name__)


class StartMessage(CamelModel):
    type: Literal["start"]
    language: Language = "en"
    analysis_result: AnalysisResult | None = Field(default=None)


class BrowserMicrophone:
    """Microphone whose permission and samples come from the web client."""

    def __init__(self) -> None:
        self._decision: bool | None = None
        self._grant: asyncio.Future[bool] | None = None
        self._queue: asyncio.Queue[np.ndarray | None] = asyncio.Queue()
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    def resolve(self, granted: bool) -> None:
        self._decision = granted
        if self._grant is not None and not self._grant.done():
            self._grant.set_result(granted)

    async def open(self) -> None:
        granted = self._decision
        if granted is None:
            self._grant = asyncio.get_running_loop().create_future()
            try:
                granted = await self._grant
            finally:
                self._grant = None
        if not granted:
            raise MediaAccessError()
        self._queue = asyncio.Queue()
        self._open = True

    def push(self, block: np.ndarray) -> None:
        # Blocks arriving while the device is not open are dropped.
        if self._open:
            self._queue.put_nowait(block)

    async def blocks(self) -> AsyncIterator[np.ndarray]:
        queue = self._queue
        while True:
            block = await queue.get()
            if block is None:
                return
            yield block

    async def close(self) -> None:
        if self._grant is not None and not self._grant.done():
            self._grant.cancel()
        if self._open:
            self._open = False
            self._queue.put_nowait(None)


class BrowserPlaybackSink:
    """Forwards scheduled buffers to the client with their start times.

    The clock is the event loop clock relative to the creation of the sink.
    Natural completion is signalled by a timer at each buffer's end.
    """

    def __init__(self, post: Callable[[dict[str, Any]], None]) -> None:
        self._post = post
        self._loop = asyncio.get_running_loop()
        self._origin = self._loop.time()
        self._timers: dict[int, asyncio.TimerHandle] = {}

    @property
    def current_time(self) -> float:
        return self._loop.time() - self._origin

    def play(
        self,
        buffer_id: int,
        samples: np.ndarray,
        sample_rate: int,
        start_at: float,
        on_ended: Callable[[], None],
    ) -> None:
        self._post(
            {
                "type": "audio",
                "id": buffer_id,
                "startTime": start_at,
                "sampleRate": sample_rate,
                "data": encode_pcm16(float_to_pcm16(samples)),
            }
        )

        def _ended() -> None:
            self._timers.pop(buffer_id, None)
            on_ended()

        end = self._origin + start_at + samples.size / sample_rate
        self._timers[buffer_id] = self._loop.call_at(end, _ended)

    def stop(self, buffer_id: int) -> None:
        timer = self._timers.pop(buffer_id, None)
        if timer is not None:
            timer.cancel()
        self._post({"type": "stop", "id": buffer_id})


class BrowserChannel:
    """One WebSocket connection; all writes go through a single outbox."""

    def __init__(self, websocket: WebSocket) -> None:
        self._ws = websocket
        self._outbox: asyncio.Queue[dict[str, Any] | None] = asyncio.Queue()
        self.microphone = BrowserMicrophone()
        self.playback = BrowserPlaybackSink(self.post)

    def post(self, message: dict[str, Any]) -> None:
        self._outbox.put_nowait(message)

    def post_status(self, status: RelayStatus, error: LiveError | None) -> None:
        message: dict[str, Any] = {"type": "status", "status": status.value}
        if error is not None:
            message["error"] = error.detail
            message["code"] = error.code
        self.post(message)

    def post_turn(self, turn: ConversationTurn) -> None:
        self.post({"type": "turn", "author": turn.author, "text": turn.text})

    def finish(self) -> None:
        self._outbox.put_nowait(None)

    async def receive_start(self) -> StartMessage:
        data = await self._ws.receive_json()
        return StartMessage.model_validate(data)

    async def pump_incoming(self) -> None:
        """Dispatch client frames until it disconnects or asks to close."""

        while True:
            message = await self._ws.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))

            raw = message.get("bytes")
            if raw is not None:
                usable = len(raw) - len(raw) % 4
                self.microphone.push(np.frombuffer(raw[:usable], dtype="<f4").astype(np.float32))
                continue

            text = message.get("text")
            if not text:
                continue
            try:
                data = json.loads(text)
            except json.JSONDecodeError:
                LOGGER.warning("Ignoring malformed client message: %s", text[:200])
                continue

            kind = data.get("type") if isinstance(data, dict) else None
            if kind == "microphone":
                self.microphone.resolve(bool(data.get("granted")))
            elif kind == "close":
                return
            else:
                LOGGER.debug("Ignoring client message of type %s", kind)

    async def pump_outgoing(self) -> None:
        while True:
            message = await self._outbox.get()
            if message is None:
                return
            try:
                await self._ws.send_json(message)
            except (WebSocketDisconnect, RuntimeError):
                LOGGER.debug("Client went away; dropping outgoing messages")
                return
