"""Relay between a local microphone, a remote live session and audio playback."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from enum import Enum

from live.errors import LiveError, LiveTransportError
from live.pcm import decode_pcm16, encode_capture_block, pcm16_to_float
from live.playback import PlaybackScheduler, PlaybackSink
from live.session import (
    AudioData,
    InputTranscript,
    Interrupted,
    LiveConnector,
    LiveEvent,
    LiveSession,
    MicrophoneSource,
    OutputTranscript,
    TurnComplete,
)
from live.transcript import ConversationTurn, TranscriptAccumulator

LOGGER = logging.getLogger(__name__)


class RelayStatus(str, Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"


StatusListener = Callable[[RelayStatus, LiveError | None], None]
TurnListener = Callable[[ConversationTurn], None]


async def _cancel(task: asyncio.Task | None) -> None:
    if task is None or task.done() or task is asyncio.current_task():
        return
    task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await task


class LiveAudioRelay:
    """Owns the microphone, the remote session and the playback registry.

    Lifecycle: ``idle -> connecting -> connected -> (idle | error)``. Local
    audio only starts streaming once the microphone is granted and the remote
    handshake has completed. Every exit path releases the microphone, stops
    all playback and closes the session, in that order.
    """

    def __init__(
        self,
        *,
        microphone: MicrophoneSource,
        connector: LiveConnector,
        playback: PlaybackSink,
        input_sample_rate: int = 16000,
        output_sample_rate: int = 24000,
        on_status: StatusListener | None = None,
        on_turn: TurnListener | None = None,
    ) -> None:
        self._microphone = microphone
        self._connector = connector
        self._scheduler = PlaybackScheduler(playback, sample_rate=output_sample_rate)
        self._input_sample_rate = input_sample_rate
        self._on_status = on_status
        self._on_turn = on_turn

        self._status = RelayStatus.IDLE
        self._transcript = TranscriptAccumulator()
        self._session: LiveSession | None = None
        self._start_task: asyncio.Task | None = None
        self._capture_task: asyncio.Task | None = None
        self._receive_task: asyncio.Task | None = None
        self._teardown_lock = asyncio.Lock()
        self.last_error: LiveError | None = None

    @property
    def status(self) -> RelayStatus:
        return self._status

    @property
    def transcript(self) -> list[ConversationTurn]:
        return list(self._transcript.turns)

    @property
    def scheduler(self) -> PlaybackScheduler:
        return self._scheduler

    def open(self, system_instruction: str) -> asyncio.Task | None:
        """Begin connecting; returns the start task, or None if already active."""

        if self._status in (RelayStatus.CONNECTING, RelayStatus.CONNECTED):
            return None

        self.last_error = None
        self._transcript.reset()
        self._set_status(RelayStatus.CONNECTING)
        self._start_task = asyncio.create_task(self._start(system_instruction))
        return self._start_task

    async def close(self) -> None:
        """Tear everything down and return to idle. Safe to call repeatedly."""

        await _cancel(self._start_task)
        if self._status is RelayStatus.IDLE and not self._holds_resources():
            return

        await self._teardown()
        self._set_status(RelayStatus.IDLE)

    def handle_event(self, event: LiveEvent) -> None:
        if isinstance(event, InputTranscript):
            self._transcript.add_user(event.text)
        elif isinstance(event, OutputTranscript):
            self._transcript.add_assistant(event.text)
        elif isinstance(event, TurnComplete):
            for turn in self._transcript.complete_turn():
                if self._on_turn:
                    self._on_turn(turn)
        elif isinstance(event, AudioData):
            samples = pcm16_to_float(decode_pcm16(event.data))
            self._scheduler.schedule(samples)
        elif isinstance(event, Interrupted):
            LOGGER.debug("Assistant interrupted; dropping %d buffers", len(self._scheduler.active))
            self._scheduler.stop_all()

    async def _start(self, system_instruction: str) -> None:
        try:
            await self._microphone.open()
            self._session = await self._connector.connect(system_instruction)
        except LiveError as exc:
            LOGGER.error("Live session failed to start: %s", exc)
            await self._fail(exc)
            return
        except Exception as exc:
            LOGGER.exception("Live session failed to start")
            await self._fail(LiveTransportError(str(exc)))
            return

        self._set_status(RelayStatus.CONNECTED)
        self._capture_task = asyncio.create_task(self._pump_capture(self._session))
        self._receive_task = asyncio.create_task(self._pump_events(self._session))

    async def _pump_capture(self, session: LiveSession) -> None:
        try:
            async for block in self._microphone.blocks():
                await session.send(encode_capture_block(block, self._input_sample_rate))
        except Exception as exc:
            await self._transport_failed(exc)

    async def _pump_events(self, session: LiveSession) -> None:
        try:
            async for event in session.events():
                self.handle_event(event)
        except Exception as exc:
            await self._transport_failed(exc)
            return

        LOGGER.info("Live session closed by the remote side")
        await self._teardown()
        self._set_status(RelayStatus.IDLE)

    async def _transport_failed(self, exc: Exception) -> None:
        error = exc if isinstance(exc, LiveError) else LiveTransportError(str(exc))
        LOGGER.error("Live session transport error: %s", exc)
        await self._fail(error)

    async def _fail(self, error: LiveError) -> None:
        self.last_error = error
        await self._teardown()
        self._set_status(RelayStatus.ERROR, error)

    async def _teardown(self) -> None:
        async with self._teardown_lock:
            await _cancel(self._capture_task)
            self._capture_task = None
            try:
                await self._microphone.close()
            except Exception:
                LOGGER.exception("Failed to release microphone")

            try:
                self._scheduler.stop_all()
            except Exception:
                LOGGER.exception("Failed to stop playback")

            await _cancel(self._receive_task)
            self._receive_task = None
            session, self._session = self._session, None
            if session is not None:
                try:
                    await session.close()
                except Exception:
                    LOGGER.exception("Failed to close live session")

    def _holds_resources(self) -> bool:
        return (
            self._session is not None
            or self._capture_task is not None
            or self._receive_task is not None
            or bool(self._scheduler.active)
        )

    def _set_status(self, status: RelayStatus, error: LiveError | None = None) -> None:
        if status is self._status and error is None:
            return
        self._status = status
        LOGGER.info("Live relay status: %s", status.value)
        if self._on_status:
            self._on_status(status, error)
