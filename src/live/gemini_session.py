"""Gemini Live implementation of the live session interfaces."""

from __future__ import annotations

import base64
import logging
from collections.abc import AsyncIterator
from contextlib import AsyncExitStack

from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from websockets.exceptions import ConnectionClosedOK, WebSocketException

from live.errors import LiveTransportError
from live.pcm import AudioChunk
from live.session import (
    AudioData,
    InputTranscript,
    Interrupted,
    LiveEvent,
    OutputTranscript,
    TurnComplete,
)

LOGGER = logging.getLogger(__name__)


def events_from_message(message: types.LiveServerMessage) -> list[LiveEvent]:
    """Flatten one server message into relay events.

    Transcripts come first, then turn completion and interruption. Audio
    parts go last so that audio sharing a message with an interruption
    starts the next playback sequence.
    """

    content = message.server_content
    if content is None:
        return []

    events: list[LiveEvent] = []
    if content.input_transcription and content.input_transcription.text:
        events.append(InputTranscript(content.input_transcription.text))
    if content.output_transcription and content.output_transcription.text:
        events.append(OutputTranscript(content.output_transcription.text))
    if content.turn_complete:
        events.append(TurnComplete())
    if content.interrupted:
        events.append(Interrupted())
    if content.model_turn and content.model_turn.parts:
        for part in content.model_turn.parts:
            if part.inline_data and part.inline_data.data:
                events.append(AudioData(part.inline_data.data))
    return events


class GeminiLiveSession:
    def __init__(self, session, stack: AsyncExitStack) -> None:
        self._session = session
        self._stack = stack
        self._closed = False

    async def send(self, chunk: AudioChunk) -> None:
        try:
            await self._session.send_realtime_input(
                audio=types.Blob(data=base64.b64decode(chunk.data), mime_type=chunk.mime_type)
            )
        except (genai_errors.APIError, WebSocketException, OSError) as exc:
            raise LiveTransportError(str(exc)) from exc

    async def events(self) -> AsyncIterator[LiveEvent]:
        try:
            while not self._closed:
                received = False
                # receive() stops after every completed turn.
                async for message in self._session.receive():
                    received = True
                    for event in events_from_message(message):
                        yield event
                if not received:
                    return
        except ConnectionClosedOK:
            return
        except (genai_errors.APIError, WebSocketException, OSError) as exc:
            raise LiveTransportError(str(exc)) from exc

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._stack.aclose()


class GeminiLiveConnector:
    """Opens Gemini Live sessions with audio replies and both transcriptions."""

    def __init__(self, *, api_key: str, model: str, client: genai.Client | None = None) -> None:
        self._client = client or genai.Client(api_key=api_key)
        self._model = model

    async def connect(self, system_instruction: str) -> GeminiLiveSession:
        config = types.LiveConnectConfig(
            response_modalities=[types.Modality.AUDIO],
            input_audio_transcription=types.AudioTranscriptionConfig(),
            output_audio_transcription=types.AudioTranscriptionConfig(),
            system_instruction=system_instruction,
        )
        stack = AsyncExitStack()
        try:
            session = await stack.enter_async_context(
                self._client.aio.live.connect(model=self._model, config=config)
            )
        except (genai_errors.APIError, WebSocketException, OSError) as exc:
            await stack.aclose()
            raise LiveTransportError(str(exc)) from exc

        LOGGER.info("Connected to live model %s", self._model)
        return GeminiLiveSession(session, stack)
