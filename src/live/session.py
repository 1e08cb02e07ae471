"""Narrow interfaces around the remote live session and the local microphone."""

from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Protocol

import numpy as np

from live.pcm import AudioChunk


@dataclass(frozen=True, slots=True)
class InputTranscript:
    """Partial transcript of the user's speech."""

    text: str


@dataclass(frozen=True, slots=True)
class OutputTranscript:
    """Partial transcript of the assistant's speech."""

    text: str


@dataclass(frozen=True, slots=True)
class TurnComplete:
    pass


@dataclass(frozen=True, slots=True)
class AudioData:
    """Assistant audio: base64 text or raw bytes of PCM16 @ 24kHz."""

    data: str | bytes


@dataclass(frozen=True, slots=True)
class Interrupted:
    pass


LiveEvent = InputTranscript | OutputTranscript | TurnComplete | AudioData | Interrupted


class LiveSession(Protocol):
    """Opaque remote session handle."""

    async def send(self, chunk: AudioChunk) -> None:  # pragma: no cover - protocol stub
        ...

    def events(self) -> AsyncIterator[LiveEvent]:  # pragma: no cover - protocol stub
        """Yield inbound events until the remote side closes.

        Transport failures surface as ``LiveTransportError`` from the iterator.
        """
        ...

    async def close(self) -> None:  # pragma: no cover - protocol stub
        ...


class LiveConnector(Protocol):
    async def connect(self, system_instruction: str) -> LiveSession:  # pragma: no cover
        ...


class MicrophoneSource(Protocol):
    """Local capture device delivering fixed-size float blocks in [-1, 1]."""

    async def open(self) -> None:  # pragma: no cover - protocol stub
        """Acquire the device; raises ``MediaAccessError`` when denied."""
        ...

    def blocks(self) -> AsyncIterator[np.ndarray]:  # pragma: no cover - protocol stub
        ...

    async def close(self) -> None:  # pragma: no cover - protocol stub
        ...
