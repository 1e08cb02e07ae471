from __future__ import annotations

import base64
from dataclasses import dataclass

import numpy as np


def float_to_pcm16(samples: np.ndarray) -> np.ndarray:
    """Convert float samples in [-1, 1] to signed 16-bit PCM."""

    x = np.asarray(samples, dtype=np.float32) * 32768.0
    return np.clip(x, -32768, 32767).astype(np.int16)


def pcm16_to_float(pcm: np.ndarray) -> np.ndarray:
    return pcm.astype(np.float32) / 32768.0


def encode_pcm16(pcm: np.ndarray) -> str:
    """Base64 of the little-endian byte representation."""

    return base64.b64encode(pcm.astype("<i2").tobytes()).decode("ascii")


def decode_pcm16(payload: str | bytes) -> np.ndarray:
    """Decode a PCM16 payload; ``str`` is base64, ``bytes`` is already raw."""

    raw = base64.b64decode(payload) if isinstance(payload, str) else bytes(payload)
    if len(raw) % 2:
        # Drop a dangling half sample rather than failing the whole chunk.
        raw = raw[:-1]
    return np.frombuffer(raw, dtype="<i2").astype(np.int16)


@dataclass(frozen=True, slots=True)
class AudioChunk:
    """One outbound realtime audio message."""

    data: str
    mime_type: str

    @property
    def pcm(self) -> np.ndarray:
        return decode_pcm16(self.data)


def encode_capture_block(block: np.ndarray, sample_rate: int) -> AudioChunk:
    return AudioChunk(
        data=encode_pcm16(float_to_pcm16(block)),
        mime_type=f"audio/pcm;rate={sample_rate}",
    )
