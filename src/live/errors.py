from __future__ import annotations


class LiveError(Exception):
    code: str = "live_error"
    default_detail: str = "The voice assistant failed."

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.default_detail)
        self.detail = detail or self.default_detail


class MediaAccessError(LiveError):
    code = "media_access"
    default_detail = "Microphone access was denied or is unavailable."


class LiveTransportError(LiveError):
    code = "live_transport"
    default_detail = "The connection to the voice assistant was lost."
