"""Shared abstractions for multimodal model clients."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from diagnosis.schemas import GroundingSource


@dataclass
class VisionReply:
    """Raw answer of a vision model: free text plus its citations."""

    text: str
    sources: list[GroundingSource] = field(default_factory=list)


class BaseVisionClient(ABC):
    """Abstract base class for image understanding providers."""

    @abstractmethod
    async def describe_image(
        self,
        *,
        image_b64: str,
        mime_type: str,
        instruction: str,
    ) -> VisionReply:
        """Send one inline image with an instruction and return the reply.

        Implementations raise ``UpstreamUnavailableError`` on transport failure.
        """
