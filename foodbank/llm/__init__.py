"""Text-generation transport base class, attachment type, and factory."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..config import IngestConfig

PDF_MEDIA_TYPE = "application/pdf"


@dataclass(frozen=True)
class Attachment:
    data: bytes
    media_type: str = "image/jpeg"

    @property
    def is_pdf(self) -> bool:
        return self.media_type == PDF_MEDIA_TYPE


class GenerationTransport(ABC):
    """Abstract base for a generative text service.

    Implementations translate every vendor failure into ``ExtractionFailure``
    and never retry on their own.
    """

    name: str = ""
    accepts_pdf: bool = True

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        attachment: Attachment | None = None,
        max_tokens: int = 1024,
    ) -> str:
        """Send *prompt* (plus an optional image or document) and return the reply text."""
        ...


def create_transport(config: IngestConfig) -> GenerationTransport:
    """Create a generation transport based on configuration."""
    provider = config.llm.provider

    match provider:
        case "claude":
            from .claude import ClaudeTransport

            return ClaudeTransport(
                api_key=config.llm.claude.api_key,
                model=config.llm.claude.model,
            )
        case "gemini":
            from .gemini import GeminiTransport

            return GeminiTransport(
                api_key=config.llm.gemini.api_key,
                model=config.llm.gemini.model,
            )
        case "openai":
            from .gpt import OpenAITransport

            return OpenAITransport(
                api_key=config.llm.openai.api_key,
                model=config.llm.openai.model,
            )
        case _:
            raise ValueError(
                f"Unknown LLM provider: {provider!r} "
                f"(choose one of claude / gemini / openai)"
            )
