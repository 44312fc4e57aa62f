"""Claude API generation transport."""

from __future__ import annotations

import base64
import logging

from ..errors import ExtractionFailure, FailureKind
from . import Attachment, GenerationTransport

logger = logging.getLogger(__name__)


def _content_block(attachment: Attachment) -> dict:
    return {
        "type": "document" if attachment.is_pdf else "image",
        "source": {
            "type": "base64",
            "media_type": attachment.media_type,
            "data": base64.standard_b64encode(attachment.data).decode(),
        },
    }


class ClaudeTransport(GenerationTransport):
    """Generate text with Anthropic's Messages API."""

    name = "claude"

    def __init__(self, api_key: str = "", model: str = "claude-sonnet-4-5-20250929") -> None:
        self._api_key = api_key
        self._model = model

    async def generate(
        self,
        prompt: str,
        attachment: Attachment | None = None,
        max_tokens: int = 1024,
    ) -> str:
        if not self._api_key:
            raise ExtractionFailure(FailureKind.INVALID_CREDENTIALS)

        try:
            import anthropic
        except ImportError:
            raise ImportError(
                "anthropic SDK is required: pip install anthropic"
            ) from None

        content: list[dict] = []
        if attachment is not None:
            content.append(_content_block(attachment))
        content.append({"type": "text", "text": prompt})

        client = anthropic.AsyncAnthropic(api_key=self._api_key)
        try:
            response = await client.messages.create(
                model=self._model,
                max_tokens=max_tokens,
                messages=[{"role": "user", "content": content}],
            )
        except anthropic.AuthenticationError:
            raise ExtractionFailure(FailureKind.INVALID_CREDENTIALS) from None
        except anthropic.RateLimitError:
            raise ExtractionFailure(FailureKind.RATE_LIMITED) from None
        except anthropic.BadRequestError as e:
            raise ExtractionFailure(FailureKind.MALFORMED_REQUEST) from e
        except anthropic.APIStatusError as e:
            raise ExtractionFailure(
                FailureKind.UPSTREAM, status_code=e.status_code
            ) from e
        except anthropic.APIConnectionError as e:
            raise ExtractionFailure(FailureKind.NETWORK) from e

        if not response.content:
            raise ExtractionFailure(FailureKind.UPSTREAM, "AI service returned an empty response.")
        logger.debug("Claude replied with %d content block(s)", len(response.content))
        return response.content[0].text
