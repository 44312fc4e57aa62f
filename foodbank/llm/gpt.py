"""OpenAI chat completions generation transport."""

from __future__ import annotations

import base64

from ..errors import ExtractionFailure, FailureKind
from . import Attachment, GenerationTransport

# Models that take max_completion_tokens instead of max_tokens
_REASONING_PREFIXES = ("o1", "o3", "o4", "gpt-5")


def is_reasoning_model(model: str) -> bool:
    return model.startswith(_REASONING_PREFIXES)


class OpenAITransport(GenerationTransport):
    """Generate text with OpenAI chat completions.

    Chat completions accept images but not PDF documents; callers render
    PDFs to an image first.
    """

    name = "openai"
    accepts_pdf = False

    def __init__(self, api_key: str = "", model: str = "gpt-4o") -> None:
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
        if attachment is not None and attachment.is_pdf:
            raise ExtractionFailure(
                FailureKind.MALFORMED_REQUEST,
                "OpenAI does not accept PDF attachments; send a page image instead.",
            )

        try:
            import openai
        except ImportError:
            raise ImportError("openai SDK is required: pip install openai") from None

        if attachment is None:
            content: str | list[dict] = prompt
        else:
            encoded = base64.b64encode(attachment.data).decode()
            content = [
                {"type": "text", "text": prompt},
                {
                    "type": "image_url",
                    "image_url": {"url": f"data:{attachment.media_type};base64,{encoded}"},
                },
            ]

        limit_key = "max_completion_tokens" if is_reasoning_model(self._model) else "max_tokens"
        client = openai.AsyncOpenAI(api_key=self._api_key)
        try:
            response = await client.chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": content}],
                **{limit_key: max_tokens},
            )
        except openai.AuthenticationError:
            raise ExtractionFailure(FailureKind.INVALID_CREDENTIALS) from None
        except openai.RateLimitError:
            raise ExtractionFailure(FailureKind.RATE_LIMITED) from None
        except openai.BadRequestError as e:
            raise ExtractionFailure(FailureKind.MALFORMED_REQUEST) from e
        except openai.APIStatusError as e:
            raise ExtractionFailure(FailureKind.UPSTREAM, status_code=e.status_code) from e
        except openai.APIConnectionError as e:
            raise ExtractionFailure(FailureKind.NETWORK) from e

        text = response.choices[0].message.content if response.choices else None
        if not text:
            raise ExtractionFailure(FailureKind.UPSTREAM, "AI service returned an empty response.")
        return text
