"""Gemini API generation transport."""

from __future__ import annotations

from ..errors import ExtractionFailure, FailureKind
from . import Attachment, GenerationTransport


class GeminiTransport(GenerationTransport):
    """Generate text with Google Gemini."""

    name = "gemini"

    def __init__(self, api_key: str = "", model: str = "gemini-2.0-flash") -> None:
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
            import google.generativeai as genai
            from google.api_core import exceptions as google_exceptions
        except ImportError:
            raise ImportError(
                "google-generativeai SDK is required: pip install google-generativeai"
            ) from None

        genai.configure(api_key=self._api_key)
        model = genai.GenerativeModel(self._model)

        parts: list = []
        if attachment is not None:
            parts.append({"mime_type": attachment.media_type, "data": attachment.data})
        parts.append(prompt)

        try:
            response = await model.generate_content_async(
                parts,
                generation_config={"max_output_tokens": max_tokens},
            )
            return response.text
        except (google_exceptions.Unauthenticated, google_exceptions.PermissionDenied):
            raise ExtractionFailure(FailureKind.INVALID_CREDENTIALS) from None
        except google_exceptions.ResourceExhausted:
            raise ExtractionFailure(FailureKind.RATE_LIMITED) from None
        except google_exceptions.InvalidArgument as e:
            raise ExtractionFailure(FailureKind.MALFORMED_REQUEST) from e
        except google_exceptions.GoogleAPICallError as e:
            code = int(e.code) if e.code is not None else None
            raise ExtractionFailure(FailureKind.UPSTREAM, status_code=code) from e
        except (ConnectionError, TimeoutError) as e:
            raise ExtractionFailure(FailureKind.NETWORK) from e
        except ValueError as e:
            # response.text raises when the candidate was blocked or empty
            raise ExtractionFailure(
                FailureKind.UPSTREAM, f"AI service returned no text: {e}"
            ) from e
