"""Tests for generation transports (mocked SDKs)."""

import sys
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from foodbank.config import load_config
from foodbank.errors import ExtractionFailure, FailureKind
from foodbank.llm import Attachment, GenerationTransport, create_transport
from foodbank.llm.claude import ClaudeTransport
from foodbank.llm.gemini import GeminiTransport
from foodbank.llm.gpt import OpenAITransport, is_reasoning_model


class FakeStatusError(Exception):
    def __init__(self, status_code=500):
        super().__init__(f"HTTP {status_code}")
        self.status_code = status_code


class FakeAuthError(FakeStatusError):
    pass


class FakeRateLimitError(FakeStatusError):
    pass


class FakeBadRequestError(FakeStatusError):
    pass


class FakeConnectionError(Exception):
    pass


def _sdk_errors(mock_sdk):
    mock_sdk.AuthenticationError = FakeAuthError
    mock_sdk.RateLimitError = FakeRateLimitError
    mock_sdk.BadRequestError = FakeBadRequestError
    mock_sdk.APIStatusError = FakeStatusError
    mock_sdk.APIConnectionError = FakeConnectionError
    return mock_sdk


ERROR_CASES = [
    (FakeAuthError(401), FailureKind.INVALID_CREDENTIALS, None),
    (FakeRateLimitError(429), FailureKind.RATE_LIMITED, None),
    (FakeBadRequestError(400), FailureKind.MALFORMED_REQUEST, None),
    (FakeStatusError(503), FailureKind.UPSTREAM, 503),
    (FakeConnectionError("reset"), FailureKind.NETWORK, None),
]


@pytest.fixture
def mock_anthropic():
    mock_response = MagicMock()
    mock_response.content = [MagicMock(text='{"ok": true}')]
    mock_client = AsyncMock()
    mock_client.messages.create = AsyncMock(return_value=mock_response)
    mock = _sdk_errors(MagicMock())
    mock.AsyncAnthropic.return_value = mock_client
    with patch.dict(sys.modules, {"anthropic": mock}):
        yield mock


@pytest.fixture
def mock_openai():
    mock_response = MagicMock()
    mock_response.choices = [MagicMock(message=MagicMock(content='{"ok": true}'))]
    mock_client = MagicMock()
    mock_client.chat.completions.create = AsyncMock(return_value=mock_response)
    mock = _sdk_errors(MagicMock())
    mock.AsyncOpenAI.return_value = mock_client
    with patch.dict(sys.modules, {"openai": mock}):
        yield mock


class GoogleAPICallError(Exception):
    def __init__(self, code=500):
        super().__init__(f"code {code}")
        self.code = code


class Unauthenticated(GoogleAPICallError):
    pass


class PermissionDenied(GoogleAPICallError):
    pass


class ResourceExhausted(GoogleAPICallError):
    pass


class InvalidArgument(GoogleAPICallError):
    pass


@pytest.fixture
def mock_genai():
    exceptions = SimpleNamespace(
        GoogleAPICallError=GoogleAPICallError,
        Unauthenticated=Unauthenticated,
        PermissionDenied=PermissionDenied,
        ResourceExhausted=ResourceExhausted,
        InvalidArgument=InvalidArgument,
    )
    api_core = MagicMock()
    api_core.exceptions = exceptions
    genai = MagicMock()
    model = MagicMock()
    model.generate_content_async = AsyncMock(return_value=MagicMock(text='{"ok": true}'))
    genai.GenerativeModel.return_value = model
    google = MagicMock()
    google.generativeai = genai
    google.api_core = api_core
    with patch.dict(sys.modules, {
        "google": google,
        "google.generativeai": genai,
        "google.api_core": api_core,
        "google.api_core.exceptions": exceptions,
    }):
        yield genai


class TestCreateTransport:
    def test_create_claude_transport(self):
        assert isinstance(create_transport(load_config()), ClaudeTransport)

    def test_create_gemini_transport(self):
        config = load_config()
        config.llm.provider = "gemini"
        assert isinstance(create_transport(config), GeminiTransport)

    def test_create_openai_transport(self):
        config = load_config()
        config.llm.provider = "openai"
        transport = create_transport(config)
        assert isinstance(transport, OpenAITransport)
        assert isinstance(transport, GenerationTransport)

    def test_create_unknown_transport(self):
        config = load_config()
        config.llm.provider = "unknown"
        with pytest.raises(ValueError, match="Unknown LLM provider"):
            create_transport(config)


class TestAttachment:
    def test_pdf_detection(self):
        assert Attachment(b"%PDF", "application/pdf").is_pdf
        assert not Attachment(b"\xff\xd8").is_pdf


class TestClaudeTransport:
    @pytest.mark.asyncio
    async def test_requires_api_key(self):
        with pytest.raises(ExtractionFailure) as exc:
            await ClaudeTransport(api_key="").generate("hi")
        assert exc.value.kind is FailureKind.INVALID_CREDENTIALS
        assert str(exc.value) == "Invalid API key. Please check your settings."

    @pytest.mark.asyncio
    async def test_text_request(self, mock_anthropic):
        transport = ClaudeTransport(api_key="test-key", model="claude-test")
        text = await transport.generate("Extract.", max_tokens=321)

        assert text == '{"ok": true}'
        mock_anthropic.AsyncAnthropic.assert_called_once_with(api_key="test-key")
        client = mock_anthropic.AsyncAnthropic.return_value
        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["model"] == "claude-test"
        assert kwargs["max_tokens"] == 321
        assert kwargs["messages"][0]["content"] == [{"type": "text", "text": "Extract."}]

    @pytest.mark.asyncio
    async def test_image_and_pdf_blocks(self, mock_anthropic):
        transport = ClaudeTransport(api_key="test-key")
        client = mock_anthropic.AsyncAnthropic.return_value

        await transport.generate("Read.", Attachment(b"jpeg-bytes", "image/jpeg"))
        content = client.messages.create.call_args.kwargs["messages"][0]["content"]
        assert content[0]["type"] == "image"
        assert content[0]["source"]["media_type"] == "image/jpeg"
        assert content[-1] == {"type": "text", "text": "Read."}

        await transport.generate("Read.", Attachment(b"%PDF-1.4", "application/pdf"))
        content = client.messages.create.call_args.kwargs["messages"][0]["content"]
        assert content[0]["type"] == "document"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error,kind,status", ERROR_CASES)
    async def test_error_mapping(self, mock_anthropic, error, kind, status):
        client = mock_anthropic.AsyncAnthropic.return_value
        client.messages.create.side_effect = error
        with pytest.raises(ExtractionFailure) as exc:
            await ClaudeTransport(api_key="k").generate("hi")
        assert exc.value.kind is kind
        assert exc.value.status_code == status

    @pytest.mark.asyncio
    async def test_upstream_message_names_status(self, mock_anthropic):
        client = mock_anthropic.AsyncAnthropic.return_value
        client.messages.create.side_effect = FakeStatusError(529)
        with pytest.raises(ExtractionFailure, match=r"HTTP 529"):
            await ClaudeTransport(api_key="k").generate("hi")


class TestGeminiTransport:
    @pytest.mark.asyncio
    async def test_requires_api_key(self):
        with pytest.raises(ExtractionFailure) as exc:
            await GeminiTransport(api_key="").generate("hi")
        assert exc.value.kind is FailureKind.INVALID_CREDENTIALS

    @pytest.mark.asyncio
    async def test_generate_with_image(self, mock_genai):
        transport = GeminiTransport(api_key="g-key", model="gemini-test")
        text = await transport.generate("Read.", Attachment(b"img", "image/png"), max_tokens=99)

        assert text == '{"ok": true}'
        mock_genai.configure.assert_called_once_with(api_key="g-key")
        mock_genai.GenerativeModel.assert_called_once_with("gemini-test")
        model = mock_genai.GenerativeModel.return_value
        args, kwargs = model.generate_content_async.call_args
        assert args[0] == [{"mime_type": "image/png", "data": b"img"}, "Read."]
        assert kwargs["generation_config"] == {"max_output_tokens": 99}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error,kind,status", [
        (Unauthenticated(401), FailureKind.INVALID_CREDENTIALS, None),
        (PermissionDenied(403), FailureKind.INVALID_CREDENTIALS, None),
        (ResourceExhausted(429), FailureKind.RATE_LIMITED, None),
        (InvalidArgument(400), FailureKind.MALFORMED_REQUEST, None),
        (GoogleAPICallError(500), FailureKind.UPSTREAM, 500),
        (ConnectionError("reset"), FailureKind.NETWORK, None),
    ])
    async def test_error_mapping(self, mock_genai, error, kind, status):
        model = mock_genai.GenerativeModel.return_value
        model.generate_content_async.side_effect = error
        with pytest.raises(ExtractionFailure) as exc:
            await GeminiTransport(api_key="k").generate("hi")
        assert exc.value.kind is kind
        assert exc.value.status_code == status


class TestOpenAITransport:
    def test_reasoning_models(self):
        assert is_reasoning_model("o3-mini")
        assert is_reasoning_model("gpt-5")
        assert not is_reasoning_model("gpt-4o")

    @pytest.mark.asyncio
    async def test_requires_api_key(self):
        with pytest.raises(ExtractionFailure) as exc:
            await OpenAITransport(api_key="").generate("hi")
        assert exc.value.kind is FailureKind.INVALID_CREDENTIALS

    def test_pdf_support_flags(self):
        assert OpenAITransport.accepts_pdf is False
        assert ClaudeTransport.accepts_pdf is True
        assert GeminiTransport.accepts_pdf is True

    @pytest.mark.asyncio
    async def test_pdf_rejected(self):
        with pytest.raises(ExtractionFailure) as exc:
            await OpenAITransport(api_key="k").generate(
                "hi", Attachment(b"%PDF", "application/pdf")
            )
        assert exc.value.kind is FailureKind.MALFORMED_REQUEST

    @pytest.mark.asyncio
    async def test_text_request_uses_max_tokens(self, mock_openai):
        text = await OpenAITransport(api_key="k", model="gpt-4o").generate("hi", max_tokens=50)
        assert text == '{"ok": true}'
        client = mock_openai.AsyncOpenAI.return_value
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["max_tokens"] == 50
        assert "max_completion_tokens" not in kwargs
        assert kwargs["messages"] == [{"role": "user", "content": "hi"}]

    @pytest.mark.asyncio
    async def test_reasoning_model_image_request(self, mock_openai):
        transport = OpenAITransport(api_key="k", model="gpt-5")
        await transport.generate("Read.", Attachment(b"abc", "image/jpeg"), max_tokens=4096)
        client = mock_openai.AsyncOpenAI.return_value
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["max_completion_tokens"] == 4096
        content = kwargs["messages"][0]["content"]
        assert content[0] == {"type": "text", "text": "Read."}
        assert content[1]["image_url"]["url"] == "data:image/jpeg;base64,YWJj"

    @pytest.mark.asyncio
    async def test_empty_reply(self, mock_openai):
        client = mock_openai.AsyncOpenAI.return_value
        client.chat.completions.create.return_value.choices = []
        with pytest.raises(ExtractionFailure) as exc:
            await OpenAITransport(api_key="k").generate("hi")
        assert exc.value.kind is FailureKind.UPSTREAM

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error,kind,status", ERROR_CASES)
    async def test_error_mapping(self, mock_openai, error, kind, status):
        client = mock_openai.AsyncOpenAI.return_value
        client.chat.completions.create.side_effect = error
        with pytest.raises(ExtractionFailure) as exc:
            await OpenAITransport(api_key="k").generate("hi")
        assert exc.value.kind is kind
        assert exc.value.status_code == status
