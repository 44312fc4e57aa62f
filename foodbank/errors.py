"""Exception types raised by the ingestion pipeline."""

from __future__ import annotations

from enum import Enum


class IngestError(Exception):
    """Base class for every failure raised by foodbank."""


class FailureKind(str, Enum):
    INVALID_CREDENTIALS = "invalid_credentials"
    RATE_LIMITED = "rate_limited"
    MALFORMED_REQUEST = "malformed_request"
    UPSTREAM = "upstream"
    NETWORK = "network"
    CANCELLED = "cancelled"
    RECOGNITION = "recognition"


_KIND_MESSAGES: dict[FailureKind, str] = {
    FailureKind.INVALID_CREDENTIALS: "Invalid API key. Please check your settings.",
    FailureKind.RATE_LIMITED: "Rate limited. Please try again later.",
    FailureKind.MALFORMED_REQUEST: "The AI service rejected the request.",
    FailureKind.UPSTREAM: "AI service returned an error.",
    FailureKind.NETWORK: "Network error while contacting the AI service.",
    FailureKind.CANCELLED: "Request cancelled.",
    FailureKind.RECOGNITION: "Text recognition failed.",
}


class ExtractionFailure(IngestError):
    """A generation or recognition transport failed.

    Never retried automatically: every transport call may be billed, so a
    retry is always an explicit re-invocation by the caller.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str = "",
        status_code: int | None = None,
    ) -> None:
        self.kind = kind
        self.status_code = status_code
        if not message:
            message = _KIND_MESSAGES[kind]
            if status_code is not None:
                message = f"AI service returned error (HTTP {status_code})."
        super().__init__(message)

    @classmethod
    def cancelled(cls) -> ExtractionFailure:
        return cls(FailureKind.CANCELLED)


class ParseCause(str, Enum):
    NO_JSON = "no_json"
    MISSING_KEY = "missing_key"
    TYPE_MISMATCH = "type_mismatch"
    UNEXPECTED_NULL = "unexpected_null"
    CORRUPT = "corrupt"


class ParseFailure(IngestError):
    """The model reply could not be turned into the requested record."""

    def __init__(self, cause: ParseCause, detail: str) -> None:
        self.cause = cause
        self.detail = detail
        super().__init__(f"Failed to parse response: {detail}")

    @classmethod
    def no_json(cls) -> ParseFailure:
        return cls(ParseCause.NO_JSON, "no JSON object/array found")

    @classmethod
    def missing_key(cls, path: str) -> ParseFailure:
        return cls(ParseCause.MISSING_KEY, f"Missing key: {path}")

    @classmethod
    def type_mismatch(cls, path: str, expected: str) -> ParseFailure:
        return cls(
            ParseCause.TYPE_MISMATCH,
            f"Type mismatch for {path}: expected {expected}",
        )

    @classmethod
    def unexpected_null(cls, path: str, expected: str) -> ParseFailure:
        return cls(
            ParseCause.UNEXPECTED_NULL,
            f"Null value for {path}: expected {expected}",
        )

    @classmethod
    def corrupt(cls, reason: str) -> ParseFailure:
        return cls(ParseCause.CORRUPT, f"Corrupted data: {reason}")


class ValidationFailure(IngestError):
    """A decoded or edited value violates a domain invariant."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(f"Invalid value for {path}: {message}")
