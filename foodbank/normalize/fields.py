"""Field kinds: one declared coercion rule per value in a model reply.

Each kind reads its key out of a decoded JSON object and either returns a
Python value or raises ``ParseFailure``. Tolerated alternate encodings (quoted
numbers, the literal string ``"null"``, booleans spelled as strings) live here
and nowhere else.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable

from ..errors import ParseFailure, ValidationFailure

MISSING = object()


def join_path(parent: str, key: str) -> str:
    return f"{parent}.{key}" if parent else key


def _is_null_string(value: Any) -> bool:
    return isinstance(value, str) and (
        not value.strip() or value.strip().lower() == "null"
    )


def _describe(value: Any) -> str:
    match value:
        case bool():
            return "bool"
        case int() | float():
            return "number"
        case str():
            return "string"
        case list():
            return "array"
        case dict():
            return "object"
        case None:
            return "null"
    return type(value).__name__


class FieldKind(ABC):
    """A single named field of a schema.

    ``key`` is the JSON key; ``attr`` is the name the decoded value is stored
    under when the schema builds its record.
    """

    def __init__(self, key: str, attr: str | None = None) -> None:
        self.key = key
        self.attr = attr or key

    def read(self, obj: dict, path: str, decoded: dict[str, Any]) -> Any:
        return self.decode(obj.get(self.key, MISSING), join_path(path, self.key), decoded)

    @abstractmethod
    def decode(self, value: Any, path: str, decoded: dict[str, Any]) -> Any:
        """Coerce one raw JSON value. *decoded* holds sibling values so far."""
        ...


class RequiredString(FieldKind):
    def __init__(
        self, key: str, placeholder: str | None = None, attr: str | None = None
    ) -> None:
        super().__init__(key, attr)
        self.placeholder = placeholder

    def decode(self, value, path, decoded):
        if isinstance(value, str) and not _is_null_string(value):
            return value.strip()
        if self.placeholder is not None:
            return self.placeholder
        if value is MISSING:
            raise ParseFailure.missing_key(path)
        if value is None or _is_null_string(value):
            raise ParseFailure.unexpected_null(path, "string")
        raise ParseFailure.type_mismatch(path, "string")


class OptionalString(FieldKind):
    def decode(self, value, path, decoded):
        if isinstance(value, str) and not _is_null_string(value):
            return value.strip()
        return None


class Number(FieldKind):
    def __init__(
        self,
        key: str,
        default: float = 0.0,
        minimum: float | None = None,
        attr: str | None = None,
    ) -> None:
        super().__init__(key, attr)
        self.default = default
        self.minimum = minimum

    def _coerce(self, value: Any) -> float:
        # bool is an int subclass; a flag is never a quantity
        if isinstance(value, bool):
            return self.default
        if isinstance(value, (int, float)):
            try:
                number = float(value)
            except OverflowError:
                return self.default
        elif isinstance(value, str):
            try:
                number = float(value.strip())
            except ValueError:
                return self.default
        else:
            return self.default
        if not math.isfinite(number):
            return self.default
        return number

    def decode(self, value, path, decoded):
        number = self._coerce(value)
        if self.minimum is not None and number < self.minimum:
            raise ValidationFailure(path, f"must be >= {self.minimum:g}, got {number:g}")
        return number


class Flag(FieldKind):
    def __init__(
        self,
        key: str,
        default: bool = False,
        fallback: Callable[[dict[str, Any]], bool] | None = None,
        attr: str | None = None,
    ) -> None:
        super().__init__(key, attr)
        self.default = default
        self.fallback = fallback

    def decode(self, value, path, decoded):
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered == "true":
                return True
            if lowered == "false":
                return False
        if self.fallback is not None:
            return bool(self.fallback(decoded))
        return self.default


class Choice(FieldKind):
    def __init__(
        self,
        key: str,
        members: tuple[str, ...],
        default: str,
        attr: str | None = None,
    ) -> None:
        super().__init__(key, attr)
        self.members = members
        self.default = default
        self._lookup = {m.lower(): m for m in members}

    def decode(self, value, path, decoded):
        if isinstance(value, str):
            return self._lookup.get(value.strip().lower(), self.default)
        return self.default


class SubChoice(FieldKind):
    """A value constrained to the subset allowed by a sibling field."""

    def __init__(
        self,
        key: str,
        parent: str,
        allowed: Callable[[str], tuple[str, ...]],
        attr: str | None = None,
    ) -> None:
        super().__init__(key, attr)
        self.parent = parent
        self.allowed = allowed

    def decode(self, value, path, decoded):
        if not isinstance(value, str) or _is_null_string(value):
            return None
        options = self.allowed(decoded.get(self.parent, ""))
        lookup = {o.lower(): o for o in options}
        return lookup.get(value.strip().lower())


class Strings(FieldKind):
    def decode(self, value, path, decoded):
        if value is MISSING or value is None:
            return []
        if not isinstance(value, list):
            raise ParseFailure.type_mismatch(path, "array")
        return [
            v.strip() for v in value if isinstance(v, str) and not _is_null_string(v)
        ]


class ListOf(FieldKind):
    def __init__(self, key: str, schema: Schema, attr: str | None = None) -> None:
        super().__init__(key, attr)
        self.schema = schema

    def decode(self, value, path, decoded):
        if value is MISSING or value is None:
            return []
        if not isinstance(value, list):
            raise ParseFailure.type_mismatch(path, "array")
        return [
            self.schema.decode(element, f"{path}[{i}]")
            for i, element in enumerate(value)
        ]


@dataclass(frozen=True)
class Schema:
    """An object shape: ordered field kinds plus a record constructor.

    Fields decode in declaration order so that later kinds (flag fallbacks,
    subcategories) can see earlier sibling values.
    """

    name: str
    fields: tuple[FieldKind, ...]
    build: Callable[[dict[str, Any]], Any]

    def decode(self, value: Any, path: str = "") -> Any:
        if not isinstance(value, dict):
            raise ParseFailure.type_mismatch(path or self.name, "object")
        decoded: dict[str, Any] = {}
        for kind in self.fields:
            decoded[kind.attr] = kind.read(value, path, decoded)
        return self.build(decoded)


@dataclass(frozen=True)
class ArrayOf:
    """A top-level JSON array whose elements all follow *schema*."""

    schema: Schema

    @property
    def name(self) -> str:
        return f"{self.schema.name}[]"

    def decode(self, value: Any, path: str = "") -> list:
        if not isinstance(value, list):
            raise ParseFailure.type_mismatch(path or self.name, "array")
        return [
            self.schema.decode(element, f"{path}[{i}]")
            for i, element in enumerate(value)
        ]
