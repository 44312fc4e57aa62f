"""Turn raw model replies into typed records."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from ..errors import ParseFailure
from .fields import ArrayOf, Schema

logger = logging.getLogger(__name__)

_LEADING_FENCE = re.compile(r"^```[A-Za-z0-9_+-]*[ \t]*\n?")
_TRAILING_FENCE = re.compile(r"\n?```$")


def strip_fences(text: str) -> str:
    """Remove a leading and/or trailing markdown fence around the reply."""
    cleaned = text.strip()
    cleaned = _LEADING_FENCE.sub("", cleaned, count=1)
    cleaned = _TRAILING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()


def extract_json_text(raw_text: str) -> str:
    """Slice the reply from the first opening to the last closing bracket."""
    cleaned = strip_fences(raw_text)
    starts = [i for i in (cleaned.find("{"), cleaned.find("[")) if i != -1]
    end = max(cleaned.rfind("}"), cleaned.rfind("]"))
    if not starts or end == -1 or end < min(starts):
        raise ParseFailure.no_json()
    return cleaned[min(starts):end + 1]


def load_json(raw_text: str) -> Any:
    text = extract_json_text(raw_text)
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseFailure.corrupt(
            f"{e.msg} at line {e.lineno} column {e.colno}"
        ) from None
    except RecursionError:
        raise ParseFailure.corrupt("JSON nested too deeply") from None
    except ValueError as e:
        # integer literals beyond the interpreter's digit limit
        raise ParseFailure.corrupt(str(e)) from None


def parse(raw_text: str, schema: Schema | ArrayOf) -> Any:
    """Normalize *raw_text* against *schema*.

    Raises:
        ParseFailure: no JSON in the reply, invalid JSON, or a field that
            cannot be coerced.
        ValidationFailure: a coerced value breaks a domain rule.
    """
    data = load_json(raw_text)

    if isinstance(schema, ArrayOf) and not isinstance(data, list):
        raise ParseFailure.corrupt(
            f"expected an array of {schema.schema.name}, got {type(data).__name__}"
        )
    if isinstance(schema, Schema) and not isinstance(data, dict):
        raise ParseFailure.corrupt(
            f"expected a {schema.name} object, got {type(data).__name__}"
        )

    try:
        return schema.decode(data)
    except ParseFailure as e:
        logger.debug("Could not decode %s: %s", schema.name, e.detail)
        raise


def canonical_json(record: Any) -> str:
    """Serialize a record (or list of records) back to compact JSON."""
    if isinstance(record, list):
        payload = [r.to_dict() for r in record]
    else:
        payload = record.to_dict()
    return json.dumps(payload, ensure_ascii=False, sort_keys=True)
