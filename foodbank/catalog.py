"""JSON catalog provider and line-item loader."""

from __future__ import annotations

import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Sequence

from .categories import guess_category, is_category, split_category_path
from .errors import ParseFailure, ValidationFailure
from .models import CatalogEntry, LineItem
from .normalize import NUTRITION

logger = logging.getLogger(__name__)


def _read_list(path: str | Path) -> list:
    with open(path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ParseFailure.corrupt(f"{path}: {e.msg}") from None
    if not isinstance(data, list):
        raise ParseFailure.corrupt(f"{path}: expected a JSON array")
    return data


def entry_from_dict(raw: dict, path: str = "") -> CatalogEntry:
    """Build a catalog entry; nutrition numbers may be quoted strings."""
    if not isinstance(raw, dict):
        raise ParseFailure.type_mismatch(path, "object")
    name = raw.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ParseFailure.missing_key(f"{path}.name")

    nutrition = None
    if isinstance(raw.get("nutrition"), dict):
        nutrition = NUTRITION.decode(raw["nutrition"], f"{path}.nutrition").nutrition

    category = _resolve_category(raw.get("category"), name)

    return CatalogEntry(
        id=str(raw.get("id") or name.strip()),
        name=name.strip(),
        nutrition=nutrition,
        category=category,
        is_excluded=bool(raw.get("excluded", False)),
    )


def _resolve_category(raw, name: str) -> str:
    """Accept a main category, a ``main/sub`` path or a free-text label."""
    if not isinstance(raw, str) or not raw.strip():
        return guess_category(name)[0]
    if is_category(raw):
        return raw
    if "/" in raw:
        return split_category_path(raw)[0]
    return guess_category(raw)[0]


def load_catalog(path: str | Path) -> tuple[CatalogEntry, ...]:
    """Load an immutable catalog snapshot from a JSON array of entries."""
    entries = tuple(
        entry_from_dict(raw, f"[{i}]") for i, raw in enumerate(_read_list(path))
    )
    logger.info("Loaded %d catalog entries from %s", len(entries), path)
    return entries


def _parse_timestamp(value, path: str) -> date | datetime:
    if not isinstance(value, str):
        raise ParseFailure.type_mismatch(path, "string")
    try:
        if "T" in value or " " in value.strip():
            return datetime.fromisoformat(value.strip())
        return date.fromisoformat(value.strip())
    except ValueError:
        raise ParseFailure.corrupt(f"{path}: invalid date {value!r}") from None


def load_line_items(
    path: str | Path, catalog: Sequence[CatalogEntry]
) -> list[LineItem]:
    """Load trip/meal lines ``{name, grams, date, entry_id?, skipped?}``.

    Lines reference catalog entries by id; an unknown id leaves the line
    unlinked.
    """
    by_id = {e.id: e for e in catalog}
    items: list[LineItem] = []
    for i, raw in enumerate(_read_list(path)):
        where = f"[{i}]"
        if not isinstance(raw, dict):
            raise ParseFailure.type_mismatch(where, "object")
        grams = raw.get("grams", 0)
        if isinstance(grams, bool) or not isinstance(grams, (int, float)) or grams < 0:
            raise ValidationFailure(f"{where}.grams", "must be a number >= 0")
        entry_id = raw.get("entry_id")
        entry = by_id.get(str(entry_id)) if entry_id is not None else None
        if entry_id is not None and entry is None:
            logger.warning("Line %s references unknown entry %r", where, entry_id)
        items.append(
            LineItem(
                name=str(raw.get("name") or (entry.name if entry else "")),
                quantity_grams=float(grams),
                timestamp=_parse_timestamp(raw.get("date"), f"{where}.date"),
                entry=entry,
                is_skipped=bool(raw.get("skipped", False)),
            )
        )
    return items
