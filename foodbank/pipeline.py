"""Ingestion pipeline: extract, normalize, and link receipts and labels."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Sequence

from .assistant import FoodAssistant
from .cancel import CancelToken, run_cancellable
from .config import IngestConfig, MatchingConfig
from .errors import ExtractionFailure, FailureKind, ParseFailure
from .llm import create_transport
from .matching import EntityResolver, normalize_name
from .models import (
    CatalogEntry,
    ExtractedNutrition,
    ExtractedReceipt,
    ExtractedReceiptItem,
)
from .nutrition.record import NutritionRecord
from .ocr import TextExtractor, create_recognizer
from .ocr.images import load_bitmap

if TYPE_CHECKING:
    import numpy as np

logger = logging.getLogger(__name__)

__all__ = [
    "BatchResult",
    "CancelToken",
    "IngestionPipeline",
    "Source",
    "run_cancellable",
]

_TEXT_SUFFIXES = {".txt", ".text", ".md"}


@dataclass
class Source:
    """One input to the pipeline: a bitmap, plain text, or PDF bytes."""

    image: np.ndarray | None = None
    text: str | None = None
    pdf: bytes | None = None
    label: str = ""

    @classmethod
    def from_path(cls, path: str | Path) -> Source:
        """Pick the input kind from the file extension."""
        p = Path(path)
        suffix = p.suffix.lower()
        if suffix == ".pdf":
            return cls(pdf=p.read_bytes(), label=p.name)
        if suffix in _TEXT_SUFFIXES:
            return cls(text=p.read_text(encoding="utf-8"), label=p.name)
        return cls(image=load_bitmap(p), label=p.name)

    @classmethod
    def from_text(cls, text: str, label: str = "text") -> Source:
        return cls(text=text, label=label)

    @property
    def kind(self) -> str:
        if self.image is not None:
            return "image"
        if self.pdf is not None:
            return "pdf"
        return "text"

    def as_kwargs(self) -> dict:
        return {"image": self.image, "text": self.text, "pdf": self.pdf}


@dataclass
class BatchResult:
    """Tally of a batch run; every item is attempted."""

    succeeded: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)
    receipt: ExtractedReceipt = field(default_factory=ExtractedReceipt)
    estimates: dict[str, NutritionRecord] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return self.succeeded + self.failed

    def record_failure(self, label: str, error: Exception) -> None:
        self.failed += 1
        self.errors.append(f"{label}: {error}")


def _is_cancellation(error: Exception) -> bool:
    return isinstance(error, ExtractionFailure) and error.kind is FailureKind.CANCELLED


def merge_receipt(into: ExtractedReceipt, other: ExtractedReceipt) -> None:
    """Append *other*'s items, keeping the first store name and date seen."""
    into.items.extend(other.items)
    if not into.store_name and other.store_name:
        into.store_name = other.store_name
    if not into.receipt_date and other.receipt_date:
        into.receipt_date = other.receipt_date


class IngestionPipeline:
    """Run sources through the assistant and link results to the catalog.

    The catalog is passed in per call as a read-only snapshot and never
    modified.
    """

    def __init__(
        self,
        assistant: FoodAssistant,
        resolver: EntityResolver | None = None,
        matching: MatchingConfig | None = None,
    ) -> None:
        self._assistant = assistant
        self._matching = matching or MatchingConfig()
        self._resolver = resolver or EntityResolver(self._matching.threshold)

    @classmethod
    def from_config(cls, config: IngestConfig) -> IngestionPipeline:
        transport = create_transport(config)
        extractor = None
        if config.ocr.enabled:
            extractor = TextExtractor.from_config(create_recognizer(config), config.ocr)
        assistant = FoodAssistant(transport, extractor=extractor, config=config.llm)
        return cls(
            assistant,
            resolver=EntityResolver(config.matching.threshold),
            matching=config.matching,
        )

    @property
    def assistant(self) -> FoodAssistant:
        return self._assistant

    async def ingest_receipt(
        self,
        source: Source,
        catalog: Sequence[CatalogEntry],
        cancel: CancelToken | None = None,
        meal: bool = False,
    ) -> ExtractedReceipt:
        """Extract a receipt (or meal item list) and link its items.

        Raises:
            ExtractionFailure: transport failure or cancellation.
            ParseFailure: the reply could not be normalized.
        """
        if meal:
            items = await self._assistant.extract_meal_items(
                **source.as_kwargs(), cancel=cancel
            )
            receipt = ExtractedReceipt(items=items)
        else:
            receipt = await self._assistant.extract_receipt(
                **source.as_kwargs(), cancel=cancel
            )
        await self.link_items(receipt.items, catalog, cancel)
        logger.info(
            "Ingested %s %r: %d item(s), %d linked",
            source.kind,
            source.label,
            len(receipt.items),
            sum(1 for i in receipt.items if i.linked_entry_id),
        )
        return receipt

    async def ingest_nutrition_label(
        self, source: Source, cancel: CancelToken | None = None
    ) -> ExtractedNutrition:
        return await self._assistant.extract_nutrition_label(
            **source.as_kwargs(), cancel=cancel
        )

    async def link_items(
        self,
        items: list[ExtractedReceiptItem],
        catalog: Sequence[CatalogEntry],
        cancel: CancelToken | None = None,
    ) -> None:
        """Link each item locally, then remotely if configured and unresolved."""
        by_name = {normalize_name(e.name): e for e in catalog if normalize_name(e.name)}
        names = [e.name for e in catalog]

        for item in items:
            local = self._resolver.resolve(item.name, catalog)
            if local.entry is not None:
                item.linked_entry_id = local.entry.id
                continue
            if not self._matching.use_remote or not names:
                continue

            try:
                remote = await self._assistant.match_food(item.name, names, cancel=cancel)
            except ParseFailure as e:
                logger.warning("Remote match for %r unreadable: %s", item.name, e)
                continue

            if (
                remote.is_new_food
                or remote.food_name is None
                or remote.confidence < self._matching.remote_min_confidence
            ):
                continue
            entry = by_name.get(normalize_name(remote.food_name))
            if entry is None:
                logger.debug(
                    "Remote match %r for %r is not in the catalog",
                    remote.food_name, item.name,
                )
                continue
            item.linked_entry_id = entry.id

    async def ingest_batch(
        self,
        sources: Sequence[Source],
        catalog: Sequence[CatalogEntry],
        cancel: CancelToken | None = None,
        meal: bool = False,
    ) -> BatchResult:
        """Ingest every source and merge the receipts.

        Any failure other than cancellation is logged and counted, and the
        batch continues. Cancellation stops the batch and propagates.
        """
        result = BatchResult()
        for index, source in enumerate(sources):
            label = source.label or f"source {index + 1}"
            try:
                receipt = await self.ingest_receipt(source, catalog, cancel, meal=meal)
            except Exception as e:
                if _is_cancellation(e):
                    raise
                logger.warning("Failed to ingest %s: %s", label, e)
                result.record_failure(label, e)
                continue
            merge_receipt(result.receipt, receipt)
            result.succeeded += 1

        logger.info(
            "Batch finished: %d succeeded, %d failed", result.succeeded, result.failed
        )
        return result

    async def estimate_missing_nutrition(
        self,
        entries: Sequence[CatalogEntry],
        cancel: CancelToken | None = None,
    ) -> BatchResult:
        """Estimate nutrition for every entry that has none.

        Estimates are keyed by entry id; the entries themselves are untouched.
        """
        result = BatchResult()
        pending = [e for e in entries if e.nutrition is None or e.nutrition.is_empty]
        for entry in pending:
            try:
                estimate = await self._assistant.estimate_nutrition(
                    entry.name, entry.category, cancel=cancel
                )
            except Exception as e:
                if _is_cancellation(e):
                    raise
                logger.warning("Nutrition estimate failed for %r: %s", entry.name, e)
                result.record_failure(entry.name, e)
                continue
            result.estimates[entry.id] = estimate.nutrition
            result.succeeded += 1

        logger.info(
            "Estimated nutrition for %d of %d entries (%d failed)",
            result.succeeded, len(pending), result.failed,
        )
        return result
