"""Validated edits to a draft receipt before it is saved."""

from __future__ import annotations

import logging
import math
from typing import Callable, Sequence

from .categories import allowed_subcategories, is_category
from .errors import ValidationFailure
from .models import CatalogEntry, ExtractedReceipt, ExtractedReceiptItem

logger = logging.getLogger(__name__)

PersistHook = Callable[[ExtractedReceipt, str], None]


class ReceiptReview:
    """Apply human corrections to an extracted receipt.

    Every setter validates first, then mutates the draft, then calls the
    *persist* hook once with the receipt and the path of the changed field.
    A rejected edit leaves the draft untouched and persists nothing.
    """

    def __init__(
        self,
        receipt: ExtractedReceipt,
        catalog: Sequence[CatalogEntry] = (),
        persist: PersistHook | None = None,
    ) -> None:
        self.receipt = receipt
        self._entries = {e.id: e for e in catalog}
        self._persist = persist

    def _item(self, index: int) -> ExtractedReceiptItem:
        if not 0 <= index < len(self.receipt.items):
            raise ValidationFailure(f"items[{index}]", "no such item")
        return self.receipt.items[index]

    def _saved(self, path: str) -> None:
        logger.debug("Receipt edit: %s", path)
        if self._persist is not None:
            self._persist(self.receipt, path)

    @staticmethod
    def _amount(path: str, value: float) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationFailure(path, "must be a number")
        if not math.isfinite(value) or value < 0:
            raise ValidationFailure(path, f"must be a finite number >= 0, got {value}")
        return float(value)

    def set_store_name(self, name: str | None) -> None:
        self.receipt.store_name = (name or "").strip() or None
        self._saved("store_name")

    def set_name(self, index: int, name: str) -> None:
        path = f"items[{index}].name"
        item = self._item(index)
        if not name or not name.strip():
            raise ValidationFailure(path, "must not be empty")
        item.name = name.strip()
        self._saved(path)

    def set_quantity(self, index: int, grams: float) -> None:
        path = f"items[{index}].quantity_grams"
        item = self._item(index)
        item.quantity_grams = self._amount(path, grams)
        self._saved(path)

    def set_price(self, index: int, price: float) -> None:
        path = f"items[{index}].price"
        item = self._item(index)
        item.price = self._amount(path, price)
        self._saved(path)

    def set_category(
        self, index: int, category: str, subcategory: str | None = None
    ) -> None:
        path = f"items[{index}].category"
        item = self._item(index)
        if not is_category(category):
            raise ValidationFailure(path, f"unknown category {category!r}")
        if subcategory is not None and subcategory not in allowed_subcategories(category):
            raise ValidationFailure(
                f"items[{index}].subcategory",
                f"{subcategory!r} is not a subcategory of {category!r}",
            )
        item.category = category
        item.subcategory = subcategory
        self._saved(path)

    def link(self, index: int, entry_id: str | None) -> None:
        """Link an item to a catalog entry, or unlink it with ``None``."""
        path = f"items[{index}].linked_entry_id"
        item = self._item(index)
        if entry_id is not None and entry_id not in self._entries:
            raise ValidationFailure(path, f"unknown catalog entry {entry_id!r}")
        item.linked_entry_id = entry_id
        self._saved(path)

    def remove(self, index: int) -> ExtractedReceiptItem:
        self._item(index)
        removed = self.receipt.items.pop(index)
        self._saved(f"items[{index}]")
        return removed
