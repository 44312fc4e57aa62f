"""Tests for offline entity resolution against the catalog."""

import pytest

from foodbank.matching import EntityResolver, containment_score
from foodbank.models import CatalogEntry, ExtractedReceiptItem, MatchResult


def _catalog(*names):
    return tuple(CatalogEntry(id=f"id-{i}", name=n) for i, n in enumerate(names))


@pytest.fixture
def resolver():
    return EntityResolver()


class TestContainmentScore:
    def test_contained(self):
        assert containment_score("milk", "whole milk") == pytest.approx(0.4)

    def test_not_contained(self):
        assert containment_score("milk", "bread") == 0.0

    def test_symmetric(self):
        assert containment_score("oat milk", "milk") == containment_score("milk", "oat milk")


class TestResolve:
    def test_exact_match_ignores_case_and_whitespace(self, resolver):
        catalog = _catalog("Whole Milk", "Oat Milk")
        result = resolver.resolve("  oat MILK ", catalog)
        assert result.food_name == "Oat Milk"
        assert result.confidence == 1.0
        assert result.is_new_food is False
        assert result.entry.id == "id-1"

    def test_exact_match_beats_earlier_containment(self, resolver):
        catalog = _catalog("Greek Yogurt Plain", "Yogurt", "Greek Yogurt")
        result = resolver.resolve("greek yogurt", catalog)
        assert result.entry.name == "Greek Yogurt"
        assert result.confidence == 1.0

    def test_containment_above_threshold(self, resolver):
        # "banana" in "bananas": 6/7
        result = resolver.resolve("Bananas", _catalog("Apple", "Banana"))
        assert result.food_name == "Banana"
        assert result.confidence == pytest.approx(6 / 7)
        assert result.is_new_food is False

    def test_containment_below_threshold(self, resolver):
        result = resolver.resolve("Milk", _catalog("Whole Milk", "Oat Milk Drink"))
        assert result == MatchResult(None, 0.0, True)
        assert result.is_match is False

    def test_threshold_is_inclusive(self):
        # "abc" in "abcde": 3/5 == 0.6
        result = EntityResolver(0.6).resolve("abc", _catalog("abcde"))
        assert result.food_name == "abcde"

    def test_ties_keep_first_seen(self, resolver):
        result = resolver.resolve("rice", _catalog("Rice A", "Rice B"))
        # 4/6 for both
        assert result.food_name == "Rice A"

    def test_strictly_greater_wins(self, resolver):
        result = resolver.resolve("rice", _catalog("Rice Mix", "Rices"))
        assert result.food_name == "Rices"

    def test_empty_candidate(self, resolver):
        assert resolver.resolve("   ", _catalog("Milk")) == MatchResult.no_match()

    def test_empty_catalog_names_ignored(self, resolver):
        result = resolver.resolve("milk", _catalog("", "  ", "Milk"))
        assert result.entry.id == "id-2"

    def test_empty_catalog(self, resolver):
        assert resolver.resolve("milk", ()).is_new_food is True

    def test_catalog_not_mutated(self, resolver):
        catalog = _catalog("Milk", "Bread")
        before = list(catalog)
        resolver.resolve("milk", catalog)
        assert list(catalog) == before


class TestLinkItems:
    def test_links_confident_matches_only(self, resolver):
        catalog = _catalog("Milk", "Bread")
        items = [
            ExtractedReceiptItem(name="milk"),
            ExtractedReceiptItem(name="Dragon fruit"),
        ]
        linked = resolver.link_items(items, catalog)
        assert linked == 1
        assert items[0].linked_entry_id == "id-0"
        assert items[1].linked_entry_id is None
