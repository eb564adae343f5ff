"""Variant classification: eligibility, purity tag and discount tag.

Two sources are supported:
- Structured tags on the Variant (purity_tag, finish_tag, discount_tag),
  populated once at ingestion.
- The variant title, via case-insensitive substring containment. This is the
  fallback used whenever a structured tag is missing.

Purity ties: when several purity keys occur in a title, the FIRST key in the
purity table's iteration order wins, not the longest or left-most substring.
Callers must pass the table in an intentional order.
"""

from __future__ import annotations

import re
from typing import Iterable, Mapping, Protocol

from repricer.services.catalog import Variant

_DISCOUNT_PATTERN = re.compile(r"(\d+)\s*%", re.IGNORECASE)


class VariantClassifier(Protocol):
    def classify(
        self,
        variant: Variant,
        allowed_finish_tags: Iterable[str],
        purity_tags: Mapping[str, float],
    ) -> str | None:
        """Return the purity tag if the variant is eligible, else None."""
        ...

    def discount_tag(self, variant: Variant) -> str | None:
        """Return the normalized discount token (e.g., "10%") or None."""
        ...


def extract_discount_token(title: str) -> str | None:
    """Extract the first "<int>%" token from a title, whitespace stripped.

    Examples:
        >>> extract_discount_token("18k Rose Gold 10 % off")
        '10%'
    """
    m = _DISCOUNT_PATTERN.search(title)
    if not m:
        return None
    return re.sub(r"\s+", "", m.group(0))


class TitleClassifier:
    """Classify variants from their free-text title."""

    def matches_finish(self, variant: Variant, allowed_finish_tags: Iterable[str]) -> bool:
        title = variant.title.lower()
        return any(tag.lower() in title for tag in allowed_finish_tags)

    def purity_tag(self, variant: Variant, purity_tags: Mapping[str, float]) -> str | None:
        title = variant.title.lower()
        for key in purity_tags:
            if key.lower() in title:
                return key
        return None

    def classify(
        self,
        variant: Variant,
        allowed_finish_tags: Iterable[str],
        purity_tags: Mapping[str, float],
    ) -> str | None:
        if not self.matches_finish(variant, allowed_finish_tags):
            return None
        return self.purity_tag(variant, purity_tags)

    def discount_tag(self, variant: Variant) -> str | None:
        return extract_discount_token(variant.title)


class StructuredClassifier:
    """Classify from structured variant tags, falling back to the title per tag."""

    def __init__(self, fallback: TitleClassifier | None = None):
        self.fallback = fallback or TitleClassifier()

    def matches_finish(self, variant: Variant, allowed_finish_tags: Iterable[str]) -> bool:
        if variant.finish_tag is None:
            return self.fallback.matches_finish(variant, allowed_finish_tags)
        finish = variant.finish_tag.strip().lower()
        return any(tag.lower() == finish for tag in allowed_finish_tags)

    def purity_tag(self, variant: Variant, purity_tags: Mapping[str, float]) -> str | None:
        if variant.purity_tag is None:
            return self.fallback.purity_tag(variant, purity_tags)
        wanted = variant.purity_tag.strip().lower()
        for key in purity_tags:
            if key.lower() == wanted:
                return key
        return None

    def classify(
        self,
        variant: Variant,
        allowed_finish_tags: Iterable[str],
        purity_tags: Mapping[str, float],
    ) -> str | None:
        if not self.matches_finish(variant, allowed_finish_tags):
            return None
        return self.purity_tag(variant, purity_tags)

    def discount_tag(self, variant: Variant) -> str | None:
        if variant.discount_tag is None:
            return self.fallback.discount_tag(variant)
        return re.sub(r"\s+", "", variant.discount_tag) or None


DEFAULT_CLASSIFIER: VariantClassifier = StructuredClassifier()


def classify(
    variant: Variant,
    allowed_finish_tags: Iterable[str],
    purity_tags: Mapping[str, float],
    classifier: VariantClassifier | None = None,
) -> str | None:
    """Classify a variant with the default classifier (structured tags, title fallback)."""
    return (classifier or DEFAULT_CLASSIFIER).classify(variant, allowed_finish_tags, purity_tags)
