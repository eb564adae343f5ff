"""Attribute resolution for product and variant metafield-style records.

Attribute values are opaque strings owned by the catalog. A numeric attribute may
be stored either as a bare number ("5.2") or as a unit-tagged JSON object
('{"value": 5.2, "unit": "GRAMS"}'). Both are normalized to a plain magnitude;
units are discarded and assumed consistent with the pricing configuration.

Numeric resolution never raises. Unparsable values resolve to 0 and, when a
diagnostics list is supplied, a ParseDiagnostic is appended so callers can
count and report them.
"""

from __future__ import annotations

import json
import math
import re
from dataclasses import dataclass
from typing import Iterable

from repricer.services.catalog import AttributeRecord

CUSTOM_NAMESPACE = "custom"

# Leading float literal, mirroring a lenient "parse the numeric prefix" read.
_FLOAT_PREFIX = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


@dataclass(frozen=True)
class ParseDiagnostic:
    """A numeric attribute that was present but could not be parsed."""

    key: str
    raw_value: str
    reason: str

    def describe(self) -> str:
        return f'Attribute "{self.key}" value {self.raw_value!r} unparsable ({self.reason}), using 0'


def resolve(
    attributes: Iterable[AttributeRecord],
    key: str,
    namespace: str = CUSTOM_NAMESPACE,
) -> str | None:
    """Return the value of the first record matching key within the namespace.

    Args:
        attributes: Attribute records of a product or variant.
        key: Attribute key (e.g., "diamond_1").
        namespace: Attribute namespace (default: "custom").

    Returns:
        Raw string value or None if absent.
    """
    for record in attributes:
        if record.key == key and record.namespace == namespace:
            return record.value
    return None


def parse_float(raw: str) -> float | None:
    """Parse the leading float of a string; None when nothing numeric is found."""
    m = _FLOAT_PREFIX.match(raw.strip())
    if not m:
        return None
    value = float(m.group(0))
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def resolve_numeric(
    attributes: Iterable[AttributeRecord],
    key: str,
    diagnostics: list[ParseDiagnostic] | None = None,
    namespace: str = CUSTOM_NAMESPACE,
) -> float:
    """Resolve a numeric attribute, accepting bare numbers and {"value", "unit"} objects.

    Missing attributes resolve to 0 without a diagnostic.
    """
    raw = resolve(attributes, key, namespace=namespace)
    if raw is None or not raw.strip():
        return 0.0

    trimmed = raw.strip()
    if trimmed.startswith("{") or trimmed.startswith("["):
        try:
            decoded = json.loads(trimmed)
        except (ValueError, RecursionError):
            _record(diagnostics, key, raw, "malformed structured value")
            return 0.0
        if isinstance(decoded, dict) and decoded.get("value") is not None:
            value = parse_float(str(decoded["value"]))
            if value is not None:
                return value
            _record(diagnostics, key, raw, "structured value is not numeric")
            return 0.0

    value = parse_float(trimmed)
    if value is None:
        _record(diagnostics, key, raw, "not a number")
        return 0.0
    return value


def _record(diagnostics: list[ParseDiagnostic] | None, key: str, raw: str, reason: str) -> None:
    if diagnostics is not None:
        diagnostics.append(ParseDiagnostic(key=key, raw_value=raw, reason=reason))
