"""Result records for license identification."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


@dataclass
class LicenseType:
    """The assumed license type of an unknown text in a file."""

    filename: str
    name: str
    confidence: float
    offset: int
    extent: int


def sort_license_types(results: Iterable[LicenseType]) -> list[LicenseType]:
    """Return results by descending confidence, then by filename."""
    return sorted(results, key=lambda r: (-r.confidence, r.filename))