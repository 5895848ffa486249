"""Learned raw-text to product mapping."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class Correction:
    """A user-confirmed mapping from a normalized scanned name to a product.

    One entry exists per normalized name. ``occurrences`` counts how many
    times the same mapping was confirmed.
    """

    raw_name_normalized: str
    product_id: str
    product_name: str
    occurrences: int
    last_used_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "raw_name_normalized": self.raw_name_normalized,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "occurrences": self.occurrences,
            "last_used_at": self.last_used_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Correction:
        return cls(
            raw_name_normalized=str(data["raw_name_normalized"]),
            product_id=str(data["product_id"]),
            product_name=str(data.get("product_name", "")),
            occurrences=int(data.get("occurrences", 1)),
            last_used_at=datetime.fromisoformat(data["last_used_at"]),
        )
