"""Product catalog model consumed by the scan core."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ProductCatalogEntry:
    """A known product a scanned line can be matched against."""

    id: str
    name: str
    unit: str = ""
