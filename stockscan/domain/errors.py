"""Exception hierarchy for the scan core.

Only hard failures are exceptions. Parse ambiguity and missing matches are
represented in the returned data (null fields, ``MatchType.NONE``).
"""


class StockScanError(Exception):
    """Base class for all stockscan errors."""


class RecognitionError(StockScanError):
    """Raised when the OCR engine cannot process an image."""


class ScanCancelled(StockScanError):
    """Raised when a scan is abandoned through its cancellation token."""


class CorrectionStoreError(StockScanError):
    """Raised by a correction store backend when it cannot read or write."""


class CatalogError(StockScanError):
    """Raised when a product catalog file cannot be loaded."""
