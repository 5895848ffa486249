"""Public smoke tests for basic module wiring.

Keep these minimal and free of any real-world data.
"""

from __future__ import annotations


def test_imports() -> None:
    import stockscan
    import stockscan.application.scans
    import stockscan.cli.main
    import stockscan.domain
    import stockscan.ocr.line_parser
    import stockscan.runtime

    assert stockscan is not None
    assert stockscan.application.scans is not None
    assert stockscan.cli.main is not None
    assert stockscan.domain is not None
    assert stockscan.ocr.line_parser is not None
    assert stockscan.runtime is not None
