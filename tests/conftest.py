"""Shared pytest fixtures for stockscan tests."""

from __future__ import annotations

import io
import threading

import pytest

from stockscan.domain.catalog import ProductCatalogEntry
from stockscan.domain.scan import RecognizedText, ScanProgress
from stockscan.runtime.correction_memory import CorrectionMemory, InMemoryCorrectionStore


class FakeRecognizer:
    """Recognizer returning canned text, or raising a canned error."""

    def __init__(self, text: str = "", confidence: float = 0.9, error: Exception | None = None) -> None:
        self.text = text
        self.confidence = confidence
        self.error = error
        self.calls = 0

    def recognize(self, image: bytes, on_progress=None) -> RecognizedText:
        self.calls += 1
        if on_progress is not None:
            on_progress(ScanProgress(status="loading model", progress=0))
        if self.error is not None:
            raise self.error
        if on_progress is not None:
            on_progress(ScanProgress(status="recognizing text", progress=50))
            on_progress(ScanProgress(status="text recognized", progress=100))
        return RecognizedText(text=self.text, confidence=self.confidence)


class BlockingRecognizer:
    """Recognizer that cancels the scan token, then blocks until released."""

    def __init__(self, token) -> None:
        self.token = token
        self.release = threading.Event()
        self.finished = threading.Event()

    def recognize(self, image: bytes, on_progress=None) -> RecognizedText:
        try:
            on_progress(ScanProgress(status="loading model", progress=0))
            self.token.cancel()
            self.release.wait(5)
            on_progress(ScanProgress(status="recognizing text", progress=50))
            return RecognizedText(text="Tomates 5kg", confidence=0.9)
        finally:
            self.finished.set()


@pytest.fixture
def catalog() -> list[ProductCatalogEntry]:
    return [
        ProductCatalogEntry(id="p1", name="Tomates", unit="kg"),
        ProductCatalogEntry(id="p2", name="Coeur de pigeon", unit="kg"),
        ProductCatalogEntry(id="p3", name="Oignons jaunes", unit="kg"),
        ProductCatalogEntry(id="p4", name="Farine de blé T55", unit="kg"),
        ProductCatalogEntry(id="p5", name="Œufs frais", unit="unité"),
        ProductCatalogEntry(id="p6", name="Crème fraîche", unit="L"),
        ProductCatalogEntry(id="p7", name="Sucre", unit="kg"),
    ]


@pytest.fixture
def memory() -> CorrectionMemory:
    return CorrectionMemory(InMemoryCorrectionStore())


@pytest.fixture
def png_bytes() -> bytes:
    from PIL import Image

    img = Image.new("RGB", (240, 120), "white")
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()
