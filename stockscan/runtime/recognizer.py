"""Text recognizer backends (local Tesseract, remote OCR service)."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any, Protocol

import httpx

from stockscan.domain.errors import RecognitionError
from stockscan.domain.scan import RecognizedText, ScanProgress
from stockscan.ocr.ocr_helpers import detections_to_text, prepare_image, prepare_image_bytes
from stockscan.runtime.cancellation import ProgressCallback
from stockscan.runtime.config import OCRConfig
from stockscan.runtime.logging import get_logger

logger = get_logger(__name__)

STATUS_LOADING = "loading model"
STATUS_RECOGNIZING = "recognizing text"
STATUS_DONE = "text recognized"


class TextRecognizer(Protocol):
    """Minimal contract for an OCR backend."""

    def recognize(self, image: bytes, on_progress: ProgressCallback | None = None) -> RecognizedText: ...


def _emit(on_progress: ProgressCallback | None, status: str, progress: int) -> None:
    if on_progress is not None:
        on_progress(ScanProgress(status=status, progress=progress))


def tesseract_data_to_text(data: dict[str, list[Any]]) -> RecognizedText:
    """
    Rebuild text lines from ``pytesseract.image_to_data`` output.

    Words are grouped by (block, paragraph, line) in reading order. Confidence is
    the mean of word confidences (Tesseract reports -1 for non-word boxes).
    """
    lines: dict[tuple[int, int, int], list[str]] = {}
    confidences: list[float] = []

    for i, word in enumerate(data.get("text", [])):
        word = str(word).strip()
        if not word:
            continue
        key = (int(data["block_num"][i]), int(data["par_num"][i]), int(data["line_num"][i]))
        lines.setdefault(key, []).append(word)
        conf = float(data["conf"][i])
        if conf >= 0:
            confidences.append(conf / 100.0)

    text = "\n".join(" ".join(words) for words in lines.values())
    confidence = sum(confidences) / len(confidences) if confidences else 0.0
    return RecognizedText(text=text, confidence=max(0.0, min(1.0, confidence)))


class TesseractRecognizer:
    """Local OCR through the Tesseract engine (pytesseract)."""

    def __init__(self, language: str = "fra") -> None:
        self.language = language

    def recognize(self, image: bytes, on_progress: ProgressCallback | None = None) -> RecognizedText:
        _emit(on_progress, STATUS_LOADING, 0)
        prepared = prepare_image(image)

        import pytesseract

        _emit(on_progress, STATUS_RECOGNIZING, 10)
        start_time = time.time()
        try:
            data = pytesseract.image_to_data(prepared, lang=self.language, output_type=pytesseract.Output.DICT)
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError, RuntimeError) as e:
            raise RecognitionError(f"Tesseract failed: {e}") from e
        logger.info("Tesseract returned in %.2f seconds", time.time() - start_time)

        try:
            result = tesseract_data_to_text(data)
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise RecognitionError(f"Unexpected Tesseract output: {e}") from e

        _emit(on_progress, STATUS_DONE, 100)
        return result


class OCRServiceRecognizer:
    """OCR through an HTTP service exposing ``POST /ocr`` (multipart ``file``).

    The service answers with ``{"detections": [[bbox, [text, confidence]], ...]}``.
    """

    def __init__(self, service_url: str, timeout: float = 60.0, client: httpx.Client | None = None) -> None:
        self.service_url = service_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    def _post(self, image_bytes: bytes) -> httpx.Response:
        files = {"file": ("scan.jpg", image_bytes, "image/jpeg")}
        if self._client is not None:
            return self._client.post(f"{self.service_url}/ocr", files=files, timeout=self.timeout)
        return httpx.post(f"{self.service_url}/ocr", files=files, timeout=self.timeout)

    def recognize(self, image: bytes, on_progress: ProgressCallback | None = None) -> RecognizedText:
        _emit(on_progress, STATUS_LOADING, 0)
        prepared = prepare_image_bytes(image)

        logger.info("Sending image to OCR service at %s...", self.service_url)
        _emit(on_progress, STATUS_RECOGNIZING, 10)
        start_time = time.time()
        try:
            response = self._post(prepared)
        except httpx.RequestError as e:
            logger.error("Failed to connect to OCR service: %s", e)
            raise RecognitionError(f"Failed to connect to OCR service: {e}") from e
        logger.info("OCR service returned in %.2f seconds", time.time() - start_time)

        if response.status_code != 200:
            logger.error("OCR service error: %s", response.status_code)
            raise RecognitionError(f"OCR service error: {response.status_code}")

        try:
            result = detections_to_text(response.json())
        except (ValueError, KeyError, IndexError, TypeError, AttributeError) as e:
            raise RecognitionError(f"Unexpected OCR service response: {e}") from e

        _emit(on_progress, STATUS_DONE, 100)
        return result


RecognizerFactory = Callable[[], TextRecognizer]


def create_recognizer(config: OCRConfig | None = None) -> TextRecognizer:
    """Build a fresh recognizer for one scan invocation."""
    if config is None:
        config = OCRConfig()
    if config.engine == "service":
        return OCRServiceRecognizer(config.service_url, timeout=config.timeout)
    if config.engine == "tesseract":
        return TesseractRecognizer(language=config.language)
    raise ValueError(f"Unknown OCR engine: {config.engine}")
