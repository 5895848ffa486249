"""Tests for the recognizer backends with faked engines and transports."""

from __future__ import annotations

from typing import Any

import httpx
import pytest
import pytesseract

from stockscan.domain.errors import RecognitionError
from stockscan.domain.scan import ScanProgress
from stockscan.runtime.config import OCRConfig
from stockscan.runtime.recognizer import (
    OCRServiceRecognizer,
    TesseractRecognizer,
    create_recognizer,
    tesseract_data_to_text,
)


def _bbox(x0: int, y0: int, x1: int, y1: int) -> list[list[int]]:
    return [[x0, y0], [x1, y0], [x1, y1], [x0, y1]]


TESSERACT_DATA: dict[str, list[Any]] = {
    "text": ["", "Tomates", "5kg", "12.50€", "", "Sucre", "1kg"],
    "conf": [-1, 90, 80, 70, -1, 60, 100],
    "block_num": [1, 1, 1, 1, 1, 1, 1],
    "par_num": [1, 1, 1, 1, 1, 1, 1],
    "line_num": [0, 1, 1, 1, 2, 2, 2],
}


def test_tesseract_data_rebuilds_lines() -> None:
    recognized = tesseract_data_to_text(TESSERACT_DATA)

    assert recognized.text == "Tomates 5kg 12.50€\nSucre 1kg"
    assert recognized.confidence == pytest.approx(0.8)


def test_tesseract_recognizer(monkeypatch: pytest.MonkeyPatch, png_bytes: bytes) -> None:
    seen: dict[str, Any] = {}

    def fake_image_to_data(image, lang=None, output_type=None, **kwargs):
        seen["lang"] = lang
        seen["size"] = image.size
        return TESSERACT_DATA

    monkeypatch.setattr(pytesseract, "image_to_data", fake_image_to_data)
    events: list[ScanProgress] = []

    recognized = TesseractRecognizer(language="fra").recognize(png_bytes, on_progress=events.append)

    assert recognized.text.startswith("Tomates 5kg")
    assert seen["lang"] == "fra"
    # 240x120 image padded by 50px on each side
    assert seen["size"] == (340, 220)
    assert events[-1].progress == 100


def test_tesseract_engine_error(monkeypatch: pytest.MonkeyPatch, png_bytes: bytes) -> None:
    def failing_image_to_data(*args, **kwargs):
        raise pytesseract.TesseractError(1, "boom")

    monkeypatch.setattr(pytesseract, "image_to_data", failing_image_to_data)

    with pytest.raises(RecognitionError):
        TesseractRecognizer().recognize(png_bytes)


@pytest.mark.parametrize("data", [b"", b"definitely not an image"])
def test_corrupt_image_is_a_recognition_error(data: bytes) -> None:
    with pytest.raises(RecognitionError):
        TesseractRecognizer().recognize(data)


def _service(handler) -> OCRServiceRecognizer:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return OCRServiceRecognizer("http://ocr.test/", client=client)


def test_service_recognizer(png_bytes: bytes) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        assert request.url.path == "/ocr"
        assert b'name="file"' in request.read()
        return httpx.Response(
            200,
            json={
                "detections": [
                    [_bbox(300, 10, 400, 40), ["12.50€", 0.9]],
                    [_bbox(10, 10, 200, 40), ["Tomates 5kg", 0.8]],
                    [_bbox(10, 60, 200, 90), ["Sucre 1kg", 0.7]],
                    [_bbox(10, 100, 50, 120), ["~~", 0.1]],
                ]
            },
        )

    events: list[ScanProgress] = []
    recognized = _service(handler).recognize(png_bytes, on_progress=events.append)

    assert recognized.text == "Tomates 5kg 12.50€\nSucre 1kg"
    assert recognized.confidence == pytest.approx(0.8)
    assert [event.progress for event in events] == [0, 10, 100]


def test_service_http_error(png_bytes: bytes) -> None:
    recognizer = _service(lambda request: httpx.Response(503, text="busy"))

    with pytest.raises(RecognitionError, match="503"):
        recognizer.recognize(png_bytes)


def test_service_unreachable(png_bytes: bytes) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(RecognitionError):
        _service(handler).recognize(png_bytes)


def test_service_malformed_payload(png_bytes: bytes) -> None:
    recognizer = _service(lambda request: httpx.Response(200, json={"detections": [["oops"]]}))

    with pytest.raises(RecognitionError):
        recognizer.recognize(png_bytes)


def test_create_recognizer_by_engine() -> None:
    assert isinstance(create_recognizer(OCRConfig(engine="tesseract")), TesseractRecognizer)
    service = create_recognizer(OCRConfig(engine="service", service_url="http://ocr.test"))
    assert isinstance(service, OCRServiceRecognizer)
    assert service.service_url == "http://ocr.test"
    with pytest.raises(ValueError):
        create_recognizer(OCRConfig(engine="cloud"))
