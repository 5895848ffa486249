"""Pure OCR helpers: image preparation and detection-to-text transformation."""

from __future__ import annotations

import io
from typing import Any

from PIL import Image, ImageOps, UnidentifiedImageError

from stockscan.domain.errors import RecognitionError
from stockscan.domain.scan import RecognizedText

MAX_IMAGE_DIMENSION = 3000  # Resize if either dimension exceeds this
OCR_IMAGE_PADDING = 50  # White padding around image to prevent edge truncation
MIN_DETECTION_CONFIDENCE = 0.3


def decode_image(image_bytes: bytes) -> Image.Image:
    """
    Decode raw image bytes into a fully loaded PIL image.

    Raises:
        RecognitionError: if the bytes are empty, corrupt or not an image format PIL understands.
    """
    if not image_bytes:
        raise RecognitionError("Empty image data")
    try:
        img = Image.open(io.BytesIO(image_bytes))
        img.load()
    except (UnidentifiedImageError, Image.DecompressionBombError) as exc:
        raise RecognitionError(f"Unsupported or corrupt image: {exc}") from exc
    except OSError as exc:
        # Truncated files surface as plain OSError from the decoder.
        raise RecognitionError(f"Could not decode image: {exc}") from exc
    return img


def prepare_image(
    image_bytes: bytes, max_dimension: int = MAX_IMAGE_DIMENSION, padding: int = OCR_IMAGE_PADDING
) -> Image.Image:
    """
    Decode, orient, downsize and pad an image for OCR.

    Args:
        image_bytes: Image data as bytes
        max_dimension: Maximum allowed dimension (width or height)
        padding: White padding to add around image (pixels)

    Returns:
        RGB image, resized if necessary, with padding added
    """
    img = decode_image(image_bytes)

    # Phone photos carry their rotation in EXIF; OCR needs upright pixels.
    img = ImageOps.exif_transpose(img)

    width, height = img.size
    if width > max_dimension or height > max_dimension:
        if width > height:
            new_width = max_dimension
            new_height = int(height * (max_dimension / width))
        else:
            new_height = max_dimension
            new_width = int(width * (max_dimension / height))
        img = img.resize((new_width, new_height), Image.Resampling.LANCZOS)

    img = img.convert("RGB")
    if padding > 0:
        img = ImageOps.expand(img, border=padding, fill="white")
    return img


def prepare_image_bytes(
    image_bytes: bytes, max_dimension: int = MAX_IMAGE_DIMENSION, padding: int = OCR_IMAGE_PADDING
) -> bytes:
    """Same as prepare_image, encoded back to JPEG bytes for an OCR service upload."""
    img = prepare_image(image_bytes, max_dimension=max_dimension, padding=padding)
    buffer = io.BytesIO()
    img.save(buffer, format="JPEG", quality=95)
    return buffer.getvalue()


def _boxes_overlap_y(det1: dict, det2: dict, min_overlap_ratio: float = 0.5) -> bool:
    """
    Check if two boxes overlap in Y by at least min_overlap_ratio of the smaller height.

    More robust than center distance when a tall box sits next to a short one.
    """
    overlap_start = max(det1["y_min"], det2["y_min"])
    overlap_end = min(det1["y_max"], det2["y_max"])
    if overlap_start >= overlap_end:
        return False

    smaller_height = min(det1["y_max"] - det1["y_min"], det2["y_max"] - det2["y_min"])
    if smaller_height <= 0:
        return False
    return (overlap_end - overlap_start) / smaller_height >= min_overlap_ratio


def _adaptive_y_threshold(detections: list[dict]) -> float:
    """Center-distance tolerance derived from the median text height."""
    heights = sorted(det["y_max"] - det["y_min"] for det in detections if det["y_max"] > det["y_min"])
    if not heights:
        return 24.0
    median_height = heights[len(heights) // 2]
    # Larger text/blur -> larger tolerance. Clamp to avoid cross-row merges.
    return max(8.0, min(30.0, median_height * 0.6))


def _group_detections_into_lines(detections: list[dict]) -> list[list[dict]]:
    """Group detections into text rows, each row ordered left to right."""
    y_threshold = _adaptive_y_threshold(detections)
    lines: list[list[dict]] = []

    for det in sorted(detections, key=lambda d: (d["center_y"], d["min_x"])):
        target = None
        for line in lines:
            line_center = sum(d["center_y"] for d in line) / len(line)
            if any(_boxes_overlap_y(det, other) for other in line) or abs(det["center_y"] - line_center) <= y_threshold:
                target = line
                break
        if target is None:
            lines.append([det])
        else:
            target.append(det)

    for line in lines:
        line.sort(key=lambda d: d["min_x"])
    lines.sort(key=lambda line: sum(d["center_y"] for d in line) / len(line))
    return lines


def detections_to_text(raw_result: dict[str, Any], min_confidence: float = MIN_DETECTION_CONFIDENCE) -> RecognizedText:
    """
    Rebuild line-oriented text from an OCR service response.

    The response carries ``detections`` as ``[bbox, [text, confidence]]`` where bbox is
    four ``[x, y]`` points. Confidence is the mean over kept detections.
    """
    detection_data = []
    for detection in raw_result.get("detections", []):
        bbox, (text, confidence) = detection
        if confidence < min_confidence or not str(text).strip():
            continue
        y_coords = [point[1] for point in bbox]
        detection_data.append(
            {
                "text": str(text).strip(),
                "confidence": float(confidence),
                "center_y": sum(y_coords) / len(y_coords),
                "y_min": min(y_coords),
                "y_max": max(y_coords),
                "min_x": min(point[0] for point in bbox),
            }
        )

    if not detection_data:
        return RecognizedText(text="", confidence=0.0)

    lines = _group_detections_into_lines(detection_data)
    text = "\n".join(" ".join(det["text"] for det in line) for line in lines)
    confidence = sum(det["confidence"] for det in detection_data) / len(detection_data)
    return RecognizedText(text=text, confidence=max(0.0, min(1.0, confidence)))
