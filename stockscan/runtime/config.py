"""Runtime loader for scanner configuration (TOML).

Example ``config.toml``:

    [ocr]
    engine = "tesseract"        # or "service"
    language = "fra"
    service_url = "http://localhost:8001"
    timeout = 60.0

    [matcher]
    fuzzy_threshold = 0.35      # in (0, 1]
    max_alternatives = 3        # 0 to 3

    [units]
    "kilogr" = "kg"
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from functools import lru_cache
from pathlib import Path
from typing import Any

from stockscan.ocr.line_parser import UnitVocabulary, build_unit_vocabulary
from stockscan.ocr.matcher import MatcherConfig
from stockscan.runtime.logging import get_logger
from stockscan.runtime.paths import get_paths

logger = get_logger(__name__)

OCR_ENGINES = ("tesseract", "service")


@dataclass(frozen=True)
class OCRConfig:
    engine: str = "tesseract"
    language: str = "fra"
    service_url: str = "http://localhost:8001"
    timeout: float = 60.0


@dataclass(frozen=True)
class ScanConfig:
    """Everything a scan pipeline needs from configuration."""

    ocr: OCRConfig = field(default_factory=OCRConfig)
    matcher: MatcherConfig = field(default_factory=MatcherConfig)
    vocabulary: UnitVocabulary = field(default_factory=build_unit_vocabulary)


def _load_toml(path: Path) -> dict[str, Any]:
    """Load TOML file and return parsed dict; missing files map to empty dict."""
    try:
        import tomllib
    except ImportError:
        import tomli as tomllib  # type: ignore[no-redef]

    if not path.exists():
        return {}

    with open(path, "rb") as f:
        data = tomllib.load(f)
    return data if isinstance(data, dict) else {}


def _known_fields(cls: type, section: dict[str, Any], section_name: str) -> dict[str, Any]:
    names = {f.name for f in fields(cls)}
    unknown = sorted(set(section) - names)
    if unknown:
        logger.warning("Ignoring unknown [%s] keys: %s", section_name, ", ".join(unknown))
    return {key: value for key, value in section.items() if key in names}


def build_scan_config(data: dict[str, Any]) -> ScanConfig:
    """Build a ScanConfig from an already parsed TOML mapping."""
    ocr = OCRConfig(**_known_fields(OCRConfig, data.get("ocr", {}), "ocr"))
    if ocr.engine not in OCR_ENGINES:
        raise ValueError(f"Unknown OCR engine {ocr.engine!r}; expected one of {', '.join(OCR_ENGINES)}")

    try:
        matcher = MatcherConfig(**_known_fields(MatcherConfig, data.get("matcher", {}), "matcher"))
    except TypeError as e:
        raise ValueError(f"Invalid [matcher] section: {e}") from e
    units = data.get("units", {})
    vocabulary = build_unit_vocabulary({str(k): str(v) for k, v in units.items()})
    return ScanConfig(ocr=ocr, matcher=matcher, vocabulary=vocabulary)


@lru_cache(maxsize=8)
def load_scan_config(config_path: str | None = None) -> ScanConfig:
    """Load scanner configuration; the default path is ``<data root>/config.toml``."""
    path = Path(config_path) if config_path is not None else get_paths().config_file
    data = _load_toml(path)
    if data:
        logger.debug("Loaded scan config from %s", path)
    return build_scan_config(data)
