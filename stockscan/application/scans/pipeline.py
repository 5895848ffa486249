"""Scan workflow orchestration: recognize -> parse -> match -> assemble."""

from __future__ import annotations

import time
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from functools import partial

from stockscan.domain.catalog import ProductCatalogEntry
from stockscan.domain.scan import OCRResult, ParsedRecipe, RecognizedText
from stockscan.ocr.line_parser import parse_delivery_lines, parse_recipe_lines
from stockscan.ocr.matcher import CatalogIndex, match_lines
from stockscan.runtime.cancellation import CancellationToken, ProgressCallback, ProgressReporter
from stockscan.runtime.config import ScanConfig, load_scan_config
from stockscan.runtime.correction_memory import CorrectionMemory
from stockscan.runtime.correction_store import JsonFileCorrectionStore
from stockscan.runtime.logging import get_logger
from stockscan.runtime.recognizer import RecognizerFactory, create_recognizer

logger = get_logger(__name__)

# Recognizer progress is mapped into 0..RECOGNITION_END
RECOGNITION_END = 70
PROGRESS_PARSING = 75
PROGRESS_MATCHING = 85
PROGRESS_DONE = 100

STATUS_PARSING = "parsing text"
STATUS_MATCHING = "matching products"
STATUS_DONE = "done"

DEFAULT_POLL_INTERVAL = 0.05


class ScanPipeline:
    """Run one delivery or recipe scan end to end.

    The pipeline holds no per-scan state: every call builds its own recognizer
    from the factory, so concurrent scans only share the read-only catalog and
    the correction memory.
    """

    def __init__(
        self,
        recognizer_factory: RecognizerFactory,
        memory: CorrectionMemory | None = None,
        config: ScanConfig | None = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        self.recognizer_factory = recognizer_factory
        self.memory = memory if memory is not None else CorrectionMemory()
        self.config = config if config is not None else ScanConfig()
        self.poll_interval = poll_interval

    def _recognize(self, image: bytes, reporter: ProgressReporter, token: CancellationToken) -> RecognizedText:
        """Run recognition on a worker thread while watching the token."""
        token.raise_if_cancelled()
        recognizer = self.recognizer_factory()
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="stockscan-ocr")
        try:
            future = executor.submit(recognizer.recognize, image, reporter.scaled(0, RECOGNITION_END))
            while True:
                try:
                    recognized = future.result(timeout=self.poll_interval)
                    break
                except FutureTimeout:
                    token.raise_if_cancelled()
        finally:
            # A cancelled scan leaves the worker to finish on its own; its result is dropped.
            executor.shutdown(wait=False, cancel_futures=True)

        token.raise_if_cancelled()
        logger.info("Recognized %d characters (confidence %.2f)", len(recognized.text), recognized.confidence)
        logger.debug("Recognized text:\n%s", recognized.text)
        return recognized

    def process_delivery_image(
        self,
        image: bytes,
        catalog: Sequence[ProductCatalogEntry],
        on_progress: ProgressCallback | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> OCRResult:
        """
        Scan a delivery note and match every line against the catalog.

        Args:
            image: Raw encoded image bytes
            catalog: Products lines can match
            on_progress: Receives monotonic progress events, ending at 100
            cancel_token: Abandons the scan with ScanCancelled when cancelled

        Returns:
            OCRResult with one MatchedItem per parsed line, in reading order

        Raises:
            RecognitionError: The image could not be recognized
            ScanCancelled: The token was cancelled before the scan finished
        """
        token = cancel_token if cancel_token is not None else CancellationToken()
        reporter = ProgressReporter(on_progress, token)
        start_time = time.time()

        recognized = self._recognize(image, reporter, token)

        reporter.report(STATUS_PARSING, PROGRESS_PARSING)
        lines = parse_delivery_lines(recognized.text, vocabulary=self.config.vocabulary)
        token.raise_if_cancelled()

        reporter.report(STATUS_MATCHING, PROGRESS_MATCHING)
        index = CatalogIndex.build(catalog)
        matches = match_lines(lines, index, self.memory, self.config.matcher)
        token.raise_if_cancelled()

        reporter.report(STATUS_DONE, PROGRESS_DONE)
        matched = sum(1 for item in matches if item.is_matched)
        logger.info(
            "Delivery scan: %d lines, %d matched in %.2f seconds",
            len(matches),
            matched,
            time.time() - start_time,
        )
        return OCRResult(raw_text=recognized.text, confidence=recognized.confidence, matches=matches)

    def process_recipe_image(
        self,
        image: bytes,
        catalog: Sequence[ProductCatalogEntry],
        on_progress: ProgressCallback | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> ParsedRecipe:
        """Scan a recipe sheet: header, matched ingredients and instructions."""
        token = cancel_token if cancel_token is not None else CancellationToken()
        reporter = ProgressReporter(on_progress, token)

        recognized = self._recognize(image, reporter, token)

        reporter.report(STATUS_PARSING, PROGRESS_PARSING)
        recipe_lines = parse_recipe_lines(recognized.text, vocabulary=self.config.vocabulary)
        token.raise_if_cancelled()

        reporter.report(STATUS_MATCHING, PROGRESS_MATCHING)
        index = CatalogIndex.build(catalog)
        ingredients = match_lines(recipe_lines.ingredient_lines, index, self.memory, self.config.matcher)
        token.raise_if_cancelled()

        reporter.report(STATUS_DONE, PROGRESS_DONE)
        logger.info(
            "Recipe scan %r: %d ingredients, %d instructions",
            recipe_lines.header.name,
            len(ingredients),
            len(recipe_lines.instruction_lines),
        )
        return ParsedRecipe(
            name=recipe_lines.header.name,
            portions=recipe_lines.header.portions,
            ingredients=ingredients,
            instructions=list(recipe_lines.instruction_lines),
            raw_text=recognized.text,
            confidence=recognized.confidence,
        )


def create_scan_pipeline(
    config: ScanConfig | None = None,
    memory: CorrectionMemory | None = None,
) -> ScanPipeline:
    """Build a pipeline wired to the on-device configuration and correction file."""
    if config is None:
        config = load_scan_config()
    if memory is None:
        memory = CorrectionMemory(JsonFileCorrectionStore())
    return ScanPipeline(partial(create_recognizer, config.ocr), memory=memory, config=config)
