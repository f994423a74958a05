"""Extraction orchestrator: PDF bytes -> cleaned text + vision fallback.

Building Block: extract
    Input Data:  SourceDocument (uploaded or fetched PDF), ExtractionConfig
    Output Data: ExtractedContent {text, images, page_count_estimate, ...}
    Setup Data:  pdfplumber, Pillow, PROFILES in config.py

Text is always extracted and cleaned first. Only when the cleaned text is
sparse (likely a scanned PDF) are leading pages rendered to images. With
render_mode="speculative" the render runs on its own document handle in a
worker thread while text is extracted, and its output is thrown away if
the text turns out sufficient. That trades wasted rasterisation for
latency on scanned documents.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeout
from dataclasses import dataclass, field
from typing import Optional

from study_material.config import ExtractionConfig, PROFILES
from study_material.errors import ExtractionInsufficient, ExtractionTimeout
from study_material.page_renderer import render_page_images
from study_material.pdf_parser import RawText, extract_text, open_document
from study_material.source import SourceDocument, fetch_remote, from_upload
from study_material.text_cleaner import clean_text

logger = logging.getLogger(__name__)

# Minimum text the chat screen accepts when no page images exist
CONSUMER_MIN_TEXT_CHARS = 200


@dataclass
class ExtractedContent:
    """Pipeline output handed to chat, evaluation and quiz features."""

    text: str = ""
    images: list[str] = field(default_factory=list)
    page_count_estimate: int = 1
    pages_scanned: int = 0
    skipped_pages: list[int] = field(default_factory=list)
    truncated: bool = False
    images_attempted: bool = False

    def to_payload(self) -> dict:
        """The consumer contract: a plain text/images pair."""
        return {"text": self.text, "images": list(self.images)}

    def has_usable_content(self, min_chars: int = CONSUMER_MIN_TEXT_CHARS) -> bool:
        return len(self.text.strip()) >= min_chars or bool(self.images)


def is_sparse(text: str, config: ExtractionConfig) -> bool:
    """Sufficiency check: too little text means the PDF is likely scanned."""
    return len(text.strip()) < config.min_text_threshold


def estimate_page_count(size: int, images: list[str],
                        config: ExtractionConfig) -> int:
    """Rough page count: rendered images if any, else bytes / constant."""
    if images:
        return len(images)
    return max(1, size // config.bytes_per_page_estimate)


def _read_text(pdf, config: ExtractionConfig,
               cancel: Optional[threading.Event]) -> tuple[str, RawText]:
    raw = extract_text(pdf, config, cancel)
    text = clean_text(raw.text, config.charset, config.filter_noise_lines)
    logger.info("Extracted %d raw / %d cleaned chars from %d pages",
                len(raw.text), len(text), raw.pages_scanned)
    return text, raw


def _render_separately(data: bytes, config: ExtractionConfig,
                       cancel: threading.Event) -> list[str]:
    """Render on a private document handle (worker-thread function)."""
    with open_document(data) as pdf:
        return render_page_images(pdf, config, cancel)


def _run_speculative(source: SourceDocument, pdf, config: ExtractionConfig,
                     cancel: Optional[threading.Event]) -> tuple[str, RawText, list[str]]:
    discard = threading.Event()
    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="render") as pool:
        future = pool.submit(_render_separately, source.data, config, discard)
        try:
            text, raw = _read_text(pdf, config, cancel)
        except BaseException:
            discard.set()
            raise
        if not is_sparse(text, config) or (cancel is not None and cancel.is_set()):
            discard.set()
            logger.debug("Discarding speculative page images")
            return text, raw, []
        return text, raw, future.result()


def _run_pipeline(source: SourceDocument, config: ExtractionConfig,
                  cancel: Optional[threading.Event] = None) -> ExtractedContent:
    with open_document(source.data) as pdf:
        if config.render_mode == "speculative":
            text, raw, images = _run_speculative(source, pdf, config, cancel)
        else:
            text, raw = _read_text(pdf, config, cancel)
            images = []
            if is_sparse(text, config):
                logger.info("Sparse text (%d < %d chars), rendering page images",
                            len(text.strip()), config.min_text_threshold)
                images = render_page_images(pdf, config, cancel)

    sparse = is_sparse(text, config)
    if sparse and not images:
        raise ExtractionInsufficient(
            f"{source.name}: {len(text.strip())} chars of text and no page images"
        )

    return ExtractedContent(
        text=text,
        images=images,
        page_count_estimate=estimate_page_count(source.size, images, config),
        pages_scanned=raw.pages_scanned,
        skipped_pages=list(raw.skipped_pages),
        truncated=raw.truncated,
        images_attempted=sparse,
    )


def extract(source: SourceDocument,
            config: Optional[ExtractionConfig] = None) -> ExtractedContent:
    """Run the full pipeline for one document.

    Raises InvalidInputType, DocumentParseFailure, ExtractionInsufficient
    or ExtractionTimeout; never returns an empty "success".
    """
    config = config or PROFILES["default"]
    source.validate()
    if source.size > config.max_file_bytes:
        logger.warning("%s is %d bytes, above the recommended %d",
                       source.name, source.size, config.max_file_bytes)
    logger.info("Extracting %s (%d bytes)", source.name, source.size)

    if config.timeout_seconds is None:
        return _run_pipeline(source, config)

    cancel = threading.Event()
    pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="extract")
    try:
        future = pool.submit(_run_pipeline, source, config, cancel)
        try:
            return future.result(timeout=config.timeout_seconds)
        except FuturesTimeout as exc:
            cancel.set()
            raise ExtractionTimeout(
                f"{source.name}: extraction exceeded {config.timeout_seconds}s"
            ) from exc
    finally:
        # A stalled page parse cannot be interrupted; don't block on it
        pool.shutdown(wait=False)


def extract_upload(data: bytes, mime_type: str, name: str,
                   config: Optional[ExtractionConfig] = None) -> ExtractedContent:
    """Entry point for a freshly uploaded file."""
    return extract(from_upload(data, mime_type, name), config)


def extract_remote(url: str, config: Optional[ExtractionConfig] = None,
                   timeout: float = 30.0) -> ExtractedContent:
    """Entry point for a library book stored behind a URL."""
    return extract(fetch_remote(url, timeout=timeout), config or PROFILES["library"])
