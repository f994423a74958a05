"""Low-level PDF opening and page-by-page text extraction.

Building Block: open_document / extract_text
    Input Data:  Raw PDF bytes, ExtractionConfig
    Output Data: RawText (page-marked text, pages scanned, skipped pages)
    Setup Data:  pdfplumber library
"""

import io
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, Optional

import pdfplumber

from study_material.config import ExtractionConfig
from study_material.errors import DocumentParseFailure

logger = logging.getLogger(__name__)

PAGE_MARKER = "--- Page {n} ---"


@dataclass
class RawText:
    """Uncleaned extractor output."""

    text: str = ""
    pages_scanned: int = 0
    skipped_pages: list[int] = field(default_factory=list)
    truncated: bool = False


@contextmanager
def open_document(data: bytes) -> Iterator[pdfplumber.PDF]:
    """Open PDF bytes with pdfplumber and guarantee the handle is closed.

    Raises DocumentParseFailure if the buffer is not a readable PDF, before
    any page-level work happens.
    """
    try:
        pdf = pdfplumber.open(io.BytesIO(data))
    except Exception as exc:
        raise DocumentParseFailure(f"Cannot open PDF: {exc}") from exc
    try:
        try:
            n_pages = len(pdf.pages)
        except Exception as exc:
            raise DocumentParseFailure(f"Cannot read page tree: {exc}") from exc
        if n_pages == 0:
            raise DocumentParseFailure("PDF has no pages")
        logger.debug("Opened PDF with %d pages", n_pages)
        yield pdf
    finally:
        pdf.close()


def _page_text(page) -> str:
    """Join the page's words in layout order with single spaces."""
    words = page.extract_words()
    return " ".join(w["text"] for w in words if w.get("text"))


def _cancelled(cancel: Optional[threading.Event]) -> bool:
    return cancel is not None and cancel.is_set()


def extract_text(pdf, config: ExtractionConfig,
                 cancel: Optional[threading.Event] = None) -> RawText:
    """Extract page-marked text from at most ``config.max_pages_text`` pages.

    Pages without text runs contribute nothing, not even a marker. A page
    that raises is logged, recorded in ``skipped_pages`` and skipped. The
    result never exceeds ``config.max_text_chars`` characters.
    """
    pages = pdf.pages
    last = min(len(pages), config.max_pages_text)
    limit = config.max_text_chars
    result = RawText()
    chunks: list[str] = []
    length = 0

    for page_no in range(1, last + 1):
        if _cancelled(cancel):
            logger.info("Text extraction cancelled at page %d", page_no)
            break
        result.pages_scanned = page_no
        page = pages[page_no - 1]
        try:
            text = _page_text(page)
        except Exception as exc:
            logger.warning("Skipping page %d: text extraction failed (%s)",
                           page_no, exc)
            result.skipped_pages.append(page_no)
            continue
        finally:
            page.flush_cache()

        if not text.strip():
            continue
        chunk = f"{PAGE_MARKER.format(n=page_no)}\n{text}\n\n"
        chunks.append(chunk)
        length += len(chunk)

        # Character budget
        if length >= limit:
            result.truncated = length > limit or page_no < len(pages)
            break

    text = "".join(chunks)
    if len(text) > limit:
        text = text[:limit]
    if last < len(pages):
        result.truncated = True
        logger.info("Stopped at page cap %d of %d pages", last, len(pages))
    result.text = text
    return result
