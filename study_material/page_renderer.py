"""Rasterise leading PDF pages into JPEG data URIs for a vision model.

Building Block: render_page_images
    Input Data:  open pdfplumber document, ExtractionConfig
    Output Data: list of "data:image/jpeg;base64,..." strings, ascending page order
    Setup Data:  pdfplumber (pypdfium2 backend), Pillow
"""

import base64
import io
import logging
import threading
from typing import Optional

from study_material.config import ExtractionConfig

logger = logging.getLogger(__name__)

PDF_POINTS_PER_INCH = 72
DATA_URI_PREFIX = "data:image/jpeg;base64,"


def page_scale(page_width: float, config: ExtractionConfig) -> float:
    """Scale factor for one page: render_scale, narrowed to max_image_width."""
    scale = config.render_scale
    if config.max_image_width and page_width > 0:
        scale = min(scale, config.max_image_width / page_width)
    return scale


def encode_jpeg(image, quality: int) -> str:
    """Encode a PIL image as a JPEG data URI."""
    if image.mode != "RGB":
        image = image.convert("RGB")
    buffered = io.BytesIO()
    image.save(buffered, format="JPEG", quality=quality)
    return DATA_URI_PREFIX + base64.b64encode(buffered.getvalue()).decode("ascii")


def render_page(page, config: ExtractionConfig) -> str:
    scale = page_scale(float(page.width), config)
    page_image = page.to_image(resolution=PDF_POINTS_PER_INCH * scale)
    return encode_jpeg(page_image.original, config.jpeg_quality)


def render_page_images(pdf, config: ExtractionConfig,
                       cancel: Optional[threading.Event] = None) -> list[str]:
    """Render pages 1..min(total, max_pages_images) in ascending order.

    A page that fails to render is logged and left out, so the result may
    be shorter than the page cap.
    """
    pages = pdf.pages
    count = min(len(pages), config.max_pages_images)
    images: list[str] = []

    for page_no in range(1, count + 1):
        if cancel is not None and cancel.is_set():
            logger.info("Page rendering cancelled at page %d", page_no)
            break
        try:
            images.append(render_page(pages[page_no - 1], config))
        except Exception as exc:
            logger.error("Error rendering page %d: %s", page_no, exc)

    logger.info("Generated %d/%d page images", len(images), count)
    return images
