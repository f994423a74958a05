"""Source documents: uploaded files and library books fetched over HTTP."""

import logging
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote, urlparse

import requests

from study_material.errors import InvalidInputType, RemoteFetchError

PDF_MIME_TYPE = "application/pdf"
DEFAULT_FETCH_TIMEOUT = 30.0

logger = logging.getLogger(__name__)


@dataclass
class SourceDocument:
    """Raw PDF bytes plus the metadata the upload widget reports."""

    data: bytes
    mime_type: str
    name: str

    @property
    def size(self) -> int:
        return len(self.data)

    def validate(self) -> None:
        """Reject anything that is not a non-empty PDF upload."""
        mime = (self.mime_type or "").split(";")[0].strip().lower()
        if mime != PDF_MIME_TYPE:
            raise InvalidInputType(
                f"{self.name}: expected {PDF_MIME_TYPE}, got {self.mime_type!r}"
            )
        if not self.data:
            raise InvalidInputType(f"{self.name}: file is empty",
                                   user_message="PDF file is empty.")


def from_upload(data: bytes, mime_type: str, name: str) -> SourceDocument:
    """Wrap an uploaded file; fails fast for non-PDF types."""
    doc = SourceDocument(data=data, mime_type=mime_type, name=name)
    doc.validate()
    return doc


def from_path(path: Path) -> SourceDocument:
    """Load a local file, inferring the MIME type from its suffix."""
    path = Path(path)
    mime = PDF_MIME_TYPE if path.suffix.lower() == ".pdf" else "application/octet-stream"
    return from_upload(path.read_bytes(), mime, path.name)


def _name_from_url(url: str) -> str:
    name = Path(unquote(urlparse(url).path)).name
    return name or "document.pdf"


def fetch_remote(url: str, timeout: float = DEFAULT_FETCH_TIMEOUT,
                 session: requests.Session | None = None) -> SourceDocument:
    """Download a stored PDF so it can go through the upload pipeline.

    The body is trusted to be a PDF when the server says so or the URL
    ends in .pdf; object stores often answer with octet-stream.
    """
    http = session or requests
    logger.info("Fetching PDF from %s", url)
    try:
        response = http.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as exc:
        raise RemoteFetchError(f"Failed to fetch PDF: {exc}") from exc

    data = response.content
    logger.info("PDF blob size: %d bytes", len(data))
    if not data:
        raise RemoteFetchError(f"PDF file is empty: {url}",
                               user_message="PDF file is empty.")

    name = _name_from_url(url)
    content_type = response.headers.get("Content-Type", "")
    if PDF_MIME_TYPE in content_type.lower() or name.lower().endswith(".pdf"):
        content_type = PDF_MIME_TYPE
    return from_upload(data, content_type, name)
