"""Per-user "current document" state with a stale-result guard.

States: EMPTY -> EXTRACTING -> READY | FAILED, and back to EMPTY on clear.
Each begin() bumps a generation counter; a result is only committed if
its token still matches, so a slow extraction of a replaced document can
never overwrite the newer one.

Usage::

    session = DocumentSession()
    session.load(from_upload(data, "application/pdf", "polity.pdf"))
    payload = session.require_content().to_payload()
"""

from __future__ import annotations

import enum
import logging
import threading
from typing import Optional

from study_material.config import ExtractionConfig
from study_material.errors import ContentNotReady, ExtractionError
from study_material.extractor import CONSUMER_MIN_TEXT_CHARS, ExtractedContent, extract
from study_material.source import SourceDocument

logger = logging.getLogger(__name__)


class SessionState(enum.Enum):
    EMPTY = "empty"
    EXTRACTING = "extracting"
    READY = "ready"
    FAILED = "failed"


class DocumentSession:
    """Holds the current document's extracted content for one user."""

    def __init__(self, config: Optional[ExtractionConfig] = None) -> None:
        self._config = config
        self._lock = threading.Lock()
        self._generation = 0
        self._state = SessionState.EMPTY
        self._document_name: str | None = None
        self._content: ExtractedContent | None = None
        self._error: ExtractionError | None = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def document_name(self) -> str | None:
        return self._document_name

    @property
    def content(self) -> ExtractedContent | None:
        return self._content

    @property
    def error(self) -> ExtractionError | None:
        return self._error

    def begin(self, document_name: str) -> int:
        """Start extracting a new document; returns its generation token."""
        with self._lock:
            self._generation += 1
            self._state = SessionState.EXTRACTING
            self._document_name = document_name
            self._content = None
            self._error = None
            logger.debug("Session generation %d: extracting %s",
                         self._generation, document_name)
            return self._generation

    def commit(self, token: int, content: ExtractedContent) -> bool:
        """Apply a finished extraction. False if the token is stale."""
        with self._lock:
            if token != self._generation or self._state is not SessionState.EXTRACTING:
                logger.info("Discarding stale extraction result (token %d, current %d)",
                            token, self._generation)
                return False
            self._content = content
            self._state = SessionState.READY
            return True

    def fail(self, token: int, error: ExtractionError) -> bool:
        """Record a failed extraction. False if the token is stale."""
        with self._lock:
            if token != self._generation or self._state is not SessionState.EXTRACTING:
                logger.info("Discarding stale extraction failure (token %d, current %d)",
                            token, self._generation)
                return False
            self._error = error
            self._state = SessionState.FAILED
            return True

    def clear(self) -> None:
        """Remove the document; any in-flight extraction becomes stale."""
        with self._lock:
            self._generation += 1
            self._state = SessionState.EMPTY
            self._document_name = None
            self._content = None
            self._error = None

    def load(self, source: SourceDocument,
             config: Optional[ExtractionConfig] = None) -> ExtractedContent:
        """Run begin/extract/commit for one document.

        Any exception is recorded as a FAILED state and re-raised; errors
        outside the ExtractionError family are stored wrapped in a plain
        ExtractionError that chains the original. If the document
        was replaced or cleared meanwhile, the result is returned to the
        caller but not applied to the session.
        """
        token = self.begin(source.name)
        try:
            content = extract(source, config or self._config)
        except ExtractionError as exc:
            self.fail(token, exc)
            raise
        except Exception as exc:
            error = ExtractionError(f"Unexpected extraction failure: {exc}")
            error.__cause__ = exc
            self.fail(token, error)
            raise
        self.commit(token, content)
        return content

    def require_content(self, min_chars: int = CONSUMER_MIN_TEXT_CHARS) -> ExtractedContent:
        """Content for chat/quiz features, or ContentNotReady."""
        with self._lock:
            content = self._content
            state = self._state
        if state is not SessionState.READY or content is None:
            raise ContentNotReady(f"No document ready (state: {state.value})")
        if not content.has_usable_content(min_chars):
            raise ContentNotReady("Document has neither readable text nor page images")
        return content
