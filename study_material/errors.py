"""Exception taxonomy for the study-material pipeline.

Whole-document failures are raised to the caller. Per-page failures are
logged and recovered inside the extractor and renderer and never show up
here.
"""


class ExtractionError(Exception):
    """Base class for every failure surfaced to the caller."""

    user_message = "Failed to process PDF. Please try again."

    def __init__(self, message: str = "", user_message: str | None = None):
        super().__init__(message or self.user_message)
        if user_message is not None:
            self.user_message = user_message


class InvalidInputType(ExtractionError):
    """The selected file is not a PDF; extraction never starts."""

    user_message = "Please upload a PDF file."


class DocumentParseFailure(ExtractionError):
    """The byte buffer cannot be opened as a PDF at all."""

    user_message = (
        "This file could not be read as a PDF. "
        "Please retry or choose another file."
    )


class RemoteFetchError(ExtractionError):
    """A library book could not be downloaded."""

    user_message = "Unable to download this PDF. Please try again later."


class ExtractionInsufficient(ExtractionError):
    """Neither usable text nor any page image could be extracted."""

    user_message = (
        "Unable to read this PDF. Please try downloading it "
        "or upload a different PDF."
    )


class ExtractionTimeout(ExtractionError):
    """Extraction ran past the configured wall-clock limit."""

    user_message = "Processing this PDF took too long. Please try a smaller file."


class ContentNotReady(ExtractionError):
    """A consumer asked for content while the session has none usable."""

    user_message = (
        "PDF content not loaded properly. Re-upload the PDF, "
        "use a different PDF, or select another book from the library."
    )
