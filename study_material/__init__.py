"""Study material package — PDF ingestion for a document-grounded mentor."""

__version__ = "0.1.0"

from study_material.config import ExtractionConfig, PROFILES, get_profile, load_config
from study_material.errors import (
    ContentNotReady,
    DocumentParseFailure,
    ExtractionError,
    ExtractionInsufficient,
    ExtractionTimeout,
    InvalidInputType,
    RemoteFetchError,
)
from study_material.source import SourceDocument, fetch_remote, from_path, from_upload
from study_material.text_cleaner import clean_text
from study_material.pdf_parser import extract_text, open_document
from study_material.page_renderer import render_page_images
from study_material.extractor import (
    ExtractedContent,
    extract,
    extract_remote,
    extract_upload,
)
from study_material.session import DocumentSession, SessionState
from study_material.mentor_client import ask_mentor, build_source_blocks, call_llm

__all__ = [
    "ExtractionConfig", "PROFILES", "get_profile", "load_config",
    "ExtractionError", "InvalidInputType", "DocumentParseFailure",
    "RemoteFetchError", "ExtractionInsufficient", "ExtractionTimeout",
    "ContentNotReady",
    "SourceDocument", "from_upload", "from_path", "fetch_remote",
    "clean_text", "extract_text", "open_document", "render_page_images",
    "ExtractedContent", "extract", "extract_upload", "extract_remote",
    "DocumentSession", "SessionState",
    "ask_mentor", "build_source_blocks", "call_llm",
]
