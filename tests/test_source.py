"""Tests for study_material.source — upload validation and remote fetch."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from pdf_fixtures import build_pdf, words
from study_material.errors import InvalidInputType, RemoteFetchError
from study_material.extractor import extract_remote
from study_material.source import SourceDocument, fetch_remote, from_path, from_upload


def _response(content: bytes, content_type: str = "application/pdf", status: int = 200):
    resp = MagicMock()
    resp.content = content
    resp.headers = {"Content-Type": content_type}
    resp.status_code = status
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
    return resp


# ─── Upload validation ─────────────────────────────────────────

def test_from_upload_accepts_pdf():
    doc = from_upload(b"%PDF-1.4", "application/pdf", "a.pdf")
    assert doc.size == 8
    assert doc.name == "a.pdf"


def test_from_upload_accepts_mime_parameters():
    doc = from_upload(b"%PDF-1.4", "Application/PDF; charset=binary", "a.pdf")
    assert doc.mime_type.startswith("Application")


@pytest.mark.parametrize("mime", ["image/png", "text/plain", "", "application/x-pdf-ish"])
def test_from_upload_rejects_other_types(mime):
    with pytest.raises(InvalidInputType) as exc_info:
        from_upload(b"data", mime, "file.bin")
    assert exc_info.value.user_message == "Please upload a PDF file."


def test_from_upload_rejects_empty():
    with pytest.raises(InvalidInputType):
        from_upload(b"", "application/pdf", "empty.pdf")


def test_from_path_infers_pdf(tmp_path):
    path = tmp_path / "notes.PDF"
    path.write_bytes(b"%PDF-1.4")
    doc = from_path(path)
    assert doc.mime_type == "application/pdf"


def test_from_path_rejects_non_pdf(tmp_path):
    path = tmp_path / "notes.docx"
    path.write_bytes(b"PK")
    with pytest.raises(InvalidInputType):
        from_path(path)


# ─── Remote fetch ──────────────────────────────────────────────

@patch("study_material.source.requests.get")
def test_fetch_remote_success(mock_get):
    mock_get.return_value = _response(b"%PDF-1.4 body")
    doc = fetch_remote("https://cdn.example/books/Indian%20Polity.pdf", timeout=5)
    assert doc.name == "Indian Polity.pdf"
    assert doc.data == b"%PDF-1.4 body"
    mock_get.assert_called_once_with("https://cdn.example/books/Indian%20Polity.pdf",
                                     timeout=5)


@patch("study_material.source.requests.get")
def test_fetch_remote_octet_stream_with_pdf_suffix(mock_get):
    mock_get.return_value = _response(b"%PDF-1.4", "application/octet-stream")
    doc = fetch_remote("https://cdn.example/books/ncert.pdf")
    assert doc.mime_type == "application/pdf"


@patch("study_material.source.requests.get")
def test_fetch_remote_html_rejected(mock_get):
    mock_get.return_value = _response(b"<html>login</html>", "text/html")
    with pytest.raises(InvalidInputType):
        fetch_remote("https://cdn.example/books/view?id=3")


@patch("study_material.source.requests.get")
def test_fetch_remote_http_error(mock_get):
    mock_get.return_value = _response(b"", status=404)
    with pytest.raises(RemoteFetchError):
        fetch_remote("https://cdn.example/missing.pdf")


@patch("study_material.source.requests.get")
def test_fetch_remote_connection_error(mock_get):
    mock_get.side_effect = requests.ConnectionError("dns failure")
    with pytest.raises(RemoteFetchError):
        fetch_remote("https://cdn.example/a.pdf")


@patch("study_material.source.requests.get")
def test_fetch_remote_empty_body(mock_get):
    mock_get.return_value = _response(b"")
    with pytest.raises(RemoteFetchError):
        fetch_remote("https://cdn.example/a.pdf")


def test_fetch_remote_uses_given_session():
    session = MagicMock(spec=requests.Session)
    session.get.return_value = _response(b"%PDF-1.4")
    fetch_remote("https://cdn.example/a.pdf", session=session)
    session.get.assert_called_once()


@patch("study_material.source.requests.get")
def test_extract_remote_end_to_end(mock_get):
    mock_get.return_value = _response(build_pdf([words(1500)]))
    content = extract_remote("https://cdn.example/books/economy.pdf")
    assert len(content.text) >= 400
    assert content.images == []


def test_source_document_size():
    assert SourceDocument(b"abc", "application/pdf", "x.pdf").size == 3
