"""Tests for study_material.pdf_parser — opening PDFs and extracting text.

Real PDFs are generated by tests/pdf_fixtures.py; failure injection uses
MagicMock page objects.
"""

import threading
from unittest.mock import MagicMock, patch

import pytest

from pdf_fixtures import build_pdf, words
from study_material.config import ExtractionConfig
from study_material.errors import DocumentParseFailure
from study_material.pdf_parser import PAGE_MARKER, extract_text, open_document


def _marker(n: int) -> str:
    return PAGE_MARKER.format(n=n)


def _mock_page(text: str | None = None, error: Exception | None = None):
    page = MagicMock()
    if error is not None:
        page.extract_words.side_effect = error
    else:
        page.extract_words.return_value = [{"text": w} for w in (text or "").split()]
    return page


def _mock_pdf(pages):
    pdf = MagicMock()
    pdf.pages = pages
    return pdf


# ─── open_document ──────────────────────────────────────────────

def test_open_valid_pdf():
    with open_document(build_pdf(["hello world"])) as pdf:
        assert len(pdf.pages) == 1


def test_open_garbage_raises():
    with pytest.raises(DocumentParseFailure):
        with open_document(b"this is not a pdf at all"):
            pass


def test_open_empty_bytes_raises():
    with pytest.raises(DocumentParseFailure):
        with open_document(b""):
            pass


def test_open_closes_handle_on_error():
    fake = MagicMock()
    fake.pages = [MagicMock()]
    with patch("study_material.pdf_parser.pdfplumber.open", return_value=fake):
        with pytest.raises(RuntimeError):
            with open_document(b"%PDF-1.4"):
                raise RuntimeError("boom")
    fake.close.assert_called_once()


def test_open_zero_pages_raises():
    fake = MagicMock()
    fake.pages = []
    with patch("study_material.pdf_parser.pdfplumber.open", return_value=fake):
        with pytest.raises(DocumentParseFailure):
            with open_document(b"%PDF-1.4"):
                pass
    fake.close.assert_called_once()


# ─── extract_text — real PDFs ───────────────────────────────────

def test_extract_single_page_text():
    data = build_pdf(["Fundamental Rights are justiciable"])
    with open_document(data) as pdf:
        raw = extract_text(pdf, ExtractionConfig())
    assert raw.text.startswith(_marker(1) + "\n")
    assert "Fundamental Rights are justiciable" in raw.text
    assert raw.pages_scanned == 1
    assert raw.skipped_pages == []


def test_ten_page_text_pdf():
    data = build_pdf([words(5000, seed=f"p{i}") for i in range(1, 11)])
    with open_document(data) as pdf:
        raw = extract_text(pdf, ExtractionConfig(max_text_chars=150_000))
    assert raw.text.count("--- Page ") == 10
    assert 40_000 < len(raw.text) <= 150_000
    assert raw.truncated is False


def test_page_cap_respected():
    data = build_pdf([f"chapter {i} content text" for i in range(1, 201)])
    with open_document(data) as pdf:
        raw = extract_text(pdf, ExtractionConfig(max_pages_text=100))
    assert raw.pages_scanned == 100
    assert _marker(100) in raw.text
    assert _marker(101) not in raw.text
    assert raw.truncated is True


def test_image_only_pages_produce_no_text():
    data = build_pdf([None, None, None])
    with open_document(data) as pdf:
        raw = extract_text(pdf, ExtractionConfig())
    assert raw.text == ""
    assert raw.pages_scanned == 3


# ─── extract_text — budget and failures (mocked pages) ─────────

def test_char_budget_truncates():
    pdf = _mock_pdf([_mock_page(words(400)) for _ in range(10)])
    raw = extract_text(pdf, ExtractionConfig(max_text_chars=1000))
    assert len(raw.text) <= 1000
    assert raw.truncated is True
    assert raw.pages_scanned < 10


@pytest.mark.parametrize("limit", [1, 17, 64, 500, 4096])
def test_output_never_exceeds_budget(limit):
    pdf = _mock_pdf([_mock_page(words(300)) for _ in range(20)])
    raw = extract_text(pdf, ExtractionConfig(max_text_chars=limit))
    assert len(raw.text) <= limit


def test_failing_page_is_skipped():
    pages = [_mock_page(f"content of page {i}") for i in range(1, 11)]
    pages[6] = _mock_page(error=ValueError("bad content stream"))
    raw = extract_text(_mock_pdf(pages), ExtractionConfig())
    assert raw.skipped_pages == [7]
    assert "content of page 7" not in raw.text
    assert _marker(7) not in raw.text
    for i in (1, 2, 3, 4, 5, 6, 8, 9, 10):
        assert f"content of page {i}" in raw.text


def test_words_joined_with_single_spaces():
    pdf = _mock_pdf([_mock_page("two  column\nlayout text")])
    raw = extract_text(pdf, ExtractionConfig())
    assert raw.text == f"{_marker(1)}\ntwo column layout text\n\n"


def test_cancel_stops_before_next_page():
    cancel = threading.Event()
    cancel.set()
    pdf = _mock_pdf([_mock_page("never read") for _ in range(3)])
    raw = extract_text(pdf, ExtractionConfig(), cancel=cancel)
    assert raw.text == ""
    assert pdf.pages[0].extract_words.call_count == 0
