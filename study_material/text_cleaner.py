"""Normalisation of raw extracted PDF text.

Pure functions, no I/O. ``clean_text`` is idempotent for both charsets:
every step leaves text that the same step maps to itself.
"""

import re

# printable ASCII plus LF and tab
_NON_ASCII_RE = re.compile(r'[^\x20-\x7E\n\t]')
# C0/C1 control codes except LF and tab, plus BOM and zero-width chars
_CONTROL_RE = re.compile(r'[\x01-\x08\x0B-\x1F\x7F-\x9F\u200B-\u200D\u2060\uFEFF]')
_HSPACE_RE = re.compile(r'[^\S\n]+')
_BLANK_RUN_RE = re.compile(r'\n{3,}')
_PAGE_NUMBER_RE = re.compile(r'^page\s+\d+(\s+of\s+\d+)?$', re.IGNORECASE)

_KEEP_MARKERS = ("http://", "https://", "doi:")


def _is_noise_line(line: str) -> bool:
    """Page-number footers and tiny header/footer fragments."""
    lower = line.lower()
    if _PAGE_NUMBER_RE.match(lower):
        return True
    if any(m in lower for m in _KEEP_MARKERS):
        return False
    return 0 < len(line) <= 2


def clean_text(raw: str, charset: str = "unicode",
               filter_noise_lines: bool = True) -> str:
    """Normalise raw extractor output for LLM grounding.

    charset="ascii" keeps printable ASCII only (accented and non-Latin
    letters become spaces); charset="unicode" keeps every printable
    character and strips control codes only.
    """
    if not raw:
        return ""
    if charset not in ("unicode", "ascii"):
        raise ValueError(f"Unknown charset: {charset!r}")

    text = raw.replace("\x00", "")
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    if charset == "ascii":
        text = _NON_ASCII_RE.sub(" ", text)
    else:
        text = _CONTROL_RE.sub(" ", text)
    text = _HSPACE_RE.sub(" ", text)

    lines = [line.strip() for line in text.split("\n")]
    if filter_noise_lines:
        lines = [line for line in lines if not _is_noise_line(line)]

    text = "\n".join(lines)
    text = _BLANK_RUN_RE.sub("\n\n", text)
    return text.strip()
