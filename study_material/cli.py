"""
cli.py — Extract study material from a PDF
===========================================

    python -m study_material.cli notes.pdf
    python -m study_material.cli https://storage.example/books/polity.pdf --profile library

Loads .env (for STUDY_MATERIAL_PROFILE) and an optional JSON config,
runs the extraction pipeline and prints a summary, or the
{text, images} payload with --json.
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from study_material.config import PROFILES, load_config
from study_material.errors import ExtractionError
from study_material.extractor import extract
from study_material.source import fetch_remote, from_path

logger = logging.getLogger(__name__)


def load_dotenv(paths: list[Path]) -> None:
    """Copy KEY=VALUE lines into os.environ without overriding."""
    for env_path in paths:
        if env_path.exists():
            with open(env_path) as f:
                for line in f:
                    line = line.strip()
                    if line and not line.startswith("#") and "=" in line:
                        key, value = line.split("=", 1)
                        os.environ.setdefault(key.strip(), value.strip())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="study_material",
        description="Extract grounding text and fallback page images from a PDF.",
    )
    parser.add_argument("source", help="local PDF path or http(s) URL")
    parser.add_argument("--profile", choices=sorted(PROFILES),
                        help="named extraction profile")
    parser.add_argument("--config", type=Path,
                        help="JSON file with ExtractionConfig overrides")
    parser.add_argument("--json", action="store_true",
                        help="print the {text, images} payload as JSON")
    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv([Path.cwd() / ".env"])

    # ── Setup logging ──
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    args = build_parser().parse_args(argv)
    is_url = args.source.startswith(("http://", "https://"))
    profile = args.profile or ("library" if is_url else None)

    try:
        config = load_config(args.config, profile)
        source = fetch_remote(args.source) if is_url else from_path(Path(args.source))
        content = extract(source, config)
    except ExtractionError as exc:
        logger.error("Extraction failed: %s", exc)
        print(f"ERROR: {exc.user_message}", file=sys.stderr)
        return 1
    except (OSError, ValueError, KeyError) as exc:
        logger.error("Cannot start extraction: %s", exc)
        message = exc.args[0] if isinstance(exc, KeyError) and exc.args else exc
        print(f"ERROR: {message}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(content.to_payload(), ensure_ascii=False))
        return 0

    print(f"{source.name}: ~{content.page_count_estimate} pages")
    if content.images:
        print(f"Scanned PDF detected: using {len(content.images)} page image(s) for OCR.")
    else:
        print(f"{len(content.text):,} characters extracted from "
              f"{content.pages_scanned} pages.")
    if content.skipped_pages:
        print(f"Skipped unreadable pages: {content.skipped_pages}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
