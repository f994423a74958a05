"""Grounded mentor call: the consumer side of the extraction pipeline.

Building Block: build_source_blocks / call_llm / ask_mentor
    Input Data:  anthropic.Anthropic client, {text, images} payload, question
    Output Data: mentor answer text
    Setup Data:  ANTHROPIC_API_KEY env var, claude-sonnet-4-20250514 model

Only the payload produced by the extractor is read here; the PDF itself
never reaches this module.
"""

import logging
import time

import anthropic

from study_material.session import DocumentSession

MODEL = "claude-sonnet-4-20250514"
MAX_SOURCE_CHARS = 15_000
MAX_SOURCE_IMAGES = 3
MAX_HISTORY_TURNS = 10
TEXT_SOURCE_MIN_CHARS = 300

SYSTEM_PROMPT = (
    "You are a study mentor. Use ONLY the provided study material as the "
    "source for factual claims. If it does not contain the answer, say "
    "\"Not found in the uploaded PDF.\""
)

logger = logging.getLogger(__name__)

_RETRYABLE = (
    anthropic.APITimeoutError,
    anthropic.RateLimitError,
    anthropic.APIConnectionError,
    anthropic.InternalServerError,
)


def _image_block(data_uri: str) -> dict:
    header, _, data = data_uri.partition(",")
    media_type = header.removeprefix("data:").split(";")[0] or "image/jpeg"
    return {
        "type": "image",
        "source": {"type": "base64", "media_type": media_type, "data": data},
    }


def build_source_blocks(payload: dict,
                        max_chars: int = MAX_SOURCE_CHARS,
                        max_images: int = MAX_SOURCE_IMAGES) -> list[dict]:
    """Turn {text, images} into message content blocks.

    Text wins when there is enough of it; otherwise the page images are
    sent for the model to read.
    """
    text = (payload.get("text") or "").strip()
    images = payload.get("images") or []
    if len(text) > TEXT_SOURCE_MIN_CHARS or not images:
        return [{
            "type": "text",
            "text": f"---PDF TEXT START---\n{text[:max_chars]}\n---PDF TEXT END---",
        }]
    blocks = [{
        "type": "text",
        "text": "---PDF PAGES PROVIDED AS IMAGES---\n"
                "Treat ONLY what you can read in these pages as the source.",
    }]
    blocks.extend(_image_block(uri) for uri in images[:max_images])
    return blocks


def call_llm(client: anthropic.Anthropic, messages: list[dict],
             system: str = SYSTEM_PROMPT, max_tokens: int = 2500,
             timeout: float = 60.0, retries: int = 2) -> str:
    """LLM call with retry on timeout/rate-limit/connection errors.

    Raises the original exception after exhausting retries.
    Raises AuthenticationError immediately (no retry).
    """
    for attempt in range(retries + 1):
        try:
            resp = client.with_options(timeout=timeout).messages.create(
                model=MODEL,
                max_tokens=max_tokens,
                system=system,
                messages=messages,
            )
            return resp.content[0].text
        except _RETRYABLE as e:
            if attempt == retries:
                logger.error("LLM failed after %d retries: %s", retries, e)
                raise
            wait = 2 ** attempt  # 1s, 2s
            logger.warning("LLM retry %d/%d after %s (wait %ds)",
                           attempt + 1, retries, type(e).__name__, wait)
            time.sleep(wait)
        except anthropic.AuthenticationError:
            logger.error("Invalid API key — check ANTHROPIC_API_KEY")
            raise
    raise RuntimeError("Exhausted retries")


def ask_mentor(client: anthropic.Anthropic, session: DocumentSession,
               question: str, history: list[dict] | None = None) -> str:
    """Answer a question grounded in the session's current document.

    Raises ContentNotReady when the session has nothing usable, so chat
    never proceeds on an empty source.
    """
    payload = session.require_content().to_payload()
    messages = list((history or [])[-MAX_HISTORY_TURNS:])
    messages.append({
        "role": "user",
        "content": [*build_source_blocks(payload), {"type": "text", "text": question}],
    })
    logger.info("Asking mentor about %s (%d history turns)",
                session.document_name, len(messages) - 1)
    return call_llm(client, messages)
