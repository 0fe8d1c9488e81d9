from __future__ import annotations

import logging
import re
from typing import Final

from .models import ExtractedDocument

logger = logging.getLogger(__name__)

_SCRIPT_BLOCK: Final[re.Pattern[str]] = re.compile(
    r"<script[^>]*>[\s\S]*?</script>", re.IGNORECASE
)
_STYLE_BLOCK: Final[re.Pattern[str]] = re.compile(
    r"<style[^>]*>[\s\S]*?</style>", re.IGNORECASE
)
_ANY_TAG: Final[re.Pattern[str]] = re.compile(r"<[^>]*>")
_WHITESPACE_RUN: Final[re.Pattern[str]] = re.compile(r"\s+")

_CODE_FAMILIES: Final[tuple[re.Pattern[str], ...]] = (
    # Block containers first, then inline ones. A <code> nested in a <pre>
    # is reported by both families.
    re.compile(r"<pre[^>]*>([\s\S]*?)</pre>", re.IGNORECASE),
    re.compile(r"<code[^>]*>([\s\S]*?)</code>", re.IGNORECASE),
)
_HEADER: Final[re.Pattern[str]] = re.compile(
    r"<h[1-6][^>]*>([\s\S]*?)</h[1-6]>", re.IGNORECASE
)

DOC_TITLE: Final[str] = "# VBA Documentation"
CODE_EXAMPLES_HEADING: Final[str] = "## Code Examples"
TRUNCATION_MARKER: Final[str] = "\n\n... (content truncated)"


def extract_text(markup: str) -> str:
    # Script/style bodies go first; stripping tags alone would leave their
    # contents behind as prose.
    text = _SCRIPT_BLOCK.sub("", markup)
    text = _STYLE_BLOCK.sub("", text)
    text = _ANY_TAG.sub(" ", text)
    return _WHITESPACE_RUN.sub(" ", text).strip()


def extract_code(markup: str) -> list[str]:
    blocks: list[str] = []
    for pattern in _CODE_FAMILIES:
        blocks.extend(m.group(1) for m in pattern.finditer(markup))
    return blocks


def extract_headers(markup: str) -> list[str]:
    """Return header inner markup (h1-h6) in document order.

    Tags nested inside a header are left in place; callers that need plain
    text must strip them.
    """

    return [m.group(1) for m in _HEADER.finditer(markup)]


def extract_document(markup: str) -> ExtractedDocument:
    return ExtractedDocument(
        text=extract_text(markup),
        headers=tuple(extract_headers(markup)),
        code_blocks=tuple(extract_code(markup)),
    )


def _render(doc: ExtractedDocument) -> str:
    parts: list[str] = []

    if doc.headers:
        parts.append(DOC_TITLE + "\n\n")
        for header in doc.headers:
            parts.append(f"## {header}\n\n")

    if doc.text:
        parts.append(doc.text.strip() + "\n\n")

    if doc.code_blocks:
        parts.append(CODE_EXAMPLES_HEADING + "\n\n")
        for idx, block in enumerate(doc.code_blocks, start=1):
            parts.append(f"### Example {idx}\n\n")
            parts.append("```vba\n" + block.strip() + "\n```\n\n")

    return "".join(parts)


def truncate_to_budget(text: str, max_tokens: int | None) -> tuple[str, bool]:
    """Cap ``text`` at ``max_tokens`` characters.

    The token budget is approximated by character count; no tokenizer is
    involved.
    """

    if not max_tokens or len(text) <= max_tokens:
        return text, False
    return text[:max_tokens] + TRUNCATION_MARKER, True


def assemble_document(markup: str, max_tokens: int | None = None) -> str:
    """Render documentation markup as Markdown-ish text.

    Falls back to returning ``markup`` unchanged if extraction fails.
    """

    try:
        doc = extract_document(markup)
        rendered, truncated = truncate_to_budget(_render(doc), max_tokens)
    except Exception as e:  # noqa: BLE001
        logger.warning("Falling back to raw markup, extraction failed: %s", e)
        return markup

    if truncated:
        logger.debug("Documentation truncated to %d characters", max_tokens)
    return rendered
