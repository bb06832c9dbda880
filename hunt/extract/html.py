"""
HTML content cleaning for posting pages and email bodies.
"""

from __future__ import annotations

from typing import List

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PreformattedString, Tag

from hunt.rules import (
    BLOCK_TAGS,
    BULLET,
    END_MARKERS,
    JS_SIGNATURES,
    JS_TEXT_MIN_LEN,
    LIST_TAGS,
    NOISE_MAX_LEN,
    NOISE_PHRASES,
    SKIP_TAGS,
)


def _direct_text(element: Tag) -> str:
    """Text of the element's own string children, excluding descendants."""
    return "".join(
        str(s) for s in element.find_all(string=True, recursive=False)
        if not isinstance(s, PreformattedString)
    )


def _is_script_payload(element: Tag) -> bool:
    """Inlined page-state JSON or bundler output rendered as text."""
    text = _direct_text(element)
    if len(text) <= JS_TEXT_MIN_LEN:
        return False
    return any(sig in text for sig in JS_SIGNATURES)


def _is_ui_noise(element: Tag) -> bool:
    """Short elements carrying job-board UI chrome."""
    text = element.get_text().lower()
    if len(text) >= NOISE_MAX_LEN:
        return False
    return any(phrase in text for phrase in NOISE_PHRASES)


def _render(node, out: List[str]) -> None:
    if isinstance(node, NavigableString):
        # Comments, CDATA, doctypes and processing instructions
        if isinstance(node, PreformattedString):
            return
        text = str(node).strip()
        if text:
            out.append(text + " ")
        return

    if not isinstance(node, Tag):
        return

    name = node.name
    if name in SKIP_TAGS:
        return
    if _is_script_payload(node) or _is_ui_noise(node):
        return

    if name == "br":
        out.append("\n")
        return

    if name == "li":
        out.append(BULLET)
        _render_children(node, out)
        out.append("\n")
        return

    if name in BLOCK_TAGS:
        _render_children(node, out)
        out.append("\n")
        return

    # ul/ol and inline tags carry no markup of their own
    if name in LIST_TAGS:
        _render_children(node, out)
        return

    _render_children(node, out)


def _render_children(element: Tag, out: List[str]) -> None:
    for child in element.children:
        _render(child, out)


def truncate_at_end_marker(text: str) -> str:
    """
    Cut text at the first end-of-posting marker found.

    Markers are checked in END_MARKERS order; the first one present wins.
    """
    for marker in END_MARKERS:
        idx = text.find(marker)
        if idx != -1:
            return text[:idx].rstrip()
    return text


def clean(html: str) -> str:
    """
    Convert a posting HTML fragment to plain text.

    Block and list structure become newlines and "• " bullets, scripts and
    short UI-chrome elements are dropped, and the result is cut at the first
    recognizable end of the job content. Unparsable input degrades to
    whatever text could be recovered; no content gives "".
    """
    if not html or not html.strip():
        return ""

    soup = BeautifulSoup(html, "lxml")
    root = soup.body or soup

    out: List[str] = []
    _render_children(root, out)

    lines = [line.strip() for line in "".join(out).split("\n")]
    text = "\n".join(line for line in lines if line)

    return truncate_at_end_marker(text)
