"""Allowlist sanitizer for the clinician-authored incidents field.

The incidents editor produces a small amount of inline markup (bold, lists,
three pen colours). Everything else is removed before the text is embedded
into the printable document:

- ``<script>``/``<style>`` blocks and HTML comments are dropped with their
  content.
- Tag tokens whose name is not in ``ALLOWED_TAGS`` are dropped; their text
  content is kept.
- Allowed tags are re-emitted from scratch. No attribute string from the
  input is ever copied; the only attributes produced are a ``color`` on
  ``<font>`` or a ``style="color:…;"`` on ``<span>``, and only for one of the
  ``ALLOWED_COLORS``.
- ``<`` and ``>`` characters outside a recognised tag token are escaped, so
  a malformed token cannot reopen markup downstream.

The output is idempotent: sanitizing it again returns it unchanged.
"""

from __future__ import annotations

import re
from typing import Any

from markupsafe import Markup

ALLOWED_TAGS = frozenset(
    {"b", "strong", "i", "em", "u", "br", "ul", "ol", "li", "p", "div", "span", "font"}
)
ALLOWED_COLORS = frozenset({"#000000", "#b91c1c", "#1d4ed8"})

_BLOCK_PATTERNS = (
    # Unterminated blocks run to the end of the input.
    re.compile(r"<\s*script\b[^>]*>.*?(?:<\s*/\s*script\s*>|\Z)", re.IGNORECASE | re.DOTALL),
    re.compile(r"<\s*style\b[^>]*>.*?(?:<\s*/\s*style\s*>|\Z)", re.IGNORECASE | re.DOTALL),
    re.compile(r"<!--.*?(?:-->|\Z)", re.DOTALL),
)

_TAG_RE = re.compile(r"<(/?)([a-zA-Z][a-zA-Z0-9]*)(?=[\s/>])([^<>]*)>")

_ATTR_VALUE = r"""\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'>]+))"""
_COLOR_ATTR_RE = re.compile(r"(?<![\w-])color" + _ATTR_VALUE, re.IGNORECASE)
_STYLE_ATTR_RE = re.compile(r"(?<![\w-])style" + _ATTR_VALUE, re.IGNORECASE)
_STYLE_COLOR_RE = re.compile(r"(?:^|;)\s*color\s*:\s*([^;]*)", re.IGNORECASE)

_ANY_TAG_RE = re.compile(r"<[^>]*>")
_NBSP_RE = re.compile(r"&nbsp;", re.IGNORECASE)


def _attr_value(pattern: re.Pattern[str], attrs: str) -> str:
    match = pattern.search(attrs)
    if not match:
        return ""
    value = next((group for group in match.groups() if group is not None), "")
    return value.strip().lower()


def _allowed_color(value: str) -> str | None:
    return value if value in ALLOWED_COLORS else None


def _rewrite_tag(closing: bool, name: str, attrs: str) -> str:
    tag = name.lower()
    if tag not in ALLOWED_TAGS:
        return ""
    if tag == "br":
        return "<br/>"
    if closing:
        return f"</{tag}>"
    if tag == "font":
        color = _allowed_color(_attr_value(_COLOR_ATTR_RE, attrs))
        return f'<font color="{color}">' if color else "<font>"
    if tag == "span":
        declaration = _STYLE_COLOR_RE.search(_attr_value(_STYLE_ATTR_RE, attrs))
        color = _allowed_color(declaration.group(1).strip()) if declaration else None
        return f'<span style="color:{color};">' if color else "<span>"
    return f"<{tag}>"


def _escape_text(text: str) -> str:
    return text.replace("<", "&lt;").replace(">", "&gt;")


def _strip_blocks(text: str) -> str:
    for pattern in _BLOCK_PATTERNS:
        text = pattern.sub("", text)
    return text


def sanitize_rich_text(value: Any) -> Markup:
    """Reduce ``value`` to allowlisted markup that is safe to embed verbatim."""
    if not isinstance(value, str):
        return Markup("")
    text = value.strip()
    if not text:
        return Markup("")

    text = _strip_blocks(text)

    parts: list[str] = []
    cursor = 0
    for match in _TAG_RE.finditer(text):
        parts.append(_escape_text(text[cursor : match.start()]))
        closing, name, attrs = match.groups()
        parts.append(_rewrite_tag(bool(closing), name, attrs))
        cursor = match.end()
    parts.append(_escape_text(text[cursor:]))

    return Markup("".join(parts).strip())


def is_rich_text_empty(markup: str) -> bool:
    """True when ``markup`` has no visible text once tags and ``&nbsp;`` are removed."""
    text = _ANY_TAG_RE.sub("", markup or "")
    return not _NBSP_RE.sub(" ", text).strip()


__all__ = ["ALLOWED_TAGS", "ALLOWED_COLORS", "sanitize_rich_text", "is_rich_text_empty"]
