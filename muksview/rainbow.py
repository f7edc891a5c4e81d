"""Markdown rendering where every visible character gets its own colour marker."""

from __future__ import annotations

import html
import secrets

import regex
from markdown_it import MarkdownIt

_ESCAPES = {
    ord("&"): "&amp;",
    ord("<"): "&lt;",
    ord(">"): "&gt;",
    ord('"'): "&quot;",
}

_GRAPHEME = regex.compile(r"\X")


def random_hex(n: int) -> str:
    """Return n random bytes as lower-case hex."""
    return secrets.token_hex(n)


def escape_html(text: str) -> str:
    """Escape the characters that are special in HTML text and attributes."""
    return text.translate(_ESCAPES)


def escape_link(text: str) -> str:
    """Unescape then re-escape text, so existing entities are not doubled."""
    return escape_html(html.unescape(text))


def _wrap_graphemes(escaped: str, color_id: str) -> str:
    parts = []
    for grapheme in _GRAPHEME.findall(escaped):
        if len(grapheme) == 1 and grapheme.isspace():
            parts.append(grapheme)
        else:
            parts.append(f'<font color="{color_id}">{grapheme}</font>')
    return "".join(parts)


def rainbow_text(text: str, color_id: str) -> str:
    """Escape text and wrap each non-space grapheme in a font tag with color_id."""
    return _wrap_graphemes(escape_html(text), color_id)


def _parent_is_link(tokens, idx: int) -> bool:
    stack: list[str] = []
    for token in tokens[:idx]:
        if token.nesting == 1:
            stack.append(token.type)
        elif token.nesting == -1 and stack:
            stack.pop()
    return bool(stack) and stack[-1] == "link_open"


def render_rainbow_markdown(text: str, color_id: str | None = None) -> str:
    """Render Markdown to HTML with the text wrapped in colour markers."""
    marker = color_id if color_id is not None else random_hex(16)
    md = MarkdownIt("commonmark").enable(["table", "strikethrough"])

    def render_text(self, tokens, idx, options, env):
        content = tokens[idx].content
        escaped = escape_link(content) if _parent_is_link(tokens, idx) else escape_html(content)
        return _wrap_graphemes(escaped, marker)

    md.add_render_rule("text", render_text)
    return md.render(text)