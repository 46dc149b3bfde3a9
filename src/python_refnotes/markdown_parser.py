"""
Markdown parser for macro content.

This module provides a customized markdown parser that converts markdown-formatted
macro content into document tree nodes. The parser supports:

- *italic* or _italic_ -> italic format
- **bold** or __bold__ -> bold format
- ++underline++ -> underlined format (custom extension)
- ~~strikethrough~~ -> strikedout format
- `code` -> monospace format
- [text](url) -> link

The output is a list of lxml elements (words, spaces, newlines, formats and
links) that can be spliced directly into a document tree.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from re import Match
from typing import TYPE_CHECKING, Any

from lxml import etree

from .constants import (
    FORMAT_BOLD,
    FORMAT_ITALIC,
    FORMAT_MONOSPACE,
    FORMAT_STRIKEDOUT,
    FORMAT_UNDERLINED,
)
from .errors import ContentParseError
from .nodes import make_format, make_link, make_newline, make_paragraph, make_space, make_word

if TYPE_CHECKING:
    from mistune.core import InlineState
    from mistune.inline_parser import InlineParser as MistuneInlineParser
    from mistune.markdown import Markdown

logger = logging.getLogger(__name__)

# Underline pattern: ++text++ (similar to strikethrough pattern)
_UNDERLINE_END = re.compile(r"(?:[^\s+])\+\+(?!\+)")

_WHITESPACE = re.compile(r"(\s+)")

_FORMAT_TOKENS = {
    "emphasis": FORMAT_ITALIC,
    "strong": FORMAT_BOLD,
    "strikethrough": FORMAT_STRIKEDOUT,
    "underline": FORMAT_UNDERLINED,
}


def _parse_underline(inline: MistuneInlineParser, m: Match[str], state: InlineState) -> int | None:
    """Parse ++underline++ syntax."""
    pos = m.end()
    m1 = _UNDERLINE_END.search(state.src, pos)
    if not m1:
        return None
    end_pos = m1.end()
    text = state.src[pos : end_pos - 2]
    new_state = state.copy()
    new_state.src = text
    children = inline.render(new_state)
    state.append_token({"type": "underline", "children": children})
    return end_pos


def _underline_plugin(md: Markdown) -> None:
    """Register the ++underline++ syntax with mistune."""
    md.inline.register(
        "underline",
        r"\+\+(?=[^\s+])",
        _parse_underline,
        before="link",
    )


def text_to_nodes(text: str) -> list[etree._Element]:
    """Split plain text into word and space nodes.

    Each run of whitespace becomes a single space node.
    """
    nodes: list[etree._Element] = []
    for part in _WHITESPACE.split(text):
        if not part:
            continue
        if part.isspace():
            nodes.append(make_space())
        else:
            nodes.append(make_word(part))
    return nodes


class NodeRenderer:
    """Custom mistune renderer that outputs document tree nodes.

    This renderer collects one list of inline nodes per block instead of
    producing HTML output. Block structure is reduced to paragraphs; the
    caller decides whether to keep or flatten them.
    """

    NAME = "nodes"

    def __init__(self) -> None:
        self._blocks: list[list[etree._Element]] = []

    def reset(self) -> None:
        """Reset the renderer state for a new parse."""
        self._blocks = []

    def get_blocks(self) -> list[list[etree._Element]]:
        """Get the rendered blocks, skipping empty ones."""
        return [block for block in self._blocks if block]

    def _render_inline(self, children: list[dict[str, Any]]) -> list[etree._Element]:
        """Recursively render inline tokens into nodes."""
        nodes: list[etree._Element] = []
        # mistune may split plain text into several adjacent tokens
        pending_text = ""
        for token in children:
            tok_type = token["type"]

            if tok_type == "text":
                pending_text += token.get("raw", "")
                continue
            if pending_text:
                nodes.extend(text_to_nodes(pending_text))
                pending_text = ""

            if tok_type in _FORMAT_TOKENS:
                nodes.append(
                    make_format(
                        _FORMAT_TOKENS[tok_type], self._render_inline(token.get("children", []))
                    )
                )
            elif tok_type == "codespan":
                nodes.append(make_format(FORMAT_MONOSPACE, [make_word(token.get("raw", ""))]))
            elif tok_type == "softbreak":
                nodes.append(make_space())
            elif tok_type == "linebreak":
                nodes.append(make_newline())
            elif tok_type == "link":
                url = token.get("attrs", {}).get("url", "")
                label = self._render_inline(token.get("children", []))
                nodes.append(make_link(label or text_to_nodes(url), reference=url))
            elif tok_type == "image":
                # Images are reduced to their alt text
                nodes.extend(self._render_inline(token.get("children", [])))
            elif tok_type == "inline_html":
                nodes.extend(text_to_nodes(token.get("raw", "")))
            elif "children" in token:
                nodes.extend(self._render_inline(token["children"]))
            elif "raw" in token:
                nodes.extend(text_to_nodes(token["raw"]))
        if pending_text:
            nodes.extend(text_to_nodes(pending_text))
        return nodes

    def _render_blocks(self, tokens: list[dict[str, Any]]) -> None:
        for token in tokens:
            tok_type = token["type"]

            if tok_type == "blank_line":
                continue
            if tok_type in ("paragraph", "heading", "block_text"):
                self._blocks.append(self._render_inline(token.get("children", [])))
            elif tok_type == "block_code":
                code = make_word(token.get("raw", "").rstrip("\n"))
                self._blocks.append([make_format(FORMAT_MONOSPACE, [code])])
            elif "children" in token:
                # Lists, quotes and other containers
                self._render_blocks(token["children"])
            elif "raw" in token:
                self._blocks.append(text_to_nodes(token["raw"]))

    def __call__(self, tokens: list[dict[str, Any]], state: Any) -> str:
        """Render a list of tokens."""
        self._render_blocks(list(tokens))
        return ""


@dataclass
class MacroContentParser:
    """Parser for macro content to document tree nodes.

    This parser uses mistune for robust markdown parsing but outputs lxml
    elements instead of HTML. It is the content-parsing collaborator handed
    to macros through the transformation context.

    Supported syntax:
        - *italic* or _italic_ -> italic
        - **bold** or __bold__ -> bold
        - ++underline++ -> underlined
        - ~~strikethrough~~ -> strikedout
        - `code` -> monospace
        - [text](url) -> link
    """

    _md: Any = field(init=False, repr=False)
    _renderer: NodeRenderer = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Initialize the mistune-based parser."""
        import mistune

        self._renderer = NodeRenderer()
        self._md = mistune.create_markdown(
            renderer=self._renderer,  # type: ignore[arg-type]
            plugins=["strikethrough", _underline_plugin],
        )

    def parse(
        self,
        content: str,
        context: Any = None,
        inline: bool = True,
        trim_leading: bool = False,
    ) -> list[etree._Element]:
        """Parse markdown content into document nodes.

        Args:
            content: Markdown-formatted content
            context: Transformation context of the calling macro (unused by
                this parser, accepted for interface compatibility)
            inline: If True, return inline nodes with paragraphs flattened
                and separated by newlines; otherwise return paragraph nodes
            trim_leading: If True, drop leading whitespace of the content

        Returns:
            List of lxml elements

        Raises:
            ContentParseError: If the content is not a string or mistune fails
        """
        if not isinstance(content, str):
            raise ContentParseError(content, "content must be a string")

        if trim_leading:
            content = content.lstrip()
        if not content:
            return []

        # Preserve leading/trailing whitespace that mistune would strip
        leading_ws = content[: len(content) - len(content.lstrip())]
        trailing_ws = content[len(content.rstrip()) :] if content.strip() else ""

        self._renderer.reset()
        try:
            self._md(content)
        except Exception as e:
            raise ContentParseError(content, str(e)) from e

        blocks = self._renderer.get_blocks()

        # Whitespace-only content: keep it as a single space
        if not blocks:
            return [make_space()]

        if leading_ws:
            blocks[0].insert(0, make_space())
        if trailing_ws:
            blocks[-1].append(make_space())

        logger.debug("Parsed %d block(s) from macro content", len(blocks))

        if not inline:
            return [make_paragraph(block) for block in blocks]

        nodes: list[etree._Element] = []
        for index, block in enumerate(blocks):
            if index:
                nodes.append(make_newline())
            nodes.extend(block)
        return nodes


def parse_markdown(content: str, inline: bool = True) -> list[etree._Element]:
    """Convenience function to parse markdown content.

    This function creates a new parser instance each call for thread safety.

    Args:
        content: Markdown-formatted content
        inline: Whether to return inline nodes (see MacroContentParser.parse)

    Returns:
        List of lxml elements

    Example:
        >>> nodes = parse_markdown("This is **bold**")
        >>> [node.tag for node in nodes]
        ['word', 'space', 'word', 'space', 'format']
    """
    parser = MacroContentParser()
    return parser.parse(content, inline=inline)
