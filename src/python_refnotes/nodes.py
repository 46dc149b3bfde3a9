"""
Document tree nodes and helpers.

The document tree is a plain lxml element tree. Each node kind is an element
tag (see constants). Macro markers are ``macro`` elements carrying the macro
name, its raw content and its placement as attributes; their children are the
nodes the macro rendered at that position.

Matchers are predicate functions over the tag and attributes, so callers
never need to subclass anything to select nodes.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from lxml import etree

from .constants import (
    ATTR_ANCHOR,
    ATTR_CLASS,
    ATTR_FORMAT,
    ATTR_MACRO_CONTENT,
    ATTR_MACRO_INLINE,
    ATTR_MACRO_NAME,
    ATTR_REFERENCE,
    REFERENCE_MACRO_NAME,
    REFERENCES_MACRO_NAME,
    TAG_FORMAT,
    TAG_LINK,
    TAG_LIST_ITEM,
    TAG_MACRO,
    TAG_NEWLINE,
    TAG_NUMBERED_LIST,
    TAG_PARAGRAPH,
    TAG_SPACE,
    TAG_WORD,
)

Predicate = Callable[[etree._Element], bool]


# =============================================================================
# Matchers
# =============================================================================


def is_macro(name: str) -> Predicate:
    """Return a predicate matching macro markers with the given name."""

    def matcher(node: etree._Element) -> bool:
        return node.tag == TAG_MACRO and node.get(ATTR_MACRO_NAME) == name

    return matcher


is_reference = is_macro(REFERENCE_MACRO_NAME)
is_references = is_macro(REFERENCES_MACRO_NAME)


def is_reference_or_references(node: etree._Element) -> bool:
    return is_reference(node) or is_references(node)


def is_inline_macro(node: etree._Element) -> bool:
    """Check whether a macro marker was placed inline."""
    return node.get(ATTR_MACRO_INLINE, "false").lower() == "true"


# =============================================================================
# Traversal
# =============================================================================


def find_all(root: etree._Element, predicate: Predicate) -> list[etree._Element]:
    """Find all descendants of root matching predicate, in document order.

    The result is a snapshot list, so callers may mutate the tree while
    iterating over it.
    """
    return [node for node in root.iterdescendants() if _is_node(node) and predicate(node)]


def find_first(root: etree._Element, predicate: Predicate) -> etree._Element | None:
    """Find the first descendant of root matching predicate, or None."""
    for node in root.iterdescendants():
        if _is_node(node) and predicate(node):
            return node
    return None


def _is_node(node: etree._Element) -> bool:
    # Comments and processing instructions have a non-string tag
    return isinstance(node.tag, str)


def get_content(node: etree._Element) -> str:
    """Get the raw textual content of a macro marker ("" when absent)."""
    return node.get(ATTR_MACRO_CONTENT, "")


def get_text(node: etree._Element) -> str:
    """Flatten the visible text below a node.

    Words contribute their text, spaces a single blank and newlines a line
    break. Macro content attributes are not included.
    """
    parts: list[str] = []
    for child in node.iter():
        if child.tag == TAG_WORD:
            parts.append(child.text or "")
        elif child.tag == TAG_SPACE:
            parts.append(" ")
        elif child.tag == TAG_NEWLINE:
            parts.append("\n")
    return "".join(parts)


# =============================================================================
# Mutation
# =============================================================================


def replace_node(node: etree._Element, replacements: Iterable[etree._Element]) -> None:
    """Replace a node in its parent with zero or more nodes.

    The node's tail text is moved onto the last replacement, or onto the
    preceding sibling (or the parent's text) when nothing replaces it, so no
    surrounding text is lost.

    Raises:
        ValueError: If the node has no parent
    """
    parent = node.getparent()
    if parent is None:
        raise ValueError("Cannot replace a node without a parent")

    replacements = list(replacements)
    tail = node.tail
    node.tail = None
    index = parent.index(node)
    parent.remove(node)

    for offset, replacement in enumerate(replacements):
        parent.insert(index + offset, replacement)

    if not tail:
        return

    if replacements:
        last = replacements[-1]
        last.tail = (last.tail or "") + tail
    elif index > 0:
        previous = parent[index - 1]
        previous.tail = (previous.tail or "") + tail
    else:
        parent.text = (parent.text or "") + tail


def remove_node(node: etree._Element) -> None:
    """Remove a node from its parent, keeping its tail text."""
    replace_node(node, [])


def set_children(node: etree._Element, children: Iterable[etree._Element]) -> None:
    """Replace all children (and leading text) of a node."""
    for child in list(node):
        node.remove(child)
    node.text = None
    node.extend(children)


# =============================================================================
# Builders
# =============================================================================


def _set_parameters(node: etree._Element, parameters: dict[str, str] | None) -> etree._Element:
    if parameters:
        for key, value in parameters.items():
            node.set(key, value)
    return node


def make_word(text: str) -> etree._Element:
    node = etree.Element(TAG_WORD)
    node.text = text
    return node


def make_space() -> etree._Element:
    return etree.Element(TAG_SPACE)


def make_newline() -> etree._Element:
    return etree.Element(TAG_NEWLINE)


def make_paragraph(children: Iterable[etree._Element] = ()) -> etree._Element:
    node = etree.Element(TAG_PARAGRAPH)
    node.extend(children)
    return node


def make_format(
    fmt: str,
    children: Iterable[etree._Element] = (),
    parameters: dict[str, str] | None = None,
) -> etree._Element:
    """Create a formatting node (bold, italic, superscript, ...)."""
    node = etree.Element(TAG_FORMAT)
    node.set(ATTR_FORMAT, fmt)
    _set_parameters(node, parameters)
    node.extend(children)
    return node


def make_link(
    children: Iterable[etree._Element] = (),
    anchor: str | None = None,
    reference: str | None = None,
) -> etree._Element:
    """Create a link node.

    Args:
        children: Link label nodes
        anchor: Anchor inside the current document (optional)
        reference: External reference such as a URL (optional)
    """
    node = etree.Element(TAG_LINK)
    if reference is not None:
        node.set(ATTR_REFERENCE, reference)
    if anchor is not None:
        node.set(ATTR_ANCHOR, anchor)
    node.extend(children)
    return node


def make_list_item(
    children: Iterable[etree._Element] = (), css_class: str | None = None
) -> etree._Element:
    node = etree.Element(TAG_LIST_ITEM)
    if css_class:
        node.set(ATTR_CLASS, css_class)
    node.extend(children)
    return node


def make_numbered_list(
    items: Iterable[etree._Element] = (), css_class: str | None = None
) -> etree._Element:
    node = etree.Element(TAG_NUMBERED_LIST)
    if css_class:
        node.set(ATTR_CLASS, css_class)
    node.extend(items)
    return node


def make_macro(
    name: str,
    content: str | None = None,
    inline: bool = False,
    parameters: dict[str, str] | None = None,
) -> etree._Element:
    """Create an unexecuted macro marker.

    Args:
        name: Macro name, e.g. "reference"
        content: Raw macro content (omitted when None)
        inline: Whether the macro is placed inline
        parameters: Extra macro parameters stored as attributes
    """
    node = etree.Element(TAG_MACRO)
    node.set(ATTR_MACRO_NAME, name)
    if content is not None:
        node.set(ATTR_MACRO_CONTENT, content)
    node.set(ATTR_MACRO_INLINE, "true" if inline else "false")
    return _set_parameters(node, parameters)
