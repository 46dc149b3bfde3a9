"""
Reference collection and rendering.

Two passes cooperate through the document tree:

- ensure_collection_point() guarantees a single ``references`` marker exists,
  appending one to the root when the author did not place any.
- ReferenceCollector gathers every ``reference`` occurrence, groups identical
  contents under one number, rewrites each occurrence into a superscript
  forward link and splices the numbered list of back-linked notes in place
  of the collection point.

Example:
    >>> ensure_collection_point(root)
    >>> groups = ReferenceCollector().collect(root, MacroContentParser())
    >>> [group.anchors() for group in groups]
    [['1a', '1b'], ['2^']]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

from lxml import etree

from .constants import (
    ATTR_CLASS,
    ATTR_ID,
    FORMAT_SUPERSCRIPT,
    REFERENCES_MACRO_NAME,
    SINGLE_OCCURRENCE_LABEL,
)
from .nodes import (
    find_all,
    find_first,
    get_content,
    is_reference,
    is_reference_or_references,
    is_references,
    make_format,
    make_link,
    make_list_item,
    make_macro,
    make_numbered_list,
    make_space,
    make_word,
    remove_node,
    replace_node,
    set_children,
)
from .settings import ReferencesSettings

if TYPE_CHECKING:
    from .transformation import MacroTransformationContext

logger = logging.getLogger(__name__)


class ContentParser(Protocol):
    """The content-parsing collaborator used to render note bodies.

    A failing ``parse`` may raise any exception; the collector falls back to
    the literal content.
    """

    def parse(
        self,
        content: str,
        context: Any = None,
        inline: bool = True,
        trim_leading: bool = False,
    ) -> list[etree._Element]: ...


def normalize_content(content: str | None) -> str:
    """Normalize occurrence content for grouping.

    Blank or whitespace-only content becomes a single space so a group key is
    never empty. Anything else is returned unchanged.
    """
    if content is None or not content.strip():
        return " "
    return content


def label_for(index: int, count: int) -> str:
    """Compute the label of the index-th occurrence in a group of count.

    A group with a single occurrence uses the sentinel label. Larger groups
    are labelled a, b, ..., z, aa, ab, ... in scan order.
    """
    if count == 1:
        return SINGLE_OCCURRENCE_LABEL

    letters = ""
    n = index
    while True:
        letters = chr(ord("a") + n % 26) + letters
        n = n // 26 - 1
        if n < 0:
            return letters


@dataclass
class ReferenceGroup:
    """Occurrences sharing the same normalized content.

    Attributes:
        id: 1-based number, assigned in order of first occurrence
        content: Normalized raw content shared by all occurrences
        occurrences: Occurrence markers in scan order
    """

    id: int
    content: str
    occurrences: list[etree._Element] = field(default_factory=list)

    def labels(self) -> list[str]:
        count = len(self.occurrences)
        return [label_for(index, count) for index in range(count)]

    def anchors(self) -> list[str]:
        """Get the per-occurrence anchors ("{id}{label}")."""
        return [f"{self.id}{label}" for label in self.labels()]


def group_occurrences(occurrences: list[etree._Element]) -> list[ReferenceGroup]:
    """Group occurrences by exact equality of their normalized content.

    Group ids are dense, start at 1 and follow first-occurrence order. The id
    counter is local to this call.
    """
    groups: list[ReferenceGroup] = []
    by_content: dict[str, ReferenceGroup] = {}
    next_id = 1

    for occurrence in occurrences:
        content = normalize_content(get_content(occurrence))
        group = by_content.get(content)
        if group is None:
            group = ReferenceGroup(id=next_id, content=content)
            next_id += 1
            by_content[content] = group
            groups.append(group)
        group.occurrences.append(occurrence)

    return groups


def ensure_collection_point(root: etree._Element) -> bool:
    """Make sure the tree contains a references collection point.

    If no ``references`` marker exists among the descendants of root, a
    content-free block marker is appended as the last child of root.

    Returns:
        True if a marker was inserted, False if one already existed
    """
    if find_first(root, is_references) is not None:
        return False

    root.append(make_macro(REFERENCES_MACRO_NAME))
    logger.debug("Appended references collection point to document root")
    return True


class ReferenceCollector:
    """Collects reference occurrences and renders the numbered list.

    The collector keeps no per-document state between calls, so a single
    instance can process any number of documents.

    Args:
        settings: Rendering settings (prefixes and CSS classes)
    """

    def __init__(self, settings: ReferencesSettings | None = None) -> None:
        self.settings = settings or ReferencesSettings()

    def collect(
        self,
        root: etree._Element,
        parser: ContentParser,
        context: MacroTransformationContext | None = None,
    ) -> list[ReferenceGroup]:
        """Rewrite occurrences and render the references list.

        Args:
            root: Document root, mutated in place
            parser: Content parser used to render each note body
            context: Transformation context forwarded to the parser (optional)

        Returns:
            The groups that were rendered, in id order (empty when the
            document has no occurrences)
        """
        matches = find_all(root, is_reference_or_references)

        collection_point = None
        occurrences = []
        for node in matches:
            if is_reference(node):
                occurrences.append(node)
            elif collection_point is None:
                collection_point = node
            else:
                remove_node(node)
                logger.debug("Removed superfluous references collection point")

        if not occurrences:
            return []

        groups = group_occurrences(occurrences)

        for group in groups:
            for occurrence, label in zip(group.occurrences, group.labels()):
                set_children(occurrence, [self._create_forward_link(group.id, label)])

        container = make_numbered_list(
            [self._create_list_item(group, parser, context) for group in groups],
            css_class=self.settings.list_class,
        )

        if collection_point is None:
            # Occurrences are rewritten but the list has no place to go
            logger.warning(
                "No references collection point found; dropping list of %d reference(s)",
                len(groups),
            )
        else:
            replace_node(collection_point, [container])

        logger.debug(
            "Rendered %d reference(s) from %d occurrence(s)", len(groups), len(occurrences)
        )
        return groups

    def _create_forward_link(self, group_id: int, label: str) -> etree._Element:
        anchor = f"{group_id}{label}"
        link = make_link(
            [make_word(str(group_id))], anchor=self.settings.footnote_id_prefix + anchor
        )
        return make_format(
            FORMAT_SUPERSCRIPT,
            [link],
            {
                ATTR_ID: self.settings.footnote_reference_id_prefix + anchor,
                ATTR_CLASS: self.settings.forward_link_class,
            },
        )

    def _create_back_link(self, group_id: int, label: str) -> etree._Element:
        anchor = f"{group_id}{label}"
        link = make_link(
            [make_word(f"{label} ")],
            anchor=self.settings.footnote_reference_id_prefix + anchor,
        )
        return make_format(
            FORMAT_SUPERSCRIPT,
            [link],
            {
                ATTR_ID: self.settings.footnote_id_prefix + anchor,
                ATTR_CLASS: self.settings.back_link_class,
            },
        )

    def _parse_content(
        self,
        content: str,
        parser: ContentParser,
        context: MacroTransformationContext | None,
    ) -> list[etree._Element]:
        # Any parser failure falls back to the raw content, never to the caller
        try:
            return parser.parse(content, context, True, True)
        except Exception as e:
            logger.warning("Falling back to literal reference content: %s", e)
            return [make_word(content)]

    def _create_list_item(
        self,
        group: ReferenceGroup,
        parser: ContentParser,
        context: MacroTransformationContext | None,
    ) -> etree._Element:
        children = [self._create_back_link(group.id, label) for label in group.labels()]
        children.append(make_space())
        children.extend(self._parse_content(group.content, parser, context))
        return make_list_item(children, css_class=self.settings.list_item_class)
