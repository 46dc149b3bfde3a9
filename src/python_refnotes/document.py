"""
Document class for loading, transforming and saving document trees.

Documents are stored as XML using the node vocabulary in constants:

    <document>
      <paragraph>
        <word>Hello</word>
        <macro name="reference" inline="true" content="A *source*."/>
      </paragraph>
    </document>
"""

from __future__ import annotations

import logging
from pathlib import Path

from lxml import etree

from .constants import TAG_DOCUMENT
from .errors import ValidationError
from .nodes import find_all, is_reference, is_references
from .references import ReferenceGroup, group_occurrences
from .results import TransformResult
from .settings import ReferencesSettings
from .transformation import MacroTransformation, default_transformation

logger = logging.getLogger(__name__)


class Document:
    """A document tree with reference macros.

    Example:
        >>> doc = Document("chapter.xml")
        >>> result = doc.transform()
        >>> doc.save("chapter_rendered.xml")

    Args:
        source: Path to an XML file, or the XML itself as str or bytes
    """

    def __init__(self, source: str | bytes | Path) -> None:
        self._path: Path | None = None
        self._root = self._load(source)

    def _load(self, source: str | bytes | Path) -> etree._Element:
        parser = etree.XMLParser(remove_blank_text=True)

        try:
            if isinstance(source, bytes):
                root = etree.fromstring(source, parser)
            elif isinstance(source, str) and source.lstrip().startswith("<"):
                root = etree.fromstring(source.encode("utf-8"), parser)
            else:
                path = Path(source)
                if not path.exists():
                    raise FileNotFoundError(f"Document not found: {source}")
                self._path = path
                root = etree.parse(str(path), parser).getroot()
        except etree.XMLSyntaxError as e:
            raise ValidationError(f"Document is not well-formed XML: {e}") from e

        if root.tag != TAG_DOCUMENT:
            raise ValidationError(
                f"Root element must be <{TAG_DOCUMENT}>, found <{root.tag}>",
                errors=[f"unexpected root element '{root.tag}'"],
            )

        logger.debug("Loaded document with %d top-level node(s)", len(root))
        return root

    @property
    def root(self) -> etree._Element:
        return self._root

    @property
    def occurrences(self) -> list[etree._Element]:
        """Get all reference occurrences in document order."""
        return find_all(self._root, is_reference)

    @property
    def collection_points(self) -> list[etree._Element]:
        """Get all references collection points in document order."""
        return find_all(self._root, is_references)

    def reference_groups(self) -> list[ReferenceGroup]:
        """Group the current occurrences without modifying the document."""
        return group_occurrences(self.occurrences)

    def transform(
        self,
        settings: ReferencesSettings | None = None,
        transformation: MacroTransformation | None = None,
    ) -> TransformResult:
        """Execute the macros of this document in place.

        Args:
            settings: Settings for the default transformation (optional)
            transformation: Transformation to run instead of the default one

        Returns:
            TransformResult describing each macro execution
        """
        if transformation is None:
            transformation = default_transformation(settings)
        return transformation.transform(self._root)

    def to_string(self, pretty_print: bool = True) -> str:
        """Serialize the document to an XML string."""
        return etree.tostring(self._root, encoding="unicode", pretty_print=pretty_print)

    def save(self, path: str | Path | None = None) -> None:
        """Save the document as XML.

        Args:
            path: Output path (defaults to the path the document was loaded from)

        Raises:
            ValueError: If no path is given and the document was not loaded from a file
        """
        if path is None:
            if self._path is None:
                raise ValueError("No output path given and document was not loaded from a file")
            path = self._path

        etree.ElementTree(self._root).write(
            str(path), encoding="utf-8", xml_declaration=True, pretty_print=True
        )
        logger.debug("Saved document to %s", path)
