"""
python_refnotes - Footnote-style references for document trees.

This package collects inline ``reference`` macros, numbers identical notes once,
turns each occurrence into a superscript link and renders the back-linked list
of notes where a ``references`` macro is placed. A full transformation appends
that macro at the end of the document when there is none; calling
``ReferenceCollector.collect`` directly on a tree without one drops the list.

Example:
    >>> from python_refnotes import Document
    >>> doc = Document("chapter.xml")
    >>> doc.transform()
    >>> doc.save("chapter_rendered.xml")
"""

__version__ = "0.1.0"
__all__ = [
    "Document",
    "RefnotesError",
    "ContentParseError",
    "MacroExecutionError",
    "ValidationError",
    "MacroContentParser",
    "parse_markdown",
    "ReferenceCollector",
    "ReferenceGroup",
    "ensure_collection_point",
    "group_occurrences",
    "Macro",
    "MacroDescriptor",
    "ReferenceMacro",
    "ReferencesMacro",
    "MacroTransformation",
    "MacroTransformationContext",
    "default_transformation",
    "MacroResult",
    "TransformResult",
    "ReferencesSettings",
    "load_settings",
]

# Import document class
from .document import Document
from .errors import ContentParseError, MacroExecutionError, RefnotesError, ValidationError

# Import macros
from .macros import Macro, MacroDescriptor, ReferenceMacro, ReferencesMacro

# Import content parser
from .markdown_parser import MacroContentParser, parse_markdown

# Import reference collection
from .references import (
    ReferenceCollector,
    ReferenceGroup,
    ensure_collection_point,
    group_occurrences,
)

# Import result types
from .results import MacroResult, TransformResult

# Import settings
from .settings import ReferencesSettings, load_settings

# Import transformation
from .transformation import (
    MacroTransformation,
    MacroTransformationContext,
    default_transformation,
)
