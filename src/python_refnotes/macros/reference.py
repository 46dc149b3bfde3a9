"""
The ``reference`` macro.

Placed inline wherever an author wants a footnote. Executing it only makes
sure the document has a place to render the references list; the occurrence
itself is rewritten later by the ``references`` macro.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from lxml import etree

from ..constants import REFERENCE_MACRO_NAME
from ..references import ensure_collection_point
from ..settings import ReferencesSettings
from .base import Macro, MacroDescriptor

if TYPE_CHECKING:
    from ..transformation import MacroTransformationContext


@dataclass
class ReferenceMacroParameters:
    """Parameters of the reference macros (none are declared)."""


class ReferenceMacro(Macro):
    """Generates a reference to display at the end of the page."""

    id = REFERENCE_MACRO_NAME
    descriptor = MacroDescriptor(
        name="Reference",
        description="Generates a reference to display at the end of the page.",
        content_description="the text to place in the reference",
    )
    parameters_class = ReferenceMacroParameters

    def __init__(self, settings: ReferencesSettings | None = None) -> None:
        self.settings = settings or ReferencesSettings()

    @property
    def priority(self) -> int:
        # Must run before content macros so the collection point exists
        return self.settings.ensurer_priority

    @property
    def supports_inline_mode(self) -> bool:
        return True

    def execute(
        self,
        parameters: Any,
        content: str | None,
        context: MacroTransformationContext,
    ) -> list[etree._Element]:
        ensure_collection_point(context.xdom)
        return []
