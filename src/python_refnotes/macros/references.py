"""
The ``references`` macro.

Marks where the numbered list of references is rendered. If an author does
not place one, the ``reference`` macro appends one at the end of the document.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from lxml import etree

from ..constants import REFERENCES_MACRO_NAME
from ..references import ReferenceCollector
from ..settings import ReferencesSettings
from .base import Macro, MacroDescriptor
from .reference import ReferenceMacroParameters

if TYPE_CHECKING:
    from ..transformation import MacroTransformationContext

logger = logging.getLogger(__name__)


class ReferencesMacro(Macro):
    """Displays the references defined so far.

    The collector splices the rendered list in place of the collection point
    itself, so execute() always returns an empty list.
    """

    id = REFERENCES_MACRO_NAME
    descriptor = MacroDescriptor(
        name="Put References",
        description=(
            "Displays the references defined so far."
            " If missing, all references are displayed by default at the end of the page."
        ),
    )
    parameters_class = ReferenceMacroParameters

    def __init__(self, settings: ReferencesSettings | None = None) -> None:
        self.settings = settings or ReferencesSettings()
        self._collector = ReferenceCollector(self.settings)

    @property
    def priority(self) -> int:
        return self.settings.default_priority

    def execute(
        self,
        parameters: Any,
        content: str | None,
        context: MacroTransformationContext,
    ) -> list[etree._Element]:
        groups = self._collector.collect(context.xdom, context.parser, context)
        logger.debug("references macro rendered %d group(s)", len(groups))
        return []
