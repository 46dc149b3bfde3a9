"""
Base classes for macros.

A macro is invoked by the transformation at the position of a ``macro``
marker. It receives its parameters, its raw content and the transformation
context, and returns the nodes to place under the marker.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from lxml import etree

from ..constants import DEFAULT_CATEGORY_CONTENT, DEFAULT_PRIORITY

if TYPE_CHECKING:
    from ..transformation import MacroTransformationContext


@dataclass(frozen=True)
class MacroDescriptor:
    """Describes a macro to users and tooling.

    Attributes:
        name: Human-readable macro name
        description: What the macro does
        content_description: What the macro content holds (None if the macro
            takes no content)
        default_category: Category the macro is listed under
    """

    name: str
    description: str
    content_description: str | None = None
    default_category: str = DEFAULT_CATEGORY_CONTENT


class Macro(ABC):
    """Base class for all macros.

    Subclasses set ``id`` (the name used in ``macro`` markers) and
    ``descriptor`` and implement execute().
    """

    id: str
    descriptor: MacroDescriptor
    parameters_class: type | None = None

    @property
    def priority(self) -> int:
        """Execution priority; lower values run earlier."""
        return DEFAULT_PRIORITY

    @property
    def supports_inline_mode(self) -> bool:
        return False

    @abstractmethod
    def execute(
        self,
        parameters: Any,
        content: str | None,
        context: MacroTransformationContext,
    ) -> list[etree._Element]:
        """Execute the macro.

        Args:
            parameters: Macro parameters object
            content: Raw macro content, or None if the marker has none
            context: Transformation context (document root, parser, settings)

        Returns:
            Nodes to place under the macro marker

        Raises:
            MacroExecutionError: If the macro cannot run at this site
        """
