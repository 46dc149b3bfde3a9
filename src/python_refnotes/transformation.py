"""
Macro transformation.

Executes the ``macro`` markers of a document tree one at a time. At each step
the pending marker with the lowest (priority, document position) runs, so
macros added by earlier executions are picked up as well. Each executed
marker keeps its place in the tree and holds the returned nodes as children.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Any

from lxml import etree

from .constants import (
    ATTR_MACRO_CONTENT,
    ATTR_MACRO_INLINE,
    ATTR_MACRO_NAME,
    ATTR_MACRO_STATUS,
    STATUS_EXECUTED,
    STATUS_FAILED,
    STATUS_UNKNOWN,
    TAG_MACRO,
)
from .errors import MacroExecutionError
from .macros import Macro, ReferenceMacro, ReferencesMacro
from .markdown_parser import MacroContentParser
from .nodes import find_all, is_inline_macro, set_children
from .results import MacroResult, TransformResult
from .settings import ReferencesSettings

logger = logging.getLogger(__name__)

_RESERVED_ATTRIBUTES = {ATTR_MACRO_NAME, ATTR_MACRO_CONTENT, ATTR_MACRO_INLINE, ATTR_MACRO_STATUS}


@dataclass
class MacroTransformationContext:
    """Context handed to each macro execution.

    Attributes:
        xdom: Root of the document being transformed
        current_macro: The marker being executed
        inline: Whether the marker is placed inline
        parser: Content parser macros use to parse their content
        transformation: The running transformation
    """

    xdom: etree._Element
    current_macro: etree._Element
    inline: bool
    parser: Any
    transformation: MacroTransformation | None = None


def _is_pending(node: etree._Element) -> bool:
    return node.tag == TAG_MACRO and node.get(ATTR_MACRO_STATUS) is None


class MacroTransformation:
    """Runs registered macros over a document tree.

    Example:
        >>> transformation = default_transformation()
        >>> result = transformation.transform(document_root)
        >>> print(result)
        Executed 3 macros (0 failed)

    Args:
        macros: Macros to register (optional)
        parser: Content parser passed to macros (defaults to MacroContentParser)
        settings: Settings providing the execution limit (optional)
    """

    def __init__(
        self,
        macros: list[Macro] | None = None,
        parser: Any = None,
        settings: ReferencesSettings | None = None,
    ) -> None:
        self.settings = settings or ReferencesSettings()
        self.parser = parser if parser is not None else MacroContentParser()
        self._macros: dict[str, Macro] = {}
        for macro in macros or []:
            self.register(macro)

    def register(self, macro: Macro) -> None:
        """Register a macro under its id, replacing any previous one."""
        self._macros[macro.id] = macro

    def get_macro(self, name: str) -> Macro | None:
        return self._macros.get(name)

    @property
    def macro_names(self) -> list[str]:
        return sorted(self._macros)

    def transform(self, root: etree._Element) -> TransformResult:
        """Execute all pending macros below root.

        Args:
            root: Document root, mutated in place

        Returns:
            TransformResult describing each execution
        """
        result = TransformResult()
        # Markers present before the run always execute; only markers added
        # by macros count against max_executions
        authored = set(find_all(root, _is_pending))
        spawned = 0

        while True:
            candidates = []
            held_back = 0
            for index, node in enumerate(find_all(root, _is_pending)):
                name = node.get(ATTR_MACRO_NAME, "")
                macro = self._macros.get(name)
                if macro is None:
                    node.set(ATTR_MACRO_STATUS, STATUS_UNKNOWN)
                    result.unknown.append(name)
                    logger.warning("Unknown macro '%s'", name)
                    continue
                if node not in authored and spawned >= self.settings.max_executions:
                    held_back += 1
                    continue
                candidates.append((macro.priority, index, node, macro))

            if not candidates:
                if held_back:
                    result.truncated = True
                    logger.warning(
                        "Stopped after %d added macro executions; %d macro(s) left pending",
                        spawned,
                        held_back,
                    )
                break

            _, _, node, macro = min(candidates, key=lambda c: (c[0], c[1]))
            if node not in authored:
                spawned += 1
            result.results.append(self._execute(root, node, macro))

        logger.debug("Transformation finished: %s", result)
        return result

    def _execute(self, root: etree._Element, node: etree._Element, macro: Macro) -> MacroResult:
        inline = is_inline_macro(node)
        # Mark first so a failing macro is never picked again
        node.set(ATTR_MACRO_STATUS, STATUS_EXECUTED)

        try:
            if inline and not macro.supports_inline_mode:
                raise MacroExecutionError(macro.id, "this macro does not support inline mode")

            context = MacroTransformationContext(
                xdom=root,
                current_macro=node,
                inline=inline,
                parser=self.parser,
                transformation=self,
            )
            parameters = self._build_parameters(node, macro)
            nodes = macro.execute(parameters, node.get(ATTR_MACRO_CONTENT), context)
        except MacroExecutionError as e:
            node.set(ATTR_MACRO_STATUS, STATUS_FAILED)
            logger.warning("%s", e)
            return MacroResult(success=False, macro_name=macro.id, message=str(e), error=e)

        # The macro may have replaced or removed its own marker
        if node.getparent() is not None:
            set_children(node, nodes)

        logger.debug("Executed macro '%s' (%d node(s))", macro.id, len(nodes))
        return MacroResult(success=True, macro_name=macro.id, message=f"{len(nodes)} node(s)")

    def _build_parameters(self, node: etree._Element, macro: Macro) -> Any:
        """Build the parameters object from the marker's extra attributes."""
        raw = {k: v for k, v in node.attrib.items() if k not in _RESERVED_ATTRIBUTES}
        parameters_class = macro.parameters_class
        if parameters_class is None:
            return raw

        known = {f.name for f in dataclasses.fields(parameters_class)}
        ignored = sorted(set(raw) - known)
        if ignored:
            logger.debug("Ignoring unknown parameters for '%s': %s", macro.id, ", ".join(ignored))
        return parameters_class(**{k: v for k, v in raw.items() if k in known})


def default_transformation(
    settings: ReferencesSettings | None = None, parser: Any = None
) -> MacroTransformation:
    """Create a transformation with the reference macros registered."""
    settings = settings or ReferencesSettings()
    return MacroTransformation(
        macros=[ReferenceMacro(settings), ReferencesMacro(settings)],
        parser=parser,
        settings=settings,
    )
