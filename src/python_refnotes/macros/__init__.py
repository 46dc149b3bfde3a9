"""Macros implementing footnote-style references."""

from .base import Macro, MacroDescriptor
from .reference import ReferenceMacro, ReferenceMacroParameters
from .references import ReferencesMacro

__all__ = [
    "Macro",
    "MacroDescriptor",
    "ReferenceMacro",
    "ReferenceMacroParameters",
    "ReferencesMacro",
]
