"""
Result classes for macro transformations.

This module provides result types that track the success/failure of each
macro execution during a transformation.
"""

from dataclasses import dataclass, field


@dataclass
class MacroResult:
    """Result of executing a single macro.

    Attributes:
        success: Whether the macro executed successfully
        macro_name: Name of the executed macro
        message: Human-readable message about the result
        error: Optional exception that occurred during execution
    """

    success: bool
    macro_name: str
    message: str
    error: Exception | None = None

    def __str__(self) -> str:
        """Get string representation of the result."""
        status = "✓" if self.success else "✗"
        return f"{status} {self.macro_name}: {self.message}"


@dataclass
class TransformResult:
    """Result of running a macro transformation over a document.

    Attributes:
        results: One MacroResult per attempted execution, in execution order
        unknown: Names of macros with no registered implementation
        truncated: Whether the execution limit was reached
    """

    results: list[MacroResult] = field(default_factory=list)
    unknown: list[str] = field(default_factory=list)
    truncated: bool = False

    @property
    def executed(self) -> int:
        """Number of successful executions."""
        return sum(1 for r in self.results if r.success)

    @property
    def failures(self) -> list[MacroResult]:
        return [r for r in self.results if not r.success]

    def __str__(self) -> str:
        """Get string representation of the result."""
        msg = f"Executed {self.executed} macros ({len(self.failures)} failed)"
        if self.unknown:
            msg += f", {len(self.unknown)} unknown"
        return msg
