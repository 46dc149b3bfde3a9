"""
Custom exception classes for python_refnotes package.

These exceptions carry enough context to produce readable messages when a
document cannot be loaded, a macro fails, or reference content cannot be
parsed.
"""


class RefnotesError(Exception):
    """Base exception for all python_refnotes errors."""

    pass


class ContentParseError(RefnotesError):
    """Raised when macro content cannot be parsed into document nodes.

    Attributes:
        content: The raw content that failed to parse
        reason: Explanation of the failure (optional)
    """

    def __init__(self, content: object, reason: str | None = None) -> None:
        self.content = content
        self.reason = reason
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format an error message including a short excerpt of the content."""
        excerpt = repr(self.content)
        if len(excerpt) > 60:
            excerpt = excerpt[:57] + "..."
        msg = f"Could not parse content {excerpt}"
        if self.reason:
            msg += f": {self.reason}"
        return msg


class MacroExecutionError(RefnotesError):
    """Raised when a macro cannot be executed at its invocation site.

    Attributes:
        macro_name: Name of the macro that failed
        reason: Explanation of the failure (optional)
    """

    def __init__(self, macro_name: str, reason: str | None = None) -> None:
        self.macro_name = macro_name
        self.reason = reason
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        msg = f"Failed to execute macro '{self.macro_name}'"
        if self.reason:
            msg += f": {self.reason}"
        return msg


class ValidationError(RefnotesError):
    """Raised when a document or settings file is invalid.

    This can occur when:
    - The document is not well-formed XML
    - The root element is not a document node
    - A settings file has an unexpected shape or unknown keys

    Attributes:
        errors: List of specific validation error messages (optional)
    """

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        self.errors = errors or []
        super().__init__(message)
