"""
Custom exceptions for the ingestion module.

Malformed query log lines are resolved at the reader boundary and never
reach the session segmenter; these exceptions describe why a line or a
source was rejected.
"""


class IngestionError(Exception):
    """
    Base exception for all ingestion-related errors.

    All other ingestion exceptions inherit from this class,
    allowing for broad exception catching when needed.
    """

    pass


class ValidationError(IngestionError):
    """
    Raised when a record field holds an invalid value.

    Attributes:
        field: The field name that failed validation (optional)
        value: The invalid value (optional)
        message: Detailed error message
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: object | None = None,
    ):
        self.field = field
        self.value = value
        self.message = message
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with field and value context."""
        if self.field and self.value is not None:
            return f"{self.message} (field='{self.field}', value={self.value!r})"
        elif self.field:
            return f"{self.message} (field='{self.field}')"
        return self.message


class ParseError(IngestionError):
    """
    Raised when a query log line cannot be turned into a LogRecord.

    Covers undecodable bytes, a missing column, a non-integer user id and a
    timestamp that does not match the AOL format.

    Attributes:
        line_number: The line number where parsing failed (optional)
        line_content: The content of the problematic line (optional)
        message: Detailed error message
    """

    def __init__(
        self,
        message: str,
        line_number: int | None = None,
        line_content: str | None = None,
    ):
        self.line_number = line_number
        self.line_content = line_content
        self.message = message
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with line context."""
        if self.line_number is not None and self.line_content:
            # Truncate long lines for readability
            content = (
                self.line_content[:100] + "..."
                if len(self.line_content) > 100
                else self.line_content
            )
            return f"{self.message} (line {self.line_number}: {content!r})"
        elif self.line_number is not None:
            return f"{self.message} (line {self.line_number})"
        return self.message


class SourceValidationError(IngestionError):
    """
    Raised when a log source is misconfigured.

    Attributes:
        source: The path or name of the offending source
        reason: Detailed explanation of why validation failed
    """

    def __init__(
        self,
        message: str,
        source: str | None = None,
        reason: str | None = None,
    ):
        self.source = source
        self.reason = reason
        self.message = message
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with source context."""
        parts = [self.message]
        if self.source:
            parts.append(f"source='{self.source}'")
        if self.reason:
            parts.append(f"reason: {self.reason}")
        return " - ".join(parts)
