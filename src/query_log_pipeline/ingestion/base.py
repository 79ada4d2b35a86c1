"""
Data model for a single query log entry.

Provides the immutable LogRecord built from one tab separated line of an
AOL style query log.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from ..config.constants import AOL_FIELD_COUNT, AOL_TIMESTAMP_FORMAT
from .exceptions import ParseError


@dataclass(frozen=True)
class LogRecord:
    """
    One query log entry.

    Fields:
        user_id: Anonymous user id (AnonID)
        query: Query text, raw or cleaned depending on pipeline stage
        timestamp: Time the query was issued (QueryTime)
        rank: Rank of the clicked item, empty when there was no click
        click_url: Domain of the clicked result, empty when there was no click
    """

    user_id: int
    query: str
    timestamp: datetime
    rank: str = ""
    click_url: str = ""

    @classmethod
    def from_line(
        cls,
        line: str,
        line_number: Optional[int] = None,
    ) -> "LogRecord":
        """
        Parse one tab separated query log line.

        Args:
            line: Raw line, with or without trailing newline
            line_number: Position in the source file, used in error messages

        Returns:
            LogRecord instance

        Raises:
            ParseError: If a column is missing or the id/timestamp is invalid
        """
        # Keep empty trailing columns (queries without a click)
        tokens = line.rstrip("\r\n").split("\t")
        if len(tokens) < AOL_FIELD_COUNT:
            raise ParseError(
                f"Expected {AOL_FIELD_COUNT} tab separated fields, got {len(tokens)}",
                line_number=line_number,
                line_content=line,
            )

        try:
            user_id = int(tokens[0])
        except ValueError as e:
            raise ParseError(
                f"Invalid user id: {tokens[0]!r}",
                line_number=line_number,
                line_content=line,
            ) from e

        try:
            timestamp = datetime.strptime(tokens[2], AOL_TIMESTAMP_FORMAT)
        except ValueError as e:
            raise ParseError(
                f"Invalid timestamp: {tokens[2]!r}",
                line_number=line_number,
                line_content=line,
            ) from e

        return cls(
            user_id=user_id,
            query=tokens[1],
            timestamp=timestamp,
            rank=tokens[3],
            click_url=tokens[4],
        )

    def with_query(self, query: str) -> "LogRecord":
        """Return a copy of this record carrying a different query text."""
        return replace(self, query=query)

    def to_line(self) -> str:
        """Render the record back to the tab separated log format."""
        return "\t".join(
            [
                str(self.user_id),
                self.query,
                self.timestamp.strftime(AOL_TIMESTAMP_FORMAT),
                self.rank,
                self.click_url,
            ]
        )
