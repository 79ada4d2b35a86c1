"""
Search session model and its persisted record shape.

A search session is a bounded run of one user's queries treated as a
single search task. Persisted sessions use the shape
``{"userId", "start", "end", "queries"}`` with ISO 8601 timestamps.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from ..ingestion.base import LogRecord
from ..ingestion.exceptions import ValidationError

SESSION_FIELDS = ("userId", "start", "end", "queries")


@dataclass
class SearchSession:
    """
    A time-gap session of one user's queries.

    Queries are kept in arrival order (reformulation analysis depends on
    sequence) and may repeat.
    """

    user_id: int
    start: datetime
    end: datetime
    queries: list[str] = field(default_factory=list)

    @classmethod
    def from_record(cls, record: LogRecord) -> "SearchSession":
        """Open a session seeded by a single record."""
        return cls(
            user_id=record.user_id,
            start=record.timestamp,
            end=record.timestamp,
            queries=[record.query],
        )

    def add_query(self, query: str, timestamp: datetime) -> None:
        """Append a query; ``end`` only ever moves forward."""
        self.queries.append(query)
        if timestamp > self.end:
            self.end = timestamp

    @property
    def duration(self) -> timedelta:
        """Elapsed time between the first and the latest query."""
        return self.end - self.start

    @property
    def query_count(self) -> int:
        return len(self.queries)

    def to_dict(self) -> dict:
        """Convert to the persisted session record."""
        return {
            "userId": self.user_id,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "queries": list(self.queries),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SearchSession":
        """
        Create a session from a persisted record.

        Raises:
            ValidationError: If a field is missing or holds an invalid value
        """
        for field_name in SESSION_FIELDS:
            if field_name not in data:
                raise ValidationError(
                    f"Missing required field: {field_name}",
                    field=field_name,
                )

        try:
            start = _parse_timestamp(data["start"])
            end = _parse_timestamp(data["end"])
        except (TypeError, ValueError) as e:
            raise ValidationError(
                f"Invalid session timestamp: {e}",
                field="start/end",
            ) from e

        try:
            user_id = int(data["userId"])
        except (TypeError, ValueError) as e:
            raise ValidationError(
                "Invalid user id",
                field="userId",
                value=data["userId"],
            ) from e

        queries = data["queries"]
        if not isinstance(queries, list):
            raise ValidationError(
                "queries must be a list",
                field="queries",
                value=queries,
            )

        return cls(
            user_id=user_id,
            start=start,
            end=end,
            queries=[str(q) for q in queries],
        )


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))
