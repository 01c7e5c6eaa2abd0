from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

# Columns that may be grouped or averaged, per table.
GROUPABLE = {
    "users": frozenset({"role", "status", "department"}),
    "tasks": frozenset({"status", "priority", "category"}),
    "machines": frozenset({"status", "department"}),
}
AVERAGEABLE = {
    "tasks": frozenset({"progress"}),
    "machines": frozenset({"efficiency"}),
}


class AnalyticsRepository(Protocol):
    """Read-only aggregate queries over users, tasks and machines."""

    def count(self, table: str, *, column: Optional[str] = None, value: Any = None) -> int:
        """Count rows, optionally only those where ``column == value``."""
        raise NotImplementedError

    def grouped_counts(self, table: str, column: str) -> Sequence[tuple[Any, int]]:
        raise NotImplementedError

    def average(self, table: str, column: str) -> Optional[float]:
        """Average of a numeric column, None for an empty table."""
        raise NotImplementedError

    def task_counts_by_assignee(self) -> Sequence[tuple[str, int]]:
        """(assignee name, task count) for tasks whose assignee still exists."""
        raise NotImplementedError

    def maintenance_counts(self) -> Sequence[tuple[str, int]]:
        """(machine name, number of maintenance records) for every machine."""
        raise NotImplementedError
