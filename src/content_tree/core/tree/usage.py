"""Per-build counter of how often each physical record appears in a tree."""

from collections import Counter


class UsageRegistry:
    """Visit counts keyed by ``(table, uid)``.

    One registry belongs to one top-level tree build and is shared by
    reference through the whole recursion.
    """

    def __init__(self) -> None:
        self._counts: Counter[tuple[str, int]] = Counter()

    def increment(self, table: str, uid: int) -> int:
        """Record one more visit and return the new count."""
        key = (table, uid)
        self._counts[key] += 1
        return self._counts[key]

    def count(self, table: str, uid: int) -> int:
        return self._counts[(table, uid)]

    def total(self) -> int:
        return sum(self._counts.values())

    def as_report(self) -> dict[str, dict[int, int]]:
        """Return counts grouped by table, in first-visit order."""
        report: dict[str, dict[int, int]] = {}
        for (table, uid), count in self._counts.items():
            report.setdefault(table, {})[uid] = count
        return report

    def __len__(self) -> int:
        return len(self._counts)
