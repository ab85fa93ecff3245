"""Decision trace utilities for allocator runtime events."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any


@dataclass(slots=True)
class DecisionTraceCollector:
    """Collect one placement decision per student, in processing order."""

    start_timestamp: datetime
    _sequence: int = 0
    _items: list[dict[str, Any]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.start_timestamp.tzinfo is None:
            self.start_timestamp = self.start_timestamp.replace(tzinfo=timezone.utc)

    def record(
        self,
        *,
        student_id: str,
        rank: int,
        considered_tracks: list[str],
        skipped_tracks: list[dict[str, str]],
        selected_track: str | None,
        applied_rules: list[str],
        remaining_after: int | None,
    ) -> None:
        self._sequence += 1
        timestamp = self.start_timestamp + timedelta(milliseconds=self._sequence)
        self._items.append(
            {
                "decision_id": f"d-{self._sequence:06d}",
                "timestamp": timestamp.isoformat().replace("+00:00", "Z"),
                "student_id": student_id,
                "rank": int(rank),
                "considered_tracks": list(considered_tracks),
                "skipped_tracks": [dict(item) for item in skipped_tracks],
                "selected_track": selected_track,
                "applied_rules": list(applied_rules),
                "remaining_after": remaining_after,
            }
        )

    def __len__(self) -> int:
        return len(self._items)

    def as_list(self) -> list[dict[str, Any]]:
        """Return the trace sorted by sequence, which is rank order."""
        return sorted(self._items, key=lambda item: str(item["decision_id"]))
