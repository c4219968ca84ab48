"""
Run Domain Models.

Sub-jobs are the per-node execution records of a run, as reported by the
remote service. Only the fields needed to annotate the display tree are kept.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


@dataclass
class SubJob:
    """
    Execution record of a single node within a run.

    A task group fans out into `children`, one per parallel task.
    """
    name: str
    status: str = "PENDING"
    outputs_status: str = ""
    finished: bool = False
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    task_group: bool = False
    task_index: int = 0
    id: Optional[str] = None
    children: List["SubJob"] = field(default_factory=list)

    def duration(self, now: datetime) -> timedelta:
        """Elapsed time, rounded to whole seconds; zero before start."""
        if self.started_at is None:
            return timedelta()
        end = self.finished_at if self.finished and self.finished_at is not None else now
        return timedelta(seconds=round((end - self.started_at).total_seconds()))

    def task_status_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for child in self.children:
            status = child.status.upper()
            counts[status] = counts.get(status, 0) + 1
        return counts

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SubJob":
        return cls(
            id=data.get("id"),
            name=data.get("name", ""),
            status=data.get("status", "PENDING"),
            outputs_status=data.get("outputs_status", ""),
            finished=bool(data.get("finished", False)),
            started_at=_parse_datetime(data.get("started_at")),
            finished_at=_parse_datetime(data.get("finished_at")),
            task_group=bool(data.get("task_group", False)),
            task_index=int(data.get("task_index", 0) or 0),
            children=[cls.from_dict(c) for c in data.get("children", []) or []],
        )


__all__ = ["SubJob"]
