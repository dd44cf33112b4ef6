from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional


class CancelMotive(Enum):
    MANUALLY_CANCELLED = "manually_cancelled"
    CYCLE_DETECTED = "cycle_detected"
    HIGH_GROWTH = "high_growth"


class StatusKind(Enum):
    OUTDATED = "outdated"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class OutputStatus:
    """State of a project's output relative to its input.

    A ``CANCELLED`` status always carries the motive; every other kind carries
    none.
    """

    kind: StatusKind
    motive: Optional[CancelMotive] = None

    def __post_init__(self) -> None:
        if (self.kind is StatusKind.CANCELLED) != (self.motive is not None):
            raise ValueError(f"status {self.kind.value} cannot carry motive {self.motive}")

    @classmethod
    def outdated(cls) -> "OutputStatus":
        return cls(StatusKind.OUTDATED)

    @classmethod
    def in_progress(cls) -> "OutputStatus":
        return cls(StatusKind.IN_PROGRESS)

    @classmethod
    def done(cls) -> "OutputStatus":
        return cls(StatusKind.DONE)

    @classmethod
    def cancelled(cls, motive: CancelMotive) -> "OutputStatus":
        return cls(StatusKind.CANCELLED, motive)

    @property
    def is_in_progress(self) -> bool:
        return self.kind is StatusKind.IN_PROGRESS

    def to_dict(self) -> Dict[str, object]:
        return {
            "status": self.kind.value,
            "motive": self.motive.value if self.motive is not None else None,
        }

    def __str__(self) -> str:
        if self.motive is not None:
            return f"{self.kind.value}({self.motive.value})"
        return self.kind.value
