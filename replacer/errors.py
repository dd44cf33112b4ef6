from __future__ import annotations

from typing import Optional


class ReplacerError(Exception):
    """Base class for errors raised by the replacement pipeline."""


class RuleCompileError(ReplacerError, ValueError):
    """Raised when a rule's pattern or replacement template cannot be compiled."""

    def __init__(
        self,
        pattern: str,
        reason: str,
        *,
        step_index: Optional[int] = None,
        rule_index: Optional[int] = None,
    ):
        location = ""
        if step_index is not None and rule_index is not None:
            location = f" (step {step_index}, rule {rule_index})"
        super().__init__(f"pattern {pattern!r} failed to compile{location}: {reason}")
        self.pattern = pattern
        self.reason = reason
        self.step_index = step_index
        self.rule_index = rule_index

    def located(self, step_index: int, rule_index: int) -> "RuleCompileError":
        """Return a copy of this error tagged with its pipeline position."""

        return RuleCompileError(self.pattern, self.reason, step_index=step_index, rule_index=rule_index)


class RunRequestError(ReplacerError):
    """Raised for run requests that the controller refuses."""


class RunInProgressError(RunRequestError):
    def __init__(self, project_index: int):
        super().__init__(f"a replacement is already in progress for project {project_index}")
        self.project_index = project_index
