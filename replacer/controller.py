from __future__ import annotations

import asyncio
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from replacer.config import DEFAULT_CONFIG, EngineConfig
from replacer.engine import EventHook, ReplacementResult, replace_text
from replacer.errors import RuleCompileError, RunInProgressError
from replacer.logs import get_logger
from replacer.status import CancelMotive, OutputStatus
from replacer.steps import Pipeline

logger = get_logger(__name__)


@dataclass
class TextProject:
    title: str = ""
    input: str = ""
    output: str = ""
    output_status: OutputStatus = field(default_factory=OutputStatus.done)


class RunController:
    """Owns text projects and drives one replacement run per project.

    Each project gets its own cancellation flag. The engine only reads it; the
    controller sets it on ``cancel`` and clears it whenever a run starts or
    ends.
    """

    def __init__(
        self,
        pipeline: Optional[Pipeline] = None,
        config: Optional[EngineConfig] = None,
        event_hooks: Optional[List[EventHook]] = None,
    ):
        self.pipeline = pipeline if pipeline is not None else Pipeline()
        self.config = config or DEFAULT_CONFIG
        self.event_hooks: List[EventHook] = event_hooks or []
        self.projects: List[TextProject] = [TextProject()]
        self.active_project: Optional[int] = 0
        self._signals: Dict[int, threading.Event] = {}
        self._tasks: Dict[int, asyncio.Task] = {}

    # ---- projects ----
    def add_project(self, title: str = "") -> int:
        self.projects.append(TextProject(title=title))
        self.active_project = len(self.projects) - 1
        return self.active_project

    def select_project(self, index: int) -> bool:
        self._project(index)
        if index == self.active_project:
            return False
        self.active_project = index
        return True

    def rename_project(self, index: int, title: str) -> None:
        self._project(index).title = title

    def status(self, index: Optional[int] = None) -> OutputStatus:
        return self._project(self._resolve(index)).output_status

    def is_running(self, index: Optional[int] = None) -> bool:
        return self.status(index).is_in_progress

    def set_input(self, index: int, text: str) -> bool:
        project = self._project(index)
        if project.output_status.is_in_progress:
            logger.error("Input of project %d cannot change while a replacement is in progress.", index)
            return False
        project.input = text
        project.output_status = OutputStatus.outdated()
        return True

    def set_pipeline(self, pipeline: Pipeline) -> None:
        if self._tasks:
            logger.warning("Changed pipeline won't affect the replacements already in progress.")
        self.pipeline = pipeline

    # ---- runs ----
    def start(self, index: Optional[int] = None) -> asyncio.Task:
        """Start a replacement run for a project and return its task.

        Must be called from a running event loop. Raises ``RunInProgressError``
        or ``RuleCompileError`` without touching project state.
        """

        index = self._resolve(index)
        project = self._project(index)
        if project.output_status.is_in_progress:
            logger.error("Replacement already in progress for project %d.", index)
            raise RunInProgressError(index)

        loop = asyncio.get_running_loop()
        try:
            compiled = self.pipeline.compile()
        except RuleCompileError as exc:
            logger.error("The regex %s had a parse error: %s", exc.pattern, exc.reason)
            raise

        signal = self._signals.setdefault(index, threading.Event())
        signal.clear()
        project.output_status = OutputStatus.in_progress()
        logger.info(
            "Replacing project %d (%d characters, %d steps).", index, len(project.input), len(compiled)
        )

        coro = replace_text(
            project.input,
            compiled,
            signal,
            config=self.config,
            event_hooks=list(self.event_hooks),
        )
        task = loop.create_task(self._drive(index, coro))
        self._tasks[index] = task
        return task

    async def run(self, index: Optional[int] = None) -> ReplacementResult:
        return await self.start(index)

    def cancel(self, index: Optional[int] = None) -> bool:
        index = self._resolve(index)
        if not self._project(index).output_status.is_in_progress:
            logger.error("No replacement in progress for project %d.", index)
            return False
        self._signals[index].set()
        return True

    async def _drive(self, index: int, coro) -> ReplacementResult:
        try:
            result = await coro
        except asyncio.CancelledError:
            logger.info("Replacement task for project %d was cancelled.", index)
            self._reset(index, OutputStatus.outdated())
            raise
        except Exception:
            logger.exception("Replacement for project %d failed.", index)
            self._reset(index, OutputStatus.outdated())
            raise

        if result.done:
            self._finish(index, result.content)
        else:
            self._cancelled(index, result.motive, result.content)
        return result

    def _finish(self, index: int, content: str) -> None:
        project = self._project(index)
        if not project.output_status.is_in_progress:
            logger.error("Project %d has no replacement to finish.", index)
            return
        project.output = content
        self._reset(index, OutputStatus.done())
        logger.info("Replacement for project %d done.", index)

    def _cancelled(self, index: int, motive: CancelMotive, content: str) -> None:
        project = self._project(index)
        if not project.output_status.is_in_progress:
            logger.error("Project %d has no replacement to cancel.", index)
            return
        project.output = content
        self._reset(index, OutputStatus.cancelled(motive))
        logger.info("Replacement for project %d cancelled: %s.", index, motive.value)

    def _reset(self, index: int, status: OutputStatus) -> None:
        self.projects[index].output_status = status
        self._tasks.pop(index, None)
        signal = self._signals.get(index)
        if signal is not None:
            signal.clear()

    def _resolve(self, index: Optional[int]) -> int:
        if index is not None:
            return index
        if self.active_project is None:
            raise ValueError("No active project selected")
        return self.active_project

    def _project(self, index: int) -> TextProject:
        if index < 0 or index >= len(self.projects):
            raise IndexError(f"Project {index} does not exist")
        return self.projects[index]
