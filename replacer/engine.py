"""Replacement engine: the per-step fixpoint loop.

Each enabled step is rewritten until no rule matches. Every iteration checks
for cycles, cancellation and runaway growth, yields to the event loop, then
applies the highest-priority matching rule and restarts from the first rule.
"""

from __future__ import annotations

import asyncio
import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from replacer.config import DEFAULT_CONFIG, EngineConfig
from replacer.cycles import CycleDetector
from replacer.growth import exceeds_configured_growth
from replacer.logs import get_logger
from replacer.status import CancelMotive
from replacer.steps import CompiledPipeline, CompiledStep

logger = get_logger(__name__)


@dataclass(frozen=True)
class SubstitutionEvent:
    step_index: int
    rule_index: int
    rule_title: str
    pattern: str
    count: int
    before_length: int
    after_length: int

    def to_record(self) -> Dict[str, object]:
        """JSON-ready event representation for tracing."""

        return {
            "step": self.step_index,
            "rule": self.rule_index,
            "title": self.rule_title,
            "pattern": self.pattern,
            "count": self.count,
            "before_length": self.before_length,
            "after_length": self.after_length,
        }


@dataclass
class ReplacementResult:
    content: str
    motive: Optional[CancelMotive] = None
    substitutions: int = 0
    iterations: int = 0
    steps_completed: int = 0

    @property
    def done(self) -> bool:
        return self.motive is None

    def stats(self) -> Dict[str, object]:
        return {
            "motive": self.motive.value if self.motive is not None else None,
            "substitutions": self.substitutions,
            "iterations": self.iterations,
            "steps": self.steps_completed,
            "output_length": len(self.content),
        }


EventHook = Callable[[SubstitutionEvent], None]


class _Run:
    """Mutable state of one replacement run."""

    def __init__(
        self,
        original: str,
        cancel_signal: threading.Event,
        config: EngineConfig,
        event_hooks: List[EventHook],
    ):
        self.content = original
        self.original_length = len(original)
        self.cancel_signal = cancel_signal
        self.config = config
        self.event_hooks = event_hooks
        self.substitutions = 0
        self.iterations = 0
        self.steps_completed = 0

    def result(self, motive: Optional[CancelMotive] = None) -> ReplacementResult:
        return ReplacementResult(
            content=self.content,
            motive=motive,
            substitutions=self.substitutions,
            iterations=self.iterations,
            steps_completed=self.steps_completed,
        )

    def check(self, cycles: CycleDetector) -> Optional[CancelMotive]:
        if cycles.observe(self.content):
            logger.warning("Replacement cycle detected. Cancelling automatically.")
            return CancelMotive.CYCLE_DETECTED
        if self.cancel_signal.is_set():
            logger.info("Replacement cancelled.")
            return CancelMotive.MANUALLY_CANCELLED
        if exceeds_configured_growth(len(self.content), self.original_length, self.config):
            logger.warning(
                "Text grew from %d to %d characters. Cancelling automatically.",
                self.original_length,
                len(self.content),
            )
            return CancelMotive.HIGH_GROWTH
        return None

    def substitute(self, step: CompiledStep) -> bool:
        """Apply the first matching rule of ``step`` to the whole content."""

        for rule_index, rule in enumerate(step.rules):
            if not rule.matches(self.content):
                continue
            before_length = len(self.content)
            self.content, count = rule.apply(self.content)
            self.substitutions += 1
            event = SubstitutionEvent(
                step_index=step.index,
                rule_index=rule_index,
                rule_title=rule.title,
                pattern=rule.pattern.pattern,
                count=count,
                before_length=before_length,
                after_length=len(self.content),
            )
            for hook in self.event_hooks:
                hook(event)
            return True
        return False


async def replace_text(
    original: str,
    pipeline: CompiledPipeline,
    cancel_signal: threading.Event,
    *,
    config: Optional[EngineConfig] = None,
    event_hooks: Optional[List[EventHook]] = None,
) -> ReplacementResult:
    """Run ``original`` through every step of ``pipeline``.

    Returns a finished result, or a cancelled one carrying the motive and the
    content as of the last completed iteration.
    """

    run = _Run(original, cancel_signal, config or DEFAULT_CONFIG, list(event_hooks or []))

    for step in pipeline:
        cycles = CycleDetector()
        while True:
            motive = run.check(cycles)
            if motive is not None:
                return run.result(motive)

            await asyncio.sleep(run.config.yield_interval)

            run.iterations += 1
            if not run.substitute(step):
                break

        run.steps_completed += 1
        logger.debug("step %d reached a fixpoint (%d iterations so far)", step.index, run.iterations)

    return run.result()
