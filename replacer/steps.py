"""Steps, pipelines and their compiled run-time snapshots."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional

from replacer.errors import RuleCompileError
from replacer.logs import get_logger
from replacer.rules import CompiledRule, Rule

logger = get_logger(__name__)


class VirtualSort(Enum):
    """Rule ordering used during a run. Reserved: only ``NONE`` is applied."""

    NONE = "none"
    CHAR_LENGTH = "char_length"
    CHAR_LENGTH_REV = "char_length_rev"


@dataclass
class Step:
    title: str = ""
    enabled: bool = True
    rules: List[Rule] = field(default_factory=list)
    # reserved: every substitution restarts from the first rule
    restart_on_match: bool = True
    virtual_sort: VirtualSort = VirtualSort.NONE

    def add_rule(self, pattern: str = "", replacement: str = "", title: str = "") -> Rule:
        rule = Rule(pattern=pattern, replacement=replacement, title=title)
        self.rules.append(rule)
        return rule

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "enabled": self.enabled,
            "restart_on_match": self.restart_on_match,
            "virtual_sort": self.virtual_sort.value,
            "rules": [rule.to_dict() for rule in self.rules],
        }

    @classmethod
    def from_dict(cls, payload: dict) -> "Step":
        return cls(
            title=str(payload.get("title", "")),
            enabled=bool(payload.get("enabled", True)),
            rules=[Rule.from_dict(entry) for entry in payload.get("rules", [])],
            restart_on_match=bool(payload.get("restart_on_match", True)),
            virtual_sort=VirtualSort(payload.get("virtual_sort", VirtualSort.NONE.value)),
        )


@dataclass(frozen=True)
class CompiledStep:
    index: int
    title: str
    rules: tuple[CompiledRule, ...]


@dataclass(frozen=True)
class CompiledPipeline:
    """Immutable pipeline snapshot consumed by one replacement run."""

    steps: tuple[CompiledStep, ...] = ()

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self):
        return iter(self.steps)


class Pipeline:
    """Ordered collection of steps, compiled once per run."""

    def __init__(self, steps: Optional[Iterable[Step]] = None):
        self.steps: List[Step] = list(steps) if steps is not None else []

    def add_step(self, title: str = "", enabled: bool = True) -> Step:
        step = Step(title=title, enabled=enabled)
        self.steps.append(step)
        return step

    def errors(self) -> List[RuleCompileError]:
        """Compile errors of every enabled rule, tagged with their position."""

        found: List[RuleCompileError] = []
        for step_index, step in enumerate(self.steps):
            if not step.enabled:
                continue
            for rule_index, rule in enumerate(step.rules):
                error = rule.error
                if error is not None:
                    found.append(error.located(step_index, rule_index))
        return found

    def compile(self) -> CompiledPipeline:
        """Snapshot enabled steps into a ``CompiledPipeline``.

        Inert rules are dropped. The first rule that does not compile raises
        ``RuleCompileError`` naming its step and rule index.
        """

        compiled_steps: List[CompiledStep] = []
        for step_index, step in enumerate(self.steps):
            if not step.enabled:
                continue
            compiled_rules: List[CompiledRule] = []
            for rule_index, rule in enumerate(step.rules):
                try:
                    compiled = rule.compile()
                except RuleCompileError as exc:
                    raise exc.located(step_index, rule_index) from exc
                if compiled is None:
                    continue
                compiled_rules.append(compiled)
            compiled_steps.append(
                CompiledStep(index=step_index, title=step.title, rules=tuple(compiled_rules))
            )

        logger.debug(
            "compiled %d of %d steps (%d rules)",
            len(compiled_steps),
            len(self.steps),
            sum(len(step.rules) for step in compiled_steps),
        )
        return CompiledPipeline(steps=tuple(compiled_steps))

    def to_dict(self) -> dict:
        return {"steps": [step.to_dict() for step in self.steps]}

    @classmethod
    def from_dict(cls, payload: dict) -> "Pipeline":
        try:
            steps = payload["steps"]
        except KeyError as exc:
            raise ValueError("pipeline payload missing 'steps'") from exc
        if not isinstance(steps, list):
            raise ValueError("pipeline 'steps' must be a list")
        return cls(Step.from_dict(entry) for entry in steps)


def pipeline_from_rules(*steps: Iterable[tuple[str, str]]) -> Pipeline:
    """Build a pipeline with one enabled step per sequence of ``(pattern, replacement)``."""

    pipeline = Pipeline()
    for rules in steps:
        step = pipeline.add_step()
        for pattern, replacement in rules:
            step.add_rule(pattern, replacement)
    return pipeline
