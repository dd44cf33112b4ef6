from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Optional

from replacer.errors import RuleCompileError


@dataclass(frozen=True)
class CompiledRule:
    """Rule snapshot ready for the engine: compiled pattern plus template."""

    pattern: re.Pattern
    replacement: str
    title: str = ""

    def matches(self, content: str) -> bool:
        return self.pattern.search(content) is not None

    def apply(self, content: str) -> tuple[str, int]:
        """Replace every occurrence of the pattern in ``content``."""

        return self.pattern.subn(self.replacement, content)


def compile_rule(pattern: str, replacement: str, title: str = "") -> Optional[CompiledRule]:
    """Compile one rule, or return ``None`` when its pattern text is empty.

    The replacement template is checked against the compiled pattern as well,
    so a reference to a group the pattern does not define fails here instead
    of in the middle of a run.
    """

    if not pattern:
        return None
    try:
        compiled = re.compile(pattern)
    except re.error as exc:
        raise RuleCompileError(pattern, str(exc)) from exc
    try:
        # template parsing happens before any search, even on empty input
        compiled.sub(replacement, "")
    except (re.error, IndexError) as exc:
        raise RuleCompileError(pattern, f"invalid replacement {replacement!r}: {exc}") from exc
    return CompiledRule(pattern=compiled, replacement=replacement, title=title)


class Rule:
    """Editable pattern/replacement pair.

    Assigning ``pattern`` recompiles it immediately so that ``error`` reflects
    the current text before any run starts.
    """

    def __init__(self, pattern: str = "", replacement: str = "", title: str = ""):
        self.title = title
        self.replacement = replacement
        self.pattern = pattern

    @property
    def pattern(self) -> str:
        return self._pattern

    @pattern.setter
    def pattern(self, text: str) -> None:
        self._pattern = text
        self._pattern_error: Optional[RuleCompileError] = None
        if not text:
            return
        try:
            re.compile(text)
        except re.error as exc:
            self._pattern_error = RuleCompileError(text, str(exc))

    @property
    def inert(self) -> bool:
        return not self._pattern

    @property
    def error(self) -> Optional[RuleCompileError]:
        """Current compile error for this rule, if any."""

        if self._pattern_error is not None:
            return self._pattern_error
        try:
            compile_rule(self._pattern, self.replacement, self.title)
        except RuleCompileError as exc:
            return exc
        return None

    def compile(self) -> Optional[CompiledRule]:
        return compile_rule(self._pattern, self.replacement, self.title)

    def to_dict(self) -> Dict[str, str]:
        return {"title": self.title, "pattern": self._pattern, "replacement": self.replacement}

    @classmethod
    def from_dict(cls, payload: dict) -> "Rule":
        return cls(
            pattern=str(payload.get("pattern", "")),
            replacement=str(payload.get("replacement", "")),
            title=str(payload.get("title", "")),
        )

    def __repr__(self) -> str:
        return f"Rule(pattern={self._pattern!r}, replacement={self.replacement!r}, title={self.title!r})"
