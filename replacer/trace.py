"""JSONL tracing of replacement runs.

A trace holds one ``substitution`` record per rule application followed by a
single ``result`` record carrying the terminal status of the run.
"""

from __future__ import annotations

import io
import json
from typing import Dict, Optional

from replacer.engine import ReplacementResult, SubstitutionEvent


class JSONLTracer:
    """Event hook writing a run's substitutions and outcome to a text sink."""

    def __init__(self, sink: io.TextIOBase, project: Optional[int] = None):
        self.sink = sink
        self.project = project
        self.substitutions = 0

    def __call__(self, event: SubstitutionEvent) -> None:
        self.substitutions += 1
        self._write({"type": "substitution", "seq": self.substitutions, **event.to_record()})

    def write_result(self, result: ReplacementResult) -> None:
        """Close the trace with the run's status and statistics."""

        status = "done" if result.done else "cancelled"
        self._write({"type": "result", "status": status, **result.stats()})

    def _write(self, record: Dict[str, object]) -> None:
        if self.project is not None:
            record = {"project": self.project, **record}
        self.sink.write(json.dumps(record))
        self.sink.write("\n")
        self.sink.flush()
