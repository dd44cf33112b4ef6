from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Iterable

from replacer.config import DEFAULT_CONFIG, EngineConfig
from replacer.controller import RunController
from replacer.logs import setup_base_logger
from replacer.steps import Pipeline
from replacer.trace import JSONLTracer


def _read_text(path: str) -> str:
    """Load text from a file path or stdin.

    Passing ``-`` reads from stdin to support piping text into the CLI.
    """

    if path == "-":
        return sys.stdin.read()

    target = Path(path)
    if not target.exists():
        raise FileNotFoundError(path)
    return target.read_text(encoding="utf-8")


def _load_pipeline(path: str) -> Pipeline:
    return Pipeline.from_dict(json.loads(_read_text(path)))


def _resolve_config(args: argparse.Namespace) -> EngineConfig:
    config = DEFAULT_CONFIG
    if args.growth_factor is not None:
        config = replace(config, growth_factor=args.growth_factor)
    if args.growth_floor is not None:
        config = replace(config, growth_floor=args.growth_floor)
    if args.yield_interval is not None:
        config = replace(config, yield_interval=args.yield_interval)
    return config


def run_cli(argv: Iterable[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Apply a pipeline of regex replacement steps to text.")
    parser.add_argument("pipeline", help="Path to the pipeline JSON file (- for stdin)")
    parser.add_argument("--input", default="-", help="Input text file (default: stdin)")
    parser.add_argument("--output", help="Write the resulting text to this file instead of the summary")
    parser.add_argument("--trace-jsonl", dest="trace_jsonl", help="Write substitution events to a JSONL file")
    parser.add_argument(
        "--growth-factor",
        dest="growth_factor",
        type=int,
        help="Abort once output exceeds this multiple of the input length",
    )
    parser.add_argument(
        "--growth-floor",
        dest="growth_floor",
        type=int,
        help="Never abort for growth below this many characters",
    )
    parser.add_argument(
        "--yield-interval",
        dest="yield_interval",
        type=float,
        help="Seconds to yield between iterations",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Compile the pipeline without reading input or running replacements",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log engine progress to stderr")
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON lines")

    args = parser.parse_args(list(argv) if argv is not None else None)
    setup_base_logger(
        json_logs=args.json_logs,
        level=logging.DEBUG if args.verbose else logging.WARNING,
    )

    sink = None

    try:
        if args.pipeline == "-" and args.input == "-":
            raise ValueError("pipeline and input cannot both be read from stdin")
        pipeline = _load_pipeline(args.pipeline)
        config = _resolve_config(args)

        if args.dry_run:
            compiled = pipeline.compile()
            summary = {
                "dry_run": True,
                "steps": len(compiled),
                "rules": sum(len(step.rules) for step in compiled),
            }
            print(json.dumps(summary, indent=2))
            return 0

        controller = RunController(pipeline, config=config)
        tracer = None
        if args.trace_jsonl:
            sink = open(args.trace_jsonl, "w", encoding="utf-8")
            tracer = JSONLTracer(sink, project=0)
            controller.event_hooks.append(tracer)
        controller.set_input(0, _read_text(args.input))

        result = asyncio.run(controller.run(0))
        if tracer is not None:
            tracer.write_result(result)
        project = controller.projects[0]
        summary = {**project.output_status.to_dict(), **result.stats()}

        if args.output:
            output_path = Path(args.output)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(project.output, encoding="utf-8")
        else:
            summary["output"] = project.output

        print(json.dumps(summary, indent=2))
        return 0
    except Exception as exc:  # pragma: no cover - defensive shell entry
        print(f"replacer: {exc}", file=sys.stderr)
        return 1
    finally:
        if sink is not None:
            sink.close()


def main() -> int:  # pragma: no cover - thin wrapper
    return run_cli()


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    sys.exit(main())
