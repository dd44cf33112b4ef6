from replacer.config import EngineConfig  # noqa: F401
from replacer.controller import RunController, TextProject  # noqa: F401
from replacer.cycles import CycleDetector, content_checksum  # noqa: F401
from replacer.engine import ReplacementResult, SubstitutionEvent, replace_text  # noqa: F401
from replacer.errors import (  # noqa: F401
    ReplacerError,
    RuleCompileError,
    RunInProgressError,
    RunRequestError,
)
from replacer.growth import exceeds_growth  # noqa: F401
from replacer.rules import CompiledRule, Rule, compile_rule  # noqa: F401
from replacer.status import CancelMotive, OutputStatus, StatusKind  # noqa: F401
from replacer.steps import (  # noqa: F401
    CompiledPipeline,
    CompiledStep,
    Pipeline,
    Step,
    VirtualSort,
    pipeline_from_rules,
)
from replacer.trace import JSONLTracer  # noqa: F401

__version__ = "0.1.0"
