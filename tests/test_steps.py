import pytest

from replacer.errors import RuleCompileError
from replacer.steps import Pipeline, Step, VirtualSort, pipeline_from_rules


def test_compile_skips_disabled_steps_and_inert_rules():
    pipeline = Pipeline()
    first = pipeline.add_step("first")
    first.add_rule("", "ignored")
    first.add_rule("cat", "dog")
    disabled = pipeline.add_step("off", enabled=False)
    disabled.add_rule("(", "broken but disabled")
    pipeline.add_step("empty")

    compiled = pipeline.compile()

    assert [step.index for step in compiled] == [0, 2]
    assert len(compiled.steps[0].rules) == 1
    assert compiled.steps[1].rules == ()


def test_compile_fails_fast_naming_the_offending_rule():
    pipeline = pipeline_from_rules([("a", "b")], [("ok", ""), ("(x", "y")])

    with pytest.raises(RuleCompileError) as info:
        pipeline.compile()

    assert info.value.pattern == "(x"
    assert info.value.step_index == 1
    assert info.value.rule_index == 1
    assert [error.pattern for error in pipeline.errors()] == ["(x"]


def test_compiled_pipeline_is_a_snapshot():
    pipeline = pipeline_from_rules([("cat", "dog")])
    compiled = pipeline.compile()

    pipeline.steps[0].rules[0].pattern = "bird"
    pipeline.steps[0].add_rule("dog", "wolf")
    pipeline.add_step()

    assert len(compiled) == 1
    assert [rule.pattern.pattern for rule in compiled.steps[0].rules] == ["cat"]


def test_pipeline_from_dict_reads_reserved_fields():
    pipeline = Pipeline.from_dict(
        {
            "steps": [
                {
                    "title": "tidy",
                    "virtual_sort": "char_length_rev",
                    "rules": [{"pattern": " +", "replacement": " "}],
                }
            ]
        }
    )

    step = pipeline.steps[0]
    assert step.title == "tidy"
    assert step.enabled is True
    assert step.restart_on_match is True
    assert step.virtual_sort is VirtualSort.CHAR_LENGTH_REV
    assert Pipeline.from_dict(pipeline.to_dict()).to_dict() == pipeline.to_dict()


def test_pipeline_from_dict_requires_steps():
    with pytest.raises(ValueError, match="missing 'steps'"):
        Pipeline.from_dict({})


def test_step_defaults():
    step = Step()
    assert step.enabled
    assert step.rules == []
    assert step.virtual_sort is VirtualSort.NONE
