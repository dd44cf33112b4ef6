import asyncio
import threading

from replacer.config import EngineConfig
from replacer.engine import replace_text
from replacer.status import CancelMotive
from replacer.steps import pipeline_from_rules

FAST = EngineConfig(yield_interval=0)


def _run(text, *steps, config=FAST, hooks=None, signal=None):
    compiled = pipeline_from_rules(*steps).compile()
    return asyncio.run(
        replace_text(text, compiled, signal or threading.Event(), config=config, event_hooks=hooks)
    )


def test_single_rule_replaces_all_occurrences():
    result = _run("a cat sat", [("cat", "dog")])

    assert result.done
    assert result.content == "a dog sat"
    assert result.substitutions == 1
    assert result.steps_completed == 1


def test_rerunning_on_own_output_is_a_no_op():
    steps = ([("cat", "dog"), (r"\s{2,}", " ")], [("dog", "hound")])
    first = _run("cat  and   cat", *steps)
    second = _run(first.content, *steps)

    assert first.content == "hound and hound"
    assert second.content == first.content
    assert second.substitutions == 0


def test_higher_priority_rule_is_rechecked_after_every_substitution():
    events = []
    result = _run("aaxbb", [("ab", ""), ("x", "")], hooks=[events.append])

    assert result.done
    assert result.content == ""
    # "x" only fires once nothing matches "ab"; "ab" is then applied to exhaustion
    assert [event.rule_index for event in events] == [1, 0, 0]
    assert [event.after_length for event in events] == [4, 2, 0]


def test_steps_run_in_pipeline_order():
    result = _run("a", [("a", "b")], [("b", "c")], [("a", "z")])

    assert result.content == "c"
    assert result.steps_completed == 3


def test_oscillating_rules_are_detected_as_a_cycle():
    result = _run("a", [("a", "b"), ("b", "a")])

    assert result.motive is CancelMotive.CYCLE_DETECTED
    assert result.content == "b"
    assert result.iterations <= 4


def test_rule_that_leaves_content_unchanged_is_a_cycle():
    result = _run("abc", [("b", "b")])

    assert result.motive is CancelMotive.CYCLE_DETECTED
    assert result.content == "abc"


def test_cycle_tracking_is_scoped_to_each_step():
    # both steps pass through "b"; only repeats within one step count
    result = _run("a", [("a", "b")], [("b", "c")], [("c", "b")])

    assert result.done
    assert result.content == "b"


def test_doubling_input_aborts_for_high_growth():
    result = _run("x" * 2000, [("(.+)", r"\1\1")])

    assert result.motive is CancelMotive.HIGH_GROWTH
    assert len(result.content) == 16000


def test_growth_below_the_absolute_floor_is_allowed():
    result = _run("abcdefghij", [(r"^(\w{10})$", r"\1\1\1\1\1")])

    assert result.done
    assert len(result.content) == 50


def test_character_doubling_is_cancelled_for_growth():
    result = _run("x" * 1200, [("x", "xx")])

    assert result.motive is CancelMotive.HIGH_GROWTH
    assert len(result.content) == 9600


def test_cancellation_returns_content_of_last_completed_iteration():
    signal = threading.Event()
    events = []

    def cancel_after_first(event):
        events.append(event)
        signal.set()

    result = _run("x", [("x", "xy")], hooks=[cancel_after_first], signal=signal)

    assert result.motive is CancelMotive.MANUALLY_CANCELLED
    assert result.content == "xy"
    assert len(events) == 1


def test_cancel_signal_set_before_start_returns_input():
    signal = threading.Event()
    signal.set()

    result = _run("cat", [("cat", "dog")], signal=signal)

    assert result.motive is CancelMotive.MANUALLY_CANCELLED
    assert result.content == "cat"


def test_empty_pattern_rules_have_no_effect():
    result = _run("a cat sat", [("", "zzz"), ("cat", "dog"), ("", "")])

    assert result.content == "a dog sat"


def test_empty_pipeline_returns_input_unchanged():
    result = _run("unchanged")

    assert result.done
    assert result.content == "unchanged"
    assert result.iterations == 0


def test_engine_yields_to_other_tasks():
    async def scenario():
        ticks = []

        async def ticker():
            for _ in range(3):
                ticks.append(len(ticks))
                await asyncio.sleep(0)

        compiled = pipeline_from_rules([("a", "b"), ("b", "c"), ("c", "d")]).compile()
        engine = asyncio.ensure_future(replace_text("a", compiled, threading.Event(), config=FAST))
        await asyncio.gather(engine, ticker())
        return engine.result(), ticks

    result, ticks = asyncio.run(scenario())

    assert result.content == "d"
    assert ticks == [0, 1, 2]
