"""
Tests for ConversionAgent

Tests cover:
- Heuristic selection end to end (diff and output render modes)
- Unknown tool names become error results
- Tool-level argument errors stay confidence 1
- Caller tool_args used when the evaluator supplies none
- Evaluator failures never escape
"""

from unittest.mock import AsyncMock

import pytest

from convertext import ConversionAgent
from convertext.evaluator import BaseEvaluator, HeuristicEvaluator
from convertext.models import RenderMode, ToolArg, ToolEvaluation
from convertext.tools import ToolRegistry


class FixedEvaluator(BaseEvaluator):
    """Evaluator that always returns the same decision."""

    provider = "fixed"

    def __init__(self, evaluation: ToolEvaluation):
        self.evaluation = evaluation
        self.calls = []

    async def evaluate(self, text, task_description, example_output=None):
        self.calls.append((text, task_description, example_output))
        return self.evaluation


@pytest.fixture
def agent():
    return ConversionAgent(HeuristicEvaluator(), ToolRegistry())


class TestProcessRequest:

    async def test_capitalize_with_diff(self, agent):
        result = await agent.process_request("the quick brown fox", "Capitalize all words")

        assert result.converted_text == "The Quick Brown Fox"
        assert result.original_text == "the quick brown fox"
        assert result.tool_used == "capitalize"
        assert result.confidence == 1
        assert result.render_mode == RenderMode.DIFF
        assert result.error is None
        assert "-the quick brown fox" in result.diff
        assert "+The Quick Brown Fox" in result.diff

    async def test_csv_to_json_output_mode(self, agent):
        text = "name,age\nAlice,28\nBob,34"
        result = await agent.process_request(text, "Convert this CSV to JSON")

        assert result.tool_used == "csvToJson"
        assert result.render_mode == RenderMode.OUTPUT
        assert result.diff == ""
        assert '"name": "Alice"' in result.converted_text
        assert '"age": "34"' in result.converted_text

    async def test_unchanged_text_has_empty_diff(self, agent):
        result = await agent.process_request("HELLO", "make it uppercase")
        assert result.converted_text == "HELLO"
        assert result.diff == ""

    async def test_unknown_tool(self):
        evaluator = FixedEvaluator(ToolEvaluation("?", "notARealTool"))
        agent = ConversionAgent(evaluator, ToolRegistry())

        result = await agent.process_request("hello", "do something")

        assert result.tool_used == "error"
        assert result.confidence == 0
        assert result.converted_text == "hello"
        assert result.error == "Tool 'notARealTool' is not available."
        assert result.tool_args == []

    async def test_custom_tool_is_unknown(self):
        agent = ConversionAgent(FixedEvaluator(ToolEvaluation("none", "custom")), ToolRegistry())
        result = await agent.process_request("hello", "whatever")
        assert result.tool_used == "error"
        assert result.error == "Tool 'custom' is not available."

    async def test_evaluator_args_bound_to_params(self):
        evaluation = ToolEvaluation(
            "swap", "searchAndReplace",
            [ToolArg("search", "cat"), ToolArg("replace", "dog")],
        )
        agent = ConversionAgent(FixedEvaluator(evaluation), ToolRegistry())

        result = await agent.process_request("the cat sat", "replace cat with dog")

        assert result.converted_text == "the dog sat"
        assert result.tool_args == [ToolArg("search", "cat"), ToolArg("replace", "dog")]

    async def test_caller_tool_args_fallback(self):
        agent = ConversionAgent(FixedEvaluator(ToolEvaluation("r", "repeatText")), ToolRegistry())

        result = await agent.process_request("ab", "repeat", tool_args=["3"])

        assert result.converted_text == "ab\nab\nab"
        assert result.tool_args == [ToolArg("count", "3")]

    async def test_evaluator_args_win_over_caller_args(self):
        evaluation = ToolEvaluation("r", "repeatText", [ToolArg("count", "2")])
        agent = ConversionAgent(FixedEvaluator(evaluation), ToolRegistry())

        result = await agent.process_request("ab", "repeat", tool_args=["5"])

        assert result.converted_text == "ab\nab"

    async def test_tool_error_string_keeps_confidence(self):
        agent = ConversionAgent(FixedEvaluator(ToolEvaluation("r", "repeatText")), ToolRegistry())

        result = await agent.process_request("ab", "repeat", tool_args=["0"])

        assert result.converted_text == "Error: Repeat count must be a number between 1 and 100."
        assert result.confidence == 1
        assert result.error is None

    async def test_evaluator_exception(self):
        evaluator = AsyncMock(spec=BaseEvaluator)
        evaluator.evaluate.side_effect = RuntimeError("backend down")
        agent = ConversionAgent(evaluator, ToolRegistry())

        result = await agent.process_request("hello", "uppercase")

        assert result.tool_used == "error"
        assert result.confidence == 0
        assert result.converted_text == "hello"
        assert result.error == "backend down"

    async def test_process_with_evaluation_returns_both(self, agent):
        evaluation, result = await agent.process_with_evaluation("hello", "uppercase please")
        assert evaluation.tool == "toUppercase"
        assert result.converted_text == "HELLO"


class TestEvaluateTask:

    async def test_heuristic(self, agent):
        evaluation = await agent.evaluate_task("a@b.com", "extract emails")
        assert evaluation.tool == "extractEmails"

    async def test_failure_becomes_custom(self):
        evaluator = AsyncMock(spec=BaseEvaluator)
        evaluator.evaluate.side_effect = ValueError("bad")
        agent = ConversionAgent(evaluator, ToolRegistry())

        evaluation = await agent.evaluate_task("x", "y")

        assert evaluation.tool == "custom"
        assert evaluation.reasoning == "Error occurred: bad"
        assert evaluation.tool_args == []


class TestExecute:

    async def test_first_arg_is_text(self, agent):
        result = await agent.execute("repeatText", ["hi", "2"])
        assert result.converted_text == "hi\nhi"
        assert result.tool_args == [ToolArg("count", "2")]

    @pytest.mark.parametrize("count", ["0", "101", "abc"])
    async def test_repeat_out_of_range(self, agent, count):
        result = await agent.execute("repeatText", ["hi", count])
        assert result.converted_text == "Error: Repeat count must be a number between 1 and 100."
        assert result.error is None
        assert result.confidence == 1

    async def test_unknown_tool(self, agent):
        result = await agent.execute("nope", ["hi"])
        assert result.error == "Tool 'nope' is not available."
        assert result.tool_used == "error"

    async def test_no_args(self, agent):
        result = await agent.execute("toUppercase", [])
        assert result.converted_text == ""
        assert result.error is None

    def test_list_tool_signatures(self, agent):
        signatures = agent.list_tool_signatures()
        assert signatures["searchAndReplace"] == ["text", "search", "replace"]
        assert signatures["toUppercase"] == ["text"]

    def test_provider(self, agent):
        assert agent.provider == "heuristic"
