"""Unit tests for the engine's value types."""

import pytest
from pydantic import ValidationError

from autoagents.agent_core.errors import BackendError
from autoagents.agent_core.schemas.domain import (
    BackendResponse,
    ExecutorConfig,
    MemoryTurn,
    Output,
    Task,
    ToolCall,
    ToolChoice,
    ToolChoiceMode,
    TurnRole,
)


class TestTask:
    def test_new_assigns_unique_ids(self):
        first = Task.new("hello", source="cli")
        second = Task.new("hello")

        assert first.id != second.id
        assert first.prompt == "hello"
        assert first.metadata == {"source": "cli"}
        assert second.metadata == {}

    def test_is_frozen_and_strict(self):
        task = Task.new("hello")
        with pytest.raises(ValidationError):
            task.prompt = "other"
        with pytest.raises(ValidationError):
            Task(prompt="x", unexpected=True)


class TestMemoryTurn:
    def test_role_constructors(self):
        assert MemoryTurn.user("q").role is TurnRole.user
        assert MemoryTurn.assistant("a").role is TurnRole.assistant
        turn = MemoryTurn.tool({"x": 1}, tool_name="calc", tool_call_id="c1")
        assert (turn.role, turn.tool_name, turn.tool_call_id) == (TurnRole.tool, "calc", "c1")
        assert turn.sequence == -1

    @pytest.mark.parametrize(
        "content,expected",
        [(None, ""), ("plain", "plain"), ({"total": 3}, '{"total": 3}'), ([1, "ü"], '[1, "ü"]')],
    )
    def test_text_rendering(self, content, expected):
        assert MemoryTurn.user(content).text() == expected

    def test_created_at_is_timezone_aware(self):
        assert MemoryTurn.user("x").created_at.tzinfo is not None


class TestToolChoice:
    def test_constructors(self):
        assert ToolChoice.auto().mode is ToolChoiceMode.auto
        assert ToolChoice.none().mode is ToolChoiceMode.none
        forced = ToolChoice.forced("calc")
        assert (forced.mode, forced.name) == (ToolChoiceMode.forced, "calc")

    def test_forced_requires_name(self):
        with pytest.raises(ValidationError):
            ToolChoice(mode=ToolChoiceMode.forced)

    def test_only_forced_may_name_a_tool(self):
        with pytest.raises(ValidationError):
            ToolChoice(mode=ToolChoiceMode.auto, name="calc")


class TestExecutorConfig:
    def test_defaults(self):
        config = ExecutorConfig()
        assert config.max_iterations == 10
        assert config.tool_choice == ToolChoice.auto()
        assert config.require_structured_output is False
        assert config.system_prompt is None

    def test_default_max_iterations_comes_from_settings(self, monkeypatch):
        monkeypatch.setenv("AUTOAGENTS_DEFAULT_MAX_ITERATIONS", "4")
        assert ExecutorConfig().max_iterations == 4

    def test_out_of_range_iterations_are_accepted_until_build(self):
        assert ExecutorConfig(max_iterations=0).max_iterations == 0


class TestBackendResponseAndOutput:
    def test_has_tool_calls(self):
        assert not BackendResponse(text="x").has_tool_calls
        assert BackendResponse(tool_calls=(ToolCall(name="calc"),), done=False).has_tool_calls

    def test_tool_call_ids_are_generated(self):
        assert ToolCall(name="a").id != ToolCall(name="a").id

    def test_output_defaults(self):
        output = Output(response="ok")
        assert output.done and output.iteration == 0
        assert not output.failed and output.error_kind is None

    def test_output_carries_error_kind(self):
        output = Output(error=BackendError("scripted", RuntimeError("down")))
        assert output.failed
        assert output.error_kind == "execution.backend"
        assert "error" not in output.model_dump()

    def test_output_error_kind_falls_back_to_class_name(self):
        assert Output(error=KeyError("x")).error_kind == "KeyError"
