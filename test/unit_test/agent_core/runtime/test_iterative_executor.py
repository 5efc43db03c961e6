"""Unit tests for the LangGraph tool-use loop."""

from typing import Any, List

import pytest
from pydantic import BaseModel

from autoagents.agent_core.agent import BaseAgent
from autoagents.agent_core.errors import BackendError, IterationLimitExceeded, StructuredOutputError
from autoagents.agent_core.hooks import HookDispatcher
from autoagents.agent_core.memory import SlidingWindowMemory
from autoagents.agent_core.runtime import Context, IterativeExecutor
from autoagents.agent_core.schemas.domain import (
    BackendResponse,
    ExecutorConfig,
    Task,
    ToolCall,
    ToolChoice,
    TurnRole,
)
from autoagents.agent_core.tools import ToolRegistry, ToolSpec


class AddArgs(BaseModel):
    a: int
    b: int


class Answer(BaseModel):
    value: int


class _Calculator:
    def __init__(self) -> None:
        self.calls: List[AddArgs] = []

    def __call__(self, args: AddArgs) -> int:
        self.calls.append(args)
        return args.a + args.b


class _Recorder(BaseAgent):
    def __init__(self, **kwargs: Any) -> None:
        super().__init__("recorder", **kwargs)
        self.events: List[str] = []

    async def on_backend_call(self, context, messages):
        self.events.append("backend_call")

    async def on_backend_response(self, context, response):
        self.events.append("backend_response")

    async def on_tool_call(self, context, call):
        self.events.append(f"tool_call:{call.id}")

    async def on_tool_result(self, context, call, result):
        self.events.append(f"tool_result:{call.id}:{result.ok}")


def _context(backend, *, agent=None, tools=(), memory=None) -> Context:
    agent = agent or BaseAgent("loop")
    registry = ToolRegistry(tools)
    registry.freeze()
    return Context(
        run_id="run-it",
        memory=memory if memory is not None else SlidingWindowMemory(50),
        tools=registry,
        backend=backend,
        hooks=HookDispatcher(agent, run_id="run-it"),
        agent=agent,
    )


def _add_call(call_id: str, a: Any, b: Any) -> ToolCall:
    return ToolCall(id=call_id, name="add", arguments={"a": a, "b": b})


@pytest.fixture
def calculator() -> _Calculator:
    return _Calculator()


@pytest.fixture
def add_tool(calculator) -> ToolSpec:
    return ToolSpec(name="add", description="Add two integers", input_schema=AddArgs, handler=calculator)


@pytest.mark.asyncio
async def test_answer_without_tools_completes_after_one_call(scripted_backend, replies):
    memory = SlidingWindowMemory(10)
    backend = scripted_backend([replies.text("30")])

    output = await IterativeExecutor().execute(Task.new("What is 20 + 10?"), _context(backend, memory=memory))

    assert (output.response, output.done, output.iteration) == ("30", True, 1)
    assert len(backend.calls) == 1
    assert [t.role for t in memory.snapshot()] == [TurnRole.user, TurnRole.assistant]


@pytest.mark.asyncio
async def test_tool_round_trip(scripted_backend, replies, add_tool, calculator):
    memory = SlidingWindowMemory(10)
    backend = scripted_backend([replies.tools(_add_call("c1", 20, 10)), replies.text("The answer is 30")])

    output = await IterativeExecutor().execute(
        Task.new("What is 20 + 10?"), _context(backend, tools=[add_tool], memory=memory)
    )

    assert output.response == "The answer is 30"
    assert output.iteration == 2
    assert calculator.calls == [AddArgs(a=20, b=10)]
    assert backend.calls[0]["tools"] == ["add"]
    # the second request sees the tool result
    second = backend.calls[1]["messages"]
    assert [t.role for t in second] == [TurnRole.user, TurnRole.assistant, TurnRole.tool]
    assert second[-1].content == 30 and second[-1].tool_call_id == "c1"
    assert second[1].tool_calls[0].id == "c1"
    assert len(memory) == 4


@pytest.mark.asyncio
async def test_multiple_calls_run_in_model_order(scripted_backend, replies, add_tool, calculator):
    memory = SlidingWindowMemory(20)
    agent = _Recorder()
    backend = scripted_backend(
        [
            replies.tools(_add_call("c3", 3, 3), _add_call("c1", 1, 1), _add_call("c2", 2, 2)),
            replies.text("done"),
        ]
    )

    await IterativeExecutor().execute(Task.new("q"), _context(backend, agent=agent, tools=[add_tool], memory=memory))

    assert [c.a for c in calculator.calls] == [3, 1, 2]
    tool_turns = [t for t in memory.snapshot() if t.role is TurnRole.tool]
    assert [(t.tool_call_id, t.content) for t in tool_turns] == [("c3", 6), ("c1", 2), ("c2", 4)]
    assert agent.events == [
        "backend_call",
        "backend_response",
        "tool_call:c3",
        "tool_result:c3:True",
        "tool_call:c1",
        "tool_result:c1:True",
        "tool_call:c2",
        "tool_result:c2:True",
        "backend_call",
        "backend_response",
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize("max_iterations", [1, 2, 5])
async def test_iteration_limit_after_exactly_m_calls(scripted_backend, replies, add_tool, max_iterations):
    backend = scripted_backend(default=replies.tools(_add_call("c", 1, 1)))
    executor = IterativeExecutor(ExecutorConfig(max_iterations=max_iterations))

    with pytest.raises(IterationLimitExceeded) as exc:
        await executor.execute(Task.new("loop forever"), _context(backend, tools=[add_tool]))

    assert exc.value.max_iterations == max_iterations
    assert len(backend.calls) == max_iterations


@pytest.mark.asyncio
async def test_non_final_replies_without_tools_count_against_the_budget(scripted_backend):
    backend = scripted_backend(default=BackendResponse(text="thinking...", done=False))

    with pytest.raises(IterationLimitExceeded):
        await IterativeExecutor(ExecutorConfig(max_iterations=3)).execute(Task.new("q"), _context(backend))

    assert len(backend.calls) == 3


@pytest.mark.asyncio
async def test_tool_failures_are_fed_back_to_the_model(scripted_backend, replies, add_tool, calculator):
    memory = SlidingWindowMemory(20)
    backend = scripted_backend(
        [
            replies.tools(
                _add_call("bad-args", "one", 1),
                ToolCall(id="unknown", name="multiply", arguments={"a": 1, "b": 1}),
                ToolCall(id="bad-json", name="add", arguments="{a: 1"),
            ),
            replies.tools(_add_call("ok", 1, 1)),
            replies.text("2"),
        ]
    )

    output = await IterativeExecutor().execute(Task.new("q"), _context(backend, tools=[add_tool], memory=memory))

    assert output.response == "2"
    assert calculator.calls == [AddArgs(a=1, b=1)]
    tool_turns = [t for t in memory.snapshot() if t.role is TurnRole.tool]
    assert [(t.tool_call_id, t.is_error) for t in tool_turns] == [
        ("bad-args", True),
        ("unknown", True),
        ("bad-json", True),
        ("ok", False),
    ]
    assert "Unknown tool: 'multiply'" in tool_turns[1].content


@pytest.mark.asyncio
async def test_tool_body_failure_does_not_end_the_run(scripted_backend, replies):
    def explode(args):
        raise RuntimeError("disk full")

    tool = ToolSpec(name="save", input_schema={"type": "object"}, handler=explode)
    backend = scripted_backend([replies.tools(ToolCall(id="s1", name="save", arguments={})), replies.text("sorry")])

    output = await IterativeExecutor().execute(Task.new("q"), _context(backend, tools=[tool]))

    assert output.response == "sorry"
    last_request = backend.calls[-1]["messages"]
    assert last_request[-1].is_error and "disk full" in last_request[-1].content


@pytest.mark.asyncio
async def test_backend_failure_ends_the_run(scripted_backend, replies, add_tool):
    backend = scripted_backend([replies.tools(_add_call("c1", 1, 2)), TimeoutError("slow")])

    with pytest.raises(BackendError) as exc:
        await IterativeExecutor().execute(Task.new("q"), _context(backend, tools=[add_tool]))

    assert isinstance(exc.value.__cause__, TimeoutError)
    assert len(backend.calls) == 2


class TestToolChoice:
    @pytest.mark.asyncio
    async def test_none_offers_no_tools(self, scripted_backend, replies, add_tool):
        backend = scripted_backend([replies.text("ok")])
        executor = IterativeExecutor(ExecutorConfig(tool_choice=ToolChoice.none()))

        await executor.execute(Task.new("q"), _context(backend, tools=[add_tool]))

        assert backend.calls[0]["tools"] == []

    @pytest.mark.asyncio
    async def test_forced_offers_only_the_named_tool(self, scripted_backend, replies, add_tool):
        other = ToolSpec(name="noop", input_schema={"type": "object"}, handler=lambda args: None)
        backend = scripted_backend([replies.text("ok")])
        executor = IterativeExecutor(ExecutorConfig(tool_choice=ToolChoice.forced("add")))

        await executor.execute(Task.new("q"), _context(backend, tools=[other, add_tool]))

        assert backend.calls[0]["tools"] == ["add"]


class TestStructuredOutput:
    @pytest.mark.asyncio
    async def test_final_answer_is_validated(self, scripted_backend, replies):
        agent = BaseAgent("calc", output_schema=Answer)
        backend = scripted_backend([replies.text('{"value": 30}')])
        executor = IterativeExecutor(ExecutorConfig(require_structured_output=True))

        output = await executor.execute(Task.new("q"), _context(backend, agent=agent))

        assert output.structured == Answer(value=30)

    @pytest.mark.asyncio
    async def test_non_conforming_final_answer_fails_the_run(self, scripted_backend, replies):
        agent = BaseAgent("calc", output_schema=Answer)
        backend = scripted_backend([replies.text("thirty")])
        executor = IterativeExecutor(ExecutorConfig(require_structured_output=True))

        with pytest.raises(StructuredOutputError) as exc:
            await executor.execute(Task.new("q"), _context(backend, agent=agent))

        assert exc.value.raw == "thirty"
        assert len(backend.calls) == 1


@pytest.mark.asyncio
async def test_executor_is_reusable_across_runs(scripted_backend, replies):
    executor = IterativeExecutor()
    memory = SlidingWindowMemory(10)
    backend = scripted_backend([replies.text("first"), replies.text("second")])

    first = await executor.execute(Task.new("a"), _context(backend, memory=memory))
    second = await executor.execute(Task.new("b"), _context(backend, memory=memory))

    assert (first.response, second.response) == ("first", "second")
    assert [t.text() for t in memory.snapshot()] == ["a", "first", "b", "second"]
