from __future__ import annotations

"""LangGraph tool-use loop.

``IterativeExecutor`` runs the reasoning loop as a LangGraph state machine
over ``_LoopState``:

- ``init`` seeds memory with the task prompt as a user turn.
- ``await_model`` sends the memory snapshot and the tools allowed by the
  tool choice to the backend. This is the only suspension point per
  iteration and the only place the iteration counter advances.
- ``parse_response`` routes the reply: tool calls go to ``invoke_tools``,
  a completed reply goes to ``finish`` once its structured value (if any)
  validates, and anything else loops back to ``await_model``.
- ``invoke_tools`` runs every requested call, in the order the model listed
  them, through the registry's invocation protocol.
- ``finish`` produces the terminal output.

Limits and failures
-------------------

The counter increments once per ``await_model`` entry. When the next call
would exceed ``max_iterations`` the node raises ``IterationLimitExceeded``
instead of calling the backend, so a run never issues more than
``max_iterations`` requests. Backend failures surface as ``BackendError`` and
schema mismatches of a required structured answer as
``StructuredOutputError``; tool failures never leave the loop.

Streaming
---------

``execute_stream`` drives the same graph with ``astream``. LangGraph only
advances to the next step when the consumer pulls, so a consumer that stops
pulling also stops the loop. A backend reply that is nevertheless in flight
when the stream closes is discarded rather than appended to memory.
"""

import logging
from contextlib import aclosing
from typing import Any, AsyncIterator, Dict, Optional

from langgraph.graph import END, StateGraph

from ..errors import ExecutionError, IterationLimitExceeded
from ..schemas.domain import ExecutorConfig, MemoryTurn, Output, Task
from .base import AgentExecutor, assistant_turn, decode_structured, output_schema_json, request_backend
from .context import Context
from .models import Route, _LoopState

logger = logging.getLogger(__name__)


class IterativeExecutor(AgentExecutor):
    """Run the model in a loop, dispatching its tool calls, until it answers."""

    iterative = True

    def __init__(self, config: Optional[ExecutorConfig] = None) -> None:
        self._config = config or ExecutorConfig()
        self._graph = self._build_graph()

    def config(self) -> ExecutorConfig:
        return self._config

    def _build_graph(self):
        """Build and compile the LangGraph state machine."""
        g: StateGraph = StateGraph(_LoopState)
        g.add_node("init", self._node_init)
        g.add_node("await_model", self._node_await_model)
        g.add_node("parse_response", self._node_parse_response)
        g.add_node("invoke_tools", self._node_invoke_tools)
        g.add_node("finish", self._node_finish)

        g.set_entry_point("init")
        g.add_edge("init", "await_model")
        g.add_conditional_edges(
            "await_model",
            self._route_after_await,
            {
                "parse": "parse_response",
                "cancelled": END,
            },
        )
        g.add_conditional_edges(
            "parse_response",
            self._route_after_parse,
            {
                "tools": "invoke_tools",
                "final": "finish",
                "continue": "await_model",
            },
        )
        g.add_edge("invoke_tools", "await_model")
        g.add_edge("finish", END)
        return g.compile()

    def _run_config(self) -> Dict[str, Any]:
        # init + three nodes per iteration + finish, with headroom so the
        # iteration limit always trips before LangGraph's recursion limit.
        return {"recursion_limit": 3 * max(self._config.max_iterations, 1) + 5}

    @staticmethod
    def _initial_state(task: Task, context: Context) -> _LoopState:
        return {"task": task, "context": context, "iteration": 0}

    async def execute(self, task: Task, context: Context) -> Output:
        state = await self._graph.ainvoke(self._initial_state(task, context), config=self._run_config())
        output = state.get("output")
        if output is None:
            raise ExecutionError(f"Run {context.run_id} ended without a final output; its scope was closed")
        return output

    async def execute_stream(self, task: Task, context: Context) -> AsyncIterator[Output]:
        updates = self._graph.astream(
            self._initial_state(task, context),
            config=self._run_config(),
            stream_mode="updates",
        )
        try:
            async with aclosing(updates):
                async for update in updates:
                    for values in update.values():
                        if not isinstance(values, dict):
                            continue
                        chunk = values.get("chunk") or values.get("output")
                        if chunk is not None:
                            yield chunk
        finally:
            context.scope.close()

    async def _node_init(self, state: _LoopState) -> Dict[str, Any]:
        """Seed memory with the task prompt."""
        context = state["context"]
        context.memory.append(MemoryTurn.user(state["task"].prompt, run_id=context.run_id))
        return {"iteration": 0}

    async def _node_await_model(self, state: _LoopState) -> Dict[str, Any]:
        """Issue the next backend call, or fail once the budget is spent."""
        context = state["context"]
        config = self._config
        iteration = state["iteration"] + 1
        if iteration > config.max_iterations:
            logger.info(f"Run {context.run_id} reached the iteration limit of {config.max_iterations}")
            raise IterationLimitExceeded(config.max_iterations)

        messages = context.memory.snapshot()
        tools = context.tools.specs(config.tool_choice)
        await context.hooks.emit("on_backend_call", context, messages)
        response = await request_backend(
            context,
            messages,
            tools=tools,
            output_schema=output_schema_json(context.output_schema),
            system_prompt=config.system_prompt,
        )
        if context.scope.closed:
            logger.debug(f"Discarding backend reply of cancelled run {context.run_id} (iteration {iteration})")
            return {"iteration": iteration, "cancelled": True}

        await context.hooks.emit("on_backend_response", context, response)
        context.memory.append(assistant_turn(response, run_id=context.run_id))
        return {"iteration": iteration, "response": response}

    @staticmethod
    def _route_after_await(state: _LoopState) -> str:
        return "cancelled" if state.get("cancelled") else "parse"

    async def _node_parse_response(self, state: _LoopState) -> Dict[str, Any]:
        """Decide where the loop goes next.

        A reply that carries visible text but is not final is also emitted as
        an intermediate chunk.
        """
        context = state["context"]
        response = state["response"]
        iteration = state["iteration"]

        route: Route
        if response.has_tool_calls:
            route = "tools"
        elif response.done:
            structured = decode_structured(
                context.output_schema,
                response,
                required=self._config.require_structured_output,
            )
            return {"route": "final", "structured": structured, "chunk": None}
        else:
            route = "continue"

        chunk = None
        if response.text:
            chunk = Output(response=response.text, done=False, iteration=iteration)
        logger.debug(f"Run {context.run_id} iteration {iteration}: {route}")
        return {"route": route, "chunk": chunk}

    @staticmethod
    def _route_after_parse(state: _LoopState) -> Route:
        return state["route"]

    async def _node_invoke_tools(self, state: _LoopState) -> Dict[str, Any]:
        """Dispatch the requested tool calls sequentially, in the model's order."""
        context = state["context"]
        response = state["response"]
        for call in response.tool_calls:
            await context.hooks.emit("on_tool_call", context, call)
            result = await context.tools.invoke(
                call.name,
                call.arguments,
                memory=context.memory,
                call_id=call.id,
                run_id=context.run_id,
            )
            await context.hooks.emit("on_tool_result", context, call, result)
        return {"chunk": None}

    async def _node_finish(self, state: _LoopState) -> Dict[str, Any]:
        """Produce the terminal output."""
        response = state["response"]
        output = Output(
            response=response.text or "",
            structured=state.get("structured"),
            done=True,
            iteration=state["iteration"],
        )
        logger.debug(f"Run {state['context'].run_id} finished after {state['iteration']} iteration(s)")
        return {"output": output}
