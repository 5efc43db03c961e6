"""AutoAgents.

This package contains an execution engine for LLM-driven autonomous agents:
it turns a user-supplied ``Task`` into an ``Output`` by coordinating a
language-model backend, a bounded conversational memory, a set of invocable
tools and a pluggable execution strategy.

Core subpackages
----------------

- ``autoagents.agent_core``:

  - The ``Task``/``MemoryTurn``/``Output`` data model.
  - A sliding-window ``Memory`` shared across runs.
  - A ``ToolRegistry`` with schema-validated tool invocation.
  - Two execution strategies: a single-shot ``DirectExecutor`` and a
    LangGraph-based ``IterativeExecutor`` (reasoning/tool-use loop).
  - Lifecycle hooks and the ``AgentBuilder``/``AgentHandle`` pair.

- ``autoagents.core``:

  - Settings loaded from the environment and logging configuration.

Typical workflow
----------------

1. Declare an agent (name, description, output schema, tools).
2. Bind it to a backend and a memory with ``AgentBuilder``.
3. Submit tasks with ``AgentHandle.run`` or consume ``AgentHandle.run_stream``.
"""
