from __future__ import annotations

"""LangGraph state for the iterative executor.

``_LoopState`` is the mutable state passed between the graph nodes of one
run. The task and context travel inside the state so that a single compiled
graph can serve every concurrent run of an executor.
"""

from typing import Literal, NotRequired, Optional, Required, TypedDict

from ..schemas.domain import BackendResponse, Output, Task
from .context import Context

Route = Literal["tools", "final", "continue"]


class _LoopState(TypedDict):
    """Mutable LangGraph state for a single iterative run.

    Required keys:

    - ``task`` / ``context``: the run being executed.
    - ``iteration``: number of backend calls issued so far.

    Optional keys:

    - ``response``: the latest backend reply.
    - ``route``: decision of the ``parse_response`` node.
    - ``structured``: validated structured answer of a final reply.
    - ``chunk``: intermediate output emitted by ``parse_response``.
    - ``output``: terminal output set by ``finish``.
    - ``cancelled``: set when a reply arrived after the consumer stopped.
    """

    task: Required[Task]
    context: Required[Context]
    iteration: Required[int]
    response: NotRequired[Optional[BackendResponse]]
    route: NotRequired[Route]
    structured: NotRequired[object]
    chunk: NotRequired[Optional[Output]]
    output: NotRequired[Optional[Output]]
    cancelled: NotRequired[bool]
