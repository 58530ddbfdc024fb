import logging
from typing import TYPE_CHECKING

import anyio

from .exceptions import FlowAlreadyStartedError
from .handle import join

if TYPE_CHECKING:  # pragma: no cover
    from typing import Any

    from anyio.abc import TaskGroup

    from .flow import Flow
    from .flow_execution import FlowExecution

logger = logging.getLogger(__name__)


class LocalExecutor:
    """
    An Executor for running Flows in the current event loop.

    Optionally accepts a task group into which the Tasks will be dispatched. In that
    case the result (or first failure) is returned as soon as it is known, and tasks
    still running keep running in that group. If one is not provided, a new task
    group is created and Flow execution blocks until every task has settled.
    """

    def __init__(self, task_group: "TaskGroup | None" = None) -> None:
        self.task_group = task_group

    def _dispatch(self, tg: "TaskGroup", execution: "FlowExecution") -> None:
        for name in execution.entries:
            tg.start_soon(execution.drive, name, name=f"{execution.uuid}:{name}")

    async def start(self, flow: "Flow") -> dict[str, "Any"]:
        """Run every task of a resolved Flow and collect their values."""
        execution = flow.execution

        if execution.started:
            raise FlowAlreadyStartedError()

        execution.started = True
        logger.debug(
            "[%s] Starting Flow with %d tasks", execution.uuid, len(execution.entries)
        )

        if self.task_group:
            self._dispatch(self.task_group, execution)
        else:
            async with anyio.create_task_group() as tg:
                self._dispatch(tg, execution)

        return await join(execution.handles)
