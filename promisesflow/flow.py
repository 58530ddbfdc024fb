"""
Flow module for promisesflow.
"""

import inspect
import logging
import warnings
from typing import TYPE_CHECKING

import anyio
import sniffio

from .config import Config
from .entry import Computed, as_entry
from .exceptions import (
    CyclicFlowError,
    EmptyDependenciesError,
    MissingDependencyError,
    RecursiveDependencyError,
    UnresolvedFlowError,
)
from .executor import LocalExecutor
from .flow_execution import FlowExecution
from .topology import Topology

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Awaitable, Mapping
    from typing import Any

    from anyio.abc import TaskGroup

logger = logging.getLogger(__name__)


class Flow:
    """
    A named set of tasks. Each task is either an asynchronous value or a `Computed`
    that runs once the tasks it depends on have resolved.

    ```python
    flow = Flow(
        {
            "elems": fetch_elems(),
            "incremented": {
                "deps": ["elems"],
                "cb": lambda values: [elem + 1 for elem in values["elems"]],
            },
        }
    ).resolve()

    results = await flow.execute()
    ```
    """

    def __init__(self, tasks: "Mapping[str, Any]", **settings: "Any") -> None:
        self.tasks = tasks

        try:
            self.config = Config(**settings)
        except Exception:
            self._discard()
            raise

        self._topology: Topology | None = None
        self._execution: FlowExecution | None = None

    def resolve(self) -> "Flow":
        # every task gets a handle before any entry is inspected, so dependencies
        # may reference tasks declared later
        execution = FlowExecution(self.tasks)
        dependencies: dict[str, tuple[str, ...]] = {}

        try:
            for name, value in self.tasks.items():
                entry = as_entry(name, value)

                if isinstance(entry, Computed):
                    dependencies[name] = self._validate_dependencies(
                        name, entry, execution
                    )
                else:
                    dependencies[name] = ()

                execution.entries[name] = entry

            topology = Topology.from_dependencies(dependencies)
            self._check_cycles(topology)
        except Exception:
            self._discard()
            raise

        self._topology = topology
        self._execution = execution

        logger.debug("[%s] Resolved Flow:\n%s", execution.uuid, topology)
        return self

    @staticmethod
    def _validate_dependencies(
        name: str, entry: Computed, execution: FlowExecution
    ) -> tuple[str, ...]:
        deps = entry.dependency_names

        for dep in deps:
            if dep == name:
                raise RecursiveDependencyError(name, dep)
            elif dep not in execution.handles:
                raise MissingDependencyError(name, dep)

        if not deps:
            raise EmptyDependenciesError(name)

        return deps

    def _check_cycles(self, topology: Topology) -> None:
        if topology.acyclic:
            return

        if self.config.detect_cycles:
            raise CyclicFlowError(topology.cycles)

        warnings.warn(
            "Flow contains dependency cycles; the tasks involved will never settle.",
            stacklevel=3,
        )

    def _discard(self) -> None:
        # a Flow that fails to resolve never runs, so close coroutines it was given
        for value in self.tasks.values():
            if inspect.iscoroutine(value):
                value.close()

    @property
    def resolved(self) -> bool:
        return self._execution is not None

    @property
    def topology(self) -> Topology:
        if not self.resolved:
            raise UnresolvedFlowError()

        return self._topology

    @property
    def execution(self) -> FlowExecution:
        if not self.resolved:
            raise UnresolvedFlowError()

        return self._execution

    async def execute(self, task_group: "TaskGroup | None" = None) -> dict[str, "Any"]:
        return await LocalExecutor(task_group).start(self)


def run(
    tasks: "Mapping[str, Any]",
    *,
    task_group: "TaskGroup | None" = None,
    **settings: "Any",
) -> "Awaitable[dict[str, Any]]":
    """
    Run a set of tasks and return an awaitable of every task's value.

    The tasks are validated before this returns, so malformed or unsatisfiable
    dependencies raise here rather than from the returned awaitable.

    Tasks are never cancelled. Without `task_group`, the awaitable waits for every
    task to settle, so a failure is raised only once its slowest sibling finishes.
    With `task_group`, the first failure is raised as soon as it happens and the
    remaining tasks keep running in that group. If cycle detection is disabled and
    the Flow contains a cycle, only the `task_group` form can surface a failure,
    since the tasks in the cycle never settle.
    """
    flow = Flow(tasks, **settings).resolve()
    return flow.execute(task_group=task_group)


def run_sync(tasks: "Mapping[str, Any]", **settings: "Any") -> dict[str, "Any"]:
    """
    Run a set of tasks to completion in a new event loop, using the configured
    `backend` and `backend_options`.

    Every task settles before this returns, so a failure is raised only once the
    slowest task finishes. Use `await run(..., task_group=tg)` to fail fast.
    """
    try:
        sniffio.current_async_library()
        raise RuntimeError(
            "Calling `run_sync` within an event loop is forbidden as it starts its"
            " own event loop. Use `await run(...)` instead."
        )
    except sniffio.AsyncLibraryNotFoundError:
        flow = Flow(tasks, **settings).resolve()
        return anyio.run(
            flow.execute,
            backend=flow.config.backend,
            backend_options=flow.config.backend_options,
        )
