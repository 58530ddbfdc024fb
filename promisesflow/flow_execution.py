import logging
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from .awaitables import settle
from .entry import Computed
from .exceptions import PromisesFlowError
from .handle import ResultHandle, join

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Iterable
    from typing import Any

    from .entry import Entry

logger = logging.getLogger(__name__)


class FlowExecution:
    """
    State of a single Flow invocation: one result handle per task, created before
    any task is inspected, and the entries that will settle them.
    """

    def __init__(self, names: "Iterable[str]") -> None:
        self.uuid: UUID = uuid4()
        self.handles: dict[str, ResultHandle["Any"]] = {
            name: ResultHandle(name) for name in names
        }
        self.entries: dict[str, "Entry"] = {}
        self.started = False

    async def _compute(self, name: str, entry: Computed) -> "Any":
        values = await join(
            {dep: self.handles[dep] for dep in entry.dependency_names}
        )
        logger.debug("[%s] Dependencies of '%s' resolved", self.uuid, name)

        try:
            return await settle(entry.cb(values))
        except Exception as e:
            raise PromisesFlowError(name, e) from e

    async def drive(self, name: str) -> None:
        """Settle the handle of task `name`, waiting on its dependencies first."""
        entry = self.entries[name]
        handle = self.handles[name]

        try:
            if isinstance(entry, Computed):
                value = await self._compute(name, entry)
            else:
                try:
                    value = await settle(entry.value)
                except Exception as e:
                    raise PromisesFlowError(name, e) from e
        except PromisesFlowError as e:
            # failures of dependencies keep the name of the task that raised them
            logger.debug("[%s] '%s' failed in '%s'", self.uuid, name, e.task_name)
            handle.set_exception(e)
        else:
            logger.debug("[%s] '%s' settled", self.uuid, name)
            handle.set_result(value)
