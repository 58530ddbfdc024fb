import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, PrivateAttr, ValidationError

from .awaitables import is_async_value
from .exceptions import MalformedEntryError

if TYPE_CHECKING:  # pragma: no cover
    from typing import TypeAlias

    ComputedFn: TypeAlias = Callable[[dict[str, Any]], Any]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Immediate:
    """A task whose value is an awaitable or thenable with no dependencies."""

    value: Any


class Computed(BaseModel):
    """
    A task computed from the values of other tasks. Once every dependency named in
    `deps` has resolved, `cb` is called with a dict of those values.

    Without `cb`, a Computed can be used to decorate the function to call:

    ```python
    @Computed(deps=["elems"])
    def incremented(values: dict[str, list[int]]) -> list[int]:
        return [elem + 1 for elem in values["elems"]]
    ```
    """

    deps: tuple[Any, ...]
    cb: Callable[..., Any] | None = None

    _dependency_names: tuple[str, ...] = PrivateAttr(default=())

    # unknown keys are descriptive metadata, only `deps` and `cb` drive the task
    model_config = ConfigDict(extra="ignore", frozen=True)

    def model_post_init(self, __context: Any) -> None:
        if ignored := [dep for dep in self.deps if not isinstance(dep, str)]:
            logger.debug("Ignoring non-string dependencies %r", ignored)

        self._dependency_names = tuple(
            dict.fromkeys(dep for dep in self.deps if isinstance(dep, str))
        )

    def __call__(self, fn: "ComputedFn") -> "Computed":
        return self.model_copy(update={"cb": fn})

    @property
    def dependency_names(self) -> tuple[str, ...]:
        """Declared dependencies that name a task, in declaration order."""
        return self._dependency_names


Entry = Immediate | Computed


def as_entry(name: str, value: Any) -> Entry:
    """Decide which kind of task `value` describes, or fail if it is neither."""
    if isinstance(value, Immediate):
        return value
    elif isinstance(value, Computed):
        entry = value
    elif is_async_value(value):
        return Immediate(value)
    elif isinstance(value, Mapping):
        try:
            entry = Computed.model_validate(dict(value))
        except ValidationError as e:
            raise MalformedEntryError(name) from e
    else:
        raise MalformedEntryError(name)

    if entry.cb is None:
        raise MalformedEntryError(name)

    return entry
