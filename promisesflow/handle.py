from typing import TYPE_CHECKING, Generic, TypeVar

import anyio

from .exceptions import HandleAlreadySettledError, HandlePendingError

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Callable, Mapping
    from typing import Any

T = TypeVar("T")

_PENDING = object()


class ResultHandle(Generic[T]):
    """
    A single-assignment future. It is created empty, settled exactly once with
    either a value or an exception, and can be awaited by any number of waiters.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._value: "Any" = _PENDING
        self._exception: BaseException | None = None
        self._callbacks: list["Callable[[ResultHandle[T]], None]"] = []

    def __repr__(self) -> str:
        if not self.settled:
            state = "pending"
        elif self._exception is not None:
            state = f"failed={self._exception!r}"
        else:
            state = f"value={self._value!r}"

        return f"<ResultHandle {self.name!r} {state}>"

    @property
    def settled(self) -> bool:
        return self._value is not _PENDING or self._exception is not None

    def set_result(self, value: T) -> None:
        if self.settled:
            raise HandleAlreadySettledError(self.name)

        self._value = value
        self._notify()

    def set_exception(self, exception: BaseException) -> None:
        if self.settled:
            raise HandleAlreadySettledError(self.name)

        self._exception = exception
        self._notify()

    def add_done_callback(self, fn: "Callable[[ResultHandle[T]], None]") -> None:
        """Call `fn` with this handle once it settles, or right away if it has."""
        if self.settled:
            fn(self)
        else:
            self._callbacks.append(fn)

    def exception(self) -> BaseException | None:
        if not self.settled:
            raise HandlePendingError(self.name)

        return self._exception

    def result(self) -> T:
        if not self.settled:
            raise HandlePendingError(self.name)
        elif self._exception is not None:
            raise self._exception

        return self._value

    async def wait(self) -> T:
        if not self.settled:
            event = anyio.Event()
            self.add_done_callback(lambda _: event.set())
            await event.wait()

        return self.result()

    def _notify(self) -> None:
        callbacks, self._callbacks = self._callbacks, []
        for fn in callbacks:
            fn(self)


async def join(handles: "Mapping[str, ResultHandle[Any]]") -> dict[str, "Any"]:
    """
    Wait for every handle to settle and map each name to its value. The first
    failure observed wins and is raised without waiting for the remaining handles.
    """
    if not handles:
        return {}

    done = anyio.Event()
    failures: list[BaseException] = []
    remaining = len(handles)

    def _on_settled(handle: ResultHandle["Any"]) -> None:
        nonlocal remaining
        remaining -= 1

        if (exc := handle.exception()) is not None:
            failures.append(exc)

        if failures or remaining == 0:
            done.set()

    for handle in handles.values():
        handle.add_done_callback(_on_settled)

        if failures:
            break

    await done.wait()

    if failures:
        raise failures[0]

    return {name: handle.result() for name, handle in handles.items()}
