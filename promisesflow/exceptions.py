import traceback
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from typing import Any


class PromisesFlowBaseError(Exception):
    def __init__(self, *args: "Any", **kwargs: "Any") -> None:
        super().__init__(*args, **kwargs)


##
## FLOW RESOLUTION
##


class UnresolvedFlowError(PromisesFlowBaseError):
    def __init__(self) -> None:
        super().__init__("Flows must be resolved before they can be used.")


class FlowResolutionError(PromisesFlowBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message)


class MalformedEntryError(FlowResolutionError):
    def __init__(self, task_name: str) -> None:
        self.task_name = task_name
        super().__init__(
            f"Task '{task_name}' must be an awaitable, a thenable, or declare"
            " `deps` and a callable `cb`."
        )


class RecursiveDependencyError(FlowResolutionError):
    def __init__(self, task_name: str, dependency: str) -> None:
        self.task_name = task_name
        self.dependency = dependency
        super().__init__(
            f"Task '{task_name}' cannot depend on itself ('{dependency}')."
        )


class MissingDependencyError(FlowResolutionError):
    def __init__(self, task_name: str, dependency: str) -> None:
        self.task_name = task_name
        self.dependency = dependency
        super().__init__(
            f"Task '{task_name}' depends on '{dependency}', which is not defined in"
            " the Flow."
        )


class EmptyDependenciesError(FlowResolutionError):
    def __init__(self, task_name: str) -> None:
        self.task_name = task_name
        super().__init__(
            f"Task '{task_name}' must declare at least one named dependency."
        )


class CyclicFlowError(FlowResolutionError):
    def __init__(self, cycles: list[tuple[str, ...]]) -> None:
        self.cycles = cycles
        cycle_str = "\n  ".join(" -> ".join(cycle) for cycle in cycles)
        super().__init__(
            "Flows cannot contain dependency cycles. Offending cycles:\n"
            f"  {cycle_str}"
        )


##
## FLOW EXECUTION
##


class FlowExecutionError(PromisesFlowBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message)


class FlowAlreadyStartedError(FlowExecutionError):
    def __init__(self) -> None:
        super().__init__(
            "Flows can only be executed once. Create a new Flow instead."
        )


class PromisesFlowError(FlowExecutionError):
    """
    A failure raised by a single task, tagged with the name of that task.

    The message is the original error's message. The original error is chained as
    `__cause__`, and `trace` holds its formatted traceback prefixed with `name`.
    """

    def __init__(self, task_name: str, error: BaseException) -> None:
        super().__init__(str(error))
        self.task_name = task_name
        self.name = f"PromisesFlowError({task_name})"
        self.error = error
        self.__cause__ = error

        if error.__traceback__ is not None:
            self.trace = f"{self.name}: " + "".join(traceback.format_exception(error))
        else:
            self.trace = f"{self.name}: {type(error).__name__}: {error}"


class RejectedValueError(FlowExecutionError):
    def __init__(self, reason: "Any") -> None:
        self.reason = reason
        super().__init__(f"Asynchronous value was rejected with {reason!r}.")


##
## RESULT HANDLES
##


class HandleAlreadySettledError(FlowExecutionError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Result handle '{name}' has already been settled.")


class HandlePendingError(FlowExecutionError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Result handle '{name}' has not been settled yet.")
