from .entry import Computed, Immediate
from .exceptions import PromisesFlowError
from .executor import LocalExecutor
from .flow import Flow, run, run_sync
from .handle import ResultHandle

__all__ = [
    "Computed",
    "Immediate",
    "PromisesFlowError",
    "LocalExecutor",
    "Flow",
    "ResultHandle",
    "run",
    "run_sync",
]
