from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    detect_cycles: bool = True
    """Reject Flows whose dependencies form a cycle. When disabled, tasks in a cycle
    never settle."""

    backend: Literal["asyncio", "trio"] = "asyncio"
    """ Async backend used by `run_sync` to start a new event loop."""

    backend_options: dict[str, Any] = Field(default_factory=dict)
    """ Options forwarded to the async backend by `run_sync`."""

    model_config = SettingsConfigDict(env_prefix="PROMISESFLOW_")
