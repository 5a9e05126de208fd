"""Runtime settings read from the environment."""

import os
from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from planetscope.search.pipeline import DEFAULT_DEBOUNCE_MS
from planetscope.transports.swapi import DEFAULT_BASE_URL

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    api_url: str = DEFAULT_BASE_URL
    debounce_ms: int = Field(default=DEFAULT_DEBOUNCE_MS, ge=0)
    abort_superseded: bool = True
    http_timeout: float = Field(default=10.0, gt=0)
    log_level: LogLevel = "INFO"

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from PLANETSCOPE_* variables; unset ones keep defaults.

        Raises pydantic.ValidationError on malformed values.
        """
        env = os.environ if environ is None else environ
        fields = {
            "api_url": "PLANETSCOPE_API_URL",
            "debounce_ms": "PLANETSCOPE_DEBOUNCE_MS",
            "abort_superseded": "PLANETSCOPE_ABORT_SUPERSEDED",
            "http_timeout": "PLANETSCOPE_HTTP_TIMEOUT",
            "log_level": "PLANETSCOPE_LOG_LEVEL",
        }
        values = {field: env[var] for field, var in fields.items() if env.get(var)}
        return cls.model_validate(values)
