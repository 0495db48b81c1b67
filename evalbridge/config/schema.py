# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Type-safe configuration schemas for evalbridge.

Each config section is a frozen pydantic model. Frozen means it cannot be
mutated after construction: the entry point name, the library and the bind
address are fixed for the life of the process.

The models use pydantic v2's ConfigDict with:
  - frozen=True: immutability after construction
  - extra="forbid": unknown fields cause immediate failure
  - validate_default=True: even defaults get type-checked
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from evalbridge.bridge.registry import DEFAULT_ENTRY_POINT
from evalbridge.interpreter.library import DEFAULT_LIBRARY_MODULES


class GlobalConfig(BaseModel):
    """
    Cross-cutting settings: project identity and observability.
    Maps to the `global:` section of the YAML file.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    config_version: str = Field(
        description="Schema version for compatibility tracking, e.g. '1.0.0'"
    )
    project_name: str = Field(
        default="evalbridge", description="Human-readable project identifier"
    )
    log_level: str = Field(
        default="INFO",
        description="One of DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional path for file-based log output",
    )


class InterpreterConfig(BaseModel):
    """What every fresh interpreter is built with."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    config_version: str = Field(description="Schema version")
    library_modules: list[str] = Field(
        default_factory=lambda: list(DEFAULT_LIBRARY_MODULES),
        description="Modules preloaded into each namespace as the standard symbol library",
    )
    filename: str = Field(
        default="<eval>",
        min_length=1,
        description="Filename reported in tracebacks and syntax errors",
    )


class BridgeConfig(BaseModel):
    """Host-facing settings: the entry point name and where the adapter listens."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    config_version: str = Field(description="Schema version")
    entry_point: str = Field(
        default=DEFAULT_ENTRY_POINT,
        description="Name of the single host-callable entry point",
    )
    host: str = Field(default="127.0.0.1", description="Bind address")
    port: int = Field(default=8740, ge=0, le=65535, description="Bind port (0 picks a free one)")
    max_request_size_bytes: int = Field(
        default=1_048_576,
        ge=1,
        description="Largest request body accepted by the adapter",
    )

    @field_validator("entry_point")
    @classmethod
    def _entry_point_is_identifier(cls, value: str) -> str:
        if not value.isidentifier():
            raise ValueError(f"entry_point must be a valid identifier, got {value!r}")
        return value


class EvalBridgeConfig(BaseModel):
    """
    Top-level config container.

    Only `global:` is required. Missing sections stay None and callers fall
    back to the section defaults.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    global_config: GlobalConfig = Field(alias="global")
    interpreter: Optional[InterpreterConfig] = Field(default=None)
    bridge: Optional[BridgeConfig] = Field(default=None)
