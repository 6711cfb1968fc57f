# Cliroute CLI Routing Engine — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Processor settings.

`ProcessorSettings` holds the knobs of the pipeline that are not part of any
handler declaration. Values can come from keyword arguments, a config file
(`settings:` section) or `CLIROUTE_*` environment variables:

    CLIROUTE_PROGRAM=deployctl
    CLIROUTE_OPTIMAL_WEIGHT=100
    CLIROUTE_HELP_EXIT_CODE=1
    CLIROUTE_CANCELLED_EXIT_CODE=130
    CLIROUTE_DEBUG_HOOKS=true
    CLIROUTE_HISTORY_LIMIT=1000
"""
from __future__ import annotations

import os
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, field_validator

from cliroute.execution_registry import DEFAULT_HISTORY_LIMIT
from cliroute.ranker import DEFAULT_OPTIMAL_WEIGHT

ENV_PREFIX = "CLIROUTE_"


class ProcessorSettings(BaseModel):
    """
    Attributes:
        program (str | None): Program name shown in help. Defaults to the file
            name of the first token of the command line.
        optimal_weight (int): Weight of each successful group under the optimal
            branch. Must exceed any plausible fuzzy group count.
        help_exit_code (int): Exit status when help is shown.
        cancelled_exit_code (int): Exit status when an invocation is cancelled.
        internal_error_message (str): Message printed for unexpected failures.
        debug_hooks (bool): Register the debug logging hooks on the processor.
        record_history (bool): Keep processed invocations in `ExecutionRegistry`.
        history_limit (int): Number of invocations the registry keeps. The
            oldest are dropped first.
    """

    program: str | None = None
    optimal_weight: int = DEFAULT_OPTIMAL_WEIGHT
    help_exit_code: int = 1
    cancelled_exit_code: int = 130
    internal_error_message: str = "Internal error."
    debug_hooks: bool = False
    record_history: bool = True
    history_limit: int = DEFAULT_HISTORY_LIMIT

    model_config = ConfigDict(extra="forbid")

    @field_validator("optimal_weight")
    @classmethod
    def validate_optimal_weight(cls, value: int) -> int:
        if value < 2:
            raise ValueError("optimal_weight must be at least 2.")
        return value

    @field_validator("help_exit_code", "cancelled_exit_code")
    @classmethod
    def validate_exit_code(cls, value: int) -> int:
        if not 0 < value < 256:
            raise ValueError("exit codes must be between 1 and 255.")
        return value

    @field_validator("history_limit")
    @classmethod
    def validate_history_limit(cls, value: int) -> int:
        if value < 1:
            raise ValueError("history_limit must be at least 1.")
        return value

    @classmethod
    def from_env(
        cls, environ: Mapping[str, str] | None = None, **overrides: Any
    ) -> ProcessorSettings:
        """Build settings from `CLIROUTE_*` variables, then apply `overrides`."""
        environ = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for name in cls.model_fields:
            key = f"{ENV_PREFIX}{name.upper()}"
            if key in environ:
                values[name] = environ[key]
        values.update(overrides)
        return cls(**values)
