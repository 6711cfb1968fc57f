# Cliroute CLI Routing Engine — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Execution context for one pass of the cliroute pipeline.

`ExecutionContext` is created for every command line the processor handles. It
carries the command line, the selected handler and its materialized arguments,
the result or exception, the exit code and timing data. Global option bundles
and lifecycle hooks receive it, so they can inspect arguments, adjust the
invocation timeout or stash data in `extra` for a later phase.

Contexts are invocation scoped. Once the pipeline finishes, the context is
recorded in the `ExecutionRegistry`.
"""
from __future__ import annotations

import time
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from rich.console import Console

from cliroute.console import console


class ExecutionContext(BaseModel):
    """
    Runtime metadata and state of a single invocation.

    Attributes:
        name (str): Name of the selected handler, or "<unrouted>" before selection.
        command_line (str): Raw command line as received.
        encoded_line (str | None): Command line after token encoding.
        handler (Any): The selected handler, if any.
        arguments (dict): Materialized handler arguments keyed by destination.
        result (Any | None): Value returned by the handler.
        exception (BaseException | None): Error raised during the invocation.
        exit_code (int | None): Exit status reported for the invocation.
        state (str | None): Terminal state name once the pipeline finished.
        timeout (float | None): Seconds allowed for the handler, set by bundles or hooks.
        extra (dict): Free-form data shared between bundles and hooks.
        console (Console): Rich console used for summaries.

    Properties:
        duration (float | None): The execution duration in seconds.
        success (bool): Whether the invocation completed without raising.
        status (str): "OK" if successful, otherwise "ERROR".
    """

    name: str = "<unrouted>"
    command_line: str = ""
    encoded_line: str | None = None
    handler: Any = None
    arguments: dict[str, Any] = Field(default_factory=dict)
    result: Any | None = None
    exception: BaseException | None = None
    exit_code: int | None = None
    state: str | None = None
    timeout: float | None = None

    start_time: float | None = None
    end_time: float | None = None
    start_wall: datetime | None = None
    end_wall: datetime | None = None

    index: int | None = None

    extra: dict[str, Any] = Field(default_factory=dict)
    console: Console = console

    model_config = ConfigDict(arbitrary_types_allowed=True)

    def start_timer(self):
        self.start_wall = datetime.now()
        self.start_time = time.perf_counter()

    def stop_timer(self):
        self.end_time = time.perf_counter()
        self.end_wall = datetime.now()

    @property
    def duration(self) -> float | None:
        if self.start_time is None:
            return None
        if self.end_time is None:
            return time.perf_counter() - self.start_time
        return self.end_time - self.start_time

    @property
    def success(self) -> bool:
        return self.exception is None

    @property
    def status(self) -> str:
        return "OK" if self.success else "ERROR"

    @property
    def signature(self) -> str:
        """Handler name followed by its keyword arguments."""
        kwargs = ", ".join(f"{key}={value!r}" for key, value in self.arguments.items())
        return f"{self.name}({kwargs})"

    def as_dict(self) -> dict:
        return {
            "name": self.name,
            "command_line": self.command_line,
            "state": self.state,
            "exit_code": self.exit_code,
            "result": self.result,
            "exception": repr(self.exception) if self.exception else None,
            "duration": self.duration,
            "extra": self.extra,
        }

    def log_summary(self, logger=None) -> None:
        summary = self.as_dict()
        message = [f"[SUMMARY] {summary['name']} | "]

        if self.start_wall:
            message.append(f"Start: {self.start_wall.strftime('%H:%M:%S')} | ")

        if self.end_wall:
            message.append(f"End: {self.end_wall.strftime('%H:%M:%S')} | ")

        if summary["duration"] is not None:
            message.append(f"Duration: {summary['duration']:.3f}s | ")

        message.append(f"Exit: {summary['exit_code']} | ")
        if summary["exception"]:
            message.append(f"Exception: {summary['exception']}")
        else:
            message.append(f"Result: {summary['result']}")
        (logger or self.console.print)("".join(message))

    def to_log_line(self) -> str:
        """Structured flat-line format for logging and metrics."""
        duration_str = f"{self.duration:.3f}s" if self.duration is not None else "n/a"
        exception_str = (
            f"{type(self.exception).__name__}: {self.exception}"
            if self.exception
            else "None"
        )
        return (
            f"[{self.name}] state={self.state} exit={self.exit_code} "
            f"duration={duration_str} result={self.result!r} exception={exception_str}"
        )

    def __str__(self) -> str:
        duration_str = f"{self.duration:.3f}s" if self.duration is not None else "n/a"
        result_str = (
            f"Result: {repr(self.result)}"
            if self.success
            else f"Exception: {self.exception}"
        )
        return (
            f"<ExecutionContext '{self.name}' | {self.status} | "
            f"Duration: {duration_str} | {result_str}>"
        )

    def __repr__(self) -> str:
        return (
            f"ExecutionContext("
            f"name={self.name!r}, "
            f"duration={f'{self.duration:.3f}' if self.duration is not None else 'n/a'}, "
            f"result={self.result!r}, "
            f"exception={self.exception!r})"
        )
