# Cliroute CLI Routing Engine — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Provides the `ExecutionRegistry`, an in-memory store of every invocation the
cliroute pipeline processed.

`CliProcessor.process` records each `ExecutionContext` once a terminal state
is reached, whether a handler ran, help was shown or the input was rejected.
The registry supports lookup by handler name, the latest context and a rich
summary table, which is handy when a long-lived host routes many command lines.

Example:
    from cliroute.execution_registry import ExecutionRegistry as er

    er.summary()
    er.summary(status="error")
    er.clear()

Note:
    The registry is volatile and cleared on each process restart or when `clear()`
    is called.
"""
from __future__ import annotations

from collections import defaultdict, deque
from threading import Lock
from typing import Literal

from rich import box
from rich.console import Console
from rich.table import Table

from cliroute.console import console
from cliroute.context import ExecutionContext
from cliroute.logger import logger
from cliroute.themes import OneColors

DEFAULT_HISTORY_LIMIT = 1000


class ExecutionRegistry:
    """
    Global registry of processed invocations.

    Attributes:
        _store_by_name (dict): Maps handler name → list of ExecutionContext objects.
        _store_all (deque): Ordered contexts, oldest first. Bounded by the limit
            passed to `record`.
        _index (int): Global counter for assigning unique execution indices.
        _lock (Lock): Thread lock for atomic writes to the registry.
        _console (Console): Rich console used for rendering summaries.
    """

    _store_by_name: dict[str, list[ExecutionContext]] = defaultdict(list)
    _store_all: deque[ExecutionContext] = deque()
    _console: Console = console
    _index = 0
    _lock = Lock()

    @classmethod
    def record(cls, context: ExecutionContext, limit: int | None = DEFAULT_HISTORY_LIMIT):
        """
        Record an execution context and assign a unique index.

        Args:
            context (ExecutionContext): The context to be tracked.
            limit (int | None): Number of contexts kept. The oldest are dropped
                first. `None` keeps everything.
        """
        logger.debug(context.to_log_line())
        with cls._lock:
            context.index = cls._index
            cls._index += 1
            cls._store_by_name[context.name].append(context)
            cls._store_all.append(context)
            while limit is not None and len(cls._store_all) > limit:
                evicted = cls._store_all.popleft()
                by_name = cls._store_by_name[evicted.name]
                by_name.pop(0)
                if not by_name:
                    del cls._store_by_name[evicted.name]

    @classmethod
    def get_all(cls) -> list[ExecutionContext]:
        return list(cls._store_all)

    @classmethod
    def get_by_name(cls, name: str) -> list[ExecutionContext]:
        return cls._store_by_name.get(name, [])

    @classmethod
    def get_latest(cls) -> ExecutionContext | None:
        return cls._store_all[-1] if cls._store_all else None

    @classmethod
    def clear(cls):
        """Clear all stored execution data and reset the index."""
        with cls._lock:
            cls._store_by_name.clear()
            cls._store_all.clear()
            cls._index = 0

    @classmethod
    def summary(
        cls,
        name: str = "",
        status: Literal["all", "success", "error"] = "all",
    ):
        """
        Display a formatted Rich table of recorded invocations.

        Args:
            name (str): Filter by handler name.
            status (Literal): One of "all", "success", or "error" to filter displayed rows.
        """
        contexts = cls.get_by_name(name) if name else cls.get_all()
        if not contexts:
            cls._console.print(f"[{OneColors.DARK_RED}]No executions recorded.")
            return
        title = f"Execution History for '{name}'" if name else "Execution History"

        table = Table(title=title, expand=True, box=box.SIMPLE)
        table.add_column("Index", justify="right", style="dim")
        table.add_column("Handler", style="bold cyan")
        table.add_column("Command line", overflow="fold")
        table.add_column("Duration", justify="right")
        table.add_column("State", style="bold")
        table.add_column("Exit", justify="right")
        table.add_column("Result / Exception", overflow="fold")

        for ctx in contexts:
            duration = f"{ctx.duration:.3f}s" if ctx.duration else "n/a"
            if ctx.exception and status.lower() in ["all", "error"]:
                final_state = f"[{OneColors.DARK_RED}]{ctx.state or 'error'}"
                final_result = repr(ctx.exception)
            elif not ctx.exception and status.lower() in ["all", "success"]:
                final_state = f"[{OneColors.GREEN}]{ctx.state or 'ok'}"
                final_result = repr(ctx.result)
                if len(final_result) > 50:
                    final_result = f"{final_result[:50]}..."
            else:
                continue

            table.add_row(
                str(ctx.index),
                ctx.name,
                ctx.command_line,
                duration,
                final_state,
                str(ctx.exit_code),
                final_result,
            )

        cls._console.print(table)
