# Cliroute CLI Routing Engine — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Defines the `HookManager` and `HookType` used by the cliroute pipeline to run
lifecycle callbacks around a handler invocation.

Hooks are plain callables (sync or async) that receive the invocation's
`ExecutionContext`. They can be registered on a `CliProcessor` (applied to
every handler) or on a single `Handler`.

Key Components:
- HookType: Enum categorizing supported hook lifecycle stages
- HookManager: Core class for registering and invoking hooks
- Hook: Union of sync and async callables accepting an `ExecutionContext`

Usage:
    hooks = HookManager()
    hooks.register(HookType.BEFORE, log_before)
"""
from __future__ import annotations

import inspect
from enum import Enum
from typing import Awaitable, Callable, Union

from cliroute.context import ExecutionContext
from cliroute.exceptions import CliUsageError, InvalidHookError
from cliroute.logger import logger

Hook = Union[
    Callable[[ExecutionContext], None], Callable[[ExecutionContext], Awaitable[None]]
]


class HookType(Enum):
    """
    Enum for supported hook lifecycle phases.

    Members:
        BEFORE: Run after arguments are bound, before the handler is invoked.
        ON_SUCCESS: Run after the handler returned.
        ON_ERROR: Run when the handler raised.
        AFTER: Run after success or failure (always runs once a handler was invoked).
        ON_TEARDOWN: Run at the very end, for resource cleanup.

    Aliases:
        "success" → "on_success"
        "error" → "on_error"
        "teardown" → "on_teardown"

    Example:
        HookType("error") → HookType.ON_ERROR
    """

    BEFORE = "before"
    ON_SUCCESS = "on_success"
    ON_ERROR = "on_error"
    AFTER = "after"
    ON_TEARDOWN = "on_teardown"

    @classmethod
    def choices(cls) -> list[HookType]:
        """Return a list of all hook type choices."""
        return list(cls)

    @classmethod
    def _get_alias(cls, value: str) -> str:
        aliases = {
            "success": "on_success",
            "error": "on_error",
            "teardown": "on_teardown",
        }
        return aliases.get(value, value)

    @classmethod
    def _missing_(cls, value: object) -> HookType:
        if not isinstance(value, str):
            raise ValueError(f"Invalid {cls.__name__}: {value!r}")
        normalized = value.strip().lower()
        alias = cls._get_alias(normalized)
        for member in cls:
            if member.value == alias:
                return member
        valid = ", ".join(member.value for member in cls)
        raise ValueError(f"Invalid {cls.__name__}: '{value}'. Must be one of: {valid}")

    def __str__(self) -> str:
        """Return the string representation of the hook type."""
        return self.value


class HookManager:
    """
    Manages lifecycle hooks for a processor or a handler.

    Methods:
        register(hook_type, hook): Register a callable for a given HookType.
        clear(hook_type): Remove hooks for one or all lifecycle stages.
        trigger(hook_type, context): Execute all hooks of a given type.

    Example:
        hooks = HookManager()
        hooks.register(HookType.BEFORE, my_logger)
    """

    def __init__(self) -> None:
        self._hooks: dict[HookType, list[Hook]] = {
            hook_type: [] for hook_type in HookType
        }

    def register(self, hook_type: HookType | str, hook: Hook):
        """
        Register a new hook for a given lifecycle phase.

        Args:
            hook_type (HookType | str): The hook category (e.g. "before", "on_success").
            hook (Callable): The hook function to register.

        Raises:
            ValueError: If the hook type is invalid.
            InvalidHookError: If the hook is not callable.
        """
        hook_type = HookType(hook_type)
        if not callable(hook):
            raise InvalidHookError(f"Hook {hook!r} registered for '{hook_type}' is not callable.")
        self._hooks[hook_type].append(hook)

    def clear(self, hook_type: HookType | None = None):
        """
        Clear registered hooks for one or all hook types.

        Args:
            hook_type (HookType | None): If None, clears all hooks.
        """
        if hook_type:
            self._hooks[hook_type] = []
        else:
            for ht in self._hooks:
                self._hooks[ht] = []

    def __len__(self) -> int:
        return sum(len(hooks) for hooks in self._hooks.values())

    async def trigger(self, hook_type: HookType, context: ExecutionContext):
        """
        Invoke all hooks registered for a given lifecycle phase, in registration order.

        Args:
            hook_type (HookType): The lifecycle phase to trigger.
            context (ExecutionContext): The execution context passed to each hook.

        Raises:
            CliUsageError: Usage errors raised by a BEFORE hook propagate, so the
                hook can reject an invocation.

        Other hook exceptions are logged and skipped. During ON_ERROR the pipeline
        is already reporting `context.exception`, so failing error hooks never
        replace it. Flow signals (`HelpSignal`, `CancelSignal`) are not exceptions
        and always propagate.
        """
        if hook_type not in self._hooks:
            raise ValueError(f"Unsupported hook type: {hook_type}")
        for hook in self._hooks[hook_type]:
            try:
                if inspect.iscoroutinefunction(hook):
                    await hook(context)
                else:
                    hook(context)
            except CliUsageError:
                if hook_type == HookType.BEFORE:
                    raise
                logger.warning(
                    "[Hook:%s] raised a usage error during '%s' for '%s'.",
                    getattr(hook, "__name__", repr(hook)),
                    hook_type,
                    context.name,
                )
            except Exception as hook_error:
                logger.warning(
                    "[Hook:%s] raised an exception during '%s' for '%s': %s",
                    getattr(hook, "__name__", repr(hook)),
                    hook_type,
                    context.name,
                    hook_error,
                )

    def __str__(self) -> str:
        """Return a formatted string of registered hooks grouped by hook type."""

        def format_hook_list(hooks: list[Hook]) -> str:
            return ", ".join(getattr(h, "__name__", repr(h)) for h in hooks) if hooks else "—"

        lines = ["<HookManager>"]
        for hook_type in HookType:
            hook_list = self._hooks.get(hook_type, [])
            lines.append(f"  {hook_type.value}: {format_hook_list(hook_list)}")
        return "\n".join(lines)
