# Cliroute CLI Routing Engine — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Global option bundles.

A bundle contributes options to every handler of a processor and observes the
invocation through three callbacks:

- `on_executing(context)` runs after the handler's arguments are bound,
- `on_executed(context)` runs after the handler returned,
- `on_error(context, error)` runs when the invocation stops after
  `on_executing`, including when another bundle's `on_executed` fails.

Callbacks may be sync or async. The processor binds a shallow copy of the
bundle for every invocation and sets one attribute per option, named after the
option's destination, so bundle state never leaks between invocations.

Built-in bundles:
- HelpOptionBundle: `--help|-h|-?` shows help for the selected handler.
- TraceOptionBundle: `--trace-level|--trace` raises the cliroute logger level.
- TimeoutOptionBundle: `--timeout` cancels slow handlers.
"""
from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, ClassVar

from cliroute.arity import Arity
from cliroute.context import ExecutionContext
from cliroute.exceptions import CliConfigurationError, InvalidOperandError
from cliroute.logger import logger
from cliroute.schema import OptionSpec
from cliroute.signals import HelpSignal


class GlobalOptionBundle:
    """
    Base class for option bundles.

    Subclasses declare `options` and override any of the callbacks.
    """

    options: ClassVar[tuple[OptionSpec, ...]] = ()

    @classmethod
    def validate(cls) -> None:
        """
        Check the bundle declaration.

        Raises:
            CliConfigurationError: If an option is not an `OptionSpec` or the
                bundle nests another bundle.
        """
        for option in cls.options:
            if not isinstance(option, OptionSpec):
                raise CliConfigurationError(
                    f"Bundle '{cls.__name__}' declares an invalid option: {option!r}"
                )
        for klass in cls.__mro__:
            for attribute, value in vars(klass).items():
                if isinstance(value, GlobalOptionBundle) or (
                    isinstance(value, type) and issubclass(value, GlobalOptionBundle)
                ):
                    raise CliConfigurationError(
                        f"Bundle '{cls.__name__}' nests bundle '{attribute}'. "
                        "Register bundles separately."
                    )

    def wants_help(self) -> bool:
        """True when help should be shown before the handler's operands are bound."""
        return False

    def on_executing(self, context: ExecutionContext) -> Any:
        return None

    def on_executed(self, context: ExecutionContext) -> Any:
        return None

    def on_error(self, context: ExecutionContext, error: BaseException) -> Any:
        return None

    def __repr__(self) -> str:
        values = ", ".join(
            f"{option.dest}={getattr(self, option.dest, None)!r}" for option in self.options
        )
        return f"{type(self).__name__}({values})"


class HelpOptionBundle(GlobalOptionBundle):
    """Shows help for the selected handler instead of invoking it."""

    options = (
        OptionSpec(
            ("--help", "-h", "-?"),
            arity=Arity.FLAG,
            dest="help",
            description="Show help for this command.",
        ),
    )

    help: bool = False

    def wants_help(self) -> bool:
        return self.help

    def on_executing(self, context: ExecutionContext) -> None:
        if self.help:
            raise HelpSignal()


def coerce_log_level(value: str) -> int:
    """Parse a logging level name ("debug") or number ("10")."""
    if value.isdigit():
        return int(value)
    level = logging.getLevelName(value.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {value}")
    return level


class TraceOptionBundle(GlobalOptionBundle):
    """Raises the cliroute logger level for one invocation."""

    options = (
        OptionSpec(
            ("--trace-level", "--trace"),
            dest="trace_level",
            converter=coerce_log_level,
            description="Log level for this invocation (debug, info, warning...).",
            sample="debug",
        ),
    )

    trace_level: int | None = None

    def __init__(self) -> None:
        self._previous_level: int | None = None

    def on_executing(self, context: ExecutionContext) -> None:
        if self.trace_level is None:
            return
        self._previous_level = logger.level
        logger.setLevel(self.trace_level)
        logger.debug("[%s] Trace level set to %s", context.name, self.trace_level)

    def _restore(self) -> None:
        if self._previous_level is not None:
            logger.setLevel(self._previous_level)
            self._previous_level = None

    def on_executed(self, context: ExecutionContext) -> None:
        self._restore()

    def on_error(self, context: ExecutionContext, error: BaseException) -> None:
        self._restore()


class TimeoutOptionBundle(GlobalOptionBundle):
    """
    Cancels the handler when it runs longer than `--timeout`.

    Accepts seconds ("30"), unit suffixes ("1h30m") or clock notation
    ("00:01:30"). Only handlers that yield to the event loop can be interrupted.

    Args:
        default_timeout (timedelta | float | None): Applied when the option is
            absent. Numbers are seconds.
    """

    options = (
        OptionSpec(
            "--timeout",
            type=timedelta,
            dest="timeout",
            description="Cancel the command after this duration.",
        ),
    )

    timeout: timedelta | None = None

    def __init__(self, default_timeout: timedelta | float | None = None) -> None:
        if isinstance(default_timeout, (int, float)):
            default_timeout = timedelta(seconds=default_timeout)
        self.default_timeout = default_timeout

    def on_executing(self, context: ExecutionContext) -> None:
        timeout = self.timeout if self.timeout is not None else self.default_timeout
        if timeout is None:
            return
        if timeout.total_seconds() <= 0:
            raise InvalidOperandError("The option '--timeout' must be a positive duration.")
        context.timeout = timeout.total_seconds()


BUILTIN_BUNDLES: dict[str, type[GlobalOptionBundle]] = {
    "help": HelpOptionBundle,
    "trace": TraceOptionBundle,
    "timeout": TimeoutOptionBundle,
}
