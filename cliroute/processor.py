# Cliroute CLI Routing Engine — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Defines `CliProcessor`, the entry point of the cliroute engine.

The processor routes a single command line through a fixed pipeline:

1. Encode the command line (quotes, `%ENV%` references, `--opt[key]` accessors).
2. Match every registered handler and keep the highest ranked group. Exactly
   one handler must be in it, otherwise help is shown.
3. Materialize the handler's operands and the bundles' global options.
4. Run bundle `on_executing` callbacks and BEFORE hooks.
5. Invoke the handler, honoring `context.timeout`.
6. Run `on_executed` / ON_SUCCESS or `on_error` / ON_ERROR, then AFTER and
   ON_TEARDOWN hooks.
   A `HelpSignal` or `CancelSignal` raised in this step replaces the outcome.

Every pass ends in exactly one `TerminalState`, returned as an
`ExecutionOutcome`. Usage errors print a message to stderr and never a
traceback. Unexpected exceptions are logged with their traceback and reported
to the user with a generic message. Configuration errors are developer mistakes
and propagate to the caller.

Example:
    processor = CliProcessor()

    @processor.command("deploy <target>", option_metadata={"tag": "Image tag"})
    async def deploy(target: str, tag: str = "latest", dry_run: bool = False):
        ...

    asyncio.run(processor.run())
"""
from __future__ import annotations

import asyncio
import copy
import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable

from rich.console import Console
from rich.markup import escape

from cliroute.bundles import GlobalOptionBundle, HelpOptionBundle
from cliroute.console import console as default_console
from cliroute.console import error_console as default_error_console
from cliroute.context import ExecutionContext
from cliroute.debug import register_debug_hooks
from cliroute.exceptions import (
    CliConfigurationError,
    CliUsageError,
    TokenDecodingError,
)
from cliroute.execution_registry import ExecutionRegistry as er
from cliroute.handler import Handler
from cliroute.help import HelpReason, HelpRenderer, HelpRequest, RichHelpRenderer
from cliroute.hook_manager import HookManager, HookType
from cliroute.logger import logger
from cliroute.materializers import OptionMaterializer, build_materializer
from cliroute.pattern_compiler import MatchResult, option_group_name
from cliroute.ranker import score, top_group
from cliroute.schema import OptionSpec, Schema
from cliroute.settings import ProcessorSettings
from cliroute.signals import CancelSignal, FlowSignal, HelpSignal
from cliroute.token_codec import TokenMap, encode
from cliroute.utils import ensure_async, get_program_invocation, join_command_line


class TerminalState(Enum):
    """
    Final state of one pipeline pass.

    Members:
        COMPLETED: The handler returned.
        HELP_SHOWN: Help was rendered instead of invoking a handler.
        USER_ERROR: The command line could not be bound, or the handler
            rejected it with a `CliUsageError`.
        INTERNAL_ERROR: Something unexpected failed.
        CANCELLED: The invocation was cancelled or timed out.
    """

    COMPLETED = "completed"
    HELP_SHOWN = "help_shown"
    USER_ERROR = "user_error"
    INTERNAL_ERROR = "internal_error"
    CANCELLED = "cancelled"

    @classmethod
    def choices(cls) -> list[TerminalState]:
        return list(cls)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ExecutionOutcome:
    """Result of `CliProcessor.process`."""

    state: TerminalState
    exit_code: int
    handler: Handler | None = None
    result: Any = None
    message: str | None = None
    context: ExecutionContext | None = field(default=None, repr=False, compare=False)

    @property
    def succeeded(self) -> bool:
        return self.state is TerminalState.COMPLETED


@dataclass(frozen=True)
class Selection:
    """
    Outcome of handler selection for one encoded command line.

    `handler` and `match` are set only when exactly one handler won. Otherwise
    `reason` says why help is due and `candidates` lists the handlers to show.
    """

    handler: Handler | None = None
    match: MatchResult | None = None
    candidates: tuple[Handler, ...] = ()
    reason: HelpReason | None = None
    unmatched: tuple[str, ...] = ()
    rank: int = 0


@dataclass(frozen=True)
class ExampleMismatch:
    """A declared example that does not route to the handler declaring it."""

    handler: str
    example: str
    selected: str | None
    reason: HelpReason | None


@dataclass
class _BundleRegistration:
    bundle: GlobalOptionBundle
    materializers: list[OptionMaterializer]


def exit_code_for(result: Any) -> int:
    """An `int` result is the exit code. Anything else means success."""
    if isinstance(result, int) and not isinstance(result, bool):
        return result
    return 0


class CliProcessor:
    """
    Routes command lines to registered handlers.

    Args:
        handlers (Iterable[Handler]): Handlers to register.
        bundles (Iterable[GlobalOptionBundle] | None): Global option bundles.
            Defaults to a single `HelpOptionBundle`. Pass `()` for none.
        settings (ProcessorSettings | None): Pipeline settings.
        help_renderer (HelpRenderer | None): Called with a `HelpRequest` whenever
            help is shown. Defaults to `RichHelpRenderer`.
        hooks (HookManager | None): Hooks applied to every handler.
        console (Console | None): Console for help output.
        error_console (Console | None): Console for error messages.
    """

    def __init__(
        self,
        handlers: Iterable[Handler] = (),
        bundles: Iterable[GlobalOptionBundle] | None = None,
        *,
        settings: ProcessorSettings | None = None,
        help_renderer: HelpRenderer | None = None,
        hooks: HookManager | None = None,
        console: Console | None = None,
        error_console: Console | None = None,
    ) -> None:
        self.settings = settings or ProcessorSettings()
        self.console = console or default_console
        self.error_console = error_console or default_error_console
        self.help_renderer = help_renderer or RichHelpRenderer(self.console)
        self.hooks = hooks or HookManager()
        if self.settings.debug_hooks:
            register_debug_hooks(self.hooks)
        self._handlers: list[Handler] = []
        self._bundles: list[_BundleRegistration] = []
        for bundle in [HelpOptionBundle()] if bundles is None else bundles:
            self.add_bundle(bundle)
        self.add_handlers(handlers)

    @property
    def handlers(self) -> tuple[Handler, ...]:
        return tuple(self._handlers)

    @property
    def bundles(self) -> tuple[GlobalOptionBundle, ...]:
        return tuple(registration.bundle for registration in self._bundles)

    @property
    def global_options(self) -> tuple[OptionSpec, ...]:
        return tuple(
            option
            for registration in self._bundles
            for option in registration.bundle.options
        )

    def add_handler(self, handler: Handler) -> Handler:
        """
        Register a handler.

        Raises:
            CliConfigurationError: If the name is taken or the handler's options
                clash with the global options.
        """
        if not isinstance(handler, Handler):
            raise CliConfigurationError(f"Expected a Handler, got {handler!r}.")
        if any(existing.name == handler.name for existing in self._handlers):
            raise CliConfigurationError(f"A handler named '{handler.name}' already exists.")
        handler.attach_global_options(self.global_options)
        self._handlers.append(handler)
        logger.debug("Registered handler '%s': %s", handler.name, handler.command_schema.route)
        return handler

    def add_handlers(self, handlers: Iterable[Handler]) -> None:
        for handler in handlers:
            self.add_handler(handler)

    def add_bundle(self, bundle: GlobalOptionBundle) -> None:
        """
        Register a global option bundle and attach its options to every handler.

        Raises:
            CliConfigurationError: If the bundle is invalid or its options clash.
        """
        if not isinstance(bundle, GlobalOptionBundle):
            raise CliConfigurationError(f"Expected a GlobalOptionBundle, got {bundle!r}.")
        bundle.validate()
        materializers = [
            build_materializer(option, option_group_name(option)) for option in bundle.options
        ]
        self._validate_global_options(self.global_options + tuple(bundle.options))
        self._bundles.append(_BundleRegistration(bundle, materializers))
        for handler in self._handlers:
            handler.attach_global_options(self.global_options)

    def _validate_global_options(self, options: tuple[OptionSpec, ...]) -> None:
        """Check `options` against each other and every handler before anything changes."""
        Schema(options=options)
        for handler in self._handlers:
            handler.command_schema.with_options(*options)

    def command(
        self,
        route: str = "",
        *,
        name: str | None = None,
        description: str | None = None,
        examples: Iterable[str] = (),
        option_metadata: dict[str, Any] | None = None,
        hidden: bool = False,
        hooks: HookManager | None = None,
        logging_hooks: bool = False,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator registering a function as a handler, see `Handler.from_callable`."""

        def decorator(function: Callable[..., Any]) -> Callable[..., Any]:
            handler = Handler.from_callable(
                function,
                route,
                name=name,
                description=description,
                examples=examples,
                option_metadata=option_metadata,
                hidden=hidden,
                hooks=hooks or HookManager(),
                logging_hooks=logging_hooks,
            )
            self.add_handler(handler)
            return function

        return decorator

    def select(self, encoded_line: str) -> Selection:
        """
        Select the handler for an encoded command line.

        Handlers matching the optimal branch outrank every fuzzy match. When no
        handler matches optimally, the best fuzzy candidates are returned for help.
        """
        weight = self.settings.optimal_weight
        matches = [(handler, handler.pattern.match(encoded_line)) for handler in self._handlers]

        optimal = [(handler, match) for handler, match in matches if match.optimal]
        if optimal:
            rank, group = top_group(optimal, key=lambda item: score(item[1], weight))
            if len(group) == 1:
                handler, match = group[0]
                return Selection(handler=handler, match=match, candidates=(handler,), rank=rank)
            return Selection(
                candidates=tuple(handler for handler, _ in group),
                reason=HelpReason.AMBIGUOUS,
                rank=rank,
            )

        visible = [(handler, match) for handler, match in matches if not handler.hidden]
        rank, group = top_group(visible, key=lambda item: score(item[1], weight))
        unmatched = group[0][1].unmatched if group else ()
        if rank == 0:
            group = visible
        return Selection(
            candidates=tuple(handler for handler, _ in group),
            reason=HelpReason.NO_MATCH,
            unmatched=unmatched,
            rank=rank,
        )

    def program_name(self, decode: TokenMap | None = None) -> str:
        if self.settings.program:
            return self.settings.program
        if decode is not None and decode.program:
            return decode.program
        return get_program_invocation()

    async def process(self, command_line: str) -> ExecutionOutcome:
        """
        Route one command line and return its terminal outcome.

        Raises:
            CliConfigurationError: If a declaration problem surfaces while binding.
        """
        context = ExecutionContext(command_line=command_line)
        context.start_timer()
        try:
            outcome = await self._process(command_line, context)
        finally:
            context.stop_timer()
        context.state = outcome.state.value
        context.exit_code = outcome.exit_code
        if self.settings.record_history:
            er.record(context, limit=self.settings.history_limit)
        return ExecutionOutcome(
            state=outcome.state,
            exit_code=outcome.exit_code,
            handler=outcome.handler,
            result=outcome.result,
            message=outcome.message,
            context=context,
        )

    async def _process(self, command_line: str, context: ExecutionContext) -> ExecutionOutcome:
        try:
            encoded, decode = encode(command_line)
        except TokenDecodingError as error:
            return self._internal_error(context, error)
        context.encoded_line = encoded
        program = self.program_name(decode)

        selection = self.select(encoded)
        if selection.handler is None or selection.match is None:
            return self._help(
                context,
                HelpRequest(
                    program=program,
                    reason=selection.reason or HelpReason.NO_MATCH,
                    handlers=selection.candidates,
                    command_line=command_line,
                    unmatched=selection.unmatched,
                ),
            )

        handler = selection.handler
        context.name = handler.name
        context.handler = handler
        help_request = HelpRequest(
            program=program,
            reason=HelpReason.REQUESTED,
            handlers=(handler,),
            command_line=command_line,
        )

        try:
            bundles = self._bind_bundles(selection.match, decode)
            if any(bundle.wants_help() for bundle in bundles):
                return self._help(context, help_request)
            context.arguments = handler.bind(selection.match, decode)
        except CliUsageError as error:
            return self._user_error(context, error, handler)

        try:
            for bundle in bundles:
                await ensure_async(bundle.on_executing)(context)
            await self.hooks.trigger(HookType.BEFORE, context)
            await handler.hooks.trigger(HookType.BEFORE, context)
        except HelpSignal as signal:
            await self._notify_bundles(context, bundles, signal)
            return self._help(context, help_request)
        except CancelSignal as signal:
            await self._notify_bundles(context, bundles, signal)
            return self._cancelled(context, signal, handler)
        except CliUsageError as error:
            await self._notify_bundles(context, bundles, error)
            return self._user_error(context, error, handler)
        except CliConfigurationError:
            raise
        except Exception as error:
            await self._notify_bundles(context, bundles, error)
            return self._internal_error(context, error, handler)

        try:
            outcome = await self._invoke(handler, context, bundles, help_request)
        finally:
            signal = await self._run_closing_hooks(handler, context)
        if signal is not None:
            return self._signalled(context, signal, handler, help_request)
        return outcome

    async def _invoke(
        self,
        handler: Handler,
        context: ExecutionContext,
        bundles: list[GlobalOptionBundle],
        help_request: HelpRequest,
    ) -> ExecutionOutcome:
        try:
            result = await handler.invoke(context.arguments, timeout=context.timeout)
        except HelpSignal as signal:
            await self._notify_bundles(context, bundles, signal)
            return self._help(context, help_request)
        except (CancelSignal, asyncio.CancelledError, asyncio.TimeoutError) as error:
            context.exception = error
            await self._on_error(handler, context, bundles, error)
            return self._cancelled(context, error, handler)
        except CliUsageError as error:
            context.exception = error
            await self._on_error(handler, context, bundles, error)
            return self._user_error(context, error, handler)
        except Exception as error:
            context.exception = error
            await self._on_error(handler, context, bundles, error)
            return self._internal_error(context, error, handler)

        context.result = result
        try:
            for bundle in bundles:
                await ensure_async(bundle.on_executed)(context)
        except FlowSignal as signal:
            await self._notify_bundles(context, bundles, signal)
            return self._signalled(context, signal, handler, help_request)
        except Exception as error:
            context.exception = error
            await self._on_error(handler, context, bundles, error)
            return self._internal_error(context, error, handler)
        try:
            await self.hooks.trigger(HookType.ON_SUCCESS, context)
            await handler.hooks.trigger(HookType.ON_SUCCESS, context)
        except FlowSignal as signal:
            return self._signalled(context, signal, handler, help_request)
        return ExecutionOutcome(
            state=TerminalState.COMPLETED,
            exit_code=exit_code_for(result),
            handler=handler,
            result=result,
        )

    def _bind_bundles(self, match: MatchResult, decode: TokenMap) -> list[GlobalOptionBundle]:
        bound: list[GlobalOptionBundle] = []
        for registration in self._bundles:
            bundle = copy.copy(registration.bundle)
            for materializer in registration.materializers:
                value = materializer.materialize(match.captures(materializer.group), decode)
                setattr(bundle, materializer.dest, value)
            bound.append(bundle)
        return bound

    async def _on_error(
        self,
        handler: Handler,
        context: ExecutionContext,
        bundles: list[GlobalOptionBundle],
        error: BaseException,
    ) -> None:
        await self._notify_bundles(context, bundles, error)
        for hooks in (self.hooks, handler.hooks):
            try:
                await hooks.trigger(HookType.ON_ERROR, context)
            except FlowSignal as signal:
                logger.warning(
                    "[%s] Ignored %s raised by an on_error hook.",
                    context.name,
                    type(signal).__name__,
                )

    async def _run_closing_hooks(
        self, handler: Handler, context: ExecutionContext
    ) -> FlowSignal | None:
        """Run AFTER then ON_TEARDOWN hooks and return the first flow signal raised."""
        first: FlowSignal | None = None
        for hook_type in (HookType.AFTER, HookType.ON_TEARDOWN):
            for hooks in (self.hooks, handler.hooks):
                try:
                    await hooks.trigger(hook_type, context)
                except FlowSignal as signal:
                    logger.debug(
                        "[%s] %s raised by a %s hook.",
                        context.name,
                        type(signal).__name__,
                        hook_type,
                    )
                    first = first or signal
        return first

    async def _notify_bundles(
        self,
        context: ExecutionContext,
        bundles: list[GlobalOptionBundle],
        error: BaseException,
    ) -> None:
        for bundle in bundles:
            try:
                await ensure_async(bundle.on_error)(context, error)
            except (Exception, FlowSignal) as bundle_error:
                logger.warning(
                    "[%s] Bundle %s failed in on_error: %s",
                    context.name,
                    type(bundle).__name__,
                    bundle_error,
                )

    def _help(self, context: ExecutionContext, request: HelpRequest) -> ExecutionOutcome:
        logger.debug("Showing help (%s) for: %s", request.reason, request.command_line)
        self.help_renderer(request)
        handler = request.handlers[0] if request.reason is HelpReason.REQUESTED else None
        return ExecutionOutcome(
            state=TerminalState.HELP_SHOWN,
            exit_code=self.settings.help_exit_code,
            handler=handler,
            message=str(request.reason),
        )

    def _signalled(
        self,
        context: ExecutionContext,
        signal: FlowSignal,
        handler: Handler,
        help_request: HelpRequest,
    ) -> ExecutionOutcome:
        if isinstance(signal, HelpSignal):
            return self._help(context, help_request)
        return self._cancelled(context, signal, handler)

    def _user_error(
        self, context: ExecutionContext, error: CliUsageError, handler: Handler | None = None
    ) -> ExecutionOutcome:
        context.exception = error
        logger.debug("[%s] Usage error: %s", context.name, error.message)
        self.error_console.print(f"[error]{escape(error.message)}[/]")
        return ExecutionOutcome(
            state=TerminalState.USER_ERROR,
            exit_code=error.exit_code,
            handler=handler,
            message=error.message,
        )

    def _internal_error(
        self, context: ExecutionContext, error: BaseException, handler: Handler | None = None
    ) -> ExecutionOutcome:
        context.exception = error
        logger.error(
            "[%s] Unhandled %s: %s",
            context.name,
            type(error).__name__,
            error,
            exc_info=error,
        )
        message = self.settings.internal_error_message
        self.error_console.print(f"[error]{escape(message)}[/]")
        return ExecutionOutcome(
            state=TerminalState.INTERNAL_ERROR,
            exit_code=1,
            handler=handler,
            message=message,
        )

    def _cancelled(
        self, context: ExecutionContext, error: BaseException, handler: Handler | None = None
    ) -> ExecutionOutcome:
        context.exception = error
        if isinstance(error, asyncio.TimeoutError) and context.timeout:
            message = f"Timed out after {context.timeout:g}s."
        else:
            message = "Cancelled."
        logger.info("[%s] %s", context.name, message)
        self.error_console.print(f"[warning]{escape(message)}[/]")
        return ExecutionOutcome(
            state=TerminalState.CANCELLED,
            exit_code=self.settings.cancelled_exit_code,
            handler=handler,
            message=message,
        )

    def check_examples(self) -> list[ExampleMismatch]:
        """Route every declared example and report the ones that miss their handler."""
        program = self.settings.program or "program"
        mismatches: list[ExampleMismatch] = []
        for handler in self._handlers:
            for example in handler.effective_schema.examples:
                encoded, _ = encode(f"{program} {example}")
                selection = self.select(encoded)
                if selection.handler is not handler:
                    mismatches.append(
                        ExampleMismatch(
                            handler=handler.name,
                            example=example,
                            selected=selection.handler.name if selection.handler else None,
                            reason=selection.reason,
                        )
                    )
        return mismatches

    async def run(self, argv: list[str] | None = None) -> None:
        """
        Route `argv` (defaults to `sys.argv`) and exit with the outcome's code.

        `argv[0]` is the program path.
        """
        argv = sys.argv if argv is None else argv
        try:
            outcome = await self.process(join_command_line(argv))
        except KeyboardInterrupt:
            logger.info("Interrupted.")
            sys.exit(self.settings.cancelled_exit_code)
        sys.exit(outcome.exit_code)

    def execute(self, command_line: str) -> ExecutionOutcome:
        """Synchronous wrapper around `process` for callers without an event loop."""
        return asyncio.run(self.process(command_line))
