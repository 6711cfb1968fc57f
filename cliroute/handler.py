# Cliroute CLI Routing Engine — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Defines the `Handler` class, the routable unit of a cliroute processor.

A handler pairs a declarative `Schema` (route segments and options) with the
callable that runs when a command line selects it. Everything that can be
checked without a command line is checked when the handler is built:

- the action must be callable,
- every operand's converter is resolved up front, so an unsupported type is a
  `CliConfigurationError` at registration rather than on first use,
- the compiled matching pattern is built once and cached.

Handlers carry their own `HookManager` for lifecycle hooks that only apply to
them. Global options contributed by processor-level bundles are attached with
`attach_global_options` when the handler is registered.

Example:
    handler = Handler(
        name="deploy",
        action=deploy,
        command_schema=Schema.from_route(
            "deploy <target>",
            options=[OptionSpec("--tag|-t", arity="vector", csv=True)],
        ),
    )
"""
from __future__ import annotations

import asyncio
from functools import cached_property
from typing import Any, Callable, Iterable

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    InstanceOf,
    PrivateAttr,
    field_validator,
)

from cliroute.debug import register_debug_hooks
from cliroute.exceptions import InvalidActionError
from cliroute.hook_manager import HookManager
from cliroute.materializers import (
    ArgumentMaterializer,
    Decoder,
    Materializer,
    build_materializer,
)
from cliroute.pattern_compiler import (
    CompiledPattern,
    MatchResult,
    compile_schema,
    option_group_name,
    segment_group_name,
)
from cliroute.schema import ArgumentSegment, OptionSpec, RouteSegment, Schema
from cliroute.signature import infer_schema
from cliroute.utils import ensure_async


class Handler(BaseModel):
    """
    A routable command: a schema plus the action it invokes.

    Attributes:
        name (str): Unique handler name, used in logs and the execution registry.
        action (Callable): Sync or async callable receiving the materialized
            operands as keyword arguments.
        command_schema (Schema): Route and options of the handler. A route string
            such as "deploy <target>" is accepted as shorthand.
        description (str): Help text, defaults to the schema description.
        hidden (bool): Leave the handler out of help listings. It is still routable.
        hooks (HookManager): Hooks applied only to this handler.
        logging_hooks (bool): Register the debug logging hooks on this handler.
        global_options (tuple[OptionSpec, ...]): Options contributed by the
            processor's bundles.
    """

    name: str
    action: Any
    command_schema: InstanceOf[Schema] = Field(default_factory=Schema)
    description: str = ""
    hidden: bool = False
    hooks: HookManager = Field(default_factory=HookManager)
    logging_hooks: bool = False
    global_options: tuple[InstanceOf[OptionSpec], ...] = ()

    _raw_action: Callable[..., Any] | None = PrivateAttr(default=None)
    _materializers: list[Materializer] = PrivateAttr(default_factory=list)

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @field_validator("action", mode="before")
    @classmethod
    def validate_action(cls, action: Any) -> Any:
        if not callable(action):
            raise InvalidActionError(f"Handler action {action!r} is not callable.")
        return action

    @field_validator("command_schema", mode="before")
    @classmethod
    def parse_route_shorthand(cls, command_schema: Any) -> Any:
        if isinstance(command_schema, str):
            return Schema.from_route(command_schema)
        return command_schema

    def model_post_init(self, _: Any) -> None:
        self._raw_action = self.action
        self.action = ensure_async(self.action)
        if not self.description:
            self.description = self.command_schema.description
        if self.logging_hooks:
            register_debug_hooks(self.hooks)
        self._build_materializers()

    @classmethod
    def from_callable(
        cls,
        action: Callable[..., Any],
        route: str | Iterable[RouteSegment] = "",
        *,
        name: str | None = None,
        description: str | None = None,
        examples: Iterable[str] = (),
        option_metadata: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> Handler:
        """
        Build a handler whose schema is inferred from the action's signature.

        See `cliroute.signature.infer_schema` for the inference rules.
        """
        if not callable(action):
            raise InvalidActionError(f"Handler action {action!r} is not callable.")
        command_schema = infer_schema(
            action,
            route,
            description=description,
            examples=examples,
            option_metadata=option_metadata,
        )
        return cls(
            name=name or getattr(action, "__name__", "handler").replace("_", "-"),
            action=action,
            command_schema=command_schema,
            **kwargs,
        )

    @property
    def effective_schema(self) -> Schema:
        """The handler's schema including global options."""
        return self.command_schema.with_options(*self.global_options)

    @cached_property
    def pattern(self) -> CompiledPattern:
        return compile_schema(self.effective_schema)

    @property
    def materializers(self) -> tuple[Materializer, ...]:
        return tuple(self._materializers)

    def attach_global_options(self, options: Iterable[OptionSpec]) -> None:
        """
        Attach bundle options and rebuild the matching pattern.

        Raises:
            CliConfigurationError: If a global option clashes with one of the
                handler's own aliases or destinations.
        """
        options = tuple(options)
        self.command_schema.with_options(*options)
        self.global_options = options
        self.__dict__.pop("pattern", None)

    def _build_materializers(self) -> None:
        materializers: list[Materializer] = []
        for index, segment in enumerate(self.command_schema.segments):
            if isinstance(segment, ArgumentSegment):
                materializers.append(
                    ArgumentMaterializer(segment, segment_group_name(index, segment))
                )
        for option in self.command_schema.options:
            materializers.append(build_materializer(option, option_group_name(option)))
        self._materializers = materializers

    def bind(self, match: MatchResult, decode: Decoder) -> dict[str, Any]:
        """
        Materialize every operand of the handler from an optimal match.

        Returns:
            dict[str, Any]: Values keyed by destination, arguments first in route
                order, then options in declaration order.

        Raises:
            CliUsageError: If the user's text cannot be bound.
        """
        return {
            materializer.dest: materializer.materialize(
                match.captures(materializer.group), decode
            )
            for materializer in self._materializers
        }

    async def invoke(self, arguments: dict[str, Any], timeout: float | None = None) -> Any:
        """
        Invoke the action with bound arguments.

        A timeout only interrupts actions that yield to the event loop.
        """
        if timeout:
            return await asyncio.wait_for(self.action(**arguments), timeout)
        return await self.action(**arguments)

    def usage(self, program: str) -> str:
        return self.effective_schema.usage(program)

    def __str__(self) -> str:
        return f"Handler(name={self.name!r}, route={self.command_schema.route!r})"
