# Cliroute CLI Routing Engine — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Builds a handler `Schema` from a Python function signature.

Parameters named like a route argument (`<target>` binds `target`) become typed
argument segments. Every other parameter becomes an option:

- `bool` → Flag
- `list[T]`, `tuple[T, ...]`, `set[T]`, `frozenset[T]`, `deque[T]` → Vector of T
- `dict[str, T]` → Map of T
- anything else → Scalar of the annotated type (`str` when unannotated)

Parameters without a default are required. Option aliases default to
`--param-name`. Per-parameter metadata overrides any `OptionSpec` field:

    infer_schema(
        deploy,
        "deploy <target>",
        option_metadata={"tags": {"aliases": "--tag|-t", "csv": True}, "host": "Target host"},
    )

A string value is shorthand for `{"description": ...}`.

Functions:
- infer_schema: Build a schema from a callable and a route.
- infer_option: Build one option declaration from a parameter.
"""
from __future__ import annotations

import inspect
import types
import typing
from collections import deque
from typing import Any, Callable, Iterable, Union, get_args, get_origin

from cliroute.arity import Arity, CollectionKind
from cliroute.exceptions import CliConfigurationError
from cliroute.logger import logger
from cliroute.schema import ArgumentSegment, OptionSpec, RouteSegment, Schema, parse_route

_BINDABLE_KINDS = (
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
    inspect.Parameter.KEYWORD_ONLY,
)

_VECTOR_ORIGINS: dict[Any, CollectionKind] = {
    list: CollectionKind.LIST,
    tuple: CollectionKind.LIST,
    set: CollectionKind.SET,
    frozenset: CollectionKind.SET,
    deque: CollectionKind.QUEUE,
}


def _strip_optional(annotation: Any) -> Any:
    origin = get_origin(annotation)
    if isinstance(annotation, types.UnionType) or origin is Union:
        members = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            return members[0]
    return annotation


def _element_type(args: tuple[Any, ...], position: int) -> Any:
    if len(args) > position and args[position] is not Ellipsis:
        return args[position]
    return str


def _resolve_hints(func: Callable[..., Any]) -> dict[str, Any]:
    try:
        return typing.get_type_hints(func)
    except (NameError, TypeError) as error:
        logger.debug("Could not resolve type hints of %s: %s", func, error)
        return {}


def infer_option(
    name: str,
    annotation: Any,
    default: Any = inspect.Parameter.empty,
    metadata: dict[str, Any] | None = None,
) -> OptionSpec:
    """
    Infer one option declaration from a parameter.

    Args:
        name (str): Parameter name, also the option's destination.
        annotation (Any): Parameter annotation, `inspect.Parameter.empty` when absent.
        default (Any): Parameter default, `inspect.Parameter.empty` when absent.
        metadata (dict | None): Overrides for `OptionSpec` fields.

    Returns:
        OptionSpec: The inferred option.
    """
    metadata = dict(metadata or {})
    annotation = metadata.pop("type", annotation)
    if annotation is inspect.Parameter.empty or isinstance(annotation, str):
        annotation = str
    required = default is inspect.Parameter.empty
    fields: dict[str, Any] = {
        "arity": Arity.SCALAR,
        "type": annotation,
        "required": required,
        "default": None if required else default,
        "dest": name,
    }

    target = _strip_optional(annotation)
    origin = get_origin(target) or target
    args = get_args(target)
    if target is bool:
        fields.update(arity=Arity.FLAG, type=str, required=False)
        fields["default"] = None if required else bool(default)
    elif origin in _VECTOR_ORIGINS:
        fields.update(
            arity=Arity.VECTOR,
            type=_element_type(args, 0),
            collection=_VECTOR_ORIGINS[origin],
        )
    elif origin is dict:
        fields.update(arity=Arity.MAP, type=_element_type(args, 1))

    aliases = metadata.pop("aliases", f"--{name.replace('_', '-')}")
    fields.update(metadata)
    return OptionSpec(aliases, **fields)


def infer_schema(
    func: Callable[..., Any],
    route: str | Iterable[RouteSegment] = "",
    description: str | None = None,
    examples: Iterable[str] = (),
    option_metadata: dict[str, str | dict[str, Any]] | None = None,
) -> Schema:
    """
    Build a schema from a callable's signature and a route.

    Args:
        func (Callable): The handler function.
        route (str | Iterable[RouteSegment]): Route text such as "run <target>".
        description (str | None): Defaults to the first line of the docstring.
        examples (Iterable[str]): Example command lines without the program.
        option_metadata (dict | None): Per-parameter overrides, see module docs.

    Raises:
        CliConfigurationError: If `func` is not callable or a route argument has
            no matching parameter.
    """
    if not callable(func):
        raise CliConfigurationError(f"Cannot infer a schema from {func!r}.")
    option_metadata = option_metadata or {}
    segments = parse_route(route) if isinstance(route, str) else tuple(route)
    parameters = inspect.signature(func).parameters
    hints = _resolve_hints(func)
    accepts_kwargs = any(
        param.kind is inspect.Parameter.VAR_KEYWORD for param in parameters.values()
    )

    typed_segments: list[RouteSegment] = []
    argument_dests: set[str] = set()
    for segment in segments:
        if isinstance(segment, ArgumentSegment):
            parameter = parameters.get(segment.dest)
            if parameter is None and not accepts_kwargs:
                raise CliConfigurationError(
                    f"Route argument '{segment.role}' has no parameter named "
                    f"'{segment.dest}' in {getattr(func, '__name__', func)!r}."
                )
            if parameter is not None and segment.type is str and segment.converter is None:
                annotation = hints.get(segment.dest, str)
                segment = ArgumentSegment(
                    segment.role,
                    dest=segment.dest,
                    type=annotation,
                    description=segment.description,
                )
            argument_dests.add(segment.dest)
        typed_segments.append(segment)

    options = []
    for name, parameter in parameters.items():
        if parameter.kind not in _BINDABLE_KINDS or name in argument_dests:
            continue
        raw_metadata = option_metadata.get(name, {})
        metadata = (
            {"description": raw_metadata} if isinstance(raw_metadata, str) else raw_metadata
        )
        options.append(
            infer_option(name, hints.get(name, parameter.annotation), parameter.default, metadata)
        )

    if description is None:
        doc = inspect.getdoc(func) or ""
        description = doc.splitlines()[0] if doc else ""

    return Schema(
        segments=tuple(typed_segments),
        options=tuple(options),
        description=description,
        examples=tuple(examples),
    )
