# Cliroute CLI Routing Engine — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Defines the schema model that describes one command handler.

A `Schema` is an ordered route of segments plus a set of options:

- `LiteralSegment`: a sub-command token with one or more aliases (`deploy|push`).
- `ArgumentSegment`: a positional value (`<target>`).
- `OptionSpec`: a named option with aliases and an `Arity` (Flag, Scalar,
  Vector, Map).

Schemas are immutable once built. All validation happens in `__post_init__`, so a
mistake in a declaration raises `CliConfigurationError` when the handler is
registered rather than when a user types a command.

Routes can be written as text, where `<role>` marks an argument:

    Schema.from_route("deploy|push <target>", options=[OptionSpec("--tag|-t")])

or assembled with `SchemaBuilder`:

    schema = (
        SchemaBuilder("Deploy a target")
        .literal("deploy", "push")
        .argument("target")
        .option("--tag", "-t", arity="vector", csv=True)
        .build()
    )
"""
from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Iterable

from cliroute.arity import Arity, CollectionKind
from cliroute.comparers import IGNORE_CASE, ORDINAL, KeyComparer, resolve_comparer
from cliroute.exceptions import CliConfigurationError

OPTION_MARKER = "-"

_ARGUMENT_TOKEN = re.compile(r"^<(?P<role>[^<>\s]+)>$")
_INVALID_OPTION_CHARS = re.compile(r"[\s.\[\]=\"%]")
_INVALID_LITERAL_CHARS = re.compile(r"[\s\"%]")


def split_aliases(aliases: str | Iterable[str]) -> list[str]:
    """Split `"a|b"` style declarations into a flat alias list."""
    if isinstance(aliases, str):
        aliases = [aliases]
    result: list[str] = []
    for alias in aliases:
        if not isinstance(alias, str):
            raise CliConfigurationError(f"Alias {alias!r} must be a string.")
        result.extend(part.strip() for part in alias.split("|"))
    return result


def normalize_aliases(aliases: str | Iterable[str]) -> tuple[str, ...]:
    """Lower-case aliases and drop duplicates, keeping declaration order."""
    normalized: list[str] = []
    for alias in split_aliases(aliases):
        alias = alias.lower()
        if not alias:
            raise CliConfigurationError("Aliases must not be empty.")
        if alias not in normalized:
            normalized.append(alias)
    if not normalized:
        raise CliConfigurationError("At least one alias is required.")
    return tuple(normalized)


def to_dest(name: str) -> str:
    return name.lstrip(OPTION_MARKER).replace("-", "_").lower()


class RouteSegment(ABC):
    """One positional unit of a route: a literal sub-command or an argument."""

    @abstractmethod
    def usage(self) -> str:
        """Text shown for the segment in usage lines."""


@dataclass(frozen=True)
class LiteralSegment(RouteSegment):
    """A sub-command token matched by any of its aliases."""

    aliases: tuple[str, ...]

    def __post_init__(self):
        aliases = normalize_aliases(self.aliases)
        for alias in aliases:
            if alias.startswith(OPTION_MARKER):
                raise CliConfigurationError(
                    f"Sub-command alias '{alias}' must not start with '{OPTION_MARKER}'."
                )
            if _INVALID_LITERAL_CHARS.search(alias):
                raise CliConfigurationError(
                    f"Sub-command alias '{alias}' contains an invalid character."
                )
        object.__setattr__(self, "aliases", aliases)

    @property
    def name(self) -> str:
        return self.aliases[0]

    def usage(self) -> str:
        return "|".join(self.aliases)


@dataclass(frozen=True)
class ArgumentSegment(RouteSegment):
    """
    A positional value.

    Attributes:
        role (str): Name shown in usage lines as `<ROLE>`.
        dest (str | None): Keyword the value is passed to the handler under.
            Defaults to the role.
        type (Any): Target type of the value.
        converter (Callable | None): Explicit converter, overrides `type`.
        description (str): Help text.
    """

    role: str
    dest: str | None = None
    type: Any = str
    converter: Callable[[str], Any] | None = field(default=None, compare=False)
    description: str = ""

    def __post_init__(self):
        role = self.role.strip() if isinstance(self.role, str) else ""
        if not role or _INVALID_LITERAL_CHARS.search(role):
            raise CliConfigurationError(f"Invalid argument role: {self.role!r}")
        object.__setattr__(self, "role", role)
        object.__setattr__(self, "dest", self.dest or to_dest(role))

    def usage(self) -> str:
        return f"<{self.role.upper()}>"


@dataclass(frozen=True)
class OptionSpec:
    """
    Declaration of a named option.

    Attributes:
        aliases (tuple[str, ...]): One or more aliases such as `("--tag", "-t")`.
            A single string may list several aliases separated by `|`.
        arity (Arity): Shape of the value. Defaults to `Arity.SCALAR`.
        dest (str | None): Keyword the value is passed to the handler under.
            Defaults to the longest alias without its dashes.
        type (Any): Target type of each element (the map value type for Map).
        converter (Callable | None): Explicit converter, overrides `type`.
        csv (bool): Split Vector values on commas.
        collection (CollectionKind): Backing collection of a Vector option.
        comparer (KeyComparer | str | Callable | None): Equality policy for map
            keys and set items. Map options default to case-insensitive keys
            (`IGNORE_CASE`). Everything else defaults to `ORDINAL`.
        required (bool): Absence is a usage error.
        default (Any): Value used when the option is absent.
        description (str): Help text.
        sample (str | None): Literal converted at registration time to check a
            custom converter.
    """

    aliases: tuple[str, ...]
    arity: Arity = Arity.SCALAR
    dest: str | None = None
    type: Any = str
    converter: Callable[[str], Any] | None = field(default=None, compare=False)
    csv: bool = False
    collection: CollectionKind = CollectionKind.LIST
    comparer: KeyComparer | None = field(default=None, compare=False)
    required: bool = False
    default: Any = field(default=None, compare=False)
    description: str = ""
    sample: str | None = None

    def __post_init__(self):
        aliases = normalize_aliases(self.aliases)
        for alias in aliases:
            if not alias.startswith(OPTION_MARKER) or alias.strip(OPTION_MARKER) == "":
                raise CliConfigurationError(
                    f"Option alias '{alias}' must start with '{OPTION_MARKER}' "
                    "followed by a name."
                )
            if _INVALID_OPTION_CHARS.search(alias):
                raise CliConfigurationError(
                    f"Option alias '{alias}' contains an invalid character."
                )
        object.__setattr__(self, "aliases", aliases)

        try:
            arity = Arity(self.arity)
            collection = CollectionKind(self.collection)
            comparer = resolve_comparer(
                self.comparer, IGNORE_CASE if arity is Arity.MAP else ORDINAL
            )
        except ValueError as error:
            raise CliConfigurationError(f"Option '{self.name}': {error}") from error
        object.__setattr__(self, "arity", arity)
        object.__setattr__(self, "collection", collection)
        object.__setattr__(self, "comparer", comparer)

        if self.csv and arity is not Arity.VECTOR:
            raise CliConfigurationError(
                f"Option '{self.name}' enables CSV splitting but is not a vector."
            )
        if arity is Arity.FLAG and self.converter is not None:
            raise CliConfigurationError(f"Flag option '{self.name}' takes no converter.")
        object.__setattr__(self, "dest", self.dest or to_dest(self.name))

    @property
    def name(self) -> str:
        """The longest alias, used in messages."""
        return max(self.aliases, key=len)

    def usage(self) -> str:
        aliases = "|".join(self.aliases)
        if self.arity is Arity.FLAG:
            return aliases
        if self.arity is Arity.SCALAR:
            return f"{aliases} <VALUE>"
        if self.arity is Arity.VECTOR:
            return f"{aliases} <VALUE>..."
        return f"{aliases}.<KEY> <VALUE>"


def parse_route(route: str) -> tuple[RouteSegment, ...]:
    """
    Parse route text into segments.

    `<role>` tokens become arguments, every other token a literal whose aliases
    are separated by `|`.
    """
    segments: list[RouteSegment] = []
    for token in route.split():
        argument = _ARGUMENT_TOKEN.match(token)
        if argument:
            segments.append(ArgumentSegment(argument.group("role")))
        else:
            segments.append(LiteralSegment(token))
    return tuple(segments)


@dataclass(frozen=True)
class Schema:
    """
    Immutable description of one handler.

    Attributes:
        segments (tuple[RouteSegment, ...]): Route in expected token order.
        options (tuple[OptionSpec, ...]): Named options.
        description (str): One-line description shown in help.
        examples (tuple[str, ...]): Example command lines without the program.
    """

    segments: tuple[RouteSegment, ...] = ()
    options: tuple[OptionSpec, ...] = ()
    description: str = ""
    examples: tuple[str, ...] = ()

    def __post_init__(self):
        segments = (
            parse_route(self.segments)
            if isinstance(self.segments, str)
            else tuple(self.segments)
        )
        object.__setattr__(self, "segments", segments)
        object.__setattr__(self, "options", tuple(self.options))
        object.__setattr__(self, "examples", tuple(self.examples))
        self._validate()

    @classmethod
    def from_route(
        cls,
        route: str,
        options: Iterable[OptionSpec] = (),
        description: str = "",
        examples: Iterable[str] = (),
    ) -> Schema:
        return cls(parse_route(route), tuple(options), description, tuple(examples))

    def _validate(self) -> None:
        for segment in self.segments:
            if not isinstance(segment, RouteSegment):
                raise CliConfigurationError(f"Invalid route segment: {segment!r}")

        seen_aliases: dict[str, OptionSpec] = {}
        for option in self.options:
            if not isinstance(option, OptionSpec):
                raise CliConfigurationError(f"Invalid option declaration: {option!r}")
            for alias in option.aliases:
                if alias in seen_aliases:
                    raise CliConfigurationError(
                        f"Option alias '{alias}' is declared by both "
                        f"'{seen_aliases[alias].name}' and '{option.name}'."
                    )
                seen_aliases[alias] = option

        seen_dests: set[str] = set()
        for dest in [argument.dest for argument in self.arguments] + [
            option.dest for option in self.options
        ]:
            if dest in seen_dests:
                raise CliConfigurationError(
                    f"Destination '{dest}' is bound by more than one operand."
                )
            seen_dests.add(dest)

    @property
    def arguments(self) -> tuple[ArgumentSegment, ...]:
        return tuple(
            segment for segment in self.segments if isinstance(segment, ArgumentSegment)
        )

    @property
    def literals(self) -> tuple[LiteralSegment, ...]:
        return tuple(
            segment for segment in self.segments if isinstance(segment, LiteralSegment)
        )

    @property
    def literal_aliases(self) -> tuple[str, ...]:
        aliases: list[str] = []
        for literal in self.literals:
            aliases.extend(alias for alias in literal.aliases if alias not in aliases)
        return tuple(aliases)

    @property
    def route(self) -> str:
        return " ".join(segment.usage() for segment in self.segments)

    def with_options(self, *options: OptionSpec) -> Schema:
        """Return a copy with extra options appended."""
        if not options:
            return self
        return replace(self, options=self.options + tuple(options))

    def usage(self, program: str) -> str:
        parts = [program]
        if self.segments:
            parts.append(self.route)
        if self.options:
            parts.append("[options]")
        return " ".join(parts)


class SchemaBuilder:
    """Fluent builder for `Schema`."""

    def __init__(self, description: str = ""):
        self._description = description
        self._segments: list[RouteSegment] = []
        self._options: list[OptionSpec] = []
        self._examples: list[str] = []

    def literal(self, *aliases: str) -> SchemaBuilder:
        self._segments.append(LiteralSegment(aliases))
        return self

    def argument(self, role: str, **kwargs: Any) -> SchemaBuilder:
        self._segments.append(ArgumentSegment(role, **kwargs))
        return self

    def route(self, route: str) -> SchemaBuilder:
        self._segments.extend(parse_route(route))
        return self

    def option(self, *aliases: str, **kwargs: Any) -> SchemaBuilder:
        self._options.append(OptionSpec(aliases, **kwargs))
        return self

    def flag(self, *aliases: str, **kwargs: Any) -> SchemaBuilder:
        return self.option(*aliases, arity=Arity.FLAG, **kwargs)

    def example(self, *examples: str) -> SchemaBuilder:
        self._examples.extend(examples)
        return self

    def build(self) -> Schema:
        return Schema(
            segments=tuple(self._segments),
            options=tuple(self._options),
            description=self._description,
            examples=tuple(self._examples),
        )
