# Cliroute CLI Routing Engine — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Operand materializers turn captured text into typed handler arguments.

There is one materializer class per arity (`FlagMaterializer`,
`ScalarMaterializer`, `VectorMaterializer`, `MapMaterializer`) plus
`ArgumentMaterializer` for positional route arguments. Each one resolves its
element converter in `__init__`, so an unsupported type or a broken custom
converter fails when the handler is registered.

All materializers share one contract:

    materializer.materialize(captures, decode) -> value

`captures` are the raw (still encoded) captures of the operand's group in
command line order and `decode` is the token map of the invocation.

Failures caused by the user's text raise a `CliUsageError` subclass. A converter
that fails with anything other than `ValueError` raises `CliConfigurationError`.
"""
from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections import deque
from typing import Any, Callable

from cliroute.arity import Arity, CollectionKind
from cliroute.comparers import ComparerDict, unique
from cliroute.converters import resolve_converter, type_name
from cliroute.exceptions import (
    CliConfigurationError,
    CliUsageError,
    ConflictingValuesError,
    IncompleteMapEntryError,
    InvalidOperandError,
    MissingOperandError,
)
from cliroute.schema import ArgumentSegment, OptionSpec

Decoder = Callable[[str], str]

_MAP_ENTRY = re.compile(
    r"^(?:\.(?P<dot>\S*)|\[\s*(?P<bracket>[^\]\s]*)\s*\])?(?:\s+(?P<value>\S+))?\s*$"
)


class Materializer(ABC):
    """
    Base class for operand materializers.

    Attributes:
        group (str): Name of the capture group the operand is read from.
        dest (str): Keyword the value is passed under.
        name (str): Operand name used in messages.
    """

    arity: Arity

    def __init__(
        self,
        group: str,
        dest: str,
        name: str,
        target_type: Any = str,
        converter: Callable[[str], Any] | None = None,
    ):
        self.group = group
        self.dest = dest
        self.name = name
        self.target_type = target_type
        self.convert = resolve_converter(target_type, converter)

    @abstractmethod
    def materialize(self, captures: list[str], decode: Decoder) -> Any:
        """Build the operand value from the group's captures."""

    def _convert(self, literal: str) -> Any:
        try:
            return self.convert(literal)
        except CliUsageError:
            raise
        except ValueError as error:
            raise InvalidOperandError(
                f"Invalid input for {self.name}: '{literal}' is not a valid "
                f"{type_name(self.target_type)}. {error}"
            ) from error
        except Exception as error:
            raise CliConfigurationError(
                f"The converter of {self.name} failed on '{literal}': {error}"
            ) from error

    def __repr__(self) -> str:
        return f"{type(self).__name__}(dest={self.dest!r}, group={self.group!r})"


class ArgumentMaterializer(Materializer):
    """Materializes a positional route argument."""

    def __init__(self, segment: ArgumentSegment, group: str):
        super().__init__(
            group,
            segment.dest,
            f"argument '{segment.usage()}'",
            segment.type,
            segment.converter,
        )
        self.segment = segment

    def materialize(self, captures: list[str], decode: Decoder) -> Any:
        if not captures:
            raise MissingOperandError(f"The required {self.name} is missing.")
        return self._convert(decode(captures[0]))


class OptionMaterializer(Materializer):
    """Shared behavior of option materializers."""

    def __init__(self, option: OptionSpec, group: str, target_type: Any = None):
        super().__init__(
            group,
            option.dest,
            f"option '{option.name}'",
            option.type if target_type is None else target_type,
            option.converter,
        )
        self.option = option
        if option.sample is not None:
            self._check_sample(option.sample)

    def _check_sample(self, sample: str) -> None:
        try:
            self.convert(sample)
        except Exception as error:
            raise CliConfigurationError(
                f"The converter of {self.name} rejects its sample '{sample}': {error}"
            ) from error

    def materialize(self, captures: list[str], decode: Decoder) -> Any:
        if not captures:
            if self.option.required:
                raise MissingOperandError(
                    f"The required option '{self.option.name}' is missing."
                )
            return self.absent()
        return self.present(captures, decode)

    @abstractmethod
    def absent(self) -> Any:
        """Value used when the option does not appear."""

    @abstractmethod
    def present(self, captures: list[str], decode: Decoder) -> Any:
        """Value built from at least one capture."""


class FlagMaterializer(OptionMaterializer):
    """Presence only. Absence is not an error unless the flag is required."""

    arity = Arity.FLAG

    def __init__(self, option: OptionSpec, group: str):
        super().__init__(option, group, target_type=str)

    def absent(self) -> bool:
        return bool(self.option.default) if self.option.default is not None else False

    def present(self, captures: list[str], decode: Decoder) -> bool:
        return True


class ScalarMaterializer(OptionMaterializer):
    """Exactly one value. Different values for the same option conflict."""

    arity = Arity.SCALAR

    def absent(self) -> Any:
        return self.option.default

    def present(self, captures: list[str], decode: Decoder) -> Any:
        tokens = [capture.strip() for capture in captures]
        if not all(tokens):
            raise InvalidOperandError(f"The option '{self.option.name}' expects a value.")
        # A quoted empty string is a token whose decoded value is "".
        values = [decode(token) for token in tokens]
        if len(set(values)) > 1:
            raise ConflictingValuesError(
                f"The option '{self.option.name}' has multiple conflicting values: "
                + ", ".join(f"'{value}'" for value in values)
            )
        return self._convert(values[0])


class VectorMaterializer(OptionMaterializer):
    """
    Zero or more values collected into the declared backing collection.

    With `csv` enabled each token is split on commas before decoding, so quoted
    text containing commas stays in one piece.
    """

    arity = Arity.VECTOR

    def fragments(self, captures: list[str]) -> list[str]:
        fragments: list[str] = []
        for capture in captures:
            for token in capture.split():
                if self.option.csv:
                    fragments.extend(part for part in token.split(",") if part)
                else:
                    fragments.append(token)
        return fragments

    def collect(self, items: list[Any]) -> Any:
        kind = self.option.collection
        if kind is CollectionKind.QUEUE:
            return deque(items)
        if kind is CollectionKind.SET:
            return set(unique(items, self.option.comparer))
        return list(items)

    def build(self, literals: list[str]) -> Any:
        if self.option.collection is CollectionKind.SET:
            literals = unique(literals, self.option.comparer)
        return self.collect([self._convert(literal) for literal in literals])

    def absent(self) -> Any:
        if self.option.default is not None:
            return self.collect(list(self.option.default))
        return self.collect([])

    def present(self, captures: list[str], decode: Decoder) -> Any:
        literals = [decode(fragment) for fragment in self.fragments(captures)]
        if not literals:
            raise InvalidOperandError(
                f"The option '{self.option.name}' expects at least one value."
            )
        return self.build(literals)


class MapMaterializer(OptionMaterializer):
    """
    Key-value pairs written as `--opt.key value` or `--opt[key] value`.

    Keys are compared with the option's comparer, case-insensitive by default.
    A repeated key overwrites the earlier value.
    """

    arity = Arity.MAP

    def absent(self) -> ComparerDict:
        return ComparerDict(self.option.comparer, self.option.default or {})

    def parse(self, capture: str, decode: Decoder) -> tuple[str, str]:
        entry = _MAP_ENTRY.match(capture)
        if entry is None:
            raise InvalidOperandError(
                f"Invalid input for option '{self.option.name}': '{decode(capture.strip())}'."
            )
        key = entry.group("dot") or entry.group("bracket") or ""
        value = entry.group("value") or ""
        if key and not value:
            raise IncompleteMapEntryError(
                f"A value is missing for the key '{decode(key)}' "
                f"of option '{self.option.name}'."
            )
        if value and not key:
            raise IncompleteMapEntryError(
                f"A key is missing for the value '{decode(value)}' "
                f"of option '{self.option.name}'."
            )
        if not key:
            raise IncompleteMapEntryError(
                f"The option '{self.option.name}' expects a key-value pair such as "
                f"'{self.option.name}.key value'."
            )
        return decode(key), decode(value)

    def present(self, captures: list[str], decode: Decoder) -> ComparerDict:
        result = ComparerDict(self.option.comparer)
        for capture in captures:
            key, value = self.parse(capture, decode)
            result[key] = self._convert(value)
        return result


MATERIALIZERS: dict[Arity, type[OptionMaterializer]] = {
    Arity.FLAG: FlagMaterializer,
    Arity.SCALAR: ScalarMaterializer,
    Arity.VECTOR: VectorMaterializer,
    Arity.MAP: MapMaterializer,
}


def build_materializer(option: OptionSpec, group: str) -> OptionMaterializer:
    """Create the materializer for an option's arity."""
    return MATERIALIZERS[option.arity](option, group)
