# Cliroute CLI Routing Engine — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Defines `Arity` and `CollectionKind`, the enums that describe the shape of an
option's value.

Both enums accept config-friendly aliases, so YAML/TOML handler declarations can
say `arity: list` or `collection: deque` and still resolve to a member.

Exports:
    - Arity: Flag, Scalar, Vector or Map.
    - CollectionKind: Backing collection of a Vector option.

Example:
    Arity("switch")         → Arity.FLAG
    Arity("dict")           → Arity.MAP
    CollectionKind("deque") → CollectionKind.QUEUE
"""
from __future__ import annotations

from enum import Enum


class Arity(Enum):
    """
    The cardinality of an option's value.

    Members:
        FLAG: Presence only, no value.
        SCALAR: Exactly one value.
        VECTOR: Zero or more values collected in order.
        MAP: Keyed values written as `--opt.key value` or `--opt[key] value`.

    Aliases:
        - "switch", "bool" → "flag"
        - "single", "value" → "scalar"
        - "list", "collection", "multiple" → "vector"
        - "dict", "dictionary", "keyvalue" → "map"
    """

    FLAG = "flag"
    SCALAR = "scalar"
    VECTOR = "vector"
    MAP = "map"

    @classmethod
    def choices(cls) -> list[Arity]:
        """Return a list of all arities."""
        return list(cls)

    @classmethod
    def _get_alias(cls, value: str) -> str:
        aliases = {
            "switch": "flag",
            "bool": "flag",
            "single": "scalar",
            "value": "scalar",
            "list": "vector",
            "collection": "vector",
            "multiple": "vector",
            "dict": "map",
            "dictionary": "map",
            "keyvalue": "map",
        }
        return aliases.get(value, value)

    @classmethod
    def _missing_(cls, value: object) -> Arity:
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
        """Return the string representation of the arity."""
        return self.value


class CollectionKind(Enum):
    """
    The backing collection built for a Vector option.

    Members:
        LIST: `list` in command line order.
        QUEUE: `collections.deque` in command line order (first in, first out).
        STACK: `list` in push order, the top of the stack is the last element.
        SET: `set` of unique items, deduplicated with the option's comparer.

    Aliases:
        - "deque", "fifo" → "queue"
        - "lifo" → "stack"
        - "unique" → "set"
    """

    LIST = "list"
    QUEUE = "queue"
    STACK = "stack"
    SET = "set"

    @classmethod
    def choices(cls) -> list[CollectionKind]:
        """Return a list of all collection kinds."""
        return list(cls)

    @classmethod
    def _get_alias(cls, value: str) -> str:
        aliases = {
            "deque": "queue",
            "fifo": "queue",
            "lifo": "stack",
            "unique": "set",
        }
        return aliases.get(value, value)

    @classmethod
    def _missing_(cls, value: object) -> CollectionKind:
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
        """Return the string representation of the collection kind."""
        return self.value
