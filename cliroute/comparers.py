# Cliroute CLI Routing Engine — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Equality policies for map keys and set items.

A `KeyComparer` reduces a value to the key it is compared by. `ORDINAL` compares
text exactly and `IGNORE_CASE` compares case-folded text. `ComparerDict` is a
mutable mapping that stores entries under the comparer key while remembering the
spelling the value was last written with.

Map options default to `IGNORE_CASE`, so `--set.Region eu --set.region us`
yields a single `region` entry holding `us`. Declare `comparer="ordinal"` on the
option when keys must stay distinct by case.
"""
from __future__ import annotations

from collections.abc import Hashable, Iterable, Iterator, Mapping, MutableMapping
from typing import Any, Callable


class KeyComparer:
    """Named equality policy defined by a key function."""

    def __init__(self, name: str, key: Callable[[Any], Hashable]):
        self.name = name
        self._key = key

    def key(self, value: Any) -> Hashable:
        return self._key(value)

    def equals(self, left: Any, right: Any) -> bool:
        return self.key(left) == self.key(right)

    def __repr__(self) -> str:
        return f"KeyComparer({self.name!r})"


def _fold(value: Any) -> Hashable:
    return value.casefold() if isinstance(value, str) else value


ORDINAL = KeyComparer("ordinal", lambda value: value)
IGNORE_CASE = KeyComparer("ignore_case", _fold)

_NAMED_COMPARERS = {
    "ordinal": ORDINAL,
    "exact": ORDINAL,
    "case_sensitive": ORDINAL,
    "ignore_case": IGNORE_CASE,
    "case_insensitive": IGNORE_CASE,
}


def resolve_comparer(
    comparer: KeyComparer | str | Callable[[Any], Hashable] | None,
    default: KeyComparer,
) -> KeyComparer:
    """
    Resolve a comparer declaration.

    Accepts a `KeyComparer`, one of the names "ordinal"/"ignore_case" (and their
    aliases), a key function, or `None` for `default`.

    Raises:
        ValueError: If the declaration is an unknown name or not callable.
    """
    if comparer is None:
        return default
    if isinstance(comparer, KeyComparer):
        return comparer
    if isinstance(comparer, str):
        normalized = comparer.strip().lower().replace("-", "_")
        if normalized not in _NAMED_COMPARERS:
            valid = ", ".join(sorted(_NAMED_COMPARERS))
            raise ValueError(f"Unknown comparer '{comparer}'. Must be one of: {valid}")
        return _NAMED_COMPARERS[normalized]
    if callable(comparer):
        return KeyComparer(getattr(comparer, "__name__", "custom"), comparer)
    raise ValueError(f"Invalid comparer: {comparer!r}")


def unique(items: Iterable[Any], comparer: KeyComparer) -> list[Any]:
    """Return items without duplicates under `comparer`, keeping first occurrences."""
    seen: set[Hashable] = set()
    result = []
    for item in items:
        key = comparer.key(item)
        if key in seen:
            continue
        seen.add(key)
        result.append(item)
    return result


class ComparerDict(MutableMapping):
    """
    A dictionary whose keys are compared through a `KeyComparer`.

    Writing an equal key replaces both the value and the stored key spelling.
    """

    def __init__(
        self,
        comparer: KeyComparer = IGNORE_CASE,
        data: Mapping[Any, Any] | Iterable[tuple[Any, Any]] | None = None,
    ):
        self.comparer = comparer
        self._store: dict[Hashable, tuple[Any, Any]] = {}
        if data is not None:
            self.update(data)

    def __setitem__(self, key: Any, value: Any) -> None:
        self._store[self.comparer.key(key)] = (key, value)

    def __getitem__(self, key: Any) -> Any:
        return self._store[self.comparer.key(key)][1]

    def __delitem__(self, key: Any) -> None:
        del self._store[self.comparer.key(key)]

    def __iter__(self) -> Iterator[Any]:
        return (key for key, _ in self._store.values())

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: object) -> bool:
        return self.comparer.key(key) in self._store

    def copy(self) -> ComparerDict:
        return ComparerDict(self.comparer, self.items())

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict(self.items())!r})"
