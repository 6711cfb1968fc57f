# Cliroute CLI Routing Engine — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Similarity ranking of compiled patterns.

The score of a pattern against an encoded command line is the number of named
groups that captured something, the root match excluded. When the optimal
branch matches, every group under it (the `optimal` marker, each segment and
each option that appeared) counts `optimal_weight` instead of 1, so a handler
that satisfies its declared route always outranks one that only partially
matches through the fuzzy branch.

Ties are not resolved here. `group_by_rank` returns candidates grouped by equal
score and the execution pipeline decides what a group of several means.
"""
from __future__ import annotations

from itertools import groupby
from typing import Callable, Iterable, TypeVar

from cliroute.pattern_compiler import CompiledPattern, MatchResult

T = TypeVar("T")

DEFAULT_OPTIMAL_WEIGHT = 100


def score(match: MatchResult, optimal_weight: int = DEFAULT_OPTIMAL_WEIGHT) -> int:
    """Score an existing match result."""
    if match.optimal:
        return optimal_weight * (match.successful_groups + 1)
    return match.successful_groups


def rank(
    pattern: CompiledPattern,
    command_line: str,
    optimal_weight: int = DEFAULT_OPTIMAL_WEIGHT,
) -> int:
    """
    Rank how well `pattern` matches an encoded command line.

    Args:
        pattern (CompiledPattern): Compiled grammar of a handler.
        command_line (str): Encoded command line.
        optimal_weight (int): Weight of each group under the optimal branch.

    Returns:
        int: The similarity score, 0 when nothing matched.
    """
    return score(pattern.match(command_line), optimal_weight)


def group_by_rank(items: Iterable[T], key: Callable[[T], int]) -> list[tuple[int, list[T]]]:
    """
    Group items by score, highest score first.

    Items keep their relative order inside a group.
    """
    ranked = sorted(items, key=key, reverse=True)
    return [(rank_value, list(group)) for rank_value, group in groupby(ranked, key=key)]


def top_group(items: Iterable[T], key: Callable[[T], int]) -> tuple[int, list[T]]:
    """Return the highest scoring group, or `(0, [])` when there are no items."""
    groups = group_by_rank(items, key)
    if not groups:
        return 0, []
    return groups[0]
