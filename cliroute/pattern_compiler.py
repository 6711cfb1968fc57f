# Cliroute CLI Routing Engine — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Compiles a handler `Schema` into a matching grammar.

`compile_schema` produces a `CompiledPattern` made of two regular expressions:

- The optimal expression matches a whole encoded command line:

      ^\\s*(?P<program>\\S+)(?P<optimal>RUN0 \\s+SEG0 RUN1 \\s+SEG1 ... RUNn)\\s*$

  Every route segment appears once, in declared order. Each `RUNk` is a named
  run of recognized options, so options may sit between segments but no other
  token may. A literal segment is the alternation of its aliases, longest
  first. An argument segment refuses any literal alias of the schema and any
  token starting with the option marker.

- The scanner expression matches one token (plus the values it consumes) at a
  time. It has one alternative for the union of literal aliases, one per
  option, one for plain `word` tokens and the reserved `unmatched` group for
  anything else. Each alternative holds exactly one named group, so
  `match.lastgroup` identifies the alternative that matched.

Python's `re` keeps only the last capture of a repeated group. Option values
are therefore recovered by running the scanner over each option run of an
optimal match, and the fuzzy branch is evaluated by running the scanner over
the whole line.

Group names are derived from the declaration itself (`seg_<digest>` and
`opt_<digest>`, BLAKE2s), so compiling the same schema twice yields
byte-identical expressions.
"""
from __future__ import annotations

import hashlib
import re
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Mapping

from cliroute.arity import Arity
from cliroute.logger import logger
from cliroute.schema import ArgumentSegment, LiteralSegment, OptionSpec, RouteSegment, Schema

PROGRAM_GROUP = "program"
OPTIMAL_GROUP = "optimal"
LITERAL_GROUP = "literal"
WORD_GROUP = "word"
UNMATCHED_GROUP = "unmatched"

TOKEN_END = r"(?=\s|$)"
VALUE_TOKEN = r"[^\s-]\S*"

_PROGRAM = re.compile(r"^\s*(?P<program>\S+)")


def _digest(*parts: object) -> str:
    text = "\x1f".join(str(part) for part in parts)
    return hashlib.blake2s(text.encode("utf-8"), digest_size=4).hexdigest()


def segment_group_name(index: int, segment: RouteSegment) -> str:
    """Deterministic group name of the route segment at `index`."""
    if isinstance(segment, LiteralSegment):
        return f"seg_{_digest('literal', index, *segment.aliases)}"
    if isinstance(segment, ArgumentSegment):
        return f"seg_{_digest('argument', index, segment.role)}"
    raise TypeError(f"Unsupported route segment: {segment!r}")


def option_group_name(option: OptionSpec) -> str:
    """Deterministic group name of an option."""
    return f"opt_{_digest(option.arity.value, *option.aliases)}"


def run_group_name(index: int) -> str:
    return f"run{index}"


def alias_alternation(aliases: Iterable[str]) -> str:
    """Escaped alternation of aliases, longest first so short aliases never shadow."""
    ordered = sorted(set(aliases), key=lambda alias: (-len(alias), alias))
    return "|".join(re.escape(alias) for alias in ordered)


def _group(name: str | None, body: str) -> str:
    return f"(?P<{name}>{body})" if name else f"(?:{body})"


def literal_fragment(aliases: Iterable[str], name: str | None = None) -> str:
    return f"{_group(name, alias_alternation(aliases))}{TOKEN_END}"


def argument_fragment(literal_aliases: Iterable[str], name: str | None = None) -> str:
    literal_aliases = tuple(literal_aliases)
    guard = ""
    if literal_aliases:
        guard = f"(?!(?:{alias_alternation(literal_aliases)}){TOKEN_END})"
    return _group(name, f"{guard}{VALUE_TOKEN}")


def option_fragment(option: OptionSpec, name: str | None = None) -> str:
    """
    Sub-pattern of one option.

    The named group (when `name` is given) holds the alias for flags and the
    value part for every other arity.
    """
    aliases = alias_alternation(option.aliases)
    if option.arity is Arity.FLAG:
        return f"{_group(name, aliases)}{TOKEN_END}"
    if option.arity is Arity.SCALAR:
        value = rf"(?:\s+{VALUE_TOKEN})?"
    elif option.arity is Arity.VECTOR:
        value = rf"(?:\s+{VALUE_TOKEN})*"
    else:
        value = rf"(?:\.\S*|\[[^\]\s]*\])?(?:\s+{VALUE_TOKEN})?"
    return f"(?:{aliases}){_group(name, value)}{TOKEN_END}"


@dataclass(frozen=True)
class MatchResult:
    """
    Outcome of matching one encoded command line against a compiled pattern.

    `groups` maps group names to every capture, in command line order. For an
    optimal match each segment group holds one capture; for a fuzzy match
    groups hold whatever the scanner could attribute. Tokens nobody claimed
    are listed in `unmatched`.
    """

    success: bool
    optimal: bool = False
    program: str | None = None
    groups: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    unmatched: tuple[str, ...] = ()

    def captures(self, name: str) -> list[str]:
        return list(self.groups.get(name, ()))

    def succeeded(self, name: str) -> bool:
        return bool(self.groups.get(name))

    @property
    def successful_groups(self) -> int:
        return sum(1 for captures in self.groups.values() if captures)


@dataclass(frozen=True)
class CompiledPattern:
    """Immutable matching grammar of one schema."""

    schema: Schema
    expression: str
    scanner_expression: str
    segment_groups: tuple[str, ...]
    option_groups: tuple[str, ...]
    optimal_regex: re.Pattern = field(repr=False, compare=False)
    scanner_regex: re.Pattern = field(repr=False, compare=False)

    def is_match(self, command_line: str) -> bool:
        """True when the optimal branch matches the encoded command line."""
        return self.optimal_regex.match(command_line) is not None

    def match(self, command_line: str) -> MatchResult:
        """Match the optimal branch, falling back to the fuzzy branch."""
        optimal = self.optimal_regex.match(command_line)
        if optimal:
            return self._optimal_result(command_line, optimal)
        return self.match_fuzzy(command_line)

    def scan(
        self, text: str, pos: int = 0, endpos: int | None = None
    ) -> Iterator[tuple[str, str]]:
        """Yield `(group name, capture)` for each token between `pos` and `endpos`."""
        endpos = len(text) if endpos is None else endpos
        while pos < endpos:
            match = self.scanner_regex.match(text, pos, endpos)
            if match is None or match.lastgroup is None:
                break
            yield match.lastgroup, match.group(match.lastgroup)
            pos = match.end()

    def _optimal_result(self, command_line: str, match: re.Match) -> MatchResult:
        groups: dict[str, tuple[str, ...]] = {
            name: (match.group(name),) for name in self.segment_groups
        }
        if self.option_groups:
            option_names = set(self.option_groups)
            captures: dict[str, list[str]] = defaultdict(list)
            for index in range(len(self.segment_groups) + 1):
                start, end = match.span(run_group_name(index))
                for name, capture in self.scan(command_line, start, end):
                    if name in option_names:
                        captures[name].append(capture)
            groups.update((name, tuple(values)) for name, values in captures.items())
        return MatchResult(
            success=True,
            optimal=True,
            program=match.group(PROGRAM_GROUP),
            groups=groups,
        )

    def match_fuzzy(self, command_line: str) -> MatchResult:
        """
        Evaluate the fuzzy branch.

        Tokens may appear in any order. A literal segment succeeds wherever one
        of its aliases appears. An argument segment succeeds only for a word
        whose preceding tokens satisfy the segments declared before it.
        """
        program = _PROGRAM.match(command_line)
        if program is None:
            return MatchResult(success=False)

        segments = self.schema.segments
        groups: dict[str, list[str]] = defaultdict(list)
        tokens: list[tuple[str, str]] = []
        for name, capture in self.scan(command_line, program.end()):
            if name == LITERAL_GROUP:
                for index, segment in enumerate(segments):
                    if (
                        isinstance(segment, LiteralSegment)
                        and capture.lower() in segment.aliases
                    ):
                        groups[self.segment_groups[index]].append(capture)
                tokens.append((name, capture))
            elif name in (WORD_GROUP, UNMATCHED_GROUP):
                tokens.append((name, capture))
            else:
                groups[name].append(capture)

        claimed: set[int] = set()
        for index, segment in enumerate(segments):
            if not isinstance(segment, ArgumentSegment):
                continue
            for position, (kind, text) in enumerate(tokens):
                if kind == WORD_GROUP and self._in_context(tokens, position, index):
                    groups[self.segment_groups[index]].append(text)
                    claimed.add(position)

        unmatched = tuple(
            text
            for position, (kind, text) in enumerate(tokens)
            if kind == UNMATCHED_GROUP or (kind == WORD_GROUP and position not in claimed)
        )
        return MatchResult(
            success=False,
            optimal=False,
            program=program.group(PROGRAM_GROUP),
            groups={name: tuple(values) for name, values in groups.items()},
            unmatched=unmatched,
        )

    def _in_context(self, tokens: list[tuple[str, str]], position: int, index: int) -> bool:
        if position < index:
            return False
        for offset, segment in enumerate(self.schema.segments[:index]):
            kind, text = tokens[position - index + offset]
            if isinstance(segment, LiteralSegment):
                if kind != LITERAL_GROUP or text.lower() not in segment.aliases:
                    return False
            elif kind != WORD_GROUP:
                return False
        return True


def compile_schema(schema: Schema) -> CompiledPattern:
    """
    Compile a schema into its matching grammar.

    This is a pure function of the schema: the same declaration always yields
    the same expressions and group names.
    """
    literal_aliases = schema.literal_aliases
    segment_groups = tuple(
        segment_group_name(index, segment) for index, segment in enumerate(schema.segments)
    )
    option_groups = tuple(option_group_name(option) for option in schema.options)

    options = "|".join(option_fragment(option) for option in schema.options)

    def run(index: int) -> str:
        if not options:
            return ""
        return rf"(?P<{run_group_name(index)}>(?:\s+(?:{options}))*)"

    body = [run(0)]
    for index, segment in enumerate(schema.segments):
        if isinstance(segment, LiteralSegment):
            fragment = literal_fragment(segment.aliases, segment_groups[index])
        else:
            fragment = argument_fragment(literal_aliases, segment_groups[index])
        body.append(rf"\s+{fragment}")
        body.append(run(index + 1))
    expression = (
        rf"^\s*(?P<{PROGRAM_GROUP}>\S+)(?P<{OPTIMAL_GROUP}>{''.join(body)})\s*$"
    )

    alternatives = []
    if literal_aliases:
        alternatives.append(literal_fragment(literal_aliases, LITERAL_GROUP))
    alternatives.extend(
        option_fragment(option, name) for option, name in zip(schema.options, option_groups)
    )
    alternatives.append(f"(?P<{WORD_GROUP}>{VALUE_TOKEN})")
    alternatives.append(rf"(?P<{UNMATCHED_GROUP}>\S+)")
    scanner_expression = rf"\s+(?:{'|'.join(alternatives)})"

    logger.debug("Compiled route '%s': %s", schema.route, expression)
    return CompiledPattern(
        schema=schema,
        expression=expression,
        scanner_expression=scanner_expression,
        segment_groups=segment_groups,
        option_groups=option_groups,
        optimal_regex=re.compile(expression, re.IGNORECASE),
        scanner_regex=re.compile(scanner_expression, re.IGNORECASE),
    )
