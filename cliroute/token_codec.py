# Cliroute CLI Routing Engine — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Token encoding for raw command lines.

Before a command line reaches the matching grammar, every substring whose text
could confuse the grammar is replaced by an opaque placeholder token:

1. `"quoted text"` spans (environment references inside the quotes are
   expanded too),
2. `%NAME%` environment references that resolve (unresolved references are
   left untouched),
3. `--opt[key]` accessors, rewritten to the canonical `--opt.key` form,
4. the leading program path, reduced to its file name.

Placeholders look like `@tok01@`. They never contain whitespace and never start
with the option marker, so they always read as plain value tokens.

`encode` returns the encoded line and the `TokenMap` holding the substitutions.
The map is callable: `token_map(text)` decodes text into its value form
(placeholders replaced until nothing changes), while `token_map.restore(text)`
puts back the exact raw text, so `token_map.restore(encoded) == command_line`.

Example:
    encoded, decode = encode('tool.exe deploy --set[Region] "eu west"')
    # encoded == 'tool.exe deploy --set.@tok02@ @tok01@'
    decode("@tok01@")  # 'eu west'
"""
from __future__ import annotations

import ntpath
import os
import re
from dataclasses import dataclass
from typing import Iterable, Mapping

from cliroute.exceptions import TokenDecodingError
from cliroute.logger import logger

PLACEHOLDER_PREFIX = "@tok"
MAX_DECODE_PASSES = 1000

_PLACEHOLDER = re.compile(r"@tok\d+@")
_QUOTED = re.compile(r'"([^"]*)"')
_ENVIRONMENT_REFERENCE = re.compile(r"%([^%\s]+)%")
_ACCESSOR = re.compile(r"(?<=\s)(?P<option>-{1,2}[^\s\[\].]+)\[\s*(?P<key>[^\s\]]+)\s*\]")
_PROGRAM = re.compile(r"^\s*(?P<program>\S+)")


@dataclass(frozen=True)
class Substitution:
    """One placeholder: the marker written into the line, its raw text and value."""

    placeholder: str
    marker: str
    raw: str
    value: str


class TokenMap:
    """
    Encode/decode table for a single command line.

    A token map is scoped to one `encode` call and must not be shared between
    invocations.

    `reserved` lists texts that will be substituted into the line later; no
    placeholder is issued that occurs in them.
    """

    def __init__(self, command_line: str, reserved: Iterable[str] = ()):
        self.command_line = command_line
        self._reserved = tuple(reserved)
        self.program: str | None = None
        self._substitutions: dict[str, Substitution] = {}
        self._order: list[Substitution] = []
        self._counter = 0

    def __call__(self, text: str) -> str:
        return self.decode(text)

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, placeholder: object) -> bool:
        return placeholder in self._substitutions

    @property
    def substitutions(self) -> tuple[Substitution, ...]:
        return tuple(self._order)

    def _is_reserved(self, placeholder: str) -> bool:
        if placeholder in self.command_line:
            return True
        if any(placeholder in text for text in self._reserved):
            return True
        return any(
            placeholder in substitution.value or placeholder in substitution.raw
            for substitution in self._order
        )

    def _next_placeholder(self) -> str:
        while True:
            self._counter += 1
            placeholder = f"{PLACEHOLDER_PREFIX}{self._counter:02d}@"
            if not self._is_reserved(placeholder):
                return placeholder

    def substitute(self, raw: str, value: str, marker_prefix: str = "") -> str:
        """
        Record a substitution and return the marker to write into the line.

        Args:
            raw (str): Exact text being replaced, used by `restore`.
            value (str): Decoded value the placeholder stands for.
            marker_prefix (str): Text written in front of the placeholder, for
                rewrites that change surrounding syntax (the accessor dot).
        """
        placeholder = self._next_placeholder()
        substitution = Substitution(
            placeholder=placeholder,
            marker=f"{marker_prefix}{placeholder}",
            raw=raw,
            value=value,
        )
        self._substitutions[placeholder] = substitution
        self._order.append(substitution)
        return substitution.marker

    def decode(self, text: str) -> str:
        """
        Replace placeholders with their values until a fixed point is reached.

        Raises:
            TokenDecodingError: If the text keeps changing after
                `MAX_DECODE_PASSES` passes.
        """

        def expand(match: re.Match) -> str:
            substitution = self._substitutions.get(match.group(0))
            return substitution.value if substitution else match.group(0)

        for _ in range(MAX_DECODE_PASSES):
            decoded = _PLACEHOLDER.sub(expand, text)
            if decoded == text:
                return decoded
            text = decoded
        raise TokenDecodingError(
            f"Token substitution did not settle after {MAX_DECODE_PASSES} passes. "
            "The substitution table contains a cycle."
        )

    def restore(self, text: str) -> str:
        """Put back the raw text of every substitution, newest first."""
        for substitution in reversed(self._order):
            text = text.replace(substitution.marker, substitution.raw)
        return text


def _expand_environment(
    text: str, token_map: TokenMap, environ: Mapping[str, str]
) -> str:
    def replace(match: re.Match) -> str:
        name = match.group(1)
        value = environ.get(name)
        if value is None:
            logger.debug("Environment variable '%s' is not defined.", name)
            return match.group(0)
        return token_map.substitute(match.group(0), value)

    return _ENVIRONMENT_REFERENCE.sub(replace, text)


def program_name(path: str) -> str:
    """Return the file name of a program path written with either separator."""
    return ntpath.basename(path.rstrip("\\/")) or path


def encode(
    command_line: str, environ: Mapping[str, str] | None = None
) -> tuple[str, TokenMap]:
    """
    Encode a raw command line into the form the matching grammar expects.

    Args:
        command_line (str): Full command line, program name first.
        environ (Mapping[str, str] | None): Environment used to resolve
            `%NAME%` references. Defaults to `os.environ`.

    Returns:
        tuple[str, TokenMap]: The encoded line and its token map.
    """
    environ = os.environ if environ is None else environ
    # Placeholders must not occur in environment values substituted later.
    referenced = [
        environ[name]
        for name in _ENVIRONMENT_REFERENCE.findall(command_line)
        if name in environ
    ]
    token_map = TokenMap(command_line, reserved=referenced)

    def quote(match: re.Match) -> str:
        content = _expand_environment(match.group(1), token_map, environ)
        return token_map.substitute(match.group(0), content)

    text = _QUOTED.sub(quote, command_line)
    text = _expand_environment(text, token_map, environ)

    def accessor(match: re.Match) -> str:
        raw_key = match.group(0)[len(match.group("option")) :]
        marker = token_map.substitute(raw_key, match.group("key"), marker_prefix=".")
        return f"{match.group('option')}{marker}"

    text = _ACCESSOR.sub(accessor, text)

    program = _PROGRAM.match(text)
    if program:
        token = program.group("program")
        name = program_name(token_map.decode(token))
        token_map.program = name
        if name != token:
            marker = token_map.substitute(token, name)
            text = f"{text[: program.start('program')]}{marker}{text[program.end('program') :]}"

    logger.debug("Encoded command line: %s", text)
    return text, token_map
