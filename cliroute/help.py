# Cliroute CLI Routing Engine — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Help rendering for the cliroute pipeline.

The processor never prints help itself. When a command line selects no single
handler, or a `HelpSignal` is raised, it builds a `HelpRequest` and passes it to
its help renderer. Any callable accepting a `HelpRequest` can be used; the
default `RichHelpRenderer` prints usage lines, operand tables and examples to a
rich console.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from cliroute.arity import Arity
from cliroute.console import console as default_console
from cliroute.schema import Schema

if TYPE_CHECKING:
    from cliroute.handler import Handler


class HelpReason(Enum):
    """
    Why help is shown.

    Members:
        NO_MATCH: No handler matched the command line.
        AMBIGUOUS: More than one handler matched equally well.
        REQUESTED: A bundle, hook or handler asked for help.
    """

    NO_MATCH = "no_match"
    AMBIGUOUS = "ambiguous"
    REQUESTED = "requested"

    @classmethod
    def choices(cls) -> list[HelpReason]:
        return list(cls)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class HelpRequest:
    """
    Everything a renderer needs to show help.

    Attributes:
        program (str): Program name shown in usage lines.
        reason (HelpReason): Why help is shown.
        handlers (tuple[Handler, ...]): Handlers to describe, best candidates first.
        command_line (str): The command line that led here.
        unmatched (tuple[str, ...]): Tokens no handler could place.
    """

    program: str
    reason: HelpReason
    handlers: tuple[Handler, ...] = ()
    command_line: str = ""
    unmatched: tuple[str, ...] = ()


HelpRenderer = Callable[[HelpRequest], None]


def _default_text(value: object) -> str:
    if value is None or value == () or value == []:
        return ""
    return f"(default: {value})"


class RichHelpRenderer:
    """
    Prints help with rich.

    A single handler is described in full. Several handlers are listed one
    usage line each.

    Args:
        console (Console | None): Target console, defaults to the cliroute console.
        title (str | None): Optional heading printed first.
    """

    def __init__(self, console: Console | None = None, title: str | None = None):
        self.console = console or default_console
        self.title = title

    def __call__(self, request: HelpRequest) -> None:
        if self.title:
            self.console.print(f"[title]{escape(self.title)}[/]")
        self.render_reason(request)
        if len(request.handlers) == 1:
            self.render_handler(request.program, request.handlers[0])
        elif request.handlers:
            self.render_listing(request.program, request.handlers)
        else:
            self.console.print("[muted]No commands are available.[/]")

    def render_reason(self, request: HelpRequest) -> None:
        if request.reason is HelpReason.NO_MATCH:
            self.console.print("[error]The command line does not match any command.[/]")
            if request.unmatched:
                tokens = " ".join(request.unmatched)
                self.console.print(f"[muted]Not recognized:[/] {escape(tokens)}")
        elif request.reason is HelpReason.AMBIGUOUS:
            self.console.print(
                "[warning]The command line matches more than one command equally well.[/]"
            )

    def render_listing(self, program: str, handlers: tuple[Handler, ...]) -> None:
        table = Table(box=box.SIMPLE, show_header=False, pad_edge=False)
        table.add_column("Usage", style="usage", no_wrap=True)
        table.add_column("Description", style="muted")
        for handler in handlers:
            table.add_row(Text(handler.usage(program)), Text(handler.description))
        self.console.print("[title]Commands:[/]")
        self.console.print(table)

    def render_handler(self, program: str, handler: Handler) -> None:
        schema = handler.effective_schema
        usage = Text("Usage: ", style="title")
        usage.append(schema.usage(program), style="usage")
        self.console.print(usage)
        if handler.description:
            self.console.print()
            self.console.print(Text(handler.description))
        self.render_arguments(schema)
        self.render_options(schema)
        if schema.examples:
            self.console.print()
            self.console.print("[title]Examples:[/]")
            for example in schema.examples:
                self.console.print(Text(f"  {program} {example}", style="hint"))

    def render_arguments(self, schema: Schema) -> None:
        if not schema.arguments:
            return
        table = Table(box=box.SIMPLE, show_header=False, pad_edge=False)
        table.add_column("Argument", style="argument", no_wrap=True)
        table.add_column("Description")
        for argument in schema.arguments:
            table.add_row(Text(argument.usage()), Text(argument.description))
        self.console.print()
        self.console.print("[title]Arguments:[/]")
        self.console.print(table)

    def render_options(self, schema: Schema) -> None:
        if not schema.options:
            return
        table = Table(box=box.SIMPLE, show_header=False, pad_edge=False)
        table.add_column("Option", style="option", no_wrap=True)
        table.add_column("Description")
        table.add_column("Notes", style="muted")
        for option in schema.options:
            notes = "required" if option.required else ""
            if not notes and option.arity is not Arity.FLAG:
                notes = _default_text(option.default)
            table.add_row(Text(option.usage()), Text(option.description), Text(notes))
        self.console.print()
        self.console.print("[title]Options:[/]")
        self.console.print(table)
