import io

from rich.console import Console

from cliroute.handler import Handler
from cliroute.help import HelpReason, HelpRequest, RichHelpRenderer
from cliroute.schema import ArgumentSegment, LiteralSegment, OptionSpec, Schema
from cliroute.themes import get_nord_theme


def render(request, title=None):
    console = Console(file=io.StringIO(), width=120, color_system=None, theme=get_nord_theme())
    RichHelpRenderer(console, title=title)(request)
    return console.file.getvalue()


def deploy_handler():
    return Handler(
        name="deploy",
        action=lambda target, tag, force: None,
        command_schema=Schema(
            (LiteralSegment("deploy"), ArgumentSegment("target", description="What to deploy")),
            options=(
                OptionSpec("--tag|-t", required=True, description="Image tag"),
                OptionSpec("--region", default="eu"),
                OptionSpec("--force", arity="flag"),
            ),
            description="Deploy a target.",
            examples=("deploy web --tag v1",),
        ),
    )


def test_single_handler_is_described_in_full():
    output = render(HelpRequest(program="ops", reason=HelpReason.REQUESTED, handlers=(deploy_handler(),)))

    assert "Usage:" in output
    assert "ops deploy <TARGET> [options]" in output
    assert "Deploy a target." in output
    assert "What to deploy" in output
    assert "--tag" in output and "required" in output
    assert "(default: eu)" in output
    assert "ops deploy web --tag v1" in output
    assert "does not match" not in output


def test_several_handlers_are_listed():
    status = Handler(name="status", action=lambda: None, command_schema="status")
    output = render(
        HelpRequest(program="ops", reason=HelpReason.AMBIGUOUS, handlers=(deploy_handler(), status))
    )

    assert "more than one command" in output
    assert "Commands:" in output
    assert "ops status" in output
    assert "Deploy a target." in output


def test_no_match_shows_unrecognized_tokens():
    output = render(
        HelpRequest(
            program="ops",
            reason=HelpReason.NO_MATCH,
            handlers=(),
            unmatched=("frobnicate", "[x]"),
        ),
        title="Ops CLI",
    )

    assert output.startswith("Ops CLI")
    assert "does not match any command" in output
    assert "frobnicate [x]" in output
    assert "No commands are available." in output
