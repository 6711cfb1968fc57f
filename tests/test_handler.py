from collections import deque

import pytest

from cliroute.arity import Arity, CollectionKind
from cliroute.exceptions import CliConfigurationError, InvalidActionError
from cliroute.handler import Handler
from cliroute.hook_manager import HookManager
from cliroute.schema import OptionSpec, Schema
from cliroute.signature import infer_option, infer_schema
from cliroute.token_codec import encode


async def deploy(target: str, tag: list[str] | None = None, force: bool = False):
    """Deploy a target.

    Longer description.
    """
    return target, tag, force


def test_handler_requires_callable_action():
    with pytest.raises(InvalidActionError):
        Handler(name="bad", action="not callable")


def test_handler_accepts_route_text():
    handler = Handler(name="status", action=lambda: 0, command_schema="status")
    assert handler.command_schema.route == "status"
    assert isinstance(handler.hooks, HookManager)


def test_handler_description_defaults_to_schema():
    schema = Schema("status", description="Show status")
    assert Handler(name="s", action=lambda: 0, command_schema=schema).description == (
        "Show status"
    )


def test_unsupported_type_fails_at_registration():
    class Opaque:
        pass

    with pytest.raises(CliConfigurationError):
        Handler(
            name="x",
            action=lambda value: value,
            command_schema=Schema(options=(OptionSpec("--value", type=Opaque),)),
        )


def test_pattern_is_cached_and_rebuilt_for_global_options():
    handler = Handler(name="status", action=lambda: 0, command_schema="status")
    pattern = handler.pattern
    assert handler.pattern is pattern
    handler.attach_global_options([OptionSpec("--help", arity="flag")])
    assert handler.pattern is not pattern
    assert handler.pattern.is_match("prog status --help")
    assert not pattern.is_match("prog status --help")


def test_global_option_clash_is_a_configuration_error():
    handler = Handler(
        name="status",
        action=lambda help: 0,
        command_schema=Schema("status", options=(OptionSpec("--help"),)),
    )
    with pytest.raises(CliConfigurationError):
        handler.attach_global_options([OptionSpec("--help", arity="flag")])
    assert handler.global_options == ()


@pytest.mark.asyncio
async def test_bind_and_invoke():
    handler = Handler(
        name="deploy",
        action=deploy,
        command_schema=Schema(
            "deploy <target>",
            options=(
                OptionSpec("--tag|-t", arity=Arity.VECTOR, csv=True),
                OptionSpec("--force", arity=Arity.FLAG),
            ),
        ),
    )
    text, token_map = encode("prog deploy web --tag a,b -t c", environ={})
    match = handler.pattern.match(text)
    arguments = handler.bind(match, token_map)
    assert list(arguments) == ["target", "tag", "force"]
    assert arguments == {"target": "web", "tag": ["a", "b", "c"], "force": False}
    assert await handler.invoke(arguments) == ("web", ["a", "b", "c"], False)


@pytest.mark.asyncio
async def test_sync_actions_are_awaitable():
    handler = Handler(name="sum", action=lambda a, b: a + b, command_schema="")
    assert await handler.invoke({"a": 1, "b": 2}) == 3


def test_from_callable_infers_schema():
    handler = Handler.from_callable(deploy, "deploy <target>")
    assert handler.name == "deploy"
    assert handler.description == "Deploy a target."
    options = {option.dest: option for option in handler.command_schema.options}
    assert options["tag"].arity is Arity.VECTOR
    assert options["tag"].aliases == ("--tag",)
    assert options["force"].arity is Arity.FLAG


def test_optional_vector_without_value_binds_empty_list():
    handler = Handler.from_callable(deploy, "deploy <target>")
    text, token_map = encode("prog deploy web", environ={})
    arguments = handler.bind(handler.pattern.match(text), token_map)
    assert arguments["tag"] == []


def test_infer_schema_types_arguments():
    def copy(count: int, verbose: bool = False):
        return count

    schema = infer_schema(copy, "copy <count>")
    assert schema.arguments[0].type is int
    assert [option.dest for option in schema.options] == ["verbose"]


def test_infer_schema_rejects_unknown_route_argument():
    def status():
        return 0

    with pytest.raises(CliConfigurationError):
        infer_schema(status, "status <name>")


def test_infer_schema_applies_metadata():
    def tag(names: list[str], region: str = "eu", dry_run: bool = False):
        return names

    schema = infer_schema(
        tag,
        "tag",
        option_metadata={
            "names": {"aliases": "--name|-n", "csv": True},
            "region": "Target region",
        },
    )
    options = {option.dest: option for option in schema.options}
    assert options["names"].aliases == ("--name", "-n")
    assert options["names"].csv
    assert options["names"].required
    assert options["region"].description == "Target region"
    assert options["region"].default == "eu"
    assert options["dry_run"].aliases == ("--dry-run",)


@pytest.mark.parametrize(
    "annotation, arity, element, collection",
    [
        (bool, Arity.FLAG, str, CollectionKind.LIST),
        (int, Arity.SCALAR, int, CollectionKind.LIST),
        (list[int], Arity.VECTOR, int, CollectionKind.LIST),
        (tuple[str, ...], Arity.VECTOR, str, CollectionKind.LIST),
        (set[str], Arity.VECTOR, str, CollectionKind.SET),
        (deque[str], Arity.VECTOR, str, CollectionKind.QUEUE),
        (dict[str, int], Arity.MAP, int, CollectionKind.LIST),
        (list[int] | None, Arity.VECTOR, int, CollectionKind.LIST),
    ],
)
def test_infer_option_arity(annotation, arity, element, collection):
    option = infer_option("value", annotation, None)
    assert option.arity is arity
    assert option.type is element
    assert option.collection is collection
