import pytest

from cliroute.context import ExecutionContext
from cliroute.exceptions import CliUsageError, InvalidHookError
from cliroute.hook_manager import HookManager, HookType
from cliroute.signals import HelpSignal


def test_hook_type_aliases():
    assert HookType("error") is HookType.ON_ERROR
    assert HookType(" Success ") is HookType.ON_SUCCESS
    assert HookType("teardown") is HookType.ON_TEARDOWN
    assert str(HookType.BEFORE) == "before"
    with pytest.raises(ValueError):
        HookType("during")


def test_register_rejects_non_callables():
    hooks = HookManager()
    with pytest.raises(InvalidHookError):
        hooks.register("before", "not a hook")
    assert len(hooks) == 0


@pytest.mark.asyncio
async def test_trigger_runs_sync_and_async_hooks_in_order():
    events = []
    hooks = HookManager()

    def first(context):
        events.append(("first", context.name))

    async def second(context):
        events.append(("second", context.name))

    hooks.register(HookType.AFTER, first)
    hooks.register("after", second)
    await hooks.trigger(HookType.AFTER, ExecutionContext(name="deploy"))

    assert events == [("first", "deploy"), ("second", "deploy")]


@pytest.mark.asyncio
async def test_failing_hook_does_not_stop_the_others():
    events = []
    hooks = HookManager()

    def broken(context):
        raise RuntimeError("hook failed")

    hooks.register(HookType.ON_SUCCESS, broken)
    hooks.register(HookType.ON_SUCCESS, lambda context: events.append("ran"))
    await hooks.trigger(HookType.ON_SUCCESS, ExecutionContext())

    assert events == ["ran"]


@pytest.mark.asyncio
async def test_usage_errors_propagate_only_from_before_hooks():
    hooks = HookManager()

    def reject(context):
        raise CliUsageError("rejected")

    hooks.register(HookType.BEFORE, reject)
    hooks.register(HookType.AFTER, reject)

    with pytest.raises(CliUsageError):
        await hooks.trigger(HookType.BEFORE, ExecutionContext())
    await hooks.trigger(HookType.AFTER, ExecutionContext())


@pytest.mark.asyncio
async def test_signals_always_propagate():
    hooks = HookManager()

    def ask_for_help(context):
        raise HelpSignal()

    hooks.register(HookType.ON_TEARDOWN, ask_for_help)
    with pytest.raises(HelpSignal):
        await hooks.trigger(HookType.ON_TEARDOWN, ExecutionContext())


def test_clear():
    hooks = HookManager()
    hooks.register(HookType.BEFORE, print)
    hooks.register(HookType.AFTER, print)
    hooks.clear(HookType.BEFORE)
    assert len(hooks) == 1
    hooks.clear()
    assert len(hooks) == 0
    assert "before: —" in str(hooks)
