# tests/unit/test_actions.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import asyncio

import pytest

from chartgate import ActionContext, ActionRegistry
from chartgate.runtime.actions import ActionRunner, start_action

# -----------------------------------------------------------------------------
# START ACTION
# -----------------------------------------------------------------------------


def test_plain_results_have_no_continuation():
    assert start_action(None) is None
    assert start_action(42) is None
    assert start_action({"ok": True}) is None


def test_coroutine_without_running_loop():
    """Test a coroutine result outside an event loop raises and is closed."""

    async def action():
        return None

    coro = action()
    with pytest.raises(RuntimeError):
        start_action(coro)
    assert coro.cr_frame is None


@pytest.mark.asyncio
async def test_coroutine_runs_eagerly_until_suspension():
    """Test the body before the first await runs inside start_action."""
    log = []

    async def action():
        log.append("before")
        await asyncio.sleep(0)
        log.append("after")

    handle = start_action(action())
    assert log == ["before"]
    assert handle is not None
    await handle
    assert log == ["before", "after"]


@pytest.mark.asyncio
async def test_coroutine_finishing_synchronously():
    log = []

    async def action():
        log.append("done")

    assert start_action(action()) is None
    assert log == ["done"]


@pytest.mark.asyncio
async def test_coroutine_failing_before_suspension():
    async def action():
        raise ValueError("rejected")

    with pytest.raises(ValueError, match="rejected"):
        start_action(action())


@pytest.mark.asyncio
async def test_other_awaitables_pass_through():
    future = asyncio.get_running_loop().create_future()
    assert start_action(future) is future
    future.set_result(None)


# -----------------------------------------------------------------------------
# RUNNER
# -----------------------------------------------------------------------------


def test_runner_passes_action_payload_and_accessor():
    calls = []

    def accessor():
        return {"count": 1}

    runner = ActionRunner(lambda action, payload, state: calls.append((action, payload, state)), accessor)
    assert runner.run("save", {"id": 3}) is None
    assert calls == [("save", {"id": 3}, accessor)]


def test_runner_requires_callable_host():
    with pytest.raises(TypeError):
        ActionRunner("not a host", lambda: None)


# -----------------------------------------------------------------------------
# REGISTRY
# -----------------------------------------------------------------------------


def test_registry_decorator():
    actions = ActionRegistry()

    @actions.register("save")
    def save(context):
        return None

    assert actions.has("save")
    assert not actions.has("load")
    assert actions.names() == ["save"]


def test_registry_from_mapping():
    actions = ActionRegistry({"a": lambda context: None, "b": lambda context: None})
    assert actions.names() == ["a", "b"]


def test_registry_calls_with_context():
    """Test registered actions receive name, payload and a live read-only state."""
    state = {"count": 1}
    seen = []

    def save(context):
        seen.append(context)

    actions = ActionRegistry()
    actions.register("save", save)
    actions("save", {"id": 3}, lambda: state)

    context = seen[0]
    assert isinstance(context, ActionContext)
    assert context.action == "save"
    assert context.payload == {"id": 3}
    assert context.state["count"] == 1
    state["count"] = 2
    assert context.state["count"] == 2
    with pytest.raises(TypeError):
        context.state["count"] = 3


def test_registry_overwrites():
    actions = ActionRegistry()
    actions.register("save", lambda context: "first")
    actions.register("save", lambda context: "second")
    assert actions("save", None, lambda: None) == "second"


def test_registry_unknown_action():
    with pytest.raises(KeyError, match="save"):
        ActionRegistry()("save", None, lambda: None)
