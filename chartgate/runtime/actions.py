# chartgate/runtime/actions.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

"""
Action invocation.

The interpreter never runs host logic itself: it hands an action name,
payload and state accessor to the host collaborator. Whatever comes back is
split into two phases. A plain return value means the action finished
synchronously. A coroutine is started eagerly on the running event loop,
which executes its body up to the first point where it actually suspends;
the resulting task is the continuation handle. Any other awaitable is taken
as an already-started continuation.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Protocol

from chartgate.core.guards import read_only
from chartgate.core.types import ActionResult, StateAccessor

logger = logging.getLogger(__name__)


class ActionHost(Protocol):
    """Host collaborator that locates and runs action logic."""

    def __call__(self, action: str, payload: Any, state: StateAccessor) -> ActionResult: ...


def start_action(result: Any) -> Optional[Awaitable[Any]]:
    """
    Run the synchronous segment of an action result.

    :param result: Whatever the host returned for the action.
    :return: A continuation handle if the action suspended, else None.
    :raises RuntimeError: If a coroutine is returned without a running event loop.
    """
    if asyncio.iscoroutine(result):
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            result.close()
            raise
        task = asyncio.Task(result, loop=loop, eager_start=True)
        if not task.done():
            return task
        # Finished without suspending; surface a synchronous failure like a plain call would.
        if not task.cancelled() and task.exception() is not None:
            raise task.exception()
        return None
    if inspect.isawaitable(result):
        return result
    return None


class ActionRunner:
    """Binds a host collaborator to the state accessor it is handed on every call."""

    def __init__(self, host: ActionHost, state: StateAccessor) -> None:
        if not callable(host):
            raise TypeError("Action host must be callable")
        self._host = host
        self._state = state

    def run(self, action: str, payload: Any = None) -> Optional[Awaitable[Any]]:
        return start_action(self._host(action, payload, self._state))


class ActionContext:
    """
    What a registered action receives: its own name, the dispatch payload and a
    read-only view of host state. ``state`` is read through the accessor on
    every access, so code running after an ``await`` sees current state.
    """

    def __init__(self, action: str, payload: Any, accessor: StateAccessor) -> None:
        self.action = action
        self.payload = payload
        self._accessor = accessor

    @property
    def state(self) -> Any:
        return read_only(self._accessor())

    def __repr__(self) -> str:
        return f"ActionContext(action={self.action!r}, payload={self.payload!r})"


class ActionRegistry:
    """
    Bundled ActionHost: maps action names to callables taking an
    ActionContext. Callables may be plain functions or coroutine functions.

    Example:
        actions = ActionRegistry()

        @actions.register("login")
        async def login(context):
            ...
    """

    def __init__(self, actions: Optional[Mapping[str, Callable[[ActionContext], Any]]] = None) -> None:
        self._actions: Dict[str, Callable[[ActionContext], Any]] = dict(actions or {})

    def register(self, name: str, fn: Optional[Callable[[ActionContext], Any]] = None) -> Any:
        """
        Register an action. Overwrites if already registered. Without ``fn``
        this returns a decorator.
        """
        if fn is None:

            def decorator(func: Callable[[ActionContext], Any]) -> Callable[[ActionContext], Any]:
                self._actions[name] = func
                return func

            return decorator
        self._actions[name] = fn
        return fn

    def has(self, name: str) -> bool:
        return name in self._actions

    def names(self) -> list[str]:
        return list(self._actions)

    def __call__(self, action: str, payload: Any, state: StateAccessor) -> ActionResult:
        try:
            fn = self._actions[action]
        except KeyError:
            raise KeyError(f"No action registered under '{action}'") from None
        logger.debug("Running action '%s'", action)
        return fn(ActionContext(action, payload, state))
