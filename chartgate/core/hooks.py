# chartgate/core/hooks.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from typing import Any, Iterable, List, Optional, Protocol, Tuple


class HookProtocol(Protocol):
    """
    Observer interface. Every method is optional; the manager only calls the
    ones a hook object defines. Paths are state paths as accepted by
    Chart.resolve().
    """

    def on_enter(self, path: Tuple[str, ...]) -> None: ...

    def on_exit(self, path: Tuple[str, ...]) -> None: ...

    def on_transition(self, source: Tuple[str, ...], target: Tuple[str, ...], action: str) -> None: ...

    def on_error(self, error: Exception) -> None: ...


class HookManager:
    """
    Manages the registration and execution of hooks that listen to interpreter
    lifecycle events (on_enter, on_exit, on_transition, on_error). Users can
    attach logging, monitoring, or custom side effects without altering core
    logic.
    """

    def __init__(self, hooks: Optional[Iterable[Any]] = None) -> None:
        self._hooks: List[Any] = list(hooks or [])
        self._invoker = _HookInvoker(self._hooks)

    @property
    def hooks(self) -> Tuple[Any, ...]:
        return tuple(self._hooks)

    def register_hook(self, hook: Any) -> None:
        """
        Add a new hook to the manager's list of hooks.

        :param hook: An object implementing any of the HookProtocol methods.
        """
        self._hooks.append(hook)

    def execute_on_enter(self, path: Tuple[str, ...]) -> None:
        self._invoker.invoke("on_enter", path)

    def execute_on_exit(self, path: Tuple[str, ...]) -> None:
        self._invoker.invoke("on_exit", path)

    def execute_on_transition(self, source: Tuple[str, ...], target: Tuple[str, ...], action: str) -> None:
        self._invoker.invoke("on_transition", source, target, action)

    def execute_on_error(self, error: Exception) -> None:
        self._invoker.invoke("on_error", error)


class _HookInvoker:
    """
    Internal helper that iterates through a list of hooks and invokes the
    named lifecycle method on each hook that defines it.
    """

    def __init__(self, hooks: List[Any]) -> None:
        self._hooks = hooks

    def invoke(self, method: str, *args: Any) -> None:
        for hook in self._hooks:
            callback = getattr(hook, method, None)
            if callback is not None:
                callback(*args)
