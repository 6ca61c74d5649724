# chartgate/core/guards.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from collections.abc import MutableMapping
from types import MappingProxyType
from typing import Any, Callable, Optional

from chartgate.core.types import GuardFunction


def read_only(view: Any) -> Any:
    """
    Wrap mutable mappings in a live read-only proxy so guards cannot write to
    host state. Other views are passed through unchanged.
    """
    if isinstance(view, MutableMapping):
        return MappingProxyType(view)
    return view


def evaluate(guard: Optional[GuardFunction], view: Any) -> bool:
    """
    Evaluate a transition guard against the host state view valid right now.
    A missing guard always passes.

    :param guard: Predicate taking the state view, or None.
    :param view: The host state view read at the instant of dispatch.
    :return: True if the transition may proceed.
    """
    if guard is None:
        return True
    return bool(guard(read_only(view)))


class GuardCondition:
    """
    Composable guard predicate. Conditions combine with ``&``, ``|`` and
    ``~`` and can be used anywhere a guard callable is accepted.

    Example:
        has_user = GuardCondition(lambda state: state["username"])
        has_password = GuardCondition(lambda state: state["password"])
        {"target": "AUTHENTICATING", "guard": has_user & has_password}
    """

    def __init__(self, condition: Callable[[Any], Any]) -> None:
        if not callable(condition):
            raise TypeError("Guard condition must be callable")
        self._condition = condition

    def __call__(self, view: Any) -> bool:
        return bool(self._condition(view))

    def __and__(self, other: Callable[[Any], Any]) -> "GuardCondition":
        return GuardCondition(lambda view: self(view) and bool(other(view)))

    def __or__(self, other: Callable[[Any], Any]) -> "GuardCondition":
        return GuardCondition(lambda view: self(view) or bool(other(view)))

    def __invert__(self) -> "GuardCondition":
        return GuardCondition(lambda view: not self(view))
