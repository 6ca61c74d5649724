# chartgate/core/definitions.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence, Union

from chartgate.core.types import GuardFunction


@dataclass(frozen=True)
class TransitionDef:
    """
    A targeted transition, optionally conditioned on a guard. Guards receive the
    host's read-only state view and return a truthy value to allow the
    transition.
    """

    target: str
    guard: Optional[GuardFunction] = None


@dataclass(eq=False)
class StateDef:
    """
    Definition of a single state.

    :param id: Identifier, unique within the owning chart.
    :param on: Action map. A value of None keeps the machine in place, a string
        names the target state, a TransitionDef (or a mapping with "target" and
        "guard") describes a guarded transition.
    :param entry: Name of the action run when the state is entered.
    :param exit: Name of the action run when the state is exited.
    :param chart: Nested chart, or a mapping of region ids to charts for
        parallel regions.
    """

    id: str
    on: Mapping[str, Any] = field(default_factory=dict)
    entry: Optional[str] = None
    exit: Optional[str] = None
    chart: Optional[Union["ChartDef", Mapping[str, Any]]] = None


@dataclass(eq=False)
class ChartDef:
    """Definition of one chart level: an initial state id plus its states."""

    initial: str
    states: Sequence[Union[StateDef, Mapping[str, Any]]] = field(default_factory=list)
