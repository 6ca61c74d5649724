# chartgate/core/chart.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

"""
Chart definition: validation and the immutable structural model.

build() walks a chart definition once, validates it and flattens the
state hierarchy into an arena of frozen ChartNode and Region records that
reference each other by integer index. Action names are enumerated into
integer ids so every node keeps a lookup table keyed by action id.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from chartgate.core.definitions import ChartDef, StateDef, TransitionDef
from chartgate.core.errors import ConfigurationError
from chartgate.core.types import DEFAULT_REGION, PATH_SEPARATOR, GuardFunction, Path

logger = logging.getLogger(__name__)

_STATE_KEYS = frozenset({"id", "entry", "exit", "on", "chart"})
_TRANSITION_KEYS = frozenset({"target", "guard"})


@dataclass(frozen=True)
class Transition:
    """A resolved action map entry. A transition without target is a stay."""

    action: int
    target: Optional[int] = None
    guard: Optional[GuardFunction] = None

    @property
    def is_stay(self) -> bool:
        return self.target is None


@dataclass(frozen=True, eq=False)
class ChartNode:
    """A state in the arena. ``region`` is the index of the region owning it."""

    index: int
    id: str
    region: int
    entry: Optional[str]
    exit: Optional[str]
    transitions: Mapping[int, Transition]
    regions: Tuple[int, ...]


@dataclass(frozen=True, eq=False)
class Region:
    """
    One chart level. ``owner`` is the index of the node owning the region, or
    None for a root region. Implicit regions belong to a node (or root) that
    owns a single chart rather than a mapping of region ids.
    """

    index: int
    key: str
    owner: Optional[int]
    implicit: bool
    initial: int
    states: Mapping[str, int]


def split_path(path: Path) -> Tuple[str, ...]:
    """Normalize a dotted or pre-split path into a tuple of segments."""
    if isinstance(path, str):
        return tuple(segment for segment in path.split(PATH_SEPARATOR) if segment)
    return tuple(path)


class Chart:
    """
    Immutable, validated chart. Built once by build() and shared read-only by
    configurations, projections and interpreters.
    """

    def __init__(
        self,
        nodes: Tuple[ChartNode, ...],
        regions: Tuple[Region, ...],
        roots: Tuple[int, ...],
        actions: Tuple[str, ...],
    ) -> None:
        self._nodes = nodes
        self._regions = regions
        self._roots = roots
        self._actions = actions
        self._action_ids = MappingProxyType({name: index for index, name in enumerate(actions)})

    @property
    def nodes(self) -> Tuple[ChartNode, ...]:
        return self._nodes

    @property
    def regions(self) -> Tuple[Region, ...]:
        return self._regions

    @property
    def roots(self) -> Tuple[int, ...]:
        """Indices of the top-level regions, in declaration order."""
        return self._roots

    @property
    def actions(self) -> Tuple[str, ...]:
        """Every action name used anywhere in the chart, in declaration order."""
        return self._actions

    def action_id(self, action: str) -> Optional[int]:
        """Return the enumerated id of an action, or None if no state handles it."""
        return self._action_ids.get(action)

    def is_single(self, regions: Sequence[int]) -> bool:
        """True if the region set is one implicit region (no parallel composition)."""
        return len(regions) == 1 and self._regions[regions[0]].implicit

    def find_region(self, regions: Sequence[int], key: str) -> Optional[Region]:
        for index in regions:
            if self._regions[index].key == key:
                return self._regions[index]
        return None

    def resolve(self, path: Path) -> Optional[ChartNode]:
        """
        Resolve a state path to its node. At a level with a single chart the
        next segment is a state id; at a parallel level it is a region key
        followed by a state id. Returns None for paths that do not address a
        state.
        """
        remaining = list(split_path(path))
        regions = self._roots
        node = None
        while remaining:
            if self.is_single(regions):
                region = self._regions[regions[0]]
            else:
                region = self.find_region(regions, remaining.pop(0))
                if region is None or not remaining:
                    return None
            index = region.states.get(remaining.pop(0))
            if index is None:
                return None
            node = self._nodes[index]
            regions = node.regions
        return node

    def path_of(self, node: ChartNode) -> Tuple[str, ...]:
        """Return the path that resolve() maps to ``node``."""
        region = self._regions[node.region]
        segments = (node.id,) if region.implicit else (region.key, node.id)
        if region.owner is None:
            return segments
        return self.path_of(self._nodes[region.owner]) + segments

    def region_path(self, region: Region) -> Tuple[str, ...]:
        own = () if region.implicit else (region.key,)
        if region.owner is None:
            return own
        return self.path_of(self._nodes[region.owner]) + own

    def __repr__(self) -> str:
        return f"Chart(states={len(self._nodes)}, regions={len(self._regions)}, actions={len(self._actions)})"


def build(definition: Any) -> Chart:
    """
    Validate a chart definition and freeze it into a Chart.

    :param definition: A ChartDef, a chart mapping ({"initial": ..., "states": ...})
        or a mapping of region ids to charts for a parallel root.
    :raises ConfigurationError: If the definition violates a structural rule.
    """
    chart = _ChartBuilder().build(definition)
    logger.debug("Built %r", chart)
    return chart


def _declares_initial(definition: Any) -> bool:
    if isinstance(definition, ChartDef):
        return True
    return isinstance(definition, Mapping) and isinstance(definition.get("initial"), str)


def _is_chart(definition: Any) -> bool:
    """
    Tell a chart from a mapping of region ids to charts. Region ids may be
    "initial" or "states" themselves, so those keys only mark a chart when the
    mapping is not made up entirely of charts.
    """
    if _declares_initial(definition):
        return True
    if not isinstance(definition, Mapping) or not ("initial" in definition or "states" in definition):
        return False
    return not all(_declares_initial(value) for value in definition.values())


def _require_id(value: Any, what: str, path: Sequence[str]) -> str:
    if not isinstance(value, str) or not value:
        raise ConfigurationError(f"{what} must be a non-empty string, got {value!r}", path=path)
    if PATH_SEPARATOR in value:
        raise ConfigurationError(f"{what} '{value}' must not contain '{PATH_SEPARATOR}'", path=path)
    return value


class _ChartBuilder:
    """
    Internal single-use builder. Node and region fields are collected as dicts
    while indices are handed out, then frozen into records in one pass.
    """

    def __init__(self) -> None:
        self._nodes: List[Dict[str, Any]] = []
        self._regions: List[Dict[str, Any]] = []
        self._actions: Dict[str, int] = {}
        # ids of the definitions currently being built, for cycle detection
        self._building: List[int] = []

    def build(self, definition: Any) -> Chart:
        roots = self._region_set(definition, owner=None, path=())
        return Chart(
            nodes=tuple(ChartNode(**fields) for fields in self._nodes),
            regions=tuple(Region(**fields) for fields in self._regions),
            roots=roots,
            actions=tuple(self._actions),
        )

    def _enter(self, definition: Any, path: Sequence[str]) -> None:
        if id(definition) in self._building:
            raise ConfigurationError("Chart embeds itself as its own descendant", path=path)
        self._building.append(id(definition))

    def _region_set(self, definition: Any, owner: Optional[int], path: Tuple[str, ...]) -> Tuple[int, ...]:
        if _is_chart(definition):
            return (self._region(definition, DEFAULT_REGION, owner, path, implicit=True),)
        if not isinstance(definition, Mapping) or not definition:
            raise ConfigurationError(
                "Expected a chart or a non-empty mapping of region ids to charts",
                path=path,
                details={"definition": definition},
            )
        self._enter(definition, path)
        try:
            regions = []
            for key, chart in definition.items():
                _require_id(key, "Region id", path)
                if not _is_chart(chart):
                    raise ConfigurationError(f"Region '{key}' must map to a chart", path=path)
                regions.append(self._region(chart, key, owner, path + (key,), implicit=False))
            return tuple(regions)
        finally:
            self._building.pop()

    def _region(self, definition: Any, key: str, owner: Optional[int], path: Tuple[str, ...], implicit: bool) -> int:
        self._enter(definition, path)
        try:
            index = len(self._regions)
            fields: Dict[str, Any] = {"index": index, "key": key, "owner": owner, "implicit": implicit}
            self._regions.append(fields)

            if isinstance(definition, ChartDef):
                initial, states = definition.initial, definition.states
            else:
                initial, states = definition.get("initial"), definition.get("states", ())
            entries = self._state_entries(states, path)

            # Reserve every node first so transitions can target later siblings.
            ids: Dict[str, int] = {}
            for state_id, _ in entries:
                ids[state_id] = len(self._nodes)
                self._nodes.append({"index": ids[state_id], "id": state_id, "region": index})

            if initial is None:
                raise ConfigurationError("Chart has no initial state", path=path)
            if not isinstance(initial, str):
                raise ConfigurationError(f"Initial state must be a state id, got {initial!r}", path=path)
            if initial not in ids:
                raise ConfigurationError(f"Initial state '{initial}' is not defined", state=initial, path=path)
            fields["initial"] = ids[initial]
            fields["states"] = MappingProxyType(ids)

            for state_id, state in entries:
                self._fill_node(ids[state_id], state, ids, path + (state_id,))
            return index
        finally:
            self._building.pop()

    def _state_entries(self, states: Any, path: Tuple[str, ...]) -> List[Tuple[str, Any]]:
        if isinstance(states, Mapping):
            entries = list(states.items())
        elif isinstance(states, Sequence) and not isinstance(states, (str, bytes)):
            entries = [(_state_id_of(state, path), state) for state in states]
        else:
            raise ConfigurationError("States must be a mapping or a sequence of state definitions", path=path)

        seen = set()
        for state_id, state in entries:
            _require_id(state_id, "State id", path)
            if state_id in seen:
                raise ConfigurationError(f"Duplicate state id '{state_id}'", state=state_id, path=path)
            seen.add(state_id)
            if not isinstance(state, (StateDef, Mapping)):
                raise ConfigurationError(f"State '{state_id}' must be a StateDef or a mapping", state=state_id, path=path)
            if isinstance(state, Mapping):
                unknown = set(state) - _STATE_KEYS
                if unknown:
                    raise ConfigurationError(
                        f"State '{state_id}' has unknown keys {sorted(unknown)}", state=state_id, path=path
                    )
        return entries

    def _fill_node(self, index: int, state: Any, ids: Mapping[str, int], path: Tuple[str, ...]) -> None:
        fields = self._nodes[index]
        state_id = fields["id"]
        if isinstance(state, StateDef):
            entry, exit_, on, nested = state.entry, state.exit, state.on, state.chart
        else:
            entry, exit_, on, nested = state.get("entry"), state.get("exit"), state.get("on", {}), state.get("chart")

        for hook, name in (("entry", entry), ("exit", exit_)):
            if name is not None and (not isinstance(name, str) or not name):
                raise ConfigurationError(
                    f"The {hook} hook of '{state_id}' must be an action name", state=state_id, path=path
                )
        fields["entry"] = entry
        fields["exit"] = exit_
        fields["transitions"] = MappingProxyType(self._transitions(state_id, on or {}, ids, path))
        fields["regions"] = self._region_set(nested, index, path) if nested is not None else ()

    def _transitions(
        self, state_id: str, on: Any, ids: Mapping[str, int], path: Tuple[str, ...]
    ) -> Dict[int, Transition]:
        if not isinstance(on, Mapping):
            raise ConfigurationError(f"The action map of '{state_id}' must be a mapping", state=state_id, path=path)

        transitions: Dict[int, Transition] = {}
        for action, value in on.items():
            if not isinstance(action, str) or not action:
                raise ConfigurationError(
                    f"Action name must be a non-empty string, got {action!r}", state=state_id, path=path
                )
            if value is None:
                target, guard = None, None
            elif isinstance(value, str):
                target, guard = value, None
            elif isinstance(value, TransitionDef):
                target, guard = value.target, value.guard
            elif isinstance(value, Mapping):
                unknown = set(value) - _TRANSITION_KEYS
                if unknown:
                    raise ConfigurationError(
                        f"Transition '{action}' has unknown keys {sorted(unknown)}",
                        state=state_id,
                        action=action,
                        path=path,
                    )
                target, guard = value.get("target"), value.get("guard")
            else:
                raise ConfigurationError(
                    f"Transition '{action}' must be None, a target id or a transition descriptor",
                    state=state_id,
                    action=action,
                    path=path,
                )

            if target is None and guard is not None:
                raise ConfigurationError(
                    f"Transition '{action}' has a guard but no target", state=state_id, action=action, path=path
                )
            if guard is not None and not callable(guard):
                raise ConfigurationError(
                    f"The guard of transition '{action}' must be callable", state=state_id, action=action, path=path
                )
            if target is not None and target not in ids:
                raise ConfigurationError(
                    f"Transition '{action}' targets undefined state '{target}'",
                    state=state_id,
                    action=action,
                    path=path,
                    details={"target": target},
                )

            action_id = self._actions.setdefault(action, len(self._actions))
            transitions[action_id] = Transition(
                action=action_id, target=None if target is None else ids[target], guard=guard
            )
        return transitions


def _state_id_of(state: Any, path: Sequence[str]) -> Any:
    if isinstance(state, StateDef):
        return state.id
    if isinstance(state, Mapping):
        return state.get("id")
    raise ConfigurationError(f"Expected a StateDef or a mapping, got {type(state).__name__}", path=path)
