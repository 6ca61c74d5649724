# chartgate/core/projection.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

"""
Read-only projections of a configuration for host UI layers.

The enabled-action map reflects structural reachability only: an action is
enabled when some active state lists it, whatever its guard would say at
dispatch time. Guards depend on live host state and are left to dispatch.
"""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Sequence

from chartgate.core.chart import Chart, Region
from chartgate.core.configuration import Configuration
from chartgate.core.types import MatchQuery


def enabled_actions(chart: Chart, configuration: Optional[Configuration]) -> Dict[str, bool]:
    """
    Map every action name of the chart to whether an active state handles it.

    :param configuration: Current configuration; None means nothing is active.
    """
    handled = set()
    if configuration is not None:
        for node in configuration.active_nodes():
            handled.update(node.transitions)
    return {action: index in handled for index, action in enumerate(chart.actions)}


def matches(chart: Chart, configuration: Optional[Configuration], query: MatchQuery) -> bool:
    """
    Check a configuration against a query that mirrors the chart nesting.

    Leaves set to True must be active, leaves set to False must be inactive.
    A nested mapping requires its state to be active and its sub-query to
    hold. At a parallel level the keys are region ids and all of them must
    hold. Unknown state ids read as inactive; unknown region ids never match.

    Example:
        matches(chart, configuration, {"AUTHENTICATED": {"issues": {"LIST": True}}})
    """
    if not isinstance(query, MappingABC):
        raise TypeError(f"Query must be a mapping, got {type(query).__name__}")
    if configuration is None:
        configuration = Configuration(chart)
    return _Matcher(chart, configuration).level(query, chart.roots)


class _Matcher:
    """Internal recursive query evaluator bound to one configuration."""

    def __init__(self, chart: Chart, configuration: Configuration) -> None:
        self._chart = chart
        self._configuration = configuration

    def level(self, query: Mapping, regions: Sequence[int]) -> bool:
        if self._chart.is_single(regions):
            return self.region(query, self._chart.regions[regions[0]])
        for key, sub_query in query.items():
            region = self._chart.find_region(regions, key)
            if region is None or not isinstance(sub_query, MappingABC):
                return False
            if not self.region(sub_query, region):
                return False
        return True

    def region(self, query: Mapping, region: Region) -> bool:
        active = self._configuration.active_node(region.index)
        for state_id, expected in query.items():
            is_active = active is not None and active.id == state_id
            if isinstance(expected, MappingABC):
                if not is_active or not self.level(expected, active.regions):
                    return False
            elif bool(expected) != is_active:
                return False
        return True


class Projection:
    """
    Memoizing projection engine for one chart. The enabled-action map is
    recomputed only when a different configuration object is passed in;
    committed configurations are never mutated, so identity is enough.
    """

    def __init__(self, chart: Chart) -> None:
        self._chart = chart
        self._source: Optional[Configuration] = None
        self._enabled: Mapping[str, bool] = MappingProxyType(enabled_actions(chart, None))

    def enabled_actions(self, configuration: Optional[Configuration]) -> Mapping[str, bool]:
        if configuration is not self._source:
            self._enabled = MappingProxyType(enabled_actions(self._chart, configuration))
            self._source = configuration
        return self._enabled

    def matches(self, configuration: Optional[Configuration], query: MatchQuery) -> bool:
        return matches(self._chart, configuration, query)
