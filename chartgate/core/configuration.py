# chartgate/core/configuration.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

"""
Configuration model: which node is active in which region.

A Configuration stores nothing but ``region index -> node index`` for every
active region. The nesting is implied by the chart: a region is present only
while its owner node is active, so the stored mapping is always a tree rooted
at the chart's top-level regions.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from chartgate.core.chart import Chart, ChartNode, split_path
from chartgate.core.types import DEFAULT_REGION, PATH_SEPARATOR, Path


class Configuration:
    """
    Active-state tree of a chart. Reads (is_active, regions_of, snapshot) are
    pure; enter/exit are only ever called by the interpreter on a private copy
    that it commits as a whole.
    """

    def __init__(self, chart: Chart, active: Optional[Dict[int, int]] = None) -> None:
        self._chart = chart
        self._active: Dict[int, int] = dict(active or {})

    @classmethod
    def initialize(cls, chart: Chart) -> "Configuration":
        """
        Activate the initial state of every root region and, recursively, of
        every region nested in an activated state. No hooks run here.
        """
        configuration = cls(chart)
        for region in chart.roots:
            configuration.enter(chart.nodes[chart.regions[region].initial])
        return configuration

    @property
    def chart(self) -> Chart:
        return self._chart

    def copy(self) -> "Configuration":
        return Configuration(self._chart, self._active)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def active_node(self, region: int) -> Optional[ChartNode]:
        """Return the active node of a region, or None if the region is inactive."""
        index = self._active.get(region)
        return None if index is None else self._chart.nodes[index]

    def is_node_active(self, node: ChartNode) -> bool:
        return self._active.get(node.region) == node.index

    def active_nodes(self, regions: Optional[Sequence[int]] = None) -> List[ChartNode]:
        """
        Active nodes in pre-order: regions in declaration order, each node
        before the nodes of its nested regions.

        :param regions: Region indices to start from; the chart roots by default.
        """
        ordered: List[ChartNode] = []

        def visit(indices: Sequence[int]) -> None:
            for index in indices:
                node = self.active_node(index)
                if node is not None:
                    ordered.append(node)
                    visit(node.regions)

        visit(self._chart.roots if regions is None else regions)
        return ordered

    def is_active(self, path: Path) -> bool:
        node = self._chart.resolve(path)
        return node is not None and self.is_node_active(node)

    def regions_of(self, path: Path = ()) -> Dict[str, str]:
        """
        Map each region directly below ``path`` to the id of its active state.
        The empty path addresses the top level. Inactive or unknown paths give
        an empty mapping.
        """
        if split_path(path):
            node = self._chart.resolve(path)
            if node is None or not self.is_node_active(node):
                return {}
            regions = node.regions
        else:
            regions = self._chart.roots

        result = {}
        for index in regions:
            active = self.active_node(index)
            if active is not None:
                result[self._chart.regions[index].key] = active.id
        return result

    def snapshot(self) -> Dict[str, List[str]]:
        """
        Per region, the chain of active ids from the region down to its leaf.
        A chain follows single nested charts; every parallel region starts a
        new entry keyed by its dotted region path. The key holds the
        ancestors of a nested parallel region, so key segments followed by
        the chain give the root-to-leaf path:

            {"default": ["AUTHENTICATED"], "AUTHENTICATED.issues": ["LIST"]}
        """
        chart = self._chart
        snapshot: Dict[str, List[str]] = {}

        def walk(indices: Sequence[int]) -> None:
            for index in indices:
                chain: List[str] = []
                node = self.active_node(index)
                last = None
                while node is not None:
                    chain.append(node.id)
                    last = node
                    if not chart.is_single(node.regions):
                        break
                    node = self.active_node(node.regions[0])
                if not chain:
                    continue
                key = PATH_SEPARATOR.join(chart.region_path(chart.regions[index])) or DEFAULT_REGION
                snapshot[key] = chain
                walk(last.regions)

        walk(chart.roots)
        return snapshot

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def enter(self, node: ChartNode) -> List[ChartNode]:
        """
        Make ``node`` the active node of its region and activate the initial
        state of each of its regions, recursively.

        :return: The activated nodes, outermost first.
        """
        self._active[node.region] = node.index
        entered = [node]
        for index in node.regions:
            entered.extend(self.enter(self._chart.nodes[self._chart.regions[index].initial]))
        return entered

    def exit_order(self, node: ChartNode) -> List[ChartNode]:
        """``node`` and its active descendants, innermost first."""
        return list(reversed([node] + self.active_nodes(node.regions)))

    def exit(self, node: ChartNode) -> List[ChartNode]:
        """
        Deactivate ``node`` together with every region nested below it.

        :return: The deactivated nodes, innermost first.
        """
        exited = self.exit_order(node)
        for state in exited:
            self._active.pop(state.region, None)
        return exited

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Configuration):
            return NotImplemented
        return self._chart is other._chart and self._active == other._active

    def __repr__(self) -> str:
        return f"Configuration({self.snapshot()})"


def initialize(chart: Chart) -> Configuration:
    """Create the initial configuration of ``chart``."""
    return Configuration.initialize(chart)
