# chartgate/runtime/interpreter.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

"""
The interpreter: gates actions on the active configuration and runs
transitions.

dispatch() looks an action up in every active state, evaluates guards
against host state read at that instant, runs the host action once, and
only then applies the transitions it matched: exit hooks innermost first,
one commit of the new configuration, entry hooks outermost first. Nested
dispatches made by the action before it first suspends therefore see the
pre-transition configuration; code after the suspension sees the new one.
"""

from __future__ import annotations

import asyncio
import logging
import warnings
from dataclasses import dataclass
from typing import Any, Awaitable, Dict, Iterable, List, Mapping, NamedTuple, Optional, Set, Tuple, Union

from chartgate.core.chart import Chart, ChartNode, Transition, build
from chartgate.core.configuration import Configuration
from chartgate.core.errors import DispatchAdvisory
from chartgate.core.guards import evaluate
from chartgate.core.hooks import HookManager
from chartgate.core.projection import Projection
from chartgate.core.types import MatchQuery, Mode, Path, StateAccessor
from chartgate.runtime.actions import ActionHost, ActionRunner

logger = logging.getLogger(__name__)


class AppliedTransition(NamedTuple):
    source: Tuple[str, ...]
    target: Tuple[str, ...]


@dataclass(frozen=True)
class DispatchResult:
    """
    Outcome of one dispatch. Truthy iff the host action ran. Awaiting the
    result waits for the continuations the dispatch started.
    """

    action: str
    executed: bool = False
    transitions: Tuple[AppliedTransition, ...] = ()
    pending: Tuple[Awaitable[Any], ...] = ()

    def __bool__(self) -> bool:
        return self.executed

    def __await__(self):
        return self._settle().__await__()

    async def _settle(self) -> "DispatchResult":
        if self.pending:
            await asyncio.gather(*self.pending)
        return self


def _no_state() -> None:
    return None


class Interpreter:
    """
    Runs one chart for the lifetime of its host.

    :param chart: A built Chart, or any definition accepted by build().
    :param host: Collaborator invoked as host(action, payload, state) for
        actions and entry/exit hooks.
    :param state: Zero-argument accessor returning the host state view used
        by guards and handed to actions.
    :param mode: DEVELOPMENT issues a DispatchAdvisory for unhandled actions;
        PRODUCTION stays silent.
    :param hooks: Observer objects, see HookManager.
    """

    def __init__(
        self,
        chart: Any,
        host: ActionHost,
        state: Optional[StateAccessor] = None,
        mode: Union[Mode, str] = Mode.DEVELOPMENT,
        hooks: Optional[Iterable[Any]] = None,
    ) -> None:
        self._chart = chart if isinstance(chart, Chart) else build(chart)
        self._state = state or _no_state
        self._actions = ActionRunner(host, self._state)
        self._mode = Mode(mode)
        self._hooks = HookManager(hooks)
        self._projection = Projection(self._chart)
        self._configuration: Optional[Configuration] = None
        self._pending: Set[asyncio.Future] = set()
        # Node indices committed as active whose entry has not run yet, and
        # nodes whose exit is running. Nested dispatches consult both.
        self._entering: Set[int] = set()
        self._exiting: Set[int] = set()

    @property
    def chart(self) -> Chart:
        return self._chart

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def configuration(self) -> Optional[Configuration]:
        """The committed configuration, or None while stopped."""
        return self._configuration

    @property
    def is_running(self) -> bool:
        return self._configuration is not None

    @property
    def hooks(self) -> HookManager:
        return self._hooks

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> None:
        """Activate the initial configuration and run its entry hooks, outermost first."""
        if self._configuration is not None:
            return

        configuration = Configuration.initialize(self._chart)
        self._configuration = configuration
        logger.debug("Starting with %s", configuration.snapshot())
        nodes = configuration.active_nodes()
        self._entering.update(node.index for node in nodes)
        try:
            self._enter_nodes(nodes)
        except Exception as error:
            self._configuration = None
            self._entering.clear()
            self._hooks.execute_on_error(error)
            raise

    def stop(self) -> None:
        """Run exit hooks for every active state, innermost first, and discard the configuration."""
        if self._configuration is None:
            return

        logger.debug("Stopping with %s", self._configuration.snapshot())
        try:
            self._exit_from(None)
        except Exception as error:
            self._hooks.execute_on_error(error)
            raise
        self._configuration = None
        self._entering.clear()

    async def settle(self) -> None:
        """Wait until every continuation started by actions and hooks has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def dispatch(self, action: str, payload: Any = None) -> DispatchResult:
        """
        Dispatch an action. If no active state handles it, or every matching
        guard is false, nothing happens: the host action is not invoked and
        the configuration is unchanged.

        :param action: Action name.
        :param payload: Passed through to the host action.
        :return: DispatchResult describing what ran.
        """
        configuration = self._configuration
        if configuration is None:
            logger.debug("Ignoring '%s': interpreter is not running", action)
            return DispatchResult(action)

        matched = self._lookup(configuration, action)
        if not matched:
            self._advise(action, configuration)
            return DispatchResult(action)

        entering = set(self._entering)
        try:
            return self._execute(action, payload, matched)
        except Exception as error:
            self._configuration = configuration
            self._entering = entering
            self._hooks.execute_on_error(error)
            raise

    def _lookup(self, configuration: Configuration, action: str) -> List[Tuple[ChartNode, Transition]]:
        action_id = self._chart.action_id(action)
        if action_id is None:
            return []
        return [
            (node, node.transitions[action_id])
            for node in configuration.active_nodes()
            if action_id in node.transitions
        ]

    def _advise(self, action: str, configuration: Configuration) -> None:
        logger.debug("No active state handles '%s'", action)
        if self._mode is Mode.DEVELOPMENT:
            warnings.warn(DispatchAdvisory(action, configuration.snapshot()), stacklevel=3)

    def _execute(
        self, action: str, payload: Any, matched: List[Tuple[ChartNode, Transition]]
    ) -> DispatchResult:
        view = self._state()
        participants = [(node, t) for node, t in matched if t.is_stay or evaluate(t.guard, view)]
        if not participants:
            logger.debug("Guards rejected '%s'", action)
            return DispatchResult(action)

        pending: List[Awaitable[Any]] = []
        self._invoke(action, payload, pending)

        applied = []
        for node, transition in participants:
            if transition.is_stay:
                continue
            record = self._transition(action, node, self._chart.nodes[transition.target], pending)
            if record is not None:
                applied.append(record)
        return DispatchResult(action, True, tuple(applied), tuple(pending))

    def _transition(
        self, action: str, source: ChartNode, target: ChartNode, pending: List[Awaitable[Any]]
    ) -> Optional[AppliedTransition]:
        # The action, or an exit hook, may have dispatched the source state away already.
        if not self._still_active(source):
            logger.debug("Skipping '%s' from %s: state is no longer active", action, self._chart.path_of(source))
            return None
        pending.extend(self._exit_from(source))
        if not self._still_active(source):
            logger.debug("Skipping '%s' from %s: moved by an exit hook", action, self._chart.path_of(source))
            return None

        working = self._configuration.copy()
        working.exit(source)
        entered = working.enter(target)
        self._configuration = working
        self._entering.update(node.index for node in entered)

        record = AppliedTransition(self._chart.path_of(source), self._chart.path_of(target))
        logger.debug("'%s' moved %s -> %s", action, record.source, record.target)
        self._hooks.execute_on_transition(record.source, record.target, action)
        pending.extend(self._enter_nodes(entered))
        return record

    def _still_active(self, node: ChartNode) -> bool:
        return self._configuration is not None and self._configuration.is_node_active(node)

    def _enter_nodes(self, nodes: Iterable[ChartNode]) -> List[Awaitable[Any]]:
        """
        Run entry for freshly committed nodes, outermost first. A node is
        skipped once a nested dispatch from an earlier entry hook has entered
        it already or moved it away before its turn.
        """
        pending: List[Awaitable[Any]] = []
        for node in nodes:
            if node.index not in self._entering:
                continue
            self._entering.discard(node.index)
            if not self._still_active(node):
                continue
            self._hooks.execute_on_enter(self._chart.path_of(node))
            if node.entry is not None:
                self._invoke(node.entry, None, pending)
        return pending

    def _exit_from(self, source: Optional[ChartNode]) -> List[Awaitable[Any]]:
        """
        Run exit for ``source`` and its active descendants, innermost first, or
        for every active node when ``source`` is None. The next node is read
        from the live configuration after every hook, so states moved by a
        nested dispatch are not exited twice and states it entered are not
        left out.
        """
        pending: List[Awaitable[Any]] = []
        done: Set[int] = set()
        while True:
            configuration = self._configuration
            if configuration is None:
                return pending
            if source is None:
                order = list(reversed(configuration.active_nodes()))
            elif configuration.is_node_active(source):
                order = configuration.exit_order(source)
            else:
                return pending

            node = next((candidate for candidate in order if candidate.index not in done), None)
            if node is None:
                return pending
            done.add(node.index)

            if node.index in self._entering:
                # Committed by a transition still running its entry hooks; never entered.
                self._entering.discard(node.index)
                continue
            if node.index in self._exiting:
                continue
            self._exiting.add(node.index)
            try:
                if node.exit is not None:
                    self._invoke(node.exit, None, pending)
                self._hooks.execute_on_exit(self._chart.path_of(node))
            finally:
                self._exiting.discard(node.index)

    def _invoke(self, action: str, payload: Any, pending: List[Awaitable[Any]]) -> None:
        handle = self._actions.run(action, payload)
        if handle is None:
            return
        pending.append(handle)
        if isinstance(handle, asyncio.Future):
            self._pending.add(handle)
            handle.add_done_callback(self._pending.discard)

    # -------------------------------------------------------------------------
    # Projections
    # -------------------------------------------------------------------------

    @property
    def actions(self) -> Mapping[str, bool]:
        """Enabled-action map: every chart action and whether an active state handles it."""
        return self._projection.enabled_actions(self._configuration)

    def matches(self, query: MatchQuery) -> bool:
        return self._projection.matches(self._configuration, query)

    def is_active(self, path: Path) -> bool:
        return self._configuration is not None and self._configuration.is_active(path)

    def regions_of(self, path: Path = ()) -> Dict[str, str]:
        if self._configuration is None:
            return {}
        return self._configuration.regions_of(path)

    def snapshot(self) -> Dict[str, List[str]]:
        if self._configuration is None:
            return {}
        return self._configuration.snapshot()

    def __repr__(self) -> str:
        return f"Interpreter(mode={self._mode.value}, snapshot={self.snapshot()})"
