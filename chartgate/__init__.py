"""chartgate: action gating with hierarchical, parallel statecharts

This package interprets statecharts whose states decide which named actions a
host application may run, and exposes read-only projections of the active
configuration for UI layers.

Responsibilities:
    - Chart definition, validation and freezing
    - Configuration tracking across nested and parallel regions
    - Guarded dispatch with ordered exit/entry hooks
    - Coroutine actions that transition at their first suspension point
    - Enabled-action and state-matching projections

Interactions:
    - Host action collaborator (any callable, or the bundled ActionRegistry)
    - Host state accessor read by guards and actions
    - Observer hooks for diagnostics
    - Logging system for diagnostics

Cross-cutting Concerns:
    Concurrency:
        - Single cooperative thread of control, no locks
        - Continuations run as asyncio tasks

    Error Handling:
        - ConfigurationError at build time only
        - Gated-out dispatch is a silent no-op
        - DispatchAdvisory warnings in development mode

    Logging:
        - Module loggers under the "chartgate" namespace
        - No handlers installed by the library
"""

from chartgate.core.chart import Chart, build
from chartgate.core.configuration import Configuration, initialize
from chartgate.core.definitions import ChartDef, StateDef, TransitionDef
from chartgate.core.errors import ChartgateError, ConfigurationError, DispatchAdvisory
from chartgate.core.guards import GuardCondition, evaluate
from chartgate.core.hooks import HookManager
from chartgate.core.projection import Projection, enabled_actions, matches
from chartgate.core.types import DEFAULT_REGION, Mode
from chartgate.runtime.actions import ActionContext, ActionHost, ActionRegistry
from chartgate.runtime.interpreter import AppliedTransition, DispatchResult, Interpreter

__version__ = "0.1.0"

__all__ = [
    # Definition
    "build",
    "Chart",
    "ChartDef",
    "StateDef",
    "TransitionDef",
    # Configuration and projections
    "Configuration",
    "initialize",
    "Projection",
    "enabled_actions",
    "matches",
    # Guards
    "evaluate",
    "GuardCondition",
    # Runtime
    "Interpreter",
    "DispatchResult",
    "AppliedTransition",
    "ActionHost",
    "ActionRegistry",
    "ActionContext",
    "HookManager",
    "Mode",
    "DEFAULT_REGION",
    # Errors
    "ChartgateError",
    "ConfigurationError",
    "DispatchAdvisory",
]
