"""
Core package: the structural model and pure functions over it.

Architecture:
- chart: validation and the immutable arena of nodes and regions
- configuration: the active-state tree, stored as region -> node indices
- guards: guard evaluation against host state
- projection: enabled-action map and state matching
- hooks: observer registration and notification

Nothing in this package invokes host actions; that is the runtime's job.
"""

from .chart import Chart, ChartNode, Region, Transition, build
from .configuration import Configuration, initialize
from .errors import ChartgateError, ConfigurationError, DispatchAdvisory
from .projection import Projection

__all__ = [
    "Chart",
    "ChartNode",
    "Region",
    "Transition",
    "build",
    "Configuration",
    "initialize",
    "ChartgateError",
    "ConfigurationError",
    "DispatchAdvisory",
    "Projection",
]
