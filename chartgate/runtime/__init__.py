"""
Runtime package for dispatch and action execution.

Architecture:
- interpreter: lookup, guards, action-before-transition ordering, exit/entry sequencing
- actions: host collaborator protocol, two-phase action results, ActionRegistry
"""

from .actions import ActionContext, ActionHost, ActionRegistry
from .interpreter import DispatchResult, Interpreter

__all__ = ["ActionContext", "ActionHost", "ActionRegistry", "DispatchResult", "Interpreter"]
