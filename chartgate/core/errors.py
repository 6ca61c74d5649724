# chartgate/core/errors.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from typing import Any, Dict, Mapping, Optional, Sequence, Tuple


class ChartgateError(Exception):
    """
    Base exception class for errors within the chartgate library.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(ChartgateError):
    """
    Raised when a chart definition is invalid. Only ever raised while a chart is
    being built; a built chart never produces one at dispatch time.

    :param message: Human readable description of the violation.
    :param state: Identifier of the offending state, if any.
    :param action: Name of the offending action (transition), if any.
    :param path: Path of the chart level the violation was found in.
    """

    def __init__(
        self,
        message: str,
        state: Optional[str] = None,
        action: Optional[str] = None,
        path: Sequence[str] = (),
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.state = state
        self.action = action
        self.path: Tuple[str, ...] = tuple(path)

    def __str__(self) -> str:
        if self.path:
            return f"{self.message} (at {'.'.join(self.path)})"
        return self.message


class DispatchAdvisory(UserWarning):
    """
    Non-fatal advisory issued in development mode when a dispatched action is
    not handled by any active state. It never changes control flow.
    """

    def __init__(self, action: str, snapshot: Mapping[str, Sequence[str]]) -> None:
        super().__init__(f"Action '{action}' is not handled in the current configuration {dict(snapshot)}")
        self.action = action
        self.snapshot = snapshot
