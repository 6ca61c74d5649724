# tests/support.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

"""Chart definitions and host doubles shared by the test suite."""

from typing import Any, Callable, Dict, List, Optional, Tuple


# -----------------------------------------------------------------------------
# CHART DEFINITIONS
# -----------------------------------------------------------------------------


def has_credentials(state) -> bool:
    return bool(state["username"] and state["password"])


def auth_definition() -> Dict[str, Any]:
    """Login flow with a guarded login action."""
    return {
        "initial": "LOGIN",
        "states": {
            "LOGIN": {
                "on": {
                    "changeUsername": None,
                    "changePassword": None,
                    "login": {"target": "AUTHENTICATING", "guard": has_credentials},
                }
            },
            "AUTHENTICATING": {"on": {"resolveUser": "AUTHENTICATED", "rejectUser": "ERROR"}},
            "AUTHENTICATED": {"on": {"logout": "LOGIN"}},
            "ERROR": {"on": {"tryAgain": "LOGIN"}},
        },
    }


def dashboard_definition() -> Dict[str, Any]:
    """An authenticated state owning two parallel regions."""
    return {
        "initial": "AUTHENTICATED",
        "states": {
            "LOGIN": {"on": {"login": "AUTHENTICATED"}},
            "AUTHENTICATED": {
                "entry": "enterAuthenticated",
                "exit": "exitAuthenticated",
                "on": {"logout": "LOGIN"},
                "chart": {
                    "issues": {
                        "initial": "LOADING",
                        "states": {
                            "LOADING": {
                                "entry": "fetchIssues",
                                "exit": "leaveLoading",
                                "on": {"resolveIssues": "LIST", "rejectIssues": "ERROR"},
                            },
                            "LIST": {"on": {"refresh": "LOADING", "openIssue": None}},
                            "ERROR": {"on": {"retry": "LOADING"}},
                        },
                    },
                    "projects": {
                        "initial": "LOADING",
                        "states": {
                            "LOADING": {"entry": "fetchProjects", "on": {"resolveProjects": "LIST"}},
                            "LIST": {"on": {"refresh": "LOADING"}},
                        },
                    },
                },
            },
        },
    }


def parallel_definition() -> Dict[str, Any]:
    """Two parallel regions at the top level."""
    return {
        "issues": {
            "initial": "LOADING",
            "states": {
                "LOADING": {"entry": "fetchIssues", "on": {"resolveIssues": "LIST", "rejectIssues": "ERROR"}},
                "LIST": {},
                "ERROR": {"on": {"retry": "LOADING"}},
            },
        },
        "projects": {
            "initial": "LOADING",
            "states": {
                "LOADING": {"entry": "fetchProjects", "on": {"resolveProjects": "LIST"}},
                "LIST": {},
            },
        },
    }


def nested_definition() -> Dict[str, Any]:
    """A state owning a single nested chart."""
    return {
        "initial": "ISSUES",
        "states": {
            "ISSUES": {
                "entry": "enterIssues",
                "on": {"close": "IDLE"},
                "chart": {
                    "initial": "LOADING",
                    "states": {
                        "LOADING": {"entry": "fetchIssues", "on": {"resolve": "LIST"}},
                        "LIST": {},
                    },
                },
            },
            "IDLE": {"on": {"open": "ISSUES"}},
        },
    }


# -----------------------------------------------------------------------------
# HOST DOUBLES
# -----------------------------------------------------------------------------


class RecordingHost:
    """
    Host collaborator double. Records every (action, payload) call and runs an
    optional behaviour per action, called as behaviour(payload, state).
    """

    def __init__(self, behaviours: Optional[Dict[str, Callable[..., Any]]] = None) -> None:
        self.calls: List[Tuple[str, Any]] = []
        self.behaviours = dict(behaviours or {})

    def __call__(self, action: str, payload: Any, state: Callable[[], Any]) -> Any:
        self.calls.append((action, payload))
        behaviour = self.behaviours.get(action)
        if behaviour is not None:
            return behaviour(payload, state)
        return None

    @property
    def names(self) -> List[str]:
        return [action for action, _ in self.calls]


class RecordingObserver:
    """Observer hook double recording every notification."""

    def __init__(self) -> None:
        self.events: List[Tuple[Any, ...]] = []

    def on_enter(self, path):
        self.events.append(("enter", path))

    def on_exit(self, path):
        self.events.append(("exit", path))

    def on_transition(self, source, target, action):
        self.events.append(("transition", source, target, action))

    def on_error(self, error):
        self.events.append(("error", error))

