# tests/conftest.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from typing import Any, Dict

import pytest
from support import RecordingHost, RecordingObserver, auth_definition, dashboard_definition

from chartgate import Interpreter, Mode


def pytest_configure(config):
    """Register custom marks."""
    config.addinivalue_line("markers", "property: mark test as a property-based test")


@pytest.fixture
def host() -> RecordingHost:
    return RecordingHost()


@pytest.fixture
def app_state() -> Dict[str, Any]:
    return {"username": "", "password": ""}


@pytest.fixture
def observer() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture
def auth_interpreter(host, app_state) -> Interpreter:
    """A started login-flow interpreter reading ``app_state``."""
    interpreter = Interpreter(auth_definition(), host, state=lambda: app_state, mode=Mode.PRODUCTION)
    interpreter.start()
    return interpreter


@pytest.fixture
def dashboard_interpreter(host, observer) -> Interpreter:
    interpreter = Interpreter(dashboard_definition(), host, mode=Mode.PRODUCTION, hooks=[observer])
    interpreter.start()
    return interpreter
