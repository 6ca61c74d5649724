# chartgate/core/types.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

"""
Type definitions, enums and constants shared across the interpreter.

Design:
- No runtime dependencies on other chartgate modules
- Only contains type aliases, enums and constants
- Used by chart.py, configuration.py, projection.py and the runtime package
"""

from enum import Enum
from typing import Any, Awaitable, Callable, Mapping, Optional, Sequence, Union

# Key of the single region of a chart that owns no parallel region set.
DEFAULT_REGION = "default"

# Separator used by dotted state and region paths.
PATH_SEPARATOR = "."


class Mode(Enum):
    """Selects whether the interpreter reports unhandled dispatches.

    DEVELOPMENT issues a DispatchAdvisory warning for every dispatch that no
    active state handles; PRODUCTION stays silent. Gating is identical in both.
    """

    DEVELOPMENT = "development"
    PRODUCTION = "production"


# Identifiers
StateID = str
RegionKey = str
ActionName = str

# A state path, either dotted ("DASHBOARD.issues.LIST") or pre-split.
Path = Union[str, Sequence[str]]

# Callable types
StateAccessor = Callable[[], Any]
GuardFunction = Callable[[Any], Any]
ActionResult = Optional[Awaitable[Any]]

# Read models
Snapshot = Mapping[RegionKey, Sequence[StateID]]
MatchQuery = Mapping[str, Any]
