from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from lane_router.runtime.services import ServiceRegistry

if TYPE_CHECKING:
    from lane_router.app.protocols import GridSource


class Aggregation(Enum):
    SUM = "sum"
    MAX = "max"
    LAST = "last"


class SearchStatus(Enum):
    FOUND = "found"
    NO_ROUTE = "no_route"
    TIMED_OUT = "timed_out"
    INVALID = "invalid"
    ERROR = "error"


@dataclass
class ScorerContext:
    """Everything a scoring plugin may touch while it configures itself."""

    name: str
    params: Any = None  # validated pydantic model for the plugin kind
    host_name: str = "route_server"
    services: ServiceRegistry = field(default_factory=ServiceRegistry)
    grid_sources: Mapping[str, GridSource] = field(default_factory=dict)
    logger: logging.Logger | None = None

    def scoped(self, suffix: str) -> str:
        """Service/parameter scope for this plugin, e.g. 'route_server/Closures/adjust_edges'."""
        return f"{self.host_name}/{self.name}/{suffix}"
