# lane_router/errors.py


class LaneRouterError(Exception):
    """Base class for every error raised by the route server."""


class InvalidGraph(LaneRouterError):
    """Empty graph, unknown id, or an edge without a usable cost."""


class NoRouteFound(LaneRouterError):
    """The goal is unreachable under the current blocks and scores."""


class SearchTimedOut(LaneRouterError):
    """The search hit its configured iteration cap before reaching the goal."""


class ConfigurationError(LaneRouterError):
    """A scoring plugin could not be resolved, validated or configured."""


class GridUnavailable(LaneRouterError):
    """A grid source has no occupancy grid to hand out yet."""


class UnknownService(LaneRouterError):
    """No service endpoint is registered under the requested name."""
