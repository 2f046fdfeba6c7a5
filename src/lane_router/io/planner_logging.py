# io/planner_logging.py
import json
import logging
import sys

from lane_router.sim.hooks import NoopHooks


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname,
            "msg": record.getMessage(),
            "logger": record.name,
        }
        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            payload.update(extra)
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(name="lane_router", level="INFO") -> logging.Logger:
    """Attach a stdout JSON handler to the package logger (once)."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        h = logging.StreamHandler(sys.stdout)
        h.setFormatter(JsonFormatter())
        logger.addHandler(h)
    logger.setLevel(level)
    return logger


class PlannerLogging(NoopHooks):
    """
    One place to shape and emit structured logs for route searches.
    """

    def __init__(
        self,
        server: str = "route_server",
        level: str = "INFO",
        debug: bool = False,
        sample_every: int = 1000,
        logger: logging.Logger | None = None,
    ):
        self.server, self.debug, self.sample_every = server, debug, max(1, sample_every)
        self.log = logger or configure_logging(level=level).getChild("planner")
        self._searches = 0

    # --------------- Helpers -----------------------------

    def _emit(self, level: str, msg: str, **extra):
        payload = {"server": self.server, "search": self._searches}
        self.log.log(getattr(logging, level), msg, extra={"extra": {**payload, **extra}})

    # --------------------------------------------------------
    # search lifecycle

    def search_start(self, *, start: int, goal: int, nodes: int, blocked: int):
        self._searches += 1
        self._emit("INFO", "search_start", start=start, goal=goal, nodes=nodes, blocked=blocked)

    def search_end(self, *, status: str, iterations: int, ms: float, **extra):
        level = "INFO" if status == "found" else "WARNING"
        self._emit(level, "search_end", status=status, iterations=iterations, ms=round(ms, 3), **extra)

    def expand(self, *, nodeid: int, cost: float, iterations: int, qsize: int):
        if self.debug and (iterations % self.sample_every) == 0:
            self._emit("DEBUG", "expand", nodeid=nodeid, cost=cost, iterations=iterations, qsize=qsize)

    def error(self, *, reason: str, **extra):
        self._emit("ERROR", "search_error", reason=reason, **extra)
