# sim/hooks.py
from typing import Protocol


class PlannerHooks(Protocol):
    def search_start(self, *, start: int, goal: int, nodes: int, blocked: int): ...
    def search_end(self, *, status: str, iterations: int, ms: float, **kw): ...
    def expand(self, *, nodeid: int, cost: float, iterations: int, qsize: int): ...
    def error(self, *, reason: str, **kw): ...


class NoopHooks:
    def search_start(self, **_):
        pass

    def search_end(self, **_):
        pass

    def expand(self, *_, **__):
        pass

    def error(self, *_, **__):
        pass
