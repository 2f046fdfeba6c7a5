# runtime/services.py
import threading
from collections.abc import Callable
from typing import Any

from lane_router.errors import ConfigurationError, UnknownService

ServiceHandler = Callable[[Any], Any]


class ServiceRegistry:
    """
    In-process request/response endpoints keyed by scoped name.
    Plugins register handlers at configure time; operators call them between searches.
    """

    def __init__(self):
        self._handlers: dict[str, ServiceHandler] = {}
        self._lock = threading.Lock()

    def register(self, name: str, handler: ServiceHandler) -> None:
        with self._lock:
            if name in self._handlers:
                raise ConfigurationError(f"Service {name!r} is already registered")
            self._handlers[name] = handler

    def call(self, name: str, request: Any) -> Any:
        with self._lock:
            try:
                handler = self._handlers[name]
            except KeyError:
                raise UnknownService(f"Unknown service {name!r}") from None
        return handler(request)

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._handlers)

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._handlers
