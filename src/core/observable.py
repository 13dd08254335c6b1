from __future__ import annotations

from typing import Callable, Generic, List, TypeVar

from utils.logger import get_logger

_logger = get_logger(__name__)

T = TypeVar("T")

Listener = Callable[[T], None]


class Observable(Generic[T]):
    """
    A single process-wide value plus publish/subscribe.

    Only the owning component calls ``publish``; everyone else gets the value
    through ``value`` or a subscription. Values are expected to be immutable
    (frozen dataclasses, tuples) so subscribers cannot mutate shared state.
    """

    def __init__(self, initial: T, name: str = "observable"):
        self._value = initial
        self._name = name
        self._listeners: List[Listener] = []

    @property
    def value(self) -> T:
        return self._value

    def subscribe(self, listener: Listener, *, replay: bool = False) -> Callable[[], None]:
        """
        Register ``listener`` for every future publish.
        With ``replay`` the current value is delivered immediately.
        Returns a callable that unsubscribes.
        """
        self._listeners.append(listener)
        if replay:
            listener(self._value)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, value: T) -> None:
        self._value = value
        # copy: listeners may unsubscribe while being notified
        for listener in list(self._listeners):
            try:
                listener(value)
            except Exception:
                _logger.exception(f"{self._name} listener {listener!r} failed")
