"""Explicit event-subscription bus.

Views receive a bus from their embedder and register plain methods on it.
A ``Binding`` records the event, the handler and any bound arguments; two
bindings compare equal when all three match, so a view can unbind exactly
what it bound.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

LINE_UP = "line-up"
LINE_DOWN = "line-down"
COLUMN_LEFT = "column-left"
COLUMN_RIGHT = "column-right"
DRAG_PRESS = "drag-press"
DRAG_MOVE = "drag-move"
DRAG_RELEASE = "drag-release"

INPUT_EVENTS = (
    LINE_UP,
    LINE_DOWN,
    COLUMN_LEFT,
    COLUMN_RIGHT,
    DRAG_PRESS,
    DRAG_MOVE,
    DRAG_RELEASE,
)


@dataclass(frozen=True)
class Binding:
    """One handler subscribed to one named event."""

    event: str
    handler: Callable[..., object]
    args: tuple[object, ...] = ()

    def owner(self) -> object | None:
        """Return the object a bound-method handler belongs to."""
        return getattr(self.handler, "__self__", None)


class EventBus:
    """Ordered, per-event handler table with explicit bind/unbind."""

    def __init__(self) -> None:
        self._bindings: dict[str, list[Binding]] = {}

    def bind(self, event: str, handler: Callable[..., object], *args: object) -> Binding:
        """Subscribe ``handler``; it is called as ``handler(*args, *payload)``.

        Binding the same handler and arguments twice keeps a single entry.
        """
        binding = Binding(event, handler, tuple(args))
        bindings = self._bindings.setdefault(event, [])
        if binding not in bindings:
            bindings.append(binding)
        return binding

    def unbind(self, binding: Binding) -> bool:
        """Remove one binding; return whether it was present."""
        bindings = self._bindings.get(binding.event)
        if not bindings or binding not in bindings:
            return False
        bindings.remove(binding)
        if not bindings:
            del self._bindings[binding.event]
        return True

    def unbind_all(self, owner: object) -> int:
        """Remove every bound-method handler belonging to ``owner``."""
        removed = 0
        for event in list(self._bindings):
            kept = [binding for binding in self._bindings[event] if binding.owner() is not owner]
            removed += len(self._bindings[event]) - len(kept)
            if kept:
                self._bindings[event] = kept
            else:
                del self._bindings[event]
        return removed

    def is_bound(self, binding: Binding) -> bool:
        return binding in self._bindings.get(binding.event, ())

    def bindings(self, event: str) -> tuple[Binding, ...]:
        return tuple(self._bindings.get(event, ()))

    def trigger(self, event: str, *payload: object) -> int:
        """Call every handler bound to ``event``; return how many ran.

        Handlers bound or unbound while dispatching take effect on the next
        trigger.
        """
        bindings = tuple(self._bindings.get(event, ()))
        for binding in bindings:
            binding.handler(*binding.args, *payload)
        return len(bindings)
