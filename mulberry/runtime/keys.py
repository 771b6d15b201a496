"""Key token to action table used by the input dispatcher."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

KeyAction = Callable[[], object]


@dataclass(frozen=True)
class KeyComboBinding:
    """Every token in ``combos`` runs ``handler``."""

    combos: tuple[str, ...]
    handler: KeyAction


class KeyComboRegistry:
    """Exact-match dispatch table; later registrations replace earlier ones."""

    def __init__(self) -> None:
        self._table: dict[str, KeyAction] = {}

    def register_bindings(self, *bindings: KeyComboBinding) -> KeyComboRegistry:
        for binding in bindings:
            self._table.update(dict.fromkeys(binding.combos, binding.handler))
        return self

    def dispatch(self, key: str) -> bool:
        """Run the action for ``key``; return whether one was registered."""
        action = self._table.get(key)
        if action is None:
            return False
        action()
        return True
