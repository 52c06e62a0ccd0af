"""
CooldownManager — centralises cooldown state so gesture classes
don't need to track time themselves.
"""
from __future__ import annotations
from typing import Dict, Optional


class CooldownManager:
    """
    Per-event cooldown tracker driven by caller-supplied timestamps
    (frame time, not wall time), so it stays deterministic under test.

    Usage
    -----
    cm = CooldownManager(default_cooldown=1.2)
    if cm.ok("SHORTCUT", now):
        ...  # fire the event
    """

    def __init__(self, default_cooldown: float = 0.6) -> None:
        self._default = default_cooldown
        self._until: Dict[str, float] = {}

    def ready(self, name: str, now: float) -> bool:
        """True if ``name`` is out of cooldown at ``now``. Records nothing."""
        return now >= self._until.get(name, float("-inf"))

    def ok(self, name: str, now: float, cooldown: Optional[float] = None) -> bool:
        """
        Return True (and start a new cooldown period) if ``name`` is out of
        cooldown at ``now``.
        """
        if not self.ready(name, now):
            return False
        threshold = cooldown if cooldown is not None else self._default
        self._until[name] = now + threshold
        return True

    def cooldown_until(self, name: str) -> float:
        return self._until.get(name, float("-inf"))

    def reset(self, name: str) -> None:
        """Force-reset a specific cooldown (next call to ok() will succeed)."""
        self._until.pop(name, None)
