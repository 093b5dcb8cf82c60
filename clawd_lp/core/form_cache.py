"""Short-lived persistence of the lock-up form"""

import json
import time
import logging
from dataclasses import replace
from pathlib import Path

from ..types import FormState

logger = logging.getLogger(__name__)

DEFAULT_CACHE_FILE = "form_cache.json"


class FormCache:
    """
    JSON file holding the last lock-up form state, valid for ttl_seconds.

    The path and the clock are injected so the math and operations layers
    never touch storage on their own.
    """

    def __init__(self, path=None, ttl_seconds=300, clock=time.time):
        """
        Args:
            path: Cache file location (./form_cache.json if None)
            ttl_seconds: How long a saved state stays valid
            clock: Callable returning the current unix time
        """
        self.path = Path(path) if path else Path.cwd() / DEFAULT_CACHE_FILE
        self.ttl_seconds = ttl_seconds
        self.clock = clock

    def load(self):
        """Return the cached FormState, or None if missing, stale or unreadable"""
        if not self.path.exists():
            return None
        try:
            with open(self.path) as f:
                state = FormState.from_dict(json.load(f))
        except (OSError, ValueError, TypeError) as e:
            logger.warning("Ignoring unreadable form cache %s: %s", self.path, e)
            return None

        if self.clock() - state.ts > self.ttl_seconds:
            logger.debug("Form cache expired")
            self.clear()
            return None
        return state

    def save(self, state):
        """
        Persist a copy of state stamped with the current time.

        Returns:
            The stamped copy, or None for an empty form (not saved)
        """
        if state.is_empty:
            return None
        stamped = replace(state, ts=self.clock())
        with open(self.path, "w") as f:
            json.dump(stamped.to_dict(), f, indent=2)
        return stamped

    def clear(self):
        """Remove the cache file"""
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
