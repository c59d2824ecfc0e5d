"""Collision-free short name generation."""

from __future__ import annotations

import hashlib
import random
import re
import threading
import time
from collections.abc import Callable, Iterable
from typing import Final

DEFAULT_PREFIX: Final[str] = "elem"
DELIMITER: Final[str] = "-"
FINGERPRINT_LENGTH: Final[int] = 5
MAX_ATTEMPTS: Final[int] = 100

PREFIX_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z0-9_-]*$")
PREFIX_HINT: Final[str] = "Use only alphanumeric characters, hyphens, and underscores"


class NameExhaustedError(Exception):
    """Raised when no unused candidate is found within the attempt bound."""

    def __init__(self, prefix: str, attempts: int) -> None:
        super().__init__(f"Unable to generate unique name after {attempts} attempts.")
        self.prefix = prefix
        self.attempts = attempts


def validate_prefix(value: str) -> str | None:
    """Return a user-facing problem description, or None when the prefix is usable."""
    if PREFIX_PATTERN.match(value):
        return None
    return PREFIX_HINT


def _clock_ms() -> int:
    return time.time_ns() // 1_000_000


class UniqueNameGenerator:
    """Produces names that never repeat and never collide with registered names.

    The set of used names only grows, except through an explicit ``clear``.
    Check-and-register runs under a lock so concurrent callers cannot be
    handed the same candidate.
    """

    def __init__(
        self,
        random_source: Callable[[], float] | None = None,
        clock: Callable[[], int] | None = None,
        max_attempts: int = MAX_ATTEMPTS,
    ) -> None:
        self._random = random_source or random.random
        self._clock = clock or _clock_ms
        self._max_attempts = max_attempts
        self._used: set[str] = set()
        self._lock = threading.Lock()

    def generate_unique_name(self, prefix: str = DEFAULT_PREFIX) -> str:
        """Return ``prefix`` + ``-`` + a 5-hex fingerprint not seen before."""
        with self._lock:
            for _ in range(self._max_attempts):
                candidate = f"{prefix}{DELIMITER}{self._fingerprint()}"
                if candidate in self._used:
                    continue
                self._used.add(candidate)
                return candidate
        raise NameExhaustedError(prefix=prefix, attempts=self._max_attempts)

    def add_used_name(self, name: str) -> None:
        """Mark a name as unavailable."""
        with self._lock:
            self._used.add(name)

    def add_used_names(self, names: Iterable[str]) -> None:
        """Mark many names as unavailable."""
        with self._lock:
            self._used.update(names)

    def get_used_names(self) -> list[str]:
        """Return a copy of the used-name set, order not significant."""
        with self._lock:
            return list(self._used)

    def clear(self) -> None:
        """Forget every used name."""
        with self._lock:
            self._used.clear()

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._used

    def __len__(self) -> int:
        with self._lock:
            return len(self._used)

    def _fingerprint(self) -> str:
        seed = f"{self._clock()}{self._random()}"
        digest = hashlib.md5(seed.encode("utf-8"), usedforsecurity=False)
        return digest.hexdigest()[:FINGERPRINT_LENGTH]
