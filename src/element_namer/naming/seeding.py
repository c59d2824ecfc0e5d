"""Keeps a generator's used names in step with an identifier index."""

from __future__ import annotations

from typing import TYPE_CHECKING

from element_namer.naming.generator import DEFAULT_PREFIX, UniqueNameGenerator

if TYPE_CHECKING:
    from element_namer.index.manager import IdentifierIndex


class SeededGenerator:
    """Generator view that reseeds from the index after every invalidation.

    Whether a reseed is due is computed from the index generation, so it
    cannot drift from the index's own cache state.
    """

    def __init__(
        self, index: IdentifierIndex, generator: UniqueNameGenerator | None = None
    ) -> None:
        self._index = index
        self._generator = generator or UniqueNameGenerator()
        self._seeded_generation: int | None = None

    @property
    def generator(self) -> UniqueNameGenerator:
        return self._generator

    @property
    def needs_reseed(self) -> bool:
        return self._seeded_generation != self._index.generation

    def seed_if_needed(self) -> bool:
        """Register every indexed name with the generator; return True if it seeded."""
        if not self.needs_reseed:
            return False
        snapshot = self._index.get_snapshot()
        self._generator.add_used_names(record.name for record in snapshot.records)
        self._seeded_generation = self._index.generation
        return True

    def generate(self, prefix: str = DEFAULT_PREFIX) -> str:
        """Seed when stale, then generate one name."""
        self.seed_if_needed()
        return self._generator.generate_unique_name(prefix)
