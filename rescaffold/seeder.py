"""Random database seeding.

Seed generators are plain functions registered under a resource key at
startup.  ``random_seeder`` looks the generator up by key, calls it
``quantity`` times and optionally hands every record to a persister.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from .logger import LogQueue

Generator = Callable[[], Any]
Persister = Callable[[Any], Any]


class SeederError(Exception):
    """Raised for unknown or duplicate seed generators and unsaveable seeds."""


class SeederRegistry:
    """Maps resource keys to seed generator functions."""

    def __init__(
        self,
        persister: Optional[Persister] = None,
        log: Optional[LogQueue] = None,
    ) -> None:
        self._generators: dict[str, Generator] = {}
        self.persister = persister
        self.log = log

    def add(self, key: str, generator: Generator) -> None:
        if key in self._generators:
            raise SeederError(f"Seed generator already registered for {key!r}")
        self._generators[key] = generator

    def register(self, key: str) -> Callable[[Generator], Generator]:
        """Decorator form of :meth:`add`.

        Example::

            @seeds.register("articles")
            def random_article() -> Article:
                return Article(title=fake_title())
        """
        def decorator(fn: Generator) -> Generator:
            self.add(key, fn)
            return fn
        return decorator

    def keys(self) -> list[str]:
        return sorted(self._generators)

    def get(self, key: str) -> Generator:
        try:
            return self._generators[key]
        except KeyError:
            raise SeederError(
                f"No seed generator registered for {key!r}; known: {', '.join(self.keys()) or 'none'}"
            ) from None

    def random_seeder(self, key: str, quantity: int = 10, save: bool = True) -> list[Any]:
        """Generate *quantity* records with the generator registered as *key*.

        If *save* is true every record is passed to the persister as soon as
        it is generated.

        Returns:
            The generated records, in generation order.
        """
        generator = self.get(key)
        if save and self.persister is None:
            raise SeederError("Cannot save seeds: no persister configured")

        seeds: list[Any] = []
        for _ in range(quantity):
            item = generator()
            seeds.append(item)
            if save:
                self.persister(item)

        if self.log is not None:
            action = "Seeded" if save else "Generated"
            self.log.info(f"{action} {len(seeds)} {key} record(s)")
        return seeds
