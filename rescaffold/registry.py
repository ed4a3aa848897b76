"""Registry of generated resources.

Keeps the resource folders registered as search paths and rediscovers the
generated model, validator and test files on :meth:`reload_resources`.
Discovery only looks at file names; generated code is never imported.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, Field

from .config import Config

if TYPE_CHECKING:
    from .scaffolder.inflector import Inflector


class ResourceEntry(BaseModel):
    """Files discovered for one resource folder."""

    name: str = Field(..., description="Resource folder name (lowercase plural)")
    path: Path
    model: Optional[Path] = None
    validator: Optional[Path] = None
    test: Optional[Path] = None


class ResourceRegistry:
    """Search paths and discovered resources for one application root."""

    def __init__(self, config: Config, inflector: Optional[Inflector] = None) -> None:
        if inflector is None:
            # Imported here: the scaffolder package imports this module.
            from .scaffolder.inflector import Inflector

            inflector = Inflector()
        self.config = config
        self.inflector = inflector
        self._search_paths: list[Path] = []
        self.resources: dict[str, ResourceEntry] = {}

    @property
    def search_paths(self) -> list[Path]:
        return list(self._search_paths)

    def register_path(self, path: str | Path) -> bool:
        """Add *path* to the search paths.

        Returns:
            ``True`` if the path was new, ``False`` if already registered.
        """
        resolved = Path(path).resolve()
        if resolved in self._search_paths:
            return False
        self._search_paths.append(resolved)
        return True

    def reload_resources(self) -> dict[str, ResourceEntry]:
        """Rescan the resources folder and register every resource found."""
        root = self.config.resources_path
        discovered: dict[str, ResourceEntry] = {}
        if root.is_dir():
            for resource_dir in sorted(p for p in root.iterdir() if p.is_dir()):
                discovered[resource_dir.name] = self._scan(resource_dir)
                self.register_path(resource_dir)
        self.resources = discovered
        return discovered

    def _scan(self, resource_dir: Path) -> ResourceEntry:
        """Look up the files named after the singular of *resource_dir*."""
        stem = self.inflector.singularize(resource_dir.name).lower()
        entry = ResourceEntry(name=resource_dir.name, path=resource_dir)

        model = resource_dir / f"{stem}{self.config.model_file_postfix}"
        if model.is_file():
            entry.model = model
        validator = resource_dir / f"{stem}{self.config.validator_file_postfix}"
        if validator.is_file():
            entry.validator = validator
        test = self.config.test_unit_path / f"{stem}{self.config.test_file_identifier}"
        if test.is_file():
            entry.test = test
        return entry
