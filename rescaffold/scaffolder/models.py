"""Pydantic v2 models for the resource scaffolding engine.

Defines resource names, artifact kinds, per-artifact outcomes and the
exceptions raised for API misuse.
"""

from __future__ import annotations

import re
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from ..utils import ucfirst
from .inflector import Inflector


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ScaffoldError(Exception):
    """Base class for scaffolding contract violations."""


class InvalidResourceName(ScaffoldError, ValueError):
    """Raised for a blank name or one that is not a plain file stem."""


class UnsupportedArtifactKind(ScaffoldError):
    """Raised when a file write is requested for a kind it cannot render."""

    def __init__(self, kind: object, file_name: str = "") -> None:
        self.kind = kind
        self.file_name = file_name
        detail = f" ({file_name})" if file_name else ""
        super().__init__(f"Not supported: {kind}{detail}")


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class ArtifactKind(str, Enum):
    """Closed set of artifacts the engine knows how to produce."""
    MODEL = "model"
    VALIDATOR = "validator"
    TEST = "test"
    MIGRATION_CREATE_TABLE = "migration_create_table"
    MIGRATION_GENERIC = "migration_generic"


RESOURCE_FILE_KINDS: frozenset[ArtifactKind] = frozenset({
    ArtifactKind.MODEL,
    ArtifactKind.VALIDATOR,
    ArtifactKind.TEST,
})


class ArtifactStatus(str, Enum):
    """Outcome of a single artifact write."""
    CREATED = "created"
    SKIPPED_EXISTING = "skipped_existing"
    FAILED = "failed"
    PLANNED = "planned"


# ---------------------------------------------------------------------------
# Resource name
# ---------------------------------------------------------------------------

_IDENTIFIER_RE = re.compile(r"[^\W\d]\w*")
_STEM_RE = re.compile(r"\w+")


def clean_name(raw: object, label: str, *, leading_digit: bool = False) -> str:
    """Turn whitespace runs in *raw* into ``_`` and check the result.

    The cleaned name ends up inside file and folder names, so it may only
    hold word characters: no path separators, dots or unencodable
    surrogates.  A leading digit is allowed only with *leading_digit*.

    Raises:
        InvalidResourceName: If the cleaned name is empty or invalid.
    """
    cleaned = re.sub(r"\s+", "_", str(raw).strip())
    if not cleaned:
        raise InvalidResourceName(f"{label} must not be empty")
    pattern = _STEM_RE if leading_digit else _IDENTIFIER_RE
    if not pattern.fullmatch(cleaned):
        raise InvalidResourceName(
            f"{label} {cleaned!r} may only contain letters, digits and underscores"
        )
    return cleaned


class ResourceName(BaseModel):
    """Singular and plural forms of a resource, derived once per request.

    ``plural`` is always ``pluralize(singular)``; neither form is re-derived
    after construction so every generated file agrees on both.
    """

    model_config = ConfigDict(frozen=True)

    raw: str = Field(..., description="Name as given by the caller")
    singular: str = Field(..., description="Capitalised singular form, e.g. 'Category'")
    plural: str = Field(..., description="Capitalised plural form, e.g. 'Categories'")

    @classmethod
    def from_raw(cls, raw: str, inflector: Inflector) -> "ResourceName":
        """Normalise *raw* into its singular/plural pair.

        Raises:
            InvalidResourceName: If *raw* is blank or is not an identifier
                once whitespace runs become underscores.
        """
        name = ucfirst(clean_name(raw, "Resource name"))
        if inflector.is_singular(name):
            singular = name
        else:
            singular = ucfirst(inflector.singularize(name))
        plural = inflector.pluralize(singular)
        return cls(raw=raw, singular=singular, plural=plural)

    @property
    def class_name(self) -> str:
        """Denormalised singular used as the class name in rendered code."""
        return Inflector.from_underscores(self.singular)

    @property
    def plural_class_name(self) -> str:
        return Inflector.from_underscores(self.plural)

    @property
    def directory(self) -> str:
        """Resource folder name: always lowercase plural."""
        return self.plural.lower()

    @property
    def file_stem(self) -> str:
        return self.singular.lower()

    @property
    def table_name(self) -> str:
        return self.plural.lower()


# ---------------------------------------------------------------------------
# Requests and outcomes
# ---------------------------------------------------------------------------

class ScaffoldRequest(BaseModel):
    """Input for one generation run."""

    raw_name: str = Field(..., description="Resource name as typed by the user")
    kinds: list[ArtifactKind] = Field(
        default_factory=lambda: [
            ArtifactKind.MODEL,
            ArtifactKind.MIGRATION_CREATE_TABLE,
            ArtifactKind.VALIDATOR,
            ArtifactKind.TEST,
        ],
        description="Artifacts to generate, in order",
    )
    persist: bool = Field(default=True, description="False renders without touching the filesystem")


class ArtifactOutcome(BaseModel):
    """Result of writing (or trying to write) one artifact."""

    kind: ArtifactKind
    status: ArtifactStatus
    path: Path
    cause: Optional[str] = Field(default=None, description="Error text for failed writes")

    @computed_field  # type: ignore[misc]
    @property
    def ok(self) -> bool:
        """Existing files and dry-run plans count as success."""
        return self.status is not ArtifactStatus.FAILED


class MigrationResult(ArtifactOutcome):
    """Outcome of a migration request plus the derived identifiers."""

    migration_name: str
    table_name: Optional[str] = None


class ScaffoldResult(BaseModel):
    """Per-artifact outcomes of one request.

    Best effort: a failed artifact never undoes another's success.
    """

    resource: Optional[ResourceName] = None
    outcomes: list[ArtifactOutcome] = Field(default_factory=list)

    def add(self, outcome: ArtifactOutcome) -> ArtifactOutcome:
        self.outcomes.append(outcome)
        return outcome

    def by_kind(self, kind: ArtifactKind) -> list[ArtifactOutcome]:
        return [o for o in self.outcomes if o.kind is kind]

    @property
    def created(self) -> list[ArtifactOutcome]:
        return [o for o in self.outcomes if o.status is ArtifactStatus.CREATED]

    @property
    def skipped(self) -> list[ArtifactOutcome]:
        return [o for o in self.outcomes if o.status is ArtifactStatus.SKIPPED_EXISTING]

    @property
    def failed(self) -> list[ArtifactOutcome]:
        return [o for o in self.outcomes if o.status is ArtifactStatus.FAILED]

    @property
    def ok(self) -> bool:
        return not self.failed
