"""rescaffold scaffolder -- generates resource files from templates.

This module takes a resource name, derives its singular and plural forms
once, and renders the model, validator, unit test and table migration for
it.  Files that already exist are left untouched.

Quick usage::

    from rescaffold.config import Config
    from rescaffold.scaffolder import ResourceGenerator

    generator = ResourceGenerator(Config(app_root=Path("./my-app")))
    result = generator.new_resource("Category")
    for outcome in result.outcomes:
        print(outcome.kind, outcome.status, outcome.path)
"""

from .generator import ResourceGenerator
from .inflector import Inflector
from .migrations import MigrationWriter
from .models import (
    ArtifactKind,
    ArtifactOutcome,
    ArtifactStatus,
    InvalidResourceName,
    MigrationResult,
    ResourceName,
    ScaffoldError,
    ScaffoldRequest,
    ScaffoldResult,
    UnsupportedArtifactKind,
)
from .templates import TemplateRenderer

__all__ = [
    # Engine
    "ResourceGenerator",
    "ScaffoldRequest",
    "ScaffoldResult",
    "ArtifactKind",
    "ArtifactOutcome",
    "ArtifactStatus",
    "ResourceName",
    # Collaborators
    "Inflector",
    "MigrationWriter",
    "MigrationResult",
    "TemplateRenderer",
    # Errors
    "ScaffoldError",
    "InvalidResourceName",
    "UnsupportedArtifactKind",
]
