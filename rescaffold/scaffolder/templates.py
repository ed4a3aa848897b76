"""Jinja2 template rendering for resource scaffolding.

Every artifact kind maps to one ``.j2`` file under
``rescaffold/scaffolder/templates/``.  ``TemplateRenderer`` fills those files
with the canonical names of a resource.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .inflector import Inflector
from .models import ArtifactKind, UnsupportedArtifactKind


# ---------------------------------------------------------------------------
# Template locations
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"

ARTIFACT_TEMPLATES: dict[ArtifactKind, str] = {
    ArtifactKind.MODEL: "resource/model.py.j2",
    ArtifactKind.VALIDATOR: "resource/validator.py.j2",
    ArtifactKind.TEST: "resource/test.py.j2",
    ArtifactKind.MIGRATION_CREATE_TABLE: "migrations/create_table.py.j2",
    ArtifactKind.MIGRATION_GENERIC: "migrations/migration.py.j2",
}


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 templates for resource scaffolding.

    Templates are loaded from *template_dir* (the packaged templates by
    default).  Artifact templates receive the canonical singular
    class name and the plural collection name so that model, validator and
    test reference each other consistently.
    """

    def __init__(self, template_dir: Optional[str | Path] = None) -> None:
        self.template_dir = Path(template_dir or _DEFAULT_TEMPLATE_DIR)
        self.env = Environment(
            loader=FileSystemLoader(self.template_dir),
            autoescape=False,
            undefined=StrictUndefined,
            keep_trailing_newline=True,  # generated files end with a newline
            trim_blocks=True,
            lstrip_blocks=True,
        )
        # Register custom filters
        self.env.filters["snake_case"] = Inflector.to_underscores
        self.env.filters["pascal_case"] = Inflector.from_underscores

    # -- Rendering ---------------------------------------------------------

    def render(self, name: str, context: Mapping[str, Any]) -> str:
        """Render the template *name* (e.g. ``"resource/model.py.j2"``).

        Raises:
            jinja2.TemplateError: If the template cannot be loaded or uses a
                variable missing from *context*.
        """
        return self.env.get_template(name).render(context)

    def render_artifact(
        self,
        kind: ArtifactKind,
        singular_name: str,
        plural_name: str | None = None,
        **extra: Any,
    ) -> str:
        """Render the file contents for one artifact kind.

        Args:
            kind: Artifact to render.
            singular_name: Canonical class name, e.g. ``"BlogPost"``.
            plural_name: Collection name, e.g. ``"BlogPosts"``.  Required for
                ``TEST``; the other kinds fall back to the singular.
            **extra: Additional template variables (migration names, etc.).

        Raises:
            UnsupportedArtifactKind: If *kind* has no template.
        """
        template_path = ARTIFACT_TEMPLATES.get(kind)
        if template_path is None:
            raise UnsupportedArtifactKind(kind)
        if kind is ArtifactKind.TEST and not plural_name:
            raise ValueError("Test templates need the plural resource name")

        plural = plural_name or singular_name
        module_name = Inflector.to_underscores(singular_name)
        context = {
            "class_name": singular_name,
            "plural_class_name": plural,
            "module_name": module_name,
            "model_module": module_name,
            "validator_module": f"{module_name}_validator",
            "table_name": Inflector.to_underscores(plural),
            **extra,
        }
        return self.render(template_path, context)

    def list_templates(self, prefix: str = "") -> list[str]:
        """Sorted ``.j2`` names, optionally limited to the folder *prefix*."""
        folder = prefix.strip("/")
        return sorted(
            name
            for name in self.env.list_templates(extensions=["j2"])
            if not folder or name.startswith(folder + "/")
        )
