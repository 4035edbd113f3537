"""Jinja2 rendering for the files create-fde-app writes itself.

Covers the generated README, the Terraform README and the TypeScript /
Vue sources added by post-processors and augmentations.  Deployment
templates that contain GitHub Actions ``${{ }}`` expressions are rendered
by :mod:`create_fde_app.deploy.placeholders` instead.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from .utils import write_text


class TemplateRenderer:
    """Renders ``.j2`` files from one template directory.

    Undefined variables raise :class:`jinja2.UndefinedError`.
    """

    def __init__(self, template_dir: str | Path) -> None:
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render *template_path* (relative to the template directory)."""
        return self.env.get_template(template_path).render(**context)

    async def render_to_file(
        self,
        template_path: str,
        output_path: str | Path,
        context: dict[str, Any],
    ) -> Path:
        """Render *template_path* and write it to *output_path*, creating parents."""
        return await write_text(output_path, self.render(template_path, context))
