"""Shared post-processing applied right after the framework generator runs.

:class:`BasePostProcessor` maps the optional project features onto hook
methods.  Framework subclasses override the hooks they support; the base
versions only warn, so an unsupported feature never fails a run.

    feature            hook
    -----------------  -------------------------------
    env-vars           add_env_template
    health-check       add_health_check
    security           add_security_headers
    production-ready   add_production_optimizations
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

from ..config import ProjectSpec
from ..templates import TemplateRenderer
from ..utils import print_info, print_success, print_warning, read_text, write_text


_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


class BasePostProcessor:
    """Framework-agnostic post-processor and base class for the others."""

    #: Template under ``templates/env/`` used for ``.env.example``.
    env_template = "env/base.env.j2"
    #: Local env file written next to ``.env.example``.
    local_env_file = ".env"

    def __init__(
        self,
        project_path: Path,
        spec: ProjectSpec,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.project_path = Path(project_path)
        self.spec = spec
        self.renderer = renderer or TemplateRenderer(_DEFAULT_TEMPLATE_DIR)

    @property
    def framework(self) -> str:
        return self.spec.framework

    def context(self, **extra: Any) -> dict[str, Any]:
        config = self.spec.framework_config
        return {
            "project_name": self.spec.project_name,
            "framework": self.spec.framework,
            "port": config.port,
            "health_path": config.health_endpoint,
            **extra,
        }

    # -- Entry point -------------------------------------------------------

    async def process(self) -> list[Path]:
        """Run every hook whose feature is enabled and return written files."""
        written: list[Path] = []
        if self.spec.has_feature("env-vars"):
            written += await self.add_env_template()
        if self.spec.has_feature("health-check"):
            written += await self.add_health_check()
        if self.spec.has_feature("security"):
            written += await self.add_security_headers()
        if self.spec.has_feature("production-ready"):
            written += await self.add_production_optimizations()
        print_success(f"{self.spec.framework_config.display_name} post-processing completed")
        return written

    # -- Hooks -------------------------------------------------------------

    async def add_env_template(self) -> list[Path]:
        content = self.renderer.render(self.env_template, self.context())
        example = await write_text(self.project_path / ".env.example", content)
        local = await write_text(self.project_path / self.local_env_file, content)
        print_info(f"Added .env.example and {self.local_env_file}")
        return [example, local]

    async def add_health_check(self) -> list[Path]:
        print_warning(f"Health check endpoint not implemented for {self.framework}")
        return []

    async def add_security_headers(self) -> list[Path]:
        print_warning(f"Security headers not implemented for {self.framework}")
        return []

    async def add_production_optimizations(self) -> list[Path]:
        print_warning(f"Production optimizations not implemented for {self.framework}")
        return []

    # -- Helpers -----------------------------------------------------------

    async def render_file(self, template: str, relative: str, **extra: Any) -> Path:
        """Render *template* into ``project_path / relative``."""
        return await self.renderer.render_to_file(
            template, self.project_path / relative, self.context(**extra)
        )

    def find_file(self, *candidates: str) -> Path | None:
        """Return the first existing file among *candidates* (relative paths)."""
        for name in candidates:
            path = self.project_path / name
            if path.is_file():
                return path
        return None

    async def insert_after(
        self,
        path: Path,
        anchor: str | re.Pattern[str],
        snippet: str,
        *,
        guard: str,
        last: bool = False,
    ) -> bool:
        """Insert *snippet* right after the *anchor* match in *path*.

        Nothing is written when *guard* already occurs in the file or the
        anchor is not found.  With ``last=True`` the final match is used.

        Returns:
            ``True`` if the file was modified.
        """
        content = await read_text(path)
        if guard in content:
            return False
        pattern = re.compile(anchor, re.MULTILINE) if isinstance(anchor, str) else anchor
        matches = list(pattern.finditer(content))
        if not matches:
            print_warning(f"Could not find where to patch {path.name}, skipping")
            return False
        end = (matches[-1] if last else matches[0]).end()
        await write_text(path, content[:end] + snippet + content[end:])
        return True
