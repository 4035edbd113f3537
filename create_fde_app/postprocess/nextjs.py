"""Next.js post-processing (App Router and Pages Router layouts)."""

from __future__ import annotations

import re
from pathlib import Path

from ..utils import print_info, print_warning
from .base import BasePostProcessor


NEXT_CONFIG_FILES = ("next.config.js", "next.config.mjs", "next.config.ts")

_CONFIG_OBJECT_RE = re.compile(
    r"(module\.exports\s*=\s*\{|const\s+nextConfig(?:\s*:\s*NextConfig)?\s*=\s*\{)"
)

_STATUS_PAGES = (
    (404, "Page Not Found", "The page you are looking for does not exist."),
    (500, "Server Error", "Sorry, something went wrong on our end."),
)


class NextPostProcessor(BasePostProcessor):
    env_template = "env/nextjs.env.j2"
    local_env_file = ".env.local"

    def _app_dir(self) -> Path | None:
        for candidate in ("src/app", "app"):
            path = self.project_path / candidate
            if path.is_dir():
                return path
        return None

    def _pages_dir(self) -> Path:
        src_pages = self.project_path / "src" / "pages"
        if src_pages.is_dir():
            return src_pages
        return self.project_path / "pages"

    async def add_health_check(self) -> list[Path]:
        app_dir = self._app_dir()
        if app_dir is not None:
            relative = (app_dir / "api" / "health" / "route.ts").relative_to(self.project_path)
            path = await self.render_file("nextjs/health-app-route.ts.j2", relative.as_posix())
            print_info("Added Next.js App Router health check endpoint at /api/health")
        else:
            relative = (self._pages_dir() / "api" / "health.ts").relative_to(self.project_path)
            path = await self.render_file("nextjs/health-pages.ts.j2", relative.as_posix())
            print_info("Added Next.js Pages Router health check endpoint at /api/health")
        return [path]

    async def add_security_headers(self) -> list[Path]:
        config = self.find_file(*NEXT_CONFIG_FILES)
        if config is None:
            print_warning("No next.config file found, skipping security headers")
            return []
        snippet = self.renderer.render("nextjs/security-headers.js.j2", self.context())
        if await self.insert_after(config, _CONFIG_OBJECT_RE, snippet, guard="headers()"):
            print_info(f"Added security headers to {config.name}")
            return [config]
        return []

    async def add_production_optimizations(self) -> list[Path]:
        written = await self._add_error_pages()
        config = self.find_file(*NEXT_CONFIG_FILES)
        if config is None:
            return written
        snippet = self.renderer.render("nextjs/production-config.js.j2", self.context())
        if await self.insert_after(config, _CONFIG_OBJECT_RE, snippet, guard="poweredByHeader"):
            print_info(f"Added production optimizations to {config.name}")
            written.append(config)
        return written

    async def _add_error_pages(self) -> list[Path]:
        app_dir = self._app_dir()
        if app_dir is not None:
            relative = (app_dir / "error.tsx").relative_to(self.project_path)
            path = await self.render_file("nextjs/error.tsx.j2", relative.as_posix())
            print_info("Added App Router error page")
            return [path]

        pages_dir = self._pages_dir().relative_to(self.project_path)
        written = [
            await self.render_file(
                "nextjs/status-page.tsx.j2",
                f"{pages_dir.as_posix()}/{status}.tsx",
                status=status,
                title=title,
                message=message,
            )
            for status, title, message in _STATUS_PAGES
        ]
        print_info("Added Pages Router error pages")
        return written
