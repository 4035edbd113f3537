"""Remix post-processing."""

from __future__ import annotations

import re
from pathlib import Path

from ..utils import print_info, print_warning, read_text, write_text
from .base import BasePostProcessor


# End of the last import statement (single- or multi-line).
_LAST_IMPORT_RE = re.compile(
    r"^(?:import\s[^;]*?from\s+[\"'][^\"']+[\"'];?|import\s+[\"'][^\"']+[\"'];?)[ \t]*\n",
    re.MULTILINE,
)
_CONTENT_TYPE_RE = re.compile(
    r'^([ \t]*)(responseHeaders\.set\("Content-Type", "text/html"\);)', re.MULTILINE
)

ROUTE_ERROR_IMPORT = 'import { isRouteErrorResponse, useRouteError } from "@remix-run/react";\n'


class RemixPostProcessor(BasePostProcessor):
    env_template = "env/remix.env.j2"

    async def add_health_check(self) -> list[Path]:
        path = await self.render_file("remix/api.health.tsx.j2", "app/routes/api.health.tsx")
        print_info("Added Remix health check endpoint at /api/health")
        return [path]

    async def add_security_headers(self) -> list[Path]:
        entry = self.find_file("app/entry.server.tsx", "app/entry.server.jsx")
        if entry is None:
            print_warning("No app/entry.server file found, skipping security headers")
            return []
        snippet = self.renderer.render("remix/security-headers.ts.j2", self.context())
        if not await self.insert_after(
            entry, _LAST_IMPORT_RE, snippet, guard="addSecurityHeaders", last=True
        ):
            return []

        content = await read_text(entry)
        content = _CONTENT_TYPE_RE.sub(r"\1\2\n\1addSecurityHeaders(responseHeaders);", content)
        await write_text(entry, content)
        print_info(f"Added security headers to {entry.name}")
        return [entry]

    async def add_production_optimizations(self) -> list[Path]:
        root = self.find_file("app/root.tsx", "app/root.jsx")
        if root is None:
            print_warning("No app/root file found, skipping error boundary")
            return []

        content = await read_text(root)
        if "export function ErrorBoundary" in content:
            return []
        if "useRouteError" not in content:
            content = ROUTE_ERROR_IMPORT + content
        content = content.rstrip("\n") + "\n" + self.renderer.render(
            "remix/error-boundary.tsx.j2", self.context()
        )
        await write_text(root, content)
        print_info(f"Added error boundary to {root.name}")
        return [root]
