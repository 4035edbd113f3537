"""Shared pytest fixtures for the create-fde-app test suite.

Provides reusable fixtures for:
- ProjectSpec construction rooted in a temporary output directory
- Fake "freshly generated" framework projects on disk
- A mocked FrameworkGenerator that writes such a project instead of
  shelling out to npx
"""

from __future__ import annotations

import json
import textwrap
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from create_fde_app.config import ProjectSpec
from create_fde_app.framework import FrameworkGenerator


# ---------------------------------------------------------------------------
# Generated project skeletons
# ---------------------------------------------------------------------------

NEXT_CONFIG = textwrap.dedent("""\
    /** @type {import('next').NextConfig} */
    const nextConfig = {
      reactStrictMode: true,
    };

    module.exports = nextConfig;
""")

NUXT_CONFIG = textwrap.dedent("""\
    // https://nuxt.com/docs/api/configuration/nuxt-config
    export default defineNuxtConfig({
      devtools: { enabled: true },
    })
""")

REMIX_ENTRY_SERVER = textwrap.dedent("""\
    import { PassThrough } from "node:stream";
    import type { EntryContext } from "@remix-run/node";
    import { RemixServer } from "@remix-run/react";

    export default function handleRequest(
      request: Request,
      responseStatusCode: number,
      responseHeaders: Headers,
      remixContext: EntryContext
    ) {
      responseHeaders.set("Content-Type", "text/html");
      return new Response(null, { headers: responseHeaders, status: responseStatusCode });
    }
""")

REMIX_ROOT = textwrap.dedent("""\
    import { Links, Meta, Outlet, Scripts } from "@remix-run/react";

    export default function App() {
      return <Outlet />;
    }
""")


def write_project(root: Path, framework: str, name: str | None = None) -> Path:
    """Write the minimal file tree a framework generator would leave behind."""
    root.mkdir(parents=True, exist_ok=True)
    package = {
        "name": name or root.name,
        "version": "0.1.0",
        "private": True,
        "scripts": {"dev": "dev", "build": "build", "start": "start"},
        "dependencies": {},
    }
    (root / "package.json").write_text(json.dumps(package, indent=2), encoding="utf-8")

    if framework == "nextjs":
        (root / "next.config.js").write_text(NEXT_CONFIG, encoding="utf-8")
        (root / "src" / "app").mkdir(parents=True, exist_ok=True)
        (root / "src" / "app" / "page.tsx").write_text(
            "export default function Home() { return null; }\n", encoding="utf-8"
        )
    elif framework == "nuxtjs":
        (root / "nuxt.config.ts").write_text(NUXT_CONFIG, encoding="utf-8")
    elif framework == "remix":
        (root / "app").mkdir(parents=True, exist_ok=True)
        (root / "app" / "entry.server.tsx").write_text(REMIX_ENTRY_SERVER, encoding="utf-8")
        (root / "app" / "root.tsx").write_text(REMIX_ROOT, encoding="utf-8")
    return root


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def make_spec(tmp_path: Path):
    """Factory building a ProjectSpec whose output directory is ``tmp_path``.

    Usage::

        def test_something(make_spec):
            spec = make_spec(framework="remix", features=["docker"])
    """

    def factory(**overrides: Any) -> ProjectSpec:
        values: dict[str, Any] = {
            "project_name": "myapp",
            "framework": "nextjs",
            "deploy_target": "aws-apprunner",
            "features": ["docker", "github-actions"],
            "output_dir": tmp_path,
        }
        values.update(overrides)
        return ProjectSpec(**values)

    return factory


@pytest.fixture
def project_factory(tmp_path: Path):
    """Factory creating a fake generated project under ``tmp_path``."""

    def factory(framework: str = "nextjs", name: str = "myapp") -> Path:
        return write_project(tmp_path / name, framework)

    return factory


@pytest.fixture
def next_project(project_factory) -> Path:
    return project_factory("nextjs")


@pytest.fixture
def fake_generator() -> MagicMock:
    """A FrameworkGenerator whose ``generate`` writes a fake project on disk."""
    generator = MagicMock(spec=FrameworkGenerator)

    async def generate(spec: ProjectSpec) -> Path:
        return write_project(spec.project_path, spec.framework, spec.project_name)

    generator.generate = AsyncMock(side_effect=generate)
    return generator
