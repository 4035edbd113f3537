"""Nuxt 3 post-processing."""

from __future__ import annotations

import re
from pathlib import Path

from ..utils import print_info, print_warning
from .base import BasePostProcessor


_NUXT_CONFIG_RE = re.compile(r"defineNuxtConfig\(\s*\{")


class NuxtPostProcessor(BasePostProcessor):
    env_template = "env/nuxtjs.env.j2"

    async def add_health_check(self) -> list[Path]:
        path = await self.render_file("nuxtjs/health.ts.j2", "server/api/health.ts")
        print_info("Added Nuxt health check endpoint at /api/health")
        return [path]

    async def add_security_headers(self) -> list[Path]:
        config = self.find_file("nuxt.config.ts", "nuxt.config.js")
        if config is None:
            print_warning("No nuxt.config file found, skipping security headers")
            return []
        snippet = self.renderer.render("nuxtjs/security-headers.ts.j2", self.context())
        if await self.insert_after(config, _NUXT_CONFIG_RE, snippet, guard="routeRules"):
            print_info(f"Added security headers to {config.name}")
            return [config]
        return []

    async def add_production_optimizations(self) -> list[Path]:
        path = await self.render_file(
            "nuxtjs/optimization.ts.j2", "server/plugins/optimization.ts"
        )
        print_info("Added Nitro cache-header plugin")
        return [path]
