"""Utility augmentations: Sentry, structured logging, rate limiting and CORS."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from ..templates import TemplateRenderer
from ..utils import print_step_header
from .base import FileSpec, Recipe, UnknownAugmentationError, apply_recipe


SENTRY_PACKAGES: dict[str, list[str]] = {
    "nextjs": ["@sentry/nextjs"],
    "nuxtjs": ["@sentry/vue"],
}


def sentry_recipe(framework: str) -> Recipe:
    return Recipe(
        name="Sentry",
        dependencies=SENTRY_PACKAGES.get(framework, ["@sentry/node"]),
        files=[
            FileSpec(
                "utilities/sentry-client.config.ts.j2",
                "sentry.client.config.ts",
                frameworks=("nextjs",),
            ),
            FileSpec(
                "utilities/sentry-server.config.ts.j2",
                "sentry.server.config.ts",
                frameworks=("nextjs",),
            ),
            FileSpec(
                "utilities/sentry-nuxt-plugin.ts.j2",
                "plugins/sentry.client.ts",
                frameworks=("nuxtjs",),
            ),
            FileSpec(
                "utilities/sentry-node.ts.j2",
                "app/sentry.server.ts",
                frameworks=("remix",),
            ),
        ],
        env_marker="SENTRY_DSN",
        env_block=(
            "\n# Sentry Error Tracking\n"
            "SENTRY_DSN=\n"
            "NEXT_PUBLIC_SENTRY_DSN=\n"
            "SENTRY_ORG=\n"
            "SENTRY_PROJECT=\n"
            "SENTRY_AUTH_TOKEN=\n"
        ),
        next_steps=["Create a Sentry project and copy its DSN into .env"],
    )


def logging_recipe(framework: str) -> Recipe:
    return Recipe(
        name="Logging",
        dependencies=["winston", "winston-daily-rotate-file"],
        files=[FileSpec("utilities/logger.ts.j2", "lib/logger.ts")],
        env_marker="LOG_LEVEL",
        env_block=(
            "\n# Logging Configuration\n"
            "LOG_LEVEL=info # Options: error, warn, info, http, debug\n"
        ),
        next_steps=[
            'Import the logger with `import { logger } from "@/lib/logger"`',
            "Production logs rotate daily under logs/",
        ],
    )


def rate_limiting_recipe(framework: str) -> Recipe:
    return Recipe(
        name="Rate limiting",
        dependencies=["rate-limiter-flexible", "ioredis"],
        files=[
            FileSpec("utilities/redis.ts.j2", "lib/rate-limit/redis.ts"),
            FileSpec("utilities/rate-limit-config.ts.j2", "lib/rate-limit/config.ts"),
        ],
        env_marker="REDIS_URL",
        env_block=(
            "\n# Rate Limiting Configuration\n"
            "REDIS_URL= # Optional: Redis connection string for distributed rate limiting\n"
            "RATE_LIMIT_ENABLED=true\n"
        ),
        next_steps=[
            "Call `consume(clientIp)` from lib/rate-limit/config in your API handlers",
            "Set REDIS_URL to share limits between instances",
        ],
    )


def cors_recipe(framework: str) -> Recipe:
    return Recipe(
        name="CORS",
        files=[
            FileSpec("utilities/cors-config.ts.j2", "lib/cors/config.ts"),
            FileSpec(
                "utilities/cors-nextjs-middleware.ts.j2",
                "lib/cors/middleware.ts",
                frameworks=("nextjs",),
            ),
            FileSpec(
                "utilities/cors-nuxt-middleware.ts.j2",
                "server/middleware/cors.ts",
                frameworks=("nuxtjs",),
            ),
            FileSpec(
                "utilities/cors-remix.server.ts.j2",
                "app/cors.server.ts",
                frameworks=("remix",),
            ),
        ],
        env_marker="ALLOWED_ORIGINS",
        env_block=(
            "\n# CORS Configuration\n"
            "ALLOWED_ORIGINS=http://localhost:3000,http://localhost:3001 # Comma-separated list\n"
        ),
        next_steps=["List the origins allowed to call your API in ALLOWED_ORIGINS"],
    )


UTILITY_RECIPES: dict[str, Callable[[str], Recipe]] = {
    "sentry": sentry_recipe,
    "logging": logging_recipe,
    "rate-limiting": rate_limiting_recipe,
    "cors": cors_recipe,
}


async def setup_utility(
    project_path: str | Path,
    framework: str,
    utility: str,
    *,
    install: bool = True,
    renderer: TemplateRenderer | None = None,
) -> list[Path]:
    """Add the *utility* to the project.

    Raises:
        UnknownAugmentationError: If *utility* is not in :data:`UTILITY_RECIPES`.
    """
    factory = UTILITY_RECIPES.get(utility)
    if factory is None:
        raise UnknownAugmentationError("utility", utility, list(UTILITY_RECIPES))
    recipe = factory(framework)
    print_step_header(f"Setting up {recipe.name}")
    return await apply_recipe(
        recipe, project_path, framework, install=install, renderer=renderer
    )
