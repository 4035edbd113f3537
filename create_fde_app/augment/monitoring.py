"""Monitoring augmentations.  Datadog APM plus browser RUM and logs."""

from __future__ import annotations

from pathlib import Path

from ..templates import TemplateRenderer
from ..utils import print_step_header
from .auth import PUBLIC_ENV_PREFIX
from .base import FileSpec, Recipe, UnknownAugmentationError, apply_recipe


def datadog_recipe(framework: str, project_name: str) -> Recipe:
    prefix = PUBLIC_ENV_PREFIX.get(framework, "")
    env_block = (
        "\n# Datadog Configuration\n"
        "DD_ENABLED=true\n"
        "DD_ENV=development\n"
        f"DD_SERVICE={project_name}\n"
        "DD_VERSION=1.0.0\n"
        "DD_LOGS_INJECTION=true\n"
        "DD_RUNTIME_METRICS_ENABLED=true\n"
        "DD_TRACE_SAMPLE_RATE=1\n"
        "\n# Datadog RUM (Real User Monitoring)\n"
        f"{prefix}DD_RUM_APPLICATION_ID=\n"
        f"{prefix}DD_RUM_CLIENT_TOKEN=\n"
        f"{prefix}DD_SITE=datadoghq.com\n"
        f"{prefix}DD_SERVICE={project_name}-frontend\n"
        f"{prefix}DD_ENV=development\n"
        f"{prefix}DD_VERSION=1.0.0\n"
        f"{prefix}DD_RUM_REPLAY_SAMPLE_RATE=20\n"
    )
    return Recipe(
        name="Datadog",
        dependencies=["dd-trace", "@datadog/browser-rum", "@datadog/browser-logs"],
        files=[
            FileSpec("monitoring/datadog-config.ts.j2", "lib/monitoring/datadog-config.ts"),
            FileSpec("monitoring/apm.ts.j2", "lib/monitoring/apm.ts"),
            FileSpec("monitoring/rum.ts.j2", "lib/monitoring/rum.ts"),
            FileSpec(
                "monitoring/instrumentation.ts.j2",
                "instrumentation.ts",
                frameworks=("nextjs",),
            ),
        ],
        env_marker="DD_ENABLED",
        env_block=env_block,
        next_steps=[
            "Create a RUM application in Datadog and copy its credentials into .env",
            "Run the Datadog Agent next to the app to receive APM traces",
        ],
        context={"env_prefix": prefix},
    )


MONITORING_PROVIDERS = ("datadog",)


async def setup_monitoring(
    project_path: str | Path,
    framework: str,
    provider: str,
    *,
    install: bool = True,
    renderer: TemplateRenderer | None = None,
) -> list[Path]:
    if provider != "datadog":
        raise UnknownAugmentationError("monitoring", provider, list(MONITORING_PROVIDERS))
    root = Path(project_path)
    recipe = datadog_recipe(framework, root.name)
    print_step_header("Setting up Datadog monitoring")
    return await apply_recipe(recipe, root, framework, install=install, renderer=renderer)
