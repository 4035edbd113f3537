"""Interactive questions for values the command line did not supply.

Uses :mod:`rich.prompt`.  Single choices and multi-selections are shown as
numbered menus; answers may be given as numbers or as the option keys.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from rich.prompt import Confirm, Prompt

from .config import (
    DEFAULT_FEATURES,
    DEPLOY_CONFIG_DEFAULTS,
    DEPLOY_TARGETS,
    FRAMEWORKS,
    KNOWN_FEATURES,
    PROJECT_NAME_PATTERN,
    ProjectSpec,
    split_csv,
)
from .utils import console, print_error


FEATURE_LABELS: dict[str, str] = {
    "docker": "Docker containerization",
    "github-actions": "GitHub Actions CI/CD",
    "terraform": "Terraform infrastructure",
    "env-vars": "Environment variable templates",
    "health-check": "Health check endpoint",
    "security": "Security headers",
    "production-ready": "Production optimizations",
}

AUGMENTATION_LABELS: dict[str, str] = {
    "database:postgres": "PostgreSQL with Prisma",
    "database:mysql": "MySQL with Prisma",
    "database:mongodb": "MongoDB with Prisma",
    "auth:nextauth": "NextAuth.js (Next.js only)",
    "auth:auth0": "Auth0",
    "auth:cognito": "AWS Cognito",
    "monitoring:datadog": "Datadog APM & RUM",
    "utility:sentry": "Sentry error tracking",
    "utility:logging": "Winston logging",
    "utility:rate-limiting": "Rate limiting",
    "utility:cors": "CORS configuration",
}


# ---------------------------------------------------------------------------
# Generic menus
# ---------------------------------------------------------------------------


def _print_menu(question: str, options: Mapping[str, str]) -> list[str]:
    keys = list(options)
    console.print(f"\n[bold cyan]?[/bold cyan] [bold]{question}[/bold]")
    for number, key in enumerate(keys, start=1):
        console.print(f"  [cyan]{number}[/cyan]) {options[key]} [dim]({key})[/dim]")
    return keys


def _resolve(answer: str, keys: list[str]) -> str | None:
    answer = answer.strip()
    if answer.isdigit() and 1 <= int(answer) <= len(keys):
        return keys[int(answer) - 1]
    return answer if answer in keys else None


def ask_choice(question: str, options: Mapping[str, str], default: str | None = None) -> str:
    """Ask for exactly one of *options* (key -> label)."""
    keys = _print_menu(question, options)
    default_key = default if default in keys else keys[0]
    while True:
        answer = Prompt.ask("Choose", default=str(keys.index(default_key) + 1))
        choice = _resolve(answer, keys)
        if choice is not None:
            return choice
        print_error(f"Please enter a number between 1 and {len(keys)}")


def ask_many(
    question: str, options: Mapping[str, str], default: list[str] | None = None
) -> list[str]:
    """Ask for any subset of *options*.  An empty answer selects nothing."""
    keys = _print_menu(question, options)
    selected = [key for key in (default or []) if key in keys]
    default_answer = ",".join(str(keys.index(key) + 1) for key in selected)
    while True:
        answer = Prompt.ask(
            "Select (comma-separated, empty for none)", default=default_answer
        )
        picks = [_resolve(item, keys) for item in split_csv(answer)]
        if None not in picks:
            return list(dict.fromkeys(p for p in picks if p is not None))
        print_error("Unknown selection, use the numbers shown above")


def confirm(question: str, default: bool = False) -> bool:
    return Confirm.ask(question, default=default)


# ---------------------------------------------------------------------------
# Project details
# ---------------------------------------------------------------------------


def ask_project_name(output_dir: Path, default: str = "my-fde-app") -> str:
    while True:
        name = Prompt.ask("What is your project name?", default=default).strip()
        if not PROJECT_NAME_PATTERN.match(name):
            print_error("Project name can only contain lowercase letters, numbers, and hyphens")
        elif (output_dir / name).exists():
            print_error(f"Directory {name} already exists")
        else:
            return name


def available_augmentations(framework: str, deploy_target: str) -> dict[str, str]:
    """Augmentation menu filtered by framework and deploy-target support."""
    options = dict(AUGMENTATION_LABELS)
    if framework != "nextjs":
        options.pop("auth:nextauth")
    if deploy_target == "vercel":
        options.pop("monitoring:datadog")
    return options


def prompt_project_details(
    project_name: str | None, flags: Mapping[str, Any]
) -> ProjectSpec:
    """Build a :class:`ProjectSpec`, asking for everything *flags* leaves open.

    *flags* uses the same keys as :meth:`ProjectSpec.from_env` overrides plus
    ``skip_git`` and ``skip_install``.  A key that is missing or ``None``
    means "ask".
    """
    output_dir = Path(flags.get("output_dir") or Path.cwd())
    name = project_name or ask_project_name(output_dir)

    framework = flags.get("framework") or ask_choice(
        "Which framework would you like to use?",
        {key: f"{cfg.display_name} - {cfg.description}" for key, cfg in FRAMEWORKS.items()},
    )
    deploy_target = flags.get("deploy_target") or ask_choice(
        "Where would you like to deploy?",
        {key: cfg.display_name for key, cfg in DEPLOY_TARGETS.items()},
    )
    target = DEPLOY_TARGETS.get(deploy_target)

    features = flags.get("features")
    if features is None:
        options = {
            key: FEATURE_LABELS[key]
            for key in KNOWN_FEATURES
            if key != "terraform" or (target is not None and target.terraform)
        }
        features = ask_many("Select features to include:", options, DEFAULT_FEATURES)

    augmentations = flags.get("augmentations")
    if augmentations is None:
        augmentations = ask_many(
            "Select advanced features (optional):",
            available_augmentations(framework, deploy_target),
        )

    deploy_config = dict(flags.get("deploy_config") or {})
    if deploy_target == "aws-apprunner" and "awsRegion" not in deploy_config:
        deploy_config["awsRegion"] = Prompt.ask(
            "AWS region", default=DEPLOY_CONFIG_DEFAULTS["awsRegion"]
        )
    if deploy_target == "gcp-cloudrun":
        if "gcpProjectId" not in deploy_config:
            deploy_config["gcpProjectId"] = Prompt.ask("GCP project ID", default="")
        if "gcpRegion" not in deploy_config:
            deploy_config["gcpRegion"] = Prompt.ask(
                "GCP region", default=DEPLOY_CONFIG_DEFAULTS["gcpRegion"]
            )

    init_git = False if flags.get("skip_git") else confirm("Initialize git repository?", True)
    skip_install = bool(flags.get("skip_install")) or not confirm("Install dependencies?", True)

    return ProjectSpec(
        project_name=name,
        framework=framework,
        deploy_target=deploy_target,
        features=list(features),
        augmentations=list(augmentations),
        monorepo=bool(flags.get("monorepo", False)),
        monorepo_path=flags.get("monorepo_path") or "apps/",
        deploy_config={k: v for k, v in deploy_config.items() if v},
        init_git=init_git,
        skip_install=skip_install,
        output_dir=output_dir,
    )
