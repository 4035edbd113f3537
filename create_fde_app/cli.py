"""Command-line entry point for ``create-fde-app``.

Usage::

    create-fde-app my-app -f nextjs -d aws-apprunner --features docker,terraform
    CI=true CREATE_FDE_APP_PROJECT_DIR=my-app create-fde-app
    create-fde-app --help-ai
"""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from . import __version__
from .augment import AUTH_PROVIDERS, DATABASES, MONITORING_PROVIDERS, UTILITY_RECIPES
from .config import (
    DEFAULT_DEPLOY_TARGET,
    DEFAULT_FEATURES,
    DEFAULT_FRAMEWORK,
    DEPLOY_TARGETS,
    ENV_PREFIX,
    FRAMEWORKS,
    KNOWN_FEATURES,
    PROJECT_NAME_PATTERN,
    ProjectSpec,
    is_ci,
    split_csv,
)
from .deploy import DeploymentError
from .framework import FrameworkGenerationError
from .pipeline import ScaffoldError, ScaffoldPipeline
from .prompts import confirm, prompt_project_details
from .utils import console, print_error


EPILOG = f"""\
Non-interactive mode:
  Set CI=true and pass values through environment variables.  Environment
  values win over flags; git init and dependency installs are skipped.

  CI=true {ENV_PREFIX}PROJECT_DIR=my-app {ENV_PREFIX}FRAMEWORK=nextjs \\
    {ENV_PREFIX}DEPLOY_TARGET=aws-apprunner \\
    {ENV_PREFIX}FEATURES=docker,github-actions,terraform \\
    {ENV_PREFIX}AUGMENTATIONS=database:postgres,auth:nextauth create-fde-app

Examples:
  create-fde-app my-app -f nuxtjs -d gcp-cloudrun --gcp-project-id acme
  create-fde-app web -f nextjs -d vercel --monorepo --monorepo-path apps/
  create-fde-app --help-ai

For structured JSON output, use: create-fde-app --help-ai
"""


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def build_parser():
    import argparse

    parser = argparse.ArgumentParser(
        prog="create-fde-app",
        description="Create production-ready apps with built-in cloud deployment",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=EPILOG,
    )
    parser.add_argument("project_name", nargs="?", help="Name of the project")
    parser.add_argument(
        "-f", "--framework",
        choices=list(FRAMEWORKS),
        help="Framework to use",
    )
    parser.add_argument(
        "-d", "--deploy",
        dest="deploy_target",
        choices=list(DEPLOY_TARGETS),
        help="Deployment target",
    )
    parser.add_argument(
        "--features",
        help=f"Comma-separated features ({', '.join(KNOWN_FEATURES)})",
    )
    parser.add_argument(
        "--augmentations",
        help="Comma-separated category:type tokens, e.g. database:postgres,utility:cors",
    )
    parser.add_argument("--skip-git", action="store_true", help="Skip git initialization")
    parser.add_argument(
        "--skip-install", action="store_true", help="Skip installing dependencies"
    )
    parser.add_argument(
        "--monorepo", action="store_true", help="Enable monorepo mode for generated project"
    )
    parser.add_argument(
        "--monorepo-path",
        help="Path within the monorepo where the app lives (default: apps/)",
    )
    parser.add_argument("--aws-region", help="AWS region (default: us-east-1)")
    parser.add_argument("--gcp-project-id", help="Google Cloud project ID")
    parser.add_argument("--gcp-region", help="Google Cloud region (default: us-central1)")
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Directory the project is created in (default: current directory)",
    )
    parser.add_argument(
        "--help-ai", action="store_true", help="Output AI-friendly help in JSON format"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def flags_from_args(args) -> dict[str, Any]:
    """Translate parsed arguments into the override mapping used to build a ProjectSpec.

    Values the user did not pass are ``None`` so prompts know to ask.
    """
    deploy_config = {
        key: value
        for key, value in (
            ("awsRegion", args.aws_region),
            ("gcpProjectId", args.gcp_project_id),
            ("gcpRegion", args.gcp_region),
        )
        if value
    }
    return {
        "framework": args.framework,
        "deploy_target": args.deploy_target,
        "features": split_csv(args.features) if args.features is not None else None,
        "augmentations": (
            split_csv(args.augmentations) if args.augmentations is not None else None
        ),
        "monorepo": args.monorepo,
        "monorepo_path": args.monorepo_path,
        "deploy_config": deploy_config,
        "output_dir": Path(args.output) if args.output else None,
        "skip_git": args.skip_git,
        "skip_install": args.skip_install,
    }


# ---------------------------------------------------------------------------
# --help-ai
# ---------------------------------------------------------------------------


def build_ai_help() -> dict[str, Any]:
    """Machine-readable description of flags, variables and choices."""
    augmentations = {
        "database": [f"database:{key}" for key in DATABASES],
        "auth": [f"auth:{key}" for key in AUTH_PROVIDERS],
        "monitoring": [f"monitoring:{key}" for key in MONITORING_PROVIDERS],
        "utility": [f"utility:{key}" for key in UTILITY_RECIPES],
    }
    return {
        "command": "create-fde-app",
        "version": __version__,
        "description": "Create production-ready apps with built-in cloud deployment configurations",
        "usage": f"CI=true {ENV_PREFIX}PROJECT_DIR=<name> [ENV_VARS...] create-fde-app",
        "criticalNote": "Set CI=true to enable non-interactive mode",
        "flags": {
            "project-name": "Positional project name",
            "--framework/-f": list(FRAMEWORKS),
            "--deploy/-d": list(DEPLOY_TARGETS),
            "--features": list(KNOWN_FEATURES),
            "--augmentations": "Comma-separated category:type tokens",
            "--skip-git": "Skip git initialization",
            "--skip-install": "Skip installing dependencies",
            "--monorepo": "Enable monorepo mode",
            "--monorepo-path": "Path within the monorepo (default: apps/)",
            "--aws-region": "AWS region for aws-apprunner",
            "--gcp-project-id": "Project ID for gcp-cloudrun",
            "--gcp-region": "Region for gcp-cloudrun",
            "--output/-o": "Parent directory for the project",
        },
        "requiredEnvVars": {
            "CI": {"value": "true", "description": "Enable non-interactive mode"},
            f"{ENV_PREFIX}PROJECT_DIR": {
                "type": "string",
                "validation": PROJECT_NAME_PATTERN.pattern,
                "example": "my-app",
            },
        },
        "optionalEnvVars": {
            f"{ENV_PREFIX}FRAMEWORK": {
                "type": "enum",
                "values": list(FRAMEWORKS),
                "default": DEFAULT_FRAMEWORK,
            },
            f"{ENV_PREFIX}DEPLOY_TARGET": {
                "type": "enum",
                "values": list(DEPLOY_TARGETS),
                "default": DEFAULT_DEPLOY_TARGET,
            },
            f"{ENV_PREFIX}FEATURES": {
                "type": "array",
                "values": list(KNOWN_FEATURES),
                "separator": ",",
                "default": DEFAULT_FEATURES,
                "notes": "terraform only available for aws-apprunner and gcp-cloudrun",
            },
            f"{ENV_PREFIX}AUGMENTATIONS": {
                "type": "array",
                "values": augmentations,
                "separator": ",",
                "default": [],
                "notes": [
                    "auth:nextauth only works with nextjs",
                    "monitoring:* not available for vercel",
                ],
            },
            f"{ENV_PREFIX}MONOREPO": {"type": "boolean", "default": "false"},
            f"{ENV_PREFIX}MONOREPO_PATH": {"type": "string", "default": "apps/"},
            f"{ENV_PREFIX}AWS_REGION": {"type": "string", "default": "us-east-1"},
            f"{ENV_PREFIX}GCP_PROJECT_ID": {"type": "string", "default": ""},
            f"{ENV_PREFIX}GCP_REGION": {"type": "string", "default": "us-central1"},
        },
        "frameworkDetails": {
            key: {
                "displayName": cfg.display_name,
                "description": cfg.description,
                "creates": cfg.creates,
                "port": cfg.port,
                "healthEndpoint": cfg.health_endpoint,
            }
            for key, cfg in FRAMEWORKS.items()
        },
        "deployTargetDetails": {
            key: {
                "displayName": cfg.display_name,
                "description": cfg.description,
                "githubSecrets": cfg.github_secrets,
                "optionalSecrets": cfg.optional_secrets,
                "features": cfg.capabilities,
                "terraform": cfg.terraform,
                "githubActionsFile": cfg.workflow_template,
                "defaultEnvVars": cfg.default_env,
            }
            for key, cfg in DEPLOY_TARGETS.items()
        },
        "validationRules": [
            f"Project name must match {PROJECT_NAME_PATTERN.pattern}",
            "Directory must not exist",
            f"Framework must be exactly one of: {', '.join(FRAMEWORKS)}",
            f"Deploy target must be exactly one of: {', '.join(DEPLOY_TARGETS)}",
            "Comma-separated values must not contain spaces",
        ],
        "postCreationBehavior": {
            "gitInit": "Skipped in CI mode",
            "dependencyInstall": "Skipped in CI mode",
            "exitCode": "0 on success (failed augmentations are reported, not fatal), 1 on error",
        },
    }


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def _format_validation_error(exc: ValidationError) -> str:
    messages = []
    for error in exc.errors():
        message = str(error.get("msg", ""))
        messages.append(message.removeprefix("Value error, "))
    return "; ".join(messages)


def resolve_spec(args) -> tuple[ProjectSpec, bool]:
    """Return the run spec and whether the run is interactive."""
    flags = flags_from_args(args)
    if is_ci():
        overrides = {key: value for key, value in flags.items() if value is not None}
        return ProjectSpec.from_env(project_name=args.project_name, overrides=overrides), False
    return prompt_project_details(args.project_name, flags), True


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``create-fde-app`` and ``python -m create_fde_app``."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.help_ai:
        sys.stdout.write(json.dumps(build_ai_help(), indent=2) + "\n")
        sys.exit(0)

    console.print("[bold]Welcome to create-fde-app![/bold]")
    console.print("Let's create a production-ready app with cloud deployment.\n")

    try:
        spec, interactive = resolve_spec(args)
        pipeline = ScaffoldPipeline(spec, interactive=interactive, confirm=confirm)
        asyncio.run(pipeline.run())
    except ValidationError as exc:
        print_error(f"Invalid configuration: {_format_validation_error(exc)}")
        sys.exit(1)
    except (ScaffoldError, FrameworkGenerationError, DeploymentError, OSError) as exc:
        print_error(str(exc))
        sys.exit(1)
    except KeyboardInterrupt:
        print_error("Aborted")
        sys.exit(1)


if __name__ == "__main__":
    main()
