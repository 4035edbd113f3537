"""create-fde-app configuration.

Typed configuration for a scaffolding run plus the static framework and
deploy-target tables.  All settings use Pydantic v2 models so they are
validated at construction time and can be serialised to/from JSON or built
from environment variables without boiler-plate.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


PROJECT_NAME_PATTERN = re.compile(r"^[a-z0-9-]+$")

ENV_PREFIX = "CREATE_FDE_APP_"

DEFAULT_FEATURES: list[str] = ["docker", "github-actions"]

KNOWN_FEATURES: tuple[str, ...] = (
    "docker",
    "github-actions",
    "terraform",
    "env-vars",
    "health-check",
    "security",
    "production-ready",
)


# ---------------------------------------------------------------------------
# Static tables
# ---------------------------------------------------------------------------


class FrameworkConfig(BaseModel):
    """Static description of one supported framework."""

    model_config = ConfigDict(frozen=True)

    display_name: str
    description: str
    creates: str
    generator: list[str] = Field(description="npx arguments placed before the project name")
    default_args: list[str] = Field(default_factory=list)
    skip_install_flag: str = "--no-install"
    port: int = 3000
    health_endpoint: str = "/api/health"
    output_directory: str = "dist"


class DeployTargetConfig(BaseModel):
    """Static description of one supported deployment target."""

    model_config = ConfigDict(frozen=True)

    display_name: str
    description: str
    terraform: bool = False
    workflow_template: str | None = None
    platform_config: bool = False
    github_secrets: list[str] = Field(default_factory=list)
    optional_secrets: list[str] = Field(default_factory=list)
    capabilities: list[str] = Field(default_factory=list)
    default_env: dict[str, str] = Field(default_factory=dict)


FRAMEWORKS: dict[str, FrameworkConfig] = {
    "nextjs": FrameworkConfig(
        display_name="Next.js",
        description="Full-stack React framework",
        creates="Next.js 14+ with App Router, TypeScript, Tailwind CSS",
        generator=["create-next-app@latest"],
        default_args=[
            "--typescript",
            "--tailwind",
            "--eslint",
            "--app",
            "--src-dir",
            "--import-alias",
            "@/*",
            "--use-yarn",
        ],
        skip_install_flag="--skip-install",
        health_endpoint="/api/health",
        output_directory=".next",
    ),
    "nuxtjs": FrameworkConfig(
        display_name="Nuxt.js",
        description="Full-stack Vue framework",
        creates="Nuxt 3 with Vue 3, TypeScript support",
        generator=["nuxi@latest", "init"],
        default_args=["--packageManager", "yarn", "--gitInit", "false"],
        health_endpoint="/api/health",
        output_directory=".output/public",
    ),
    "remix": FrameworkConfig(
        display_name="Remix",
        description="Full-stack web framework",
        creates="Remix with React, TypeScript",
        generator=["create-remix@latest"],
        default_args=["--yes", "--no-git-init"],
        health_endpoint="/api/health",
        output_directory="build/client",
    ),
}

DEPLOY_TARGETS: dict[str, DeployTargetConfig] = {
    "vercel": DeployTargetConfig(
        display_name="Vercel",
        description="Frontend cloud platform",
        terraform=False,
        workflow_template="vercel-ci.yml",
        platform_config=True,
        github_secrets=["VERCEL_TOKEN", "VERCEL_ORG_ID", "VERCEL_PROJECT_ID"],
        capabilities=["edge functions", "preview deployments", "automatic HTTPS"],
    ),
    "aws-apprunner": DeployTargetConfig(
        display_name="AWS App Runner",
        description="Fully managed container service",
        terraform=True,
        workflow_template="aws-apprunner.yml",
        github_secrets=["AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY"],
        optional_secrets=["APPRUNNER_SERVICE_ARN"],
        capabilities=["auto-scaling", "managed containers", "custom domains"],
        default_env={"AWS_REGION": "us-east-1"},
    ),
    "gcp-cloudrun": DeployTargetConfig(
        display_name="Google Cloud Run",
        description="Serverless container platform",
        terraform=True,
        workflow_template="gcp-cloudrun.yml",
        github_secrets=["GCP_SA_KEY", "GCP_PROJECT_ID"],
        capabilities=["serverless containers", "auto-scaling", "VPC connector"],
        default_env={"GCP_REGION": "us-central1"},
    ),
}

DEFAULT_FRAMEWORK = next(iter(FRAMEWORKS))
DEFAULT_DEPLOY_TARGET = "vercel"

# Deploy-config keys accepted by ``ProjectSpec.deploy_config``.
DEPLOY_CONFIG_DEFAULTS: dict[str, str] = {
    "awsRegion": "us-east-1",
    "gcpProjectId": "",
    "gcpRegion": "us-central1",
}


# ---------------------------------------------------------------------------
# Project spec
# ---------------------------------------------------------------------------


class ProjectSpec(BaseModel):
    """Resolved configuration for one scaffolding run.

    Created once from CLI flags, prompts or environment variables, then
    passed unchanged to every downstream component.
    """

    model_config = ConfigDict(frozen=True)

    project_name: str
    framework: str = Field(default=DEFAULT_FRAMEWORK)
    deploy_target: str = Field(default=DEFAULT_DEPLOY_TARGET)
    features: list[str] = Field(default_factory=list)
    augmentations: list[str] = Field(default_factory=list)
    monorepo: bool = False
    monorepo_path: str = "apps/"
    deploy_config: dict[str, str] = Field(default_factory=dict)
    init_git: bool = False
    skip_install: bool = False
    output_dir: Path = Field(default_factory=Path.cwd)

    # -- Validation --------------------------------------------------------

    @field_validator("project_name")
    @classmethod
    def _check_project_name(cls, value: str) -> str:
        if not PROJECT_NAME_PATTERN.match(value):
            raise ValueError(
                "Project name can only contain lowercase letters, numbers, and hyphens"
            )
        return value

    @field_validator("framework")
    @classmethod
    def _check_framework(cls, value: str) -> str:
        if value not in FRAMEWORKS:
            raise ValueError(
                f"Unknown framework {value!r} (expected one of: {', '.join(FRAMEWORKS)})"
            )
        return value

    @field_validator("deploy_target")
    @classmethod
    def _check_deploy_target(cls, value: str) -> str:
        if value not in DEPLOY_TARGETS:
            raise ValueError(
                f"Unknown deploy target {value!r} "
                f"(expected one of: {', '.join(DEPLOY_TARGETS)})"
            )
        return value

    @field_validator("features")
    @classmethod
    def _check_features(cls, value: list[str]) -> list[str]:
        unknown = [f for f in value if f not in KNOWN_FEATURES]
        if unknown:
            raise ValueError(f"Unknown feature(s): {', '.join(unknown)}")
        # De-duplicate, keep first-seen order.
        return list(dict.fromkeys(value))

    @field_validator("augmentations")
    @classmethod
    def _strip_augmentations(cls, value: list[str]) -> list[str]:
        stripped = (token.strip() for token in value)
        return list(dict.fromkeys(token for token in stripped if token))

    # -- Derived values ----------------------------------------------------

    @property
    def project_path(self) -> Path:
        """Directory the framework generator creates."""
        return self.output_dir / self.project_name

    @property
    def app_path(self) -> str:
        """Relative path of the app inside a monorepo, ``""`` when not a monorepo."""
        if not self.monorepo:
            return ""
        prefix = self.monorepo_path.strip().strip("/")
        if prefix in ("", "."):
            return self.project_name
        return f"{prefix}/{self.project_name}"

    @property
    def framework_config(self) -> FrameworkConfig:
        return FRAMEWORKS[self.framework]

    @property
    def deploy_target_config(self) -> DeployTargetConfig:
        return DEPLOY_TARGETS[self.deploy_target]

    @property
    def supports_terraform(self) -> bool:
        return self.deploy_target_config.terraform

    def has_feature(self, feature: str) -> bool:
        return feature in self.features

    def deploy_value(self, key: str) -> str:
        """Return a deploy-config value, falling back to the documented default."""
        value = self.deploy_config.get(key)
        if value:
            return value
        return DEPLOY_CONFIG_DEFAULTS.get(key, "")

    # -- Serialisation helpers ---------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the project settings to a JSON file and return the written path."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return path

    @classmethod
    def load(cls, path: Path) -> "ProjectSpec":
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        *,
        project_name: str | None = None,
        overrides: Mapping[str, Any] | None = None,
    ) -> "ProjectSpec":
        """Build a spec for non-interactive (``CI=true``) mode.

        Environment values win over *project_name* and *overrides* (values
        coming from CLI flags).  Git initialisation and dependency
        installation are always disabled.

        Recognised variables (all optional):
            CREATE_FDE_APP_PROJECT_DIR, CREATE_FDE_APP_FRAMEWORK,
            CREATE_FDE_APP_DEPLOY_TARGET, CREATE_FDE_APP_FEATURES,
            CREATE_FDE_APP_AUGMENTATIONS, CREATE_FDE_APP_MONOREPO,
            CREATE_FDE_APP_MONOREPO_PATH, CREATE_FDE_APP_AWS_REGION,
            CREATE_FDE_APP_GCP_PROJECT_ID, CREATE_FDE_APP_GCP_REGION.
        """
        env = os.environ if environ is None else environ
        flags = dict(overrides or {})

        def _get(name: str) -> str | None:
            value = env.get(ENV_PREFIX + name)
            return value if value else None

        features_raw = _get("FEATURES")
        if features_raw is not None:
            features = split_csv(features_raw)
        else:
            features = list(flags.get("features") or DEFAULT_FEATURES)

        augmentations_raw = _get("AUGMENTATIONS")
        if augmentations_raw is not None:
            augmentations = split_csv(augmentations_raw)
        else:
            augmentations = list(flags.get("augmentations") or [])

        monorepo_raw = _get("MONOREPO")
        monorepo = (
            parse_bool(monorepo_raw) if monorepo_raw is not None
            else bool(flags.get("monorepo", False))
        )

        deploy_config = dict(flags.get("deploy_config") or {})
        for key, var in (
            ("awsRegion", "AWS_REGION"),
            ("gcpProjectId", "GCP_PROJECT_ID"),
            ("gcpRegion", "GCP_REGION"),
        ):
            value = _get(var)
            if value is not None:
                deploy_config[key] = value

        kwargs: dict[str, Any] = {
            "project_name": _get("PROJECT_DIR") or project_name or "my-fde-app",
            "framework": _get("FRAMEWORK") or flags.get("framework") or DEFAULT_FRAMEWORK,
            "deploy_target": (
                _get("DEPLOY_TARGET") or flags.get("deploy_target") or DEFAULT_DEPLOY_TARGET
            ),
            "features": features,
            "augmentations": augmentations,
            "monorepo": monorepo,
            "monorepo_path": _get("MONOREPO_PATH") or flags.get("monorepo_path") or "apps/",
            "deploy_config": deploy_config,
            "init_git": False,
            "skip_install": True,
        }
        if flags.get("output_dir"):
            kwargs["output_dir"] = Path(flags["output_dir"])
        return cls(**kwargs)


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------


def split_csv(value: str) -> list[str]:
    """Split a comma-separated list, dropping empty entries."""
    return [item.strip() for item in value.split(",") if item.strip()]


def parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def is_ci(environ: Mapping[str, str] | None = None) -> bool:
    """Return ``True`` when running in non-interactive mode (``CI=true``)."""
    env = os.environ if environ is None else environ
    return env.get("CI", "").strip().lower() == "true"
