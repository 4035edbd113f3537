"""Scaffolding pipeline.

Runs one scaffolding job end to end:

1. GENERATE     -- run the framework's official generator.
2. POST-PROCESS -- env files, health check, security headers, error pages.
3. DEPLOY       -- Docker, GitHub Actions, Terraform and platform files.
4. AUGMENT      -- optional ``category:type`` augmentations.
5. GIT          -- ``git init`` plus an initial commit (when enabled).

Each step only starts once the previous one has finished, so later steps
can rely on the files earlier ones wrote (``package.json`` in particular).
"""

from __future__ import annotations

import time
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from .augment import AugmentationProcessor, AugmentationReport, build_default_handlers
from .config import ProjectSpec
from .deploy import DeploymentInjector, DeploymentResult
from .deploy.terraform_gen import ConfirmFn, TerraformRunner, decline
from .framework import FrameworkGenerator
from .git import init_git
from .postprocess import load_post_processor
from .utils import (
    console,
    format_duration,
    print_step_header,
    print_success,
    print_summary_table,
    print_warning,
)


# ---------------------------------------------------------------------------
# Exceptions / results
# ---------------------------------------------------------------------------


class ScaffoldError(Exception):
    """Raised when a scaffolding run cannot start or cannot continue."""


class ScaffoldResult(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    project_path: Path
    post_processed: list[Path] = Field(default_factory=list)
    deployment: DeploymentResult | None = None
    augmentations: AugmentationReport = Field(default_factory=AugmentationReport)
    git_initialized: bool = False
    terraform_applied: bool = False
    duration: float = 0.0


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


class ScaffoldPipeline:
    """Drives one scaffolding run for a resolved :class:`ProjectSpec`.

    Collaborators can be injected for testing; by default the packaged
    implementations are used.

    Args:
        spec: Resolved, validated run configuration.
        interactive: Whether the user can be asked questions.  Only
            interactive runs offer to run Terraform.
        confirm: Yes/no callable used for interactive questions.
    """

    def __init__(
        self,
        spec: ProjectSpec,
        *,
        interactive: bool = False,
        confirm: ConfirmFn = decline,
        generator: FrameworkGenerator | None = None,
        injector: DeploymentInjector | None = None,
        augmenter: AugmentationProcessor | None = None,
    ) -> None:
        self.spec = spec
        self.interactive = interactive
        self.confirm = confirm if interactive else decline
        self.generator = generator or FrameworkGenerator()
        self.injector = injector or DeploymentInjector(confirm=self.confirm)
        self.augmenter = augmenter or AugmentationProcessor(
            build_default_handlers(install=not spec.skip_install)
        )

    # -- Pre-flight --------------------------------------------------------

    def preflight(self) -> None:
        """Reject a run that would clobber an existing directory.

        Raises:
            ScaffoldError: If the target directory already exists.
        """
        target = self.spec.project_path
        if target.exists():
            raise ScaffoldError(f"Directory {self.spec.project_name} already exists")

        if self.spec.has_feature("terraform") and not self.spec.supports_terraform:
            print_warning(
                f"Terraform is not available for {self.spec.deploy_target}; "
                "the terraform feature will be skipped"
            )
        if self.spec.deploy_target == "vercel" and any(
            token.startswith("monitoring:") for token in self.spec.augmentations
        ):
            print_warning("Monitoring augmentations are not supported on Vercel deployments")

    # -- Run ---------------------------------------------------------------

    async def run(self) -> ScaffoldResult:
        """Execute every step and return what was produced.

        Raises:
            ScaffoldError: Pre-flight failure or a file-system error during
                post-processing.
            FrameworkGenerationError: The framework generator failed.
            DeploymentError: A deployment artifact could not be written.
        """
        start = time.monotonic()
        self.preflight()
        spec = self.spec

        print_step_header("Creating project with the official framework command")
        project_path = await self.generator.generate(spec)
        result = ScaffoldResult(project_path=project_path)

        print_step_header("Processing project")
        processor = load_post_processor(spec.framework, project_path, spec)
        try:
            result.post_processed = await processor.process()
        except OSError as exc:
            raise ScaffoldError(f"Post-processing failed: {exc}") from exc

        print_step_header("Adding deployment configurations")
        result.deployment = await self.injector.inject(spec, project_path)

        if spec.augmentations:
            print_step_header("Adding augmentations")
            result.augmentations = await self.augmenter.process(
                project_path, spec.framework, spec.augmentations
            )

        if spec.init_git:
            print_step_header("Initializing git repository")
            result.git_initialized = await init_git(project_path)

        if self.interactive and result.deployment.terraform:
            result.terraform_applied = await self._offer_terraform(project_path)

        result.duration = time.monotonic() - start
        self._print_summary(result)
        return result

    async def _offer_terraform(self, project_path: Path) -> bool:
        if not self.confirm("Would you like to set up infrastructure with Terraform now?"):
            return False
        runner = TerraformRunner(project_path / "terraform", confirm=self.confirm)
        return await runner.execute()

    # -- Reporting ---------------------------------------------------------

    def _print_summary(self, result: ScaffoldResult) -> None:
        spec = self.spec
        report = result.augmentations
        deployment = result.deployment
        rows = {
            "Project": spec.project_name,
            "Location": str(result.project_path),
            "Framework": spec.framework_config.display_name,
            "Deploy target": spec.deploy_target_config.display_name,
            "Deployment files": str(len(deployment.files)) if deployment else "0",
        }
        if spec.monorepo:
            rows["App path"] = spec.app_path
        if spec.augmentations:
            rows["Augmentations"] = (
                f"{len(report.succeeded)} applied, {len(report.failed)} failed, "
                f"{len(report.skipped)} skipped"
            )
        rows["Git"] = "initialized" if result.git_initialized else "skipped"
        rows["Duration"] = format_duration(result.duration)
        print_summary_table(rows, title="create-fde-app")

        for token, error in report.failed.items():
            print_warning(f"Augmentation {token} failed: {error}")

        print_success("Project created successfully!")
        console.print("\n[bold]Next steps:[/bold]")
        console.print(f"  cd {spec.project_name}")
        if spec.skip_install:
            console.print("  yarn install")
        console.print("  yarn dev")
        console.print()
