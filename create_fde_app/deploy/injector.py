"""Deployment target dispatcher.

Runs the deployment steps for one :class:`ProjectSpec` in a fixed order:

1. ``docker`` feature -> ``Dockerfile`` and ``.dockerignore``
2. ``github-actions`` feature -> ``.github/workflows/<name>.yml``
3. ``terraform`` feature and an IaC-capable target -> ``terraform/``
4. always -> ``vercel.json`` (Vercel only) and ``README.md``

A missing template is never an error; each step has its own fallback or
skip path.  Any file-system failure aborts the whole dispatch with a
:class:`DeploymentError` chained to the original ``OSError``.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from ..config import ProjectSpec
from ..templates import TemplateRenderer
from ..utils import print_info
from .docker_gen import DockerGenerator
from .platform import PlatformGenerator
from .store import TemplateStore
from .terraform_gen import ConfirmFn, TerraformGenerator, decline
from .workflow_gen import WorkflowGenerator


_JINJA_TEMPLATE_DIR = Path(__file__).parent / "templates" / "jinja"


class DeploymentError(Exception):
    """Raised when writing a deployment artifact fails."""


class DeploymentResult(BaseModel):
    """Files written by :meth:`DeploymentInjector.inject`, grouped by step."""

    project_path: Path
    docker: list[Path] = Field(default_factory=list)
    workflow: Path | None = None
    terraform: list[Path] = Field(default_factory=list)
    platform: list[Path] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)

    @property
    def files(self) -> list[Path]:
        workflow = [self.workflow] if self.workflow else []
        return [*self.docker, *workflow, *self.terraform, *self.platform]

    def relative_files(self) -> list[str]:
        return [p.relative_to(self.project_path).as_posix() for p in self.files]


class DeploymentInjector:
    """Writes Docker, CI, Terraform and platform artifacts into a project.

    Args:
        store: Raw deployment templates; defaults to the packaged set.
        renderer: Jinja2 renderer for the README files; defaults to the
            packaged ``deploy/templates/jinja`` directory.
        confirm: Yes/no callable consulted before overwriting an existing
            ``terraform.tfvars``.  Defaults to always answering "no".
    """

    def __init__(
        self,
        store: TemplateStore | None = None,
        renderer: TemplateRenderer | None = None,
        *,
        confirm: ConfirmFn = decline,
    ) -> None:
        self.store = store or TemplateStore()
        self.renderer = renderer or TemplateRenderer(_JINJA_TEMPLATE_DIR)
        self.docker = DockerGenerator(self.store)
        self.workflow = WorkflowGenerator(self.store)
        self.terraform = TerraformGenerator(self.store, self.renderer, confirm)
        self.platform = PlatformGenerator(self.renderer)

    async def inject(
        self,
        spec: ProjectSpec,
        project_path: Path | None = None,
    ) -> DeploymentResult:
        """Run every applicable step against *project_path*.

        Raises:
            DeploymentError: If any file could not be written.
        """
        root = Path(project_path) if project_path else spec.project_path
        result = DeploymentResult(project_path=root)
        try:
            await self._run_steps(spec, root, result)
        except OSError as exc:
            raise DeploymentError(
                f"Failed to write deployment configuration for {spec.project_name}: {exc}"
            ) from exc
        return result

    async def _run_steps(
        self, spec: ProjectSpec, root: Path, result: DeploymentResult
    ) -> None:
        if spec.has_feature("docker"):
            result.docker = await self.docker.generate(spec, root)
        else:
            result.skipped.append("docker")

        if spec.has_feature("github-actions"):
            result.workflow = await self.workflow.generate(spec, root)
            if result.workflow is None:
                result.skipped.append("github-actions")
        else:
            result.skipped.append("github-actions")

        if spec.has_feature("terraform"):
            written = await self.terraform.generate(spec, root)
            if written is None:
                result.skipped.append("terraform")
            else:
                result.terraform = written
        else:
            result.skipped.append("terraform")

        result.platform = await self.platform.generate(
            spec, root, artifacts=result.relative_files()
        )
        print_info(f"Deployment configuration written for {spec.deploy_target}")
