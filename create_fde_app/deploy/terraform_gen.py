"""Terraform file-set generation and the optional ``terraform`` run.

Only deploy targets whose config declares ``terraform=True`` get a
``terraform/`` directory.  ``main.tf``, ``variables.tf``, ``outputs.tf`` and
``terraform.tfvars.example`` are copied verbatim; ``terraform.tfvars`` is
rendered from the example with the deployment placeholder engine.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

from rich.markup import escape

from ..config import ProjectSpec
from ..templates import TemplateRenderer
from ..utils import (
    console,
    create_progress,
    print_error,
    print_info,
    print_success,
    print_warning,
    run_command,
    write_text,
)
from .placeholders import build_substitution_context, render
from .store import TERRAFORM, TemplateNotFoundError, TemplateStore


ConfirmFn = Callable[[str], bool]

TFVARS_EXAMPLE = "terraform.tfvars.example"
TFVARS = "terraform.tfvars"
GCP_PROJECT_ID_PLACEHOLDER = "your-project-id"

CREDENTIAL_INSTRUCTIONS: dict[str, list[str]] = {
    "aws-apprunner": [
        "- AWS: Configure AWS CLI with `aws configure` or set environment variables:",
        "  - AWS_ACCESS_KEY_ID",
        "  - AWS_SECRET_ACCESS_KEY",
        "  - AWS_DEFAULT_REGION",
    ],
    "gcp-cloudrun": [
        "- GCP: Authenticate with `gcloud auth application-default login` or set:",
        "  - GOOGLE_APPLICATION_CREDENTIALS (path to service account key file)",
    ],
}

FILE_DESCRIPTIONS: list[tuple[str, str]] = [
    ("main.tf", "Main infrastructure configuration"),
    ("variables.tf", "Variable definitions"),
    ("outputs.tf", "Output values"),
    (TFVARS, "Your configuration values (not committed to git)"),
    (TFVARS_EXAMPLE, "Example configuration file"),
]


def decline(_question: str) -> bool:
    """Default confirm callable: never overwrite, never apply."""
    return False


class TerraformGenerator:
    """Writes the ``terraform/`` directory for IaC-capable deploy targets."""

    def __init__(
        self,
        store: TemplateStore,
        renderer: TemplateRenderer,
        confirm: ConfirmFn = decline,
    ) -> None:
        self.store = store
        self.renderer = renderer
        self.confirm = confirm

    async def generate(self, spec: ProjectSpec, project_path: Path) -> list[Path] | None:
        """Write the Terraform files.

        Returns:
            The written paths, or ``None`` when the target has no Terraform
            support or no template (the step is skipped, not failed).
        """
        if not spec.supports_terraform:
            print_info(f"No Terraform template needed for {spec.deploy_target}")
            return None
        try:
            files = self.store.get_files(TERRAFORM, spec.deploy_target)
        except TemplateNotFoundError as exc:
            print_warning(f"Skipping Terraform: {exc}")
            return None

        terraform_dir = project_path / "terraform"
        written: list[Path] = []
        for name, content in files.items():
            written.append(await write_text(terraform_dir / name, content))

        tfvars = await self._write_tfvars(spec, terraform_dir, files.get(TFVARS_EXAMPLE))
        if tfvars is not None:
            written.append(tfvars)

        readme = await self.renderer.render_to_file(
            "terraform-README.md.j2",
            terraform_dir / "README.md",
            {
                "project_name": spec.project_name,
                "deploy_display": spec.deploy_target_config.display_name,
                "credentials": CREDENTIAL_INSTRUCTIONS.get(
                    spec.deploy_target,
                    ["- Configure appropriate cloud provider credentials"],
                ),
                "files": FILE_DESCRIPTIONS,
            },
        )
        written.append(readme)
        print_info(f"Created Terraform configuration for {spec.deploy_target}")
        return written

    async def _write_tfvars(
        self,
        spec: ProjectSpec,
        terraform_dir: Path,
        example: str | None,
    ) -> Path | None:
        path = terraform_dir / TFVARS
        if path.exists() and not self.confirm(f"{TFVARS} already exists. Regenerate?"):
            print_info(f"Keeping existing {TFVARS}")
            return None

        if example is None:
            print_warning(f"{TFVARS_EXAMPLE} not found, creating basic tfvars")
            example = (
                "# Project Configuration\n"
                'project_name = "{{ projectName }}"\n'
                'environment  = "{{ environment }}"\n'
                "\n"
                "# Add your configuration values here\n"
            )
        context = build_substitution_context(spec)
        if spec.deploy_target == "gcp-cloudrun" and not context["gcpProjectId"]:
            context["gcpProjectId"] = GCP_PROJECT_ID_PLACEHOLDER
            print_warning(
                f"No GCP project ID given; set project_id in {TFVARS} "
                "(or pass --gcp-project-id)"
            )
        content = render(example, context)
        await write_text(path, content)
        print_success(f"Generated {TFVARS}")
        print_warning("Please review and update the values before running terraform apply")
        return path


# ---------------------------------------------------------------------------
# TerraformRunner
# ---------------------------------------------------------------------------


class TerraformRunner:
    """Runs ``terraform init``/``plan``/``apply`` inside ``terraform/``.

    Only used interactively, after the user agrees.  Every failure is
    reported and turns into a ``False`` return value; nothing raises.
    """

    def __init__(
        self,
        terraform_dir: Path,
        confirm: ConfirmFn = decline,
        timeout: int = 1800,
    ) -> None:
        self.terraform_dir = Path(terraform_dir)
        self.confirm = confirm
        self.timeout = timeout

    async def check_installed(self) -> bool:
        returncode, stdout, _ = await run_command(["terraform", "version"], timeout=30)
        if returncode != 0:
            print_error("Terraform is not installed")
            console.print("[yellow]Please install Terraform first:[/yellow]")
            console.print("  [cyan]brew install terraform[/cyan] (macOS)")
            console.print("  [cyan]https://www.terraform.io/downloads[/cyan] (other platforms)")
            return False
        print_info(f"Terraform version: {stdout.splitlines()[0] if stdout else 'unknown'}")
        return True

    async def _run(self, args: list[str], label: str) -> bool:
        with create_progress() as progress:
            progress.add_task(f"Running terraform {label}...", total=None)
            returncode, _, stderr = await run_command(
                ["terraform", *args], cwd=self.terraform_dir, timeout=self.timeout
            )
        if returncode != 0:
            print_error(f"Terraform {label} failed")
            if stderr:
                console.print(stderr, style="dim", markup=False)
            return False
        print_success(f"Terraform {label} completed")
        return True

    async def init(self) -> bool:
        return await self._run(["init", "-input=false"], "init")

    async def plan(self) -> bool:
        return await self._run(["plan", "-input=false", "-out=tfplan"], "plan")

    async def apply(self) -> bool:
        print_warning("This will create real infrastructure and may incur costs!")
        if not self.confirm("Do you want to apply the Terraform configuration?"):
            print_warning("Terraform apply cancelled")
            return False
        return await self._run(["apply", "-input=false", "tfplan"], "apply")

    async def outputs(self) -> dict[str, Any]:
        """Return ``terraform output -json`` as a flat ``name -> value`` dict."""
        returncode, stdout, _ = await run_command(
            ["terraform", "output", "-json"], cwd=self.terraform_dir, timeout=60
        )
        if returncode != 0 or not stdout:
            return {}
        try:
            data = json.loads(stdout)
        except json.JSONDecodeError:
            return {}
        return {
            key: value.get("value") if isinstance(value, dict) else value
            for key, value in data.items()
        }

    async def execute(self) -> bool:
        """Run the full init -> plan -> apply sequence and print outputs."""
        if not await self.check_installed():
            return False
        for step in (self.init, self.plan, self.apply):
            if not await step():
                return False

        outputs = await self.outputs()
        if outputs:
            console.print("\n[cyan]Terraform Outputs:[/cyan]")
            for key, value in outputs.items():
                console.print(f"  {key}: [green]{escape(str(value))}[/green]")
        print_success("Infrastructure setup complete!")
        return True
