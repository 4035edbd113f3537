"""GitHub Actions deployment workflow generation."""

from __future__ import annotations

from pathlib import Path

from ..config import DEPLOY_TARGETS, ProjectSpec
from ..utils import print_info, print_warning, write_text
from .monorepo import ArtifactKind, rewrite_for_monorepo
from .placeholders import build_substitution_context, render
from .store import GITHUB_ACTIONS, TemplateNotFoundError, TemplateStore


# Deploy target -> workflow template key
WORKFLOW_TEMPLATES: dict[str, str] = {
    target: config.workflow_template
    for target, config in DEPLOY_TARGETS.items()
    if config.workflow_template
}

WORKFLOW_DIR = Path(".github") / "workflows"


def workflow_filename(spec: ProjectSpec) -> str:
    """``deploy.yml``, or ``<project>-deploy.yml`` when sharing a monorepo."""
    return f"{spec.project_name}-deploy.yml" if spec.monorepo else "deploy.yml"


class WorkflowGenerator:
    """Writes the deploy workflow into ``.github/workflows/``."""

    def __init__(
        self,
        store: TemplateStore,
        templates: dict[str, str] | None = None,
    ) -> None:
        self.store = store
        self.templates = WORKFLOW_TEMPLATES if templates is None else templates

    def build_workflow(self, spec: ProjectSpec) -> str | None:
        """Return the rendered workflow text, or ``None`` if the target has none."""
        key = self.templates.get(spec.deploy_target)
        if key is None:
            print_warning(f"No GitHub Actions template found for {spec.deploy_target}")
            return None
        try:
            raw = self.store.get(GITHUB_ACTIONS, key)
        except TemplateNotFoundError:
            print_warning(f"GitHub Actions template {key} is missing, skipping workflow")
            return None

        content = render(raw, build_substitution_context(spec))
        if spec.monorepo:
            content = rewrite_for_monorepo(
                content,
                spec.app_path,
                ArtifactKind.WORKFLOW,
                project_name=spec.project_name,
            )
        return content

    async def generate(self, spec: ProjectSpec, project_path: Path) -> Path | None:
        content = self.build_workflow(spec)
        if content is None:
            return None
        filename = workflow_filename(spec)
        path = await write_text(project_path / WORKFLOW_DIR / filename, content)
        print_info(f"Created GitHub Actions workflow {filename} for {spec.deploy_target}")
        return path
