"""create-fde-app deployment layer.

Writes Docker, GitHub Actions, Terraform and platform artifacts into a
freshly generated project.

Quick usage::

    from create_fde_app.config import ProjectSpec
    from create_fde_app.deploy import DeploymentInjector

    spec = ProjectSpec(project_name="my-app", features=["docker"])
    result = await DeploymentInjector().inject(spec)
"""

from create_fde_app.deploy.injector import (
    DeploymentError,
    DeploymentInjector,
    DeploymentResult,
)
from create_fde_app.deploy.monorepo import ArtifactKind, rewrite_for_monorepo
from create_fde_app.deploy.placeholders import (
    build_substitution_context,
    find_placeholders,
    render,
)
from create_fde_app.deploy.store import TemplateNotFoundError, TemplateStore

__all__ = [
    "ArtifactKind",
    "DeploymentError",
    "DeploymentInjector",
    "DeploymentResult",
    "TemplateNotFoundError",
    "TemplateStore",
    "build_substitution_context",
    "find_placeholders",
    "render",
    "rewrite_for_monorepo",
]
