"""Platform-specific static config and the deployment README.

``vercel.json`` is only written for targets that declare ``platform_config``.
``README.md`` is always written (overwriting the framework's own README)
from a fixed prerequisites/instructions table keyed by deploy target.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from ..config import ProjectSpec
from ..templates import TemplateRenderer
from ..utils import print_info, save_json


PREREQUISITES: dict[str, list[str]] = {
    "aws-apprunner": [
        "AWS Account",
        "AWS CLI configured",
        "Terraform installed (optional, for infrastructure setup)",
    ],
    "vercel": [
        "Vercel Account (free tier available)",
        "GitHub repository",
        "No manual secrets configuration needed! Vercel handles everything "
        "automatically when you connect your GitHub repo",
    ],
    "gcp-cloudrun": [
        "Google Cloud Account",
        "gcloud CLI configured",
        "Terraform installed (optional, for infrastructure setup)",
    ],
}

_PUSH_AND_TERRAFORM = """\
1. Push your code to GitHub
2. The GitHub Actions workflow will automatically deploy your application
3. (Optional) Use Terraform to set up infrastructure:
   ```bash
   cd terraform
   terraform init
   terraform plan
   terraform apply
   ```"""

INSTRUCTIONS: dict[str, str] = {
    "aws-apprunner": _PUSH_AND_TERRAFORM,
    "gcp-cloudrun": _PUSH_AND_TERRAFORM,
    "vercel": """\
#### First-time Setup

1. **Install Vercel CLI** (if not already installed):
   ```bash
   npm install -g vercel
   ```

2. **Link your project to Vercel**:
   ```bash
   npx vercel link
   ```

3. **Connect your GitHub repository**:
   - Go to [Vercel Dashboard](https://vercel.com/dashboard)
   - Import your GitHub repository
   - Vercel will automatically deploy on every push

#### Deployment

**Automatic**: Push to GitHub main branch
**Manual**: Run `vercel --prod`

#### CI/CD

The GitHub Actions workflow will:
- Run lint and build checks on every push
- Vercel handles the actual deployment automatically""",
}

DEFAULT_PREREQUISITES = ["Check documentation for deployment requirements."]
DEFAULT_INSTRUCTIONS = "1. Push your code to GitHub\n2. Follow the deployment guide"


def build_vercel_config(spec: ProjectSpec) -> dict[str, Any]:
    """Return the ``vercel.json`` document for *spec*.

    Next.js is auto-detected by Vercel, so only the other frameworks get an
    explicit build command and output directory.
    """
    is_next = spec.framework == "nextjs"
    config: dict[str, Any] = {
        "buildCommand": None if is_next else "yarn build",
        "outputDirectory": None if is_next else spec.framework_config.output_directory,
        "framework": "nextjs" if is_next else None,
        "regions": ["iad1"],
        "env": {"NODE_ENV": "production"},
    }
    if spec.monorepo and spec.app_path:
        app_path = spec.app_path
        config["rootDirectory"] = app_path
        config["builds"] = [{"src": f"{app_path}/package.json", "use": "@vercel/node"}]
        if config["buildCommand"]:
            config["buildCommand"] = f"cd {app_path} && {config['buildCommand']}"
    return {key: value for key, value in config.items() if value is not None}


class PlatformGenerator:
    """Writes ``vercel.json`` (when applicable) and ``README.md``."""

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    async def generate(
        self,
        spec: ProjectSpec,
        project_path: Path,
        artifacts: list[str] | None = None,
    ) -> list[Path]:
        """Write the platform files.

        Args:
            spec: The resolved project spec.
            project_path: Project root.
            artifacts: Deployment files written by earlier steps, listed in
                the README (paths relative to the project root).
        """
        written: list[Path] = []
        if spec.deploy_target_config.platform_config:
            vercel_json = project_path / "vercel.json"
            await save_json(build_vercel_config(spec), vercel_json)
            print_info("Created Vercel configuration")
            written.append(vercel_json)

        written.append(
            await self.renderer.render_to_file(
                "README.md.j2",
                project_path / "README.md",
                self.readme_context(spec, artifacts or []),
            )
        )
        return written

    @staticmethod
    def readme_context(spec: ProjectSpec, artifacts: list[str]) -> dict[str, Any]:
        target = spec.deploy_target_config
        # Vercel's GitHub integration needs no repository secrets.
        secrets = [] if target.platform_config else [
            *target.github_secrets,
            *target.optional_secrets,
        ]
        return {
            "project_name": spec.project_name,
            "framework_display": spec.framework_config.display_name,
            "deploy_display": target.display_name,
            "app_path": spec.app_path,
            "prerequisites": PREREQUISITES.get(spec.deploy_target, DEFAULT_PREREQUISITES),
            "secrets": secrets,
            "instructions": INSTRUCTIONS.get(spec.deploy_target, DEFAULT_INSTRUCTIONS),
            "artifacts": artifacts,
        }
