"""Integration tests for the full scaffolding run.

These tests drive ScaffoldPipeline with the real post-processors,
deployment injector and augmentation recipes.  Only the framework
generator (``npx create-*``) is replaced by a fixture that writes a
minimal generated project, so no Node.js toolchain or network is needed.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from create_fde_app.pipeline import ScaffoldPipeline


def _files(root: Path) -> set[str]:
    return {p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file()}


def _load_workflow(path: Path) -> dict:
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    assert isinstance(data, dict), f"{path.name} is not a YAML mapping"
    return data


def _steps(workflow: dict) -> list[dict]:
    return [step for job in workflow["jobs"].values() for step in job.get("steps", [])]


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------


@pytest.mark.integration
class TestDeploymentScenarios:
    async def test_vercel_docker_only(self, make_spec, fake_generator, tmp_path: Path) -> None:
        spec = make_spec(project_name="my-app", deploy_target="vercel", features=["docker"])
        result = await ScaffoldPipeline(spec, generator=fake_generator).run()

        root = tmp_path / "my-app"
        files = _files(root)
        assert {"Dockerfile", ".dockerignore", "vercel.json", "README.md"} <= files
        assert not (root / ".github" / "workflows").exists()
        assert not (root / "terraform").exists()
        assert "github-actions" in result.deployment.skipped
        assert "terraform" in result.deployment.skipped

        vercel = json.loads((root / "vercel.json").read_text(encoding="utf-8"))
        assert vercel["framework"] == "nextjs"

    async def test_aws_full_stack(self, make_spec, fake_generator, tmp_path: Path) -> None:
        spec = make_spec(
            project_name="my-app",
            deploy_target="aws-apprunner",
            features=["docker", "github-actions", "terraform"],
            deploy_config={"awsRegion": "eu-west-1"},
        )
        await ScaffoldPipeline(spec, generator=fake_generator).run()

        root = tmp_path / "my-app"
        files = _files(root)
        assert {
            "Dockerfile",
            ".github/workflows/deploy.yml",
            "terraform/main.tf",
            "terraform/variables.tf",
            "terraform/outputs.tf",
            "terraform/terraform.tfvars",
            "terraform/terraform.tfvars.example",
        } <= files

        workflow = _load_workflow(root / ".github" / "workflows" / "deploy.yml")
        assert workflow["env"]["AWS_REGION"] == "eu-west-1"
        assert workflow["env"]["ECR_REPOSITORY"] == "my-app"
        # PyYAML reads the bare ``on`` key as boolean True.
        assert "push" in workflow[True]

        tfvars = (root / "terraform" / "terraform.tfvars").read_text(encoding="utf-8")
        assert "my-app" in tfvars
        assert "eu-west-1" in tfvars

        readme = (root / "README.md").read_text(encoding="utf-8")
        assert "AWS_ACCESS_KEY_ID" in readme

    async def test_monorepo_workflow(self, make_spec, fake_generator, tmp_path: Path) -> None:
        spec = make_spec(
            project_name="web",
            deploy_target="aws-apprunner",
            features=["docker", "github-actions"],
            monorepo=True,
            monorepo_path="apps/",
        )
        await ScaffoldPipeline(spec, generator=fake_generator).run()

        root = tmp_path / "web"
        workflows = root / ".github" / "workflows"
        assert (workflows / "web-deploy.yml").is_file()
        assert not (workflows / "deploy.yml").exists()

        workflow = _load_workflow(workflows / "web-deploy.yml")
        assert workflow["name"].startswith("web - ")
        assert "apps/web/**" in workflow[True]["push"]["paths"]

        build = next(step for step in _steps(workflow) if step.get("run") == "yarn build")
        assert build["working-directory"] == "apps/web"
        for step in _steps(workflow):
            if "run" in step:
                assert step["working-directory"] == "apps/web", step.get("name")

        dockerfile = (root / "Dockerfile").read_text(encoding="utf-8")
        assert dockerfile.startswith(
            "# Monorepo Dockerfile - Build context should be repository root\n"
            "# App path: apps/web\n"
        )


@pytest.mark.integration
class TestAugmentedProject:
    async def test_nuxt_with_database_and_cors(
        self, make_spec, fake_generator, tmp_path: Path
    ) -> None:
        spec = make_spec(
            framework="nuxtjs",
            deploy_target="gcp-cloudrun",
            features=["docker", "github-actions", "env-vars", "health-check"],
            augmentations=["database:postgres", "utility:cors", "payments:stripe"],
            deploy_config={"gcpProjectId": "acme"},
            skip_install=True,
        )
        result = await ScaffoldPipeline(spec, generator=fake_generator).run()

        root = tmp_path / "myapp"
        report = result.augmentations
        assert report.succeeded == ["database:postgres", "utility:cors"]
        assert report.skipped == ["payments:stripe"]
        assert report.ok

        files = _files(root)
        assert {
            "prisma/schema.prisma",
            "server/plugins/database.ts",
            "server/middleware/cors.ts",
            ".env.example",
        } <= files

        package = json.loads((root / "package.json").read_text(encoding="utf-8"))
        assert package["dependencies"]["@prisma/client"] == "latest"

        env = (root / ".env.example").read_text(encoding="utf-8")
        assert sum(line.startswith("DATABASE_URL=") for line in env.splitlines()) == 1
        assert "ALLOWED_ORIGINS=" in env

        workflow = _load_workflow(root / ".github" / "workflows" / "deploy.yml")
        assert "acme" in json.dumps(workflow)
