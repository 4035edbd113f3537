"""Tests for WorkflowGenerator.

Covers:
- Template selection per deploy target
- Placeholder rendering that keeps ``${{ }}`` expressions
- Monorepo file name and rewrite
- Skip paths for unmapped targets and missing templates
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest
import yaml

from create_fde_app.deploy.store import TemplateNotFoundError, TemplateStore
from create_fde_app.deploy.workflow_gen import (
    WORKFLOW_TEMPLATES,
    WorkflowGenerator,
    workflow_filename,
)


pytestmark = pytest.mark.unit


@pytest.fixture
def generator() -> WorkflowGenerator:
    return WorkflowGenerator(TemplateStore())


def test_template_table():
    assert WORKFLOW_TEMPLATES == {
        "vercel": "vercel-ci.yml",
        "aws-apprunner": "aws-apprunner.yml",
        "gcp-cloudrun": "gcp-cloudrun.yml",
    }


def test_workflow_filename(make_spec):
    assert workflow_filename(make_spec()) == "deploy.yml"
    assert workflow_filename(make_spec(monorepo=True)) == "myapp-deploy.yml"


class TestBuildWorkflow:
    def test_aws(self, generator: WorkflowGenerator, make_spec):
        spec = make_spec(deploy_config={"awsRegion": "eu-west-1"})
        text = generator.build_workflow(spec)
        data = yaml.safe_load(text)
        assert data["name"] == "Deploy to AWS App Runner"
        assert data["env"]["AWS_REGION"] == "eu-west-1"
        assert data["env"]["ECR_REPOSITORY"] == "myapp"
        assert "${{ secrets.AWS_ACCESS_KEY_ID }}" in text
        assert "${{ github.sha }}" in text

    def test_gcp(self, generator: WorkflowGenerator, make_spec):
        spec = make_spec(deploy_target="gcp-cloudrun", deploy_config={"gcpProjectId": "acme"})
        data = yaml.safe_load(generator.build_workflow(spec))
        assert data["env"]["PROJECT_ID"] == "acme"
        assert data["env"]["REGION"] == "us-central1"
        assert data["env"]["SERVICE_NAME"] == "myapp"

    def test_vercel(self, generator: WorkflowGenerator, make_spec):
        text = generator.build_workflow(make_spec(deploy_target="vercel"))
        data = yaml.safe_load(text)
        assert data["name"] == "CI for Vercel"
        assert "{{ projectName }}" not in text

    def test_monorepo(self, generator: WorkflowGenerator, make_spec):
        text = generator.build_workflow(make_spec(monorepo=True))
        data = yaml.safe_load(text)
        assert data["name"] == "myapp - Deploy to AWS App Runner"
        assert data[True]["push"]["paths"] == [
            "apps/myapp/**",
            ".github/workflows/myapp-deploy.yml",
        ]
        build = next(s for s in data["jobs"]["test"]["steps"] if s["name"] == "Build")
        assert build["working-directory"] == "apps/myapp"

    def test_unmapped_target(self, make_spec):
        generator = WorkflowGenerator(TemplateStore(), templates={})
        assert generator.build_workflow(make_spec()) is None

    def test_missing_template(self, make_spec):
        store = MagicMock(spec=TemplateStore)
        store.get.side_effect = TemplateNotFoundError("github-actions", "aws-apprunner.yml")
        assert WorkflowGenerator(store).build_workflow(make_spec()) is None


class TestGenerate:
    async def test_writes_deploy_yml(self, generator: WorkflowGenerator, make_spec, next_project: Path):
        path = await generator.generate(make_spec(), next_project)
        assert path == next_project / ".github" / "workflows" / "deploy.yml"
        assert path.is_file()

    async def test_monorepo_file_name(self, generator: WorkflowGenerator, make_spec, next_project: Path):
        path = await generator.generate(make_spec(monorepo=True), next_project)
        assert path.name == "myapp-deploy.yml"

    async def test_skipped_returns_none(self, make_spec, next_project: Path):
        generator = WorkflowGenerator(TemplateStore(), templates={})
        assert await generator.generate(make_spec(), next_project) is None
        assert not (next_project / ".github").exists()
