"""Tests for vercel.json and the deployment README.

Covers:
- build_vercel_config for Next.js, other frameworks and monorepo mode
- PlatformGenerator file set per deploy target
- README secrets, prerequisites and artifact listing
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from create_fde_app.deploy.injector import _JINJA_TEMPLATE_DIR
from create_fde_app.deploy.platform import PlatformGenerator, build_vercel_config
from create_fde_app.templates import TemplateRenderer


pytestmark = pytest.mark.unit


@pytest.fixture
def platform() -> PlatformGenerator:
    return PlatformGenerator(TemplateRenderer(_JINJA_TEMPLATE_DIR))


class TestVercelConfig:
    def test_nextjs(self, make_spec):
        config = build_vercel_config(make_spec(deploy_target="vercel"))
        assert config == {
            "framework": "nextjs",
            "regions": ["iad1"],
            "env": {"NODE_ENV": "production"},
        }

    @pytest.mark.parametrize(
        "framework, output", [("nuxtjs", ".output/public"), ("remix", "build/client")]
    )
    def test_other_frameworks(self, make_spec, framework: str, output: str):
        config = build_vercel_config(make_spec(framework=framework, deploy_target="vercel"))
        assert config["buildCommand"] == "yarn build"
        assert config["outputDirectory"] == output
        assert "framework" not in config

    def test_monorepo(self, make_spec):
        spec = make_spec(framework="nuxtjs", deploy_target="vercel", monorepo=True)
        config = build_vercel_config(spec)
        assert config["rootDirectory"] == "apps/myapp"
        assert config["builds"] == [{"src": "apps/myapp/package.json", "use": "@vercel/node"}]
        assert config["buildCommand"] == "cd apps/myapp && yarn build"

    def test_monorepo_nextjs_has_no_build_command(self, make_spec):
        spec = make_spec(deploy_target="vercel", monorepo=True)
        config = build_vercel_config(spec)
        assert config["rootDirectory"] == "apps/myapp"
        assert "buildCommand" not in config


class TestPlatformGenerator:
    async def test_vercel_writes_config_and_readme(self, platform, make_spec, next_project: Path):
        written = await platform.generate(make_spec(deploy_target="vercel"), next_project)
        assert written == [next_project / "vercel.json", next_project / "README.md"]
        data = json.loads((next_project / "vercel.json").read_text(encoding="utf-8"))
        assert data["framework"] == "nextjs"

    @pytest.mark.parametrize("target", ["aws-apprunner", "gcp-cloudrun"])
    async def test_container_targets_only_readme(self, platform, make_spec, next_project: Path, target: str):
        written = await platform.generate(make_spec(deploy_target=target), next_project)
        assert written == [next_project / "README.md"]
        assert not (next_project / "vercel.json").exists()

    async def test_readme_contents(self, platform, make_spec, next_project: Path):
        await platform.generate(
            make_spec(), next_project, artifacts=["Dockerfile", ".github/workflows/deploy.yml"]
        )
        readme = (next_project / "README.md").read_text(encoding="utf-8")
        assert readme.startswith("# myapp\n")
        assert "Next.js application deployed to AWS App Runner." in readme
        assert "- AWS CLI configured" in readme
        assert "  - AWS_ACCESS_KEY_ID" in readme
        assert "  - APPRUNNER_SERVICE_ARN" in readme
        assert "- `.github/workflows/deploy.yml`" in readme
        assert "terraform init" in readme

    async def test_vercel_readme_has_no_secrets(self, platform, make_spec, next_project: Path):
        await platform.generate(make_spec(deploy_target="vercel"), next_project)
        readme = (next_project / "README.md").read_text(encoding="utf-8")
        assert "GitHub Secrets configured" not in readme
        assert "VERCEL_TOKEN" not in readme
        assert "npx vercel link" in readme

    async def test_readme_overwrites_framework_readme(self, platform, make_spec, next_project: Path):
        (next_project / "README.md").write_text("create-next-app readme", encoding="utf-8")
        await platform.generate(make_spec(), next_project)
        assert "create-next-app readme" not in (next_project / "README.md").read_text(encoding="utf-8")

    async def test_monorepo_readme_mentions_app_path(self, platform, make_spec, next_project: Path):
        await platform.generate(make_spec(monorepo=True), next_project)
        readme = (next_project / "README.md").read_text(encoding="utf-8")
        assert "`apps/myapp`" in readme


def test_readme_context_secrets(make_spec):
    ctx = PlatformGenerator.readme_context(make_spec(deploy_target="gcp-cloudrun"), [])
    assert ctx["secrets"] == ["GCP_SA_KEY", "GCP_PROJECT_ID"]
    assert ctx["app_path"] == ""
    assert PlatformGenerator.readme_context(make_spec(deploy_target="vercel"), [])["secrets"] == []
