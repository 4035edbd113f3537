"""Tests for Terraform generation and TerraformRunner.

Covers:
- No terraform/ for Vercel
- Verbatim copies, rendered terraform.tfvars and README
- Overwrite confirmation for an existing terraform.tfvars
- TerraformRunner command sequence, apply confirmation and outputs
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from create_fde_app.deploy.injector import _JINJA_TEMPLATE_DIR
from create_fde_app.deploy.store import TERRAFORM, TemplateNotFoundError, TemplateStore
from create_fde_app.deploy.terraform_gen import TerraformGenerator, TerraformRunner, decline
from create_fde_app.templates import TemplateRenderer


pytestmark = pytest.mark.unit


@pytest.fixture
def renderer() -> TemplateRenderer:
    return TemplateRenderer(_JINJA_TEMPLATE_DIR)


def _generator(renderer: TemplateRenderer, confirm=decline) -> TerraformGenerator:
    return TerraformGenerator(TemplateStore(), renderer, confirm)


# ---------------------------------------------------------------------------
# TerraformGenerator
# ---------------------------------------------------------------------------


class TestTerraformGenerator:
    async def test_vercel_has_no_terraform(self, renderer, make_spec, next_project: Path):
        result = await _generator(renderer).generate(make_spec(deploy_target="vercel"), next_project)
        assert result is None
        assert not (next_project / "terraform").exists()

    async def test_aws_file_set(self, renderer, make_spec, next_project: Path):
        spec = make_spec(deploy_config={"awsRegion": "eu-west-1"})
        written = await _generator(renderer).generate(spec, next_project)
        tf = next_project / "terraform"
        assert [p.name for p in written] == [
            "main.tf",
            "variables.tf",
            "outputs.tf",
            "terraform.tfvars.example",
            "terraform.tfvars",
            "README.md",
        ]

        example = (tf / "terraform.tfvars.example").read_text(encoding="utf-8")
        assert "{{ projectName }}" in example

        tfvars = (tf / "terraform.tfvars").read_text(encoding="utf-8")
        assert 'project_name = "myapp"' in tfvars
        assert 'aws_region   = "eu-west-1"' in tfvars
        assert 'environment  = "production"' in tfvars
        assert "container_port    = 3000" in tfvars
        assert 'health_check_path = "/api/health"' in tfvars
        assert "{{" not in tfvars

    async def test_main_tf_copied_verbatim(self, renderer, make_spec, next_project: Path):
        await _generator(renderer).generate(make_spec(), next_project)
        raw = TemplateStore().get_files(TERRAFORM, "aws-apprunner")["main.tf"]
        assert (next_project / "terraform" / "main.tf").read_text(encoding="utf-8") == raw

    async def test_gcp_tfvars(self, renderer, make_spec, next_project: Path):
        spec = make_spec(
            deploy_target="gcp-cloudrun",
            deploy_config={"gcpProjectId": "acme-prod", "gcpRegion": "europe-west1"},
        )
        await _generator(renderer).generate(spec, next_project)
        tfvars = (next_project / "terraform" / "terraform.tfvars").read_text(encoding="utf-8")
        assert 'project_id   = "acme-prod"' in tfvars
        assert 'region       = "europe-west1"' in tfvars

    async def test_gcp_tfvars_without_project_id(self, renderer, make_spec, next_project: Path):
        spec = make_spec(deploy_target="gcp-cloudrun")
        with patch("create_fde_app.deploy.terraform_gen.print_warning") as warn:
            await _generator(renderer).generate(spec, next_project)
        tfvars = (next_project / "terraform" / "terraform.tfvars").read_text(encoding="utf-8")
        assert 'project_id   = "your-project-id"' in tfvars
        assert 'project_id   = ""' not in tfvars
        assert any("--gcp-project-id" in call.args[0] for call in warn.call_args_list)

    async def test_aws_tfvars_has_no_project_id_warning(self, renderer, make_spec, next_project: Path):
        with patch("create_fde_app.deploy.terraform_gen.print_warning") as warn:
            await _generator(renderer).generate(make_spec(), next_project)
        assert not any("--gcp-project-id" in call.args[0] for call in warn.call_args_list)

    async def test_readme(self, renderer, make_spec, next_project: Path):
        await _generator(renderer).generate(make_spec(), next_project)
        readme = (next_project / "terraform" / "README.md").read_text(encoding="utf-8")
        assert "deploying myapp" in readme
        assert "AWS App Runner" in readme
        assert "AWS_ACCESS_KEY_ID" in readme
        assert "- `terraform.tfvars`: Your configuration values" in readme

    async def test_existing_tfvars_kept_when_declined(self, renderer, make_spec, next_project: Path):
        tf = next_project / "terraform"
        tf.mkdir()
        (tf / "terraform.tfvars").write_text("custom = true\n", encoding="utf-8")
        confirm = MagicMock(return_value=False)

        written = await _generator(renderer, confirm).generate(make_spec(), next_project)

        confirm.assert_called_once()
        assert (tf / "terraform.tfvars").read_text(encoding="utf-8") == "custom = true\n"
        assert tf / "terraform.tfvars" not in written

    async def test_existing_tfvars_replaced_when_confirmed(self, renderer, make_spec, next_project: Path):
        tf = next_project / "terraform"
        tf.mkdir()
        (tf / "terraform.tfvars").write_text("custom = true\n", encoding="utf-8")

        written = await _generator(renderer, lambda _q: True).generate(make_spec(), next_project)

        assert tf / "terraform.tfvars" in written
        assert 'project_name = "myapp"' in (tf / "terraform.tfvars").read_text(encoding="utf-8")

    async def test_missing_templates_skip(self, renderer, make_spec, next_project: Path):
        store = MagicMock(spec=TemplateStore)
        store.get_files.side_effect = TemplateNotFoundError(TERRAFORM, "aws-apprunner")
        generator = TerraformGenerator(store, renderer)
        assert await generator.generate(make_spec(), next_project) is None

    async def test_missing_example_gets_basic_tfvars(self, renderer, make_spec, next_project: Path):
        store = MagicMock(spec=TemplateStore)
        store.get_files.return_value = {"main.tf": "# main\n"}
        await TerraformGenerator(store, renderer).generate(make_spec(), next_project)
        tfvars = (next_project / "terraform" / "terraform.tfvars").read_text(encoding="utf-8")
        assert 'project_name = "myapp"' in tfvars
        assert 'environment  = "production"' in tfvars


# ---------------------------------------------------------------------------
# TerraformRunner
# ---------------------------------------------------------------------------


class TestTerraformRunner:
    async def test_not_installed(self, tmp_path: Path):
        mock_run = AsyncMock(return_value=(127, "", "Command not found: terraform"))
        with patch("create_fde_app.deploy.terraform_gen.run_command", new=mock_run):
            assert await TerraformRunner(tmp_path).execute() is False
        assert mock_run.await_count == 1

    async def test_full_sequence(self, tmp_path: Path):
        outputs = json.dumps({"service_url": {"value": "https://x.awsapprunner.com"}})
        mock_run = AsyncMock(
            side_effect=[
                (0, "Terraform v1.7.0", ""),
                (0, "", ""),
                (0, "", ""),
                (0, "", ""),
                (0, outputs, ""),
            ]
        )
        with patch("create_fde_app.deploy.terraform_gen.run_command", new=mock_run):
            assert await TerraformRunner(tmp_path, confirm=lambda _q: True).execute() is True

        commands = [call.args[0] for call in mock_run.call_args_list]
        assert commands == [
            ["terraform", "version"],
            ["terraform", "init", "-input=false"],
            ["terraform", "plan", "-input=false", "-out=tfplan"],
            ["terraform", "apply", "-input=false", "tfplan"],
            ["terraform", "output", "-json"],
        ]
        assert mock_run.call_args_list[1].kwargs["cwd"] == tmp_path

    async def test_apply_declined(self, tmp_path: Path):
        mock_run = AsyncMock(return_value=(0, "Terraform v1.7.0", ""))
        with patch("create_fde_app.deploy.terraform_gen.run_command", new=mock_run):
            assert await TerraformRunner(tmp_path).execute() is False
        commands = [call.args[0][1] for call in mock_run.call_args_list]
        assert commands == ["version", "init", "plan"]

    async def test_plan_failure_stops(self, tmp_path: Path):
        mock_run = AsyncMock(
            side_effect=[(0, "Terraform v1.7.0", ""), (0, "", ""), (1, "", "Error: bad")]
        )
        confirm = MagicMock(return_value=True)
        with patch("create_fde_app.deploy.terraform_gen.run_command", new=mock_run):
            assert await TerraformRunner(tmp_path, confirm=confirm).execute() is False
        confirm.assert_not_called()

    async def test_outputs_flattened(self, tmp_path: Path):
        payload = json.dumps({"url": {"value": "https://a"}, "raw": 3})
        mock_run = AsyncMock(return_value=(0, payload, ""))
        with patch("create_fde_app.deploy.terraform_gen.run_command", new=mock_run):
            assert await TerraformRunner(tmp_path).outputs() == {"url": "https://a", "raw": 3}

    async def test_outputs_invalid_json(self, tmp_path: Path):
        mock_run = AsyncMock(return_value=(0, "not json", ""))
        with patch("create_fde_app.deploy.terraform_gen.run_command", new=mock_run):
            assert await TerraformRunner(tmp_path).outputs() == {}
