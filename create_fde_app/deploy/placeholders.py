"""Minimal ``{{ name }}`` placeholder substitution for deployment templates.

Deployment templates (Dockerfiles, GitHub Actions workflows, tfvars) carry
foreign ``{{ }}`` syntax, most notably ``${{ secrets.X }}`` expressions, so
they cannot go through Jinja2.  This engine understands exactly one form:

* ``{{ name }}`` where *name* is a bare identifier, with any inner spaces.
* A token directly preceded by ``$`` is left untouched.
* Tokens whose content is not a bare identifier are left untouched.
* A name missing from the context renders as an empty string.
* Values are inserted literally in a single pass; they are never re-scanned.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..config import ProjectSpec


PLACEHOLDER_RE = re.compile(r"(?<!\$)\{\{\s*([A-Za-z_][A-Za-z0-9_]*)\s*\}\}")


def render(raw_text: str, context: Mapping[str, object]) -> str:
    """Substitute every recognised placeholder in *raw_text*.

    Example::

        render("pre {{ a }} mid {{ b }} post", {"a": "X", "b": "Y"})
        -> "pre X mid Y post"
    """

    def _replace(match: re.Match[str]) -> str:
        value = context.get(match.group(1))
        return "" if value is None else str(value)

    return PLACEHOLDER_RE.sub(_replace, raw_text)


def find_placeholders(raw_text: str) -> list[str]:
    """Return the distinct placeholder names in *raw_text*, in first-seen order."""
    return list(dict.fromkeys(m.group(1) for m in PLACEHOLDER_RE.finditer(raw_text)))


def build_substitution_context(spec: "ProjectSpec") -> dict[str, str]:
    """Assemble the flat placeholder map for one rendering call."""
    framework = spec.framework_config
    return {
        "projectName": spec.project_name,
        "framework": spec.framework,
        "deployTarget": spec.deploy_target,
        "awsRegion": spec.deploy_value("awsRegion"),
        "gcpProjectId": spec.deploy_value("gcpProjectId"),
        "gcpRegion": spec.deploy_value("gcpRegion"),
        "appPath": spec.app_path or ".",
        "environment": "production",
        "port": str(framework.port),
        "healthPath": framework.health_endpoint,
        "outputDirectory": framework.output_directory,
    }
