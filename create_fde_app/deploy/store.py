"""Template Store: raw deployment templates addressed by ``(category, key)``.

Templates live under ``deploy/templates/`` as plain files.  The descriptor
table below is the only place that knows which files make up a template;
callers never build template paths themselves.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"

DOCKER = "docker"
GITHUB_ACTIONS = "github-actions"
TERRAFORM = "terraform"

CATEGORIES: tuple[str, ...] = (DOCKER, GITHUB_ACTIONS, TERRAFORM)

TERRAFORM_FILES: tuple[str, ...] = (
    "main.tf",
    "variables.tf",
    "outputs.tf",
    "terraform.tfvars.example",
)


class TemplateNotFoundError(LookupError):
    """Raised when no template is registered (or present) for a descriptor."""

    def __init__(self, category: str, key: str, detail: str = "") -> None:
        self.category = category
        self.key = key
        message = f"No {category} template for {key!r}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


@dataclass(frozen=True)
class TemplateDescriptor:
    """Identifies one template artifact and the files it is made of."""

    category: str
    key: str
    filenames: tuple[str, ...]
    nested: bool = True

    def relative_paths(self) -> list[str]:
        base = f"{self.category}/{self.key}" if self.nested else self.category
        return [f"{base}/{name}" for name in self.filenames]


def _descriptors() -> dict[tuple[str, str], TemplateDescriptor]:
    table = [
        TemplateDescriptor(DOCKER, "nextjs", ("Dockerfile",)),
        TemplateDescriptor(DOCKER, "nuxtjs", ("Dockerfile",)),
        TemplateDescriptor(DOCKER, "remix", ("Dockerfile",)),
        TemplateDescriptor(DOCKER, "common", ("Dockerfile.base",)),
        TemplateDescriptor(GITHUB_ACTIONS, "aws-apprunner.yml", ("aws-apprunner.yml",), nested=False),
        TemplateDescriptor(GITHUB_ACTIONS, "vercel-ci.yml", ("vercel-ci.yml",), nested=False),
        TemplateDescriptor(GITHUB_ACTIONS, "gcp-cloudrun.yml", ("gcp-cloudrun.yml",), nested=False),
        TemplateDescriptor(TERRAFORM, "aws-apprunner", TERRAFORM_FILES),
        TemplateDescriptor(TERRAFORM, "gcp-cloudrun", TERRAFORM_FILES),
    ]
    return {(d.category, d.key): d for d in table}


TEMPLATE_DESCRIPTORS: dict[tuple[str, str], TemplateDescriptor] = _descriptors()


class TemplateStore:
    """Read-only access to the raw deployment templates.

    ``get`` and ``get_files`` raise :class:`TemplateNotFoundError` when a
    descriptor is unknown or its files are missing.  That condition is never
    fatal: the Docker step falls back to a generic template and the workflow
    and Terraform steps are skipped.
    """

    def __init__(
        self,
        template_dir: str | Path | None = None,
        descriptors: dict[tuple[str, str], TemplateDescriptor] | None = None,
    ) -> None:
        self.template_dir = Path(template_dir) if template_dir else _DEFAULT_TEMPLATE_DIR
        self.descriptors = descriptors if descriptors is not None else TEMPLATE_DESCRIPTORS

    def descriptor(self, category: str, key: str) -> TemplateDescriptor:
        try:
            return self.descriptors[(category, key)]
        except KeyError:
            raise TemplateNotFoundError(category, key) from None

    def has(self, category: str, key: str) -> bool:
        try:
            self.get_files(category, key)
        except TemplateNotFoundError:
            return False
        return True

    def get(self, category: str, key: str) -> str:
        """Return the text of a single-file template."""
        files = self.get_files(category, key)
        return next(iter(files.values()))

    def get_files(self, category: str, key: str) -> dict[str, str]:
        """Return ``{filename: text}`` for every file of a template, in order."""
        descriptor = self.descriptor(category, key)
        files: dict[str, str] = {}
        for name, rel in zip(descriptor.filenames, descriptor.relative_paths()):
            path = self.template_dir / rel
            try:
                files[name] = path.read_text(encoding="utf-8")
            except FileNotFoundError:
                raise TemplateNotFoundError(category, key, f"missing {rel}") from None
        return files
