"""Dockerfile and ``.dockerignore`` generation.

The Dockerfile is resolved through a three-step chain: the framework's own
template, the generic ``docker/common`` template, and finally the inline
two-stage build below.  The result goes through placeholder substitution
and, in monorepo mode, the COPY-path rewrite.
"""

from __future__ import annotations

from pathlib import Path

from ..config import ProjectSpec
from ..utils import print_info, print_warning, write_text
from .monorepo import ArtifactKind, rewrite_for_monorepo
from .placeholders import build_substitution_context, render
from .store import DOCKER, TemplateNotFoundError, TemplateStore


FALLBACK_DOCKERFILE = """\
# Build stage
FROM node:20-alpine AS builder
WORKDIR /app
COPY package*.json ./
RUN yarn install --frozen-lockfile
COPY . .
RUN yarn build

# Production stage
FROM node:20-alpine AS runner
WORKDIR /app
ENV NODE_ENV=production
ENV PORT={{ port }}
COPY --from=builder /app/node_modules ./node_modules
COPY --from=builder /app/package*.json ./
COPY --from=builder /app/{{ outputDirectory }} ./{{ outputDirectory }}
EXPOSE {{ port }}
CMD ["yarn", "start"]
"""

DOCKERIGNORE = """\
# Dependencies
node_modules
yarn-error.log
yarn-debug.log
pnpm-debug.log

# Build outputs
.next
.nuxt
.output
dist
build

# Environment files
.env
.env.*
!.env.example

# IDE
.vscode
.idea
*.swp
*.swo

# OS
.DS_Store
Thumbs.db

# Git
.git
.gitignore

# Documentation
README.md
docs
*.md

# Testing
coverage
.nyc_output
test
tests
__tests__
*.test.js
*.spec.js

# Terraform
terraform
*.tfstate
*.tfstate.*
.terraform

# CI/CD
.github
.gitlab-ci.yml
.circleci

# Development files
.eslintrc*
.prettierrc*
"""


class DockerGenerator:
    """Writes ``Dockerfile`` and ``.dockerignore`` into the project root."""

    def __init__(self, store: TemplateStore) -> None:
        self.store = store

    def resolve_template(self, framework: str) -> str:
        """Return the raw Dockerfile template for *framework*.

        Never raises for a missing template: falls back to the generic
        template and then to :data:`FALLBACK_DOCKERFILE`.
        """
        try:
            raw = self.store.get(DOCKER, framework)
            print_info(f"Using {framework}-specific Dockerfile template")
            return raw
        except TemplateNotFoundError:
            print_warning(f"No {framework}-specific Dockerfile found, using generic template")
        try:
            return self.store.get(DOCKER, "common")
        except TemplateNotFoundError:
            return FALLBACK_DOCKERFILE

    def build_dockerfile(self, spec: ProjectSpec) -> str:
        """Resolve, render and (in monorepo mode) rewrite the Dockerfile text."""
        content = render(
            self.resolve_template(spec.framework), build_substitution_context(spec)
        )
        if spec.monorepo:
            content = rewrite_for_monorepo(content, spec.app_path, ArtifactKind.DOCKERFILE)
        return content

    async def generate(self, spec: ProjectSpec, project_path: Path) -> list[Path]:
        dockerfile = await write_text(project_path / "Dockerfile", self.build_dockerfile(spec))
        dockerignore = await write_text(project_path / ".dockerignore", DOCKERIGNORE)
        return [dockerfile, dockerignore]
