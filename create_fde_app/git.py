"""Git repository initialisation for the generated project."""

from __future__ import annotations

from pathlib import Path

from .utils import print_success, print_warning, run_command, write_text


GITIGNORE = """\
# dependencies
node_modules/
.pnp/
.pnp.js

# testing
coverage/

# production
build/
dist/
.next/
.nuxt/
.output/
.cache/
out/

# misc
.DS_Store
*.pem

# debug
npm-debug.log*
yarn-debug.log*
yarn-error.log*

# local env files
.env
.env.local
.env.production.local
.env.development.local
.env.test.local

# vercel
.vercel

# typescript
*.tsbuildinfo

# terraform
*.tfstate
*.tfstate.*
.terraform/
.terraform.lock.hcl
terraform.tfvars
tfplan

# IDE
.vscode/
.idea/
"""

INITIAL_COMMIT_MESSAGE = "Initial commit from create-fde-app"


class GitError(Exception):
    """Raised when a git command exits non-zero."""


async def _git(*args: str, cwd: Path) -> str:
    returncode, stdout, stderr = await run_command(["git", *args], cwd=cwd, timeout=60)
    if returncode != 0:
        raise GitError(stderr or f"git {args[0]} exited with {returncode}")
    return stdout


async def init_git(project_path: str | Path) -> bool:
    """Initialise a repository, write ``.gitignore`` and make the first commit.

    Failures are reported as warnings; the project itself is still usable.

    Returns:
        ``True`` when the initial commit was created.
    """
    path = Path(project_path)
    try:
        await _git("init", cwd=path)
        await write_text(path / ".gitignore", GITIGNORE)
        await _git("add", ".", cwd=path)
        await _git("commit", "-m", INITIAL_COMMIT_MESSAGE, cwd=path)
    except (GitError, OSError) as exc:
        print_warning(f"Failed to initialize git repository: {exc}")
        return False
    print_success("Git repository initialized")
    return True
