"""Wrapper around each framework's official project generator.

Shells out to ``npx <generator> <project-name> <args...>`` in the output
directory.  The argument list comes entirely from the static
:data:`create_fde_app.config.FRAMEWORKS` table.
"""

from __future__ import annotations

from pathlib import Path

from .config import ProjectSpec
from .utils import create_progress, format_command, print_info, print_success, run_command


class FrameworkGenerationError(Exception):
    """Raised when the framework's generator exits non-zero."""

    def __init__(self, framework: str, message: str, stderr: str = "") -> None:
        self.framework = framework
        self.stderr = stderr
        super().__init__(f"Failed to create {framework} project: {message}")


class FrameworkGenerator:
    """Creates the base project by running the framework's generator."""

    def __init__(self, npx: str = "npx", timeout: int = 600) -> None:
        self.npx = npx
        self.timeout = timeout

    def build_command(self, spec: ProjectSpec) -> list[str]:
        """Return the full argument vector, e.g.

        ``["npx", "create-next-app@latest", "my-app", "--typescript", ...]``
        """
        config = spec.framework_config
        cmd = [self.npx, *config.generator, spec.project_name, *config.default_args]
        if spec.skip_install and config.skip_install_flag not in cmd:
            cmd.append(config.skip_install_flag)
        return cmd

    async def generate(self, spec: ProjectSpec) -> Path:
        """Run the generator and return the created project directory.

        Raises:
            FrameworkGenerationError: If the generator is missing or fails.
        """
        config = spec.framework_config
        cmd = self.build_command(spec)
        print_info(f"Running: {format_command(cmd)}")

        spec.output_dir.mkdir(parents=True, exist_ok=True)
        with create_progress() as progress:
            progress.add_task(f"Creating {config.display_name} project...", total=None)
            returncode, _, stderr = await run_command(
                cmd, cwd=spec.output_dir, timeout=self.timeout
            )

        if returncode != 0:
            detail = stderr.strip() or f"exit code {returncode}"
            raise FrameworkGenerationError(spec.framework, detail, stderr=stderr)

        print_success(f"{config.display_name} project created successfully!")
        return spec.project_path
