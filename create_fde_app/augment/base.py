"""Declarative augmentation recipes and the routine that applies them.

An augmentation adds a capability (database, auth, monitoring, ...) to an
already generated project.  Each one is described by a :class:`Recipe`:
the npm packages to add, the source files to render, the environment block
to append to ``.env.example`` and the ``package.json`` scripts to merge.
:func:`apply_recipe` performs those steps in order.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..templates import TemplateRenderer
from ..utils import (
    create_progress,
    load_json,
    print_info,
    print_success,
    read_text,
    run_command,
    save_json,
    write_text,
)


_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"

INSTALL_TIMEOUT = 600


class AugmentationError(Exception):
    """Raised when an augmentation cannot be applied to the project."""


class UnknownAugmentationError(AugmentationError):
    """Raised by a category dispatcher for a type it does not know."""

    def __init__(self, category: str, kind: str, known: list[str]) -> None:
        self.category = category
        self.kind = kind
        super().__init__(
            f"Unknown {category} type: {kind} (available: {', '.join(known)})"
        )


# ---------------------------------------------------------------------------
# Recipe model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FileSpec:
    """One rendered file.  An empty *frameworks* tuple means every framework."""

    template: str
    target: str
    frameworks: tuple[str, ...] = ()

    def applies_to(self, framework: str) -> bool:
        return not self.frameworks or framework in self.frameworks


@dataclass
class Recipe:
    name: str
    dependencies: list[str] = field(default_factory=list)
    dev_dependencies: list[str] = field(default_factory=list)
    files: list[FileSpec] = field(default_factory=list)
    env_marker: str = ""
    env_block: str = ""
    scripts: dict[str, str] = field(default_factory=dict)
    frameworks: tuple[str, ...] = ()
    next_steps: list[str] = field(default_factory=list)
    context: dict[str, Any] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Applying a recipe
# ---------------------------------------------------------------------------


async def apply_recipe(
    recipe: Recipe,
    project_path: str | Path,
    framework: str,
    *,
    install: bool = True,
    renderer: TemplateRenderer | None = None,
    context: dict[str, Any] | None = None,
) -> list[Path]:
    """Apply *recipe* to the project at *project_path*.

    Steps: dependencies, rendered files, env block, scripts.  Dependencies
    are installed with ``npm install`` or, when *install* is false, written
    to ``package.json`` with a ``latest`` range.

    Returns:
        Every file created or modified.

    Raises:
        AugmentationError: No ``package.json``, unsupported framework or a
            failed install.
    """
    root = Path(project_path)
    package_json = root / "package.json"
    if not package_json.is_file():
        raise AugmentationError(f"No package.json found in {root}")
    if recipe.frameworks and framework not in recipe.frameworks:
        raise AugmentationError(
            f"{recipe.name} is only supported for: {', '.join(recipe.frameworks)}"
        )

    renderer = renderer or TemplateRenderer(_DEFAULT_TEMPLATE_DIR)
    written: list[Path] = []

    if install:
        await install_packages(root, recipe.dependencies)
        await install_packages(root, recipe.dev_dependencies, dev=True)
    elif recipe.dependencies or recipe.dev_dependencies:
        await record_dependencies(
            package_json, recipe.dependencies, recipe.dev_dependencies
        )
        written.append(package_json)

    values = {
        "project_name": root.name,
        "framework": framework,
        **recipe.context,
        **(context or {}),
    }
    for spec in recipe.files:
        if not spec.applies_to(framework):
            continue
        written.append(
            await renderer.render_to_file(spec.template, root / spec.target, values)
        )

    if recipe.env_block:
        written += await append_env_block(root, recipe.env_marker, recipe.env_block)

    if recipe.scripts:
        await merge_scripts(package_json, recipe.scripts)
        if package_json not in written:
            written.append(package_json)

    print_success(f"{recipe.name} setup complete")
    if recipe.next_steps:
        print_info("Next steps:")
        for number, step in enumerate(recipe.next_steps, start=1):
            print_info(f"  {number}. {step}")
    return written


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def install_packages(project_path: Path, packages: list[str], *, dev: bool = False) -> None:
    if not packages:
        return
    cmd = ["npm", "install", *(["--save-dev"] if dev else []), *packages]
    with create_progress() as progress:
        progress.add_task(f"Installing {', '.join(packages)}...", total=None)
        returncode, _, stderr = await run_command(
            cmd, cwd=project_path, timeout=INSTALL_TIMEOUT
        )
    if returncode != 0:
        raise AugmentationError(
            f"npm install failed for {', '.join(packages)}: {stderr or returncode}"
        )


async def record_dependencies(
    package_json: Path, dependencies: list[str], dev_dependencies: list[str]
) -> None:
    """Add packages to ``package.json`` without installing them.

    Existing version ranges are left untouched.
    """
    data = load_json(package_json)
    for section, names in (
        ("dependencies", dependencies),
        ("devDependencies", dev_dependencies),
    ):
        if not names:
            continue
        table = data.setdefault(section, {})
        for name in names:
            table.setdefault(name, "latest")
    await save_json(data, package_json)


async def merge_scripts(package_json: Path, scripts: dict[str, str]) -> None:
    data = load_json(package_json)
    data.setdefault("scripts", {}).update(scripts)
    await save_json(data, package_json)


async def append_env_block(project_path: Path, marker: str, block: str) -> list[Path]:
    """Append *block* to ``.env.example`` and ``.env``.

    A file that already assigns *marker* is left alone; commented-out
    hints such as ``# DATABASE_URL=`` do not count.  ``.env`` is
    created when missing.
    """
    written: list[Path] = []
    for name in (".env.example", ".env"):
        path = project_path / name
        content = await read_text(path) if path.is_file() else ""
        if marker and has_env_variable(content, marker):
            continue
        if content and not content.endswith("\n"):
            content += "\n"
        written.append(await write_text(path, content + block))
    return written


def has_env_variable(content: str, name: str) -> bool:
    """Whether *content* assigns *name* on an uncommented line."""
    pattern = rf"^\s*(?:export\s+)?{re.escape(name)}\s*="
    return re.search(pattern, content, re.MULTILINE) is not None
