"""Shared helpers for create-fde-app.

Async subprocess execution for the external tools the scaffolder drives
(``npx``, ``npm``, ``git``, ``terraform``), JSON and text file I/O, and the
Rich console every step prints through.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.rule import Rule
from rich.table import Table

console = Console()

# Return codes used by run_command when the process never produced one.
COMMAND_NOT_FOUND = 127
COMMAND_TIMED_OUT = -1

# ---------------------------------------------------------------------------
# External commands
# ---------------------------------------------------------------------------


async def run_command(
    cmd: list[str],
    cwd: str | Path | None = None,
    timeout: int = 120,
) -> tuple[int, str, str]:
    """Run *cmd* (an argument vector, no shell) and capture its output.

    Returns:
        ``(returncode, stdout, stderr)`` with both streams decoded and
        stripped.  A missing executable yields :data:`COMMAND_NOT_FOUND`
        and a timeout yields :data:`COMMAND_TIMED_OUT`; neither raises.
    """
    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=str(cwd) if cwd else None,
        )
    except FileNotFoundError:
        return COMMAND_NOT_FOUND, "", f"Command not found: {cmd[0]}"

    try:
        out, err = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return COMMAND_TIMED_OUT, "", f"{format_command(cmd)} timed out after {timeout}s"

    return (
        process.returncode or 0,
        out.decode("utf-8", errors="replace").strip(),
        err.decode("utf-8", errors="replace").strip(),
    )


def format_command(cmd: list[str]) -> str:
    return " ".join(cmd)


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------


def load_json(path: str | Path) -> dict[str, Any]:
    """Read a JSON document whose top level is an object (e.g. ``package.json``).

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not valid JSON or not an object.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{Path(path).name} does not contain a JSON object")
    return data


async def save_json(data: dict[str, Any], path: str | Path) -> None:
    """Write *data* with two-space indentation, as npm formats ``package.json``."""
    await write_text(path, json.dumps(data, indent=2, ensure_ascii=False) + "\n")


def _write_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


async def write_text(path: str | Path, content: str) -> Path:
    """Write *content* to *path* in a worker thread, creating parent dirs."""
    out = Path(path)
    await asyncio.to_thread(_write_file, out, content)
    return out


async def read_text(path: str | Path) -> str:
    return await asyncio.to_thread(Path(path).read_text, encoding="utf-8")


# ---------------------------------------------------------------------------
# Console output
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """``3.7`` -> ``"3.7s"``, ``65.2`` -> ``"1m 5s"``."""
    seconds = max(seconds, 0.0)
    minutes, rest = divmod(seconds, 60)
    if minutes:
        return f"{int(minutes)}m {int(rest)}s"
    return f"{rest:.1f}s"


def print_step_header(title: str) -> None:
    console.print()
    console.print(Rule(f"[bold bright_blue] {title} [/bold bright_blue]", style="bright_blue"))


def print_summary_table(rows: dict[str, str], title: str) -> None:
    table = Table(title=title, show_header=False)
    table.add_column(style="bold cyan", no_wrap=True)
    table.add_column()
    for label, value in rows.items():
        table.add_row(label, escape(str(value)))
    console.print(table)


def print_info(message: str) -> None:
    console.print(escape(message))


def print_success(message: str) -> None:
    console.print(f"[green]✓ {escape(message)}[/green]")


def print_error(message: str) -> None:
    console.print(f"[bold red]✗ {escape(message)}[/bold red]")


def print_warning(message: str) -> None:
    console.print(f"[yellow]⚠ {escape(message)}[/yellow]")


def create_progress() -> Progress:
    """Transient spinner shown while an external command runs."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )
