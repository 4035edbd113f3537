"""Monorepo path rewriting for rendered Dockerfiles and workflows.

When the generated app is one of several in a monorepo, build and CI
artifacts must be scoped to the app's subdirectory.  The rewrite is a
second, optional pass applied to already-rendered text.  An empty app
path (or one that names the repository root) returns the text unchanged.

The workflow rewrite is line based rather than a YAML round-trip so that
comments, ordering and GitHub expressions survive untouched.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from enum import Enum


class ArtifactKind(str, Enum):
    DOCKERFILE = "dockerfile"
    WORKFLOW = "workflow"


DOCKERFILE_HEADER = (
    "# Monorepo Dockerfile - Build context should be repository root\n"
    "# App path: {app_path}\n"
    "\n"
)


def normalize_app_path(app_path: str | None) -> str:
    """Strip ``./`` prefixes and trailing slashes; ``""`` means repository root."""
    path = (app_path or "").strip()
    while path.startswith("./"):
        path = path[2:]
    path = path.strip("/")
    return "" if path == "." else path


def rewrite_for_monorepo(
    text: str,
    app_path: str | None,
    kind: ArtifactKind | str,
    *,
    project_name: str = "",
) -> str:
    """Scope *text* to *app_path*.

    Args:
        text: Rendered Dockerfile or workflow text.
        app_path: App directory relative to the repository root, e.g.
            ``"apps/web"``.
        kind: Which rewrite rules apply.
        project_name: Used to prefix the workflow name and to build the
            workflow-file trigger path.  Ignored for Dockerfiles.
    """
    path = normalize_app_path(app_path)
    if not path:
        return text
    kind = ArtifactKind(kind)
    if kind is ArtifactKind.DOCKERFILE:
        return _rewrite_dockerfile(text, path)
    return _rewrite_workflow(text, path, project_name)


# ---------------------------------------------------------------------------
# Dockerfile
# ---------------------------------------------------------------------------

_COPY_RE = re.compile(r"^(?P<indent>\s*)(?P<instr>COPY|ADD)\s+(?P<args>.+?)\s*$", re.IGNORECASE)


def _rewrite_dockerfile(text: str, app_path: str) -> str:
    lines = text.split("\n")
    rewritten: list[str] = []
    start = 0
    while start < len(lines):
        end = start
        # A trailing backslash continues the instruction on the next line.
        while lines[end].rstrip().endswith("\\") and end + 1 < len(lines):
            end += 1
        rewritten.extend(_rewrite_copy(lines[start:end + 1], app_path))
        start = end + 1

    body = "\n".join(rewritten)
    header = DOCKERFILE_HEADER.format(app_path=app_path)
    if body.startswith(header.splitlines()[0]):
        return body
    return header + body


def _rewrite_copy(physical: list[str], app_path: str) -> list[str]:
    """Prefix the host-side sources of one COPY/ADD instruction.

    *physical* holds the instruction's lines, continuations included.
    Shell form keeps its line layout; exec (JSON array) form is written
    back on a single line.
    """
    match = _COPY_RE.match(physical[0])
    if not match:
        return physical

    rows: list[tuple[str, list[str], bool]] = []
    for number, line in enumerate(physical):
        body = (match["args"] if number == 0 else line).rstrip()
        continued = body.endswith("\\")
        if continued:
            body = body[:-1]
        lead = "" if number == 0 else line[: len(line) - len(line.lstrip())]
        rows.append((lead, body.split(), continued))

    tokens = [token for _, row, _ in rows for token in row]
    flags = [t for t in tokens if t.startswith("--")]
    operands = [t for t in tokens if not t.startswith("--")]
    # Copies from another build stage already point into that stage.
    if any(flag.startswith("--from") for flag in flags) or not operands:
        return physical

    prefix = f"{match['indent']}{match['instr']} "
    if operands[0].startswith("["):
        raw = " ".join(" ".join(row) for _, row, _ in rows)
        array = _rewrite_exec_form(raw[raw.index("["):], app_path)
        if array is None:
            return physical
        return [prefix + " ".join(flags + [array])]

    # Heredoc sources are inline content, not host paths.
    if len(operands) < 2 or any(op.startswith("<<") for op in operands):
        return physical

    destination = len(operands) - 1
    position = 0
    rebuilt: list[str] = []
    for number, (lead, row, continued) in enumerate(rows):
        parts: list[str] = []
        for token in row:
            if not token.startswith("--"):
                if position < destination:
                    token = _prefix_source(token, app_path)
                position += 1
            parts.append(token)
        text = " ".join(parts)
        if continued:
            text = f"{text} \\" if text else "\\"
        rebuilt.append((prefix if number == 0 else lead) + text)
    return rebuilt


def _rewrite_exec_form(array_text: str, app_path: str) -> str | None:
    """Rewrite ``["src", ..., "dest"]``; ``None`` when it is not a string array."""
    try:
        items = json.loads(array_text)
    except ValueError:
        return None
    if not isinstance(items, list) or len(items) < 2:
        return None
    if not all(isinstance(item, str) for item in items):
        return None
    sources = [_prefix_source(item, app_path) for item in items[:-1]]
    return json.dumps(sources + [items[-1]])


def _prefix_source(source: str, app_path: str) -> str:
    if "://" in source or source.startswith("$"):
        return source
    if source in (".", "./"):
        return f"{app_path}/"
    bare = source[2:] if source.startswith("./") else source
    if bare == app_path or bare.startswith(app_path + "/"):
        return source
    return f"{app_path}/{bare.lstrip('/')}"


# ---------------------------------------------------------------------------
# Workflow
# ---------------------------------------------------------------------------

_KEY_RE = re.compile(
    r"^(?P<indent>\s*)(?P<dash>-\s+)?(?P<key>[A-Za-z_][\w-]*|\"on\"|'on')\s*:(?:\s+(?P<value>.*)|\s*)$"
)
_BLOCK_SCALAR_RE = re.compile(r"^[|>][-+0-9]*\s*(#.*)?$")
_DOCKER_BUILD_RE = re.compile(r"\bdocker\s+(?:buildx\s+)?build\b")
_BARE_DOT_RE = re.compile(r"(?<=\s)\.(?=\s|$)")
_EVENT_RE = re.compile(r"^[a-z_]+$")
_PATH_FILTERED_EVENTS = ("push", "pull_request")


@dataclass
class _Key:
    """A ``key:`` line in a workflow file."""

    index: int
    column: int
    dash: bool
    key: str
    value: str


def _scan_keys(lines: list[str]) -> list[_Key | None]:
    """Return one entry per line: the key it declares, or ``None``.

    Lines inside block scalars (``run: |`` bodies) never count as keys.
    """
    entries: list[_Key | None] = []
    block_column: int | None = None
    for index, line in enumerate(lines):
        stripped = line.strip()
        indent = len(line) - len(line.lstrip())
        if block_column is not None:
            if not stripped or indent > block_column:
                entries.append(None)
                continue
            block_column = None
        if not stripped or stripped.startswith("#"):
            entries.append(None)
            continue
        match = _KEY_RE.match(line)
        if not match:
            entries.append(None)
            continue
        column = len(match["indent"]) + len(match["dash"] or "")
        value = (match["value"] or "").strip()
        entries.append(
            _Key(index, column, bool(match["dash"]), match["key"].strip("\"'"), value)
        )
        if _BLOCK_SCALAR_RE.match(value):
            block_column = column
    return entries


def _rewrite_workflow(text: str, app_path: str, project_name: str) -> str:
    lines = text.split("\n")
    entries = _scan_keys(lines)
    workflow_file = (
        f".github/workflows/{project_name}-deploy.yml" if project_name else ""
    )

    # index -> replacement lines for that index
    edits: dict[int, list[str]] = {}

    if project_name:
        _prefix_workflow_name(entries, project_name, edits)
    _add_trigger_paths(lines, entries, app_path, workflow_file, edits)
    _scope_run_steps(lines, entries, app_path, edits)
    # Run steps now execute in app_path, so a retargeted context resolves
    # to app_path/app_path unless the step overrides working-directory.
    # It also differs from the repository-root context the monorepo
    # Dockerfile header asks for. DESIGN.md records why both are kept.
    _retarget_docker_context(lines, app_path, edits)

    output: list[str] = []
    for index, line in enumerate(lines):
        output.extend(edits.get(index, [line]))
    return "\n".join(output)


def _prefix_workflow_name(
    entries: list[_Key | None],
    project_name: str,
    edits: dict[int, list[str]],
) -> None:
    for entry in entries:
        if entry and entry.column == 0 and not entry.dash and entry.key == "name":
            value = entry.value
            quote = value[:1] if value[:1] in ("'", '"') else ""
            inner = value[1:-1] if quote and value.endswith(quote) else value
            if inner.startswith(project_name):
                return
            renamed = f"{project_name} - {inner}" if inner else project_name
            if quote:
                renamed = f"{quote}{renamed}{quote}"
            edits[entry.index] = [f"name: {renamed}"]
            return


def _children(entries: list[_Key | None], parent: _Key) -> list[_Key]:
    """Return the direct children of *parent*."""
    children: list[_Key] = []
    child_column: int | None = None
    for entry in entries[parent.index + 1:]:
        if entry is None:
            continue
        if entry.column <= parent.column:
            break
        if child_column is None:
            child_column = entry.column
        if entry.column == child_column:
            children.append(entry)
    return children


def _block_end(lines: list[str], entries: list[_Key | None], parent: _Key) -> int:
    """Index of the last non-blank line belonging to *parent*'s block."""
    last = parent.index
    for index in range(parent.index + 1, len(lines)):
        stripped = lines[index].strip()
        if not stripped or stripped.startswith("#"):
            continue
        indent = len(lines[index]) - len(lines[index].lstrip())
        entry = entries[index]
        if entry is not None and entry.column <= parent.column:
            break
        if entry is None and indent <= parent.column:
            break
        last = index
    return last


def _paths_filter(pad: str, app_path: str, workflow_file: str) -> list[str]:
    filters = [f"{pad}paths:", f"{pad}  - '{app_path}/**'"]
    if workflow_file:
        filters.append(f"{pad}  - '{workflow_file}'")
    return filters


def _inline_events(value: str) -> list[str] | None:
    """Event names from ``on: push`` or ``on: [push, pull_request]``.

    ``None`` for any other inline value, e.g. a flow mapping.
    """
    if value.startswith("[") and value.endswith("]"):
        names = [name.strip().strip("\"'") for name in value[1:-1].split(",")]
        names = [name for name in names if name]
    else:
        names = [value.strip("\"'")]
    if not names or not all(_EVENT_RE.match(name) for name in names):
        return None
    return names


def _add_trigger_paths(
    lines: list[str],
    entries: list[_Key | None],
    app_path: str,
    workflow_file: str,
    edits: dict[int, list[str]],
) -> None:
    on_entry = next(
        (e for e in entries if e and e.column == 0 and not e.dash and e.key == "on"),
        None,
    )
    if on_entry is None:
        return

    inline = re.sub(r"(?:^|\s+)#.*$", "", on_entry.value).strip()
    if inline:
        events = _inline_events(inline)
        if events is None:
            return
        # Expand the inline form into block form so filters can be attached.
        key = lines[on_entry.index].split(":", 1)[0]
        expanded = [f"{key}:"]
        for event in events:
            expanded.append(f"  {event}:")
            if event in _PATH_FILTERED_EVENTS:
                expanded.extend(_paths_filter("    ", app_path, workflow_file))
        edits[on_entry.index] = expanded
        return

    triggers = _children(entries, on_entry)
    for trigger in triggers:
        if trigger.key not in _PATH_FILTERED_EVENTS or trigger.value:
            continue
        options = _children(entries, trigger)
        if any(opt.key in ("paths", "paths-ignore") for opt in options):
            continue
        column = options[0].column if options else trigger.column + 2
        filters = _paths_filter(" " * column, app_path, workflow_file)
        end = _block_end(lines, entries, trigger)
        edits[end] = edits.get(end, [lines[end]]) + filters


def _scope_run_steps(
    lines: list[str],
    entries: list[_Key | None],
    app_path: str,
    edits: dict[int, list[str]],
) -> None:
    for entry in entries:
        if entry is None or entry.key != "run" or not entry.value:
            continue
        if entry.value.startswith("#"):
            continue
        step = _step_keys(entries, entry)
        if step is None:
            continue
        if any(k.key == "working-directory" for k in step):
            continue

        line = lines[entry.index]
        pad = " " * entry.column
        if entry.dash:
            dash_pad = " " * (len(line) - len(line.lstrip()))
            edits[entry.index] = [
                f"{dash_pad}- working-directory: {app_path}",
                f"{pad}{line.lstrip()[1:].lstrip()}",
            ]
        else:
            edits[entry.index] = [f"{pad}working-directory: {app_path}", line]


def _step_keys(entries: list[_Key | None], run: _Key) -> list[_Key] | None:
    """Return the keys of the list item (step) that contains *run*.

    ``None`` when *run* is not inside a list item, e.g. ``defaults.run``.
    """
    start: int | None = run.index if run.dash else None
    if start is None:
        for entry in reversed(entries[: run.index]):
            if entry is None:
                continue
            if entry.column < run.column:
                return None
            if entry.column == run.column and entry.dash:
                start = entry.index
                break
        if start is None:
            return None

    keys: list[_Key] = []
    for entry in entries[start:]:
        if entry is None:
            continue
        if entry.index > start and (
            entry.column < run.column or (entry.column == run.column and entry.dash)
        ):
            break
        if entry.column == run.column:
            keys.append(entry)
    return keys


def _retarget_docker_context(
    lines: list[str],
    app_path: str,
    edits: dict[int, list[str]],
) -> None:
    continuing = False
    for index, line in enumerate(lines):
        in_command = continuing or bool(_DOCKER_BUILD_RE.search(line))
        continuing = in_command and line.rstrip().endswith("\\")
        if not in_command:
            continue
        current = edits.get(index)
        if current is None:
            edits[index] = [_BARE_DOT_RE.sub(app_path, line)]
        else:
            edits[index] = [_BARE_DOT_RE.sub(app_path, part) for part in current]
