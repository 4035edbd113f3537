"""Dispatch ``category:type`` augmentation tokens to their setup routines.

Tokens are processed in order.  A malformed token or unknown category is
skipped with a warning; a routine that raises is recorded as failed and
the remaining tokens still run.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from functools import partial
from pathlib import Path

from pydantic import BaseModel, Field

from ..utils import print_error, print_info, print_warning
from .auth import setup_auth
from .database import setup_database
from .monitoring import setup_monitoring
from .utilities import setup_utility


Handler = Callable[[Path, str, str], Awaitable[object]]


@dataclass(frozen=True)
class AugmentationToken:
    category: str
    type: str

    def __str__(self) -> str:
        return f"{self.category}:{self.type}"


def parse_token(token: str) -> AugmentationToken | None:
    """Split *token* on its first colon.

    Returns ``None`` when there is no colon.  Either side may be empty.
    """
    category, sep, kind = token.partition(":")
    if not sep:
        return None
    return AugmentationToken(category.strip(), kind.strip())


class AugmentationReport(BaseModel):
    """Outcome of one processing run, keyed by the raw token strings."""

    succeeded: list[str] = Field(default_factory=list)
    failed: dict[str, str] = Field(default_factory=dict)
    skipped: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class AugmentationProcessor:
    """Runs augmentation tokens against a handler table.

    Args:
        handlers: Category name mapped to an async
            ``handler(project_path, framework, type)``.
    """

    def __init__(self, handlers: dict[str, Handler]) -> None:
        self.handlers = handlers

    async def process(
        self, project_path: str | Path, framework: str, tokens: list[str]
    ) -> AugmentationReport:
        report = AugmentationReport()
        root = Path(project_path)

        # Repeated tokens run once.
        for raw in dict.fromkeys(tokens):
            token = parse_token(raw)
            if token is None:
                print_warning(f"Invalid augmentation format: {raw} (expected category:type)")
                report.skipped.append(raw)
                continue

            handler = self.handlers.get(token.category)
            if handler is None:
                print_warning(f"Unknown augmentation category: {token.category}")
                report.skipped.append(raw)
                continue

            print_info(f"Applying augmentation {token}")
            try:
                await handler(root, framework, token.type)
            except Exception as exc:
                print_error(f"Failed to apply augmentation {token}: {exc}")
                report.failed[raw] = str(exc)
                continue
            report.succeeded.append(raw)

        return report


def build_default_handlers(install: bool = True) -> dict[str, Handler]:
    """Return the built-in category table.

    With ``install=False`` routines record dependencies in ``package.json``
    instead of running ``npm install``.
    """
    return {
        "database": partial(setup_database, install=install),
        "auth": partial(setup_auth, install=install),
        "monitoring": partial(setup_monitoring, install=install),
        "utility": partial(setup_utility, install=install),
    }
