"""Framework -> post-processor lookup with fallback to the base class."""

from __future__ import annotations

from pathlib import Path

from ..config import ProjectSpec
from ..templates import TemplateRenderer
from ..utils import print_info, print_warning
from .base import BasePostProcessor
from .nextjs import NextPostProcessor
from .nuxtjs import NuxtPostProcessor
from .remix import RemixPostProcessor


POST_PROCESSORS: dict[str, type[BasePostProcessor]] = {
    "nextjs": NextPostProcessor,
    "nuxtjs": NuxtPostProcessor,
    "remix": RemixPostProcessor,
}


def load_post_processor(
    framework: str,
    project_path: Path,
    spec: ProjectSpec,
    *,
    registry: dict[str, type[BasePostProcessor]] | None = None,
    renderer: TemplateRenderer | None = None,
) -> BasePostProcessor:
    """Instantiate the post-processor registered for *framework*.

    Unknown frameworks get :class:`BasePostProcessor` and a warning.
    """
    table = POST_PROCESSORS if registry is None else registry
    processor_cls = table.get(framework)
    if processor_cls is None:
        print_warning(f"No specific post-processor found for {framework}, using base processor")
        processor_cls = BasePostProcessor
    else:
        print_info(f"Loaded {framework} post-processor")
    return processor_cls(project_path, spec, renderer)
