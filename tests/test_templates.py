"""Tests for the Jinja2 TemplateRenderer.

Covers:
- Rendering with context and trailing newline preservation
- StrictUndefined behaviour
- render_to_file creating parent directories
- Loading the packaged augmentation templates
"""

from __future__ import annotations

from pathlib import Path

import pytest
from jinja2 import UndefinedError

from create_fde_app.augment.base import _DEFAULT_TEMPLATE_DIR
from create_fde_app.templates import TemplateRenderer


pytestmark = pytest.mark.unit


@pytest.fixture
def renderer(tmp_path: Path) -> TemplateRenderer:
    templates = tmp_path / "templates"
    (templates / "sub").mkdir(parents=True)
    (templates / "hello.txt.j2").write_text("Hello {{ name }}!\n", encoding="utf-8")
    (templates / "sub" / "list.txt.j2").write_text(
        "{% for item in items %}\n- {{ item }}\n{% endfor %}\n", encoding="utf-8"
    )
    return TemplateRenderer(templates)


class TestRender:
    def test_render_keeps_trailing_newline(self, renderer: TemplateRenderer):
        assert renderer.render("hello.txt.j2", {"name": "fde"}) == "Hello fde!\n"

    def test_blocks_are_trimmed(self, renderer: TemplateRenderer):
        text = renderer.render("sub/list.txt.j2", {"items": ["a", "b"]})
        assert text == "- a\n- b\n"

    def test_undefined_variable_raises(self, renderer: TemplateRenderer):
        with pytest.raises(UndefinedError):
            renderer.render("hello.txt.j2", {})

    async def test_render_to_file(self, renderer: TemplateRenderer, tmp_path: Path):
        out = tmp_path / "out" / "nested" / "hello.txt"
        written = await renderer.render_to_file("hello.txt.j2", out, {"name": "x"})
        assert written == out
        assert out.read_text(encoding="utf-8") == "Hello x!\n"


def test_packaged_augmentation_templates_found():
    renderer = TemplateRenderer(_DEFAULT_TEMPLATE_DIR)
    names = renderer.env.list_templates(extensions=["j2"])
    assert "database/schema.prisma.j2" in names
    assert "auth/nextauth-options.ts.j2" in names
    assert "monitoring/datadog-config.ts.j2" in names
