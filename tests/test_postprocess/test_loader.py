"""Tests for post-processor lookup."""

from __future__ import annotations

from pathlib import Path

import pytest

from create_fde_app.postprocess import (
    POST_PROCESSORS,
    BasePostProcessor,
    NextPostProcessor,
    NuxtPostProcessor,
    RemixPostProcessor,
    load_post_processor,
)


pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "framework, expected",
    [
        ("nextjs", NextPostProcessor),
        ("nuxtjs", NuxtPostProcessor),
        ("remix", RemixPostProcessor),
    ],
)
def test_registered_frameworks(make_spec, tmp_path: Path, framework, expected):
    processor = load_post_processor(framework, tmp_path, make_spec(framework=framework))
    assert type(processor) is expected
    assert processor.project_path == tmp_path


def test_unknown_framework_falls_back_to_base(make_spec, tmp_path: Path):
    processor = load_post_processor("sveltekit", tmp_path, make_spec())
    assert type(processor) is BasePostProcessor


def test_custom_registry(make_spec, tmp_path: Path):
    class CustomPostProcessor(BasePostProcessor):
        pass

    processor = load_post_processor(
        "nextjs", tmp_path, make_spec(), registry={"nextjs": CustomPostProcessor}
    )
    assert type(processor) is CustomPostProcessor


def test_empty_registry_uses_base(make_spec, tmp_path: Path):
    processor = load_post_processor("nextjs", tmp_path, make_spec(), registry={})
    assert type(processor) is BasePostProcessor


def test_registry_covers_supported_frameworks():
    assert list(POST_PROCESSORS) == ["nextjs", "nuxtjs", "remix"]
