"""Pytest configuration and fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

import pytest

from image_rewrite.plugin import iter_tags
from image_rewrite.scope_graph.repo_resolution import ParsedModule
from image_rewrite.transform.jsx import JsxTag, SourceEdits


@pytest.fixture
def parse_module() -> Callable[..., ParsedModule]:
    """Parse JavaScript source into a ParsedModule."""

    def _parse(source: str, path: Optional[Path] = None) -> ParsedModule:
        return ParsedModule.from_source(source.encode("utf-8"), path)

    return _parse


@pytest.fixture
def make_tag(parse_module) -> Callable[..., JsxTag]:
    """Build a JsxTag for the first JSX opening tag named ``name`` in the source."""

    def _make(source: str, name: Optional[str] = None, filename: str = "test.js") -> JsxTag:
        module = parse_module(source)
        edits = SourceEdits(module.src_bytes)
        for node in iter_tags(module.root_node):
            tag = JsxTag(module, node, edits, filename)
            if name is None or tag.name == name:
                return tag
        raise AssertionError(f"No tag {name!r} in source")

    return _make


@pytest.fixture
def write_files(tmp_path: Path) -> Callable[[dict], Path]:
    """Write a mapping of relative path -> content below tmp_path."""

    def _write(files: dict) -> Path:
        for relative, content in files.items():
            path = tmp_path / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return tmp_path

    return _write
