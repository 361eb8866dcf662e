"""End-to-end tests for the transformer and the command line entry point."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from image_rewrite import ImageTransformer, StaticValueError, UnknownTypeError, transform_source
from image_rewrite.common.enum_types import ComponentKind
from image_rewrite.run import main
from image_rewrite.transform.image_config import GlobalConfig, ImageConfig

HEADER = "import React from 'react';\nimport Img, { Svg } from 'react-optimized-image';\n"


class TestTransformer:
    """Tests for ImageTransformer.transform."""

    def test_rewrites_img_and_svg(self) -> None:
        source = HEADER + (
            "export default () => (\n"
            "  <div>\n"
            "    <Img src={require('./a.png')} sizes={[400,800]} />\n"
            "    <Svg src={require('./a.svg')} />\n"
            "  </div>\n"
            ");\n"
        )

        result = ImageTransformer().transform(source)

        assert result.code == HEADER + (
            "export default () => (\n"
            "  <div>\n"
            "    <Img src={require('./a.png')} sizes={[400,800]} rawSrc={{fallback: "
            "{400: {1: require('./a.png?url&width=400')}, 800: {1: require('./a.png?url&width=800')}}}} />\n"
            "    <Svg rawSrc={require('./a.svg?include')} />\n"
            "  </div>\n"
            ");\n"
        )
        assert [(c.name, c.kind, c.line) for c in result.components] == [
            ("Img", ComponentKind.IMG, 5),
            ("Svg", ComponentKind.SVG, 6),
        ]

    def test_transform_is_idempotent(self) -> None:
        source = HEADER + "<Svg src={require('./a.svg')} />;\n<Img src={require('./a.png')} webp />;\n"

        once = transform_source(source)
        assert transform_source(once) == once

    def test_unrelated_components_are_untouched(self) -> None:
        source = (
            "import { Image } from 'other-library';\n"
            "<Image src={require('./a.png')} />;\n"
            "<img src={require('./a.png')} />;\n"
        )
        assert transform_source(source) == source

    def test_non_image_sources_are_skipped(self) -> None:
        source = HEADER + "<Img src={require('./data.json')} webp={flag} />;\n"
        assert transform_source(source) == source

    def test_dynamic_template_without_extension(self) -> None:
        source = HEADER + "const imageName = 'image.png';\n<Img src={require(`./${imageName}`)} webp />;\n"

        code = transform_source(source)

        assert "fallback: {original: {1: require(`./${imageName}?url`)}}" in code
        assert "webp: {original: {1: require(`./${imageName}?webp`)}}" in code

    def test_styled_component_in_separate_file(self, tmp_path: Path) -> None:
        (tmp_path / "styles.js").write_text(
            "import styled from 'styled-components';\n"
            "import { Svg } from 'react-optimized-image';\n"
            "export const StyledSvg = styled(Svg)`color: red;`;\n"
        )
        page = tmp_path / "page.js"
        page.write_text(
            "import { StyledSvg } from './styles';\n"
            "import Icon from './icon.svg';\n"
            "export default () => <StyledSvg src={Icon} />;\n"
        )

        result = ImageTransformer().transform_file(page)

        assert "<StyledSvg rawSrc={require('./icon.svg?include')} />" in result.code
        assert result.components[0].kind == ComponentKind.SVG

    @pytest.mark.parametrize("styling", ["styled-components/native", "@emotion/styled/base"])
    def test_wrapper_from_styling_subpath(self, styling: str) -> None:
        source = (
            f"import styled from '{styling}';\n"
            "import Img from 'react-optimized-image';\n"
            "const A = styled(Img)({});\n"
            "<A src={require('./a.png')} />;\n"
        )

        result = ImageTransformer().transform(source)

        assert "<A src={require('./a.png')} rawSrc={{fallback: {original: {1: require('./a.png')}}}} />;" in result.code
        assert result.components[0].kind == ComponentKind.IMG

    def test_static_value_error_is_annotated(self) -> None:
        source = HEADER + "<Img src={require('./a.png')} sizes={[400, size]} />;\n"

        with pytest.raises(StaticValueError) as info:
            ImageTransformer().transform(source, filename="page.js")

        assert info.value.filename == "page.js"
        assert info.value.line == 3
        assert "element 1" in str(info.value)

    def test_unknown_type(self) -> None:
        source = HEADER + "<Img src={require('./a.png')} type=\"banner\" />;\n"
        config = GlobalConfig(types={"hero": ImageConfig(sizes=[100])})

        with pytest.raises(UnknownTypeError):
            ImageTransformer(global_config=config).transform(source)

    def test_syntax_errors_are_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        source = HEADER + "const broken = ;\n<Svg src={require('./a.svg')} />;\n"

        with caplog.at_level(logging.WARNING):
            ImageTransformer().transform(source, filename="broken.js")

        assert "Syntax errors found in" in caplog.text


class TestCommandLine:
    """Tests for the image-rewrite entry point."""

    def test_prints_result(self, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        page = tmp_path / "page.js"
        page.write_text(HEADER + "<Svg src={require('./a.svg')} />;\n")

        assert main([str(page), "--root", str(tmp_path)]) == 0
        assert "<Svg rawSrc={require('./a.svg?include')} />;" in capsys.readouterr().out

    def test_writes_output_file(self, tmp_path: Path) -> None:
        page = tmp_path / "page.js"
        page.write_text(HEADER + "<Img src={require('./a.png')} />;\n")
        output = tmp_path / "out" / "page.js"

        assert main([str(page), "-o", str(output), "--root", str(tmp_path)]) == 0
        assert "rawSrc={{fallback: {original: {1: require('./a.png')}}}}" in output.read_text()

    def test_uses_global_config_from_root(self, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        (tmp_path / "images.config.json").write_text('{"default": {"webp": true}}')
        page = tmp_path / "page.js"
        page.write_text(HEADER + "<Img src={require('./a.png')} />;\n")

        assert main([str(page), "--root", str(tmp_path)]) == 0
        assert "<Img src={require('./a.png')} webp rawSrc=" in capsys.readouterr().out

    def test_reports_errors(self, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        page = tmp_path / "page.js"
        page.write_text(HEADER + "<Img src={require('./a.png')} webp={flag} />;\n")

        assert main([str(page), "--root", str(tmp_path)]) == 1
        assert f"{page}:3:" in capsys.readouterr().err
