"""Tests for tinct_emitter: report/code rendering and the console entry point."""

import io
import re
from types import MappingProxyType

from __about__ import __version__, metadata_summary
from tinct_emitter import (
    CODE_HEADER,
    REPORT_HEADER,
    ConvertedColor,
    convert_table,
    emit,
    format_report,
    format_theme_code,
    main,
    render,
)
from tinct_palette import THEME_COLORS, Oklch, Rgb

EXPECTED_OUTPUT = """\
Converting OKLCH to RGB for CLI theme:

primary:
  OKLCH: oklch(0.8348 0.1302 160.908)
  RGB:   Rgb(114, 227, 173)

destructive:
  OKLCH: oklch(0.5523 0.1927 32.7272)
  RGB:   Rgb(202, 50, 20)

info:
  OKLCH: oklch(0.6231 0.188 259.8145)
  RGB:   Rgb(59, 130, 246)

warning:
  OKLCH: oklch(0.7686 0.1647 70.0804)
  RGB:   Rgb(245, 158, 11)


Rust code for theme.rs:

pub fn primary() -> Rgb {
    Rgb(114, 227, 173)
}

pub fn destructive() -> Rgb {
    Rgb(202, 50, 20)
}

pub fn info() -> Rgb {
    Rgb(59, 130, 246)
}

pub fn warning() -> Rgb {
    Rgb(245, 158, 11)
}

"""


class TestConvertTable:
    def test_follows_table_order(self):
        names = [c.name for c in convert_table()]
        assert names == list(THEME_COLORS)

    def test_keeps_source_oklch(self):
        for c in convert_table():
            assert c.oklch is THEME_COLORS[c.name]

    def test_custom_table_order(self):
        table = MappingProxyType({
            "zebra": Oklch(0.0, 0.0),
            "alpha": Oklch(1.0, 0.0),
        })
        conversions = convert_table(table)
        assert [c.name for c in conversions] == ["zebra", "alpha"]
        assert conversions[0].rgb == Rgb(0, 0, 0)
        assert conversions[1].rgb == Rgb(255, 255, 255)


class TestFormatting:
    def test_report_block(self):
        text = format_report([ConvertedColor("primary", Oklch(0.8348, 0.1302, 160.908), Rgb(114, 227, 173))])
        assert text == (
            f"{REPORT_HEADER}\n\n"
            "primary:\n"
            "  OKLCH: oklch(0.8348 0.1302 160.908)\n"
            "  RGB:   Rgb(114, 227, 173)\n\n"
        )

    def test_theme_code_block(self):
        text = format_theme_code([ConvertedColor("info", Oklch(0.6231, 0.188, 259.8145), Rgb(59, 130, 246))])
        assert text == (
            f"{CODE_HEADER}\n\n"
            "pub fn info() -> Rgb {\n"
            "    Rgb(59, 130, 246)\n"
            "}\n\n"
        )

    def test_achromatic_renders_none(self):
        text = format_report([ConvertedColor("white", Oklch(1.0, 0.0), Rgb(255, 255, 255))])
        assert "  OKLCH: oklch(1 0 none)\n" in text

    def test_empty_table(self):
        assert render(MappingProxyType({})) == f"{REPORT_HEADER}\n\n\n{CODE_HEADER}\n\n"


class TestRender:
    def test_golden_output(self):
        assert render() == EXPECTED_OUTPUT

    def test_sections_share_order(self):
        text = render()
        report, code = text.split(CODE_HEADER)
        report_names = re.findall(r"^(\w+):$", report, flags=re.MULTILINE)
        code_names = re.findall(r"^pub fn (\w+)\(\)", code, flags=re.MULTILINE)
        assert report_names == code_names == list(THEME_COLORS)

    def test_each_name_once_per_section(self):
        report, code = render().split(CODE_HEADER)
        for name in THEME_COLORS:
            assert report.count(f"\n{name}:\n") == 1
            assert code.count(f"pub fn {name}()") == 1

    def test_rgb_values_match_between_sections(self):
        report, code = render().split(CODE_HEADER)
        assert re.findall(r"RGB:\s+(Rgb\(.*\))", report) == re.findall(r"^    (Rgb\(.*\))$", code, flags=re.MULTILINE)


class TestEntryPoint:
    def test_emit_to_stream(self):
        buf = io.StringIO()
        emit(buf)
        assert buf.getvalue() == EXPECTED_OUTPUT

    def test_main_writes_stdout(self, capsys):
        main()
        captured = capsys.readouterr()
        assert captured.out == EXPECTED_OUTPUT

    def test_main_is_repeatable(self, capsys):
        main()
        first = capsys.readouterr().out
        main()
        assert capsys.readouterr().out == first


class TestMetadata:
    def test_summary(self):
        meta = metadata_summary()
        assert meta["title"] == "Tinct"
        assert meta["version"] == __version__
        assert set(meta) == {"title", "version", "license", "description", "copyright"}
