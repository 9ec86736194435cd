# -*- coding: utf-8 -*-
"""
Tinct: Perceptual theme colours for the terminal
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Report and theme code emitter.

Converts every entry of the theme table once, in declaration order, and
renders two sections from that single conversion list:

  1. A readable report (name, source OKLCH, resulting Rgb).
  2. Rust snippets for ``theme.rs``, one ``pub fn <name>() -> Rgb`` each.

Run with ``tinct`` or ``python -m tinct_emitter``. No arguments, flags or
environment variables are consulted.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from typing import List, Mapping, Optional, Sequence, TextIO

from __about__ import __version__
from tinct_palette import THEME_COLORS, Oklch, Rgb, to_rgb

logger = logging.getLogger(__name__)

REPORT_HEADER = "Converting OKLCH to RGB for CLI theme:"
CODE_HEADER = "Rust code for theme.rs:"


@dataclass(slots=True, frozen=True)
class ConvertedColor:
    """One theme entry together with its quantized result."""
    name:  str
    oklch: Oklch
    rgb:   Rgb


def convert_table(table: Mapping[str, Oklch] = THEME_COLORS) -> List[ConvertedColor]:
    """Converts each table entry, preserving the table's iteration order."""
    conversions = []
    for name, oklch in table.items():
        rgb = to_rgb(oklch)
        logger.debug("[emitter] %s -> %s", name, rgb)
        conversions.append(ConvertedColor(name, oklch, rgb))
    return conversions


def format_report(conversions: Sequence[ConvertedColor]) -> str:
    """Readable section: header, then one block per colour."""
    lines = [REPORT_HEADER, ""]
    for c in conversions:
        lines.append(f"{c.name}:")
        lines.append(f"  OKLCH: {c.oklch.css()}")
        lines.append(f"  RGB:   {c.rgb}")
        lines.append("")
    return "\n".join(lines) + "\n"


def format_theme_code(conversions: Sequence[ConvertedColor]) -> str:
    """Source section: header, then one constructor function per colour."""
    lines = [CODE_HEADER, ""]
    for c in conversions:
        lines.append(f"pub fn {c.name}() -> Rgb {{")
        lines.append(f"    {c.rgb}")
        lines.append("}")
        lines.append("")
    return "\n".join(lines) + "\n"


def render(table: Mapping[str, Oklch] = THEME_COLORS) -> str:
    """Full stdout text; the two sections are separated by one blank line."""
    conversions = convert_table(table)
    return format_report(conversions) + "\n" + format_theme_code(conversions)


def emit(stream: Optional[TextIO] = None) -> None:
    """Writes the rendered theme table to *stream* (default: stdout)."""
    out = sys.stdout if stream is None else stream
    out.write(render())


def main() -> None:
    logging.basicConfig(level=logging.WARNING)
    logger.debug("tinct %s", __version__)
    emit()


if __name__ == "__main__":
    main()
