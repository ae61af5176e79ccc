"""
Graphics setup injection.
"""

import re

from ..source import indentation, mask_line, split_statements
from .base import PortingPass, is_graphics_screen_statement, uses_graphics

_FULLSCREEN_RE = re.compile(r"(?<![\w$.])_FULLSCREEN\b", re.IGNORECASE)


class GraphicsPass(PortingPass):
    """Adds a full-screen setup line after the first graphics SCREEN statement."""

    name = "graphics"

    def transform(self, lines, log, options):
        if not options.convert_graphics or not uses_graphics(lines, self.tables):
            return lines
        if any(_FULLSCREEN_RE.search(mask_line(line)) for line in lines):
            return lines

        setup = " ".join(
            self.tables.canonical_case(word) or word
            for word in ("_FULLSCREEN", "_SQUAREPIXELS")
        ) + " , " + (self.tables.canonical_case("_SMOOTH") or "_Smooth")

        for index, line in enumerate(lines):
            masked = mask_line(line)
            for start, stmt in split_statements(line):
                if is_graphics_screen_statement(masked[start:start + len(stmt)]):
                    self.record(
                        log,
                        f"Added {setup} after SCREEN (line {index + 1}) for enhanced graphics",
                    )
                    return lines[:index + 1] + [indentation(line) + setup] + lines[index + 1:]
        return lines
