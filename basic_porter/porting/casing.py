"""
Keyword casing conversion.
"""

import re
from typing import Tuple

from ..source import CODE, segments
from .base import TOKEN_RE, PortingPass

# DATA items are literal text; only the DATA keyword itself is cased.
_DATA_RE = re.compile(r"(?:^\s*(?:\d+\s+)?|:\s*)DATA\b", re.IGNORECASE)


class KeywordCasingPass(PortingPass):
    """Rewrites every keyword token to its canonical mixed-case spelling."""

    name = "keyword-casing"

    def transform(self, lines, log, options):
        out = []
        total = 0
        for line in lines:
            line, count = self.convert_line(line)
            out.append(line)
            total += count
        if total:
            self.record(log, f"Converted {total} keyword(s) to canonical mixed case")
        return out

    def convert_line(self, line: str) -> Tuple[str, int]:
        """The line with keywords cased, and how many tokens actually changed."""
        count = 0

        def replace(m):
            nonlocal count
            token = m.group(0)
            canonical = self._canonical(m.group(1), m.group(2))
            if canonical is None:
                return token
            if canonical != token:
                count += 1
            return canonical

        parts = []
        data_started = False
        for kind, _, text in segments(line):
            if kind != CODE or data_started:
                parts.append(text)
                continue
            m = _DATA_RE.search(text)
            if m:
                parts.append(TOKEN_RE.sub(replace, text[:m.end()]) + text[m.end():])
                data_started = True
            else:
                parts.append(TOKEN_RE.sub(replace, text))
        return "".join(parts), count

    def _canonical(self, word: str, sigil: str):
        if not sigil:
            return self.tables.canonical_case(word)
        canonical = self.tables.canonical_case(word + sigil)
        if canonical is not None:
            return canonical
        # GW-BASIC file statements: PRINT#1, INPUT#2, ...
        if sigil == "#" and word.upper() in self.tables.categories.get("statements", ()):
            return self.tables.canonical_case(word) + sigil
        return None
