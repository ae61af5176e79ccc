"""
Metacommand normalization: deprecated directives out, modern setup in.
"""

import re
from typing import List

from ..source import CODE, COMMENT, is_blank_or_comment, is_comment, segments
from .base import TOKEN_RE, PortingPass, strip_code, uses_graphics

DEFAULT_TITLE = "Ported QB64PE Program"
RESIZE_DIRECTIVE = "$Resize:Smooth"

_DIRECTIVE_RE = re.compile(r"^\$([A-Za-z]+)")
_RESIZE_RE = re.compile(r"^\s*\$RESIZE\b", re.IGNORECASE)
_TITLE_RE = re.compile(r"(?<![\w$.])_TITLE\b(?![%&!#$~])", re.IGNORECASE)
_COMMENT_METACOMMAND_RE = re.compile(r"^\s*(?:'|REM\s)\s*\$", re.IGNORECASE)
_COMMENT_LEADER_RE = re.compile(r"^\s*(?:'|REM\b)\s*", re.IGNORECASE)


def _first_comment_text(lines: List[str]) -> str:
    for line in lines:
        for kind, _, text in segments(line):
            if kind != COMMENT or _COMMENT_METACOMMAND_RE.match(text):
                continue
            body = _COMMENT_LEADER_RE.sub("", text).replace('"', "").strip(" '")
            if body:
                return body
    return ""


class MetacommandPass(PortingPass):
    """Removes deprecated directives and adds QB64-PE window setup."""

    name = "metacommands"

    def transform(self, lines, log, options):
        lines = self._remove_deprecated(lines, log)
        title = _first_comment_text(lines) or DEFAULT_TITLE
        if not options.preserve_comments:
            lines = self._drop_comments(lines, log)
        if options.add_modern_features and uses_graphics(lines, self.tables):
            lines = self._add_window_setup(lines, log, title)
        return lines

    def _remove_deprecated(self, lines: List[str], log) -> List[str]:
        deprecated = {d.directive: d for d in self.tables.deprecated_metacommands}
        kept = []
        restore_prefixes = False
        for number, line in enumerate(lines, 1):
            m = _DIRECTIVE_RE.match(strip_code(line))
            directive = "$" + m.group(1).upper() if m else None
            if directive in deprecated:
                entry = deprecated[directive]
                restore_prefixes = restore_prefixes or entry.restores_prefixes
                self.record(log, f"Removed deprecated {directive} metacommand (line {number}): {entry.reason}")
                continue
            kept.append(line)
        if restore_prefixes:
            kept = self._restore_prefixes(kept, log)
        return kept

    def _restore_prefixes(self, lines: List[str], log) -> List[str]:
        """Rewrite bare QB64 keywords ($NOPREFIX style) to their underscore form."""
        prefixless = self.tables.prefixless
        count = 0

        def repl(m):
            nonlocal count
            word = m.group(0)
            target = prefixless.get(word.upper())
            if target is None:
                return word
            count += 1
            return target

        out = []
        for line in lines:
            parts = []
            for kind, _, text in segments(line):
                if kind == CODE:
                    text = TOKEN_RE.sub(repl, text)
                parts.append(text)
            out.append("".join(parts))
        if count:
            self.record(log, f"Restored the underscore prefix on {count} QB64 keyword(s)")
        return out

    def _drop_comments(self, lines: List[str], log) -> List[str]:
        kept = [
            line for line in lines
            if not is_comment(line) or _COMMENT_METACOMMAND_RE.match(line)
        ]
        removed = len(lines) - len(kept)
        if removed:
            self.record(log, f"Removed {removed} comment line(s)")
        return kept

    def _add_window_setup(self, lines: List[str], log, title: str) -> List[str]:
        has_resize = any(_RESIZE_RE.match(strip_code(line)) for line in lines)
        has_title = any(_TITLE_RE.search(strip_code(line)) for line in lines)
        setup = []
        if not has_resize:
            setup.append(RESIZE_DIRECTIVE)
            self.record(log, f"Added {RESIZE_DIRECTIVE} for smooth window resizing")
        if not has_title:
            setup.append(f'_Title "{title}"')
            self.record(log, f'Added window title: "{title}"')
        if not setup:
            return lines

        insert_at = len(lines)
        for index, line in enumerate(lines):
            if not is_blank_or_comment(line):
                insert_at = index
                break
        if insert_at < len(lines) and lines[insert_at].strip():
            setup.append("")
        return lines[:insert_at] + setup + lines[insert_at:]
