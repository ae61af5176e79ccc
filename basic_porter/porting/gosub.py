"""
GOSUB/RETURN subroutines lifted into SUB procedures.

The work happens in two passes over the document. The first collects every
label definition, every jump that names a label, and the line range each
label's block covers. The second validates the GOSUB targets against that map
and only then rewrites text, so blocks that share a call target or sit next
to each other never corrupt one another.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from ..source import code_part, comment_part, indentation, mask_line, split_statements, sub_code
from .base import PortingPass, rebuild_line, strip_code

_LABEL_RE = re.compile(r"^([A-Za-z_]\w*):$")
_PROC_START_RE = re.compile(r"^(?:\d+\s+)?(?:STATIC\s+)?(?:SUB|FUNCTION)\s+[A-Za-z_]", re.IGNORECASE)
_PROC_END_RE = re.compile(r"^(?:\d+\s+)?END\s+(?:SUB|FUNCTION)\b", re.IGNORECASE)

_ON_GOSUB_RE = re.compile(r"\bON\b.*?\bGOSUB\s+(.+)$", re.IGNORECASE)
_ON_GOTO_RE = re.compile(r"\bON\b.*?\bGOTO\s+(.+)$", re.IGNORECASE)
_GOSUB_RE = re.compile(r"(?<![\w$.])GOSUB\s+([A-Za-z_]\w*|\d+)", re.IGNORECASE)
_GOSUB_TOKEN_RE = re.compile(r"(?<![\w$.])GOSUB\b(?![%&!#$])", re.IGNORECASE)
_JUMP_RE = re.compile(r"(?<![\w$.])(?:GOTO|RESUME)\s+([A-Za-z_]\w*)", re.IGNORECASE)
_THEN_ELSE_RE = re.compile(r"(?<![\w$.])(?:THEN|ELSE)\s+([A-Za-z_]\w*)\s*(?=$|ELSE\b)", re.IGNORECASE)
_CALL_SITE_RE = re.compile(r"(?<![\w$.])GOSUB\s+([A-Za-z_]\w*)(?![\w%&!#$])", re.IGNORECASE)

_LINE_NO_RE = re.compile(r"^\s*\d+\s+")
_BLOCK_IF_RE = re.compile(r"^IF\b.*\bTHEN\s*$", re.IGNORECASE)
_SINGLE_IF_RE = re.compile(r"^IF\b.*\b(?:THEN|GOTO)\b\s*\S", re.IGNORECASE)
_END_IF_RE = re.compile(r"^END\s*IF\b", re.IGNORECASE)
_OPENERS_RE = re.compile(r"^(?:SELECT\s+CASE|DO|WHILE|FOR)\b", re.IGNORECASE)
_CLOSERS_RE = re.compile(r"^(?:END\s+SELECT|LOOP|WEND)\b", re.IGNORECASE)
_NEXT_RE = re.compile(r"^NEXT\b(.*)$", re.IGNORECASE)
_RETURN_RE = re.compile(r"^RETURN\b\s*(\S*)", re.IGNORECASE)
_RETURN_TOKEN_RE = re.compile(r"(?<![\w$.])RETURN\b(?![%&!#$])", re.IGNORECASE)

END_OF_FILE = "eof"
END_RETURN = "return"


@dataclass
class _Block:
    name: str
    line: int
    end: int = -1
    end_kind: str = END_OF_FILE
    return_column: int = -1
    conditional_returns: List[int] = field(default_factory=list)
    error: Optional[str] = None


def _statement_texts(line: str) -> List[tuple]:
    """(start, masked statement text) with a leading line number removed."""
    masked = mask_line(line)
    out = []
    for start, stmt in split_statements(line):
        text = masked[start:start + len(stmt)]
        if not out:
            text = _LINE_NO_RE.sub("", text)
        out.append((start, text.strip()))
    return out


def _target_names(text: str) -> List[str]:
    return [t.strip() for t in text.split(",") if t.strip()]


def _split_return_line(line: str, return_column: int, indent: str) -> List[str]:
    """The lines replacing the block's final RETURN line.

    Statements before the RETURN keep their own line; anything after it
    belongs to the main module again and follows End Sub.
    """
    code = code_part(line)
    comment = comment_part(line)
    head = code[:return_column].rstrip().rstrip(":").rstrip()
    ret = _RETURN_TOKEN_RE.search(code, return_column)
    after = code[ret.end():].strip().lstrip(":").strip()

    out = []
    if head.strip():
        out.append(head)
    end_sub = f"{indent}End Sub"
    if after:
        out.append(end_sub)
        out.append(f"{indent}{after}" + (f" {comment}" if comment else ""))
    else:
        out.append(end_sub + (f" {comment}" if comment else ""))
    return out


class GosubPass(PortingPass):
    """Converts GOSUB subroutines to SUB procedures and their calls to Call."""

    name = "gosub"

    def transform(self, lines, log, options):
        labels = self._find_labels(lines)
        gosub_targets, on_gosub_targets, jump_targets, malformed = self._find_references(lines)

        for number in malformed:
            log.warn(f"Line {number}: GOSUB has no label or line number to call; left unchanged")

        for upper in sorted(on_gosub_targets - set(gosub_targets)):
            if upper in labels:
                index = labels[upper][0][0]
                log.warn(
                    f"ON ... GOSUB target {strip_code(lines[index])[:-1]} (line {index + 1}) "
                    "was left as a label; ON ... GOSUB has no procedure form"
                )

        if not gosub_targets:
            return lines

        lifted: Dict[str, _Block] = {}
        for upper, spelled in sorted(gosub_targets.items()):
            if upper.isdigit():
                log.warn(
                    f"GOSUB {spelled} targets a line number; renumber it to a named label "
                    "before it can become a SUB"
                )
                continue
            definitions = labels.get(upper)
            if not definitions:
                log.warn(f"GOSUB {spelled} has no matching label definition")
                continue
            if len(definitions) > 1:
                lines_text = ", ".join(str(i + 1) for i, _ in definitions)
                log.error(f"Label {spelled} is defined more than once (lines {lines_text})")
                continue
            index, in_procedure = definitions[0]
            label_name = strip_code(lines[index])[:-1]
            if in_procedure:
                log.warn(
                    f"Label {label_name} (line {index + 1}) is inside a SUB or FUNCTION; "
                    "its GOSUB block was not converted"
                )
                continue
            if upper in on_gosub_targets:
                log.warn(
                    f"Label {label_name} is an ON ... GOSUB target; its block was not converted"
                )
                continue
            if upper in jump_targets:
                log.error(
                    f"Label {label_name} is both a GOSUB target and a GOTO/THEN/ELSE jump "
                    "target; it was not converted"
                )
                continue
            block = self._measure_block(lines, index, label_name, labels)
            if block.error:
                log.error(block.error)
                continue
            if block.end_kind == END_OF_FILE:
                log.warn(
                    f"GOSUB block {label_name} (line {index + 1}) has no RETURN and runs to "
                    "the end of the main module"
                )
            lifted[upper] = block

        if not lifted:
            return lines

        out = self._rewrite_blocks(lines, lifted)
        out, calls = self._rewrite_calls(out, lifted)

        names = [b.name for b in sorted(lifted.values(), key=lambda b: b.line)]
        self.record(
            log,
            f"Converted {len(names)} GOSUB subroutine(s) to SUB procedures: {', '.join(names)}",
        )
        if calls:
            self.record(log, f"Rewrote {calls} GOSUB call(s) as Call statements")
        log.warn(
            f"Lifted SUB(s) {', '.join(names)} no longer share module-level variables; "
            "declare the ones they use with DIM SHARED"
        )
        return out

    def _find_labels(self, lines) -> Dict[str, list]:
        """upper label -> [(line index, inside a procedure)]"""
        labels: Dict[str, list] = {}
        in_procedure = False
        for index, line in enumerate(lines):
            code = strip_code(line)
            if _PROC_START_RE.match(code):
                in_procedure = True
                continue
            if _PROC_END_RE.match(code):
                in_procedure = False
                continue
            m = _LABEL_RE.match(code)
            if m and not self.tables.is_reserved_word(m.group(1)):
                labels.setdefault(m.group(1).upper(), []).append((index, in_procedure))
        return labels

    @staticmethod
    def _find_references(lines):
        gosub_targets: Dict[str, str] = {}
        on_gosub: Set[str] = set()
        jumps: Set[str] = set()
        malformed: List[int] = []
        for number, line in enumerate(lines, 1):
            for _, text in _statement_texts(line):
                on_m = _ON_GOSUB_RE.search(text)
                if on_m:
                    for name in _target_names(on_m.group(1)):
                        on_gosub.add(name.upper())
                    continue
                on_m = _ON_GOTO_RE.search(text)
                if on_m:
                    for name in _target_names(on_m.group(1)):
                        jumps.add(name.upper())
                    continue
                for m in _GOSUB_TOKEN_RE.finditer(text):
                    target = _GOSUB_RE.match(text, m.start())
                    if target is None:
                        malformed.append(number)
                        continue
                    gosub_targets.setdefault(target.group(1).upper(), target.group(1))
                for m in _JUMP_RE.finditer(text):
                    jumps.add(m.group(1).upper())
                for m in _THEN_ELSE_RE.finditer(text):
                    jumps.add(m.group(1).upper())
        return gosub_targets, on_gosub, jumps, malformed

    def _measure_block(self, lines, index, name, labels) -> _Block:
        block = _Block(name=name, line=index)
        label_lines = {i: upper for upper, defs in labels.items() for i, _ in defs}
        depth = 0
        for j in range(index + 1, len(lines)):
            if j in label_lines:
                block.error = (
                    f"GOSUB block {name} (line {index + 1}) runs into label "
                    f"{strip_code(lines[j])[:-1]} (line {j + 1}); overlapping label ranges "
                    "were not converted"
                )
                return block
            code = strip_code(lines[j])
            if _PROC_START_RE.match(code):
                block.end = j
                return block
            conditional = False
            for start, text in _statement_texts(lines[j]):
                if not text:
                    continue
                ret = _RETURN_RE.match(text)
                if ret:
                    if ret.group(1):
                        block.error = (
                            f"GOSUB block {name} returns to label {ret.group(1)} (line {j + 1}); "
                            "RETURN with a target cannot become a SUB"
                        )
                        return block
                    if depth == 0 and not conditional:
                        block.end = j
                        block.end_kind = END_RETURN
                        block.return_column = start
                        return block
                    block.conditional_returns.append(j)
                    continue
                if conditional:
                    if _RETURN_TOKEN_RE.search(text):
                        block.conditional_returns.append(j)
                    continue
                if _BLOCK_IF_RE.match(text):
                    depth += 1
                elif _SINGLE_IF_RE.match(text):
                    conditional = True
                    if _RETURN_TOKEN_RE.search(text):
                        block.conditional_returns.append(j)
                elif _END_IF_RE.match(text) or _CLOSERS_RE.match(text):
                    depth = max(depth - 1, 0)
                elif _OPENERS_RE.match(text):
                    depth += 1
                else:
                    next_m = _NEXT_RE.match(text)
                    if next_m:
                        depth = max(depth - (next_m.group(1).count(",") + 1), 0)
        block.end = len(lines)
        return block

    @staticmethod
    def _rewrite_blocks(lines, lifted) -> List[str]:
        replace: Dict[int, List[str]] = {}
        insert_before: Dict[int, List[str]] = {}
        for block in lifted.values():
            indent = indentation(lines[block.line])
            replace[block.line] = [rebuild_line(lines[block.line], f"{indent}Sub {block.name}")]
            for j in set(block.conditional_returns):
                new_line, _ = sub_code(_RETURN_TOKEN_RE, "Exit Sub", lines[j])
                replace[j] = [new_line]
            if block.end_kind == END_RETURN:
                replace[block.end] = _split_return_line(
                    lines[block.end], block.return_column, indent,
                )
            else:
                end = block.end
                while end - 1 > block.line and not lines[end - 1].strip():
                    end -= 1
                insert_before.setdefault(end, []).append(f"{indent}End Sub")

        out = []
        for index, line in enumerate(lines):
            out.extend(insert_before.get(index, []))
            out.extend(replace.get(index, [line]))
        out.extend(insert_before.get(len(lines), []))
        return out

    @staticmethod
    def _rewrite_calls(lines, lifted):
        count = 0

        def repl(m):
            nonlocal count
            block = lifted.get(m.group(1).upper())
            if block is None:
                return m.group(0)
            count += 1
            return f"Call {block.name}"

        out = []
        for line in lines:
            new_line, _ = sub_code(_CALL_SITE_RE, repl, line)
            out.append(new_line)
        return out, count
