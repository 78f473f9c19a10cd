# mcp_rpg_structure/engine/importer.py
"""
Recover dcl-ds declarations from source text.

Boundary detection is a single stack pass over the lines. Field bodies are
parsed by recursive descent over the same immutable line tuple; every step
takes a line index and hands back the index where the caller resumes, so no
position is shared between calls.
"""
from __future__ import annotations

import itertools
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..errors import (
    MalformedField,
    NoStructureFound,
    StructureError,
    UnmatchedAggregate,
    ValidationError,
)
from ..logging import get_logger
from ..models.parse_result import ParseIssue, ParseResult
from ..models.structure import StructureHeader, StructureKind, Subfield
from .formats import RpgFormat, detect_format, get_format, is_valid_format
from .validation import NAME_PATTERN, check_init, check_length, check_repeat_count, is_unsigned_integer

log = get_logger("mcp.rpg.importer")

_OPEN_RE = re.compile(rf"^\s*(dcl-ds)\s+({NAME_PATTERN})\s*(.*?);", re.I)
_CLOSE_RE = re.compile(rf"^\s*(end-ds)(?:\s+{NAME_PATTERN})?\s*;", re.I)
_SUBSTRUCT_RE = re.compile(
    rf"^\s*({NAME_PATTERN})\s+(likeds|template)\s*(?:\(\s*([^)]*?)\s*\))?\s*;", re.I
)
# name type[(len)] then any keywords up to the terminating ';' (quoted literals may hold ';')
_FIELD_RE = re.compile(
    rf"^\s*({NAME_PATTERN})\s+([A-Za-z]+)(?:\(\s*([^)]*?)\s*\))?((?:'(?:[^']|'')*'|[^;'])*);"
)
_KEYWORD_RE = re.compile(r"\b(inz|dim)\s*\(\s*('(?:[^']|'')*'|[^)]*?)\s*\)", re.I)
_DIM_RE = re.compile(r"\bdim\s*\(\s*([^)]+?)\s*\)", re.I)
_TEMPLATE_RE = re.compile(r"\btemplate\b", re.I)


@dataclass(frozen=True)
class Span:
    start_line: int
    end_line: int
    match: re.Match
    level: int


@dataclass(frozen=True)
class SpanScan:
    spans: List[Span]
    # start lines of opens that never met a close
    unmatched: List[int]


def split_lines(text: str) -> Tuple[str, ...]:
    return tuple(line.rstrip("\r") for line in (text or "").split("\n"))


def _indent_of(line: str) -> int:
    return len(line) - len(line.lstrip())


def _is_skippable(line: str) -> bool:
    stripped = line.strip()
    return not stripped or stripped.startswith("//")


# ---------- boundaries ----------

def find_spans(lines: Sequence[str]) -> SpanScan:
    stack: List[Tuple[int, re.Match, int]] = []
    spans: List[Span] = []

    for i, line in enumerate(lines):
        m = _OPEN_RE.match(line)
        if m:
            stack.append((i, m, len(stack)))
            continue
        if _CLOSE_RE.match(line) and stack:
            start, match, level = stack.pop()
            spans.append(Span(start_line=start, end_line=i, match=match, level=level))

    unmatched = [start for start, _, _ in stack]
    log.debug("importer.spans", found=len(spans), unmatched=unmatched)
    return SpanScan(spans=spans, unmatched=unmatched)


def select_span(spans: Sequence[Span], cursor_line: int) -> Optional[Span]:
    """
    Pick the declaration addressed by the cursor. On an open or close line the
    outermost declaration starting/ending there wins; strictly inside a body
    the innermost enclosing declaration wins.
    """
    containing = [s for s in spans if s.start_line <= cursor_line <= s.end_line]
    if not containing:
        return None
    on_boundary = [s for s in containing if cursor_line in (s.start_line, s.end_line)]
    if on_boundary:
        return min(on_boundary, key=lambda s: s.level)
    return max(containing, key=lambda s: s.level)


# ---------- header ----------

def parse_header(match: re.Match) -> StructureHeader:
    name = match.group(2).strip()
    modifiers = match.group(3) or ""

    kind = StructureKind.DEFAULT
    dimension: Optional[str] = None

    if _TEMPLATE_RE.search(modifiers):
        kind = StructureKind.TEMPLATE

    dm = _DIM_RE.search(modifiers)
    if dm:
        value = dm.group(1).strip()
        low = value.lower()
        if low.startswith("*var:"):
            kind = StructureKind.VAR_LENGTH
            dimension = value[len("*var:"):].strip()
        elif low.startswith("*auto:"):
            kind = StructureKind.AUTO_LENGTH
            dimension = value[len("*auto:"):].strip()
        else:
            dimension = value

    return StructureHeader(name=name, kind=kind, dimension=dimension)


# ---------- field bodies ----------

class _FieldScanner:
    """Parses the body lines of one top-level declaration."""

    def __init__(self, lines: Sequence[str], fmt: RpgFormat):
        self.lines = lines
        self.fmt = fmt
        self.issues: List[ParseIssue] = []
        # one preorder counter per top-level structure
        self._ids = itertools.count()

    def _warn(self, error: StructureError, line: int) -> None:
        self.issues.append(ParseIssue.from_error(error, severity="warning", line=line))

    def _skip(self, line: int, reason: str) -> None:
        self.issues.append(
            ParseIssue(
                code="SkippedLine",
                message=f"Line {line + 1} skipped: {reason}",
                severity="warning",
                line=line,
            )
        )

    def parse_fields(self, start: int, stop: int) -> List[Subfield]:
        fields: List[Subfield] = []
        i = start
        while i < stop:
            line = self.lines[i]
            if _is_skippable(line):
                i += 1
                continue

            if _OPEN_RE.match(line):
                field, i = self._nested(i, stop)
                if field is not None:
                    fields.append(field)
                continue

            if _SUBSTRUCT_RE.match(line):
                field, i = self._substructure(i, stop)
                fields.append(field)
                continue

            field = self._field(i)
            if field is not None:
                fields.append(field)
            i += 1
        return fields

    def _nested(self, index: int, stop: int) -> Tuple[Optional[Subfield], int]:
        m = _OPEN_RE.match(self.lines[index])
        depth = 0
        end: Optional[int] = None
        for j in range(index + 1, stop):
            line = self.lines[j]
            if _OPEN_RE.match(line):
                depth += 1
                continue
            if _CLOSE_RE.match(line):
                if depth == 0:
                    end = j
                    break
                depth -= 1

        if end is None:
            self._warn(
                UnmatchedAggregate(
                    f"Substructure {m.group(2)!r} opened at line {index + 1} has no matching close",
                    data={"line": index},
                ),
                index,
            )
            return None, index + 1

        dm = _DIM_RE.search(m.group(3) or "")
        field_id = next(self._ids)
        children = self.parse_fields(index + 1, end)
        field = Subfield.aggregate(
            m.group(2).strip(),
            length=dm.group(1).strip() if dm else None,
            children=children,
            id=field_id,
        )
        return field, end + 1

    def _substructure(self, index: int, stop: int) -> Tuple[Subfield, int]:
        line = self.lines[index]
        m = _SUBSTRUCT_RE.match(line)
        base = _indent_of(line)

        # no explicit close: the body ends at the next declaration-looking line
        # that is not indented deeper than the substructure itself
        end = stop
        for j in range(index + 1, stop):
            cur = self.lines[j]
            if _is_skippable(cur) or _indent_of(cur) > base:
                continue
            if (
                _FIELD_RE.match(cur)
                or _SUBSTRUCT_RE.match(cur)
                or _OPEN_RE.match(cur)
                or _CLOSE_RE.match(cur)
            ):
                end = j
                break

        field_id = next(self._ids)
        children = self.parse_fields(index + 1, end)
        field = Subfield.aggregate(
            m.group(1).strip(),
            length=(m.group(3) or "").strip() or None,
            children=children,
            id=field_id,
        )
        return field, end

    def _field(self, index: int) -> Optional[Subfield]:
        m = _FIELD_RE.match(self.lines[index])
        if not m:
            self._skip(index, "not a field declaration")
            return None

        name, spelled, length, rest = m.groups()
        tag = self.fmt.canonical_type(spelled)
        if tag is None:
            self._skip(index, f"unknown type {spelled!r}")
            return None

        init: Optional[str] = None
        dim: Optional[str] = None
        for keyword, value in _KEYWORD_RE.findall(rest):
            if keyword.lower() == "inz":
                init = value.strip() or None
            else:
                dim = value.strip()
        leftover = _KEYWORD_RE.sub("", rest).strip()
        if leftover:
            self._skip(index, f"unsupported keywords {leftover!r}")
            return None

        repeat_count: Optional[int] = None
        if dim is not None:
            if not is_unsigned_integer(dim):
                self._warn(
                    MalformedField(
                        f"Field {name!r}: dimension {dim!r} is not a number",
                        data={"field": name, "line": index},
                    ),
                    index,
                )
                return None
            repeat_count = int(dim)

        length = (length or "").strip() or None
        field = Subfield(
            id=next(self._ids),
            name=name.strip(),
            type_tag=tag,
            length=length,
            init=init,
            repeat_count=repeat_count,
        )

        problems = check_length(tag, length) + check_init(tag, init, length) + check_repeat_count(repeat_count)
        for problem in problems:
            self._warn(
                MalformedField(f"Field {field.name!r}: {problem}", data={"field": field.name, "line": index}),
                index,
            )
        return field


# ---------- validation ----------

def _fields_ok(fields: Sequence[Subfield]) -> bool:
    for f in fields:
        if not f.name:
            return False
        if f.is_aggregate:
            if not _fields_ok(f.children):
                return False
        elif not f.type_tag:
            return False
    return True


def _acceptable(result: ParseResult) -> bool:
    if not result.header.name or result.header.kind is None:
        return False
    if not is_valid_format(result.format):
        return False
    return _fields_ok(result.fields)


def validate_parse_result(result: ParseResult) -> bool:
    """True when the caller may trust header and fields."""
    return result.success and _acceptable(result)


# ---------- entry points ----------

def _parse_span(lines: Sequence[str], span: Span) -> ParseResult:
    fmt_key = detect_format(span.match.group(1))
    header = parse_header(span.match)
    scanner = _FieldScanner(lines, get_format(fmt_key))
    fields = scanner.parse_fields(span.start_line + 1, span.end_line)

    result = ParseResult(
        header=header,
        fields=fields,
        format=fmt_key,
        success=True,
        errors=scanner.issues,
        start_line=span.start_line,
        end_line=span.end_line,
    )
    if not _acceptable(result):
        result.success = False
        result.errors.append(
            ParseIssue.from_error(
                ValidationError(f"Structure {header.name!r} is incomplete"),
                line=span.start_line,
            )
        )

    log.debug(
        "importer.parsed",
        structure=header.name,
        format=fmt_key,
        start=span.start_line,
        end=span.end_line,
        fields=len(fields),
        warnings=len(result.warnings),
    )
    return result


def locate_and_parse_at_cursor(text: str, cursor_line: int) -> ParseResult:
    lines = split_lines(text)
    scan = find_spans(lines)
    span = select_span(scan.spans, cursor_line)

    if span is None:
        pending = [start for start in scan.unmatched if start <= cursor_line]
        if pending and 0 <= cursor_line < len(lines):
            line: Optional[int] = pending[-1]
            error: StructureError = UnmatchedAggregate(
                f"Structure opened at line {pending[-1] + 1} has no matching close",
                data={"line": pending[-1], "cursor_line": cursor_line},
            )
        else:
            line = None
            error = NoStructureFound(
                "No RPG structure found at cursor position",
                data={"cursor_line": cursor_line},
            )
        log.info("importer.no_span", cursor_line=cursor_line, reason=error.kind)
        return ParseResult(success=False, errors=[ParseIssue.from_error(error, line=line)])

    log.debug("importer.span_selected", cursor_line=cursor_line, start=span.start_line, level=span.level)
    return _parse_span(lines, span)


def parse_all_top_level(text: str) -> List[ParseResult]:
    lines = split_lines(text)
    scan = find_spans(lines)
    if scan.unmatched:
        log.warning("importer.unmatched_opens", lines=scan.unmatched)

    top_level = sorted((s for s in scan.spans if s.level == 0), key=lambda s: s.start_line)
    return [_parse_span(lines, s) for s in top_level]
