# mcp_rpg_structure/engine/validation.py
"""
Value grammar for headers and subfields.

Check functions return a list of human readable problems (empty when the value
is acceptable). Raising is left to the callers: the generator aborts on
structural problems and renders per-field problems as comments, the importer
turns them into MalformedField warnings.
"""
from __future__ import annotations

import re
from typing import Iterable, List, Optional

from ..errors import ValidationError
from ..models.structure import FIELD_TYPES, StructureHeader, StructureKind, Subfield

NAME_PATTERN = r"[A-Za-zÑñ_][A-Za-zÑñ0-9_@#]*"

_NAME_RE = re.compile(rf"^{NAME_PATTERN}$")
_INTEGER_RE = re.compile(r"^[0-9]+$")
_DECIMAL_RE = re.compile(r"^([0-9]+):([0-9]+)$")
_NUMERIC_RE = re.compile(r"^[+-]?\d+(\.\d+)?$")
_SIGNED_INT_RE = re.compile(r"^[+-]?\d+$")
_QUOTED_RE = re.compile(r"^'.*'$", re.S)

LENGTH_REQUIRED = ("char", "varchar", "int", "packed", "zoned", "uns", "bin")
NO_INITIALIZER = ("date", "time", "timestamp", "pointer")
IND_VALUES = ("1", "0", "*on", "*off")

INIT_PLACEHOLDERS = {
    "char": "'ABC'",
    "varchar": "'ABC'",
    "ind": "1, 0, *on, *off",
    "zoned": "123 or 45.67",
    "packed": "123 or 45.67",
    "int": "123",
    "uns": "123",
    "bin": "123",
}


def is_identifier(name: Optional[str]) -> bool:
    return bool(name) and bool(_NAME_RE.match(name))


def is_unsigned_integer(value: Optional[str]) -> bool:
    return bool(_INTEGER_RE.match((value or "").strip()))


def is_positive_integer(value: Optional[str]) -> bool:
    v = (value or "").strip()
    return bool(_INTEGER_RE.match(v)) and int(v) > 0


def init_placeholder(type_tag: str) -> str:
    return INIT_PLACEHOLDERS.get(type_tag, "")


def check_name(name: Optional[str]) -> List[str]:
    if not name or not name.strip():
        return ["Field name is required."]
    if not is_identifier(name.strip()):
        return [
            f"Invalid name {name!r}. Must start with a letter or underscore and contain "
            "only letters, digits, underscores, @ or #."
        ]
    return []


def check_length(type_tag: str, length: Optional[str]) -> List[str]:
    value = (length or "").strip()
    if not value:
        if type_tag in LENGTH_REQUIRED:
            return [f"Length is required for type {type_tag}."]
        return []

    if type_tag not in LENGTH_REQUIRED:
        # date(*iso), pointer(*proc) and friends carry keywords, not sizes
        return []

    if _INTEGER_RE.match(value):
        if int(value) <= 0:
            return ["Length must be greater than 0."]
        return []

    m = _DECIMAL_RE.match(value)
    if m and type_tag in ("packed", "zoned"):
        whole, decimal = int(m.group(1)), int(m.group(2))
        if whole <= 0:
            return ["Length must be greater than 0."]
        if decimal >= whole:
            return [f"Decimal part must be smaller than total length ({value})."]
        return []

    if type_tag in ("packed", "zoned"):
        return [f"Invalid length {value!r}. Use N or N:N."]
    return [f"Invalid length {value!r}. Use a positive integer."]


def check_init(type_tag: str, init: Optional[str], length: Optional[str] = None) -> List[str]:
    value = (init or "").strip()
    if not value:
        return []

    if type_tag in ("char", "varchar"):
        if not _QUOTED_RE.match(value) or len(value) < 2:
            return ["String must be enclosed in single quotes."]
        if length and _INTEGER_RE.match(length.split(":")[0].strip()):
            content = value[1:-1].replace("''", "'")
            max_length = int(length.split(":")[0])
            if len(content) > max_length:
                return [f"String too long (max {max_length} chars)."]
        return []

    if type_tag == "ind":
        if value.lower() not in IND_VALUES:
            return ["Must be '1', '0', '*on', or '*off'."]
        return []

    if type_tag in ("packed", "zoned"):
        if not _NUMERIC_RE.match(value):
            return ["Must be a numeric value (e.g., 42 or 13.5)."]
        return []

    if type_tag == "int":
        if not _SIGNED_INT_RE.match(value):
            return ["Must be a whole number (e.g., 10)."]
        return []

    if type_tag in ("uns", "bin"):
        if not _INTEGER_RE.match(value):
            return ["Must be a whole number (e.g., 10)."]
        return []

    if type_tag in NO_INITIALIZER:
        return [f"Type {type_tag} takes no initializer."]

    return []


def check_repeat_count(count: Optional[int]) -> List[str]:
    if count is None:
        return []
    if isinstance(count, bool) or not isinstance(count, int) or count <= 0:
        return ["Dimension must be a positive integer."]
    return []


def check_subfield(field: Subfield) -> List[str]:
    """Problems with one node's own values (children are not visited)."""
    problems = check_name(field.name)
    if field.is_aggregate:
        if field.length and not is_positive_integer(field.length):
            problems.append(f"Invalid structure length {field.length!r}: must be a number.")
        return problems

    tag = field.type_tag or ""
    if tag not in FIELD_TYPES:
        problems.append(f"Unknown field type {tag!r}.")
        return problems
    problems += check_length(tag, field.length)
    problems += check_init(tag, field.init, field.length)
    problems += check_repeat_count(field.repeat_count)
    return problems


def check_forest(fields: Iterable[Subfield]) -> None:
    """
    Structural invariants of a field tree. Raises ValidationError on the first
    violation: aggregates without type tags, leaves without children, unique ids.
    """
    if fields is None or isinstance(fields, (str, bytes)):
        raise ValidationError("Fields must be a list")
    seen: set[int] = set()

    def visit(nodes: Iterable[Subfield], path: str) -> None:
        for idx, f in enumerate(nodes):
            where = f"{path}[{idx}]"
            if not isinstance(f, Subfield):
                raise ValidationError(f"Field at {where} is not a subfield", data={"path": where})
            if f.id in seen:
                raise ValidationError(f"Duplicate field id {f.id} at {where}", data={"path": where, "id": f.id})
            seen.add(f.id)
            if f.is_aggregate:
                if f.type_tag:
                    raise ValidationError(
                        f"Substructure {f.name!r} must not carry a type ({f.type_tag!r})",
                        data={"path": where},
                    )
                visit(f.children, f"{where}.children")
            elif f.children:
                raise ValidationError(
                    f"Field {f.name!r} is not a substructure but has children",
                    data={"path": where},
                )

    visit(list(fields), "fields")


def check_header(header: StructureHeader) -> List[str]:
    problems: List[str] = []
    if not header.name or not is_identifier(header.name.strip()):
        problems.append("Structure name is required and must be a valid identifier.")
    if header.kind is None:
        problems.append("Structure type is required.")
        return problems

    dim = (header.dimension or "").strip()
    if header.kind == StructureKind.TEMPLATE:
        if dim and dim != "0":
            problems.append("Template structures take no dimension.")
    elif header.kind in (StructureKind.VAR_LENGTH, StructureKind.AUTO_LENGTH):
        if not is_positive_integer(dim):
            problems.append(f"{header.kind.value} structures need a positive dimension.")
    elif dim and not is_positive_integer(dim):
        problems.append(f"Invalid dimension {dim!r}: must be a positive integer.")
    return problems
