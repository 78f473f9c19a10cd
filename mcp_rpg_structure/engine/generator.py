# mcp_rpg_structure/engine/generator.py
from __future__ import annotations

from typing import List, Optional, Union

from ..errors import ValidationError
from ..logging import get_logger
from ..models.structure import StructureHeader, StructureKind, Subfield
from .formats import DEFAULT_FORMAT, RpgFormat, get_format
from .tree import reassign_ids
from .validation import check_forest, check_subfield, is_identifier

log = get_logger("mcp.rpg.generator")

DEFAULT_INDENT_UNIT = " " * 3


def _as_kind(kind: Union[StructureKind, str, None]) -> StructureKind:
    if isinstance(kind, StructureKind):
        return kind
    try:
        return StructureKind(kind)
    except ValueError:
        raise ValidationError(
            f"Unknown structure type: {kind!r}",
            data={"known": [k.value for k in StructureKind]},
        ) from None


def _is_blank(s: str) -> bool:
    return isinstance(s, str) and s.strip(" \t") == ""


def _numbered(fields: List[Subfield]) -> List[Subfield]:
    # renumbered copies; the caller's tree keeps its ids.
    # Anything that is not a list of subfields is left for check_forest to reject.
    if not isinstance(fields, list) or not all(isinstance(f, Subfield) for f in fields):
        return fields
    copies = [f.model_copy(deep=True) for f in fields]
    reassign_ids(copies)
    return copies


class StructureGenerator:
    """
    Serializes a header and field tree into dcl-ds text for one format.
    Pure: the same inputs always give the same text.
    """

    def __init__(self, fmt: RpgFormat, indent_unit: str = DEFAULT_INDENT_UNIT):
        if not _is_blank(indent_unit):
            raise ValidationError("Indent unit must be whitespace", data={"indent_unit": indent_unit})
        self.fmt = fmt
        self.indent_unit = indent_unit

    def generate(
        self,
        name: str,
        kind: Union[StructureKind, str],
        dimension: Optional[str],
        fields: List[Subfield],
        base_indent: str = "",
    ) -> str:
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Structure name is required and must be a non-empty string")
        if not is_identifier(name.strip()):
            raise ValidationError(f"Invalid structure name: {name!r}", data={"name": name})
        struct_kind = _as_kind(kind)
        dim = str(dimension).strip() if dimension is not None else ""
        if struct_kind in (StructureKind.VAR_LENGTH, StructureKind.AUTO_LENGTH) and not dim:
            raise ValidationError(f"{struct_kind.value} structures need a dimension", data={"name": name})
        if not _is_blank(base_indent):
            raise ValidationError("Base indent must be whitespace", data={"base_indent": base_indent})
        fields = _numbered(fields)
        check_forest(fields)

        code = "\n".join(self._lines(name.strip(), struct_kind, dim, fields, 0, base_indent))
        log.debug("generator.done", structure=name, format=self.fmt.key, lines=code.count("\n") + 1)
        return code

    # ---------- pieces ----------

    def _lines(
        self,
        name: str,
        kind: StructureKind,
        dimension: str,
        fields: List[Subfield],
        level: int,
        base_indent: str,
    ) -> List[str]:
        head_indent = base_indent + self.indent_unit * level
        sub_indent = head_indent + self.indent_unit

        lines = [self._open_line(name, kind, dimension, level, head_indent)]
        for f in fields:
            lines.extend(self._field_lines(f, level, base_indent, sub_indent))
        lines.append(f"{head_indent}{self.fmt.endds};")
        return lines

    def _open_line(self, name: str, kind: StructureKind, dimension: str, level: int, indent: str) -> str:
        fmt = self.fmt
        line = f"{indent}{fmt.dclds} {name}"
        # nested structures are qualified through their parent
        if level == 0:
            line += f" {fmt.qualified}"
        line += self._dimension_clause(kind, dimension)
        if kind == StructureKind.TEMPLATE and level == 0:
            line += f" {fmt.template}"
        return line + ";"

    def _dimension_clause(self, kind: StructureKind, dimension: str) -> str:
        if not dimension:
            return ""
        fmt = self.fmt
        if kind == StructureKind.DEFAULT:
            return f" {fmt.dimx}({dimension})"
        if kind == StructureKind.VAR_LENGTH:
            return f" {fmt.dimx}({fmt.varx}:{dimension})"
        if kind == StructureKind.AUTO_LENGTH:
            return f" {fmt.dimx}({fmt.autox}:{dimension})"
        return ""

    def _field_lines(self, field: Subfield, level: int, base_indent: str, sub_indent: str) -> List[str]:
        problems = check_subfield(field)
        if problems:
            log.warning("generator.field_malformed", field=field.name, id=field.id, problems=problems)
            return [f"{sub_indent}// Error generating field: {field.name}"]

        if field.is_aggregate:
            return self._lines(
                field.name.strip(),
                StructureKind.DEFAULT,
                (field.length or "").strip(),
                field.children,
                level + 1,
                base_indent,
            )
        return [self._field_line(field, sub_indent)]

    def _field_line(self, field: Subfield, indent: str) -> str:
        fmt = self.fmt
        line = f"{indent}{field.name.strip()} {fmt.spell_type(field.type_tag or '')}"
        if field.length and field.length.strip():
            line += f"({field.length.strip()})"
        if field.init and field.init.strip():
            line += f" {fmt.inz}({field.init.strip()})"
        if field.repeat_count is not None:
            line += f" {fmt.dimx}({field.repeat_count})"
        return line + ";"


def generate_structure(
    name: str,
    kind: Union[StructureKind, str],
    dimension: Optional[str],
    fields: List[Subfield],
    base_indent: str = "",
    *,
    format_key: str = DEFAULT_FORMAT,
    indent_unit: str = DEFAULT_INDENT_UNIT,
) -> str:
    """
    Generate the declaration text for one structure.

    Example (lowercase convention):
        dcl-ds cust qualified dim(100);
           id int(10);
        end-ds;
    """
    return StructureGenerator(get_format(format_key), indent_unit).generate(
        name, kind, dimension, fields, base_indent
    )


def generate_from_header(
    header: StructureHeader,
    fields: List[Subfield],
    base_indent: str = "",
    *,
    format_key: str = DEFAULT_FORMAT,
    indent_unit: str = DEFAULT_INDENT_UNIT,
) -> str:
    return generate_structure(
        header.name,
        header.kind if header.kind is not None else "",
        header.dimension,
        fields,
        base_indent,
        format_key=format_key,
        indent_unit=indent_unit,
    )
