# mcp_rpg_structure/engine/session.py
from __future__ import annotations

from typing import List, Optional, Union

from ..errors import ValidationError
from ..logging import get_logger
from ..models.parse_result import ParseResult
from ..models.structure import StructureHeader, StructureKind, Subfield
from . import tree
from .formats import DEFAULT_FORMAT, get_format
from .generator import DEFAULT_INDENT_UNIT, StructureGenerator
from .importer import locate_and_parse_at_cursor, validate_parse_result
from .validation import check_header, check_name, is_positive_integer

log = get_logger("mcp.rpg.session")


class StructureSession:
    """
    The structure currently being edited: one header and one field tree.
    Owned by the caller; the generator and importer never hold on to it.
    """

    def __init__(self, format_key: str = DEFAULT_FORMAT, indent_unit: str = DEFAULT_INDENT_UNIT):
        get_format(format_key)
        self.format_key = format_key
        self.indent_unit = indent_unit
        self.header = StructureHeader()
        self.fields: List[Subfield] = []

    # ---------- header ----------

    def set_header(
        self,
        name: str,
        kind: Union[StructureKind, str] = StructureKind.DEFAULT,
        dimension: Optional[str] = None,
    ) -> StructureHeader:
        try:
            struct_kind = StructureKind(kind)
        except ValueError:
            raise ValidationError(f"Unknown structure type: {kind!r}", data={"kind": str(kind)}) from None
        self.header = StructureHeader(name=name, kind=struct_kind, dimension=dimension)
        return self.header

    def clear_header(self) -> None:
        self.header = StructureHeader()

    def header_is_complete(self) -> bool:
        return not check_header(self.header)

    # ---------- fields ----------

    def has_fields(self) -> bool:
        return bool(self.fields)

    def clear_fields(self) -> None:
        self.fields.clear()

    def reset(self) -> None:
        self.clear_header()
        self.clear_fields()

    def add_field(self, field: Subfield, before: Optional[int] = None) -> Subfield:
        if before is None:
            return tree.append_field(self.fields, field)
        return tree.insert_before(self.fields, field, before)

    def add_substructure(self, name: str, length: Optional[str] = None) -> Subfield:
        problems = check_name(name)
        if problems:
            raise ValidationError(problems[0], data={"name": name})
        if tree.field_name_exists(self.fields, name):
            raise ValidationError(f'A field named "{name}" already exists.', data={"name": name})
        if length and not is_positive_integer(length):
            raise ValidationError("Invalid format: must be a number or empty.", data={"length": length})
        return tree.append_field(self.fields, Subfield.aggregate(name.strip(), length=length or None))

    def add_field_to_substructure(self, target: Union[int, str], field: Subfield) -> Subfield:
        return tree.attach_to_aggregate(self.fields, field, target)

    def delete_field(self, field_id: int) -> bool:
        deleted = tree.delete_by_id(self.fields, field_id)
        if not deleted:
            log.warning("session.delete_missing", id=field_id)
        return deleted

    # ---------- text ----------

    def generate(self, base_indent: str = "") -> str:
        if self.header.kind is None:
            raise ValidationError("Structure type is required")
        generator = StructureGenerator(get_format(self.format_key), self.indent_unit)
        return generator.generate(
            self.header.name,
            self.header.kind,
            self.header.dimension,
            self.fields,
            base_indent,
        )

    def load(self, result: ParseResult) -> None:
        """Replace the session contents with an imported structure."""
        if not validate_parse_result(result):
            raise ValidationError(
                "Cannot load a structure that failed to parse",
                data={"errors": [e.message for e in result.errors if e.severity == "error"]},
            )
        self.reset()
        self.header = result.header.model_copy(deep=True)
        self.fields.extend(f.model_copy(deep=True) for f in result.fields)
        tree.reassign_ids(self.fields)
        self.format_key = result.format
        log.info("session.loaded", structure=self.header.name, format=self.format_key, fields=len(self.fields))

    def import_at_cursor(self, text: str, cursor_line: int) -> ParseResult:
        result = locate_and_parse_at_cursor(text, cursor_line)
        if result.success:
            self.load(result)
        return result
