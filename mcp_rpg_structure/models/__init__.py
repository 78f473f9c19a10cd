from .structure import FIELD_TYPES, StructureHeader, StructureKind, Subfield
from .parse_result import ParseIssue, ParseResult

__all__ = [
    "FIELD_TYPES",
    "StructureHeader",
    "StructureKind",
    "Subfield",
    "ParseIssue",
    "ParseResult",
]
