from .formats import FORMATS, RpgFormat, detect_format, format_keys, get_format
from .generator import StructureGenerator, generate_from_header, generate_structure
from .importer import locate_and_parse_at_cursor, parse_all_top_level, validate_parse_result
from .session import StructureSession

__all__ = [
    "FORMATS",
    "RpgFormat",
    "detect_format",
    "format_keys",
    "get_format",
    "StructureGenerator",
    "generate_from_header",
    "generate_structure",
    "locate_and_parse_at_cursor",
    "parse_all_top_level",
    "validate_parse_result",
    "StructureSession",
]
