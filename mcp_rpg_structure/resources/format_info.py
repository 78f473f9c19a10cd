# mcp_rpg_structure/resources/format_info.py
from __future__ import annotations
from typing import Any
from ..engine.formats import format_keys, get_format
from ..engine.validation import init_placeholder
from ..models.structure import FIELD_TYPES
from ..settings import Settings

def register_format_resources(mcp: Any) -> None:
    @mcp.resource(
        uri="format://{key}",
        name="Structure Format",
        description="Returns the keyword spellings and type map of one format.",
        mime_type="application/json",
    )
    def read_format(key: str) -> dict[str, Any]:
        table = get_format(key).model_dump()
        table["init_examples"] = {t: init_placeholder(t) for t in FIELD_TYPES if init_placeholder(t)}
        return table

    @mcp.resource(
        uri="format://current",
        name="Configured Format",
        description="Returns the configured format key, indentation and the known keys.",
        mime_type="application/json",
    )
    def read_current_format() -> dict[str, Any]:
        cfg = Settings()
        return {
            "format": cfg.STRUCTURE_FORMAT,
            "indentation": len(cfg.indent_unit),
            "known": format_keys(),
        }
