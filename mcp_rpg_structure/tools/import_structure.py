# mcp_rpg_structure/tools/import_structure.py
from __future__ import annotations

import logging
from typing import Any, Dict

from ..engine.importer import locate_and_parse_at_cursor, parse_all_top_level
from ..errors import handle_exception
from ..models.params import ImportAllParams, ImportAtCursorParams

log = logging.getLogger("mcp.rpg.tools.import")


def import_at_cursor_tool(params: Dict[str, Any]) -> Dict[str, Any]:
    try:
        req = ImportAtCursorParams.model_validate(params)
    except Exception as e:
        return {"error": handle_exception(e)}

    result = locate_and_parse_at_cursor(req.text, req.cursor_line)
    log.info(
        "tool.import_at_cursor line=%d success=%s structure=%s",
        req.cursor_line, result.success, result.header.name,
    )
    return result.model_dump(mode="json")


def import_all_tool(params: Dict[str, Any]) -> Dict[str, Any]:
    try:
        req = ImportAllParams.model_validate(params)
    except Exception as e:
        return {"error": handle_exception(e)}

    results = parse_all_top_level(req.text)
    log.info("tool.import_all count=%d", len(results))
    return {
        "structures": [r.model_dump(mode="json") for r in results],
        "count": len(results),
    }


def register_import_structure(mcp: Any) -> None:
    @mcp.tool(name="rpg.structure.import_at_cursor", title="Import RPG Structure At Cursor")
    def rpg_structure_import_at_cursor(text: str, cursor_line: int) -> Dict[str, Any]:
        """
        Parse the dcl-ds declaration addressed by a zero-based cursor line.
        On an open/close line the outermost declaration there is chosen,
        inside a body the innermost enclosing one.
        """
        return import_at_cursor_tool({"text": text, "cursor_line": cursor_line})

    @mcp.tool(name="rpg.structure.import_all", title="Import All RPG Structures")
    def rpg_structure_import_all(text: str) -> Dict[str, Any]:
        """Parse every top-level dcl-ds declaration of a document."""
        return import_all_tool({"text": text})
