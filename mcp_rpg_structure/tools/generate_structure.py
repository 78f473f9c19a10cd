# mcp_rpg_structure/tools/generate_structure.py
from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

from ..engine.formats import get_format
from ..engine.generator import StructureGenerator
from ..errors import handle_exception
from ..models.params import GenerateStructureParams
from ..settings import DEFAULT_INDENTATION, Settings

log = logging.getLogger("mcp.rpg.tools.generate")


def generate_structure_tool(params: Dict[str, Any], cfg: Optional[Settings] = None) -> Dict[str, Any]:
    """
    Tool handler: validates the request, renders the structure and returns
    {"code", "format", "lines"} or {"error": {...}}.
    """
    t0 = time.time()
    try:
        req = GenerateStructureParams.model_validate(params)
        cfg = cfg or Settings()
        fmt = get_format(req.format) if req.format else cfg.format_table()
        format_key = fmt.key
        indent_unit = (
            " " * (req.indentation or DEFAULT_INDENTATION)
            if req.indentation is not None
            else cfg.indent_unit
        )

        generator = StructureGenerator(fmt, indent_unit)
        code = generator.generate(req.name, req.kind, req.dimension, req.fields, req.base_indent)
    except Exception as e:
        log.warning("tool.generate.failed: %s", e)
        return {"error": handle_exception(e)}

    lines = code.count("\n") + 1
    log.info(
        "tool.generate name=%s format=%s lines=%d took_ms=%d",
        req.name, format_key, lines, int((time.time() - t0) * 1000),
    )
    return {"code": code, "format": format_key, "lines": lines}


def register_generate_structure(mcp: Any) -> None:
    @mcp.tool(name="rpg.structure.generate", title="Generate RPG Structure")
    def rpg_structure_generate(
        name: str,
        kind: str = "Default",
        fields: Optional[List[Dict[str, Any]]] = None,
        dimension: Optional[str] = None,
        base_indent: str = "",
        format: Optional[str] = None,
        indentation: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Render a dcl-ds declaration:
          - name / kind / dimension: the structure header
          - fields: subfields ({name, type_tag, length, init, repeat_count,
            is_aggregate, children})
          - base_indent: indentation of the insertion line
          - format / indentation: override the configured preference
        """
        return generate_structure_tool({
            "name": name,
            "kind": kind,
            "fields": fields or [],
            "dimension": dimension,
            "base_indent": base_indent,
            "format": format,
            "indentation": indentation,
        })
