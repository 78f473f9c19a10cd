# mcp_rpg_structure/tools/__init__.py
from __future__ import annotations

from typing import Any

from .generate_structure import register_generate_structure
from .import_structure import register_import_structure

def register(mcp: Any) -> None:
    register_generate_structure(mcp)
    register_import_structure(mcp)
