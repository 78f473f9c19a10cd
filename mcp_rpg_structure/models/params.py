# mcp_rpg_structure/models/params.py
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from .structure import StructureKind, Subfield


class GenerateStructureParams(BaseModel):
    """
    Input parameters for rpg.structure.generate:
      - name: structure name
      - kind: Default | template | *var | *auto
      - dimension: optional dimension (required for *var / *auto)
      - fields: the field tree
      - base_indent: indentation of the line the code replaces
      - format / indentation: override the configured preference
    """

    name: str = Field(min_length=1)
    kind: StructureKind = StructureKind.DEFAULT
    dimension: Optional[str] = None
    fields: List[Subfield] = Field(default_factory=list)
    base_indent: str = ""
    format: Optional[str] = None
    indentation: Optional[int] = Field(default=None, ge=0)


class ImportAtCursorParams(BaseModel):
    text: str
    cursor_line: int = Field(ge=0)


class ImportAllParams(BaseModel):
    text: str
