from __future__ import annotations
from enum import Enum
from pydantic import BaseModel, Field
from typing import List, Optional

# Canonical type tags, in the order the editor offers them
FIELD_TYPES = (
    "char", "varchar", "int", "packed", "zoned", "uns",
    "date", "time", "timestamp", "bin", "ind", "pointer",
)

class StructureKind(str, Enum):
    DEFAULT = "Default"
    TEMPLATE = "template"
    VAR_LENGTH = "*var"
    AUTO_LENGTH = "*auto"

class StructureHeader(BaseModel):
    name: str = ""
    kind: Optional[StructureKind] = None
    dimension: Optional[str] = None

class Subfield(BaseModel):
    id: int = 0
    name: str
    type_tag: Optional[str] = None
    length: Optional[str] = None
    init: Optional[str] = None
    repeat_count: Optional[int] = None
    is_aggregate: bool = False
    children: List["Subfield"] = Field(default_factory=list)

    @classmethod
    def aggregate(
        cls,
        name: str,
        length: Optional[str] = None,
        children: Optional[List["Subfield"]] = None,
        id: int = 0,
    ) -> "Subfield":
        return cls(id=id, name=name, length=length, is_aggregate=True, children=list(children or []))

Subfield.model_rebuild()
