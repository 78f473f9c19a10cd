from __future__ import annotations
from pydantic import BaseModel, Field
from typing import List, Literal, Optional

from ..errors import StructureError
from .structure import StructureHeader, Subfield

class ParseIssue(BaseModel):
    code: str
    message: str
    severity: Literal["error", "warning"] = "error"
    line: Optional[int] = None

    @classmethod
    def from_error(
        cls,
        error: StructureError,
        severity: Literal["error", "warning"] = "error",
        line: Optional[int] = None,
    ) -> "ParseIssue":
        return cls(code=error.kind, message=error.message, severity=severity, line=line)

class ParseResult(BaseModel):
    header: StructureHeader = Field(default_factory=StructureHeader)
    fields: List[Subfield] = Field(default_factory=list)
    format: str = "dcl-ds"
    success: bool = False
    errors: List[ParseIssue] = Field(default_factory=list)
    # zero-based lines of the open and close keywords, for replacement by the caller
    start_line: Optional[int] = None
    end_line: Optional[int] = None

    @property
    def warnings(self) -> List[ParseIssue]:
        return [e for e in self.errors if e.severity == "warning"]
