# mcp_rpg_structure/engine/formats.py
from __future__ import annotations

from typing import Callable, Dict, List, Optional

from pydantic import BaseModel, PrivateAttr

from ..errors import UnknownFormat
from ..models.structure import FIELD_TYPES

DEFAULT_FORMAT = "dcl-ds"


class RpgFormat(BaseModel):
    """Keyword spellings for one casing convention of the declaration grammar."""

    key: str
    dclds: str
    endds: str
    template: str
    qualified: str
    varx: str
    autox: str
    dimx: str
    inz: str
    type_map: Dict[str, str]

    _reverse: Dict[str, str] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context) -> None:
        # first canonical tag wins when two tags share a spelling
        reverse: Dict[str, str] = {}
        for tag, spelling in self.type_map.items():
            reverse.setdefault(spelling.lower(), tag)
        self._reverse = reverse

    def spell_type(self, type_tag: str) -> str:
        return self.type_map.get(type_tag, type_tag)

    def canonical_type(self, spelling: str) -> Optional[str]:
        return self._reverse.get((spelling or "").strip().lower())


# Lowercase spellings; every convention is a casing of this table.
_CANONICAL: Dict[str, str] = {
    "dclds": "dcl-ds",
    "endds": "end-ds",
    "template": "template",
    "qualified": "qualified",
    "varx": "*var",
    "autox": "*auto",
    "dimx": "dim",
    "inz": "inz",
}


def _title(word: str) -> str:
    # "*auto" -> "*Auto", "end-ds" -> "End-ds"
    for i, ch in enumerate(word):
        if ch.isalpha():
            return word[:i] + ch.upper() + word[i + 1:].lower()
    return word


def _spell(key: str, case: Callable[[str], str]) -> RpgFormat:
    keywords = {k: case(v) for k, v in _CANONICAL.items()}
    return RpgFormat(
        key=key,
        type_map={tag: case(tag) for tag in FIELD_TYPES},
        **keywords,
    )


FORMATS: Dict[str, RpgFormat] = {
    "dcl-ds": _spell("dcl-ds", str.lower),
    "Dcl-ds": _spell("Dcl-ds", _title),
    "DCL-DS": _spell("DCL-DS", str.upper),
}


def format_keys() -> List[str]:
    return list(FORMATS)


def is_valid_format(key: str) -> bool:
    return key in FORMATS


def get_format(key: str) -> RpgFormat:
    fmt = FORMATS.get(key)
    if fmt is None:
        raise UnknownFormat(
            f"Unsupported structure format: {key!r}",
            data={"known": format_keys()},
        )
    return fmt


def detect_format(keyword: str) -> str:
    """
    Map the open keyword found in source to its convention.
    Exact spellings win; mixed casings fall back on the casing of the keyword.
    """
    kw = (keyword or "").strip()
    for key, fmt in FORMATS.items():
        if fmt.dclds == kw:
            return key
    if kw and kw.upper() == kw:
        return "DCL-DS"
    if kw[:1].isupper():
        return "Dcl-ds"
    return DEFAULT_FORMAT
