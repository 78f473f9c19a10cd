# mcp_rpg_structure/engine/tree.py
"""Operations on a field tree (ordered forest of Subfield)."""
from __future__ import annotations

from typing import Iterator, List, Optional, Tuple, Union

from ..errors import ValidationError
from ..models.structure import Subfield


def walk(fields: List[Subfield], depth: int = 0) -> Iterator[Tuple[int, Subfield]]:
    for f in fields:
        yield depth, f
        if f.is_aggregate and f.children:
            yield from walk(f.children, depth + 1)


def reassign_ids(fields: List[Subfield]) -> None:
    """Renumber the whole tree in preorder, starting at 0."""
    for new_id, (_, f) in enumerate(walk(fields)):
        f.id = new_id


def next_id(fields: List[Subfield]) -> int:
    return max((f.id for _, f in walk(fields)), default=-1) + 1


def find_by_id(fields: List[Subfield], field_id: int) -> Optional[Subfield]:
    for _, f in walk(fields):
        if f.id == field_id:
            return f
    return None


def find_aggregate(fields: List[Subfield], name: str) -> Optional[Subfield]:
    wanted = (name or "").strip().lower()
    for _, f in walk(fields):
        if f.is_aggregate and f.name.lower() == wanted:
            return f
    return None


def field_name_exists(fields: List[Subfield], name: str) -> bool:
    wanted = (name or "").strip().lower()
    return any(f.name.lower() == wanted for f in fields)


def append_field(fields: List[Subfield], field: Subfield) -> Subfield:
    fields.append(field)
    reassign_ids(fields)
    return field


def insert_before(fields: List[Subfield], field: Subfield, index: int) -> Subfield:
    if index <= 0:
        fields.insert(0, field)
    elif index >= len(fields):
        fields.append(field)
    else:
        fields.insert(index, field)
    reassign_ids(fields)
    return field


def attach_to_aggregate(
    fields: List[Subfield],
    field: Subfield,
    target: Union[int, str],
) -> Subfield:
    """Append ``field`` to the children of the aggregate addressed by id or name."""
    if isinstance(target, str):
        parent = find_aggregate(fields, target)
    else:
        parent = find_by_id(fields, target)

    if parent is None or not parent.is_aggregate:
        raise ValidationError(
            f"Target {target!r} not found or not a substructure",
            data={"target": target},
        )
    if any(node is parent for _, node in walk([field])):
        raise ValidationError("A substructure cannot contain itself", data={"target": target})

    parent.children.append(field)
    reassign_ids(fields)
    return field


def delete_by_id(fields: List[Subfield], field_id: int) -> bool:
    def _delete(nodes: List[Subfield]) -> bool:
        for i, f in enumerate(nodes):
            if f.id == field_id:
                del nodes[i]
                return True
            if f.is_aggregate and f.children and _delete(f.children):
                return True
        return False

    deleted = _delete(fields)
    if deleted:
        reassign_ids(fields)
    return deleted
