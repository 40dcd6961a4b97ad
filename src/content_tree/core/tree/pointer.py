"""Self-location pointers: the canonical address of a node's value slot.

A pointer names the flexform slot that references a node: the record owning
the flexform (table and uid), the sheet, the source language, the field, the
value language and the position inside the field's relation list. The root
node of a tree has no such slot and is addressed by its own ``table:uid``.

Positions are passed through as the relation resolver hands them out: list
indexes or opaque tokens such as ``tt_content_11``.
"""

from dataclasses import dataclass, replace
from typing import Any

from content_tree.config import CONTENT_TABLE
from content_tree.exceptions import InvalidPointerError


@dataclass(frozen=True)
class SelfLocationPointer:
    """Position of a node inside its parent's data structure."""

    table: str
    uid: int
    sheet: str | None = None
    source_language: str | None = None
    field: str | None = None
    value_language: str | None = None
    position: int | str | None = None
    target_check_uid: int | None = None

    @property
    def is_root(self) -> bool:
        return self.sheet is None

    def with_slot(self, **slots: Any) -> "SelfLocationPointer":
        """Return a copy with the given slots filled in."""
        return replace(self, **slots)


def root_pointer(table: str, uid: int) -> SelfLocationPointer:
    return SelfLocationPointer(table=table, uid=uid)


def encode(pointer: SelfLocationPointer) -> str:
    """Convert a pointer to ``table:uid:sheet:sLang:field:vLang:position``.

    The string may additionally end in ``/tt_content:uid``, which is used to
    check the target record of the pointer. Root pointers become ``table:uid``.
    """
    if pointer.is_root:
        return f"{pointer.table}:{pointer.uid}"

    encoded = ":".join(
        str(part)
        for part in (
            pointer.table,
            pointer.uid,
            pointer.sheet,
            pointer.source_language,
            pointer.field,
            pointer.value_language,
            pointer.position,
        )
    )
    if pointer.target_check_uid is not None:
        encoded += f"/{CONTENT_TABLE}:{pointer.target_check_uid}"
    return encoded


def _parse_int(value: str, *, what: str, source: str) -> int:
    try:
        return int(value)
    except ValueError:
        msg = f"Pointer {source!r}: {what} is not an integer: {value!r}"
        raise InvalidPointerError(msg) from None


def decode(pointer_string: str) -> SelfLocationPointer:
    """Parse a pointer string produced by :func:`encode`."""
    location, _, target = pointer_string.partition("/")
    parts = location.split(":")

    if len(parts) == 2:
        if target:
            msg = f"Pointer {pointer_string!r}: root pointers carry no target check"
            raise InvalidPointerError(msg)
        return root_pointer(parts[0], _parse_int(parts[1], what="uid", source=pointer_string))

    if len(parts) != 7 or not all(parts):
        msg = f"Pointer {pointer_string!r}: expected 2 or 7 colon separated parts"
        raise InvalidPointerError(msg)

    target_check_uid: int | None = None
    if target:
        target_table, _, target_uid = target.partition(":")
        if target_table != CONTENT_TABLE:
            msg = f"Pointer {pointer_string!r}: target check must point to {CONTENT_TABLE}"
            raise InvalidPointerError(msg)
        target_check_uid = _parse_int(target_uid, what="target uid", source=pointer_string)

    table, uid, sheet, source_language, field, value_language, position = parts
    return SelfLocationPointer(
        table=table,
        uid=_parse_int(uid, what="uid", source=pointer_string),
        sheet=sheet,
        source_language=source_language,
        field=field,
        value_language=value_language,
        position=int(position) if position.isdigit() else position,
        target_check_uid=target_check_uid,
    )
