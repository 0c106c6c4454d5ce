from __future__ import annotations

from typing import Any, Dict, List, Optional

from .fields import CREATE_COLUMNS, STATUS_COLUMNS, ChecklistField, column_for


_ITEM_COLUMNS = ("id", "name", "facility") + STATUS_COLUMNS
_SELECT = "SELECT " + ", ".join(_ITEM_COLUMNS) + " FROM checklist_items"

# Ids outside a signed 64-bit integer cannot exist in the table.
_MIN_ID = -(2**63)
_MAX_ID = 2**63 - 1


def _id_in_range(item_id: int) -> bool:
    return _MIN_ID <= int(item_id) <= _MAX_ID


def public_item(row: Any | Dict[str, Any]) -> Dict[str, Any]:
    d = dict(row)
    item: Dict[str, Any] = {
        "id": int(d["id"]),
        "name": d["name"],
        "facility": d["facility"],
    }
    # SQLite hands booleans back as 0/1.
    for col in STATUS_COLUMNS:
        item[col] = bool(d.get(col))
    return item


def list_items(conn: Any, facility: str) -> List[Dict[str, Any]]:
    rows = conn.execute(
        f"{_SELECT} WHERE facility=? ORDER BY id",
        (facility,),
    ).fetchall()
    return [public_item(r) for r in rows]


def get_item(conn: Any, item_id: int) -> Optional[Dict[str, Any]]:
    if not _id_in_range(item_id):
        return None
    row = conn.execute(
        f"{_SELECT} WHERE id=?",
        (int(item_id),),
    ).fetchone()
    if row is None:
        return None
    return public_item(row)


def create_item(conn: Any, *, name: str, facility: str) -> Dict[str, Any]:
    """Insert an item with every status false and return the stored row."""
    cols = ("name", "facility") + CREATE_COLUMNS
    placeholders = ", ".join("?" for _ in cols)
    params = [name, facility] + [False] * len(CREATE_COLUMNS)
    rows = conn.execute(
        f"INSERT INTO checklist_items ({', '.join(cols)}) VALUES ({placeholders}) RETURNING id",
        params,
    ).fetchall()
    item = get_item(conn, int(rows[0]["id"]))
    assert item is not None
    return item


def update_item_field(conn: Any, item_id: int, field: ChecklistField, value: bool) -> bool:
    """Set one status column. Returns False when no item has `item_id`."""
    if not _id_in_range(item_id):
        return False
    cur = conn.execute(
        f"UPDATE checklist_items SET {column_for(field)}=? WHERE id=?",
        (bool(value), int(item_id)),
    )
    return int(cur.rowcount or 0) > 0
