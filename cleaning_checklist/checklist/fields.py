from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Tuple

from cleaning_checklist.errors import ValidationError


class ChecklistField(str, Enum):
    """Status fields a client may toggle through update-field."""

    STAYED = "stayed"
    CHECKED_OUT = "checked_out"
    BUSSING = "bussing"
    AMENITIES = "amenities"
    WASHING = "washing"
    BED_MAKING = "bed_making"
    BATH_TOILET = "bath_toilet"
    VACUUM = "vacuum"
    FINISHING = "finishing"
    SHEETS = "sheets"
    ONSEN_START = "onsen_start"
    ONSEN_STOP = "onsen_stop"
    FINAL_CHECK = "final_check"
    TODAY_USED = "today_used"


# The only place an update statement gets its column name from.
_COLUMNS: Dict[ChecklistField, str] = {
    ChecklistField.STAYED: "stayed",
    ChecklistField.CHECKED_OUT: "checked_out",
    ChecklistField.BUSSING: "bussing",
    ChecklistField.AMENITIES: "amenities",
    ChecklistField.WASHING: "washing",
    ChecklistField.BED_MAKING: "bed_making",
    ChecklistField.BATH_TOILET: "bath_toilet",
    ChecklistField.VACUUM: "vacuum",
    ChecklistField.FINISHING: "finishing",
    ChecklistField.SHEETS: "sheets",
    ChecklistField.ONSEN_START: "onsen_start",
    ChecklistField.ONSEN_STOP: "onsen_stop",
    ChecklistField.FINAL_CHECK: "final_check",
    ChecklistField.TODAY_USED: "today_used",
}

# Written explicitly as false by the create operation, in insert order.
CREATE_COLUMNS: Tuple[str, ...] = (
    "checked_out",
    "bussing",
    "amenities",
    "washing",
    "bed_making",
    "bath_toilet",
    "vacuum",
    "finishing",
    "final_check",
    "stayed",
    "today_used",
)

# Every status column, in table order.
STATUS_COLUMNS: Tuple[str, ...] = CREATE_COLUMNS + ("sheets", "onsen_start", "onsen_stop")


def column_for(field: ChecklistField) -> str:
    return _COLUMNS[field]


def parse_field(name: Any) -> ChecklistField:
    if not isinstance(name, str):
        raise ValidationError("Invalid field name")
    try:
        return ChecklistField(name)
    except ValueError:
        raise ValidationError("Invalid field name")
