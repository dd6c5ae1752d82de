"""
Validation and sanitization utilities.

This module contains the checks applied to a draft location before it is
sent to the store, the schedule size limits enforced by the form, and the
map bounding box check used by the map click endpoint.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-02-09
"""

from typing import Any, Dict, Sequence

from logic.exceptions import ValidationError
from logic.models import Location

ALLOWED_DRAFT_FIELDS = {
    "title": str,
    "description": str,
    "category_id": str,
    "info": str,
}

SCHEDULE_FIELDS = {"from", "to"}
MIN_SCHEDULE_ENTRIES = 1
MAX_SCHEDULE_ENTRIES = 7

MISSING_FIELDS_MESSAGE = "Por favor, preencha todos os campos obrigatórios."


def validate_draft(draft: Location) -> None:
    """Check that a draft can be saved.

    Only the title and the map position are required.

    Args:
        draft: Draft location.

    Raises:
        ValidationError: If the title is blank or the position is missing.
    """
    if not draft.title.strip() or draft.position is None:
        raise ValidationError(MISSING_FIELDS_MESSAGE)


def sanitise_draft_fields(fields: Dict[str, Any]) -> Dict[str, str]:
    """Validate a form update for the draft.

    Args:
        fields: Field names (snake_case or camelCase ``categoryId``) and values.

    Returns:
        Dictionary of draft attribute names to string values.

    Raises:
        ValidationError: If an unknown field or a non-string value is supplied.
    """
    cleaned = {}
    for key, value in fields.items():
        if key == "categoryId":
            key = "category_id"
        if key not in ALLOWED_DRAFT_FIELDS:
            raise ValidationError(f"Illegal field: {key}")
        if value is None:
            value = ""
        if not isinstance(value, ALLOWED_DRAFT_FIELDS[key]):
            raise ValidationError(f"Invalid value for {key}")
        cleaned[key] = value
    return cleaned


def check_schedule_field(field: str) -> str:
    """Validate the name of a schedule entry field.

    Args:
        field: Either ``from`` or ``to``.

    Returns:
        The attribute name on ScheduleEntry.

    Raises:
        ValidationError: For any other field name.
    """
    if field not in SCHEDULE_FIELDS:
        raise ValidationError(f"Illegal schedule field: {field}")
    return "from_" if field == "from" else "to"


def is_within_bounds(lat: float, lon: float, bounds: Sequence[Sequence[float]]) -> bool:
    """Check if a coordinate lies inside the map's bounding box.

    Args:
        lat: Latitude.
        lon: Longitude.
        bounds: ``[[south, west], [north, east]]``.

    Returns:
        True if the coordinate is inside the box (edges included).
    """
    (south, west), (north, east) = bounds
    return south <= lat <= north and west <= lon <= east
