"""
Marker and popup rendering for the map view.

This module turns registry locations into the payloads the browser map
draws: one marker per visible location with its popup text, plus display
labels for the category filter checkboxes.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-02-09
"""

import re
from typing import Any, Dict, Iterable, List, Optional

from logic.models import Category, Location, ScheduleEntry


def category_label(category_id: str, categories: Optional[Iterable[Category]] = None) -> str:
    """Get the display label for a category.

    Uses the category's name when it is known; otherwise the id is
    capitalised and camelCase words are split (``centroDeAjuda`` ->
    ``Centro De Ajuda``).

    Args:
        category_id: Category id.
        categories: Known categories.

    Returns:
        Label string.
    """
    for category in categories or []:
        if category.id == category_id and category.name:
            return category.name

    if not category_id:
        return ""
    spaced = re.sub(r"([A-Z])", r" \1", category_id[1:])
    return category_id[0].upper() + spaced


def format_schedule(schedule: List[ScheduleEntry]) -> str:
    """Format opening hours for a popup, e.g. ``08:00 - 12:00, 13:00 - 17:00``."""
    return ", ".join(f"{entry.from_} - {entry.to}" for entry in schedule)


def render_marker(location: Location, categories: Optional[Iterable[Category]] = None) -> Dict[str, Any]:
    """Build the marker payload for one location.

    Args:
        location: Location to draw.
        categories: Known categories, used for the category label.

    Returns:
        Dictionary with id, position, category and popup fields.
    """
    lat, lon = location.position if location.position is not None else (None, None)
    return {
        "id": location.id,
        "lat": lat,
        "lon": lon,
        "categoryId": location.category_id,
        "category": category_label(location.category_id, categories),
        "popup": {
            "title": location.title,
            "description": location.description,
            "schedule": format_schedule(location.schedule),
            "info": location.info,
        },
    }


def render_markers(locations: Iterable[Location], categories: Optional[List[Category]] = None) -> List[Dict[str, Any]]:
    """Build marker payloads for every location, preserving order."""
    return [render_marker(location, categories) for location in locations]
