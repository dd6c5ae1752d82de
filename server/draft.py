"""
Draft editing API routes.

This module contains the endpoints behind the "add marker" flow and the
edit form: placement mode, map clicks, form fields, opening-hours rows,
save and cancel.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-02-09
"""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import BaseModel

from logic.config import load_config
from logic.exceptions import ValidationError
from logic.registry import LocationRegistry
from logic.validation import is_within_bounds
from server.context import get_registry, raise_for_notice

router = APIRouter()


class MapClick(BaseModel):
    """Request model for a click on the map."""

    lat: float
    lon: float


class ScheduleUpdate(BaseModel):
    """Request model for editing one opening-hours row."""

    field: str
    value: str = ""


@router.get("/api/draft")
async def get_draft(registry: LocationRegistry = Depends(get_registry)):
    """Get the draft location shown in the form."""
    return registry.state.draft.model_dump(by_alias=True)


@router.post("/api/draft/placement")
async def toggle_placement(registry: LocationRegistry = Depends(get_registry)):
    """Enter placement mode, or leave it if it is already on.

    Returns:
        Dictionary with the new placement mode.
    """
    return {"placing": registry.begin_placement()}


@router.post("/api/map/click")
async def map_click(click: MapClick, registry: LocationRegistry = Depends(get_registry)):
    """Handle a click on the map.

    Clicks outside the map's bounding box are rejected; clicks outside
    placement mode are ignored.

    Args:
        click: Clicked coordinate.

    Returns:
        Dictionary telling whether the click placed the draft.

    Raises:
        HTTPException: If the click is outside the map bounds.
    """
    config = load_config()
    if not is_within_bounds(click.lat, click.lon, config["max_bounds"]):
        raise HTTPException(400, "Coordinate outside map bounds")

    placed = registry.on_map_click(click.lat, click.lon)
    return {
        "placed": placed,
        "form_open": registry.state.form_open,
        "draft": registry.state.draft.model_dump(by_alias=True),
    }


@router.patch("/api/draft")
async def update_draft(payload: Dict[str, Any] = Body(...), registry: LocationRegistry = Depends(get_registry)):
    """Update form fields on the draft.

    Args:
        payload: Any of title, description, categoryId and info.

    Raises:
        HTTPException: If an illegal field is supplied.
    """
    try:
        registry.update_draft(payload)
    except ValidationError as e:
        raise HTTPException(400, str(e))
    return registry.state.draft.model_dump(by_alias=True)


@router.post("/api/draft/schedule")
async def add_schedule_entry(registry: LocationRegistry = Depends(get_registry)):
    """Append an empty opening-hours row (at most seven)."""
    added = registry.add_schedule_entry()
    return {"added": added, "schedule": _schedule(registry)}


@router.delete("/api/draft/schedule/{index}")
async def remove_schedule_entry(index: int, registry: LocationRegistry = Depends(get_registry)):
    """Remove an opening-hours row (at least one always remains)."""
    try:
        removed = registry.remove_schedule_entry(index)
    except IndexError as e:
        raise HTTPException(400, str(e))
    return {"removed": removed, "schedule": _schedule(registry)}


@router.patch("/api/draft/schedule/{index}")
async def update_schedule_entry(
        index: int, update: ScheduleUpdate, registry: LocationRegistry = Depends(get_registry)
):
    """Set ``from`` or ``to`` on one opening-hours row."""
    try:
        registry.update_schedule_entry(index, update.field, update.value)
    except (IndexError, ValidationError) as e:
        raise HTTPException(400, str(e))
    return {"schedule": _schedule(registry)}


@router.post("/api/draft/save")
async def save_draft(registry: LocationRegistry = Depends(get_registry)):
    """Save the draft as a new location or as changes to the edited one.

    Returns:
        Dictionary with success status and location count.

    Raises:
        HTTPException: 400 for a missing title or position, 409 while another
            save is in flight, 502 if the store rejected the write.
    """
    if not await registry.save():
        raise_for_notice(registry)

    return {"success": True, "location_count": len(registry.state.locations)}


@router.post("/api/draft/cancel")
async def cancel_draft(registry: LocationRegistry = Depends(get_registry)):
    """Discard the draft and close the form."""
    registry.cancel_edit()
    return {"success": True}


def _schedule(registry: LocationRegistry):
    return [entry.model_dump(by_alias=True) for entry in registry.state.draft.schedule]
