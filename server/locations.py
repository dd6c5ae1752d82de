"""
Location API routes.

This module contains the endpoints for listing the visible markers, opening
an existing location in the edit form, and the two-step delete flow.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-02-09
"""

from fastapi import APIRouter, Depends, HTTPException

from logic.exceptions import LocationNotFound
from logic.registry import LocationRegistry
from logic.render import render_markers
from server.context import get_registry, raise_for_notice

router = APIRouter()


@router.get("/api/locations")
async def get_locations(registry: LocationRegistry = Depends(get_registry)):
    """List markers for every location whose category filter is on.

    Returns:
        List of marker payloads in registry order.
    """
    return render_markers(registry.visible_locations(), registry.state.categories)


@router.get("/api/state")
async def get_state(registry: LocationRegistry = Depends(get_registry)):
    """Get a snapshot of the registry's view state."""
    return registry.snapshot()


@router.post("/api/locations/{location_id}/edit")
async def edit_location(location_id: str, registry: LocationRegistry = Depends(get_registry)):
    """Open an existing location in the edit form.

    Raises:
        HTTPException: If the location does not exist.
    """
    try:
        registry.begin_edit(location_id)
    except LocationNotFound as e:
        raise HTTPException(404, str(e))
    return registry.state.draft.model_dump(by_alias=True)


@router.post("/api/locations/{location_id}/delete")
async def request_delete(location_id: str, registry: LocationRegistry = Depends(get_registry)):
    """Stage a location for deletion; nothing is removed until confirmed.

    Raises:
        HTTPException: If the location does not exist.
    """
    try:
        registry.request_delete(location_id)
    except LocationNotFound as e:
        raise HTTPException(404, str(e))
    return {"pending_deletion": location_id}


@router.post("/api/deletion/confirm")
async def confirm_delete(registry: LocationRegistry = Depends(get_registry)):
    """Delete the staged location.

    Raises:
        HTTPException: 400 if nothing is staged, 409 while another delete is
            in flight, 502 if the store rejected the delete.
    """
    location_id = registry.state.pending_deletion
    if location_id is None:
        raise HTTPException(400, "No location pending deletion")

    if not await registry.confirm_delete():
        raise_for_notice(registry)

    return {"success": True, "id": location_id}


@router.post("/api/deletion/cancel")
async def cancel_delete(registry: LocationRegistry = Depends(get_registry)):
    """Clear the staged deletion."""
    registry.cancel_delete()
    return {"success": True}
