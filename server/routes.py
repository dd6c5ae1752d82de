"""
Basic API routes.

This module contains the endpoints that describe the map itself and the
categories and filters shown beside it.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-02-09
"""

import json
import os
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from logic.config import BASE_DIR, load_config
from logic.registry import LocationRegistry
from logic.render import category_label
from server.context import get_registry

router = APIRouter()

VERSION_PATH = os.path.join(BASE_DIR, "version.json")
DEFAULT_VERSION = "1.0.0"


class FilterUpdate(BaseModel):
    """Request model for changing one category filter."""

    visible: Optional[bool] = None


@router.get("/api/map")
def get_map():
    """Get the map settings.

    Returns:
        Dictionary with the title, center, zoom, bounding box, tile URL and
        attribution used by the map widget.
    """
    config = load_config()
    return {
        "title": config["title"],
        "center": config["center"],
        "zoom": config["zoom"],
        "max_bounds": config["max_bounds"],
        "tile_url": config["tile_url"],
        "attribution": config["attribution"],
    }


@router.get("/api/version")
def get_version():
    """Get the application version.

    Returns:
        Dictionary with version string.
    """
    try:
        with open(VERSION_PATH, "r", encoding="utf-8") as f:
            version_data = json.load(f)
        return version_data
    except (FileNotFoundError, json.JSONDecodeError, KeyError):
        return {"version": DEFAULT_VERSION}


@router.get("/api/categories")
async def get_categories(registry: LocationRegistry = Depends(get_registry)):
    """List the loaded categories with their display labels."""
    categories = registry.state.categories
    return [
        {
            "id": category.id,
            "name": category.name,
            "description": category.description,
            "label": category_label(category.id, categories),
        }
        for category in categories
    ]


@router.get("/api/filters")
async def get_filters(registry: LocationRegistry = Depends(get_registry)):
    """Get the category filters and whether the filter panel is shown."""
    return {
        "filters": dict(registry.state.filters),
        "filters_visible": registry.state.filters_visible,
    }


@router.post("/api/filters/panel/toggle")
async def toggle_filter_panel(registry: LocationRegistry = Depends(get_registry)):
    """Show or hide the filter panel."""
    return {"filters_visible": registry.toggle_filter_panel()}


@router.post("/api/filters/{category_id}")
async def update_filter(
        category_id: str,
        payload: Optional[FilterUpdate] = None,
        registry: LocationRegistry = Depends(get_registry),
):
    """Set or toggle one category filter.

    Args:
        category_id: Category whose visibility changes.
        payload: Optional body with ``visible``; the filter is toggled when
            it is omitted.

    Returns:
        Dictionary with the category id and its new visibility.
    """
    if payload is None or payload.visible is None:
        visible = registry.toggle_filter(category_id)
    else:
        registry.set_filter(category_id, payload.visible)
        visible = payload.visible

    return {"id": category_id, "visible": visible}
