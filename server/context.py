"""
Request context helpers.

This module provides the FastAPI dependency that hands the application's
location registry to route handlers, and the translation of registry
notices into HTTP errors.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-02-09
"""

from fastapi import HTTPException, Request

from logic.registry import LocationRegistry

NOTICE_STATUS = {
    "validation": 400,
    "busy": 409,
    "write": 502,
    "unavailable": 503,
}


def get_registry(request: Request) -> LocationRegistry:
    """Get the location registry attached to the application.

    Args:
        request: FastAPI request object.

    Returns:
        The application's LocationRegistry.
    """
    return request.app.state.registry


def raise_for_notice(registry: LocationRegistry):
    """Raise the HTTP error matching the registry's last notice.

    Args:
        registry: Registry whose operation just failed.

    Raises:
        HTTPException: With the notice message as detail.
    """
    notice = registry.state.notice
    if notice is None:
        raise HTTPException(500, "Operation failed")
    raise HTTPException(NOTICE_STATUS.get(notice.kind, 400), notice.message)
