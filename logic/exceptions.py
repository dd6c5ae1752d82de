"""
Exception hierarchy for the Mapa Solidário application.

All application errors inherit from :class:`MapaError`, so callers can catch
any of them with a single ``except`` clause while the registry still tells
read failures, write failures and invalid drafts apart.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-02-09
"""


class MapaError(Exception):
    """Base exception for all Mapa Solidário errors."""


class StoreUnavailable(MapaError):
    """Raised when the document store cannot be read."""


class StoreWriteError(MapaError):
    """Raised when a create, update or delete is not acknowledged by the store."""


class ValidationError(MapaError):
    """Raised when a draft or a form field is rejected before any store call."""


class LocationNotFound(MapaError):
    """Raised when an operation names a location that is not in the registry.

    Attributes:
        location_id: The id that could not be found.
    """

    def __init__(self, location_id: str):
        self.location_id = location_id
        super().__init__(f"Location '{location_id}' not found")


class MutationInFlight(MapaError):
    """Raised when a save or delete is attempted while another is pending."""
