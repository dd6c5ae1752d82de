"""
Data models for categories, locations and schedule entries.

Field aliases follow the JSON shape used by the Map View and the store
adapter (``categoryId``, ``from``), while Python code uses snake_case names.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-02-09
"""

from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class Category(BaseModel):
    """A category of points of interest (shelter, food, ...)."""

    id: str
    name: str = ""
    description: str = ""


class ScheduleEntry(BaseModel):
    """One opening-hours row, e.g. ``08:00`` to ``12:00``."""

    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field("", alias="from")
    to: str = ""


class Location(BaseModel):
    """A point of interest on the map.

    Attributes:
        id: Store-assigned identifier, None until the location is persisted.
        position: (latitude, longitude) pair, None until placed on the map.
        title: Display name.
        description: Free-text description.
        category_id: Id of the Category this location belongs to.
        schedule: Opening hours, one entry per shift.
        info: Additional information.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    position: Optional[Tuple[float, float]] = None
    title: str = ""
    description: str = ""
    category_id: str = Field("", alias="categoryId")
    schedule: List[ScheduleEntry] = Field(default_factory=list)
    info: str = ""

    def to_fields(self) -> Dict[str, Any]:
        """Build the field set sent to the store on create or update."""
        lat, lon = self.position if self.position is not None else (None, None)
        return {
            "title": self.title,
            "description": self.description,
            "categoryId": self.category_id,
            "lat": lat,
            "lon": lon,
            "schedule": [entry.model_dump(by_alias=True) for entry in self.schedule],
            "info": self.info,
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Location":
        """Build a location from a store record.

        Args:
            record: Dictionary with id, title, description, categoryId, lat,
                lon, schedule and info keys.

        Returns:
            Location instance.
        """
        lat = record.get("lat")
        lon = record.get("lon")
        position = (lat, lon) if lat is not None and lon is not None else None
        return cls(
            id=record.get("id"),
            position=position,
            title=record.get("title") or "",
            description=record.get("description") or "",
            category_id=record.get("categoryId") or "",
            schedule=[ScheduleEntry(**entry) for entry in record.get("schedule") or []],
            info=record.get("info") or "",
        )


class Notice(BaseModel):
    """User-visible outcome of a failed (or informative) operation."""

    kind: str
    message: str
