"""
Location registry.

This module owns the in-memory list of categories and locations, the
category filters, the draft being edited in the form and the location
waiting for delete confirmation. Every change that has to be persisted goes
through the remote store first; local state is only patched once the store
has acknowledged the write.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-02-09
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from logic.exceptions import (
    LocationNotFound,
    MutationInFlight,
    StoreUnavailable,
    StoreWriteError,
    ValidationError,
)
from logic.models import Category, Location, Notice, ScheduleEntry
from logic.store import RemoteStore
from logic.validation import (
    MAX_SCHEDULE_ENTRIES,
    MIN_SCHEDULE_ENTRIES,
    check_schedule_field,
    sanitise_draft_fields,
    validate_draft,
)

logger = logging.getLogger(__name__)

SAVE_FAILED_MESSAGE = "Erro ao salvar marcador. Tente novamente."
DELETE_FAILED_MESSAGE = "Erro ao excluir marcador. Tente novamente."
LOAD_FAILED_MESSAGE = "Não foi possível carregar os dados do mapa."
BUSY_MESSAGE = "Aguarde a conclusão da operação anterior."


@dataclass
class RegistryState:
    """Mutable view state owned by a :class:`LocationRegistry`.

    Attributes:
        categories: Categories loaded from the store.
        locations: Locations loaded from (or acknowledged by) the store.
        filters: Category id to visibility.
        draft: Location being created or edited in the form.
        editing_target: Id of the persisted location the draft was copied from.
        pending_deletion: Id of the location awaiting delete confirmation.
        placing: True while the next map click places the draft.
        form_open: True while the edit form is shown.
        filters_visible: True while the filter panel is shown.
        saving: True while a save is waiting for the store.
        deleting: True while a delete is waiting for the store.
        draft_generation: Incremented each time a new draft replaces the old one.
        notice: Last message to show to the user.
    """

    categories: List[Category] = field(default_factory=list)
    locations: List[Location] = field(default_factory=list)
    filters: Dict[str, bool] = field(default_factory=dict)
    draft: Location = field(default_factory=Location)
    editing_target: Optional[str] = None
    pending_deletion: Optional[str] = None
    placing: bool = False
    form_open: bool = False
    filters_visible: bool = True
    saving: bool = False
    deleting: bool = False
    draft_generation: int = 0
    notice: Optional[Notice] = None


class LocationRegistry:
    """Single source of truth for the map's locations, filters and draft.

    Args:
        store: Remote store adapter used for every read and write.
    """

    def __init__(self, store: RemoteStore):
        self.store = store
        self.state = RegistryState()

    # ============================================================
    # Loading
    # ============================================================

    async def load(self):
        """Load categories and locations concurrently."""
        await asyncio.gather(self.load_categories(), self.load_locations())

    async def load_categories(self):
        """Replace the categories and reset every filter to visible.

        The draft's category is only filled in when it is still empty, so a
        category the user already picked is never overwritten.
        """
        try:
            records = await self.store.list_categories()
        except StoreUnavailable as e:
            logger.error("Failed to load categories: %s", e)
            records = []
            self.state.notice = Notice(kind="unavailable", message=LOAD_FAILED_MESSAGE)

        categories = [Category(**record) for record in records]
        self.state.categories = categories
        self.state.filters = {category.id: True for category in categories}

        if not self.state.draft.category_id:
            self.state.draft.category_id = self._default_category_id()

    async def load_locations(self):
        """Replace the location list with the store's contents."""
        try:
            records = await self.store.list_locations()
        except StoreUnavailable as e:
            logger.error("Failed to load locations: %s", e)
            records = []
            self.state.notice = Notice(kind="unavailable", message=LOAD_FAILED_MESSAGE)

        self.state.locations = [Location.from_record(record) for record in records]

    # ============================================================
    # Filters
    # ============================================================

    def set_filter(self, category_id: str, visible: bool):
        self.state.filters[category_id] = visible

    def toggle_filter(self, category_id: str) -> bool:
        """Flip one category's visibility.

        Returns:
            The new visibility.
        """
        visible = not self.state.filters.get(category_id, False)
        self.state.filters[category_id] = visible
        return visible

    def toggle_filter_panel(self) -> bool:
        self.state.filters_visible = not self.state.filters_visible
        return self.state.filters_visible

    def visible_locations(self) -> Iterator[Location]:
        """Yield the locations whose category filter is on.

        A location whose category has no filter entry is hidden.
        """
        filters = self.state.filters
        return (location for location in self.state.locations if filters.get(location.category_id, False))

    # ============================================================
    # Draft editing
    # ============================================================

    def begin_placement(self) -> bool:
        """Toggle placement mode.

        Entering placement mode starts a fresh draft; calling it again before
        the map is clicked cancels placement and discards that draft.

        Returns:
            True if placement mode is now on.
        """
        if self.state.placing:
            self.cancel_edit()
            return False

        self.state.draft = self._fresh_draft()
        self.state.draft_generation += 1
        self.state.editing_target = None
        self.state.form_open = False
        self.state.placing = True
        return True

    def on_map_click(self, lat: float, lon: float) -> bool:
        """Place the draft at the clicked coordinate.

        Returns:
            False if the click was ignored because placement mode is off.
        """
        if not self.state.placing:
            return False

        self.state.draft.position = (lat, lon)
        self.state.form_open = True
        self.state.placing = False
        return True

    def begin_edit(self, location_id: str):
        """Copy a persisted location into the draft and open the form.

        Raises:
            LocationNotFound: If no location has the given id.
        """
        location = self._find(location_id)
        draft = location.model_copy(deep=True)
        if not draft.schedule:
            draft.schedule = [ScheduleEntry()]

        self.state.draft = draft
        self.state.draft_generation += 1
        self.state.editing_target = location_id
        self.state.form_open = True
        self.state.placing = False

    def update_draft(self, fields: Optional[Dict[str, Any]] = None, **kwargs: Any):
        """Set form fields (title, description, category_id, info) on the draft.

        Fields may be passed as a dictionary (as received from the form) or
        as keyword arguments.

        Raises:
            ValidationError: If an unknown field is supplied.
        """
        for key, value in sanitise_draft_fields({**(fields or {}), **kwargs}).items():
            setattr(self.state.draft, key, value)

    def cancel_edit(self):
        self.state.draft = self._empty_draft()
        self.state.draft_generation += 1
        self.state.form_open = False
        self.state.placing = False
        self.state.editing_target = None

    def add_schedule_entry(self) -> bool:
        schedule = self.state.draft.schedule
        if len(schedule) >= MAX_SCHEDULE_ENTRIES:
            return False
        schedule.append(ScheduleEntry())
        return True

    def remove_schedule_entry(self, index: int) -> bool:
        """Remove one schedule row; at least one row always remains.

        Raises:
            IndexError: If the index is out of range.
        """
        schedule = self.state.draft.schedule
        if not 0 <= index < len(schedule):
            raise IndexError(f"Schedule entry {index} out of range")
        if len(schedule) <= MIN_SCHEDULE_ENTRIES:
            return False
        del schedule[index]
        return True

    def update_schedule_entry(self, index: int, field_name: str, value: str):
        """Set ``from`` or ``to`` on one schedule row.

        Raises:
            ValidationError: If the field is not ``from`` or ``to``.
            IndexError: If the index is out of range.
        """
        attribute = check_schedule_field(field_name)
        schedule = self.state.draft.schedule
        if not 0 <= index < len(schedule):
            raise IndexError(f"Schedule entry {index} out of range")
        setattr(schedule[index], attribute, value or "")

    # ============================================================
    # Persistence
    # ============================================================

    async def save(self) -> bool:
        """Persist the draft.

        Creates a new location when no editing target is set, otherwise
        updates the target. Local state changes only after the store
        acknowledges the write; on failure the form stays open.

        Returns:
            True if the draft was saved, False if a notice was set instead.
        """
        try:
            validate_draft(self.state.draft)
            self._start("saving")
        except ValidationError as e:
            self.state.notice = Notice(kind="validation", message=str(e))
            return False
        except MutationInFlight:
            self.state.notice = Notice(kind="busy", message=BUSY_MESSAGE)
            return False

        draft = self.state.draft.model_copy(deep=True)
        target = self.state.editing_target
        fields = draft.to_fields()
        generation = self.state.draft_generation

        try:
            if target is not None:
                await self.store.update_location(target, fields)
                self._replace(target, draft)
                logger.info("Updated location %s", target)
            else:
                new_id = await self.store.create_location(fields)
                self.state.locations.append(draft.model_copy(update={"id": new_id}))
                logger.info("Created location %s", new_id)
        except StoreWriteError as e:
            logger.error("Failed to save location: %s", e)
            self.state.notice = Notice(kind="write", message=SAVE_FAILED_MESSAGE)
            return False
        finally:
            self.state.saving = False

        self.state.notice = None
        # A draft started while the write was pending is left alone
        if self.state.draft_generation == generation:
            self.cancel_edit()
        return True

    def request_delete(self, location_id: str):
        """Stage a location for deletion until the user confirms.

        Raises:
            LocationNotFound: If no location has the given id.
        """
        self._find(location_id)
        self.state.pending_deletion = location_id

    async def confirm_delete(self) -> bool:
        """Delete the staged location.

        On failure the location list and the staged id are kept so the user
        can retry.

        Returns:
            True if the location was deleted.
        """
        location_id = self.state.pending_deletion
        if location_id is None:
            return False

        try:
            self._start("deleting")
        except MutationInFlight:
            self.state.notice = Notice(kind="busy", message=BUSY_MESSAGE)
            return False

        try:
            await self.store.delete_location(location_id)
        except StoreWriteError as e:
            logger.error("Failed to delete location %s: %s", location_id, e)
            self.state.notice = Notice(kind="write", message=DELETE_FAILED_MESSAGE)
            return False
        finally:
            self.state.deleting = False

        self.state.locations = [loc for loc in self.state.locations if loc.id != location_id]
        if self.state.pending_deletion == location_id:
            self.state.pending_deletion = None
        self.state.notice = None
        logger.info("Deleted location %s", location_id)
        return True

    def cancel_delete(self):
        self.state.pending_deletion = None

    # ============================================================
    # Views
    # ============================================================

    def snapshot(self) -> Dict[str, Any]:
        """Return a JSON-ready copy of the registry state.

        Returns:
            Dictionary with the draft, modes, filters and last notice.
        """
        state = self.state
        return {
            "draft": state.draft.model_dump(by_alias=True),
            "editing_target": state.editing_target,
            "pending_deletion": state.pending_deletion,
            "placing": state.placing,
            "form_open": state.form_open,
            "filters_visible": state.filters_visible,
            "filters": dict(state.filters),
            "saving": state.saving,
            "deleting": state.deleting,
            "notice": state.notice.model_dump() if state.notice else None,
            "location_count": len(state.locations),
            "category_count": len(state.categories),
        }

    # ============================================================
    # Helpers
    # ============================================================

    def _start(self, flag: str):
        if getattr(self.state, flag):
            raise MutationInFlight(flag)
        setattr(self.state, flag, True)

    def _find(self, location_id: str) -> Location:
        location = next((loc for loc in self.state.locations if loc.id == location_id), None)
        if location is None:
            raise LocationNotFound(location_id)
        return location

    def _replace(self, location_id: str, draft: Location):
        for index, location in enumerate(self.state.locations):
            if location.id == location_id:
                self.state.locations[index] = draft.model_copy(update={"id": location_id})
                return

    def _default_category_id(self) -> str:
        return self.state.categories[0].id if self.state.categories else ""

    def _empty_draft(self) -> Location:
        return Location(category_id=self._default_category_id())

    def _fresh_draft(self) -> Location:
        return Location(category_id=self._default_category_id(), schedule=[ScheduleEntry()])
