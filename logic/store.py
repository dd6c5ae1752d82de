"""
Remote store adapters for categories and locations.

The registry talks to the document store only through :class:`RemoteStore`.
Documents are stored with the field names used by the original collections
(``nome``, ``descricao``, ``categoria``, ``latitude``, ``longitude``,
``horarios``, ``info``); adapters translate them to and from the records the
registry works with (``title``, ``description``, ``categoryId``, ``lat``,
``lon``, ``schedule``, ``info``).

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-02-09
"""

import asyncio
import copy
import itertools
import logging
import uuid
from contextlib import contextmanager
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from database import CategoryDocument, LocationDocument, SessionLocal
from logic.config import ensure_location_fields
from logic.exceptions import StoreUnavailable, StoreWriteError

logger = logging.getLogger(__name__)


# ============================================================
# Document mapping
# ============================================================


def category_from_document(document: Dict[str, Any]) -> Dict[str, Any]:
    """Convert a stored category document to a category record.

    Raises:
        ValueError: If the name or description is present but not text.
    """
    name = document.get("nome")
    description = document.get("descricao")
    for key, value in (("nome", name), ("descricao", description)):
        if value is not None and not isinstance(value, str):
            raise ValueError(f"{key} must be text, got {type(value).__name__}")

    return {
        "id": str(document["id"]),
        "name": name or str(document["id"]),
        "description": description or "",
    }


def record_from_document(document: Dict[str, Any]) -> Dict[str, Any]:
    """Convert a stored location document to a location record.

    Args:
        document: Document with its ``id`` and body fields.

    Returns:
        Record with id, title, description, categoryId, lat, lon, schedule
        and info.

    Raises:
        ValueError: If the coordinates are not numeric.
    """
    document = dict(document)
    ensure_location_fields(document)

    lat, lon = document["latitude"], document["longitude"]
    if lat is None or lon is None:
        raise ValueError("missing coordinates")

    schedule = []
    for entry in document["horarios"]:
        if not isinstance(entry, dict):
            continue
        schedule.append({"from": str(entry.get("from") or ""), "to": str(entry.get("to") or "")})

    return {
        "id": document["id"],
        "title": str(document["nome"]),
        "description": str(document["descricao"]),
        "categoryId": str(document["categoria"]),
        "lat": float(lat),
        "lon": float(lon),
        "schedule": schedule,
        "info": str(document["info"]),
    }


def document_from_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Convert location fields sent by the registry to a document body."""
    return {
        "nome": fields.get("title", ""),
        "descricao": fields.get("description", ""),
        "categoria": fields.get("categoryId", ""),
        "latitude": fields.get("lat"),
        "longitude": fields.get("lon"),
        "horarios": [dict(entry) for entry in fields.get("schedule") or []],
        "info": fields.get("info", ""),
    }


def categories_from_documents(documents: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Convert category documents to records, skipping malformed ones."""
    records = []
    for document in documents:
        try:
            records.append(category_from_document(document))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping malformed category document %s: %s", document.get("id"), e)
    return records


def records_from_documents(documents: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Convert documents to records, skipping malformed ones."""
    records = []
    for document in documents:
        try:
            records.append(record_from_document(document))
        except (TypeError, ValueError) as e:
            logger.warning("Skipping malformed location document %s: %s", document.get("id"), e)
    return records


# ============================================================
# Adapters
# ============================================================


class RemoteStore:
    """Interface of the document store used by the location registry.

    Every method is an independent coroutine; no ordering is guaranteed
    between concurrent calls.
    """

    async def list_categories(self) -> List[Dict[str, Any]]:
        """Return all categories as ``{id, name, description}`` records.

        Raises:
            StoreUnavailable: If the store cannot be read.
        """
        raise NotImplementedError

    async def list_locations(self) -> List[Dict[str, Any]]:
        """Return all locations as records.

        Raises:
            StoreUnavailable: If the store cannot be read.
        """
        raise NotImplementedError

    async def create_location(self, fields: Dict[str, Any]) -> str:
        """Persist a new location and return its generated id.

        Raises:
            StoreWriteError: If the write is not acknowledged.
        """
        raise NotImplementedError

    async def update_location(self, location_id: str, fields: Dict[str, Any]) -> None:
        """Overwrite the location with the given id.

        Raises:
            StoreWriteError: If the write fails or the id does not exist.
        """
        raise NotImplementedError

    async def delete_location(self, location_id: str) -> None:
        """Remove the location with the given id.

        Raises:
            StoreWriteError: If the delete fails or the id does not exist.
        """
        raise NotImplementedError


class MemoryDocumentStore(RemoteStore):
    """In-process document store.

    Used for local development (``STORE_BACKEND=memory``) and in tests.
    Generated ids are ``loc1``, ``loc2``, ... skipping ids already taken.
    """

    def __init__(
            self,
            categories: Optional[List[Dict[str, Any]]] = None,
            locations: Optional[List[Dict[str, Any]]] = None,
    ):
        self.categories: Dict[str, Dict[str, Any]] = {}
        self.locations: Dict[str, Dict[str, Any]] = {}
        self._counter = itertools.count(1)

        for category in categories or []:
            self.categories[category["id"]] = {
                "nome": category.get("name", category["id"]),
                "descricao": category.get("description", ""),
            }
        for record in locations or []:
            self.locations[record["id"]] = document_from_fields(record)

    def _next_id(self) -> str:
        while True:
            candidate = f"loc{next(self._counter)}"
            if candidate not in self.locations:
                return candidate

    async def list_categories(self) -> List[Dict[str, Any]]:
        return categories_from_documents({"id": key, **doc} for key, doc in self.categories.items())

    async def list_locations(self) -> List[Dict[str, Any]]:
        return records_from_documents(
            {"id": key, **copy.deepcopy(doc)} for key, doc in self.locations.items()
        )

    async def create_location(self, fields: Dict[str, Any]) -> str:
        location_id = self._next_id()
        self.locations[location_id] = document_from_fields(fields)
        return location_id

    async def update_location(self, location_id: str, fields: Dict[str, Any]) -> None:
        if location_id not in self.locations:
            raise StoreWriteError(f"Location '{location_id}' not found")
        self.locations[location_id] = document_from_fields(fields)

    async def delete_location(self, location_id: str) -> None:
        if location_id not in self.locations:
            raise StoreWriteError(f"Location '{location_id}' not found")
        del self.locations[location_id]


class SqlDocumentStore(RemoteStore):
    """Document store backed by SQLAlchemy.

    Blocking session work runs in a worker thread so the event loop stays
    responsive while a call is in flight.

    Attributes:
        session_factory: Callable returning a new SQLAlchemy session.
    """

    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    @contextmanager
    def _session(self):
        """Context manager for database sessions.

        Yields:
            Session that is closed on exit.
        """
        session = self.session_factory()
        try:
            yield session
        finally:
            session.close()

    async def list_categories(self) -> List[Dict[str, Any]]:
        try:
            return await asyncio.to_thread(self._list_categories)
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Could not read categories: {e}") from e

    async def list_locations(self) -> List[Dict[str, Any]]:
        try:
            return await asyncio.to_thread(self._list_locations)
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Could not read locations: {e}") from e

    async def create_location(self, fields: Dict[str, Any]) -> str:
        try:
            return await asyncio.to_thread(self._create_location, fields)
        except SQLAlchemyError as e:
            raise StoreWriteError(f"Could not create location: {e}") from e

    async def update_location(self, location_id: str, fields: Dict[str, Any]) -> None:
        try:
            await asyncio.to_thread(self._update_location, location_id, fields)
        except SQLAlchemyError as e:
            raise StoreWriteError(f"Could not update location '{location_id}': {e}") from e

    async def delete_location(self, location_id: str) -> None:
        try:
            await asyncio.to_thread(self._delete_location, location_id)
        except SQLAlchemyError as e:
            raise StoreWriteError(f"Could not delete location '{location_id}': {e}") from e

    def _list_categories(self) -> List[Dict[str, Any]]:
        with self._session() as session:
            rows = session.query(CategoryDocument).order_by(CategoryDocument.created_at).all()
            return categories_from_documents(row.to_dict() for row in rows)

    def _list_locations(self) -> List[Dict[str, Any]]:
        with self._session() as session:
            rows = session.query(LocationDocument).order_by(LocationDocument.created_at).all()
            return records_from_documents(row.to_dict() for row in rows)

    def _create_location(self, fields: Dict[str, Any]) -> str:
        location_id = uuid.uuid4().hex
        with self._session() as session:
            session.add(LocationDocument(id=location_id, data=document_from_fields(fields)))
            session.commit()
        return location_id

    def _update_location(self, location_id: str, fields: Dict[str, Any]) -> None:
        with self._session() as session:
            row = session.get(LocationDocument, location_id)
            if row is None:
                raise StoreWriteError(f"Location '{location_id}' not found")
            row.data = document_from_fields(fields)
            session.commit()

    def _delete_location(self, location_id: str) -> None:
        with self._session() as session:
            row = session.get(LocationDocument, location_id)
            if row is None:
                raise StoreWriteError(f"Location '{location_id}' not found")
            session.delete(row)
            session.commit()
