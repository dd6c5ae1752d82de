"""Database setup and document models for the location store.

This module provides the database connection, the two document collections
(categories and locations) and utilities for creating the schema, using
SQLAlchemy. Each row holds one JSON document keyed by a string id.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import create_engine, Column, String, DateTime, JSON
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from logic.config import DATABASE_URL

Base = declarative_base()


def make_engine(url: str = DATABASE_URL) -> Engine:
    """Create an engine for the given database URL.

    Args:
        url: SQLAlchemy database URL.

    Returns:
        Engine instance.
    """
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args)


engine = make_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class CategoryDocument(Base):
    """Category document (collection ``categorias``).

    Attributes:
        id: Document key.
        data: Document body with ``nome`` and ``descricao``.
        created_at: When the document was written.
    """

    __tablename__ = "categorias"

    id = Column(String(64), primary_key=True, index=True)
    data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the category document to a dictionary.

        Returns:
            Dictionary with the document id and body fields.
        """
        return {"id": self.id, **(self.data or {})}


class LocationDocument(Base):
    """Location document (collection ``locais``).

    Attributes:
        id: Document key.
        data: Document body with ``nome``, ``descricao``, ``categoria``,
            ``latitude``, ``longitude``, ``horarios`` and ``info``.
        created_at: When the document was first written.
        updated_at: When the document was last written.
    """

    __tablename__ = "locais"

    id = Column(String(64), primary_key=True, index=True)
    data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the location document to a dictionary.

        Returns:
            Dictionary with the document id and body fields.
        """
        return {"id": self.id, **(self.data or {})}


def init_db(bind: Optional[Engine] = None, default_categories: Optional[List[Dict[str, Any]]] = None):
    """Initialize the database by creating all tables.

    When ``default_categories`` is given and the category collection is
    empty, it is seeded with those categories.

    Args:
        bind: Engine to initialise (defaults to the module engine).
        default_categories: Category dictionaries with id, name and description.
    """
    bind = bind or engine
    Base.metadata.create_all(bind=bind)

    if not default_categories:
        return

    session = sessionmaker(bind=bind)()
    try:
        if session.query(CategoryDocument).count() == 0:
            now = datetime.utcnow()
            for index, category in enumerate(default_categories):
                session.add(
                    CategoryDocument(
                        id=category["id"],
                        created_at=now + timedelta(microseconds=index),
                        data={
                            "nome": category.get("name", category["id"]),
                            "descricao": category.get("description", ""),
                        },
                    )
                )
            session.commit()
    finally:
        session.close()
