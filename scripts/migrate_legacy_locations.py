#!/usr/bin/env python3
"""Migration script to move early location documents to the category collection.

Early documents stored the category *name* (``"abrigo"``, ``"caps"``, ...) in
``categoria`` and the opening hours under ``hours``. This script points every
location at a document in the ``categorias`` collection (creating one with a
generated id when no category matches) and renames ``hours`` to ``horarios``.
"""

import json
import os
import sys
import uuid
from datetime import datetime
from typing import Any, Dict

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy.orm import sessionmaker  # noqa: E402

from database import CategoryDocument, LocationDocument, init_db, make_engine  # noqa: E402
from logic.config import DATABASE_URL, ensure_location_fields  # noqa: E402
from logic.render import category_label  # noqa: E402


def migrate_documents(session, backup_path: str = None) -> Dict[str, Any]:
    """Migrate every location document in the session's database.

    Args:
        session: SQLAlchemy session.
        backup_path: Where to write a JSON backup before changing anything.

    Returns:
        Summary with the number of migrated locations and created categories.
    """
    categories = session.query(CategoryDocument).all()
    locations = session.query(LocationDocument).all()

    if backup_path:
        with open(backup_path, "w", encoding="utf-8") as f:
            json.dump(
                {
                    "categorias": [c.to_dict() for c in categories],
                    "locais": [loc.to_dict() for loc in locations],
                },
                f,
                indent=2,
                ensure_ascii=False,
            )
        print(f"Backup created at {backup_path}")

    by_id = {c.id: c for c in categories}
    by_name = {str((c.data or {}).get("nome") or "").strip().lower(): c.id for c in categories}
    created = []
    migrated = 0

    for location in locations:
        document = dict(location.data or {})
        before = json.dumps(document, sort_keys=True)
        ensure_location_fields(document)

        legacy = document["categoria"]
        if not isinstance(legacy, str):
            legacy = str(legacy)
        if legacy and legacy not in by_id:
            category_id = by_name.get(legacy.strip().lower())
            if category_id is None:
                category_id = uuid.uuid4().hex
                category = CategoryDocument(
                    id=category_id,
                    data={"nome": category_label(legacy), "descricao": ""},
                )
                session.add(category)
                by_id[category_id] = category
                by_name[legacy.strip().lower()] = category_id
                created.append(category_id)
            document["categoria"] = category_id

        if json.dumps(document, sort_keys=True) != before:
            location.data = document
            migrated += 1

    session.commit()
    return {"migrated": migrated, "created_categories": created}


def main():
    """Main entry point for migration script."""
    url = sys.argv[1] if len(sys.argv) > 1 else DATABASE_URL
    print(f"Starting migration of {url}...")

    engine = make_engine(url)
    init_db(bind=engine)
    session = sessionmaker(bind=engine)()

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    try:
        summary = migrate_documents(session, backup_path=f"locais.backup_{timestamp}.json")
    finally:
        session.close()

    print("Migration completed successfully!")
    print(f"  - Migrated {summary['migrated']} location documents")
    print(f"  - Created {len(summary['created_categories'])} categories")


if __name__ == "__main__":
    main()
