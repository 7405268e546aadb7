#!/usr/bin/env python3
"""Bring the database schema to the latest revision.

Databases created by seed_data.py (Base.metadata.create_all) have the tables
but no alembic_version row; those are stamped at the revision their tables
match first so `alembic upgrade head` does not try to create existing tables.
"""

from __future__ import annotations

import os
import subprocess
from typing import Optional

from sqlalchemy import inspect

from gearguard.database import engine


INITIAL_REVISION = os.getenv("ALEMBIC_INITIAL_REVISION", "001")
GEARGUARD_TABLES = ("equipment", "maintenance_teams", "maintenance_requests")
# Tables introduced after the initial revision, newest first.
LATER_TABLES = (("request_positions", "002"),)


def stamp_revision() -> Optional[str]:
    inspector = inspect(engine)
    if inspector.has_table("alembic_version"):
        return None
    if not all(inspector.has_table(table) for table in GEARGUARD_TABLES):
        return None
    for table, revision in LATER_TABLES:
        if inspector.has_table(table):
            return revision
    return INITIAL_REVISION


def main() -> int:
    revision = stamp_revision()
    if revision is not None:
        print(f"Schema created without migrations detected, stamping {revision}")
        subprocess.run(["alembic", "stamp", revision], check=True)

    subprocess.run(["alembic", "upgrade", "head"], check=True)
    print("Schema is up to date")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
