"""
db/base.py

Declarative base for all SQLAlchemy models.

Tables owned by other systems (the surveillance warehouse, the identity
service's location tree) are mapped read-only and tagged with
``info={"managed": False}``. Migrations and the startup schema check only
consider managed tables.
"""

from typing import Any

from sqlalchemy import Table
from sqlalchemy.orm import DeclarativeBase

UNMANAGED = {"managed": False}


class Base(DeclarativeBase):
    """
    Project-wide declarative base.
    All models must inherit from this class.
    """

    type_annotation_map: dict[type, Any] = {}


def is_managed(table: Table) -> bool:
    return bool(table.info.get("managed", True))


def managed_tables() -> list[Table]:
    """Tables whose schema this service creates and migrates."""
    return [table for table in Base.metadata.sorted_tables if is_managed(table)]
