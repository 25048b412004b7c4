"""Declarative base for the forms tables.

Unnamed primary keys, foreign keys and unique constraints are named the
way PostgreSQL names them on its own (``forms_pkey``,
``form_fields_form_id_fkey``, ``forms_slug_key``).  The hand-written
migrations leave those constraints unnamed, so both sides agree and
autogenerate does not report spurious renames.
"""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "pk": "%(table_name)s_pkey",
    "fk": "%(table_name)s_%(column_0_name)s_fkey",
    "uq": "%(table_name)s_%(column_0_name)s_key",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)
