"""holoforms_db — PostgreSQL persistence layer for forms and responses.

Provides the ORM models, the async engine factory, the repository used by
the HTTP server, and adapters implementing the form engine's FormSource
and ResponseSink interfaces.
"""

from holoforms_db.adapters import DatabaseFormSource, DatabaseResponseSink, form_from_rows
from holoforms_db.engine import dispose_engine, get_engine, get_session_factory, session_scope
from holoforms_db.models import FormFieldRow, FormResponseRow, FormRow
from holoforms_db.repository import FormRepository

__all__ = [
    "DatabaseFormSource",
    "DatabaseResponseSink",
    "FormFieldRow",
    "FormRepository",
    "FormResponseRow",
    "FormRow",
    "dispose_engine",
    "form_from_rows",
    "get_engine",
    "get_session_factory",
    "session_scope",
]
