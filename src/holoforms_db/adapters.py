"""Database-backed implementations of the form engine's boundary interfaces.

Each call opens its own session from the async session factory and
commits on success, so the adapters can be handed to a ``FormSession`` or
``SubmissionPipeline`` that lives outside any request scope.
"""

import logging
from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from holoforms.errors import FormClosed, FormNotFound
from holoforms.interfaces import FormSource, ResponseSink
from holoforms.models.field import FormField
from holoforms.models.form import Form, FormStatus
from holoforms_db.engine import session_scope
from holoforms_db.models.form import FormFieldRow, FormRow
from holoforms_db.repository import FormRepository, parse_uuid

logger = logging.getLogger(__name__)


def field_from_row(row: FormFieldRow) -> FormField:
    return FormField(
        id=str(row.id),
        type=row.field_type,
        label=row.label,
        required=row.required,
        options=list(row.options or []),
        allow_multiple=row.allow_multiple,
        allow_attachments=row.allow_attachments,
        include_other=row.include_other,
        require_yes_reason=row.require_yes_reason,
        require_no_reason=row.require_no_reason,
        page_number=row.page_number,
        display_order=row.display_order,
    )


def form_from_rows(form: FormRow, fields: list[FormFieldRow]) -> Form:
    """Build the SDK ``Form`` from a form row and its field rows."""
    return Form(
        id=str(form.id),
        name=form.name,
        description=form.description,
        status=form.status,
        slug=form.slug,
        fields=[field_from_row(f) for f in fields],
    )


def ensure_fillable(form: FormRow) -> None:
    """Raise the terminal error for a form that cannot be filled in."""
    if form.status == FormStatus.CLOSED.value:
        raise FormClosed()
    if form.status != FormStatus.PUBLISHED.value:
        raise FormNotFound()


class DatabaseFormSource(FormSource):
    """Reads published forms from PostgreSQL."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        repo: FormRepository | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._repo = repo or FormRepository()

    async def get_published_form(self, form_ref: str) -> Form:
        async with self._session_factory() as db:
            row = await self._repo.get_form_by_ref(db, form_ref)
            if row is None:
                raise FormNotFound()
            ensure_fillable(row)
            fields = await self._repo.list_fields(db, row.id)
        return form_from_rows(row, fields)


class DatabaseResponseSink(ResponseSink):
    """Appends responses to the ``form_responses`` table."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        repo: FormRepository | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._repo = repo or FormRepository()

    async def insert_response(
        self,
        form_id: str,
        response_data: dict[str, Any],
        *,
        submitted_by_email: str | None = None,
        submitted_by_name: str | None = None,
        submitted_at: datetime | None = None,
    ) -> str:
        form_uuid = parse_uuid(form_id)
        if form_uuid is None:
            raise ValueError(f"Invalid form id: {form_id}")
        async with session_scope(self._session_factory) as db:
            row = await self._repo.insert_response(
                db,
                form_uuid,
                response_data,
                submitted_by_email=submitted_by_email,
                submitted_by_name=submitted_by_name,
                submitted_at=submitted_at,
            )
        logger.info("Inserted response %s for form %s", row.id, form_id)
        return str(row.id)
