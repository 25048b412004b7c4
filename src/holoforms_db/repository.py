"""Async CRUD repository for forms, form fields and form responses.

All public methods accept an ``AsyncSession`` so the caller controls
transaction boundaries; methods ``flush()`` but never ``commit()``.

Ownership and business rules (who may edit a form, whether a form accepts
responses) belong to the callers.  The repository only keeps structural
invariants: field order within a form, dense page numbers after a page is
deleted, and cascade deletes.
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from holoforms.slugs import generate_slug
from holoforms_db.models.enums import FormStatus
from holoforms_db.models.form import FormFieldRow, FormResponseRow, FormRow

# Columns a caller may change through update_form / update_field
FORM_UPDATABLE = frozenset({"name", "description", "status", "slug"})
FIELD_UPDATABLE = frozenset({
    "field_type",
    "label",
    "required",
    "options",
    "allow_multiple",
    "allow_attachments",
    "include_other",
    "require_yes_reason",
    "require_no_reason",
    "display_order",
    "page_number",
})


def parse_uuid(value: str | uuid.UUID) -> uuid.UUID | None:
    """Return ``value`` as a UUID, or None if it is not one."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


class FormRepository:
    """Async read/write operations on ``forms``, ``form_fields`` and ``form_responses``."""

    # ------------------------------------------------------------------
    # Forms: read
    # ------------------------------------------------------------------

    async def list_forms(
        self,
        db: AsyncSession,
        user_id: str,
        *,
        status: FormStatus | str | None = None,
    ) -> list[tuple[FormRow, int]]:
        """List a user's forms with their response counts, newest first."""
        counts = (
            select(
                FormResponseRow.form_id,
                func.count(FormResponseRow.id).label("response_count"),
            )
            .group_by(FormResponseRow.form_id)
            .subquery()
        )
        stmt = (
            select(FormRow, func.coalesce(counts.c.response_count, 0))
            .outerjoin(counts, counts.c.form_id == FormRow.id)
            .where(FormRow.user_id == user_id)
            .order_by(FormRow.created_at.desc())
        )
        if status is not None:
            stmt = stmt.where(FormRow.status == FormStatus(status).value)
        result = await db.execute(stmt)
        return [(row, int(count)) for row, count in result.all()]

    async def get_form(self, db: AsyncSession, form_id: uuid.UUID) -> FormRow | None:
        return await db.get(FormRow, form_id)

    async def get_form_by_ref(self, db: AsyncSession, form_ref: str) -> FormRow | None:
        """Fetch a form by UUID string or by slug."""
        form_id = parse_uuid(form_ref)
        if form_id is not None:
            form = await db.get(FormRow, form_id)
            if form is not None:
                return form
        result = await db.execute(select(FormRow).where(FormRow.slug == form_ref))
        return result.scalar_one_or_none()

    async def list_fields(
        self, db: AsyncSession, form_id: uuid.UUID
    ) -> list[FormFieldRow]:
        """Fields of a form ordered by (page_number, display_order)."""
        stmt = (
            select(FormFieldRow)
            .where(FormFieldRow.form_id == form_id)
            .order_by(FormFieldRow.page_number, FormFieldRow.display_order)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Forms: write
    # ------------------------------------------------------------------

    async def create_form(
        self,
        db: AsyncSession,
        *,
        user_id: str,
        name: str,
        description: str | None = None,
        status: FormStatus | str = FormStatus.DRAFT,
        slug: str | None = None,
    ) -> FormRow:
        """Insert a new form; a slug is generated from the name if none is given."""
        form = FormRow(
            user_id=user_id,
            name=name,
            description=description,
            status=FormStatus(status).value,
            slug=slug or generate_slug(name),
        )
        db.add(form)
        await db.flush()
        return form

    async def update_form(
        self, db: AsyncSession, form: FormRow, changes: dict[str, Any]
    ) -> FormRow:
        """Apply ``changes`` (name, description, status, slug) to a form."""
        unknown = set(changes) - FORM_UPDATABLE
        if unknown:
            raise ValueError(f"Cannot update form columns: {', '.join(sorted(unknown))}")
        for key, value in changes.items():
            if key == "status":
                value = FormStatus(value).value
            setattr(form, key, value)
        form.updated_at = datetime.now(timezone.utc)
        await db.flush()
        return form

    async def delete_form(self, db: AsyncSession, form: FormRow) -> None:
        """Delete a form; fields and responses go with it (ON DELETE CASCADE)."""
        await db.delete(form)
        await db.flush()

    async def duplicate_form(
        self, db: AsyncSession, form: FormRow, *, user_id: str
    ) -> FormRow:
        """Copy a form and all its fields as a new draft named "<name> (Copy)"."""
        copy = await self.create_form(
            db,
            user_id=user_id,
            name=f"{form.name} (Copy)",
            description=form.description,
            status=FormStatus.DRAFT,
        )
        for field in await self.list_fields(db, form.id):
            db.add(FormFieldRow(
                form_id=copy.id,
                field_type=field.field_type,
                label=field.label,
                required=field.required,
                options=list(field.options) if field.options is not None else None,
                allow_multiple=field.allow_multiple,
                allow_attachments=field.allow_attachments,
                include_other=field.include_other,
                require_yes_reason=field.require_yes_reason,
                require_no_reason=field.require_no_reason,
                display_order=field.display_order,
                page_number=field.page_number,
            ))
        await db.flush()
        return copy

    # ------------------------------------------------------------------
    # Fields
    # ------------------------------------------------------------------

    async def get_field(
        self, db: AsyncSession, field_id: uuid.UUID
    ) -> FormFieldRow | None:
        return await db.get(FormFieldRow, field_id)

    async def next_display_order(self, db: AsyncSession, form_id: uuid.UUID) -> int:
        """One past the highest display_order of the form, or 0 if it has no fields."""
        stmt = select(func.max(FormFieldRow.display_order)).where(
            FormFieldRow.form_id == form_id
        )
        current = (await db.execute(stmt)).scalar()
        return 0 if current is None else int(current) + 1

    async def create_field(
        self,
        db: AsyncSession,
        form_id: uuid.UUID,
        *,
        field_type: str,
        label: str,
        display_order: int | None = None,
        page_number: int | None = None,
        **attrs: Any,
    ) -> FormFieldRow:
        """Append a field to a form.

        ``display_order`` defaults to the end of the form and
        ``page_number`` to 1.  Other keyword arguments set the boolean
        flags and options.
        """
        unknown = set(attrs) - FIELD_UPDATABLE
        if unknown:
            raise ValueError(f"Unknown field attributes: {', '.join(sorted(unknown))}")
        if display_order is None:
            display_order = await self.next_display_order(db, form_id)
        field = FormFieldRow(
            form_id=form_id,
            field_type=field_type,
            label=label,
            display_order=display_order,
            page_number=page_number or 1,
            **attrs,
        )
        db.add(field)
        await db.flush()
        return field

    async def update_field(
        self, db: AsyncSession, field: FormFieldRow, changes: dict[str, Any]
    ) -> FormFieldRow:
        unknown = set(changes) - FIELD_UPDATABLE
        if unknown:
            raise ValueError(f"Cannot update field columns: {', '.join(sorted(unknown))}")
        for key, value in changes.items():
            setattr(field, key, value)
        await db.flush()
        return field

    async def delete_field(self, db: AsyncSession, field: FormFieldRow) -> None:
        await db.delete(field)
        await db.flush()

    async def reorder_fields(
        self, db: AsyncSession, form_id: uuid.UUID, field_ids: list[uuid.UUID]
    ) -> None:
        """Set each field's display_order to its index in ``field_ids``."""
        for index, field_id in enumerate(field_ids):
            await db.execute(
                update(FormFieldRow)
                .where(FormFieldRow.id == field_id, FormFieldRow.form_id == form_id)
                .values(display_order=index)
            )
        await db.flush()

    async def update_field_positions(
        self,
        db: AsyncSession,
        form_id: uuid.UUID,
        positions: list[dict[str, Any]],
    ) -> None:
        """Bulk-move fields: each entry is ``{id, display_order, page_number}``."""
        for pos in positions:
            await db.execute(
                update(FormFieldRow)
                .where(FormFieldRow.id == pos["id"], FormFieldRow.form_id == form_id)
                .values(display_order=pos["display_order"], page_number=pos["page_number"])
            )
        await db.flush()

    async def delete_page(
        self, db: AsyncSession, form_id: uuid.UUID, page_number: int
    ) -> int:
        """Delete every field on a page and shift later pages down by one.

        Returns the number of deleted fields.
        """
        result = await db.execute(
            delete(FormFieldRow).where(
                FormFieldRow.form_id == form_id,
                FormFieldRow.page_number == page_number,
            )
        )
        await db.execute(
            update(FormFieldRow)
            .where(
                FormFieldRow.form_id == form_id,
                FormFieldRow.page_number > page_number,
            )
            .values(page_number=FormFieldRow.page_number - 1)
        )
        await db.flush()
        return result.rowcount or 0

    # ------------------------------------------------------------------
    # Responses
    # ------------------------------------------------------------------

    async def insert_response(
        self,
        db: AsyncSession,
        form_id: uuid.UUID,
        response_data: dict[str, Any],
        *,
        submitted_by_email: str | None = None,
        submitted_by_name: str | None = None,
        submitted_at: datetime | None = None,
    ) -> FormResponseRow:
        response = FormResponseRow(
            form_id=form_id,
            response_data=response_data,
            submitted_by_email=submitted_by_email or None,
            submitted_by_name=submitted_by_name or None,
        )
        if submitted_at is not None:
            response.submitted_at = submitted_at
        db.add(response)
        await db.flush()
        return response

    async def list_responses(
        self,
        db: AsyncSession,
        form_id: uuid.UUID,
        *,
        limit: int | None = 50,
        offset: int = 0,
    ) -> list[FormResponseRow]:
        """Responses of a form, newest first.  ``limit=None`` returns all."""
        stmt = (
            select(FormResponseRow)
            .where(FormResponseRow.form_id == form_id)
            .order_by(FormResponseRow.submitted_at.desc())
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def count_responses(self, db: AsyncSession, form_id: uuid.UUID) -> int:
        stmt = select(func.count(FormResponseRow.id)).where(
            FormResponseRow.form_id == form_id
        )
        return int((await db.execute(stmt)).scalar() or 0)

    async def get_response(
        self, db: AsyncSession, response_id: uuid.UUID
    ) -> FormResponseRow | None:
        return await db.get(FormResponseRow, response_id)

    async def delete_response(self, db: AsyncSession, response: FormResponseRow) -> None:
        await db.delete(response)
        await db.flush()
