"""Form builder endpoints — forms, fields and pages of the caller's forms.

All endpoints require the ``X-User-ID`` header.  A form that belongs to
another user answers exactly like a missing one (404).
"""

import uuid

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from holoforms.auth_cache import AuthCache
from holoforms.constants import FIELD_TYPE_LABELS
from holoforms.models.field import FieldType
from holoforms.models.form import FormStatus
from holoforms.slugs import is_valid_slug
from holoforms_db.models.form import FormFieldRow, FormRow
from holoforms_db.repository import FormRepository, parse_uuid

from holoforms_server.dependencies import (
    get_auth_cache,
    get_db,
    get_owned_form,
    get_repository,
    get_user_id,
    owner_cache_key,
)
from holoforms_server.schemas import FieldOut, FormDetail, FormOut, FormSummary

router = APIRouter(tags=["forms"])


# ------------------------------------------------------------------
# Request models
# ------------------------------------------------------------------

class CreateFormRequest(BaseModel):
    """Body for POST /forms."""
    name: str = Field(min_length=1)
    description: str | None = None
    status: FormStatus = FormStatus.DRAFT
    slug: str | None = None


class UpdateFormRequest(BaseModel):
    """Body for PATCH /forms/{form_id}; only the fields sent are changed."""
    name: str | None = Field(None, min_length=1)
    description: str | None = None
    status: FormStatus | None = None
    slug: str | None = None


class FieldAttributes(BaseModel):
    required: bool = False
    options: list[str] | None = None
    allow_multiple: bool = False
    allow_attachments: bool = False
    include_other: bool = False
    require_yes_reason: bool = False
    require_no_reason: bool = False


class CreateFieldRequest(FieldAttributes):
    """Body for POST /forms/{form_id}/fields."""
    field_type: FieldType
    label: str
    display_order: int | None = None
    page_number: int | None = Field(None, ge=1)


class UpdateFieldRequest(BaseModel):
    """Body for PATCH /forms/{form_id}/fields/{field_id}."""
    field_type: FieldType | None = None
    label: str | None = None
    required: bool | None = None
    options: list[str] | None = None
    allow_multiple: bool | None = None
    allow_attachments: bool | None = None
    include_other: bool | None = None
    require_yes_reason: bool | None = None
    require_no_reason: bool | None = None
    display_order: int | None = None
    page_number: int | None = Field(None, ge=1)


class ReorderFieldsRequest(BaseModel):
    field_ids: list[uuid.UUID]


class FieldPosition(BaseModel):
    id: uuid.UUID
    display_order: int
    page_number: int = Field(ge=1)


class UpdatePositionsRequest(BaseModel):
    positions: list[FieldPosition]


class FieldTypeInfo(BaseModel):
    type: FieldType
    label: str


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _check_slug(slug: str | None) -> None:
    if slug is not None and not is_valid_slug(slug):
        raise ValueError(f"Invalid slug: {slug!r}")


async def _detail(db: AsyncSession, repo: FormRepository, form: FormRow) -> FormDetail:
    fields = await repo.list_fields(db, form.id)
    return FormDetail(
        **FormOut.model_validate(form).model_dump(),
        fields=[FieldOut.model_validate(f) for f in fields],
    )


async def _owned_field(
    db: AsyncSession, repo: FormRepository, form: FormRow, field_id: str
) -> FormFieldRow:
    field_uuid = parse_uuid(field_id)
    field = await repo.get_field(db, field_uuid) if field_uuid else None
    if field is None or field.form_id != form.id:
        raise ValueError(f"Field not found: {field_id}")
    return field


# ------------------------------------------------------------------
# Reference
# ------------------------------------------------------------------

@router.get("/field-types")
async def list_field_types() -> list[FieldTypeInfo]:
    """Field types available in the form builder with their display names."""
    return [
        FieldTypeInfo(type=FieldType(key), label=label)
        for key, label in FIELD_TYPE_LABELS.items()
    ]


# ------------------------------------------------------------------
# Forms
# ------------------------------------------------------------------

@router.get("/forms")
async def list_forms(
    status: FormStatus | None = Query(None),
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    repo: FormRepository = Depends(get_repository),
) -> list[FormSummary]:
    """List the caller's forms with response counts, newest first."""
    rows = await repo.list_forms(db, user_id, status=status)
    return [
        FormSummary(**FormOut.model_validate(form).model_dump(), response_count=count)
        for form, count in rows
    ]


@router.post("/forms", status_code=201)
async def create_form(
    body: CreateFormRequest,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    repo: FormRepository = Depends(get_repository),
) -> FormDetail:
    """Create a form.  A slug is generated from the name when none is given."""
    _check_slug(body.slug)
    form = await repo.create_form(
        db,
        user_id=user_id,
        name=body.name,
        description=body.description,
        status=body.status,
        slug=body.slug,
    )
    return FormDetail(**FormOut.model_validate(form).model_dump(), fields=[])


@router.get("/forms/{form_id}")
async def get_form(
    form: FormRow = Depends(get_owned_form),
    db: AsyncSession = Depends(get_db),
    repo: FormRepository = Depends(get_repository),
) -> FormDetail:
    """Get a form with its fields in page/display order."""
    return await _detail(db, repo, form)


@router.patch("/forms/{form_id}")
async def update_form(
    body: UpdateFormRequest,
    form: FormRow = Depends(get_owned_form),
    db: AsyncSession = Depends(get_db),
    repo: FormRepository = Depends(get_repository),
) -> FormDetail:
    changes = body.model_dump(exclude_unset=True)
    # name and status are NOT NULL; an explicit null leaves them unchanged
    for key in ("name", "status"):
        if key in changes and changes[key] is None:
            del changes[key]
    _check_slug(changes.get("slug"))
    await repo.update_form(db, form, changes)
    return await _detail(db, repo, form)


@router.delete("/forms/{form_id}", status_code=204)
async def delete_form(
    form: FormRow = Depends(get_owned_form),
    db: AsyncSession = Depends(get_db),
    repo: FormRepository = Depends(get_repository),
    cache: AuthCache = Depends(get_auth_cache),
) -> None:
    """Delete a form together with its fields and responses."""
    form_id = form.id
    await repo.delete_form(db, form)
    cache.invalidate(owner_cache_key(form_id))


@router.post("/forms/{form_id}/duplicate", status_code=201)
async def duplicate_form(
    form: FormRow = Depends(get_owned_form),
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    repo: FormRepository = Depends(get_repository),
) -> FormDetail:
    """Copy a form and its fields as a new draft named "<name> (Copy)"."""
    copy = await repo.duplicate_form(db, form, user_id=user_id)
    return await _detail(db, repo, copy)


# ------------------------------------------------------------------
# Fields
# ------------------------------------------------------------------

@router.post("/forms/{form_id}/fields", status_code=201)
async def create_field(
    body: CreateFieldRequest,
    form: FormRow = Depends(get_owned_form),
    db: AsyncSession = Depends(get_db),
    repo: FormRepository = Depends(get_repository),
) -> FieldOut:
    """Add a field; it goes to the end of the form on page 1 unless placed."""
    attrs = body.model_dump(
        exclude={"field_type", "label", "display_order", "page_number"}
    )
    field = await repo.create_field(
        db,
        form.id,
        field_type=body.field_type.value,
        label=body.label,
        display_order=body.display_order,
        page_number=body.page_number,
        **attrs,
    )
    return FieldOut.model_validate(field)


@router.patch("/forms/{form_id}/fields/{field_id}")
async def update_field(
    field_id: str,
    body: UpdateFieldRequest,
    form: FormRow = Depends(get_owned_form),
    db: AsyncSession = Depends(get_db),
    repo: FormRepository = Depends(get_repository),
) -> FieldOut:
    field = await _owned_field(db, repo, form, field_id)
    changes = body.model_dump(exclude_unset=True)
    if "field_type" in changes and changes["field_type"] is not None:
        changes["field_type"] = FieldType(changes["field_type"]).value
    await repo.update_field(db, field, changes)
    return FieldOut.model_validate(field)


@router.delete("/forms/{form_id}/fields/{field_id}", status_code=204)
async def delete_field(
    field_id: str,
    form: FormRow = Depends(get_owned_form),
    db: AsyncSession = Depends(get_db),
    repo: FormRepository = Depends(get_repository),
) -> None:
    field = await _owned_field(db, repo, form, field_id)
    await repo.delete_field(db, field)


@router.put("/forms/{form_id}/fields/order", status_code=204)
async def reorder_fields(
    body: ReorderFieldsRequest,
    form: FormRow = Depends(get_owned_form),
    db: AsyncSession = Depends(get_db),
    repo: FormRepository = Depends(get_repository),
) -> None:
    """Set display_order of the listed fields to their position in the list."""
    await repo.reorder_fields(db, form.id, body.field_ids)


@router.put("/forms/{form_id}/fields/positions", status_code=204)
async def update_field_positions(
    body: UpdatePositionsRequest,
    form: FormRow = Depends(get_owned_form),
    db: AsyncSession = Depends(get_db),
    repo: FormRepository = Depends(get_repository),
) -> None:
    """Move fields between pages and positions in one call."""
    await repo.update_field_positions(
        db, form.id, [p.model_dump() for p in body.positions],
    )


@router.delete("/forms/{form_id}/pages/{page_number}")
async def delete_page(
    page_number: int,
    form: FormRow = Depends(get_owned_form),
    db: AsyncSession = Depends(get_db),
    repo: FormRepository = Depends(get_repository),
) -> dict:
    """Delete every field on a page; later pages move up by one."""
    if page_number < 1:
        raise ValueError(f"Invalid page number: {page_number}")
    deleted = await repo.delete_page(db, form.id, page_number)
    return {"deleted": deleted}
