"""Response bodies shared by the owner-side routes."""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from holoforms.models.field import FieldType
from holoforms.models.form import FormStatus


class FieldOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    form_id: uuid.UUID
    field_type: FieldType
    label: str
    required: bool
    options: list[str] | None = None
    allow_multiple: bool = False
    allow_attachments: bool = False
    include_other: bool = False
    require_yes_reason: bool = False
    require_no_reason: bool = False
    display_order: int
    page_number: int


class FormOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: str | None = None
    status: FormStatus
    slug: str | None = None
    created_at: datetime
    updated_at: datetime


class FormSummary(FormOut):
    response_count: int = 0


class FormDetail(FormOut):
    fields: list[FieldOut] = []


class ResponseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    form_id: uuid.UUID
    response_data: dict[str, Any]
    submitted_by_email: str | None = None
    submitted_by_name: str | None = None
    submitted_at: datetime


class ResponsePage(BaseModel):
    total: int
    items: list[ResponseOut]
