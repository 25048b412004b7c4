"""Public form endpoints — fetch a published form and submit a response.

No identity header is needed.  ``form_ref`` is either the form's UUID or
its slug.

Submissions are ``multipart/form-data``:

  - part ``payload``: JSON ``{answers, reasons, submitted_by_email,
    submitted_by_name}``
  - zero or more file parts named ``attachments.<field_id>``

The server rebuilds a ResponseState from the payload and runs the same
SubmissionPipeline an in-process FormSession uses, so validation and the
stored wire format are identical.
"""

import logging
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, ValidationError
from starlette.datastructures import UploadFile

from holoforms.constants import MAX_ATTACHMENT_BYTES, MAX_ATTACHMENTS_PER_FIELD
from holoforms.interfaces import FormSource
from holoforms.models.control import PageView
from holoforms.models.field import FormField
from holoforms.models.form import Form
from holoforms.models.session import PendingAttachment
from holoforms.renderer import render_page
from holoforms.state import ResponseState
from holoforms.submission import SubmissionPipeline

from holoforms_server.dependencies import get_form_source, get_submission_pipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/public", tags=["public"])

ATTACHMENT_PART_PREFIX = "attachments."


# ------------------------------------------------------------------
# Request / response models
# ------------------------------------------------------------------

class SubmitPayload(BaseModel):
    """JSON carried in the ``payload`` part of a submission."""
    answers: dict[str, str | list[str]] = {}
    reasons: dict[str, str] = {}
    submitted_by_email: str | None = None
    submitted_by_name: str | None = None


class PublicForm(BaseModel):
    id: str
    name: str
    description: str | None = None
    slug: str | None = None
    total_pages: int
    fields: list[FormField]
    pages: list[PageView]


class SubmitResult(BaseModel):
    response_id: str
    submitted_at: datetime


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def build_state(
    form: Form,
    payload: SubmitPayload,
    files: dict[str, list[PendingAttachment]],
) -> ResponseState:
    """Replay a submitted payload into a fresh ResponseState."""
    state = ResponseState(form)
    collecting = {f.id: f for f in form.collecting_fields}

    for field_id, value in payload.answers.items():
        field = collecting.get(field_id)
        if field is None:
            raise ValueError(f"Unknown field in answers: {field_id}")
        if field.allow_multiple and field.supports_multiple:
            rows = value if isinstance(value, list) else [value]
            state.set_multi_answers(field_id, rows)
        elif field.collects_list:
            state.set_answer(field_id, value if isinstance(value, list) else [value])
        elif isinstance(value, list):
            raise ValueError(f"Field {field_id} takes a single value")
        else:
            state.set_answer(field_id, value)

    for field_id, reason in payload.reasons.items():
        if field_id not in collecting:
            raise ValueError(f"Unknown field in reasons: {field_id}")
        state.set_yes_no_reason(field_id, reason)

    for field_id, attachments in files.items():
        field = collecting.get(field_id)
        if field is None or not field.allow_attachments:
            raise ValueError(f"Field {field_id} does not accept attachments")
        state.add_attachments(field_id, attachments)

    return state


async def _read_attachments(parts: list[tuple[str, Any]]) -> dict[str, list[PendingAttachment]]:
    files: dict[str, list[PendingAttachment]] = {}
    for name, part in parts:
        if not name.startswith(ATTACHMENT_PART_PREFIX) or not isinstance(part, UploadFile):
            continue
        field_id = name[len(ATTACHMENT_PART_PREFIX):]
        pending = files.setdefault(field_id, [])
        if len(pending) >= MAX_ATTACHMENTS_PER_FIELD:
            raise HTTPException(
                status_code=400,
                detail=f"At most {MAX_ATTACHMENTS_PER_FIELD} files per field",
            )
        content = await part.read()
        if len(content) > MAX_ATTACHMENT_BYTES:
            raise HTTPException(status_code=413, detail=f"{part.filename} is too large")
        pending.append(PendingAttachment(
            filename=part.filename or "upload",
            content=content,
            content_type=part.content_type or "application/octet-stream",
        ))
    return files


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.get("/forms/{form_ref}")
async def get_public_form(
    form_ref: str,
    source: FormSource = Depends(get_form_source),
) -> PublicForm:
    """Fetch a published form with every page rendered blank.

    404 if the form does not exist or is a draft, 410 if it is closed.
    """
    form = await source.get_published_form(form_ref)
    state = ResponseState(form)
    return PublicForm(
        id=form.id,
        name=form.name,
        description=form.description,
        slug=form.slug,
        total_pages=form.total_pages,
        fields=form.fields,
        pages=[render_page(form, state, page) for page in range(1, form.total_pages + 1)],
    )


@router.post("/forms/{form_ref}/responses", status_code=201)
async def submit_response(
    form_ref: str,
    request: Request,
    source: FormSource = Depends(get_form_source),
    pipeline: SubmissionPipeline = Depends(get_submission_pipeline),
) -> SubmitResult:
    """Validate and store one response.

    422 with per-field ``errors`` when validation fails, 502 when an
    attachment upload or the insert fails.
    """
    form = await source.get_published_form(form_ref)

    multipart = await request.form()
    try:
        raw_payload = multipart.get("payload")
        if not isinstance(raw_payload, str):
            raise HTTPException(status_code=400, detail="Missing payload part")
        try:
            payload = SubmitPayload.model_validate_json(raw_payload)
        except ValidationError as exc:
            logger.warning("Malformed submission payload for %s: %s", form_ref, exc)
            raise HTTPException(status_code=400, detail="Malformed payload") from exc

        files = await _read_attachments(list(multipart.multi_items()))
    finally:
        await multipart.close()

    state = build_state(form, payload, files)
    receipt = await pipeline.run(
        form,
        state,
        submitted_by_email=payload.submitted_by_email,
        submitted_by_name=payload.submitted_by_name,
    )
    return SubmitResult(response_id=receipt.response_id, submitted_at=receipt.submitted_at)
