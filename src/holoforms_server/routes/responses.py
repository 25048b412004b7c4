"""Response endpoints — list, delete and export the responses of a form.

Owner-only, like the form builder endpoints.
"""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from holoforms.export import responses_to_csv
from holoforms.slugs import slugify
from holoforms_db.adapters import form_from_rows
from holoforms_db.models.form import FormRow
from holoforms_db.repository import FormRepository, parse_uuid

from holoforms_server.config import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from holoforms_server.dependencies import get_db, get_owned_form, get_repository
from holoforms_server.schemas import ResponseOut, ResponsePage

router = APIRouter(tags=["responses"])


@router.get("/forms/{form_id}/responses")
async def list_responses(
    form: FormRow = Depends(get_owned_form),
    db: AsyncSession = Depends(get_db),
    repo: FormRepository = Depends(get_repository),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
) -> ResponsePage:
    """List responses of a form, newest first."""
    rows = await repo.list_responses(db, form.id, limit=limit, offset=offset)
    total = await repo.count_responses(db, form.id)
    return ResponsePage(
        total=total,
        items=[ResponseOut.model_validate(r) for r in rows],
    )


@router.get("/forms/{form_id}/responses/export")
async def export_responses(
    form: FormRow = Depends(get_owned_form),
    db: AsyncSession = Depends(get_db),
    repo: FormRepository = Depends(get_repository),
) -> Response:
    """Download every response of a form as CSV."""
    fields = await repo.list_fields(db, form.id)
    rows = await repo.list_responses(db, form.id, limit=None)
    body = responses_to_csv(
        form_from_rows(form, fields),
        [
            {
                "submitted_at": r.submitted_at,
                "submitted_by_name": r.submitted_by_name,
                "submitted_by_email": r.submitted_by_email,
                "response_data": r.response_data,
            }
            for r in rows
        ],
    )
    filename = f"{slugify(form.name) or 'form'}-responses.csv"
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.delete("/forms/{form_id}/responses/{response_id}", status_code=204)
async def delete_response(
    response_id: str,
    form: FormRow = Depends(get_owned_form),
    db: AsyncSession = Depends(get_db),
    repo: FormRepository = Depends(get_repository),
) -> None:
    response_uuid = parse_uuid(response_id)
    response = await repo.get_response(db, response_uuid) if response_uuid else None
    if response is None or response.form_id != form.id:
        raise ValueError(f"Response not found: {response_id}")
    await repo.delete_response(db, response)
