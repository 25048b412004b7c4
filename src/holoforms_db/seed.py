"""Import YAML form definitions into the database.

Usage::

    holoforms-seed forms/ --user-id owner-123
    holoforms-seed forms/feedback.yaml --user-id owner-123 --status published

Each definition becomes a new form owned by ``--user-id``.  The database
assigns fresh ids to the form and its fields; the YAML ids are only used
to report the mapping.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncSession

from holoforms.loader import load_form_definition, load_form_definitions
from holoforms.models.form import Form, FormStatus
from holoforms_db.engine import dispose_engine, session_scope
from holoforms_db.models.form import FormRow
from holoforms_db.repository import FormRepository

logger = logging.getLogger(__name__)


async def seed_form(
    db: AsyncSession,
    repo: FormRepository,
    form: Form,
    *,
    user_id: str,
    status: FormStatus | None = None,
) -> FormRow:
    """Insert one form definition with all its fields."""
    row = await repo.create_form(
        db,
        user_id=user_id,
        name=form.name,
        description=form.description,
        status=status or form.status,
        slug=form.slug,
    )
    for field in form.fields:
        created = await repo.create_field(
            db,
            row.id,
            field_type=field.type.value,
            label=field.label,
            display_order=field.display_order,
            page_number=field.page_number,
            required=field.required,
            options=list(field.options) or None,
            allow_multiple=field.allow_multiple,
            allow_attachments=field.allow_attachments,
            include_other=field.include_other,
            require_yes_reason=field.require_yes_reason,
            require_no_reason=field.require_no_reason,
        )
        logger.debug("  field %s -> %s", field.id, created.id)
    logger.info("Seeded form %r as %s (slug=%s)", form.name, row.id, row.slug)
    return row


async def _run(paths: list[Path], user_id: str, status: FormStatus | None) -> None:
    forms: list[Form] = []
    for path in paths:
        if path.is_dir():
            forms.extend(load_form_definitions(path))
        else:
            forms.append(load_form_definition(path))

    repo = FormRepository()
    try:
        async with session_scope() as db:
            for form in forms:
                await seed_form(db, repo, form, user_id=user_id, status=status)
    finally:
        await dispose_engine()


def cli(argv: list[str] | None = None) -> None:
    """Console-script entry point: ``holoforms-seed``."""
    parser = argparse.ArgumentParser(description="Import YAML form definitions")
    parser.add_argument("paths", nargs="+", type=Path, help="YAML files or directories")
    parser.add_argument("--user-id", required=True, help="owner of the imported forms")
    parser.add_argument(
        "--status",
        choices=[s.value for s in FormStatus],
        default=None,
        help="override the status given in the definitions",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    status = FormStatus(args.status) if args.status else None
    asyncio.run(_run(args.paths, args.user_id, status))
