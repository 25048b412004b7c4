"""Validator — checks committed answers against field rules.

Rules are applied in order to every collecting field; a later rule
overwrites the message of an earlier one, so each field reports at most
one error:

  1. required: empty string, ``None``, absent or ``[]`` fails
  2. email format: every non-empty value of an email field must look like
     ``local@domain.tld``
  3. conditional reason: a select answered "yes" / "no" (case-insensitive)
     with the matching ``require_*_reason`` flag needs a non-blank reason;
     an "Other" selection whose text happens to read "yes" is exempt

Display-only fields are never validated.  Nothing here mutates the state;
callers decide where to store the returned error map.
"""

from __future__ import annotations

import re
from typing import Any, Iterable

from holoforms.constants import (
    EMAIL_PATTERN,
    MSG_INVALID_EMAIL,
    MSG_REASON_REQUIRED,
    MSG_REQUIRED,
)
from holoforms.models.field import FieldType, FormField
from holoforms.models.form import Form
from holoforms.state import ResponseState

_EMAIL_RE = re.compile(EMAIL_PATTERN)


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, list):
        return len(value) == 0
    return False


def is_valid_email(value: str) -> bool:
    return bool(_EMAIL_RE.match(value))


def validate_field(field: FormField, state: ResponseState) -> str | None:
    """Return the error message for one field, or ``None`` if it passes."""
    if field.is_display_only:
        return None

    value = state.answers.get(field.id)
    error: str | None = None

    if field.required and _is_empty(value):
        error = MSG_REQUIRED

    if field.type == FieldType.EMAIL and not _is_empty(value):
        entries = value if isinstance(value, list) else [value]
        if any(not is_valid_email(str(entry)) for entry in entries):
            error = MSG_INVALID_EMAIL

    # Free text typed into "Other" is never the yes/no option itself
    if (
        isinstance(value, str)
        and value.strip().lower() in field.requires_reason_for
        and not state.other_selected(field.id)
    ):
        if not state.yes_no_reasons.get(field.id, "").strip():
            error = MSG_REASON_REQUIRED

    return error


def validate(fields: Iterable[FormField], state: ResponseState) -> dict[str, str]:
    """Validate ``fields`` and return ``{field_id: message}`` for failures."""
    errors: dict[str, str] = {}
    for field in fields:
        message = validate_field(field, state)
        if message is not None:
            errors[field.id] = message
    return errors


def validate_page(form: Form, state: ResponseState, page: int) -> dict[str, str]:
    """Validate only the fields whose ``page_number`` equals ``page``."""
    return validate(form.fields_on_page(page), state)


def validate_form(form: Form, state: ResponseState) -> dict[str, str]:
    """Validate every field of the form regardless of page."""
    return validate(form.fields, state)
