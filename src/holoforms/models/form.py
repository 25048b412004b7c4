"""Form model — a named, ordered collection of fields grouped into pages.

Only ``published`` forms can be filled in.  ``closed`` forms are still
returned by the form source so that callers can tell "no longer accepting
responses" apart from "not found".

Page numbers are made dense when the form is constructed: a form whose
fields sit on pages 1 and 3 is loaded as pages 1 and 2, so the navigator
never lands on an empty page.
"""

from __future__ import annotations

import enum
import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator

from holoforms.models.field import FormField

logger = logging.getLogger(__name__)


class FormStatus(str, enum.Enum):
    """Lifecycle of a form definition.

    Transitions (form builder side):
        draft -> published -> closed
        closed -> published  (re-opened by the owner)
    """

    DRAFT = "draft"
    PUBLISHED = "published"
    CLOSED = "closed"


def _dense_pages(fields: list[FormField]) -> list[FormField]:
    """Sort fields by (page, order) and renumber pages to 1..N without gaps."""
    ordered = sorted(fields, key=lambda f: (f.page_number, f.display_order))
    observed = sorted({f.page_number for f in ordered})
    mapping = {page: index for index, page in enumerate(observed, start=1)}
    if any(page != new for page, new in mapping.items()):
        logger.warning("Renumbering form pages %s to a dense sequence", observed)
    return [
        f if mapping[f.page_number] == f.page_number
        else f.model_copy(update={"page_number": mapping[f.page_number]})
        for f in ordered
    ]


class Form(BaseModel):
    """A form definition with its fields in page/display order."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str | None = None
    status: FormStatus = FormStatus.DRAFT
    slug: str | None = None
    fields: list[FormField] = []

    @model_validator(mode="before")
    @classmethod
    def _normalise_fields(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("fields"):
            fields = [FormField.model_validate(f) for f in data["fields"]]
            ids = [f.id for f in fields]
            if len(ids) != len(set(ids)):
                raise ValueError("Field ids must be unique within a form")
            data = {**data, "fields": _dense_pages(fields)}
        return data

    @property
    def total_pages(self) -> int:
        """Highest page number, or 1 for a form without fields."""
        return max((f.page_number for f in self.fields), default=1)

    @property
    def collecting_fields(self) -> list[FormField]:
        """Fields that produce an answer (everything but section/description)."""
        return [f for f in self.fields if not f.is_display_only]

    @property
    def is_fillable(self) -> bool:
        return self.status == FormStatus.PUBLISHED

    def fields_on_page(self, page: int) -> list[FormField]:
        """Fields on ``page`` in display order."""
        return [f for f in self.fields if f.page_number == page]

    def field(self, field_id: str) -> FormField:
        """Look up a field by id.

        Raises:
            KeyError: if the form has no such field.
        """
        for f in self.fields:
            if f.id == field_id:
                return f
        raise KeyError(field_id)
