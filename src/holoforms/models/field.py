"""Field model — the static description of one form field.

A field is defined by the form author and never changes while a form is
being filled in.  The ``type`` decides which control the renderer produces
and how the validator treats the committed answer:

  Collecting (produce an answer):
    - text, email, number, textarea: scalar input, or an ordered list of
      inputs when ``allow_multiple`` is set
    - date: ISO ``YYYY-MM-DD`` string
    - select: dropdown, optionally with an "Other" free-text override and
      yes/no justification prompts
    - radio: pick one of ``options``
    - checkbox: pick any of ``options`` (answer is a list)

  Display-only (label only, never validated or submitted):
    - section, description
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict

from holoforms.constants import DISPLAY_ONLY_TYPES, MULTI_VALUE_TYPES


class FieldType(str, enum.Enum):
    """Every control type a form author can place on a page."""

    TEXT = "text"
    EMAIL = "email"
    NUMBER = "number"
    TEXTAREA = "textarea"
    DATE = "date"
    SELECT = "select"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    SECTION = "section"
    DESCRIPTION = "description"


class FormField(BaseModel):
    """One field of a form.  Immutable once loaded."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: FieldType
    # Rich text, rendered verbatim
    label: str
    required: bool = False
    # Choices for select / radio / checkbox
    options: list[str] = []
    allow_multiple: bool = False
    allow_attachments: bool = False
    include_other: bool = False
    require_yes_reason: bool = False
    require_no_reason: bool = False
    page_number: int = 1
    display_order: int = 0

    @property
    def is_display_only(self) -> bool:
        """True for section headers and description blocks."""
        return self.type.value in DISPLAY_ONLY_TYPES

    @property
    def supports_multiple(self) -> bool:
        """True if ``allow_multiple`` has any effect on this type."""
        return self.type.value in MULTI_VALUE_TYPES

    @property
    def collects_list(self) -> bool:
        """True if the committed answer is a list rather than a string."""
        if self.type == FieldType.CHECKBOX:
            return True
        return self.allow_multiple and self.supports_multiple

    @property
    def requires_reason_for(self) -> set[str]:
        """Lower-cased select values that make a justification mandatory."""
        if self.type != FieldType.SELECT:
            return set()
        values = set()
        if self.require_yes_reason:
            values.add("yes")
        if self.require_no_reason:
            values.add("no")
        return values
