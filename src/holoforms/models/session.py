"""Session-side models — what a form-filling session holds and returns.

These models are the contract between the form engine and its callers
(an HTTP route, a terminal client, a test):

  - SessionStatus:     filling -> submitting -> submitted
  - SelectState:       a select field is either on a regular option or on
                       "Other" with its own free text, never both
  - PendingAttachment: a file picked by the user but not uploaded yet
  - FieldValue:        read-only snapshot of one field, fed to the renderer
  - SubmissionReceipt: what a successful submission produced
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field


class SessionStatus(str, enum.Enum):
    """Lifecycle of one form-filling session.

    Transitions:
        filling -> submitting    (submit() called)
        submitting -> filling    (validation, upload or insert failed)
        submitting -> submitted  (response persisted; state is locked)
    """

    FILLING = "filling"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"


class RegularSelection(BaseModel):
    mode: Literal["regular"] = "regular"
    value: str = ""


class OtherSelection(BaseModel):
    mode: Literal["other"] = "other"
    text: str = ""


SelectState = Annotated[
    Union[RegularSelection, OtherSelection],
    Field(discriminator="mode"),
]


@dataclass
class PendingAttachment:
    """A user-selected file waiting for upload.

    ``uploaded_url`` is filled in once the object store accepted the file,
    so that a retried submission reuses it instead of uploading again.
    """

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"
    uploaded_url: str | None = None

    @property
    def size(self) -> int:
        return len(self.content)


class FieldValue(BaseModel):
    """Everything the renderer needs to know about one field's current input."""

    # Committed answer: string, or list for checkbox / allow_multiple
    value: str | list[str] = ""
    # Editable rows of an allow_multiple field (blank rows included)
    rows: list[str] = []
    select_state: SelectState | None = None
    reason: str = ""
    attachment_names: list[str] = []


class SubmissionReceipt(BaseModel):
    """Result of a successful submission."""

    response_id: str
    form_id: str
    # Flat wire object exactly as persisted
    response_data: dict[str, Any]
    submitted_at: datetime
