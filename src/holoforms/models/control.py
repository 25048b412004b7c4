"""Renderer contract — serialisable control descriptions and input events.

The renderer turns each field into a ``Control``: a plain description of
what to draw (no markup, no styling).  A UI draws the control and reports
what the user did as an ``InputEvent``; :func:`holoforms.renderer.apply_event`
routes the event to the matching ResponseState mutator.

Control kinds (discriminated on ``control``):
  - input, textarea:  single value
  - multi_input:      editable rows of an allow_multiple field
  - select:           dropdown with optional "Other" override and reason prompt
  - radio, checkbox:  options straight from the field
  - section, description: static label, no input

Event kinds (discriminated on ``kind``) are listed in each control's
``events`` so a UI knows what it may send back.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from holoforms.models.session import PendingAttachment

# ---------------------------------------------------------------------------
# Control building blocks
# ---------------------------------------------------------------------------


class AttachmentZone(BaseModel):
    """File picker shown under a field with allow_attachments.

    New picks are appended; each pending file can be removed by index.
    """

    file_names: list[str] = []
    can_remove: bool = True


class ChoiceOption(BaseModel):
    value: str
    label: str


class ReasonPrompt(BaseModel):
    """Justification input revealed after answering yes/no."""

    answer: str
    text: str = ""


class _CollectingControl(BaseModel):
    field_id: str
    label: str
    required: bool = False
    error: str | None = None
    attachment_zone: AttachmentZone | None = None
    events: list[str] = []


# ---------------------------------------------------------------------------
# Controls
# ---------------------------------------------------------------------------


class InputControl(_CollectingControl):
    control: Literal["input"] = "input"
    # text | email | number | date
    input_type: str = "text"
    value: str = ""


class TextareaControl(_CollectingControl):
    control: Literal["textarea"] = "textarea"
    value: str = ""


class MultiInputControl(_CollectingControl):
    """Ordered rows; ``values`` is the committed non-blank subset."""

    control: Literal["multi_input"] = "multi_input"
    input_type: str = "text"
    rows: list[str] = []
    values: list[str] = []
    can_add: bool = True
    # Removing is disabled while only one row is left
    can_remove: bool = False


class SelectControl(_CollectingControl):
    control: Literal["select"] = "select"
    placeholder: str = ""
    options: list[ChoiceOption] = []
    # Option value currently chosen, "" when nothing is chosen
    selected: str = ""
    other_selected: bool = False
    other_text: str = ""
    reason_prompt: ReasonPrompt | None = None


class RadioControl(_CollectingControl):
    control: Literal["radio"] = "radio"
    options: list[ChoiceOption] = []
    value: str = ""


class CheckboxControl(_CollectingControl):
    control: Literal["checkbox"] = "checkbox"
    options: list[ChoiceOption] = []
    values: list[str] = []


class SectionControl(BaseModel):
    control: Literal["section"] = "section"
    field_id: str
    label: str


class DescriptionControl(BaseModel):
    control: Literal["description"] = "description"
    field_id: str
    label: str


Control = Annotated[
    Union[
        InputControl,
        TextareaControl,
        MultiInputControl,
        SelectControl,
        RadioControl,
        CheckboxControl,
        SectionControl,
        DescriptionControl,
    ],
    Field(discriminator="control"),
]


class NavigationView(BaseModel):
    current_page: int
    total_pages: int
    # "next" or "submit"
    primary_action: str
    primary_label: str
    can_go_back: bool


class PageView(BaseModel):
    """All controls of one page plus its navigation."""

    page: int
    controls: list[Control]
    navigation: NavigationView


# ---------------------------------------------------------------------------
# Input events
# ---------------------------------------------------------------------------


class SetValue(BaseModel):
    kind: Literal["set_value"] = "set_value"
    value: str


class ToggleOption(BaseModel):
    kind: Literal["toggle_option"] = "toggle_option"
    option: str
    checked: bool


class AddRow(BaseModel):
    kind: Literal["add_row"] = "add_row"


class SetRow(BaseModel):
    kind: Literal["set_row"] = "set_row"
    index: int
    text: str


class RemoveRow(BaseModel):
    kind: Literal["remove_row"] = "remove_row"
    index: int


class ChooseOption(BaseModel):
    """Pick a select option; ``OTHER_OPTION_VALUE`` picks "Other"."""

    kind: Literal["choose_option"] = "choose_option"
    value: str


class SetOtherText(BaseModel):
    kind: Literal["set_other_text"] = "set_other_text"
    text: str


class SetReason(BaseModel):
    kind: Literal["set_reason"] = "set_reason"
    text: str


class AddFiles(BaseModel):
    kind: Literal["add_files"] = "add_files"
    files: list[PendingAttachment]


class RemoveFile(BaseModel):
    kind: Literal["remove_file"] = "remove_file"
    index: int


InputEvent = Annotated[
    Union[
        SetValue,
        ToggleOption,
        AddRow,
        SetRow,
        RemoveRow,
        ChooseOption,
        SetOtherText,
        SetReason,
        AddFiles,
        RemoveFile,
    ],
    Field(discriminator="kind"),
]
