"""Renderer — maps fields and their current input to control descriptions.

``render_field`` is pure: the same (field, value, error) always gives the
same control.  ``apply_event`` is the way back, routing a UI event to the
ResponseState mutator that owns it.
"""

from __future__ import annotations

from holoforms.constants import (
    NEXT_LABEL,
    OTHER_OPTION_LABEL,
    OTHER_OPTION_VALUE,
    SELECT_PLACEHOLDER,
    SUBMIT_LABEL,
)
from holoforms.models.control import (
    AddFiles,
    AddRow,
    AttachmentZone,
    CheckboxControl,
    ChoiceOption,
    ChooseOption,
    Control,
    DescriptionControl,
    InputControl,
    InputEvent,
    MultiInputControl,
    NavigationView,
    PageView,
    RadioControl,
    ReasonPrompt,
    RemoveFile,
    RemoveRow,
    SectionControl,
    SelectControl,
    SetOtherText,
    SetReason,
    SetRow,
    SetValue,
    TextareaControl,
    ToggleOption,
)
from holoforms.models.field import FieldType, FormField
from holoforms.models.form import Form
from holoforms.models.session import FieldValue, OtherSelection
from holoforms.state import ResponseState

_FILE_EVENTS = ["add_files", "remove_file"]


def _as_text(value: str | list[str]) -> str:
    return value if isinstance(value, str) else ""


def _as_list(value: str | list[str]) -> list[str]:
    return list(value) if isinstance(value, list) else []


def events_for(field: FormField) -> list[str]:
    """Input event kinds a field's control accepts."""
    if field.is_display_only:
        return []
    if field.allow_multiple and field.supports_multiple:
        events = ["add_row", "set_row", "remove_row"]
    elif field.type == FieldType.SELECT:
        events = ["choose_option"]
        if field.include_other:
            events.append("set_other_text")
        if field.requires_reason_for:
            events.append("set_reason")
    elif field.type == FieldType.CHECKBOX:
        events = ["toggle_option"]
    else:
        events = ["set_value"]
    if field.allow_attachments:
        events += _FILE_EVENTS
    return events


def render_field(field: FormField, value: FieldValue, error: str | None = None) -> Control:
    """Describe the control for ``field`` showing ``value`` and ``error``."""
    if field.type == FieldType.SECTION:
        return SectionControl(field_id=field.id, label=field.label)
    if field.type == FieldType.DESCRIPTION:
        return DescriptionControl(field_id=field.id, label=field.label)

    common = {
        "field_id": field.id,
        "label": field.label,
        "required": field.required,
        "error": error,
        "events": events_for(field),
        "attachment_zone": (
            AttachmentZone(file_names=list(value.attachment_names))
            if field.allow_attachments else None
        ),
    }

    if field.allow_multiple and field.supports_multiple:
        rows = list(value.rows) or [""]
        return MultiInputControl(
            **common,
            input_type=field.type.value,
            rows=rows,
            values=_as_list(value.value),
            can_remove=len(rows) > 1,
        )

    if field.type == FieldType.TEXTAREA:
        return TextareaControl(**common, value=_as_text(value.value))

    if field.type == FieldType.SELECT:
        return _render_select(field, value, common)

    options = [ChoiceOption(value=o, label=o) for o in field.options]
    if field.type == FieldType.RADIO:
        return RadioControl(**common, options=options, value=_as_text(value.value))
    if field.type == FieldType.CHECKBOX:
        return CheckboxControl(**common, options=options, values=_as_list(value.value))

    # text, email, number, date
    return InputControl(**common, input_type=field.type.value, value=_as_text(value.value))


def _render_select(field: FormField, value: FieldValue, common: dict) -> SelectControl:
    options = [ChoiceOption(value=o, label=o) for o in field.options]
    if field.include_other:
        options.append(ChoiceOption(value=OTHER_OPTION_VALUE, label=OTHER_OPTION_LABEL))

    if isinstance(value.select_state, OtherSelection):
        return SelectControl(
            **common,
            placeholder=SELECT_PLACEHOLDER,
            options=options,
            selected=OTHER_OPTION_VALUE,
            other_selected=True,
            other_text=value.select_state.text,
        )

    selected = _as_text(value.value)
    prompt = None
    if selected.strip().lower() in field.requires_reason_for:
        prompt = ReasonPrompt(answer=selected, text=value.reason)
    return SelectControl(
        **common,
        placeholder=SELECT_PLACEHOLDER,
        options=options,
        selected=selected,
        reason_prompt=prompt,
    )


def render_page(form: Form, state: ResponseState, page: int) -> PageView:
    """Render every field on ``page`` plus the navigation controls."""
    controls = [
        render_field(f, state.snapshot(f.id), state.validation_errors.get(f.id))
        for f in form.fields_on_page(page)
    ]
    is_last = page >= form.total_pages
    return PageView(
        page=page,
        controls=controls,
        navigation=NavigationView(
            current_page=page,
            total_pages=form.total_pages,
            primary_action="submit" if is_last else "next",
            primary_label=SUBMIT_LABEL if is_last else NEXT_LABEL,
            can_go_back=page > 1,
        ),
    )


def apply_event(state: ResponseState, field: FormField, event: InputEvent) -> None:
    """Route a control's input event to the ResponseState.

    Raises:
        ValueError: if the field's control does not emit this event kind
    """
    if event.kind not in events_for(field):
        raise ValueError(
            f"Event '{event.kind}' is not accepted by field '{field.id}' ({field.type.value})"
        )

    if isinstance(event, SetValue):
        state.set_answer(field.id, event.value)
    elif isinstance(event, ToggleOption):
        state.set_checkbox_option(field.id, event.option, event.checked)
    elif isinstance(event, AddRow):
        state.append_multi_answer(field.id)
    elif isinstance(event, SetRow):
        state.set_multi_answer_at(field.id, event.index, event.text)
    elif isinstance(event, RemoveRow):
        state.remove_multi_answer_at(field.id, event.index)
    elif isinstance(event, ChooseOption):
        if event.value == OTHER_OPTION_VALUE and field.include_other:
            state.select_other_option(field.id)
        else:
            state.select_regular_option(field.id, event.value)
    elif isinstance(event, SetOtherText):
        state.set_other_text(field.id, event.text)
    elif isinstance(event, SetReason):
        state.set_yes_no_reason(field.id, event.text)
    elif isinstance(event, AddFiles):
        state.add_attachments(field.id, event.files)
    elif isinstance(event, RemoveFile):
        state.remove_attachment(field.id, event.index)
