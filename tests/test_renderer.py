"""Renderer tests — control descriptions and the event routing back to state."""

import pytest

from holoforms.constants import OTHER_OPTION_VALUE, SELECT_PLACEHOLDER, SUBMIT_LABEL
from holoforms.models.control import (
    AddFiles,
    AddRow,
    CheckboxControl,
    ChooseOption,
    DescriptionControl,
    InputControl,
    MultiInputControl,
    RadioControl,
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
from holoforms.models.session import FieldValue, OtherSelection, PendingAttachment
from holoforms.renderer import apply_event, events_for, render_field, render_page
from holoforms.state import ResponseState

from helpers.fakes import FieldSpec, make_form


# =====================================================================
# render_field
# =====================================================================


class TestRenderField:
    def test_one_control_kind_per_type(self, feedback_form):
        kinds = {f.id: type(render_field(f, FieldValue())) for f in feedback_form.fields}
        assert kinds == {
            "intro": DescriptionControl,
            "q_name": InputControl,
            "q_email": InputControl,
            "q_channels": CheckboxControl,
            "verdict": SectionControl,
            "q_recommend": SelectControl,
            "q_links": MultiInputControl,
            "q_evidence": TextareaControl,
        }

    def test_input_type_follows_field_type(self, feedback_form):
        control = render_field(feedback_form.field("q_email"), FieldValue(value="a@b.com"))
        assert control.input_type == "email"
        assert control.value == "a@b.com"
        assert control.required is True

    def test_error_is_shown(self, feedback_form):
        control = render_field(feedback_form.field("q_name"), FieldValue(), "This field is required")
        assert control.error == "This field is required"

    def test_render_is_pure(self, feedback_form):
        field = feedback_form.field("q_recommend")
        value = FieldValue(value="No", reason="Too slow")
        assert render_field(field, value) == render_field(field, value)

    def test_multi_input_rows(self, feedback_form):
        field = feedback_form.field("q_links")
        single = render_field(field, FieldValue(value=[], rows=[]))
        assert single.rows == [""], "A multi field always shows at least one row"
        assert single.can_remove is False

        double = render_field(field, FieldValue(value=["a"], rows=["a", ""]))
        assert double.rows == ["a", ""]
        assert double.values == ["a"]
        assert double.can_remove is True

    def test_checkbox_values(self, feedback_form):
        control = render_field(feedback_form.field("q_channels"), FieldValue(value=["Web"]))
        assert [o.value for o in control.options] == ["Web", "Mobile", "Phone"]
        assert control.values == ["Web"]

    def test_radio(self):
        form = make_form(FieldSpec("size", "radio", extra={"options": ["S", "M"]}))
        control = render_field(form.field("size"), FieldValue(value="M"))
        assert isinstance(control, RadioControl)
        assert control.value == "M"

    def test_attachment_zone(self, feedback_form):
        control = render_field(
            feedback_form.field("q_evidence"), FieldValue(attachment_names=["a.png", "b.pdf"]),
        )
        assert control.attachment_zone is not None
        assert control.attachment_zone.file_names == ["a.png", "b.pdf"]
        assert render_field(feedback_form.field("q_name"), FieldValue()).attachment_zone is None


class TestRenderSelect:
    def test_other_option_is_appended(self, feedback_form):
        control = render_field(feedback_form.field("q_recommend"), FieldValue())
        assert control.placeholder == SELECT_PLACEHOLDER
        assert [(o.value, o.label) for o in control.options] == [
            ("Yes", "Yes"),
            ("No", "No"),
            (OTHER_OPTION_VALUE, "Other"),
        ]
        assert control.selected == ""

    def test_other_selected_shows_text(self, feedback_form):
        value = FieldValue(value="Mostly", select_state=OtherSelection(text="Mostly"))
        control = render_field(feedback_form.field("q_recommend"), value)
        assert control.selected == OTHER_OPTION_VALUE
        assert control.other_selected is True
        assert control.other_text == "Mostly"
        assert control.reason_prompt is None

    def test_reason_prompt_only_for_flagged_answer(self, feedback_form):
        field = feedback_form.field("q_recommend")
        assert render_field(field, FieldValue(value="Yes")).reason_prompt is None
        prompt = render_field(field, FieldValue(value="No", reason="Slow")).reason_prompt
        assert prompt is not None
        assert prompt.answer == "No"
        assert prompt.text == "Slow"


# =====================================================================
# render_page
# =====================================================================


class TestRenderPage:
    def test_first_page(self, feedback_form):
        view = render_page(feedback_form, ResponseState(feedback_form), 1)
        assert [c.field_id for c in view.controls] == ["intro", "q_name", "q_email", "q_channels"]
        assert view.navigation.primary_action == "next"
        assert view.navigation.can_go_back is False
        assert view.navigation.total_pages == 2

    def test_last_page(self, feedback_form):
        view = render_page(feedback_form, ResponseState(feedback_form), 2)
        assert view.navigation.primary_action == "submit"
        assert view.navigation.primary_label == SUBMIT_LABEL
        assert view.navigation.can_go_back is True

    def test_errors_come_from_state(self, feedback_form):
        state = ResponseState(feedback_form)
        state.validation_errors = {"q_email": "Please enter a valid email address"}
        view = render_page(feedback_form, state, 1)
        errors = {c.field_id: getattr(c, "error", None) for c in view.controls}
        assert errors["q_email"] == "Please enter a valid email address"
        assert errors["q_name"] is None

    def test_page_view_serialises(self, feedback_form):
        view = render_page(feedback_form, ResponseState(feedback_form), 2)
        dumped = view.model_dump()
        assert [c["control"] for c in dumped["controls"]] == [
            "section", "select", "multi_input", "textarea",
        ]


# =====================================================================
# events_for / apply_event
# =====================================================================


class TestEvents:
    def test_events_per_field(self, feedback_form):
        assert events_for(feedback_form.field("intro")) == []
        assert events_for(feedback_form.field("q_name")) == ["set_value"]
        assert events_for(feedback_form.field("q_channels")) == ["toggle_option"]
        assert events_for(feedback_form.field("q_links")) == ["add_row", "set_row", "remove_row"]
        assert events_for(feedback_form.field("q_recommend")) == [
            "choose_option", "set_other_text", "set_reason",
        ]
        assert events_for(feedback_form.field("q_evidence")) == [
            "set_value", "add_files", "remove_file",
        ]

    def test_rejects_foreign_event(self, feedback_form):
        state = ResponseState(feedback_form)
        with pytest.raises(ValueError):
            apply_event(state, feedback_form.field("q_name"), ToggleOption(option="x", checked=True))

    def test_routes_to_state(self, feedback_form):
        state = ResponseState(feedback_form)
        f = feedback_form.field

        apply_event(state, f("q_name"), SetValue(value="Ada"))
        apply_event(state, f("q_channels"), ToggleOption(option="Phone", checked=True))
        apply_event(state, f("q_links"), SetRow(index=0, text="https://a.example"))
        apply_event(state, f("q_links"), AddRow())
        apply_event(state, f("q_links"), SetRow(index=1, text="https://b.example"))
        apply_event(state, f("q_links"), RemoveRow(index=0))
        apply_event(state, f("q_recommend"), ChooseOption(value="No"))
        apply_event(state, f("q_recommend"), SetReason(text="Too slow"))

        assert state.answers["q_name"] == "Ada"
        assert state.answers["q_channels"] == ["Phone"]
        assert state.answers["q_links"] == ["https://b.example"]
        assert state.answers["q_recommend"] == "No"
        assert state.yes_no_reasons["q_recommend"] == "Too slow"

    def test_choose_other_sentinel(self, feedback_form):
        state = ResponseState(feedback_form)
        field = feedback_form.field("q_recommend")
        apply_event(state, field, ChooseOption(value=OTHER_OPTION_VALUE))
        apply_event(state, field, SetOtherText(text="Sometimes"))
        assert state.other_selected("q_recommend")
        assert state.answers["q_recommend"] == "Sometimes"

    def test_files(self, feedback_form):
        state = ResponseState(feedback_form)
        field = feedback_form.field("q_evidence")
        files = [PendingAttachment(filename="a.png", content=b"x")]
        apply_event(state, field, AddFiles(files=files))
        assert state.snapshot("q_evidence").attachment_names == ["a.png"]
        apply_event(state, field, RemoveFile(index=0))
        assert state.snapshot("q_evidence").attachment_names == []
