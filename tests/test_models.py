"""Model tests — Form page normalisation and the tagged answer union."""

import pytest
from pydantic import TypeAdapter, ValidationError

from holoforms.models.answer import (
    AnswerValue,
    AttachedAnswer,
    ListAnswer,
    ReasonedAnswer,
    ScalarAnswer,
    answer_value,
    flatten_answers,
    parse_response_data,
    plain_answer,
)
from holoforms.models.field import FieldType, FormField
from holoforms.models.form import Form, FormStatus

from helpers.fakes import FieldSpec, make_form


class TestFormField:
    def test_display_only(self):
        assert FormField(id="s", type="section", label="S").is_display_only
        assert not FormField(id="t", type="text", label="T").is_display_only

    def test_collects_list(self):
        assert FormField(id="c", type="checkbox", label="C").collects_list
        assert FormField(id="t", type="text", label="T", allow_multiple=True).collects_list
        assert not FormField(id="d", type="date", label="D", allow_multiple=True).collects_list

    def test_requires_reason_for(self):
        f = FormField(id="s", type="select", label="S", require_no_reason=True)
        assert f.requires_reason_for == {"no"}
        r = FormField(id="r", type="radio", label="R", require_yes_reason=True)
        assert r.requires_reason_for == set(), "Only select fields ask for reasons"

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            FormField(id="x", type="signature", label="X")

    def test_frozen(self):
        f = FormField(id="t", type=FieldType.TEXT, label="T")
        with pytest.raises(ValidationError):
            f.label = "changed"


class TestFormPages:
    def test_fields_sorted_by_page_then_order(self):
        form = Form(
            id="f",
            name="F",
            fields=[
                {"id": "b", "type": "text", "label": "B", "page_number": 2, "display_order": 0},
                {"id": "a2", "type": "text", "label": "A2", "page_number": 1, "display_order": 5},
                {"id": "a1", "type": "text", "label": "A1", "page_number": 1, "display_order": 1},
            ],
        )
        assert [f.id for f in form.fields] == ["a1", "a2", "b"]

    def test_page_gaps_are_renumbered(self, caplog):
        with caplog.at_level("WARNING", logger="holoforms.models.form"):
            form = make_form(
                FieldSpec("one", page_number=1),
                FieldSpec("three", page_number=3),
                FieldSpec("seven", page_number=7),
            )
        assert [f.page_number for f in form.fields] == [1, 2, 3]
        assert form.total_pages == 3
        assert "Renumbering" in caplog.text

    def test_dense_pages_untouched(self, two_page_form):
        assert [f.page_number for f in two_page_form.fields] == [1, 2]

    def test_duplicate_ids_rejected(self):
        with pytest.raises(ValidationError):
            make_form(FieldSpec("dup"), FieldSpec("dup"))

    def test_empty_form(self):
        form = Form(id="f", name="Empty")
        assert form.total_pages == 1
        assert form.fields_on_page(1) == []
        assert form.status == FormStatus.DRAFT
        assert not form.is_fillable

    def test_field_lookup(self, two_page_form):
        assert two_page_form.field("email").type == FieldType.EMAIL
        with pytest.raises(KeyError):
            two_page_form.field("nope")


class TestAnswerUnion:
    def test_discriminated_by_kind(self):
        adapter = TypeAdapter(AnswerValue)
        parsed = adapter.validate_python({"kind": "reasoned", "value": "Yes", "reason": "Good"})
        assert parsed == ReasonedAnswer(value="Yes", reason="Good")

    def test_plain_answer(self):
        assert plain_answer("x") == ScalarAnswer(value="x")
        assert plain_answer(["a"]) == ListAnswer(values=["a"])

    def test_answer_value(self):
        assert answer_value(AttachedAnswer(answer=["a"], urls=["u"])) == ["a"]
        assert answer_value(ReasonedAnswer(value="No", reason="r")) == "No"

    def test_flatten(self):
        flat = flatten_answers({
            "name": ScalarAnswer(value="Ada"),
            "tags": ListAnswer(values=[]),
            "rec": ReasonedAnswer(value="Yes", reason="Fast"),
            "doc": AttachedAnswer(answer="see files", urls=["u1", "u2"], reason=None),
        })
        assert flat == {
            "name": "Ada",
            "tags": [],
            "rec": "Yes",
            "rec_reason": "Fast",
            "doc": "see files",
            "doc_attachments": ["u1", "u2"],
        }

    def test_parse_uses_form_field_ids(self):
        """A field literally named ``x_reason`` keeps its own answer."""
        form = make_form(
            FieldSpec("rec", "select", extra={"options": ["Yes", "No"]}),
            FieldSpec("rec_reason", "text"),
            FieldSpec("doc", "textarea", extra={"allow_attachments": True}),
            FieldSpec("tags", "checkbox", extra={"options": ["A"]}),
        )
        parsed = parse_response_data(form, {
            "rec": "Yes",
            "rec_reason": "typed in its own field",
            "doc_attachments": ["u1"],
            "stray": "dropped",
        })
        assert parsed["rec"] == ReasonedAnswer(value="Yes", reason="typed in its own field")
        assert parsed["rec_reason"] == ScalarAnswer(value="typed in its own field")
        assert parsed["doc"] == AttachedAnswer(answer="", urls=["u1"])
        assert "tags" not in parsed
        assert "stray" not in parsed
