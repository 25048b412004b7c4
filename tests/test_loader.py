"""YAML form definition loading."""

import pytest
from pydantic import ValidationError

from holoforms.loader import (
    form_from_dict,
    load_form_definition,
    load_form_definitions,
    load_yaml,
)
from holoforms.models.form import FormStatus


class TestLoadDefinition:
    def test_feedback_form(self, feedback_form):
        assert feedback_form.id == "customer_feedback", "id defaults to the file stem"
        assert feedback_form.status == FormStatus.PUBLISHED
        assert feedback_form.slug == "customer-feedback-a1b2c3"
        assert feedback_form.total_pages == 2
        assert len(feedback_form.collecting_fields) == 6

    def test_quoted_yes_no_stay_strings(self, feedback_form):
        assert feedback_form.field("q_recommend").options == ["Yes", "No"]

    def test_display_order_defaults_to_position(self, feedback_form):
        orders = [f.display_order for f in feedback_form.fields]
        assert orders == sorted(orders)
        assert feedback_form.field("q_name").display_order == 1

    def test_explicit_id_and_page_gap(self, fixtures_dir):
        form = load_form_definition(fixtures_dir / "event_signup.yml")
        assert form.id == "signup"
        assert [(f.id, f.page_number) for f in form.fields] == [("q_size", 1), ("q_day", 2)]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_yaml(tmp_path / "nope.yaml")


class TestLoadDirectory:
    def test_reads_yaml_and_yml_sorted(self, fixtures_dir):
        forms = load_form_definitions(fixtures_dir)
        assert [f.id for f in forms] == ["customer_feedback", "signup"]

    def test_missing_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_form_definitions(tmp_path / "absent")


class TestFormFromDict:
    def test_not_a_mapping(self):
        with pytest.raises(ValueError):
            form_from_dict(["not", "a", "form"])

    def test_invalid_field_type(self):
        with pytest.raises(ValidationError):
            form_from_dict({"id": "f", "name": "F", "fields": [{"id": "x", "type": "slider", "label": "X"}]})
