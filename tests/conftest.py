from pathlib import Path

import pytest

from holoforms.loader import load_form_definition
from holoforms.submission import SubmissionPipeline

from helpers.fakes import FIXED_NOW, FakeObjectStore, FakeResponseSink, FieldSpec, make_form

FIXTURES_DIR = Path(__file__).parent / "fixtures" / "forms"


@pytest.fixture
def fixtures_dir():
    return FIXTURES_DIR


@pytest.fixture
def feedback_form():
    """Two-page customer feedback form loaded from YAML."""
    return load_form_definition(FIXTURES_DIR / "customer_feedback.yaml")


@pytest.fixture
def two_page_form():
    """Page 1: required text "name".  Page 2: required email "email"."""
    return make_form(
        FieldSpec("name", "text", extra={"required": True}),
        FieldSpec("email", "email", page_number=2, extra={"required": True}),
    )


@pytest.fixture
def store():
    return FakeObjectStore()


@pytest.fixture
def sink():
    return FakeResponseSink()


@pytest.fixture
def pipeline(store, sink):
    return SubmissionPipeline(store, sink, clock=lambda: FIXED_NOW)
