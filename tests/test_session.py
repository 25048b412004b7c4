"""FormSession tests — the end-to-end filling lifecycle with in-memory fakes.

Walks a two-page form from the first page to a stored response and checks
the filling -> submitting -> submitted transitions, including recovery
from validation, upload and persistence failures.
"""

import pytest

from holoforms.constants import MSG_INVALID_EMAIL, MSG_REQUIRED
from holoforms.errors import (
    FormClosed,
    FormNotFound,
    PersistenceFailed,
    StateLockedError,
    SubmissionInProgress,
    ValidationFailed,
)
from holoforms.models.control import ChooseOption, SetReason, SetValue
from holoforms.models.form import FormStatus
from holoforms.models.session import SessionStatus
from holoforms.session import FormSession
from holoforms.submission import SubmissionPipeline

from helpers.fakes import FakeFormSource, FieldSpec, make_form


# =====================================================================
# Opening
# =====================================================================


class TestOpen:
    @pytest.mark.asyncio
    async def test_open_by_slug(self, two_page_form, pipeline):
        source = FakeFormSource(two_page_form)
        session = await FormSession.open(source, "test-form-abc123", pipeline)
        assert session.form.id == "form-1"
        assert session.current_page == 1
        assert session.status == SessionStatus.FILLING

    @pytest.mark.asyncio
    async def test_draft_form_is_not_found(self, pipeline):
        source = FakeFormSource(make_form(FieldSpec("a"), status=FormStatus.DRAFT))
        with pytest.raises(FormNotFound):
            await FormSession.open(source, "form-1", pipeline)

    @pytest.mark.asyncio
    async def test_closed_form(self, pipeline):
        source = FakeFormSource(make_form(FieldSpec("a"), status=FormStatus.CLOSED))
        with pytest.raises(FormClosed) as exc_info:
            await FormSession.open(source, "form-1", pipeline)
        assert exc_info.value.user_message == "This form is no longer accepting responses"

    @pytest.mark.asyncio
    async def test_unknown_ref(self, pipeline):
        with pytest.raises(FormNotFound):
            await FormSession.open(FakeFormSource(), "missing", pipeline)

    def test_constructor_rejects_unpublished(self, pipeline):
        with pytest.raises(FormNotFound):
            FormSession(make_form(FieldSpec("a"), status=FormStatus.DRAFT), pipeline)


# =====================================================================
# Two-page round trip
# =====================================================================


class TestRoundTrip:
    @pytest.mark.asyncio
    async def test_two_page_round_trip(self, two_page_form, pipeline, sink):
        session = FormSession(two_page_form, pipeline)

        # Page 1: empty name blocks
        assert session.next() is False
        assert session.state.validation_errors == {"name": MSG_REQUIRED}
        assert session.current_page == 1

        # Fill name, advance
        session.handle("name", SetValue(value="Ada Lovelace"))
        assert session.next() is True
        assert session.current_page == 2
        assert session.state.validation_errors == {}

        # Page 2: malformed email
        session.handle("email", SetValue(value="not-an-email"))
        with pytest.raises(ValidationFailed):
            await session.submit()
        assert session.state.validation_errors == {"email": MSG_INVALID_EMAIL}
        assert session.status == SessionStatus.FILLING

        # Fix and submit
        session.handle("email", SetValue(value="a@b.com"))
        receipt = await session.submit()

        assert len(sink.responses) == 1
        assert sink.responses[0].response_data == {"name": "Ada Lovelace", "email": "a@b.com"}
        assert receipt.response_id == sink.responses[0].id
        assert session.status == SessionStatus.SUBMITTED
        assert session.receipt == receipt

    @pytest.mark.asyncio
    async def test_yes_no_reason_flow(self, feedback_form, pipeline, sink):
        session = FormSession(feedback_form, pipeline)
        session.handle("q_name", SetValue(value="Ada"))
        session.handle("q_email", SetValue(value="ada@example.com"))
        assert session.next()

        session.handle("q_recommend", ChooseOption(value="No"))
        view = session.current_view()
        select = next(c for c in view.controls if c.field_id == "q_recommend")
        assert select.reason_prompt is not None

        with pytest.raises(ValidationFailed) as exc_info:
            await session.submit()
        assert set(exc_info.value.errors) == {"q_recommend"}

        session.handle("q_recommend", SetReason(text="Support was slow"))
        await session.submit()
        data = sink.responses[0].response_data
        assert data["q_recommend"] == "No"
        assert data["q_recommend_reason"] == "Support was slow"


# =====================================================================
# Submission state machine
# =====================================================================


class TestSubmitLifecycle:
    @pytest.fixture
    def form(self):
        return make_form(FieldSpec("a", "text"), FieldSpec("b", "text", page_number=2))

    @pytest.mark.asyncio
    async def test_submit_only_from_last_page(self, form, pipeline, sink):
        session = FormSession(form, pipeline)
        with pytest.raises(ValueError):
            await session.submit()
        assert sink.responses == []

    @pytest.mark.asyncio
    async def test_submitted_session_is_locked(self, form, pipeline):
        session = FormSession(form, pipeline)
        session.next()
        await session.submit()
        with pytest.raises(StateLockedError):
            session.handle("a", SetValue(value="late edit"))
        with pytest.raises(StateLockedError):
            await session.submit()

    @pytest.mark.asyncio
    async def test_persistence_failure_allows_retry(self, form, pipeline, sink):
        session = FormSession(form, pipeline)
        session.next()
        sink.fail = True
        with pytest.raises(PersistenceFailed):
            await session.submit()
        assert session.status == SessionStatus.FILLING

        sink.fail = False
        await session.submit()
        assert len(sink.responses) == 1

    @pytest.mark.asyncio
    async def test_concurrent_submit_is_rejected(self, form, store, sink):
        """A second submit() while the first is still awaiting is refused."""
        seen: list[SessionStatus] = []

        class SlowPipeline(SubmissionPipeline):
            async def run(self, form, state, **kwargs):
                seen.append(session.status)
                with pytest.raises(SubmissionInProgress):
                    await session.submit()
                return await super().run(form, state, **kwargs)

        session = FormSession(form, SlowPipeline(store, sink))
        session.next()
        await session.submit()
        assert seen == [SessionStatus.SUBMITTING]
        assert len(sink.responses) == 1

    def test_previous_keeps_answers(self, form, pipeline):
        session = FormSession(form, pipeline)
        session.handle("a", SetValue(value="kept"))
        session.next()
        session.previous()
        assert session.current_page == 1
        assert session.state.answers["a"] == "kept"

    def test_handle_unknown_field(self, form, pipeline):
        session = FormSession(form, pipeline)
        with pytest.raises(KeyError):
            session.handle("zzz", SetValue(value="x"))
