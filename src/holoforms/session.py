"""FormSession — one person filling in one published form.

The session owns a ResponseState and a PageNavigator and walks through
three states::

    filling --submit()--> submitting --ok--> submitted
                              |
                              +--error--> filling   (state kept for retry)

Usage::

    pipeline = SubmissionPipeline(store, sink)
    session = await FormSession.open(source, "feedback-ab12cd", pipeline)

    view = session.current_view()          # PageView for page 1
    session.state.set_answer("q_name", "Ada")
    if session.next():                     # validates page 1
        ...
    receipt = await session.submit()       # on the last page
"""

from __future__ import annotations

import logging

from holoforms.errors import (
    FormClosed,
    FormNotFound,
    StateLockedError,
    SubmissionInProgress,
)
from holoforms.interfaces import FormSource
from holoforms.models.control import InputEvent, PageView
from holoforms.models.form import Form, FormStatus
from holoforms.models.session import SessionStatus, SubmissionReceipt
from holoforms.navigator import PageNavigator
from holoforms.renderer import apply_event, render_page
from holoforms.state import ResponseState
from holoforms.submission import SubmissionPipeline

logger = logging.getLogger(__name__)


class FormSession:
    """Filling-in lifecycle of one form."""

    def __init__(self, form: Form, pipeline: SubmissionPipeline) -> None:
        if form.status == FormStatus.CLOSED:
            raise FormClosed()
        if form.status != FormStatus.PUBLISHED:
            raise FormNotFound()
        self.form = form
        self.state = ResponseState(form)
        self.navigator = PageNavigator(form)
        self.status = SessionStatus.FILLING
        self.receipt: SubmissionReceipt | None = None
        self._pipeline = pipeline

    @classmethod
    async def open(
        cls, source: FormSource, form_ref: str, pipeline: SubmissionPipeline,
    ) -> FormSession:
        """Fetch a published form and start a session on it."""
        form = await source.get_published_form(form_ref)
        logger.info(
            "Opened form %s (%d fields, %d pages)",
            form.id, len(form.fields), form.total_pages,
        )
        return cls(form, pipeline)

    # ------------------------------------------------------------------
    # Rendering and input
    # ------------------------------------------------------------------

    @property
    def current_page(self) -> int:
        return self.navigator.current_page

    def current_view(self) -> PageView:
        return render_page(self.form, self.state, self.navigator.current_page)

    def handle(self, field_id: str, event: InputEvent) -> None:
        """Apply a control event to the field with ``field_id``."""
        apply_event(self.state, self.form.field(field_id), event)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def next(self) -> bool:
        """Validate the current page and move forward if it is clean."""
        return self.navigator.next(self.state)

    def previous(self) -> None:
        self.navigator.previous(self.state)

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    async def submit(
        self,
        *,
        submitted_by_email: str | None = None,
        submitted_by_name: str | None = None,
    ) -> SubmissionReceipt:
        """Submit the response from the last page.

        Raises:
            ValueError: not on the last page
            SubmissionInProgress: a previous submit() has not finished
            StateLockedError: the session was already submitted
            ValidationFailed, UploadFailed, PersistenceFailed: see
                :class:`SubmissionPipeline`; the session returns to filling
        """
        if self.status == SessionStatus.SUBMITTING:
            raise SubmissionInProgress()
        if self.status == SessionStatus.SUBMITTED:
            raise StateLockedError()
        if not self.navigator.is_last_page:
            raise ValueError(
                f"Cannot submit from page {self.navigator.current_page} "
                f"of {self.navigator.total_pages}"
            )

        self.status = SessionStatus.SUBMITTING
        try:
            receipt = await self._pipeline.run(
                self.form,
                self.state,
                submitted_by_email=submitted_by_email,
                submitted_by_name=submitted_by_name,
            )
        except Exception:
            self.status = SessionStatus.FILLING
            raise

        self.receipt = receipt
        self.status = SessionStatus.SUBMITTED
        self.state.lock()
        return receipt
