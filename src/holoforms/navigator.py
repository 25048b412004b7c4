"""PageNavigator — tracks the current page and gates forward moves.

Moving forward runs the page-scope validator; the user only leaves a page
once every field on it is valid.  Moving back is always allowed and never
touches the answers.  There is no jump-to-page.
"""

from __future__ import annotations

import logging

from holoforms.constants import NEXT_LABEL, SUBMIT_LABEL
from holoforms.models.form import Form
from holoforms.state import ResponseState
from holoforms.validator import validate_page

logger = logging.getLogger(__name__)


class PageNavigator:
    """Current page of one form-filling session."""

    def __init__(self, form: Form) -> None:
        self._form = form
        self.current_page = 1

    @property
    def total_pages(self) -> int:
        return self._form.total_pages

    @property
    def is_first_page(self) -> bool:
        return self.current_page == 1

    @property
    def is_last_page(self) -> bool:
        return self.current_page == self.total_pages

    @property
    def primary_label(self) -> str:
        """Label of the forward control: "Submit" on the last page."""
        return SUBMIT_LABEL if self.is_last_page else NEXT_LABEL

    def next(self, state: ResponseState) -> bool:
        """Validate the current page and advance if it is clean.

        On failure the errors are stored on ``state`` and the page stays.
        Returns True if the page validated.
        """
        errors = validate_page(self._form, state, self.current_page)
        if errors:
            state.validation_errors = errors
            logger.debug(
                "Page %d has %d invalid field(s)", self.current_page, len(errors),
            )
            return False
        self.current_page = min(self.current_page + 1, self.total_pages)
        state.validation_errors = {}
        return True

    def previous(self, state: ResponseState | None = None) -> None:
        """Go back one page (clamped at 1) and clear displayed errors."""
        self.current_page = max(1, self.current_page - 1)
        if state is not None:
            state.validation_errors = {}
