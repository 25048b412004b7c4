"""ResponseState — mutable answers for one form-filling session.

The state is created empty from a :class:`Form` and mutated one field at a
time as the user types, picks options and drops files.  It never talks to
the network; the submission pipeline reads it when the user submits.

Invariants kept by every mutator:

  - ``answers[id]`` of an allow_multiple field is always the ordered
    non-blank sublist of its rows
  - a select field is on a regular option or on "Other", never both; the
    committed answer of an "Other" selection is its free text
  - changing a field's value clears that field's validation error
  - once :meth:`lock` was called every mutator raises ``StateLockedError``
"""

from __future__ import annotations

import logging
from typing import Iterable

from holoforms.errors import StateLockedError
from holoforms.models.field import FieldType, FormField
from holoforms.models.form import Form
from holoforms.models.session import (
    FieldValue,
    OtherSelection,
    PendingAttachment,
    RegularSelection,
    SelectState,
)

logger = logging.getLogger(__name__)

_YES_NO = {"yes", "no"}


def _is_blank(text: str) -> bool:
    return not text.strip()


class ResponseState:
    """Answers, selections, reasons, pending files and errors of one session."""

    def __init__(self, form: Form) -> None:
        self._all_fields: dict[str, FormField] = {f.id: f for f in form.fields}
        self._fields: dict[str, FormField] = {f.id: f for f in form.collecting_fields}
        self._locked = False

        self.answers: dict[str, str | list[str]] = {}
        self.multi_answers: dict[str, list[str]] = {}
        self.select_states: dict[str, SelectState] = {}
        self.yes_no_reasons: dict[str, str] = {}
        self.attachments: dict[str, list[PendingAttachment]] = {}
        self.validation_errors: dict[str, str] = {}

        # Seed every collecting field with an empty value
        for field_id, f in self._fields.items():
            if f.collects_list:
                self.answers[field_id] = []
            else:
                self.answers[field_id] = ""
            if f.allow_multiple and f.supports_multiple:
                # One blank row so the UI always has an input to type into
                self.multi_answers[field_id] = [""]

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def locked(self) -> bool:
        return self._locked

    def lock(self) -> None:
        """Freeze the state after a successful submission."""
        self._locked = True

    # ------------------------------------------------------------------
    # Scalar / array answers
    # ------------------------------------------------------------------

    def set_answer(self, field_id: str, value: str | list[str]) -> None:
        """Overwrite the committed answer of a field.

        Multi-value fields go through their rows and selects through their
        regular / "Other" state, so the committed answer never disagrees
        with what the renderer shows.  A select value that matches none of
        the options lands in "Other" when the field offers it.
        """
        f = self._field(field_id)
        if f.allow_multiple and f.supports_multiple:
            self.set_multi_answers(field_id, value if isinstance(value, list) else [value])
            return
        if f.type == FieldType.SELECT:
            if isinstance(value, list):
                raise ValueError(f"Field '{field_id}' takes a single value")
            known = {o.lower() for o in f.options}
            if f.include_other and value and value.lower() not in known:
                self.select_other_option(field_id)
                self.set_other_text(field_id, value)
            else:
                self.select_regular_option(field_id, value)
            return
        self.answers[field_id] = list(value) if isinstance(value, list) else value
        self._clear_error(field_id)

    def set_checkbox_option(self, field_id: str, option: str, checked: bool) -> None:
        """Add or remove ``option`` from a checkbox field's list."""
        self._field(field_id)
        current = self.answers.get(field_id)
        values = list(current) if isinstance(current, list) else []
        if checked:
            if option not in values:
                values.append(option)
        else:
            values = [v for v in values if v != option]
        self.answers[field_id] = values
        self._clear_error(field_id)

    # ------------------------------------------------------------------
    # Multi-value rows (allow_multiple)
    # ------------------------------------------------------------------

    def append_multi_answer(self, field_id: str) -> None:
        """Add a blank row at the end of a multi-value field."""
        rows = self._rows(field_id)
        rows.append("")
        self._commit_rows(field_id, rows)

    def set_multi_answer_at(self, field_id: str, index: int, text: str) -> None:
        """Replace the text of one row."""
        rows = self._rows(field_id)
        if not 0 <= index < len(rows):
            raise IndexError(f"Row {index} out of range for field '{field_id}'")
        rows[index] = text
        self._commit_rows(field_id, rows)

    def remove_multi_answer_at(self, field_id: str, index: int) -> None:
        """Delete one row."""
        rows = self._rows(field_id)
        if not 0 <= index < len(rows):
            raise IndexError(f"Row {index} out of range for field '{field_id}'")
        del rows[index]
        self._commit_rows(field_id, rows)

    def set_multi_answers(self, field_id: str, rows: Iterable[str]) -> None:
        """Replace all rows at once."""
        self._rows(field_id)
        self._commit_rows(field_id, list(rows))

    # ------------------------------------------------------------------
    # Select: regular option vs. "Other"
    # ------------------------------------------------------------------

    def select_other_option(self, field_id: str) -> None:
        """Switch a select field to its "Other" entry."""
        f = self._field(field_id)
        if not f.include_other:
            raise ValueError(f"Field '{field_id}' has no 'Other' option")
        current = self.select_states.get(field_id)
        text = current.text if isinstance(current, OtherSelection) else ""
        self.select_states[field_id] = OtherSelection(text=text)
        self.answers[field_id] = text
        # "Other" is never yes/no, so a pending justification no longer applies
        self.yes_no_reasons.pop(field_id, None)
        self._clear_error(field_id)

    def select_regular_option(self, field_id: str, value: str) -> None:
        """Pick one of the field's own options, discarding any "Other" text."""
        self._field(field_id)
        self.select_states[field_id] = RegularSelection(value=value)
        self.answers[field_id] = value
        if value.strip().lower() not in _YES_NO:
            self.yes_no_reasons.pop(field_id, None)
        self._clear_error(field_id)

    def set_other_text(self, field_id: str, text: str) -> None:
        """Update the "Other" free text; it becomes the committed answer."""
        self._field(field_id)
        self.select_states[field_id] = OtherSelection(text=text)
        self.answers[field_id] = text
        self._clear_error(field_id)

    def other_selected(self, field_id: str) -> bool:
        return isinstance(self.select_states.get(field_id), OtherSelection)

    def other_text(self, field_id: str) -> str:
        state = self.select_states.get(field_id)
        return state.text if isinstance(state, OtherSelection) else ""

    # ------------------------------------------------------------------
    # Yes/No justification
    # ------------------------------------------------------------------

    def set_yes_no_reason(self, field_id: str, text: str) -> None:
        self._field(field_id)
        self.yes_no_reasons[field_id] = text
        self._clear_error(field_id)

    # ------------------------------------------------------------------
    # Attachments
    # ------------------------------------------------------------------

    def add_attachments(self, field_id: str, files: Iterable[PendingAttachment]) -> None:
        """Append files to a field's pending list; earlier picks are kept."""
        f = self._field(field_id)
        if not f.allow_attachments:
            raise ValueError(f"Field '{field_id}' does not accept attachments")
        self.attachments.setdefault(field_id, []).extend(files)

    def remove_attachment(self, field_id: str, index: int) -> None:
        self._field(field_id)
        pending = self.attachments.get(field_id, [])
        if not 0 <= index < len(pending):
            raise IndexError(f"Attachment {index} out of range for field '{field_id}'")
        del pending[index]
        if not pending:
            self.attachments.pop(field_id, None)

    # ------------------------------------------------------------------
    # Read model
    # ------------------------------------------------------------------

    def snapshot(self, field_id: str) -> FieldValue:
        """Return the current input of one field for rendering."""
        f = self._all_fields.get(field_id)
        if f is None:
            raise KeyError(f"Unknown field: {field_id}")
        if f.is_display_only:
            return FieldValue()
        value = self.answers.get(field_id, [] if f.collects_list else "")
        return FieldValue(
            value=value,
            rows=list(self.multi_answers.get(field_id, [])),
            select_state=self.select_states.get(field_id),
            reason=self.yes_no_reasons.get(field_id, ""),
            attachment_names=[a.filename for a in self.attachments.get(field_id, [])],
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _field(self, field_id: str) -> FormField:
        """Resolve a collecting field, enforcing the lock."""
        if self._locked:
            raise StateLockedError()
        f = self._all_fields.get(field_id)
        if f is None:
            raise KeyError(f"Unknown field: {field_id}")
        if f.is_display_only:
            raise ValueError(f"Field '{field_id}' is display-only and takes no input")
        return f

    def _rows(self, field_id: str) -> list[str]:
        f = self._field(field_id)
        if not (f.allow_multiple and f.supports_multiple):
            raise ValueError(f"Field '{field_id}' does not allow multiple answers")
        return list(self.multi_answers.get(field_id, []))

    def _commit_rows(self, field_id: str, rows: list[str]) -> None:
        self.multi_answers[field_id] = rows
        self.answers[field_id] = [r for r in rows if not _is_blank(r)]
        self._clear_error(field_id)

    def _clear_error(self, field_id: str) -> None:
        self.validation_errors.pop(field_id, None)
