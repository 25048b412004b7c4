"""Form engine exceptions.

Every error a form-filling user can run into derives from ``FormError`` and
carries a generic ``user_message`` that is safe to show as-is.  Callers
only need the class to decide which screen to show:

  - DefinitionUnavailable (FormNotFound, FormClosed): terminal, no retry
  - ValidationFailed: per-field, fixed by editing the answers
  - UploadFailed / PersistenceFailed: this attempt failed, state is kept
    and the user may submit again
"""

from __future__ import annotations


class FormError(Exception):
    """Base class for all form engine errors."""

    user_message = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.user_message)


class DefinitionUnavailable(FormError):
    """The requested form cannot be filled in."""

    user_message = "Form not found or not published"


class FormNotFound(DefinitionUnavailable):
    """No such form, or the form is still a draft."""


class FormClosed(DefinitionUnavailable):
    """The form exists but no longer accepts responses."""

    user_message = "This form is no longer accepting responses"


class ValidationFailed(FormError):
    """One or more fields failed validation.

    ``errors`` maps field id to the message shown under that field.
    """

    user_message = "Please fix the highlighted fields"

    def __init__(self, errors: dict[str, str]) -> None:
        super().__init__(f"Validation failed for fields: {', '.join(sorted(errors))}")
        self.errors = dict(errors)


class UploadFailed(FormError):
    """An attachment could not be stored."""

    def __init__(self, filename: str, detail: str | None = None) -> None:
        self.filename = filename
        self.user_message = f"Failed to upload {filename}. Please try again."
        super().__init__(detail or self.user_message)


class PersistenceFailed(FormError):
    """The response row could not be inserted."""

    user_message = "Failed to submit form. Please try again."


class SubmissionInProgress(FormError):
    """submit() was called while another submission is still pending."""

    user_message = "Your response is already being submitted"


class StateLockedError(FormError):
    """The session was already submitted; its answers can no longer change."""

    user_message = "This response has already been submitted"
