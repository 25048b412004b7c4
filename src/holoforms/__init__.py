"""holoforms — multi-page public form engine SDK.

Public API:
    FormSession        — one person filling in one published form
    ResponseState      — mutable answers, selections, reasons and files
    PageNavigator      — current page with validation-gated forward moves
    SubmissionPipeline — validate, upload attachments, persist the response
    render_field       — field + current value + error -> Control
    render_page        — all controls of a page plus navigation
    apply_event        — route a control's InputEvent to the ResponseState
    validate_page      — page-scope validation
    validate_form      — whole-form validation

Boundary interfaces:
    FormSource   — fetch a published form by id or slug
    ObjectStore  — store an attachment, return its public URL
    ResponseSink — append one response row

Errors:
    FormError and its subclasses in ``holoforms.errors``
"""

from holoforms.auth_cache import AuthCache, CachedPrincipal, InMemoryAuthCache
from holoforms.errors import (
    DefinitionUnavailable,
    FormClosed,
    FormError,
    FormNotFound,
    PersistenceFailed,
    StateLockedError,
    SubmissionInProgress,
    UploadFailed,
    ValidationFailed,
)
from holoforms.interfaces import FormSource, ObjectStore, ResponseSink
from holoforms.models import (
    FieldType,
    FieldValue,
    Form,
    FormField,
    FormStatus,
    PageView,
    PendingAttachment,
    SessionStatus,
    SubmissionReceipt,
)
from holoforms.navigator import PageNavigator
from holoforms.renderer import apply_event, render_field, render_page
from holoforms.session import FormSession
from holoforms.state import ResponseState
from holoforms.submission import SubmissionPipeline
from holoforms.validator import validate, validate_form, validate_page

__all__ = [
    # Engine
    "FormSession",
    "PageNavigator",
    "ResponseState",
    "SubmissionPipeline",
    "apply_event",
    "render_field",
    "render_page",
    "validate",
    "validate_form",
    "validate_page",
    # Interfaces
    "FormSource",
    "ObjectStore",
    "ResponseSink",
    "AuthCache",
    "CachedPrincipal",
    "InMemoryAuthCache",
    # Models
    "FieldType",
    "FieldValue",
    "Form",
    "FormField",
    "FormStatus",
    "PageView",
    "PendingAttachment",
    "SessionStatus",
    "SubmissionReceipt",
    # Errors
    "DefinitionUnavailable",
    "FormClosed",
    "FormError",
    "FormNotFound",
    "PersistenceFailed",
    "StateLockedError",
    "SubmissionInProgress",
    "UploadFailed",
    "ValidationFailed",
]
