"""SubmissionPipeline — turns a filled-in ResponseState into a stored response.

Steps, in order; the first failure aborts the run and leaves the state as
it was so the user can fix it and submit again:

  1. whole-form validation (errors are stored on the state)
  2. copy the committed answers of every collecting field
  3. attach non-blank yes/no reasons
  4. upload pending attachments, one file at a time, in pick order
  5. insert one response row through the ResponseSink

A file that was uploaded by an earlier, failed attempt keeps its URL on the
``PendingAttachment`` and is not uploaded again.
"""

from __future__ import annotations

import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Callable

from holoforms.constants import DEFAULT_ATTACHMENT_EXTENSION
from holoforms.errors import PersistenceFailed, UploadFailed, ValidationFailed
from holoforms.interfaces import ObjectStore, ResponseSink
from holoforms.models.answer import (
    AnswerValue,
    AttachedAnswer,
    ReasonedAnswer,
    flatten_answers,
    plain_answer,
)
from holoforms.models.form import Form
from holoforms.models.session import PendingAttachment, SubmissionReceipt
from holoforms.state import ResponseState
from holoforms.validator import validate_form

logger = logging.getLogger(__name__)


def file_extension(filename: str) -> str:
    """Extension of ``filename`` without the dot, or ``bin`` if it has none."""
    stem, dot, ext = filename.rpartition(".")
    if not dot or not stem or not ext:
        return DEFAULT_ATTACHMENT_EXTENSION
    return ext.lower()


def attachment_path(form_id: str, field_id: str, filename: str) -> str:
    """Object-store key: ``{form_id}/{field_id}/{epoch_ms}-{random}.{ext}``."""
    epoch_ms = int(time.time() * 1000)
    suffix = uuid.uuid4().hex[:8]
    return f"{form_id}/{field_id}/{epoch_ms}-{suffix}.{file_extension(filename)}"


class SubmissionPipeline:
    """Validates, uploads and persists one response.

    Args:
        store: where attachments go
        sink: where the response row goes
        clock: returns the submission timestamp (UTC now by default)
    """

    def __init__(
        self,
        store: ObjectStore,
        sink: ResponseSink,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._sink = sink
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def run(
        self,
        form: Form,
        state: ResponseState,
        *,
        submitted_by_email: str | None = None,
        submitted_by_name: str | None = None,
    ) -> SubmissionReceipt:
        """Submit ``state`` as a response to ``form``.

        Raises:
            ValidationFailed: some field is invalid; errors are on the state
            UploadFailed: an attachment could not be stored
            PersistenceFailed: the response row could not be inserted
        """
        # --- 1. Validate the whole form ---
        errors = validate_form(form, state)
        if errors:
            state.validation_errors = errors
            raise ValidationFailed(errors)
        state.validation_errors = {}

        # --- 2-3. Answers and reasons ---
        answers = self._build_answers(form, state)

        # --- 4. Attachments ---
        new_paths: list[str] = []
        for f in form.collecting_fields:
            pending = state.attachments.get(f.id)
            if not pending:
                continue
            urls = [
                await self._upload(form.id, f.id, attachment, new_paths)
                for attachment in pending
            ]
            current = answers.get(f.id)
            reason = current.reason if isinstance(current, ReasonedAnswer) else None
            value = state.answers.get(f.id, [] if f.collects_list else "")
            answers[f.id] = AttachedAnswer(
                answer=list(value) if isinstance(value, list) else value,
                urls=urls,
                reason=reason,
            )

        response_data = flatten_answers(answers)

        # --- 5. Persist ---
        submitted_at = self._clock()
        try:
            response_id = await self._sink.insert_response(
                form.id,
                response_data,
                submitted_by_email=submitted_by_email,
                submitted_by_name=submitted_by_name,
                submitted_at=submitted_at,
            )
        except Exception as exc:
            if new_paths:
                logger.warning(
                    "Response insert failed for form %s; uploads kept for retry: %s",
                    form.id, ", ".join(new_paths),
                )
            logger.error("Response insert failed for form %s: %s", form.id, exc)
            raise PersistenceFailed() from exc

        logger.info(
            "Response %s stored for form %s (%d attachment(s) uploaded)",
            response_id, form.id, len(new_paths),
        )
        return SubmissionReceipt(
            response_id=str(response_id),
            form_id=form.id,
            response_data=response_data,
            submitted_at=submitted_at,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _build_answers(form: Form, state: ResponseState) -> dict[str, AnswerValue]:
        answers: dict[str, AnswerValue] = {}
        for f in form.collecting_fields:
            value = state.answers.get(f.id, [] if f.collects_list else "")
            reason = state.yes_no_reasons.get(f.id, "")
            if reason.strip() and isinstance(value, str) and not state.other_selected(f.id):
                answers[f.id] = ReasonedAnswer(value=value, reason=reason)
            else:
                answers[f.id] = plain_answer(value)
        return answers

    async def _upload(
        self,
        form_id: str,
        field_id: str,
        attachment: PendingAttachment,
        new_paths: list[str],
    ) -> str:
        """Upload one file unless an earlier attempt already did."""
        if attachment.uploaded_url:
            return attachment.uploaded_url

        path = attachment_path(form_id, field_id, attachment.filename)
        try:
            url = await self._store.upload(
                path, attachment.content, attachment.content_type,
            )
        except Exception as exc:
            # Stores report their own key; the user only knows the file name
            logger.warning(
                "Upload failed for %s (%s): %s", attachment.filename, path, exc,
            )
            raise UploadFailed(attachment.filename, str(exc)) from exc

        attachment.uploaded_url = url
        new_paths.append(path)
        return url
