"""Abstract boundaries between the form engine and the outside world.

The engine never talks to a database or an object store directly.  These
ABCs define what it needs; ``holoforms_db.adapters`` and
``holoforms_server.storage`` ship the production implementations and the
test suite ships in-memory fakes.

Typical integration flow::

    session = await FormSession.open(source, "customer-feedback-x1y2z3",
                                     SubmissionPipeline(store, sink))
    # ... route input events into session.state, call session.next() ...
    receipt = await session.submit()
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from holoforms.models.form import Form


class FormSource(ABC):
    """Where published form definitions come from."""

    @abstractmethod
    async def get_published_form(self, form_ref: str) -> Form:
        """Fetch a form by id or slug, with its fields.

        Raises
        ------
        FormNotFound
            No such form, or it is still a draft.
        FormClosed
            The form exists but no longer accepts responses.
        """


class ObjectStore(ABC):
    """Write-only file storage with public URLs."""

    @abstractmethod
    async def upload(self, path: str, content: bytes, content_type: str) -> str:
        """Store ``content`` under ``path`` and return its public URL.

        Raises
        ------
        UploadFailed
            The object could not be stored.
        """


class ResponseSink(ABC):
    """Append-only store for submitted responses."""

    @abstractmethod
    async def insert_response(
        self,
        form_id: str,
        response_data: dict[str, Any],
        *,
        submitted_by_email: str | None = None,
        submitted_by_name: str | None = None,
        submitted_at: datetime | None = None,
    ) -> str:
        """Persist one response and return its id.

        ``response_data`` is the flat wire object: field ids plus
        ``{id}_reason`` and ``{id}_attachments`` keys.  ``submitted_at`` is
        stored as given; ``None`` leaves it to the backend.
        """
