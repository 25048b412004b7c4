"""Form ORM models — forms, their fields, and submitted responses.

Three tables, both children deleted with their form (``ON DELETE CASCADE``):

  - ``forms``           one row per form definition, owned by one user
  - ``form_fields``     ordered fields of a form, grouped into pages
  - ``form_responses``  append-only submissions; the flat answer object
                        lives in a single JSONB column
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from holoforms_db.models.base import Base
from holoforms_db.models.enums import FormStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FormRow(Base):
    """One form definition."""

    __tablename__ = "forms"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    # Owner, as passed by the upstream gateway in X-User-ID
    user_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=FormStatus.DRAFT.value,
        server_default=text("'draft'"),
    )
    # Public link identifier; forms may also be reached by id
    slug: Mapped[str | None] = mapped_column(Text, nullable=True, unique=True)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow,
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('draft', 'published', 'closed')",
            name="ck_form_status",
        ),
    )

    def __repr__(self) -> str:
        return f"<FormRow(id={self.id!s}, name={self.name!r}, status={self.status!r})>"


class FormFieldRow(Base):
    """One field of a form."""

    __tablename__ = "form_fields"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    form_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("forms.id", ondelete="CASCADE"),
        nullable=False,
    )
    field_type: Mapped[str] = mapped_column(String(20), nullable=False)
    label: Mapped[str] = mapped_column(Text, nullable=False)
    required: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false"),
    )
    # Choices for select / radio / checkbox; null for other types
    options: Mapped[list | None] = mapped_column(JSONB, nullable=True)
    allow_multiple: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false"),
    )
    allow_attachments: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false"),
    )
    include_other: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false"),
    )
    require_yes_reason: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false"),
    )
    require_no_reason: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false"),
    )
    display_order: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0"),
    )
    page_number: Mapped[int] = mapped_column(
        Integer, nullable=False, default=1, server_default=text("1"),
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=_utcnow,
    )

    __table_args__ = (
        CheckConstraint("page_number >= 1", name="ck_field_page_positive"),
        Index("ix_form_fields_order", "form_id", "page_number", "display_order"),
    )

    def __repr__(self) -> str:
        return (
            f"<FormFieldRow(id={self.id!s}, type={self.field_type!r}, "
            f"page={self.page_number}, order={self.display_order})>"
        )


class FormResponseRow(Base):
    """One submitted response."""

    __tablename__ = "form_responses"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    form_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("forms.id", ondelete="CASCADE"),
        nullable=False,
    )
    # Flat answer object: {field_id: value, "<id>_reason": ..., "<id>_attachments": [...]}
    response_data: Mapped[dict] = mapped_column(
        JSONB, nullable=False, server_default=text("'{}'::jsonb"),
    )
    submitted_by_email: Mapped[str | None] = mapped_column(Text, nullable=True)
    submitted_by_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    submitted_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=_utcnow,
    )

    __table_args__ = (
        Index("ix_form_responses_form_submitted", "form_id", "submitted_at"),
    )

    def __repr__(self) -> str:
        return f"<FormResponseRow(id={self.id!s}, form={self.form_id!s})>"
