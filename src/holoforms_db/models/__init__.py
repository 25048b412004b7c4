"""ORM models for holoforms_db."""

from holoforms_db.models.base import Base
from holoforms_db.models.enums import FieldType, FormStatus
from holoforms_db.models.form import FormFieldRow, FormResponseRow, FormRow

__all__ = [
    "Base",
    "FieldType",
    "FormStatus",
    "FormFieldRow",
    "FormResponseRow",
    "FormRow",
]
