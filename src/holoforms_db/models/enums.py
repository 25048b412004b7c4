"""Database-level enumerations.

The form status lives in the SDK (``holoforms.models.form.FormStatus``);
it is re-exported here so ORM code and migrations import it from one place.
"""

from holoforms.models.field import FieldType
from holoforms.models.form import FormStatus

__all__ = ["FieldType", "FormStatus"]
