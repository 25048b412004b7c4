"""CSV export of stored responses.

Columns: submission date, submitter name and email, then one column per
collecting field labelled with the field's label.  List answers are joined
with ``", "``; every cell is double-quoted.
"""

from __future__ import annotations

import csv
import io
from datetime import datetime
from typing import Any, Iterable, Mapping

from holoforms.models.form import Form

BASE_COLUMNS = ["Submission Date", "Submitted By Name", "Submitted By Email"]


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def responses_to_csv(form: Form, responses: Iterable[Mapping[str, Any]]) -> str:
    """Render responses of ``form`` as CSV text.

    Each response is a mapping with ``submitted_at``, ``submitted_by_name``,
    ``submitted_by_email`` and the flat ``response_data`` object.
    """
    fields = form.collecting_fields
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(BASE_COLUMNS + [f.label for f in fields])
    for response in responses:
        data = response.get("response_data") or {}
        writer.writerow(
            [
                _cell(response.get("submitted_at")),
                _cell(response.get("submitted_by_name")),
                _cell(response.get("submitted_by_email")),
            ]
            + [_cell(data.get(f.id)) for f in fields]
        )
    return buf.getvalue()
