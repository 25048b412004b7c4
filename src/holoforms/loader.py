"""Form definitions from YAML files.

A definition file describes one form::

    id: customer-feedback          # optional, defaults to the file stem
    name: Customer Feedback
    status: published
    slug: customer-feedback-a1b2c3
    fields:
      - id: q_name
        type: text
        label: Your name
        required: true
      - id: q_recommend
        type: select
        label: Would you recommend us?
        options: ["Yes", "No"]
        require_no_reason: true
        page_number: 2

Fields without ``display_order`` keep their position in the list.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from holoforms.models.form import Form

logger = logging.getLogger(__name__)


def load_yaml(path: Path | str) -> Any:
    """Load a single YAML file and return the parsed contents."""
    if isinstance(path, str):
        path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Missing YAML file: {path}")
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def form_from_dict(raw: dict[str, Any], default_id: str | None = None) -> Form:
    """Build a Form from a parsed definition mapping."""
    if not isinstance(raw, dict):
        raise ValueError("Form definition must be a mapping")
    data = dict(raw)
    if "id" not in data and default_id is not None:
        data["id"] = default_id
    fields = []
    for index, field in enumerate(data.get("fields") or []):
        field = dict(field)
        field.setdefault("display_order", index)
        fields.append(field)
    data["fields"] = fields
    return Form.model_validate(data)


def load_form_definition(path: Path | str) -> Form:
    """Parse one YAML definition file into a Form."""
    path = Path(path)
    form = form_from_dict(load_yaml(path), default_id=path.stem)
    logger.info(
        "Loaded form %s from %s (%d fields, %d pages)",
        form.id, path.name, len(form.fields), form.total_pages,
    )
    return form


def load_form_definitions(directory: Path | str) -> list[Form]:
    """Parse every ``*.yaml`` / ``*.yml`` file in ``directory``, sorted by name."""
    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"Missing form definition directory: {directory}")
    paths = sorted([*directory.glob("*.yaml"), *directory.glob("*.yml")])
    return [load_form_definition(p) for p in paths]
