"""Answer values — the submitted payload as a tagged union per field.

Inside the SDK a submitted response is a ``dict[field_id, AnswerValue]``
where each value says exactly what it holds:

  - ScalarAnswer:   one string (text, email, number, date, select, radio)
  - ListAnswer:     ordered strings (checkbox, allow_multiple fields)
  - ReasonedAnswer: a select value plus its yes/no justification
  - AttachedAnswer: any answer plus the public URLs of uploaded files

Stored responses use the flat wire format instead, where the reason and
the attachment URLs live under ``{field_id}_reason`` and
``{field_id}_attachments`` keys next to the answer.  :func:`flatten_answers`
and :func:`parse_response_data` convert between the two.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

from holoforms.constants import ATTACHMENTS_SUFFIX, REASON_SUFFIX
from holoforms.models.form import Form


class ScalarAnswer(BaseModel):
    kind: Literal["scalar"] = "scalar"
    value: str


class ListAnswer(BaseModel):
    kind: Literal["list"] = "list"
    values: list[str]


class ReasonedAnswer(BaseModel):
    kind: Literal["reasoned"] = "reasoned"
    value: str
    reason: str


class AttachedAnswer(BaseModel):
    """An answer that came with files; ``urls`` are in upload order."""

    kind: Literal["attached"] = "attached"
    answer: str | list[str]
    urls: list[str]
    reason: str | None = None


AnswerValue = Annotated[
    Union[ScalarAnswer, ListAnswer, ReasonedAnswer, AttachedAnswer],
    Field(discriminator="kind"),
]


def plain_answer(value: str | list[str]) -> ScalarAnswer | ListAnswer:
    """Wrap a committed value in ScalarAnswer or ListAnswer."""
    if isinstance(value, list):
        return ListAnswer(values=list(value))
    return ScalarAnswer(value=value)


def answer_value(answer: AnswerValue) -> str | list[str]:
    """The bare answer of any variant."""
    if isinstance(answer, ListAnswer):
        return list(answer.values)
    if isinstance(answer, AttachedAnswer):
        return answer.answer
    return answer.value


def flatten_answers(answers: dict[str, AnswerValue]) -> dict[str, Any]:
    """Convert tagged answers to the flat one-level wire object."""
    data: dict[str, Any] = {}
    for field_id, answer in answers.items():
        data[field_id] = answer_value(answer)
        if isinstance(answer, (ReasonedAnswer, AttachedAnswer)) and answer.reason:
            data[f"{field_id}{REASON_SUFFIX}"] = answer.reason
        if isinstance(answer, AttachedAnswer):
            data[f"{field_id}{ATTACHMENTS_SUFFIX}"] = list(answer.urls)
    return data


def parse_response_data(form: Form, data: dict[str, Any]) -> dict[str, AnswerValue]:
    """Read a stored wire object back into tagged answers.

    Suffixed keys are only interpreted for field ids the form actually
    has, so a field whose id happens to end in ``_reason`` keeps its own
    answer.  Keys that belong to no field are dropped.
    """
    parsed: dict[str, AnswerValue] = {}
    for f in form.collecting_fields:
        if f.id not in data and f"{f.id}{ATTACHMENTS_SUFFIX}" not in data:
            continue
        raw = data.get(f.id, [] if f.collects_list else "")
        value: str | list[str] = (
            [str(v) for v in raw] if isinstance(raw, list) else ("" if raw is None else str(raw))
        )
        reason = data.get(f"{f.id}{REASON_SUFFIX}") or None
        urls = data.get(f"{f.id}{ATTACHMENTS_SUFFIX}")

        if urls:
            parsed[f.id] = AttachedAnswer(answer=value, urls=list(urls), reason=reason)
        elif reason and isinstance(value, str):
            parsed[f.id] = ReasonedAnswer(value=value, reason=reason)
        else:
            parsed[f.id] = plain_answer(value)
    return parsed
