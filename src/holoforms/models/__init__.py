"""Public model re-exports for holoforms.

Consumers should import from ``holoforms.models`` rather than reaching
into sub-modules directly.
"""

# --- Field / form ---
from holoforms.models.field import FieldType, FormField
from holoforms.models.form import Form, FormStatus

# --- Answers ---
from holoforms.models.answer import (
    AnswerValue,
    AttachedAnswer,
    ListAnswer,
    ReasonedAnswer,
    ScalarAnswer,
    answer_value,
    flatten_answers,
    parse_response_data,
    plain_answer,
)

# --- Session ---
from holoforms.models.session import (
    FieldValue,
    OtherSelection,
    PendingAttachment,
    RegularSelection,
    SelectState,
    SessionStatus,
    SubmissionReceipt,
)

# --- Controls / events ---
from holoforms.models.control import (
    AddFiles,
    AddRow,
    AttachmentZone,
    CheckboxControl,
    ChoiceOption,
    ChooseOption,
    Control,
    DescriptionControl,
    InputControl,
    InputEvent,
    MultiInputControl,
    NavigationView,
    PageView,
    RadioControl,
    ReasonPrompt,
    RemoveFile,
    RemoveRow,
    SectionControl,
    SelectControl,
    SetOtherText,
    SetReason,
    SetRow,
    SetValue,
    TextareaControl,
    ToggleOption,
)

__all__ = [
    # Field / form
    "FieldType",
    "FormField",
    "Form",
    "FormStatus",
    # Answers
    "AnswerValue",
    "AttachedAnswer",
    "ListAnswer",
    "ReasonedAnswer",
    "ScalarAnswer",
    "answer_value",
    "flatten_answers",
    "parse_response_data",
    "plain_answer",
    # Session
    "FieldValue",
    "OtherSelection",
    "PendingAttachment",
    "RegularSelection",
    "SelectState",
    "SessionStatus",
    "SubmissionReceipt",
    # Controls
    "AttachmentZone",
    "CheckboxControl",
    "ChoiceOption",
    "Control",
    "DescriptionControl",
    "InputControl",
    "MultiInputControl",
    "NavigationView",
    "PageView",
    "RadioControl",
    "ReasonPrompt",
    "SectionControl",
    "SelectControl",
    "TextareaControl",
    # Events
    "AddFiles",
    "AddRow",
    "ChooseOption",
    "InputEvent",
    "RemoveFile",
    "RemoveRow",
    "SetOtherText",
    "SetReason",
    "SetRow",
    "SetValue",
    "ToggleOption",
]
