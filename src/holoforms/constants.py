"""Form engine constants shared across the SDK.

These values are referenced by the response state, validator, renderer and
submission pipeline.  Attachment limits and the auth cache window can be
overridden via environment variables so that deployments can tune them
without code changes.
"""

import os

# Field types that only carry a label: never validated, never submitted.
DISPLAY_ONLY_TYPES: frozenset[str] = frozenset({"section", "description"})

# Scalar types that may collect an ordered list of answers (allow_multiple).
MULTI_VALUE_TYPES: frozenset[str] = frozenset({"text", "email", "number", "textarea"})

# Same shape the public form page has always accepted: local@domain.tld
EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"

# Label and value of the synthetic select entry revealed by include_other.
# The value cannot collide with an author-defined option label.
OTHER_OPTION_LABEL = "Other"
OTHER_OPTION_VALUE = "__other__"

SELECT_PLACEHOLDER = "Select an option"

# Wire-format key suffixes for the flat response_data object.
REASON_SUFFIX = "_reason"
ATTACHMENTS_SUFFIX = "_attachments"

# Extension used in the object-store path when a file name has none.
DEFAULT_ATTACHMENT_EXTENSION = "bin"

# User-facing validation messages.
MSG_REQUIRED = "This field is required"
MSG_INVALID_EMAIL = "Please enter a valid email address"
MSG_REASON_REQUIRED = "Please provide a reason for your answer"

# Navigation control labels.
NEXT_LABEL = "Next"
SUBMIT_LABEL = "Submit"

# Upload limits enforced at the HTTP boundary.
# Overridable via MAX_ATTACHMENT_BYTES / MAX_ATTACHMENTS_PER_FIELD env vars.
MAX_ATTACHMENT_BYTES = int(os.getenv("MAX_ATTACHMENT_BYTES", str(25 * 1024 * 1024)))
MAX_ATTACHMENTS_PER_FIELD = int(os.getenv("MAX_ATTACHMENTS_PER_FIELD", "10"))

# Cached authorization lifetime (24 hours).
AUTH_CACHE_TTL_SECONDS = int(os.getenv("AUTH_CACHE_TTL_SECONDS", str(24 * 60 * 60)))

# Human-readable names for the form builder's field palette.
FIELD_TYPE_LABELS: dict[str, str] = {
    "text": "Short Text",
    "textarea": "Long Text",
    "email": "Email",
    "number": "Number",
    "select": "Dropdown",
    "radio": "Multiple Choice",
    "checkbox": "Checkboxes",
    "date": "Date",
    "section": "Section Header",
    "description": "Description Text",
}
