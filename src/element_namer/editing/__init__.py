"""Edit primitives and the empty-attribute insertion trigger."""

from .models import Insertion, TextChange, TextEdit, apply_edit
from .trigger import (
    EditGuard,
    PendingInsertion,
    find_empty_attributes,
    plan_auto_insert,
    resolve_prefix,
    tag_name_before,
)

__all__ = [
    "EditGuard",
    "Insertion",
    "PendingInsertion",
    "TextChange",
    "TextEdit",
    "apply_edit",
    "find_empty_attributes",
    "plan_auto_insert",
    "resolve_prefix",
    "tag_name_before",
]
