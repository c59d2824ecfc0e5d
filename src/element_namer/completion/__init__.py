"""Selector completion providers."""

from .providers import (
    CompletionCandidate,
    SelectorContext,
    abbreviation_context,
    build_candidates,
    complete_markup,
    complete_stylesheet,
    stylesheet_context,
)

__all__ = [
    "CompletionCandidate",
    "SelectorContext",
    "abbreviation_context",
    "build_candidates",
    "complete_markup",
    "complete_stylesheet",
    "stylesheet_context",
]
