"""Path safety for client-supplied document references."""

from .paths import PathBlockedError, resolve_document_path

__all__ = ["PathBlockedError", "resolve_document_path"]
