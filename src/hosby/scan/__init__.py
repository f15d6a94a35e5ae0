"""Project scanning: file selection and content reduction."""

from hosby.scan.reducer import ContentReducer, estimate_tokens
from hosby.scan.selector import FileSelector, SelectionLimits, SelectionResult, score_file

__all__ = [
    "ContentReducer",
    "FileSelector",
    "SelectionLimits",
    "SelectionResult",
    "estimate_tokens",
    "score_file",
]
