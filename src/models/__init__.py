"""
Models package for mdtangle

Contains data structures and type definitions for the tangle pipeline.
"""

from .state import ProgramState, pipeline
from .errors import ErrorKind, TangleError
from .document import (
    Line,
    Directive,
    DirectiveKind,
    FenceHeader,
    Fragment,
    Block,
    MacroReference,
    ConditionalFrame,
    IncludeRecord,
)

__all__ = [
    "ProgramState",
    "pipeline",
    "ErrorKind",
    "TangleError",
    "Line",
    "Directive",
    "DirectiveKind",
    "FenceHeader",
    "Fragment",
    "Block",
    "MacroReference",
    "ConditionalFrame",
    "IncludeRecord",
]
