"""
mdtangle - Literate Markdown tangle and weave tool

Extracts source code from literate Markdown documents with named blocks,
macro references, includes and conditional output.
"""

__version__ = "1.0.0"

from .tangle import Tangler
from .weave import Weaver
from .extensions import ExtensionContext
from .filters import Filter, LineFilter, FilterRegistry
from .log import LOG, WARN, state_connectToLogger
from ..models.errors import ErrorKind, TangleError

__all__ = [
    "Tangler",
    "Weaver",
    "ExtensionContext",
    "Filter",
    "LineFilter",
    "FilterRegistry",
    "ErrorKind",
    "TangleError",
    "LOG",
    "WARN",
    "state_connectToLogger",
    "__version__",
]
