"""
mdtangle - Literate Markdown tangle and weave tool

Extracts source code from literate Markdown documents with named blocks,
macro references, includes and conditional output.
"""

__version__ = "1.0.0"

from .lib import Tangler, Weaver, ExtensionContext, FilterRegistry, TangleError, ErrorKind, LOG, state_connectToLogger

__all__ = [
    "Tangler",
    "Weaver",
    "ExtensionContext",
    "FilterRegistry",
    "TangleError",
    "ErrorKind",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
