"""
Error taxonomy for the tangle pipeline

Every failure inside the pipeline is fatal for the current document run.
Errors carry a kind (what class of mistake the document contains) and an
explicit cause chain so the top-level caller can present the whole story.
"""

from enum import Enum
from typing import Iterator, Optional


class ErrorKind(Enum):
    """
    Kinds of fatal pipeline errors
    """
    STRUCTURAL = "structural"          # missing fence, unbalanced conditionals, mixed languages
    REFERENCE = "reference"            # unknown macro, unknown filter, include not found
    BOUND_EXCEEDED = "bound_exceeded"  # include or macro recursion too deep
    EVALUATOR = "evaluator"            # failure raised by extension code
    IO = "io"                          # unreadable input, unwritable output
    SELF_TEST = "self_test"            # built-in self-test check failed


class TangleError(Exception):
    """
    Fatal error raised by a tangle or weave stage

    Attributes:
        kind: ErrorKind classifying the failure
        message: Human-readable description
        cause: The error this one wraps, if any

    Example:
        >>> inner = TangleError(ErrorKind.REFERENCE, "Macro 'foo' unknown")
        >>> outer = TangleError.wrap("Failed to process line: ⦅foo⦆", inner)
        >>> outer.kind
        <ErrorKind.REFERENCE: 'reference'>
    """

    def __init__(self, kind: ErrorKind, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    @classmethod
    def wrap(cls, message: str, cause: BaseException) -> "TangleError":
        """
        Wrap an error with additional context

        The wrapper keeps the kind of a wrapped TangleError; anything else
        is treated as coming from extension code.
        """
        kind = cause.kind if isinstance(cause, TangleError) else ErrorKind.EVALUATOR
        return cls(kind, message, cause)

    def causes(self) -> Iterator[BaseException]:
        """Yield each wrapped error, innermost last"""
        current = self.cause
        while current is not None:
            yield current
            if isinstance(current, TangleError):
                current = current.cause
            else:
                current = current.__cause__

    def root(self) -> BaseException:
        """The innermost error of the chain"""
        innermost: BaseException = self
        for innermost in self.causes():
            pass
        return innermost

    def report(self) -> str:
        """
        Render the error and its cause chain

        Example output:
            Error: Failed to process line: ⦅foo⦆
              Caused by: Macro 'foo' unknown
        """
        lines = [f"Error: {self.message}"]
        for cause in self.causes():
            message = cause.message if isinstance(cause, TangleError) else str(cause)
            lines.append(f"  Caused by: {message}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.message
