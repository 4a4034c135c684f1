"""
Interpreter stack headroom for the recursive stages

Include resolution and macro expansion recurse once per nesting level and
enforce their own depth bounds. The interpreter limit is raised for the
duration of a run so that those bounds, not a RecursionError, end a
runaway document.
"""

import sys
from contextlib import contextmanager
from typing import Iterator


@contextmanager
def recursionLimit_ensure(frames: int) -> Iterator[None]:
    """
    Temporarily make room for at least `frames` additional stack frames

    The previous limit is restored on exit, error or not.
    """
    previous = sys.getrecursionlimit()
    required = frames + _stackDepth_current()
    if required > previous:
        sys.setrecursionlimit(required)
    try:
        yield
    finally:
        sys.setrecursionlimit(previous)


def _stackDepth_current() -> int:
    depth = 0
    frame = sys._getframe()
    while frame is not None:
        depth += 1
        frame = frame.f_back
    return depth
