"""
Loguru-backed logging for the tangle and weave stages

The CLI binds its ProgramState once with state_connectToLogger(); after that
every stage logs through LOG() and is filtered by the state's verbosity, so
Tangler, Weaver and the rest never take a verbosity argument.

    state_connectToLogger(state)
    LOG("Tangling doc.lmd", level=1)              # default
    LOG("Assembled 12 named blocks", level=2)     # -v
    LOG("Expanding 3 lines at depth 4", level=3)  # -vv

Used as a library (no state bound), LOG() is silent. WARN() is never
filtered: it reports conditions the user must see, such as self-test
failures downgraded by --dev.
"""

import sys
from contextvars import ContextVar
from typing import Any, Optional

from loguru import logger

_program_state: ContextVar[Optional[Any]] = ContextVar("program_state", default=None)

logger_format = (
    "<green>{time:HH:mm:ss}</green> │ "
    "<level>{level: <7}</level> │ "
    "<cyan>{module: <12}</cyan> "
    "<cyan>{function: <24}</cyan> ║ "
    "<level>{message}</level>"
)

logger.remove()
logger.add(sys.stderr, format=logger_format, level="DEBUG")


def state_connectToLogger(state: Any) -> None:
    """
    Bind a ProgramState (anything with a verbosity attribute) to the
    current logging context
    """
    _program_state.set(state)


def verbosity_current() -> int:
    """Verbosity of the bound state, 0 when none is bound"""
    state = _program_state.get()
    return getattr(state, "verbosity", 0) if state is not None else 0


def LOG(message: str, level: int = 1, **kwargs: Any) -> None:
    """
    Log a progress message when the bound verbosity is at least level

    Args:
        message: Text to log
        level: 1 = normal, 2 = verbose, 3 = debug
        **kwargs: Passed through to loguru
    """
    if verbosity_current() >= level:
        logger.opt(depth=1).debug(message, **kwargs)


def WARN(message: str, **kwargs: Any) -> None:
    """Log a warning regardless of verbosity"""
    logger.opt(depth=1).warning(message, **kwargs)
