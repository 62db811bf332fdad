"""
narrativ logging: loguru output gated by the run's verbosity.

Each CLI run connects its ProgramState once, before the compile event loop
starts. Every asyncio task compiling a file inherits that context, so
library code calls LOG() without passing state around, and per-file
failures go through LOG_error() whatever the verbosity.

What shows up at each level:
    0  failed files only (LOG_error)
    1  one line per compiled file and written page, plus the final summary
    2  discovery and splitting: scanned directories, section counts,
       highlighter exit status
    3  highlighter command lines and output chunk counts

Usage:
    from narrativ.lib.log import LOG, LOG_error, state_connectToLogger

    state_connectToLogger(state)
    LOG(f"compiling {file.path}...", level=1)
    LOG(f"Split {file.path} into {len(sections)} sections", level=2)
    LOG(f"Running {' '.join(argv)} on {len(sections)} sections", level=3)
    LOG_error(f"{file.path}: pygmentize error: ...")
"""

from loguru import logger
from typing import Any, Optional
from contextvars import ContextVar
import sys

# Context variable to hold current ProgramState
_program_state: ContextVar[Optional[Any]] = ContextVar('program_state', default=None)

# Configure loguru with narrativ-specific format
logger_format = (
    "<green>{time:HH:mm:ss}</green> │ "
    "<level>{level: <5}</level> │ "
    "<cyan>{function: <20}</cyan> @ "
    "<cyan>{line: <4}</cyan> ║ "
    "<level>{message}</level>"
)

logger.remove()  # Remove default handler
logger.add(sys.stderr, format=logger_format, level="DEBUG")


def state_connectToLogger(state: Any) -> None:
    """
    Connect a ProgramState to the logging context.

    asyncio tasks copy the context they are created in, so connecting once
    before the event loop starts covers every file compiled inside it.

    Args:
        state: ProgramState instance with verbosity attribute
    """
    _program_state.set(state)


def LOG(message: str, level: int = 1, **kwargs: Any) -> None:
    """
    Log message if current state's verbosity allows.

    Args:
        message: Log message to display
        level: Minimum verbosity level required (1=normal, 2=verbose, 3=debug)
        **kwargs: Additional loguru metadata

    Verbosity levels:
        1 = Normal output (default)
        2 = Verbose (-v)
        3 = Debug (-vv or higher)
    """
    state = _program_state.get()

    if state and hasattr(state, 'verbosity') and state.verbosity >= level:
        logger.opt(depth=1).debug(message, **kwargs)


def LOG_error(message: str, **kwargs: Any) -> None:
    """Log an error regardless of verbosity"""
    logger.opt(depth=1).error(message, **kwargs)
