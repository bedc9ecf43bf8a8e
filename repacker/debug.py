"""Tiered debug logging for Repacker

``debug`` is the one :py:class:`~.tiered_debug.TieredDebug` instance shared by
every module. Levels 1-5 become progressively noisier; only messages at or below
:py:attr:`debug.level` are emitted, and only when the ``repacker`` logger is at
``DEBUG``.
"""

from functools import wraps
from typing import Any, Dict, Optional

from tiered_debug import TieredDebug

debug = TieredDebug(level=1, stacklevel=3)
"""Global TieredDebug instance with default level 1 and stacklevel 3."""


def set_debug_level(level: Optional[int]) -> None:
    """Set the tier of the global :py:data:`debug` object

    :param level: 1 through 5. ``None`` leaves the current level in place.
    """
    if level is None:
        return
    debug.level = max(1, min(5, int(level)))


def begin_end(begin: int = 2, end: int = 3, extra: Optional[Dict[str, Any]] = None):
    """Decorator logging ``BEGIN CALL`` / ``END CALL`` around a function

    :param begin: Debug tier for the entry message
    :param end: Debug tier for the exit message
    :param extra: Passed through to the log record
    """

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            debug.log(begin, f"BEGIN CALL: {func.__name__}()", stacklevel=3, extra=extra)
            result = func(*args, **kwargs)
            debug.log(end, f"END CALL: {func.__name__}()", stacklevel=3, extra=extra)
            return result

        return wrapper

    return decorator
