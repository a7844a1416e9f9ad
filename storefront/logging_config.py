"""
logging_config.py
------------------

Shared logging configuration for the storefront data layer.  It uses
Python's built‑in ``logging`` module so that output can be captured by
standard handlers or shipped to an external aggregator.  Messages are
serialised as JSON strings with an ``event`` field to make them easy
to parse downstream.

Import ``logger`` and call its methods instead of ``logging.info``
directly.  The ``log_call`` decorator can be applied to service
functions to record entry and exit points at the DEBUG level without
dumping whole product lists into the log.
"""

from __future__ import annotations

import json
import logging
import sys
from functools import wraps
from typing import Any, Callable, Dict

# -----------------------------------------------------------------------------
# Configure global logging
# -----------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger("storefront")

# Lists longer than this are summarised instead of logged element by element.
_MAX_LIST_ITEMS = 10


def _sanitize(obj: Any) -> Any:
    """Recursively reduce objects to something small and JSON friendly.

    Long lists (typically product result sets) are replaced by a short
    summary, pydantic models are dumped, and anything that cannot be
    serialised falls back to its ``str``.
    """
    if isinstance(obj, (bytes, bytearray)):
        return f"<binary {len(obj)} bytes>"
    if isinstance(obj, dict):
        return {str(k): _sanitize(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        if len(obj) > _MAX_LIST_ITEMS:
            return f"<{type(obj).__name__} of {len(obj)} items>"
        return [_sanitize(i) for i in obj]
    if hasattr(obj, "model_dump"):
        try:
            return _sanitize(obj.model_dump(mode="json"))
        except Exception:
            return str(obj)
    try:
        return json.loads(json.dumps(obj))
    except (TypeError, ValueError):
        return str(obj)


def log_event(level: int, event: str, **fields: Any) -> None:
    """Emit a single JSON log line ``{"event": event, **fields}``."""
    if not logger.isEnabledFor(level):
        return
    payload: Dict[str, Any] = {"event": event}
    payload.update(_sanitize(fields))
    logger.log(level, json.dumps(payload))


def log_call(func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator to log entry and exit of functions.

    Emits ``call_start`` before the wrapped function runs and
    ``call_end`` afterwards, both at DEBUG level.  Arguments and the
    return value go through ``_sanitize`` first.

    Examples
    --------

    >>> @log_call
    ... def add(a, b):
    ...     return a + b
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        log_event(logging.DEBUG, "call_start", function=func.__name__, args=args, kwargs=kwargs)
        result = func(*args, **kwargs)
        log_event(logging.DEBUG, "call_end", function=func.__name__, result=result)
        return result

    return wrapper
