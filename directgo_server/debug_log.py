"""
Process-wide debug logging.

Routing emits structured debug events (``routeQuery.start``,
``bilibili.resolve.scored``, ...). They are written to the standard logger only
while the debug flag is on, and the most recent entries are kept in memory so
the API can show them. The flag follows the ``enable_debug_logs`` setting and
can change at any time without affecting a session in flight.
"""
import json
import logging
import time
from collections import deque
from typing import Any, Deque, Dict, List

logger = logging.getLogger("directgo_server.debug")

DEBUG_LOG_LIMIT = 200

_enabled = False
_recent: Deque[Dict[str, Any]] = deque(maxlen=DEBUG_LOG_LIMIT)


def set_debug_logging(enabled: bool) -> None:
    """Turn structured debug events on or off; turning them off drops the buffer."""
    global _enabled
    _enabled = bool(enabled)
    if not _enabled:
        _recent.clear()


def is_debug_logging_enabled() -> bool:
    return _enabled


def debug_event(event: str, **data: Any) -> None:
    if not _enabled:
        return
    entry = {"t": int(time.time() * 1000), "event": str(event or ""), "data": data or None}
    _recent.append(entry)
    logger.info(f"[DirectGO] {entry['event']} {json.dumps(data, ensure_ascii=False, default=str)}")


def recent_debug_events() -> List[Dict[str, Any]]:
    return list(_recent)
