"""
Navigator that only records what it was asked to open.

Used by the HTTP API (the caller opens the returned URL itself) and by tests.
"""
import logging
from typing import List, Optional, Tuple

from .base import Navigator

logger = logging.getLogger(__name__)


class RecordingNavigator(Navigator):
    """Keeps every (target_id, url) pair in ``history``."""

    def __init__(self, config=None):
        super().__init__(config)
        self.history: List[Tuple[Optional[str], str]] = []

    async def navigate_target(self, target_id: Optional[str], url: str) -> None:
        logger.debug(f"Recorded navigation for target {target_id}: {url}")
        self.history.append((target_id, url))
