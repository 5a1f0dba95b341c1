"""
Navigator that opens URLs in the local desktop browser.

The first navigation of a target opens a new tab; later navigations of the
same target can only open again, since the standard browser controller cannot
replace an existing tab's content.
"""
import asyncio
import logging
import webbrowser
from typing import Optional, Set

from .base import NavigationError, Navigator

logger = logging.getLogger(__name__)


class BrowserNavigator(Navigator):
    """Opens URLs through the ``webbrowser`` module."""

    def __init__(self, config=None):
        super().__init__(config)
        self.browser_name: Optional[str] = self.config.get("browser")
        self._opened: Set[Optional[str]] = set()

    def _controller(self) -> webbrowser.BaseBrowser:
        try:
            return webbrowser.get(self.browser_name)
        except webbrowser.Error as e:
            raise NavigationError(f"No usable browser: {e}") from e

    async def navigate_target(self, target_id: Optional[str], url: str) -> None:
        controller = self._controller()
        new = 0 if target_id in self._opened else 2
        opened = await asyncio.to_thread(controller.open, url, new)
        if not opened:
            raise NavigationError(f"Browser refused to open {url}")
        self._opened.add(target_id)
        logger.info(f"Opened {url} for target {target_id}")

    async def health_check(self) -> bool:
        try:
            self._controller()
        except NavigationError:
            return False
        return True
