"""
Base layer for navigation targets.
All navigators should inherit from Navigator.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class NavigationError(Exception):
    """Raised when a navigator cannot open a URL."""


class Navigator(ABC):
    """Abstract base class for the surface that actually opens URLs."""

    def __init__(self, config: Dict[str, Any] = None):
        """Initialize navigator with configuration."""
        self.config = config or {}
        self.name = self.__class__.__name__

    @abstractmethod
    async def navigate_target(self, target_id: Optional[str], url: str) -> None:
        """
        Replace the content of a target with a URL.

        Args:
            target_id: Identifier of the tab/window to navigate; None means
                the navigator's default target
            url: Fully validated URL to open

        Raises:
            NavigationError: the target is gone or the URL could not be opened
        """
        pass

    async def health_check(self) -> bool:
        """
        Check if the navigator can currently open URLs.

        Returns:
            True if healthy, False otherwise
        """
        return True
