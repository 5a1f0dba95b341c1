"""
Navigation layer: where routed URLs are opened.
"""
from .base import NavigationError, Navigator
from .browser import BrowserNavigator
from .recording import RecordingNavigator

__all__ = ["Navigator", "NavigationError", "BrowserNavigator", "RecordingNavigator", "create_navigator"]


def create_navigator(kind: str) -> Navigator:
    if kind == "browser":
        return BrowserNavigator()
    return RecordingNavigator()
