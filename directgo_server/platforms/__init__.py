"""
Platform content resolvers.

Turn a supported platform's search-results URL into the URL of its best
single result (video, post or note).
"""
from .base import HtmlPatternResolver, PlatformResolver, extract_first_match
from .pipeline import resolve_first_result
from .registry import PlatformRegistry

__all__ = [
    "PlatformResolver",
    "HtmlPatternResolver",
    "PlatformRegistry",
    "extract_first_match",
    "resolve_first_result",
]
