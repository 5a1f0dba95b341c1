"""
Query optimization.

Turns free text such as "在b站上 周杰伦的最新视频" or "latest video of MrBeast"
into the keyword a platform search should receive, and answers the two intent
questions the content resolvers need: does the user want the latest upload,
and is the query about a specific creator?

All rules live in ordered pattern tables so each one can be tested on its own.
The platform aliases and locale words are hard-coded.
"""
import re
from dataclasses import dataclass
from typing import List, Optional, Pattern


@dataclass(frozen=True)
class CapturePattern:
    """A regex whose ``subject`` group isolates the creator/topic phrase."""
    name: str
    regex: Pattern

    def extract(self, text: str) -> Optional[str]:
        match = self.regex.match(text)
        if not match:
            return None
        subject = (match.group("subject") or "").strip()
        return subject or None


_ZH_PLATFORMS = r"b站|B站|哔哩哔哩|抖音|小红书|推特"
_EN_PLATFORMS = r"bilibili|reddit|youtube|tiktok|twitter|douyin|xiaohongshu|x"
_ZH_WORKS = r"视频|作品|动态|帖子|笔记"
_ZH_CREATOR_WORKS = r"视频|作品|动态|投稿"
_EN_LATEST = r"latest|newest|most\s+recent"
_EN_WORKS = r"video|videos|post|posts|note|notes"

# Apostrophes inside a word (possessive 's, rock'n'roll) are not quotes.
_QUOTES = re.compile(r"[“”\"]|(?<!\w)'|'(?!\w)")

# Leading platform mentions, applied in order (each at most once).
PLATFORM_PREFIX_PATTERNS: List[Pattern] = [
    re.compile(
        rf"^(?:在)?(?:(?:{_ZH_PLATFORMS})|(?:{_EN_PLATFORMS})(?![A-Za-z0-9]))(?:上|里)?\s*(?:[:：]\s*)?",
        re.IGNORECASE,
    ),
    re.compile(rf"^(?:on|in|at)\s+(?:{_EN_PLATFORMS})(?![A-Za-z0-9])\s*", re.IGNORECASE),
]

# "<subject>'s latest video" phrasing; first match wins.
SUBJECT_CAPTURE_PATTERNS: List[CapturePattern] = [
    CapturePattern("zh_possessive", re.compile(rf"^(?P<subject>.+?)的(?:最新|最近)?(?:{_ZH_WORKS})\s*$")),
    CapturePattern("zh_latest", re.compile(rf"^(?P<subject>.+?)(?:最新|最近)(?:{_ZH_WORKS})\s*$")),
    CapturePattern(
        "en_possessive",
        re.compile(rf"^(?P<subject>.+?)(?:'s|’s)\s+(?:(?:{_EN_LATEST})\s+)?(?:{_EN_WORKS})\s*$", re.IGNORECASE),
    ),
    CapturePattern(
        "en_latest_works",
        re.compile(rf"^(?P<subject>.+?)\s+(?:{_EN_LATEST})\s+(?:{_EN_WORKS})\s*$", re.IGNORECASE),
    ),
    CapturePattern(
        "en_latest_uploads",
        re.compile(rf"^(?P<subject>.+?)\s+(?:{_EN_LATEST})\s+(?:upload|uploads)\s*$", re.IGNORECASE),
    ),
    CapturePattern("en_latest", re.compile(rf"^(?P<subject>.+?)\s+(?:{_EN_LATEST})\s*$", re.IGNORECASE)),
    CapturePattern(
        "en_latest_of",
        re.compile(rf"^(?:the\s+)?(?:{_EN_LATEST})\s+(?:{_EN_WORKS})\s+(?:of|from|by)\s+(?P<subject>.+?)\s*$", re.IGNORECASE),
    ),
]

# Narrower subset used to isolate just the creator noun phrase.
CREATOR_NAME_PATTERNS: List[CapturePattern] = [
    CapturePattern("zh_creator_possessive", re.compile(rf"^(?P<subject>.+?)的(?:最新|最近)?(?:{_ZH_CREATOR_WORKS})\s*$")),
    CapturePattern("zh_creator_latest", re.compile(rf"^(?P<subject>.+?)(?:最新|最近)(?:{_ZH_CREATOR_WORKS})\s*$")),
    CapturePattern(
        "en_creator_possessive",
        re.compile(rf"^(?P<subject>.+?)(?:'s|’s)\s+(?:(?:{_EN_LATEST})\s+)?(?:video|videos|post|posts)\s*$", re.IGNORECASE),
    ),
    CapturePattern(
        "en_creator_latest",
        re.compile(rf"^(?P<subject>.+?)\s+(?:latest|newest)\s+(?:video|videos)\s*$", re.IGNORECASE),
    ),
    CapturePattern(
        "en_creator_latest_of",
        re.compile(rf"^(?:the\s+)?(?:{_EN_LATEST})\s+(?:video|videos)\s+(?:of|from|by)\s+(?P<subject>.+?)\s*$", re.IGNORECASE),
    ),
]

# Shapes that name a creator and ask for their works. Every entry is also a
# CREATOR_NAME_PATTERNS entry, so a creator intent always yields a name.
CREATOR_INTENT_PATTERNS: List[CapturePattern] = CREATOR_NAME_PATTERNS[:3]

TRAILING_NOISE_PATTERNS: List[Pattern] = [
    re.compile(r"\s*(?:最新|最近|新|热门|完整版|高清|合集|教程|下载|官网|入口|地址)\s*$"),
    re.compile(r"\s+(?:latest|newest|hot|download|video|videos|post|posts)\s*$", re.IGNORECASE),
]

_LATEST_MARKER = re.compile(r"最新|最近|latest|newest|most\s+recent", re.IGNORECASE)


def _first_subject(patterns: List[CapturePattern], text: str) -> Optional[str]:
    for pattern in patterns:
        subject = pattern.extract(text)
        if subject:
            return subject
    return None


def strip_platform_prefix(text: str) -> str:
    for pattern in PLATFORM_PREFIX_PATTERNS:
        text = pattern.sub("", text, count=1)
    return text.strip()


def optimize_search_keyword(raw: Optional[str]) -> str:
    """
    Reduce free text to a search keyword.

    Returns the original (trimmed) text when the optimized form would be
    shorter than two characters, and "" for empty input.
    """
    original = str(raw or "").strip()
    if not original:
        return ""

    q = _QUOTES.sub("", original).strip()
    q = strip_platform_prefix(q)

    subject = _first_subject(SUBJECT_CAPTURE_PATTERNS, q)
    if subject and len(subject) >= 2:
        q = subject

    for pattern in TRAILING_NOISE_PATTERNS:
        q = pattern.sub("", q).strip()

    if len(q) < 2:
        return original
    return q


def wants_latest(raw: Optional[str]) -> bool:
    return bool(_LATEST_MARKER.search(str(raw or "")))


def extract_creator_name(raw: Optional[str], fallback: Optional[str] = "") -> str:
    q = str(raw or "").strip()
    return _first_subject(CREATOR_NAME_PATTERNS, q) or str(fallback or "").strip()


def is_creator_intent(raw: Optional[str]) -> bool:
    q = str(raw or "").strip()
    return any(pattern.regex.match(q) for pattern in CREATOR_INTENT_PATTERNS)
