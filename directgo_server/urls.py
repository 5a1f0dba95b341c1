"""
URL safety and normalization helpers.

Every URL that can become a navigation target passes through these functions.
They are pure and never raise: invalid input yields None (or the input string
unchanged where noted).
"""
import re
from typing import Iterable, List, Optional
from urllib.parse import parse_qsl, quote, urlencode, urlsplit, urlunsplit

DEFAULT_API_ENDPOINT = "https://api.deepseek.com"

DEFAULT_ALLOWED_DOMAINS: List[str] = [
    "bilibili.com",
    "reddit.com",
    "youtube.com",
    "tiktok.com",
    "x.com",
    "twitter.com",
    "douyin.com",
    "xiaohongshu.com",
    "kuaishou.com",
    "zhihu.com",
    "weibo.com",
    "douban.com",
    "github.com",
    "stackoverflow.com",
    "wikipedia.org",
]

LOOPBACK_HOSTS = {"localhost", "127.0.0.1", "::1"}

_COMPLETIONS_PATH = "/chat/completions"
_SCHEME_PREFIX = re.compile(r"^https?://")
_BARE_HOST = re.compile(r"^[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}(?:[/:?#].*)?$")


def encode_query(text: Optional[str]) -> str:
    """Percent-encode a trimmed query component (encodeURIComponent semantics)."""
    return quote((text or "").strip(), safe="!~*'()")


def normalize_endpoint(raw: Optional[str]) -> str:
    value = (raw or "").strip().rstrip("/")
    return value or DEFAULT_API_ENDPOINT


def build_completions_url(endpoint: Optional[str]) -> str:
    """Append the chat-completions path to an API endpoint unless it is already there."""
    normalized = normalize_endpoint(endpoint)
    if normalized.endswith(_COMPLETIONS_PATH):
        return normalized
    if normalized.endswith("/v1"):
        return f"{normalized}{_COMPLETIONS_PATH}"
    return f"{normalized}/v1{_COMPLETIONS_PATH}"


def _normalize_domain(raw: object) -> str:
    domain = str(raw or "").strip().lower()
    previous = None
    while domain != previous:
        previous = domain
        domain = _SCHEME_PREFIX.sub("", domain)
        if domain.startswith("www."):
            domain = domain[4:]
    return domain.split("/", 1)[0].strip()


def normalize_allowed_domains(values: Optional[Iterable[object]]) -> List[str]:
    """
    Normalize an allowlist: lower-case, strip scheme, ``www.`` and path,
    dedupe preserving first-seen order.

    A missing, non-list or empty list falls back to the built-in defaults, so
    the result is never empty.
    """
    if not isinstance(values, (list, tuple, set, frozenset)):
        return list(DEFAULT_ALLOWED_DOMAINS)

    unique: List[str] = []
    for raw in values:
        domain = _normalize_domain(raw)
        if domain and domain not in unique:
            unique.append(domain)
    return unique or list(DEFAULT_ALLOWED_DOMAINS)


def is_host_allowed(host: Optional[str], allowed_domains: Iterable[str]) -> bool:
    host = (host or "").strip().lower()
    if not host:
        return False
    for domain in allowed_domains:
        if host == domain or host.endswith(f".{domain}"):
            return True
    return False


def _split(url: str):
    """urlsplit that also validates the port; returns None for unparseable input."""
    try:
        parts = urlsplit(url)
        parts.port  # raises ValueError on a malformed port
    except ValueError:
        return None
    return parts


def _canonical(parts) -> str:
    path = parts.path or "/"
    return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), path, parts.query, parts.fragment))


def _valid_host(parts) -> bool:
    host = parts.hostname or ""
    return bool(host) and not any(ch.isspace() for ch in host)


def normalize_navigable_url(url: Optional[str]) -> Optional[str]:
    """Accept https URLs and loopback http URLs; anything else yields None."""
    parts = _split(str(url or "").strip())
    if parts is None or not _valid_host(parts):
        return None
    scheme = parts.scheme.lower()
    if scheme == "https":
        return _canonical(parts)
    if scheme == "http" and parts.hostname in LOOPBACK_HOSTS:
        return _canonical(parts)
    return None


def normalize_ai_decision_url(url: Optional[str]) -> Optional[str]:
    """
    Normalize a URL proposed by the AI classifier.

    Absolute https (or loopback http) URLs are kept, other absolute http URLs are
    upgraded to https, and bare hosts such as ``www.example.com/path`` get an
    ``https://`` prefix.
    """
    raw = str(url or "").strip()
    if not raw:
        return None

    parts = _split(raw)
    if parts is not None and parts.scheme and _valid_host(parts):
        scheme = parts.scheme.lower()
        if scheme == "https":
            return _canonical(parts)
        if scheme == "http":
            if parts.hostname in LOOPBACK_HOSTS:
                return _canonical(parts)
            return _canonical(parts._replace(scheme="https"))

    if not (raw.startswith("www.") or _BARE_HOST.match(raw)):
        return None

    parts = _split(f"https://{raw}")
    if parts is None or not _valid_host(parts):
        return None
    return _canonical(parts)


def is_disallowed_ai_decision_url(url: Optional[str]) -> bool:
    """True for Google and Bing hosts; the classifier may not redirect into a search engine."""
    parts = _split(str(url or ""))
    if parts is None:
        return False
    host = (parts.hostname or "").lower()
    if (
        host == "google.com"
        or host.endswith(".google.com")
        or host.startswith("google.")
        or ".google." in host
    ):
        return True
    return host == "bing.com" or host.endswith(".bing.com")


def append_from_param(url: str, tag: str) -> str:
    """Add ``from=<tag>`` to an http(s) URL unless a non-empty ``from`` is present."""
    parts = _split(str(url))
    if parts is None or parts.scheme.lower() not in ("http", "https"):
        return str(url)

    pairs = parse_qsl(parts.query, keep_blank_values=True)
    if any(key == "from" and value for key, value in pairs):
        return str(url)

    if any(key == "from" for key, _ in pairs):
        kept = [(key, value) for key, value in pairs if key != "from"]
        query = urlencode(kept + [("from", tag)], quote_via=quote)
    elif parts.query:
        query = f"{parts.query}&from={quote(tag)}"
    else:
        query = f"from={quote(tag)}"
    return urlunsplit(parts._replace(query=query))


def fallback_url(text: Optional[str], engine: str = "google") -> str:
    """Generic web-search URL used when nothing stronger resolves."""
    if engine == "bing":
        return f"https://www.bing.com/search?q={encode_query(text)}"
    return f"https://www.google.com/search?q={encode_query(text)}"
