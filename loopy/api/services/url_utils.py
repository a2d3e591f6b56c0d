"""URL and hostname normalization utilities."""

import re
from urllib.parse import urlparse

# RFC 1123 label: letters, digits, hyphen; no leading/trailing hyphen; 1-63 chars
_LABEL = re.compile(r"^(?!-)[a-z0-9-]{1,63}(?<!-)$")


def normalize_hostname(value: str) -> str:
    """
    Returns a bare lowercase hostname from user input.

    Rules:
    - strip surrounding whitespace
    - drop scheme, path, query, port, credentials
    - drop trailing dot
    - lowercase
    Returns "" when nothing usable remains.
    """
    raw = (value or "").strip()
    if not raw:
        return ""
    if "://" not in raw:
        raw = f"https://{raw}"
    try:
        host = urlparse(raw).hostname or ""
    except ValueError:
        return ""
    return host.rstrip(".").lower()


def is_valid_hostname(host: str) -> bool:
    """True for a dotted hostname (at least two labels, alpha TLD), e.g. example.com."""
    if not host or len(host) > 253:
        return False
    labels = host.split(".")
    if len(labels) < 2:
        return False
    if not all(_LABEL.match(label) for label in labels):
        return False
    return labels[-1].isalpha()


def is_http_url(url: str) -> bool:
    """True for absolute http(s) URLs with a host."""
    try:
        parsed = urlparse((url or "").strip())
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def normalize_referrer(referrer: str) -> str:
    """
    Returns scheme://host/path for a parseable absolute URL (query and fragment dropped),
    else the referrer unchanged.

    "https://google.com" -> "https://google.com/"
    "https://t.co/abc?x=1" -> "https://t.co/abc"
    "android-app" -> "android-app"
    """
    try:
        parsed = urlparse(referrer)
    except ValueError:
        return referrer
    if not parsed.scheme or not parsed.netloc:
        return referrer
    return f"{parsed.scheme}://{parsed.netloc.lower()}{parsed.path or '/'}"


def root_hostname(domain: str) -> str:
    """Host part of a stored domain value ("example.com/promo" -> "example.com")."""
    return (domain or "").split("/", 1)[0]
