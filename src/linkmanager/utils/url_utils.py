# src/linkmanager/utils/url_utils.py
import logging
import re
from typing import Optional
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

# Schemes that never point at a web page and are left alone.
NON_WEB_SCHEME_RE = re.compile(r"^(mailto|tel|javascript|file):", re.IGNORECASE)
ABSOLUTE_WEB_RE = re.compile(r"^(https?:)?//", re.IGNORECASE)


class UrlUtils:
    """A collection of static methods for host extraction and href classification."""

    @staticmethod
    def normalize_host(host: Optional[str]) -> str:
        """
        Lower-cases a host and strips a single leading 'www.'.
        Returns an empty string for empty input.
        """
        if not host:
            return ""
        host = host.strip().lower()
        if host.startswith("www."):
            host = host[4:]
        return host

    @staticmethod
    def promote_protocol_relative(url: str, scheme: str = "http") -> str:
        """
        Turns '//host/path' into '<scheme>://host/path'.
        Anything else (including '///path') is returned untouched.
        """
        if url.startswith("//") and not url.startswith("///"):
            return f"{scheme}:{url}"
        return url

    @staticmethod
    def extract_host(url: str) -> str:
        """
        Returns the host component of a URL, or an empty string when none can be found
        (relative paths, fragments, mailto: and friends, or malformed URLs).
        """
        if not url:
            return ""
        try:
            return urlparse(url).hostname or ""
        except ValueError as e:
            logger.debug("Could not parse invalid URL '%s': %s", url, e)
            return ""

    @staticmethod
    def is_skippable_href(href: Optional[str]) -> bool:
        """
        Checks whether an href should be ignored entirely:
        empty, a bare fragment, or a non-web scheme.
        """
        if href is None:
            return True
        href = href.strip()
        if not href or href.startswith("#"):
            return True
        return bool(NON_WEB_SCHEME_RE.match(href))

    @staticmethod
    def is_root_relative(href: str) -> bool:
        """Checks for '/path' (but not the protocol-relative '//host')."""
        return href.startswith("/") and not href.startswith("//")

    @staticmethod
    def is_trackable_href(href: str) -> bool:
        """
        Checks whether an href is either an absolute web URL (http, https or
        protocol-relative) or root-relative. Everything else is not recorded.
        """
        if not href:
            return False
        return bool(ABSOLUTE_WEB_RE.match(href)) or UrlUtils.is_root_relative(href)
