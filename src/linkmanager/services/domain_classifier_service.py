# src/linkmanager/services/domain_classifier_service.py
import logging
from typing import Callable, Optional

from linkmanager.utils.url_utils import UrlUtils

logger = logging.getLogger(__name__)

SchemeProvider = Callable[[], str]


def _default_scheme() -> str:
    return "http"


class DomainClassifierService:
    """
    Decides whether a URL points outside the home host.

    Only URLs that explicitly show a foreign host count as external. Relative
    paths, fragments and anything without a host are internal, and so is
    everything when the home host itself is unknown.
    """

    def __init__(self, home_host: Optional[str], scheme_provider: Optional[SchemeProvider] = None):
        self.home_host = UrlUtils.normalize_host(home_host)
        self.scheme_provider = scheme_provider or _default_scheme

    def promote(self, url: str) -> str:
        """Gives a protocol-relative URL the scheme of the current request."""
        return UrlUtils.promote_protocol_relative(url, self.scheme_provider())

    def is_external(self, url: Optional[str]) -> bool:
        if not url:
            return False
        if not self.home_host:
            return False

        link_host = UrlUtils.normalize_host(UrlUtils.extract_host(self.promote(url.strip())))
        if not link_host:
            return False

        return link_host != self.home_host


def is_external(url: Optional[str], home_host: Optional[str],
                scheme_provider: Optional[SchemeProvider] = None) -> bool:
    """Functional shortcut for a one-off classification."""
    return DomainClassifierService(home_host, scheme_provider).is_external(url)
