# src/linkmanager/services/link_extract_service.py
import html as html_lib
import logging
from typing import Callable, Dict, List, Optional, Tuple

from linkmanager.model import LinkRecord
from linkmanager.services.domain_classifier_service import DomainClassifierService, SchemeProvider
from linkmanager.utils.html_fragment import HtmlFragment
from linkmanager.utils.url_utils import UrlUtils

logger = logging.getLogger(__name__)

RootResolver = Callable[[str], str]


class LinkExtractService:
    """
    A stateless service that walks the anchors of a piece of content and
    aggregates them into LinkRecords keyed by (url, anchor text).

    Storage is not its concern: callers replace a document's records with the
    returned list.
    """

    def __init__(self, home_host: Optional[str], resolve_root_relative: RootResolver,
                 scheme_provider: Optional[SchemeProvider] = None):
        self.classifier = DomainClassifierService(home_host, scheme_provider)
        self.resolve_root_relative = resolve_root_relative

    def extract(self, html: str) -> List[LinkRecord]:
        """
        Extracts and aggregates all trackable links.

        Args:
            html: The HTML fragment to scan.

        Returns:
            One LinkRecord per distinct (url, anchor_text) pair, in first-seen order.
        """
        if not html:
            return []

        fragment = HtmlFragment.parse(html)
        if fragment is None:
            return []

        link_data: Dict[Tuple[str, str], LinkRecord] = {}
        for link in fragment.anchors():
            href = self._resolve_href(link.get("href"))
            if href is None:
                continue

            domain = UrlUtils.normalize_host(UrlUtils.extract_host(href))
            if not domain:
                logger.debug("Skipping link with no resolvable domain: %s", href)
                continue

            anchor_text = link.get_text().strip()
            key = (href, anchor_text)
            record = link_data.get(key)
            if record is None:
                link_data[key] = LinkRecord(
                    url=href,
                    domain=domain,
                    anchor_text=anchor_text,
                    is_external=self.classifier.is_external(href),
                )
            else:
                record.link_count += 1

        logger.debug("Aggregated %d unique links.", len(link_data))
        return list(link_data.values())

    def _resolve_href(self, raw_href: Optional[str]) -> Optional[str]:
        """
        Turns a raw href attribute into the absolute URL we record,
        or None if the link is not tracked.
        """
        href = html_lib.unescape(raw_href or "").strip()

        if not href or href.startswith("#"):
            return None

        if not UrlUtils.is_trackable_href(href):
            logger.debug("Skipping non-web/non-relative link: %s", href)
            return None

        if UrlUtils.is_root_relative(href):
            resolved = self.resolve_root_relative(href)
            logger.debug("Resolved relative URL '%s' to: %s", href, resolved)
            return resolved

        return self.classifier.promote(href)


def extract(html: str, home_host: Optional[str], resolve_root_relative: RootResolver,
            scheme_provider: Optional[SchemeProvider] = None) -> List[LinkRecord]:
    """Functional shortcut around LinkExtractService."""
    return LinkExtractService(home_host, resolve_root_relative, scheme_provider).extract(html)
