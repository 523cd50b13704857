# src/linkmanager/services/link_removal_service.py
import logging
from typing import Optional, Union

from bs4 import Tag

from linkmanager.model import LinkType, RemovalResult
from linkmanager.services.domain_classifier_service import DomainClassifierService, SchemeProvider
from linkmanager.utils.html_fragment import HtmlFragment
from linkmanager.utils.url_utils import UrlUtils

logger = logging.getLogger(__name__)


class LinkRemovalService:
    """
    Removes links from content while keeping what they wrap.

    An <a> that matches the requested link type is unwrapped: its text and
    nested markup stay where they were, only the anchor tag itself goes.
    """

    def __init__(self, home_host: Optional[str], scheme_provider: Optional[SchemeProvider] = None):
        self.classifier = DomainClassifierService(home_host, scheme_provider)

    def remove_links(self, html: str, link_type: Union[LinkType, str]) -> RemovalResult:
        link_type = LinkType(link_type)

        if not html:
            return RemovalResult(content=html)

        fragment = HtmlFragment.parse(html)
        if fragment is None:
            return RemovalResult(content=html)

        count = 0
        # Last to first so unwrapping never disturbs anchors still to be visited.
        for link in reversed(fragment.anchors()):
            if self.should_remove(link, link_type):
                logger.debug("Removing link: %s", link)
                link.unwrap()
                count += 1

        if count == 0:
            logger.debug("No links removed.")
            return RemovalResult(content=html)

        return RemovalResult(content=fragment.serialize(), removed_count=count)

    def should_remove(self, link: Tag, link_type: LinkType) -> bool:
        href = link.get("href")
        if UrlUtils.is_skippable_href(href):
            return False

        if link_type is LinkType.ALL:
            return True

        is_external = self.classifier.is_external(href)
        if link_type is LinkType.EXTERNAL:
            return is_external
        return not is_external
