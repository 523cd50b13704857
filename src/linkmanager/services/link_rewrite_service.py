# src/linkmanager/services/link_rewrite_service.py
import logging
from typing import List, Optional

from bs4 import Tag

from linkmanager.model import LinkSettings
from linkmanager.services.domain_classifier_service import DomainClassifierService, SchemeProvider
from linkmanager.utils.html_fragment import HtmlFragment
from linkmanager.utils.url_utils import UrlUtils

logger = logging.getLogger(__name__)


class LinkRewriteService:
    """
    Applies the rel/target policy to every anchor in a piece of content.

    The service holds no per-document state: the same instance can rewrite any
    number of documents, and the settings object is only ever read.
    """

    def __init__(self, settings: LinkSettings, home_host: Optional[str],
                 scheme_provider: Optional[SchemeProvider] = None):
        self.settings = settings
        self.classifier = DomainClassifierService(home_host, scheme_provider)

    def rewrite(self, html: str) -> str:
        """
        Rewrites rel/target on all anchors.

        Returns the re-serialized fragment when at least one anchor changed,
        otherwise the input string exactly as it was passed in.
        """
        if not html:
            return html

        fragment = HtmlFragment.parse(html)
        if fragment is None:
            return html

        links = fragment.anchors()
        if not links:
            logger.debug("No links found in content.")
            return html

        logger.debug("Found %d links to process.", len(links))
        modified = False
        for link in links:
            if self.rewrite_anchor(link):
                modified = True

        if not modified:
            logger.debug("No modifications made to links.")
            return html

        return fragment.serialize()

    def rewrite_anchor(self, link: Tag) -> bool:
        """Rewrites a single anchor in place. Returns True if rel or target changed."""
        href = link.get("href")
        if UrlUtils.is_skippable_href(href):
            return False

        original_rel = link.get("rel") or ""
        original_target = link.get("target") or ""

        is_external = self.classifier.is_external(href)
        self._set_link_attributes(link, is_external)

        if (link.get("rel") or "") != original_rel or (link.get("target") or "") != original_target:
            logger.debug("Modified link '%s'. New rel: '%s', New target: '%s'",
                         href, link.get("rel"), link.get("target"))
            return True
        return False

    def _set_link_attributes(self, link: Tag, is_external: bool) -> None:
        s = self.settings
        rel_parts: List[str] = (link.get("rel") or "").split()

        if is_external:
            if s.external_target_blank and not link.has_attr("target"):
                link["target"] = "_blank"

            if s.external_nofollow:
                rel_parts.append("nofollow")
            if s.external_sponsored:
                rel_parts.append("sponsored")
            if s.external_ugc:
                rel_parts.append("ugc")
            if s.external_noreferrer:
                rel_parts.append("noreferrer")
            if s.external_noopener:
                rel_parts.append("noopener")
        else:
            if s.internal_target_blank and not link.has_attr("target"):
                link["target"] = "_blank"
                rel_parts.append("noopener")
            if s.internal_nofollow:
                rel_parts.append("nofollow")

        # Any new tab gets noopener, whatever the settings say.
        if link.get("target") == "_blank":
            rel_parts.append("noopener")

        rel_tokens = sorted(set(rel_parts))
        if rel_tokens:
            link["rel"] = " ".join(rel_tokens)
        elif link.has_attr("rel"):
            del link["rel"]


def rewrite(html: str, settings: LinkSettings, home_host: Optional[str],
            scheme_provider: Optional[SchemeProvider] = None) -> str:
    """Functional shortcut around LinkRewriteService."""
    return LinkRewriteService(settings, home_host, scheme_provider).rewrite(html)
