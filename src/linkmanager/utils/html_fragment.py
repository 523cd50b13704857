# src/linkmanager/utils/html_fragment.py
import logging
from typing import List, Optional

from bs4 import BeautifulSoup, Tag
from bs4.dammit import EntitySubstitution
from bs4.formatter import HTMLFormatter

logger = logging.getLogger(__name__)


class SourceOrderFormatter(HTMLFormatter):
    """
    The 'minimal' formatter (only &, < and > escaped), but attributes are written
    in source order instead of alphabetically. Attributes we add go last.
    """

    def __init__(self):
        super().__init__(entity_substitution=EntitySubstitution.substitute_xml)

    def attributes(self, tag):
        if tag.attrs is None:
            return []
        return list(tag.attrs.items())


SOURCE_ORDER = SourceOrderFormatter()


class HtmlFragment:
    """
    Thin wrapper around a BeautifulSoup tree built from an HTML fragment
    (post content, not a full document).

    Attributes such as 'rel' are kept as plain strings so that what we read is
    exactly what was written, which keeps change detection honest.
    """

    def __init__(self, soup: BeautifulSoup):
        self.soup = soup

    @classmethod
    def parse(cls, html: str) -> Optional["HtmlFragment"]:
        """
        Parses a fragment with the tolerant 'html.parser' backend.
        Returns None if the parser gives up, so callers can fall back to the input.
        """
        try:
            soup = BeautifulSoup(html, "html.parser", multi_valued_attributes=None)
        except Exception as e:
            logger.warning("Failed to parse HTML fragment: %s", e, exc_info=True)
            return None
        return cls(soup)

    def anchors(self) -> List[Tag]:
        """All <a> elements in document order."""
        return self.soup.find_all("a")

    def serialize(self) -> str:
        """
        Serializes the fragment content without adding html/body wrappers.

        Markup outside the anchors comes back equivalent, not identical.
        Entities are written as characters (&nbsp; becomes U+00A0). Void
        elements get a closing slash (<br/>). Valueless attributes get an empty
        value (disabled="").
        """
        return self.soup.decode(formatter=SOURCE_ORDER)
