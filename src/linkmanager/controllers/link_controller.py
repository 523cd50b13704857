# src/linkmanager/controllers/link_controller.py
import logging
import sys
import time
from typing import Mapping, Union

from tqdm import tqdm

from linkmanager.managers.link_data_manager import LinkDataManager
from linkmanager.model import (
    BulkRemovalResult,
    LinkSettings,
    LinkType,
    RemovalResult,
    ScanResult,
    SiteContext,
)
from linkmanager.services.link_extract_service import LinkExtractService
from linkmanager.services.link_removal_service import LinkRemovalService
from linkmanager.services.link_rewrite_service import LinkRewriteService

logger = logging.getLogger(__name__)


class LinkController:
    """
    Orchestrates the link services against the link store.

    Content itself is owned by the caller: methods that change content return
    the new HTML instead of saving it. After a caller-visible content change
    the controller re-scans the new content itself, so there is no "on save"
    hook to suppress or re-trigger.
    """

    def __init__(self, data_manager: LinkDataManager, settings: LinkSettings, site: SiteContext):
        self.data_manager = data_manager
        self.settings = settings
        self.site = site

        home_host = site.home_host
        if not home_host:
            logger.warning("No home host configured; every link will be treated as internal.")

        self.rewriter = LinkRewriteService(settings, home_host, site.current_scheme)
        self.extractor = LinkExtractService(home_host, site.resolve_root_relative, site.current_scheme)
        self.remover = LinkRemovalService(home_host, site.current_scheme)

    def rewrite_content(self, html: str) -> str:
        """Applies the rel/target policy to content on its way out."""
        return self.rewriter.rewrite(html)

    def scan_document(self, document_id: int, html: str) -> ScanResult:
        """
        Extracts the links of a document and replaces its stored records.
        Empty content simply clears the document's records.
        """
        logger.debug("--- Starting link scan for document %s ---", document_id)
        records = self.extractor.extract(html) if html else []
        inserted, failed = self.data_manager.replace_document_links(document_id, records)
        logger.info("Scanned document %s: %d unique links, %d stored, %d failed.",
                    document_id, len(records), inserted, failed)
        return ScanResult(document_id=document_id, found=len(records), inserted=inserted, failed=failed)

    def clear_document(self, document_id: int) -> int:
        return self.data_manager.delete_document_links(document_id)

    def remove_links(self, document_id: int, html: str, link_type: Union[LinkType, str]) -> RemovalResult:
        """
        First step of a removal: compute the new content.
        The caller persists it and then calls scan_document (or uses bulk_remove).
        """
        result = self.remover.remove_links(html, link_type)
        if result.changed:
            logger.info("Removed %d %s link(s) from document %s.",
                        result.removed_count, LinkType(link_type).value, document_id)
        return result

    def bulk_remove(
            self,
            documents: Mapping[int, str],
            link_type: Union[LinkType, str],
            show_progress: bool = False
    ) -> BulkRemovalResult:
        """
        Removes links of the given type from many documents.

        Every document whose content changed is returned in `updated` and
        re-scanned right away so the link store matches the new content.
        """
        link_type = LinkType(link_type)
        summary = BulkRemovalResult()
        started = time.perf_counter()

        items = documents.items()
        if show_progress:
            items = tqdm(items, total=len(documents), desc="Removing links", unit=" docs",
                         dynamic_ncols=True, file=sys.stdout)

        for document_id, html in items:
            result = self.remove_links(document_id, html, link_type)
            summary.processed += 1
            if not result.changed or result.content == html:
                continue

            summary.removed += result.removed_count
            summary.updated[document_id] = result.content
            self.scan_document(document_id, result.content)

        logger.info("Bulk removal finished in %.2fs. Processed: %d, Removed: %d, Updated: %d",
                    time.perf_counter() - started, summary.processed, summary.removed, len(summary.updated))
        return summary
