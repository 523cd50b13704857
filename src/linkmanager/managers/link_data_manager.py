# src/linkmanager/managers/link_data_manager.py
import logging
import math
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pandas as pd

from linkmanager.managers.database_manager import DatabaseManager
from linkmanager.model import LinkRecord
from linkmanager.services.data_prepare_service import DataPrepareService
from linkmanager.services.dataframe_service import DataFrameService

logger = logging.getLogger(__name__)

REPORT_GROUP_BY = "url, anchor_text, domain, is_external"


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _parse_post_data(raw: Any) -> List[Dict[str, int]]:
    """Turns '3:2,1:1' into [{'document_id': 1, 'count': 1}, {'document_id': 3, 'count': 2}]."""
    documents = []
    for pair in str(raw or "").split(","):
        if ":" not in pair:
            continue
        doc_id, count = pair.split(":", 1)
        try:
            documents.append({"document_id": int(doc_id), "count": int(count)})
        except ValueError:
            logger.debug("Ignoring malformed post data pair '%s'.", pair)
    return sorted(documents, key=lambda d: d["document_id"])


class LinkDataManager:
    """
    Smart Facade acting as an adapter between the link services and the dumb DatabaseManager.

    Every document has at most one current set of link records; writing a new
    scan always replaces the previous one.
    """

    def __init__(self, delegate: DatabaseManager) -> None:
        self.delegate = delegate
        self.dps = DataPrepareService()
        self.dfs = DataFrameService(delegate)
        self.delegate.init_schema()

    # --- WRITES ---

    def delete_document_links(self, document_id: int) -> int:
        deleted = self.delegate.execute_query("DELETE FROM links WHERE document_id = ?", (int(document_id),))
        logger.debug("Cleared %d existing link entries for document %s.", deleted, document_id)
        return deleted

    def replace_document_links(self, document_id: int, records: List[LinkRecord]) -> Tuple[int, int]:
        """
        Deletes all stored links of a document and inserts the new records.
        A failing row is logged and skipped; the rest are still written.

        Returns:
            (inserted, failed)
        """
        self.delete_document_links(document_id)

        sql, tuples = self.dps.prepare_link_records(document_id, records)
        inserted = failed = 0
        for row in tuples:
            if self.delegate.execute_insert(sql, row) == -1:
                failed += 1
                logger.error("Failed to insert link data for document %s (URL: %s).", document_id, row[1])
            else:
                inserted += 1

        logger.info("Stored %d/%d unique links for document %s.", inserted, len(tuples), document_id)
        return inserted, failed

    def clear_all(self) -> None:
        self.delegate.clear_tables(["links"])

    # --- READS ---

    def load_document_links_df(self, document_id: int) -> pd.DataFrame:
        sql = """
            SELECT url, domain, anchor_text, is_external, link_count
            FROM links WHERE document_id = ? ORDER BY id
        """
        return self.dfs.fetch_dataframe(sql, (int(document_id),))

    def load_report_df(
            self,
            search: Optional[str] = None,
            domain: Optional[str] = None,
            page: int = 1,
            per_page: int = 20
    ) -> Tuple[pd.DataFrame, Dict[str, int]]:
        """
        Builds the link report: one row per (url, anchor text, domain, locality)
        with the number of documents using it.

        Returns:
            A DataFrame page and a pagination dictionary.
        """
        page = max(int(page), 1)
        per_page = max(int(per_page), 1)

        where = ["1=1"]
        params: List[Any] = []
        if search:
            where.append("(url LIKE ? ESCAPE '\\' OR anchor_text LIKE ? ESCAPE '\\')")
            term = f"%{_escape_like(search)}%"
            params.extend([term, term])
        if domain:
            where.append("domain = ?")
            params.append(domain)
        where_clause = " AND ".join(where)

        total_row = self.delegate.fetch_one(
            f"SELECT COUNT(*) FROM (SELECT 1 FROM links WHERE {where_clause} GROUP BY {REPORT_GROUP_BY})",
            tuple(params),
        )
        total = int(total_row[0]) if total_row else 0

        query = f"""
            SELECT url, domain, anchor_text, is_external,
                   COUNT(DISTINCT document_id) AS post_count,
                   SUM(link_count) AS total_count,
                   GROUP_CONCAT(document_id || ':' || link_count) AS post_data
            FROM links
            WHERE {where_clause}
            GROUP BY {REPORT_GROUP_BY}
            ORDER BY post_count DESC, url ASC
            LIMIT ? OFFSET ?
        """
        df = self.dfs.fetch_dataframe(query, tuple(params) + (per_page, (page - 1) * per_page))
        if "post_data" in df.columns:
            df["documents"] = df["post_data"].apply(_parse_post_data)
            df = df.drop(columns=["post_data"])
        if "is_external" in df.columns:
            df["is_external"] = df["is_external"].astype(bool)

        pagination = {
            "total_items": total,
            "per_page": per_page,
            "current_page": page,
            "total_pages": math.ceil(total / per_page),
        }
        logger.debug("Fetched %d report rows for page %d.", len(df), page)
        return df, pagination

    def load_document_link_counts_df(self, document_ids: Iterable[int]) -> pd.DataFrame:
        """
        Sums internal and external link occurrences per document.
        Documents without stored links get zero counts.
        """
        ids = list(dict.fromkeys(int(i) for i in document_ids))
        result = pd.DataFrame({
            "document_id": ids,
            "outbound_internal_count": [0] * len(ids),
            "outbound_external_count": [0] * len(ids),
        })
        if not ids:
            return result

        placeholders = ",".join("?" for _ in ids)
        df = self.dfs.fetch_dataframe(
            f"""
            SELECT document_id, is_external, SUM(link_count) AS total_count
            FROM links WHERE document_id IN ({placeholders})
            GROUP BY document_id, is_external
            """,
            tuple(ids),
        )
        if df.empty:
            return result

        counts = df.pivot_table(index="document_id", columns="is_external",
                                values="total_count", aggfunc="sum", fill_value=0)
        counts = counts.reindex(index=ids, columns=[0, 1], fill_value=0)
        result["outbound_internal_count"] = counts[0].astype(int).to_numpy()
        result["outbound_external_count"] = counts[1].astype(int).to_numpy()
        return result

    def get_unique_domains(self) -> List[str]:
        rows = self.delegate.fetch_all("SELECT DISTINCT domain FROM links WHERE domain != '' ORDER BY domain")
        return [r[0] for r in rows]
