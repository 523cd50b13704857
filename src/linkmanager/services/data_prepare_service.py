# src/linkmanager/services/data_prepare_service.py
import logging
from typing import Any, List, Tuple

from pydantic import BaseModel

from linkmanager.database_schema import LINK_INSERT_SQL

logger = logging.getLogger(__name__)


class DataPrepareService:
    """
    Turns link records into insert-ready tuples.
    """

    def prepare_link_records(self, document_id: int, batch: List[Any]) -> Tuple[str, List[tuple]]:
        tuples = []
        for item in batch:
            d = item.model_dump() if isinstance(item, BaseModel) else item
            tuples.append((
                int(document_id),
                str(d.get("url")),
                d.get("domain") or "",
                d.get("anchor_text") or "",
                1 if d.get("is_external") else 0,
                int(d.get("link_count") or 1),
            ))
        return LINK_INSERT_SQL, tuples
