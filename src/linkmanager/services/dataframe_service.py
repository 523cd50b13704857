# src/linkmanager/services/dataframe_service.py
import logging
from typing import Any, Optional, Tuple

import pandas as pd

from linkmanager.managers.database_manager import DatabaseManager

logger = logging.getLogger(__name__)


class DataFrameService:
    """
    Central service for handling Pandas DataFrame operations.

    Sits between the raw DatabaseManager and the reporting code so that the
    DatabaseManager stays decoupled from pandas.
    """

    def __init__(self, db: Optional[DatabaseManager] = None):
        self.db = db or DatabaseManager()

    def fetch_dataframe(self, query: str, params: Tuple[Any, ...] = ()) -> pd.DataFrame:
        """
        Executes a SQL query and returns the results as a DataFrame.
        Returns an empty DataFrame if the query fails.
        """
        conn = self.db.get_connection()
        try:
            return pd.read_sql_query(query, conn, params=params)
        except Exception as e:
            logger.error("DataFrame fetch failed for %s: %s", self.db.db_path, e)
            return pd.DataFrame()
