# src/linkmanager/utils/path_utils.py
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class PathUtils:
    """
    A central utility for reliably retrieving important project paths.
    """

    @staticmethod
    def get_package_root() -> Path:
        """Returns the directory of the 'linkmanager' package (where settings.json lives)."""
        return Path(__file__).resolve().parent.parent

    @staticmethod
    def get_project_root() -> Path:
        """
        Returns the absolute path of the project root.
        Searches upwards for a directory containing 'src' and 'pyproject.toml'.
        """
        current_path = Path(__file__).resolve().parent
        while current_path != current_path.parent:
            src_dir = current_path / "src"
            pyproject_toml = current_path / "pyproject.toml"
            if src_dir.is_dir() and pyproject_toml.is_file():
                return current_path
            current_path = current_path.parent
        raise FileNotFoundError(
            "Could not find the project root. Search for a directory containing 'src' and 'pyproject.toml'.")

    @staticmethod
    def get_cache_root() -> Path:
        """
        Returns the directory holding the link store.
        Lives in the project root for source checkouts, the working directory otherwise.
        """
        try:
            root = PathUtils.get_project_root()
        except FileNotFoundError:
            root = Path.cwd()
        return root / ".linkmanager_cache"

    @staticmethod
    def get_store_db_path(base_dir: Optional[Path] = None) -> Path:
        """Returns the path to the SQLite link store, creating its directory if needed."""
        root = Path(base_dir) if base_dir else PathUtils.get_cache_root()
        root.mkdir(parents=True, exist_ok=True)
        return root / "links.db"
