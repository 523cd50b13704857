# src/linkmanager/model.py
import logging
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from linkmanager.utils.url_utils import UrlUtils

logger = logging.getLogger(__name__)

FALSY_STRINGS = {"", "0", "false", "off", "no"}


class LinkSettings(BaseModel):
    """
    The eight rel/target switches that drive the rewriter.
    Frozen so one instance can be shared across calls without being mutated.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    external_nofollow: bool = False
    external_target_blank: bool = False
    external_sponsored: bool = False
    external_ugc: bool = False
    external_noreferrer: bool = False
    external_noopener: bool = False
    internal_nofollow: bool = False
    internal_target_blank: bool = False

    @classmethod
    def defaults(cls) -> "LinkSettings":
        """The out-of-the-box configuration."""
        return cls(
            external_nofollow=True,
            external_target_blank=True,
            external_noreferrer=True,
            external_noopener=True,
        )

    @staticmethod
    def _is_truthy(value: Any) -> bool:
        if isinstance(value, str):
            return value.strip().lower() not in FALSY_STRINGS
        return bool(value)

    @classmethod
    def sanitize(cls, raw: Optional[Mapping[str, Any]]) -> "LinkSettings":
        """
        Coerces loose form or JSON input into settings.
        Known keys become booleans, missing keys are False, unknown keys are dropped.
        """
        raw = raw or {}
        values = {name: cls._is_truthy(raw.get(name)) for name in cls.model_fields}
        return cls(**values)


class SiteContext(BaseModel):
    """The site the content belongs to: its home URL and whether it is served over https."""
    home_url: str = ""
    secure: bool = False

    @field_validator("home_url", mode="before")
    @classmethod
    def _strip_home_url(cls, v: Any) -> str:
        return str(v or "").strip()

    @model_validator(mode="after")
    def _add_missing_scheme(self) -> "SiteContext":
        # "example.com" has no host for urlparse; read it as a URL on the current scheme.
        if self.home_url.startswith("//"):
            self.home_url = f"{self.current_scheme()}:{self.home_url}"
        elif self.home_url and "://" not in self.home_url:
            self.home_url = f"{self.current_scheme()}://{self.home_url.lstrip('/')}"
        return self

    @property
    def home_host(self) -> str:
        return UrlUtils.extract_host(self.home_url)

    def current_scheme(self) -> str:
        return "https" if self.secure else "http"

    def resolve_root_relative(self, path: str) -> str:
        """Maps '/path' onto the home URL, e.g. 'https://example.com' + '/x'."""
        return f"{self.home_url.rstrip('/')}/{path.lstrip('/')}"


class LinkRecord(BaseModel):
    url: str
    domain: str
    anchor_text: str
    is_external: bool
    link_count: int = Field(default=1, ge=1)


class LinkType(str, Enum):
    ALL = "all"
    EXTERNAL = "external"
    INTERNAL = "internal"


class RemovalResult(BaseModel):
    content: str
    removed_count: int = 0

    @property
    def changed(self) -> bool:
        return self.removed_count > 0


class ScanResult(BaseModel):
    document_id: int
    found: int = 0
    inserted: int = 0
    failed: int = 0


class BulkRemovalResult(BaseModel):
    processed: int = 0
    removed: int = 0
    updated: Dict[int, str] = Field(default_factory=dict)
