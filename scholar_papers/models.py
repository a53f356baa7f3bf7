# models.py
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional


class PageStatus(Enum):
    RESULTS = auto()
    NO_RESULTS = auto()
    BLOCKED = auto()  # CAPTCHA or unusual-traffic page


@dataclass
class PaperRecord:
    """One paper listed on a search-results or citer-list page.

    Records are rebuilt from markup on every parse call and never persisted.
    A record is only ever created with a non-empty title.
    """

    title: str
    authors: List[str] = field(default_factory=list)
    snippet: Optional[str] = None
    cluster_id: Optional[str] = None
    cited_by_count: int = 0
    article_url: Optional[str] = None
    year: Optional[int] = None
    venue: Optional[str] = None
    citers: Optional[List["PaperRecord"]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Converts the record to a JSON-ready dict, leaving out unset optional fields."""
        data: Dict[str, Any] = {
            "title": self.title,
            "authors": list(self.authors),
        }
        for key in ("snippet", "cluster_id"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        data["cited_by_count"] = self.cited_by_count
        for key in ("article_url", "year", "venue"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        if self.citers is not None:
            data["citers"] = [citer.to_dict() for citer in self.citers]
        return data
