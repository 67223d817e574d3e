"""Data models for novels."""
from dataclasses import dataclass
from typing import Optional, Tuple, Dict, Any

UNKNOWN = "Unknown"

THEME_SLOTS = 5


@dataclass(frozen=True)
class Novel:
    """Normalized novel representation."""
    title: str
    author: str
    country: str
    language: str
    publisher: str
    year: Optional[int]
    themes: Tuple[str, ...] = ()
    languages: Tuple[str, ...] = ()

    @property
    def themes_str(self) -> str:
        """Format themes as comma-separated string."""
        return ", ".join(self.themes) if self.themes else "None"

    @property
    def year_str(self) -> str:
        return str(self.year) if self.year is not None else UNKNOWN

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert back to the dataset's raw field names.

        Feeding the result through normalize() gives an equal Novel.
        """
        raw = {
            "Title": self.title,
            "Author": self.author,
            "Country": self.country,
            "Language": self.language,
            "Publisher": self.publisher,
            "Year of Publication": self.year,
        }
        for i in range(THEME_SLOTS):
            raw[f"Theme {i + 1}"] = self.themes[i] if i < len(self.themes) else ""
        return raw


@dataclass(frozen=True)
class Dataset:
    """Immutable collection of normalized novels produced by a single load."""
    records: Tuple[Novel, ...] = ()
    error: Optional[str] = None
    source: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def total(self) -> int:
        return len(self.records)

    @property
    def distinct_authors(self) -> int:
        return len({novel.author for novel in self.records})

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self):
        return iter(self.records)
