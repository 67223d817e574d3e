"""Free-text and per-field search over normalized novels."""
from typing import List, Optional, Sequence

from artfictions.models import Novel, UNKNOWN


def _contains(value: str, term: str) -> bool:
    # A defaulted field was missing in the source and never matches
    if value == UNKNOWN:
        return False
    return term in value.lower()


def matches(novel: Novel, term: str) -> bool:
    """
    Check whether any searchable field contains the term.

    Args:
        novel: Novel to test
        term: Lower-cased search term

    Returns:
        True if title, author, country, language, year or a theme matches
    """
    return (
        _contains(novel.title, term)
        or _contains(novel.author, term)
        or _contains(novel.country, term)
        or _contains(novel.language, term)
        or (novel.year is not None and term in str(novel.year))
        or any(_contains(theme, term) for theme in novel.themes)
    )


def search_novels(records: Sequence[Novel], term: Optional[str]) -> List[Novel]:
    """
    Case-insensitive search across all fields.

    Args:
        records: Normalized novels
        term: Search text; blank returns every record

    Returns:
        Matching novels in input order
    """
    term = (term or "").strip().lower()
    if not term:
        return list(records)
    return [novel for novel in records if matches(novel, term)]


def filter_novels(
    records: Sequence[Novel],
    title: Optional[str] = None,
    author: Optional[str] = None,
    country: Optional[str] = None,
    language: Optional[str] = None,
    year: Optional[str] = None,
    theme: Optional[str] = None
) -> List[Novel]:
    """
    Advanced search: every non-empty criterion must match.

    Args:
        records: Normalized novels
        title, author, country, language: Substrings of the field
        year: Substring of the publication year
        theme: Substring of any theme

    Returns:
        Matching novels in input order
    """
    criteria = {
        "title": title,
        "author": author,
        "country": country,
        "language": language,
    }
    text_criteria = {
        field: value.strip().lower()
        for field, value in criteria.items()
        if value and value.strip()
    }
    year_term = str(year).strip() if year is not None else ""
    theme_term = theme.strip().lower() if theme else ""

    results = []
    for novel in records:
        if not all(_contains(getattr(novel, field), term) for field, term in text_criteria.items()):
            continue
        if year_term and (novel.year is None or year_term not in str(novel.year)):
            continue
        if theme_term and not any(_contains(t, theme_term) for t in novel.themes):
            continue
        results.append(novel)
    return results
