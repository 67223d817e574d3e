"""Load and normalize the Artfictions novels dataset."""
import re
import logging
from collections.abc import Mapping
from typing import Any, List, Optional, Iterable, Tuple

from artfictions.models import Novel, Dataset, UNKNOWN, THEME_SLOTS

logger = logging.getLogger(__name__)

# "French / Occitan", "English, Welsh", "Spanish; Catalan", "Irish & English"
LANGUAGE_DELIMITERS = re.compile(r"\s*[,;/&]\s*")

PREFERRED_LIST_KEY = "Novels"

YEAR_PATTERN = re.compile(r"(\d{1,4})(?:\.0*)?")
MAX_YEAR = 9999


def tidy(value: Any) -> str:
    """Trim a raw field, falling back to the Unknown sentinel when blank."""
    if value is None:
        return UNKNOWN
    text = str(value).strip()
    return text or UNKNOWN


def parse_year(value: Any) -> Optional[int]:
    """
    Parse a publication year.

    Args:
        value: Raw year (int, float or string)

    Returns:
        Year as int, or None if it does not convert. Zero and anything
        outside 1..9999 count as absent.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    if isinstance(value, int):
        return value if 0 < value <= MAX_YEAR else None

    # Plain digits only: no signs, no exponents
    match = YEAR_PATTERN.fullmatch(str(value).strip())
    if not match:
        return None
    year = int(match.group(1))
    return year if 0 < year <= MAX_YEAR else None


def parse_themes(item: Mapping) -> Tuple[str, ...]:
    """Collect non-blank themes from the Theme 1..5 slots."""
    themes = []
    for i in range(1, THEME_SLOTS + 1):
        theme = item.get(f"Theme {i}")
        if theme is None:
            continue
        text = str(theme).strip()
        if text:
            themes.append(text)
    return tuple(themes)


def split_languages(language: str) -> Tuple[str, ...]:
    """Split a multi-language field; the sentinel yields no languages."""
    if language == UNKNOWN:
        return ()
    return tuple(part for part in LANGUAGE_DELIMITERS.split(language) if part)


def parse_novel(item: Any) -> Novel:
    """
    Normalize a single novel.

    Args:
        item: Raw record mapping, or an already normalized Novel

    Returns:
        Novel object
    """
    if isinstance(item, Novel):
        return item
    if not isinstance(item, Mapping):
        raise TypeError(f"Expected a record mapping, got {type(item).__name__}")

    language = tidy(item.get("Language"))

    return Novel(
        title=tidy(item.get("Title")),
        author=tidy(item.get("Author")),
        country=tidy(item.get("Country")),
        language=language,
        publisher=tidy(item.get("Publisher")),
        year=parse_year(item.get("Year of Publication")),
        themes=parse_themes(item),
        languages=split_languages(language)
    )


def normalize(raw_records: Iterable[Any]) -> List[Novel]:
    """
    Normalize every record; nothing is dropped.

    Args:
        raw_records: Raw record mappings or Novel objects

    Returns:
        List of Novel objects, same length as the input
    """
    return [parse_novel(item) for item in raw_records]


def locate_records(raw: Any) -> Optional[list]:
    """
    Find the record list inside a parsed JSON document.

    Args:
        raw: Either a bare list or an object holding one list-valued property

    Returns:
        The record list, or None if no list can be located
    """
    if isinstance(raw, list):
        return raw

    if isinstance(raw, Mapping):
        lists = {key: value for key, value in raw.items() if isinstance(value, list)}
        if len(lists) == 1:
            return next(iter(lists.values()))
        if PREFERRED_LIST_KEY in lists:
            return lists[PREFERRED_LIST_KEY]
        if lists:
            logger.warning(f"Ambiguous dataset: {len(lists)} list properties ({', '.join(lists)})")
        else:
            logger.warning("Dataset object has no list property")
        return None

    logger.warning(f"Dataset is neither a list nor an object: {type(raw).__name__}")
    return None


def load_dataset(raw: Any, source: Optional[str] = None) -> Dataset:
    """
    Build a Dataset from an already parsed JSON value.

    Args:
        raw: Parsed JSON, or None when the fetch collaborator failed
        source: Where the data came from (for messages)

    Returns:
        Dataset; empty with an error message on load or shape failure
    """
    label = source or "dataset"

    if raw is None:
        message = f"Dataset load failed: {label}"
        logger.error(message)
        return Dataset(records=(), error=message, source=source)

    items = locate_records(raw)
    if items is None:
        message = f"Could not locate novels array in {label}"
        return Dataset(records=(), error=message, source=source)

    accepted = [item for item in items if isinstance(item, (Mapping, Novel))]
    rejected = len(items) - len(accepted)
    if rejected:
        logger.warning(f"Skipped {rejected} malformed records in {label}")

    records = tuple(normalize(accepted))
    logger.info(f"Loaded {len(records)} novels from {label}")
    return Dataset(records=records, error=None, source=source)
