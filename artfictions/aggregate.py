"""Frequency, co-occurrence and trend tables over normalized novels.

Every function here is pure: it reads a sequence of Novel objects and returns
a freshly built table. Renderers (charts, terminal tables) consume the
results; nothing in this module formats output.
"""
from collections import Counter
from typing import Callable, Dict, Hashable, List, Optional, Sequence, Tuple, Union

from artfictions.models import Novel

Extractor = Callable[[Novel], List[Hashable]]
DimensionSpec = Union[str, Extractor]

DIMENSIONS: Dict[str, Extractor] = {
    "title": lambda n: [n.title],
    "author": lambda n: [n.author],
    "country": lambda n: [n.country],
    "language": lambda n: [n.language],
    "language_split": lambda n: list(n.languages),
    "publisher": lambda n: [n.publisher],
    "theme": lambda n: list(n.themes),
    # Absent years are left out rather than bucketed as Unknown
    "year": lambda n: [n.year] if n.year is not None else [],
    "decade": lambda n: [n.year // 10 * 10] if n.year is not None else [],
}

ALIASES = {
    "titles": "title",
    "authors": "author",
    "countries": "country",
    "languages": "language",
    "split_languages": "language_split",
    "publishers": "publisher",
    "themes": "theme",
    "years": "year",
    "decades": "decade",
}


def resolve_dimension(dimension: DimensionSpec) -> Extractor:
    """
    Look up a dimension extractor.

    Args:
        dimension: Dimension name (or plural alias) or an extractor callable

    Returns:
        Function mapping a Novel to its list of values

    Raises:
        ValueError: if the name is not a known dimension
    """
    if callable(dimension):
        return dimension
    name = ALIASES.get(dimension, dimension)
    try:
        return DIMENSIONS[name]
    except KeyError:
        choices = ", ".join(sorted(DIMENSIONS))
        raise ValueError(f"Unknown dimension '{dimension}' (choose from: {choices})") from None


def dimension_names() -> List[str]:
    """All accepted dimension names, aliases included."""
    return sorted(set(DIMENSIONS) | set(ALIASES))


def frequency(records: Sequence[Novel], dimension: DimensionSpec) -> Counter:
    """
    Count records per dimension value.

    Multi-valued dimensions count a record once for every value it holds,
    so the total can exceed the number of records.
    """
    extract = resolve_dimension(dimension)
    counts = Counter()
    for novel in records:
        for value in extract(novel):
            counts[value] += 1
    return counts


def top_k(table: Dict[Hashable, int], k: Optional[int] = None) -> List[Tuple[Hashable, int]]:
    """
    Rank a table by count.

    Args:
        table: Value -> count mapping
        k: Maximum entries (None for all)

    Returns:
        (value, count) pairs, highest count first; ties keep insertion order
    """
    if k is not None and k <= 0:
        return []
    # sorted() is stable, including with reverse=True
    ranked = sorted(table.items(), key=lambda item: item[1], reverse=True)
    return ranked if k is None else ranked[:k]


def _restrict(records, extract, k):
    if k is None:
        return None
    return {value for value, _ in top_k(frequency(records, extract), k)}


def co_occurrence(
    records: Sequence[Novel],
    dimension_a: DimensionSpec,
    dimension_b: DimensionSpec,
    top_a: Optional[int] = None,
    top_b: Optional[int] = None,
    symmetric: bool = False
) -> Counter:
    """
    Count joint occurrences of values from two dimensions.

    Args:
        records: Normalized novels
        dimension_a: First dimension
        dimension_b: Second dimension
        top_a: Keep only the top_a most frequent values of A (None = all)
        top_b: Keep only the top_b most frequent values of B (None = all)
        symmetric: Also count every (a, b) pair as (b, a)

    Returns:
        Counter keyed by (a, b) tuples
    """
    extract_a = resolve_dimension(dimension_a)
    extract_b = resolve_dimension(dimension_b)
    allowed_a = _restrict(records, extract_a, top_a)
    allowed_b = _restrict(records, extract_b, top_b)

    pairs = Counter()
    for novel in records:
        values_a = [a for a in extract_a(novel) if allowed_a is None or a in allowed_a]
        if not values_a:
            continue
        values_b = [b for b in extract_b(novel) if allowed_b is None or b in allowed_b]
        # Full cross product: every combination the record exhibits
        for a in values_a:
            for b in values_b:
                pairs[(a, b)] += 1
                if symmetric and a != b:
                    pairs[(b, a)] += 1
    return pairs


def pair_occurrence(records: Sequence[Novel], dimension: DimensionSpec) -> Counter:
    """
    Count how often two values of the same dimension appear on one record.

    Each unordered pair is stored in both orders.
    """
    extract = resolve_dimension(dimension)
    pairs = Counter()
    for novel in records:
        values = extract(novel)
        for i in range(len(values)):
            for j in range(i + 1, len(values)):
                a, b = values[i], values[j]
                pairs[(a, b)] += 1
                if a != b:
                    pairs[(b, a)] += 1
    return pairs


def chord_matrix(
    records: Sequence[Novel],
    dimension_a: DimensionSpec,
    dimension_b: DimensionSpec,
    top_a: Optional[int] = None,
    top_b: Optional[int] = None
) -> Tuple[List[Hashable], List[List[int]]]:
    """
    Build the square matrix a chord diagram expects.

    Returns:
        (groups, matrix) where groups lists the top A values then the top B
        values and matrix[i][j] is the symmetric joint count. A value found
        in both dimensions (e.g. Unknown country and Unknown publisher) gets
        one group per side.
    """
    values_a = [value for value, _ in top_k(frequency(records, dimension_a), top_a)]
    values_b = [value for value, _ in top_k(frequency(records, dimension_b), top_b)]
    groups: List[Hashable] = values_a + values_b

    index_a = {value: i for i, value in enumerate(values_a)}
    index_b = {value: len(values_a) + i for i, value in enumerate(values_b)}
    matrix = [[0] * len(groups) for _ in groups]
    table = co_occurrence(records, dimension_a, dimension_b, top_a, top_b)
    for (a, b), count in table.items():
        i, j = index_a[a], index_b[b]
        matrix[i][j] += count
        matrix[j][i] += count
    return groups, matrix


def _year_range(records: Sequence[Novel]) -> Optional[Tuple[int, int]]:
    years = [novel.year for novel in records if novel.year is not None]
    if not years:
        return None
    return min(years), max(years)


def _fill_years(counts: Counter, span: Optional[Tuple[int, int]]) -> List[Tuple[int, int]]:
    if span is None:
        return []
    start, end = span
    return [(year, counts.get(year, 0)) for year in range(start, end + 1)]


def year_series(
    records: Sequence[Novel],
    dimension: Optional[DimensionSpec] = None,
    category: Optional[Hashable] = None
) -> List[Tuple[int, int]]:
    """
    Count novels per year over the observed range, filling gaps with zero.

    Args:
        records: Normalized novels
        dimension: Optional dimension to filter on
        category: Value of that dimension a record must exhibit

    Returns:
        (year, count) pairs for every year from the earliest to the latest
    """
    span = _year_range(records)
    counts = Counter()
    extract = resolve_dimension(dimension) if dimension is not None else None
    for novel in records:
        if novel.year is None:
            continue
        if extract is None:
            counts[novel.year] += 1
        else:
            counts[novel.year] += sum(1 for value in extract(novel) if value == category)
    return _fill_years(counts, span)


def moving_average(series: Sequence[Tuple[int, float]], radius: int) -> List[Tuple[int, float]]:
    """
    Smooth a (year, value) series with a centred moving average.

    The window for index i spans [max(0, i - radius), min(n - 1, i + radius)];
    it shrinks at both edges instead of padding.
    """
    radius = max(0, radius)
    values = [value for _, value in series]
    last = len(values) - 1
    smoothed = []
    for i, (year, _) in enumerate(series):
        lo = max(0, i - radius)
        hi = min(last, i + radius)
        window = values[lo:hi + 1]
        smoothed.append((year, sum(window) / len(window)))
    return smoothed


def window_radius(window_size: int) -> int:
    """Convert a smoothing window size (1, 3, 5, ...) to a radius."""
    return max(0, window_size) // 2


def trend_series(
    records: Sequence[Novel],
    dimension: DimensionSpec,
    k: int = 5,
    radius: int = 0
) -> Dict[Hashable, List[Tuple[int, float]]]:
    """
    Smoothed per-year series for the k most frequent values of a dimension.

    All series share the year range of the dated records.
    """
    extract = resolve_dimension(dimension)
    categories = [value for value, _ in top_k(frequency(records, extract), k)]
    span = _year_range(records)

    per_category = {category: Counter() for category in categories}
    for novel in records:
        if novel.year is None:
            continue
        for value in extract(novel):
            if value in per_category:
                per_category[value][novel.year] += 1

    return {
        category: moving_average(_fill_years(counts, span), radius)
        for category, counts in per_category.items()
    }


def summary(records: Sequence[Novel]) -> Dict[str, Optional[int]]:
    """Headline numbers for the summary cards."""
    span = _year_range(records)
    return {
        "total_novels": len(records),
        "distinct_authors": len({n.author for n in records}),
        "distinct_countries": len({n.country for n in records}),
        "distinct_languages": len({n.language for n in records}),
        "distinct_publishers": len({n.publisher for n in records}),
        "distinct_themes": len({t for n in records for t in n.themes}),
        "dated_novels": sum(1 for n in records if n.year is not None),
        "year_min": span[0] if span else None,
        "year_max": span[1] if span else None,
    }
