"""Tests for frequency, co-occurrence and trend tables."""
import pytest

from artfictions.aggregate import (
    frequency, top_k, co_occurrence, pair_occurrence, chord_matrix,
    year_series, trend_series, moving_average, window_radius, summary,
    resolve_dimension
)
from artfictions.models import UNKNOWN
from artfictions.parse import normalize


def sample_novels():
    return normalize([
        {"Title": "A", "Country": "France", "Theme 1": "War"},
        {"Title": "B", "Country": "France", "Theme 1": "War"},
        {"Title": "C", "Country": "Italy"},
    ])


def catalogue():
    return normalize([
        {"Title": "A", "Author": "Zola", "Country": "France", "Language": "French",
         "Publisher": "Gallimard", "Year of Publication": "2000",
         "Theme 1": "War", "Theme 2": "Art"},
        {"Title": "B", "Author": "Zola", "Country": "France", "Language": "French / Occitan",
         "Publisher": "Seuil", "Year of Publication": "2000",
         "Theme 1": "Art"},
        {"Title": "C", "Author": "Eco", "Country": "Italy", "Language": "Italian",
         "Publisher": "Bompiani", "Year of Publication": "2003",
         "Theme 1": "Art", "Theme 2": "Memory", "Theme 3": "War"},
        {"Title": "D", "Author": "", "Country": "", "Language": "English",
         "Publisher": "Gallimard", "Year of Publication": "unknown"},
    ])


def test_frequency_example():
    novels = sample_novels()

    assert frequency(novels, "country") == {"France": 2, "Italy": 1}
    assert frequency(novels, "themes") == {"War": 2}


def test_frequency_counts_unknown_as_category():
    counts = frequency(catalogue(), "author")

    assert counts[UNKNOWN] == 1
    assert sum(counts.values()) == 4


def test_frequency_excludes_absent_years():
    counts = frequency(catalogue(), "year")

    assert counts == {2000: 2, 2003: 1}
    assert UNKNOWN not in counts


def test_frequency_sums():
    novels = catalogue()

    for dimension in ("author", "country", "language", "publisher", "title"):
        assert sum(frequency(novels, dimension).values()) == len(novels)
    for dimension in ("themes", "language_split"):
        assert sum(frequency(novels, dimension).values()) >= len(novels) - 1

    assert sum(frequency(novels, "language_split").values()) == 5


def test_frequency_empty_dataset():
    assert frequency([], "country") == {}
    assert top_k(frequency([], "country"), 5) == []


def test_frequency_with_callable_dimension():
    counts = frequency(catalogue(), lambda n: [n.title.lower()])
    assert counts == {"a": 1, "b": 1, "c": 1, "d": 1}


def test_unknown_dimension_raises():
    with pytest.raises(ValueError):
        resolve_dimension("genre")


def test_top_k_orders_and_breaks_ties_by_insertion():
    table = {"b": 2, "a": 3, "c": 2, "d": 1, "e": 2}

    assert top_k(table, 3) == [("a", 3), ("b", 2), ("c", 2)]
    assert top_k(table) == [("a", 3), ("b", 2), ("c", 2), ("e", 2), ("d", 1)]
    assert top_k(table, 0) == []


def test_top_k_is_prefix_of_larger_k():
    table = frequency(catalogue(), "publisher")

    for k in range(0, 6):
        smaller = top_k(table, k)
        assert len(smaller) <= k
        assert smaller == top_k(table, k + 1)[:len(smaller)]
        counts = [count for _, count in smaller]
        assert counts == sorted(counts, reverse=True)


def test_co_occurrence_full_cross_product():
    table = co_occurrence(catalogue(), "language_split", "themes")

    assert table[("French", "Art")] == 2
    assert table[("Occitan", "Art")] == 1
    assert table[("Italian", "Memory")] == 1
    assert ("English", "War") not in table


def test_co_occurrence_restricts_to_top_values():
    table = co_occurrence(catalogue(), "country", "publisher", top_a=1, top_b=1)

    assert table == {("France", "Gallimard"): 1}


def test_co_occurrence_symmetric():
    table = co_occurrence(catalogue(), "country", "language", symmetric=True)

    assert table[("France", "French")] == 1
    assert table[("French", "France")] == 1
    assert table[(UNKNOWN, "English")] == table[("English", UNKNOWN)] == 1


def test_co_occurrence_diagonal_counted_once():
    table = co_occurrence(catalogue(), "country", "country", symmetric=True)
    assert table[("France", "France")] == 2


def test_pair_occurrence():
    table = pair_occurrence(catalogue(), "themes")

    assert table[("War", "Art")] == 2
    assert table[("Art", "War")] == 2
    assert table[("Memory", "War")] == 1
    assert ("Art", "Art") not in table


def test_chord_matrix_is_symmetric():
    groups, matrix = chord_matrix(catalogue(), "country", "publisher", 2, 2)

    assert groups == ["France", "Italy", "Gallimard", "Seuil"]
    assert len(matrix) == len(groups)
    for i in range(len(groups)):
        for j in range(len(groups)):
            assert matrix[i][j] == matrix[j][i]
    assert matrix[groups.index("France")][groups.index("Gallimard")] == 1
    assert matrix[groups.index("Italy")][groups.index("Seuil")] == 0


def test_chord_matrix_keeps_shared_values_apart():
    novels = normalize([
        {"Title": "A", "Country": "France"},
        {"Title": "B", "Publisher": "Seuil"},
        {"Title": "C"},
    ])

    groups, matrix = chord_matrix(novels, "country", "publisher")

    assert groups == [UNKNOWN, "France", UNKNOWN, "Seuil"]
    country_unknown, france, publisher_unknown, seuil = range(4)
    assert matrix[country_unknown][publisher_unknown] == matrix[publisher_unknown][country_unknown] == 1
    assert matrix[france][publisher_unknown] == matrix[publisher_unknown][france] == 1
    assert matrix[country_unknown][seuil] == matrix[seuil][country_unknown] == 1
    assert all(matrix[i][i] == 0 for i in range(len(groups)))


def test_frequency_by_decade():
    novels = normalize([
        {"Year of Publication": "1989"},
        {"Year of Publication": "1980"},
        {"Year of Publication": "2003"},
        {"Year of Publication": "unknown"},
    ])

    assert frequency(novels, "decade") == {1980: 2, 2000: 1}
    assert frequency(novels, "decades") == frequency(novels, "decade")
    assert top_k(frequency(novels, "decades"), 1) == [(1980, 2)]


def test_year_series_fills_gaps():
    novels = normalize([
        {"Year of Publication": 2000},
        {"Year of Publication": 2000},
        {"Year of Publication": 2003},
    ])

    assert year_series(novels) == [(2000, 2), (2001, 0), (2002, 0), (2003, 1)]


def test_year_series_for_category():
    series = year_series(catalogue(), "themes", "War")
    assert series == [(2000, 1), (2001, 0), (2002, 0), (2003, 1)]


def test_year_series_without_dates():
    assert year_series(normalize([{"Title": "A"}])) == []


def test_moving_average_shrinking_window():
    series = [(2000, 3), (2001, 0), (2002, 0), (2003, 6)]

    smoothed = moving_average(series, 1)

    assert smoothed == [(2000, 1.5), (2001, 1.0), (2002, 2.0), (2003, 3.0)]


def test_moving_average_radius_zero_is_identity():
    series = [(2000, 2), (2001, 0), (2002, 5)]

    assert moving_average(series, 0) == series
    assert moving_average(series, -2) == series


def test_moving_average_preserves_length():
    series = [(year, year % 3) for year in range(1950, 1970)]

    for radius in range(0, 25):
        assert len(moving_average(series, radius)) == len(series)
    assert moving_average([], 2) == []


def test_moving_average_wide_window_is_global_mean():
    series = [(1, 1), (2, 2), (3, 3)]
    assert moving_average(series, 10) == [(1, 2.0), (2, 2.0), (3, 2.0)]


def test_window_radius():
    assert window_radius(1) == 0
    assert window_radius(3) == 1
    assert window_radius(5) == 2
    assert window_radius(0) == 0


def test_trend_series():
    trends = trend_series(catalogue(), "themes", k=2, radius=0)

    assert list(trends) == ["Art", "War"]
    assert trends["Art"] == [(2000, 2), (2001, 0), (2002, 0), (2003, 1)]
    assert trends["War"] == [(2000, 1), (2001, 0), (2002, 0), (2003, 1)]


def test_trend_series_smoothed():
    trends = trend_series(catalogue(), "country", k=1, radius=1)

    assert trends == {"France": [(2000, 1.0), (2001, 2 / 3), (2002, 0.0), (2003, 0.0)]}


def test_summary():
    stats = summary(catalogue())

    assert stats["total_novels"] == 4
    assert stats["distinct_authors"] == 3
    assert stats["distinct_themes"] == 3
    assert stats["dated_novels"] == 3
    assert stats["year_min"] == 2000
    assert stats["year_max"] == 2003


def test_summary_empty():
    stats = summary([])

    assert stats["total_novels"] == 0
    assert stats["year_min"] is None


def test_aggregation_does_not_mutate_records():
    novels = catalogue()
    before = [n.to_dict() for n in novels]

    frequency(novels, "themes")
    co_occurrence(novels, "themes", "country", 2, 2, symmetric=True)
    trend_series(novels, "themes", 3, 1)

    assert [n.to_dict() for n in novels] == before
