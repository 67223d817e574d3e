#!/usr/bin/env python3
"""Artfictions Explorer CLI - browse and aggregate the novels dataset."""
import argparse
import csv
import sys
import json
from tabulate import tabulate
from artfictions.client import DatasetClient
from artfictions.parse import load_dataset
from artfictions.aggregate import (
    frequency, top_k, co_occurrence, trend_series, window_radius, summary, dimension_names
)
from artfictions.search import search_novels, filter_novels
from artfictions.config import Config
import logging

logger = logging.getLogger(__name__)


def setup_logging(config: Config):
    """Configure root logging."""
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL, logging.INFO),
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


def load(args, config: Config):
    """Fetch and normalize the dataset; None if the load failed."""
    source = args.source or config.SOURCE

    with DatasetClient(
        timeout=config.DEFAULT_TIMEOUT,
        max_retries=config.DEFAULT_MAX_RETRIES
    ) as client:
        raw = client.fetch(source)

    dataset = load_dataset(raw, source=source)
    if not dataset.ok:
        logger.error(f"❌ {dataset.error}")
        return None
    return dataset


def truncate(text, width: int) -> str:
    text = str(text)
    return text[:width] + "..." if len(text) > width else text


def print_rows(rows, headers, format_type: str, keys=None):
    """
    Print rows as a grid, JSON objects or CSV.

    Args:
        rows: Table rows
        headers: Column titles
        format_type: table, json or csv
        keys: JSON object keys (default: headers in snake case)
    """
    if format_type == "table":
        print("\n" + tabulate(rows, headers=headers, tablefmt="grid"))

    elif format_type == "json":
        if keys is None:
            keys = [h.lower().replace(" ", "_") for h in headers]
        print(json.dumps([dict(zip(keys, row)) for row in rows], indent=2, ensure_ascii=False))

    elif format_type == "csv":
        writer = csv.writer(sys.stdout)
        writer.writerow(headers)
        writer.writerows(rows)


def show_stats(args, config: Config):
    """Show dataset summary cards."""
    dataset = load(args, config)
    if dataset is None:
        return 1

    stats = summary(dataset.records)

    print("\n" + "=" * 50)
    print("DATASET STATISTICS")
    print("=" * 50)
    print(f"Total novels: {stats['total_novels']}")
    print(f"Distinct authors: {stats['distinct_authors']}")
    print(f"Distinct countries: {stats['distinct_countries']}")
    print(f"Distinct languages: {stats['distinct_languages']}")
    print(f"Distinct publishers: {stats['distinct_publishers']}")
    print(f"Distinct themes: {stats['distinct_themes']}")
    print(f"Novels with a year: {stats['dated_novels']}")
    if stats["year_min"] is not None:
        print(f"Years covered: {stats['year_min']}-{stats['year_max']}")
    print("=" * 50 + "\n")
    return 0


def show_top(args, config: Config):
    """Show the most frequent values of a dimension."""
    dataset = load(args, config)
    if dataset is None:
        return 1

    table = frequency(dataset.records, args.dimension)
    ranked = top_k(table, args.limit)
    total = sum(table.values())

    rows = [
        [truncate(value, 50), count, f"{count / total * 100:.1f}%"]
        for value, count in ranked
    ]
    print_rows(rows, [args.dimension.title(), "Count", "Share"], args.format)
    logger.info(f"{len(table)} distinct values, showing {len(ranked)}")
    return 0


def show_cross(args, config: Config):
    """Show a co-occurrence table between two dimensions."""
    dataset = load(args, config)
    if dataset is None:
        return 1

    table = co_occurrence(
        dataset.records,
        args.dimension_a,
        args.dimension_b,
        top_a=args.top_a,
        top_b=args.top_b,
        symmetric=args.symmetric
    )

    rows = [
        [truncate(a, 40), truncate(b, 40), count]
        for (a, b), count in top_k(table, args.limit)
    ]
    print_rows(rows, [args.dimension_a.title(), args.dimension_b.title(), "Count"], args.format)
    return 0


def show_trend(args, config: Config):
    """Show smoothed per-year counts for the top values of a dimension."""
    dataset = load(args, config)
    if dataset is None:
        return 1

    window = args.window if args.window is not None else config.DEFAULT_SMOOTHING
    series = trend_series(dataset.records, args.dimension, args.limit, window_radius(window))

    if not series or not any(series.values()):
        print("No dated novels to chart")
        return 0

    categories = list(series)
    years = [year for year, _ in next(iter(series.values()))]
    rows = [
        [year] + [round(series[category][i][1], 2) for category in categories]
        for i, year in enumerate(years)
    ]
    names = [str(c) for c in categories]
    # Only the grid is width-limited; json and csv keep every column distinct
    labels = [truncate(n, 20) for n in names] if args.format == "table" else names
    print_rows(rows, ["Year"] + labels, args.format, keys=["year"] + names)
    return 0


def show_search(args, config: Config):
    """Search novels by free text and per-field filters."""
    dataset = load(args, config)
    if dataset is None:
        return 1

    novels = search_novels(dataset.records, args.term)
    novels = filter_novels(
        novels,
        title=args.title,
        author=args.author,
        country=args.country,
        language=args.language,
        year=args.year,
        theme=args.theme
    )
    if args.limit:
        novels = novels[:args.limit]

    logger.info(f"Found {len(novels)} novels")

    if args.format == "compact":
        for i, novel in enumerate(novels, 1):
            print(f"{i}. {novel.title} - {novel.author}")
        return 0

    rows = [
        [
            truncate(novel.title, 50),
            truncate(novel.author, 30),
            novel.country,
            truncate(novel.language, 20),
            novel.year_str,
            truncate(novel.themes_str, 40)
        ]
        for novel in novels
    ]
    print_rows(rows, ["Title", "Author", "Country", "Language", "Year", "Themes"], args.format)
    return 0


def export_data(args, config: Config):
    """Export normalized novels."""
    dataset = load(args, config)
    if dataset is None:
        return 1

    novels = dataset.records[:args.limit] if args.limit else dataset.records

    if args.format == "json":
        data = [
            {
                "title": novel.title,
                "author": novel.author,
                "country": novel.country,
                "language": novel.language,
                "languages": novel.languages,
                "publisher": novel.publisher,
                "year": novel.year,
                "themes": novel.themes
            }
            for novel in novels
        ]

        if args.output:
            with open(args.output, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            logger.info(f"✅ Exported {len(novels)} novels to {args.output}")
        else:
            print(json.dumps(data, indent=2, ensure_ascii=False))

    elif args.format == "csv":
        output_file = args.output or "novels_export.csv"
        with open(output_file, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(["Title", "Author", "Country", "Language", "Publisher", "Year", "Themes"])

            for novel in novels:
                writer.writerow([
                    novel.title,
                    novel.author,
                    novel.country,
                    novel.language,
                    novel.publisher,
                    novel.year if novel.year is not None else "",
                    "; ".join(novel.themes)
                ])

        logger.info(f"✅ Exported {len(novels)} novels to {output_file}")

    return 0


def build_parser(config: Config) -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        description="Artfictions Explorer - novels dataset statistics CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Summary cards
  %(prog)s stats

  # Top 20 themes
  %(prog)s top themes --limit 20

  # Country x publisher, restricted to the 10 biggest of each
  %(prog)s cross country publisher --top-a 10 --top-b 10

  # Theme trends smoothed over a 5-year window
  %(prog)s trend themes --limit 5 --window 5

  # Search
  %(prog)s search war --country france
        """
    )
    parser.add_argument("--source", help=f"Dataset URL or path (default: {config.SOURCE})")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")
    dimensions = dimension_names()

    # Stats command
    subparsers.add_parser("stats", help="Show dataset statistics")

    # Top command
    top_parser = subparsers.add_parser("top", help="Most frequent values of a dimension")
    top_parser.add_argument("dimension", choices=dimensions, help="Dimension to count")
    top_parser.add_argument("--limit", type=int, default=config.DEFAULT_TOP_K,
                            help=f"Max rows (default: {config.DEFAULT_TOP_K})")
    top_parser.add_argument("--format", choices=["table", "json", "csv"], default="table", help="Output format")

    # Cross command
    cross_parser = subparsers.add_parser("cross", help="Co-occurrence of two dimensions")
    cross_parser.add_argument("dimension_a", choices=dimensions, help="First dimension")
    cross_parser.add_argument("dimension_b", choices=dimensions, help="Second dimension")
    cross_parser.add_argument("--top-a", type=int, help="Restrict to the N most frequent values of A")
    cross_parser.add_argument("--top-b", type=int, help="Restrict to the N most frequent values of B")
    cross_parser.add_argument("--symmetric", action="store_true", help="Mirror counts into (b, a)")
    cross_parser.add_argument("--limit", type=int, default=config.DEFAULT_TOP_K,
                              help=f"Max rows (default: {config.DEFAULT_TOP_K})")
    cross_parser.add_argument("--format", choices=["table", "json", "csv"], default="table", help="Output format")

    # Trend command
    trend_parser = subparsers.add_parser("trend", help="Per-year trend of the top values")
    trend_parser.add_argument("dimension", choices=dimensions, help="Dimension to chart")
    trend_parser.add_argument("--limit", type=int, default=config.DEFAULT_TREND_K,
                              help=f"Number of series (default: {config.DEFAULT_TREND_K})")
    trend_parser.add_argument("--window", type=int,
                              help=f"Moving-average window in years (default: {config.DEFAULT_SMOOTHING})")
    trend_parser.add_argument("--format", choices=["table", "json", "csv"], default="table", help="Output format")

    # Search command
    search_parser = subparsers.add_parser("search", help="Search novels")
    search_parser.add_argument("term", nargs="?", default="", help="Free-text query")
    search_parser.add_argument("--title", help="Title contains")
    search_parser.add_argument("--author", help="Author contains")
    search_parser.add_argument("--country", help="Country contains")
    search_parser.add_argument("--language", help="Language contains")
    search_parser.add_argument("--year", help="Year contains")
    search_parser.add_argument("--theme", help="Any theme contains")
    search_parser.add_argument("--limit", type=int, help="Max results")
    search_parser.add_argument("--format", choices=["table", "json", "csv", "compact"], default="table",
                               help="Output format")

    # Export command
    export_parser = subparsers.add_parser("export", help="Export normalized novels")
    export_parser.add_argument("--format", choices=["json", "csv"], default="json", help="Export format")
    export_parser.add_argument("--output", help="Output file (default: stdout for JSON)")
    export_parser.add_argument("--limit", type=int, help="Limit results")

    return parser


COMMANDS = {
    "stats": show_stats,
    "top": show_top,
    "cross": show_cross,
    "trend": show_trend,
    "search": show_search,
    "export": export_data,
}


def main(argv=None):
    """Main CLI entry point."""
    config = Config()
    parser = build_parser(config)
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    setup_logging(config)

    try:
        status = COMMANDS[args.command](args, config)
    except KeyboardInterrupt:
        logger.info("\n⚠️  Interrupted by user")
        sys.exit(0)
    except Exception as e:
        logger.error(f"❌ Error: {e}", exc_info=True)
        sys.exit(1)

    sys.exit(status)


if __name__ == "__main__":
    main()
