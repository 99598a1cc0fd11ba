"""CLI entry point for monitor-coverage-scoring."""

import argparse
import csv
import io
import json
import logging
import sys
from pathlib import Path

import yaml

from .catalog import ToolCatalog
from .models import ScoreResult, SystemConfiguration
from .scorer import SystemScorer
from .snapshot import load_snapshot
from .stats import summarize

SCORE_FIELDS = ["part1", "part2", "part3", "part4", "total"]


def main(argv: list[str] | None = None) -> None:
    """Monitoring coverage scoring: score every system in a snapshot."""
    parser = argparse.ArgumentParser(
        prog="monitor-coverage-scoring",
        description="Score how well systems are covered by operational monitoring.",
    )
    parser.add_argument("snapshot", nargs="?", default=None, help="Path to a JSON snapshot of systems and tools.")
    parser.add_argument("--rules", dest="rules_path", default=None, help="Path to a custom YAML rule table.")
    parser.add_argument("--system", dest="system_id", default=None, help="Print a breakdown for a single system id.")
    parser.add_argument("--format", dest="output_format", choices=["json", "csv"], default="json", help="Output format (default: json).")
    parser.add_argument("--output", dest="output_path", default=None, help="Write results to file instead of stdout.")
    parser.add_argument("--stats", dest="show_stats", action="store_true", default=False, help="Print summary statistics to stderr.")
    parser.add_argument("--sort-by", dest="sort_by", choices=SCORE_FIELDS, default=None, help="Sort output by a score, highest first.")
    parser.add_argument("--min-total", type=float, default=None, help="Only output systems with total >= n.")
    parser.add_argument("--verbose", action="store_true", default=False, help="Include diagnostic fields in output.")
    parser.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging level (default: WARNING).")

    args = parser.parse_args(argv)

    if args.snapshot is None:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(level=args.log_level, stream=sys.stderr, format="%(levelname)s %(name)s: %(message)s")
    _cmd_score(args)


def _cmd_score(args: argparse.Namespace) -> None:
    """Execute scoring."""
    if args.rules_path:
        if not Path(args.rules_path).is_file():
            print(f"Error: Rule table not found: {args.rules_path}", file=sys.stderr)
            sys.exit(2)
        try:
            scorer = SystemScorer.from_config(args.rules_path)
        except (ValueError, yaml.YAMLError) as e:
            print(f"Error: Invalid rule table {args.rules_path}: {e}", file=sys.stderr)
            sys.exit(2)
    else:
        scorer = SystemScorer()

    if not Path(args.snapshot).is_file():
        print(f"Error: File not found: {args.snapshot}", file=sys.stderr)
        sys.exit(2)

    try:
        snapshot = load_snapshot(args.snapshot)
    except ValueError as e:
        print(f"Error: Invalid snapshot {args.snapshot}: {e}", file=sys.stderr)
        sys.exit(2)

    if args.system_id is not None:
        system = next((s for s in snapshot.systems if s.id == args.system_id), None)
        if system is None:
            print(f"Error: System not found in snapshot: {args.system_id}", file=sys.stderr)
            sys.exit(2)
        _print_system_result(system, snapshot.catalog, scorer.score(system, snapshot.catalog))
        return

    results = list(zip(snapshot.systems, scorer.score_many(snapshot.systems, snapshot.catalog)))

    if args.min_total is not None:
        results = [(s, r) for s, r in results if r.total >= args.min_total]

    if args.sort_by:
        results.sort(key=lambda pair: getattr(pair[1], args.sort_by), reverse=True)

    if args.output_format == "json":
        output_text = _format_json(results, args.verbose)
    else:
        output_text = _format_csv(results, args.verbose)

    if args.output_path:
        with open(args.output_path, "w", encoding="utf-8") as f:
            f.write(output_text)
    else:
        print(output_text)

    if args.show_stats:
        stats = summarize([r for _, r in results])
        _print_stats(stats, scorer.rule_version)


def _print_system_result(system: SystemConfiguration, catalog: ToolCatalog, result: ScoreResult) -> None:
    """Print a human-readable scoring breakdown for one system."""
    print(f"System: {system.name or system.id}  ({system.id})  Tier: {system.tier}")
    print(f"Rules:  {result.rule_version}")
    print(f"Total:  {result.total}")
    print()
    print(f"  1. Configuration & standardization  {result.part1:>5} / 60")
    print(f"     package level: {result.package_level}  "
          f"standardization: {result.standardization_score:.1f} over {result.participating_pairs} pair(s)  "
          f"documentation: {result.documentation_score:.1f}")
    if result.missing_caps:
        print(f"     missing capabilities: {', '.join(result.missing_caps)}")
    print(f"  2. Detection capability             {result.part2:>5} / 20")
    print(f"     accuracy {result.accuracy_rate_pct:.1f}% -> {result.accuracy_score}  "
          f"discovery {result.discovery_rate_pct:.1f}% -> {result.discovery_score}")
    print(f"  3. Alerting & notification          {result.part3:>5} / 10")
    print(f"  4. Operations team                  {result.part4:>5} / 10")
    tools = [catalog.get(tid) for tid in system.selected_tool_ids]
    names = [t.name for t in tools if t is not None]
    if names:
        print()
        print(f"Tools: {', '.join(names)}")


def _record(system: SystemConfiguration, result: ScoreResult, verbose: bool) -> dict:
    record = {"id": system.id, "name": system.name}
    if verbose:
        record.update(result.to_dict())
    else:
        record.update({f: getattr(result, f) for f in SCORE_FIELDS})
    return record


def _format_json(results, verbose: bool) -> str:
    """Format results as JSON."""
    return json.dumps([_record(s, r, verbose) for s, r in results], indent=2, ensure_ascii=False)


def _format_csv(results, verbose: bool) -> str:
    """Format results as CSV."""
    buf = io.StringIO()
    fieldnames = ["id", "name", *SCORE_FIELDS]
    if verbose:
        fieldnames += ["missing_caps", "package_level", "accuracy_rate_pct", "discovery_rate_pct"]
    writer = csv.DictWriter(buf, fieldnames=fieldnames)
    writer.writeheader()
    for s, r in results:
        row = {"id": s.id, "name": s.name, **{f: getattr(r, f) for f in SCORE_FIELDS}}
        if verbose:
            row["missing_caps"] = " ".join(r.missing_caps)
            row["package_level"] = r.package_level
            row["accuracy_rate_pct"] = r.accuracy_rate_pct
            row["discovery_rate_pct"] = r.discovery_rate_pct
        writer.writerow(row)
    return buf.getvalue()


def _print_stats(stats, rule_version: str) -> None:
    """Print summary statistics to stderr."""
    print("\n=== Scoring Summary ===", file=sys.stderr)
    print(f"Rule table: {rule_version}", file=sys.stderr)
    print(f"Systems scored: {stats.total_systems:,}", file=sys.stderr)
    print(f"Fully covered:  {stats.fully_covered_systems:,}", file=sys.stderr)
    print("", file=sys.stderr)
    print("Total:", file=sys.stderr)
    print(
        f"  Mean: {stats.mean_total}  |  Median: {stats.median_total}  "
        f"|  Min: {stats.min_total}  |  Max: {stats.max_total}",
        file=sys.stderr,
    )
    hist = stats.total_histogram
    print(
        f"  Distribution:  <60: {hist.get('<60', 0)}  |  60-69: {hist.get('60-69', 0)}  "
        f"|  70-79: {hist.get('70-79', 0)}  |  80-89: {hist.get('80-89', 0)}  "
        f"|  >=90: {hist.get('>=90', 0)}",
        file=sys.stderr,
    )
