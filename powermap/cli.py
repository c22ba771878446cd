"""
powermap/cli.py — Command-line interface over CSV extracts of a contact store.

Loads stakeholders, relationships and (optionally) group memberships from CSV
into an InMemoryContactStore and runs one of the pipeline entry points:

Usage:
    python -m powermap network  --nodes nodes.csv --relationships rels.csv
    python -m powermap analysis --nodes nodes.csv --relationships rels.csv --group-id 4
    python -m powermap export   --nodes nodes.csv --relationships rels.csv -o map.csv
    python -m powermap validate --nodes nodes.csv --relationships rels.csv

network / analysis / validate print JSON to stdout; export writes CSV to
--output (or stdout).
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from powermap.config import DEFAULT_CONFIG, PowerMapConfig
from powermap.graph.attributes import AttributeResolver
from powermap.store import InMemoryContactStore

logger = logging.getLogger("powermap.cli")


# ── Logging setup ─────────────────────────────────────────────────────────────

def _setup_logging(level: str = "INFO") -> None:
    """Configure root logger with timestamps."""
    numeric = getattr(logging, level.upper(), logging.INFO)
    fmt = "%(asctime)s  %(levelname)-8s  %(name)s — %(message)s"
    datefmt = "%H:%M:%S"
    logging.basicConfig(level=numeric, format=fmt, datefmt=datefmt, stream=sys.stderr)


def _load_store(args: argparse.Namespace) -> InMemoryContactStore:
    return InMemoryContactStore.from_csv(
        args.nodes,
        relationships_path=args.relationships,
        memberships_path=args.groups,
    )


def _params(args: argparse.Namespace) -> dict:
    return {
        "group_id": args.group_id,
        "contact_id": args.contact_id,
        "influence_min": args.influence_min,
        "support_min": args.support_min,
        "relationship_types": args.relationship_types,
        "only_relationship": args.only_relationship,
    }


def _config(args: argparse.Namespace) -> PowerMapConfig:
    return PowerMapConfig(
        betweenness_method=args.betweenness,
        community_method=args.communities,
    )


def _print_json(payload) -> None:
    json.dump(payload, sys.stdout, indent=2, default=str)
    sys.stdout.write("\n")


# ── Subcommands ───────────────────────────────────────────────────────────────

def cmd_network(args: argparse.Namespace) -> int:
    """Assembled graph + dashboard statistics as JSON."""
    from powermap.pipeline import get_network_data

    store = _load_store(args)
    _print_json(get_network_data(store, _params(args), _config(args), AttributeResolver(store)))
    return 0


def cmd_analysis(args: argparse.Namespace) -> int:
    """Full analytics bundle as JSON."""
    from powermap.pipeline import get_network_analysis

    store = _load_store(args)
    result = get_network_analysis(
        store,
        _params(args),
        _config(args),
        AttributeResolver(store),
        influencer_limit=args.limit,
    )
    _print_json(result)
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    """Stakeholder rows as CSV."""
    from powermap.pipeline import export_network_rows
    from powermap.reports.export import write_csv

    store = _load_store(args)
    rows = export_network_rows(store, _params(args), _config(args), AttributeResolver(store))
    write_csv(rows, args.output or sys.stdout)
    if args.output:
        logger.info("Wrote %d rows to %s", len(rows) - 1, args.output)
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    """Data-quality report as JSON. Exit status 1 when critical issues exist."""
    from powermap.pipeline import validate_network

    store = _load_store(args)
    report = validate_network(store, DEFAULT_CONFIG, AttributeResolver(store))
    _print_json(report)
    return 1 if report.get("critical_issues") else 0


# ── Argument parser ───────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="powermap",
        description="Stakeholder power map — graph assembly and network analytics.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Whole network around group 4, JSON to stdout
  python -m powermap network --nodes nodes.csv --relationships rels.csv \\
      --groups groups.csv --group-id 4

  # High-influence stakeholders only, exact betweenness
  python -m powermap analysis --nodes nodes.csv --relationships rels.csv \\
      --influence-min 4 --betweenness exact

  # CSV export of two contacts and their neighbours
  python -m powermap export --nodes nodes.csv --relationships rels.csv \\
      --contact-id 12,17 -o powermap.csv
        """,
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    def add_store_flags(p: argparse.ArgumentParser) -> None:
        p.add_argument("--nodes", required=True, metavar="CSV",
                       help="Stakeholder CSV (id, display_name, category, ...)")
        p.add_argument("--relationships", default=None, metavar="CSV",
                       help="Relationship CSV (id, source_id, target_id, type_id, ...)")
        p.add_argument("--groups", default=None, metavar="CSV",
                       help="Group membership CSV (group_id, contact_id)")

    def add_filter_flags(p: argparse.ArgumentParser) -> None:
        p.add_argument("--group-id", type=int, default=None, metavar="N")
        p.add_argument("--contact-id", default=None, metavar="IDS",
                       help="Comma-separated stakeholder ids (overrides --group-id)")
        p.add_argument("--influence-min", type=int, default=1, metavar="N")
        p.add_argument("--support-min", type=int, default=1, metavar="N")
        p.add_argument("--relationship-types", default=None, metavar="TYPES",
                       help="Comma-separated relationship type ids or labels")
        p.add_argument("--only-relationship", action="store_true",
                       help="Drop stakeholders without relationships")
        p.add_argument("--betweenness", default="approximate",
                       choices=["approximate", "exact"])
        p.add_argument("--communities", default="components",
                       choices=["components", "louvain"])

    p_network = subparsers.add_parser("network", help="Assembled graph + stats (JSON)")
    add_store_flags(p_network)
    add_filter_flags(p_network)
    p_network.set_defaults(func=cmd_network)

    p_analysis = subparsers.add_parser("analysis", help="Full network analysis (JSON)")
    add_store_flags(p_analysis)
    add_filter_flags(p_analysis)
    p_analysis.add_argument("--limit", type=int, default=None, metavar="N",
                            help="Number of key influencers (default: 10)")
    p_analysis.set_defaults(func=cmd_analysis)

    p_export = subparsers.add_parser("export", help="Stakeholder rows (CSV)")
    add_store_flags(p_export)
    add_filter_flags(p_export)
    p_export.add_argument("-o", "--output", default=None, metavar="PATH")
    p_export.set_defaults(func=cmd_export)

    p_validate = subparsers.add_parser("validate", help="Data-quality report (JSON)")
    add_store_flags(p_validate)
    p_validate.set_defaults(func=cmd_validate)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.log_level)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
