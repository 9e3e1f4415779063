"""Command line interface for kinchart."""

from __future__ import annotations

import argparse
import json
import os
from typing import Dict, List, Sequence, Tuple

from .config import DEFAULT_CONFIG, DEFAULT_RULES, load_config
from .engine import run_layout
from .export import export_layout
from .schemas import Person, Relationship, load_document, load_relationships
from .utils import console, logger, set_log_level


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="kinchart", description="Family tree layout engine")
    sub = parser.add_subparsers(dest="command", required=True)

    layout = sub.add_parser("layout", help="Compute node positions for a family tree")
    layout.add_argument("people", help="JSON file with persons (optionally with relationships)")
    layout.add_argument("--relationships", help="JSON file with relationship records")
    layout.add_argument(
        "--collapse",
        action="append",
        default=[],
        help="Person ID whose descendants are hidden (repeatable)",
    )
    layout.add_argument("--config", help="JSON file with layout config and rules")
    layout.add_argument("--out", required=True, help="Output directory")
    layout.add_argument(
        "--log-level",
        default=os.getenv("KINCHART_LOG_LEVEL", "INFO"),
        help="Python logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    layout.add_argument(
        "--report-path",
        help="Optional JSON file to store layout diagnostics",
    )

    validate = sub.add_parser("validate", help="Check a persons file for broken references")
    validate.add_argument("people", help="JSON file with persons")

    return parser


def _read_json(path: str):
    with open(path, "r", encoding="utf-8") as fh:
        return json.load(fh)


def load_inputs(people_path: str, relationships_path: str | None = None) -> Tuple[List[Person], List[Relationship]]:
    try:
        people, relationships = load_document(_read_json(people_path))
        if relationships_path:
            relationships = relationships + load_relationships(_read_json(relationships_path))
    except (OSError, ValueError) as exc:
        raise SystemExit(f"Could not load input: {exc}") from exc
    return people, relationships


def run_layout_command(args: argparse.Namespace) -> None:
    set_log_level(args.log_level)
    people, relationships = load_inputs(args.people, args.relationships)
    config, rules = DEFAULT_CONFIG, DEFAULT_RULES
    if args.config:
        try:
            config, rules = load_config(args.config)
        except (OSError, ValueError) as exc:
            raise SystemExit(f"Invalid layout config: {exc}") from exc

    console.log(f"Laying out {len(people)} people ({len(relationships)} relationships)")
    result = run_layout(people, relationships, set(args.collapse), config=config, rules=rules)
    paths = export_layout(people, result.positions, args.out)
    console.log(paths)
    result.stats.log()
    if args.report_path:
        with open(args.report_path, "w", encoding="utf-8") as fh:
            json.dump(result.stats.to_dict(), fh, indent=2)
        console.log(f"Diagnostics report saved to {args.report_path}")


def find_problems(people: Sequence[Person]) -> Dict[str, List[str]]:
    """Dangling IDs and one-sided links, keyed by problem kind."""

    by_id = {person.id: person for person in people}
    problems: Dict[str, List[str]] = {"dangling": [], "asymmetric": []}
    for person in people:
        links = (
            ("parent", person.parent_ids, "child_ids"),
            ("child", person.child_ids, "parent_ids"),
            ("spouse", person.spouse_ids, "spouse_ids"),
        )
        for kind, ids, reverse in links:
            for other_id in ids:
                other = by_id.get(other_id)
                if other is None:
                    problems["dangling"].append(f"{person.id} -> {kind} {other_id}")
                elif person.id not in getattr(other, reverse):
                    problems["asymmetric"].append(f"{person.id} -> {kind} {other_id}")
    return problems


def run_validate(path: str) -> None:
    people, _ = load_inputs(path)
    problems = find_problems(people)
    console.log(f"People: {len(people)}")
    for entry in problems["asymmetric"]:
        logger.warning("One-sided link: %s", entry)
    if problems["dangling"]:
        raise SystemExit(f"References to unknown people: {problems['dangling'][:3]}")
    console.log("Validation OK")


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "layout":
        run_layout_command(args)
    elif args.command == "validate":
        run_validate(args.people)
    else:  # pragma: no cover - defensive
        parser.print_help()


if __name__ == "__main__":  # pragma: no cover
    main()
