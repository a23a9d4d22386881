#!/usr/bin/env python3
"""Command-line interface for the TACO food search engine."""

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, List, Optional

import yaml

from taco_search.api.server import build_planner, serve
from taco_search.data_layer.exceptions import DatasetLoadError, InvalidQueryError
from taco_search.data_layer.nutrient_fields import describe_fields
from taco_search.data_layer.settings import Settings, SettingsLoader
from taco_search.output.formatters import (
    format_batch_json,
    format_food_json,
    format_foods_json,
    format_json_string,
    format_search_hit_json,
)
from taco_search.search.query_planner import QueryPlanner
from taco_search.search.sorting import SortOrder

EXIT_DATASET_ERROR = 1
EXIT_QUERY_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="taco-search",
        description="Query the TACO Brazilian food composition table",
    )
    parser.add_argument(
        "--config",
        type=str,
        default="config/settings.yaml",
        help="Path to settings YAML file, used if it exists (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--dataset",
        type=str,
        help="Path to TACO JSON file (overrides settings and TACO_DATASET_PATH)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    search = subparsers.add_parser("search", help="Ranked fuzzy search by name or category")
    search.add_argument("query", help="Search terms, e.g. 'arroz integral'")
    search.add_argument("--limit", type=int, help="Maximum number of results")

    get = subparsers.add_parser("get", help="Show one food by ID")
    get.add_argument("id", type=int, help="Food ID")

    subparsers.add_parser("categories", help="List food categories")
    subparsers.add_parser("fields", help="List queryable nutrient fields")

    nutrient_filter = subparsers.add_parser("filter", help="Filter foods by one nutrient range")
    nutrient_filter.add_argument("nutrient", help="Nutrient field, e.g. protein_g")
    nutrient_filter.add_argument("--min", type=float, dest="min_value", help="Minimum value")
    nutrient_filter.add_argument("--max", type=float, dest="max_value", help="Maximum value")
    nutrient_filter.add_argument("--limit", type=int, help="Maximum number of results")

    subparsers.add_parser("random", help="Show a random food")

    advanced = subparsers.add_parser(
        "advanced", help="Substring search with nutrient ranges and sorting"
    )
    advanced.add_argument("--query", help="Text to find in description or category")
    for nutrient in ("energy_kcal", "protein_g", "carbohydrate_g", "lipid_g", "fiber_g"):
        advanced.add_argument(f"--min-{nutrient.replace('_', '-')}", type=float,
                              dest=f"min_{nutrient}")
        advanced.add_argument(f"--max-{nutrient.replace('_', '-')}", type=float,
                              dest=f"max_{nutrient}")
    advanced.add_argument(
        "--sort-by",
        choices=["energy_kcal", "protein_g", "carbohydrate_g", "lipid_g", "fiber_g"],
    )
    advanced.add_argument(
        "--sort-order", choices=[order.value for order in SortOrder], default="desc"
    )
    advanced.add_argument("--limit", type=int, help="Maximum number of results")

    batch = subparsers.add_parser("batch", help="Run several queries at once")
    batch.add_argument(
        "queries",
        help="JSON list of strings and/or advanced query objects, or @path to a JSON file",
    )

    subparsers.add_parser("serve", help="Run the HTTP API")
    return parser


def load_settings(args: argparse.Namespace) -> Settings:
    """Resolve settings: YAML file (if present), then env, then --dataset."""
    config_path = Path(args.config)
    settings = SettingsLoader(str(config_path)).load() if config_path.exists() else Settings()
    settings = settings.with_env()
    if args.dataset:
        settings = replace(settings, dataset_path=args.dataset)
    return settings


def parse_batch_argument(raw: str) -> List[Any]:
    """Parse the batch argument (inline JSON or @file).

    Raises:
        InvalidQueryError: If the JSON is invalid or not a list
    """
    if raw.startswith("@"):
        raw = Path(raw[1:]).read_text(encoding="utf-8")
    try:
        queries = json.loads(raw)
    except json.JSONDecodeError as e:
        raise InvalidQueryError(f"Batch queries are not valid JSON: {e}") from e
    if not isinstance(queries, list):
        raise InvalidQueryError("Batch queries must be a JSON list")
    return queries


def run_command(args: argparse.Namespace, planner: QueryPlanner) -> Any:
    """Run one query subcommand and return its JSON-ready result."""
    if args.command == "search":
        return [format_search_hit_json(hit) for hit in planner.search_foods(args.query, args.limit)]
    if args.command == "get":
        food = planner.get_food_by_id(args.id)
        return format_food_json(food) if food is not None else None
    if args.command == "categories":
        return planner.list_categories()
    if args.command == "filter":
        foods = planner.filter_by_nutrient(
            args.nutrient, args.min_value, args.max_value, args.limit
        )
        return format_foods_json(foods)
    if args.command == "random":
        food = planner.random_food()
        return format_food_json(food) if food is not None else None
    if args.command == "advanced":
        params = {
            key: value
            for key, value in vars(args).items()
            if value is not None
            and (key.startswith(("min_", "max_")) or key in ("query", "sort_by", "sort_order", "limit"))
        }
        return format_foods_json(planner.advanced_search(params))
    if args.command == "batch":
        return format_batch_json(planner.batch_search(parse_batch_argument(args.queries)))
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        settings = load_settings(args)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"Error: Invalid settings: {e}", file=sys.stderr)
        print(
            "Hint: Check --config (see config/settings.yaml.example) and the TACO_* variables",
            file=sys.stderr,
        )
        return EXIT_QUERY_ERROR

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.command == "fields":
        print(format_json_string(describe_fields()))
        return 0

    try:
        if args.command == "serve":
            serve(settings)
            return 0
        planner = build_planner(settings)
    except DatasetLoadError as e:
        print(f"Error: {e}", file=sys.stderr)
        print(
            "Hint: point --dataset or TACO_DATASET_PATH at the TACO JSON export",
            file=sys.stderr,
        )
        return EXIT_DATASET_ERROR

    try:
        result = run_command(args, planner)
    except (InvalidQueryError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_QUERY_ERROR

    print(format_json_string(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
