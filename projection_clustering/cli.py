#!/usr/bin/env python3
"""
Projection Clustering CLI

Command-line interface for clustering a projected-coordinate export.

Usage:
    projection-clustering cluster points.csv -a dbscan --epsilon 0.5 --min-samples 3
    projection-clustering cluster points.csv -a kmeans --k 4 --seed 7 --json
    projection-clustering cluster points.json -a hierarchical --max-clusters 3 --labels
    projection-clustering cluster points.csv --year-from 2010 --year-to 2015 --entity DEU --entity FRA
    projection-clustering recommend points.csv
"""

import argparse
import csv
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from projection_clustering.config.settings_loader import ConfigManager, Settings
from projection_clustering.core.clustering_engine import ClusteringEngine
from projection_clustering.schemas.data_models import ClusterStats, Dataset
from projection_clustering.utils.advanced_logging import configure_logging, get_logger
from projection_clustering.utils.error_handling import ClusteringServiceError, InvalidDatasetError


class ClusteringCLI:
    """CLI around the clustering engine."""

    def __init__(self, settings: Settings):
        """
        Initialize CLI.

        Args:
            settings: Application settings
        """
        self.settings = settings
        self.engine = ClusteringEngine(settings)

    def load_dataset(self, path: str, x_field: Optional[str] = None, y_field: Optional[str] = None) -> Dataset:
        """
        Load a CSV or JSON export into a dataset.

        Args:
            path: File path (.json holds a list of row objects, anything else is CSV)
            x_field: First coordinate column (defaults to settings)
            y_field: Second coordinate column (defaults to settings)

        Returns:
            Dataset in file order
        """
        dataset_settings = self.settings.dataset
        rows = read_rows(path)

        year_field = dataset_settings.year_field
        for index, row in enumerate(rows):
            if year_field in row:
                row[year_field] = parse_year(row[year_field], index)

        return Dataset.from_rows(
            rows,
            x_field=x_field or dataset_settings.x_field,
            y_field=y_field or dataset_settings.y_field,
        )

    def cluster(
        self,
        dataset: Dataset,
        algorithm: Optional[str],
        params: Dict[str, Any],
        seed: Optional[int] = None,
        include_labels: bool = False,
    ) -> Dict[str, Any]:
        """
        Cluster a dataset and build the JSON report.

        Returns:
            Report with result metadata, statistics and optional per-record labels
        """
        if not params:
            params = self.engine.default_params(algorithm)

        result = self.engine.cluster(dataset, algorithm, params, seed=seed)
        cluster_stats = self.engine.stats(dataset, result)

        report = {
            "result": result.to_dict(),
            "stats": cluster_stats.model_dump(),
        }
        if include_labels:
            report["labels"] = [
                {**dict(record.attributes), "x": record.point.x, "y": record.point.y, "label": int(label)}
                for record, label in zip(dataset, result.labels)
            ]
        return report


def parse_year(value: Any, index: int) -> Optional[int]:
    """Normalize a year cell (int, float or numeric string) to an int; blank cells become None."""
    if value is None or (isinstance(value, int) and not isinstance(value, bool)):
        return value

    text = str(value).strip()
    if not text:
        return None

    try:
        number = float(text)
    except ValueError:
        number = None

    if number is None or not number.is_integer():
        raise InvalidDatasetError(
            f"Row {index} has a non-integer year {value!r}",
            details={"row": index, "year": str(value)},
        )
    return int(number)


def read_rows(path: str) -> List[Dict[str, Any]]:
    """Read dict rows from a CSV or JSON file."""
    file_path = Path(path)
    if file_path.suffix.lower() == ".json":
        with open(file_path, "r") as f:
            data = json.load(f)
        if not isinstance(data, list):
            raise ValueError(f"{path}: expected a JSON list of row objects")
        return data

    with open(file_path, "r", newline="") as f:
        return list(csv.DictReader(f))


def print_json(data: dict, indent: int = 2):
    """Pretty print JSON."""
    print(json.dumps(data, indent=indent, default=str))


def print_stats(stats: ClusterStats, result: Dict[str, Any]):
    """Print cluster statistics."""
    print(f"Algorithm: {stats.algorithm.upper()}")
    if result.get("fallback_applied"):
        print(f"   (requested '{result['requested_algorithm']}', resolved to '{stats.algorithm}')")
    print(f"Clusters: {stats.n_clusters}")
    print(f"Total Points: {stats.total_points}")

    if stats.noise_points > 0:
        print(f"Noise Points: {stats.noise_points}")

    print("Cluster Sizes:")
    for cluster_id, size in stats.cluster_sizes.items():
        print(f"  Cluster {cluster_id}: {size} points")


def build_params(args: argparse.Namespace) -> Dict[str, Any]:
    """Collect the algorithm parameters given on the command line."""
    params = {}
    if args.epsilon is not None:
        params["epsilon"] = args.epsilon
    if args.min_samples is not None:
        params["min_samples"] = args.min_samples
    if args.k is not None:
        params["k"] = args.k
    if args.max_clusters is not None:
        params["max_clusters"] = args.max_clusters
    return params


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="projection-clustering",
        description="Cluster 2-D projected points with DBSCAN, K-Means or single-linkage hierarchical clustering",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("command", help="Command to execute", choices=["cluster", "recommend"])
    parser.add_argument("path", help="CSV or JSON file with one row per point")
    parser.add_argument("--algorithm", "-a", default=None, help="Algorithm (dbscan/kmeans/hierarchical)")
    parser.add_argument("--epsilon", type=float, help="Neighborhood radius (DBSCAN)")
    parser.add_argument("--min-samples", type=int, help="Minimum neighborhood size (DBSCAN)")
    parser.add_argument("--k", type=int, help="Number of clusters (K-Means)")
    parser.add_argument("--max-clusters", type=int, help="Target cluster count (hierarchical)")
    parser.add_argument("--seed", type=int, help="Random seed (K-Means)")
    parser.add_argument("--x-field", help="First coordinate column")
    parser.add_argument("--y-field", help="Second coordinate column")
    parser.add_argument("--year-from", type=int, help="First year to keep")
    parser.add_argument("--year-to", type=int, help="Last year to keep")
    parser.add_argument("--entity", action="append", help="Entity to keep (repeatable)")
    parser.add_argument("--labels", action="store_true", help="Include per-record labels in JSON output")
    parser.add_argument("--json", action="store_true", help="Print the full report as JSON")
    parser.add_argument("--config", help="Path to settings YAML")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = ConfigManager.reload_config(args.config) if args.config else ConfigManager.get_settings()
    except ClusteringServiceError as e:
        print(f"Configuration error: {e.message}", file=sys.stderr)
        return 1

    configure_logging(
        log_level=settings.logging.level,
        log_format=settings.logging.format,
        log_file=settings.logging.file,
        service_name=settings.service.name,
    )

    logger = get_logger(__name__)
    cli = ClusteringCLI(settings)

    try:
        dataset = cli.load_dataset(args.path, args.x_field, args.y_field)
    except (OSError, ValueError) as e:
        print(f"Failed to load {args.path}: {e}", file=sys.stderr)
        return 1

    if args.year_from is not None or args.year_to is not None or args.entity:
        year_range = None
        if args.year_from is not None or args.year_to is not None:
            year_range = (
                args.year_from if args.year_from is not None else -sys.maxsize,
                args.year_to if args.year_to is not None else sys.maxsize,
            )
        dataset = dataset.filter(
            year_range=year_range,
            entities=args.entity,
            year_field=settings.dataset.year_field,
            entity_field=settings.dataset.entity_field,
        )

    logger.info("dataset_loaded", path=args.path, records=len(dataset))

    if args.command == "recommend":
        print(cli.engine.get_recommended_algorithm(len(dataset)))
        return 0

    try:
        report = cli.cluster(
            dataset,
            args.algorithm,
            build_params(args),
            seed=args.seed,
            include_labels=args.labels,
        )
    except ClusteringServiceError as e:
        print_json(e.to_dict())
        return 2

    if args.json or args.labels:
        print_json(report)
    else:
        print_stats(ClusterStats(**report["stats"]), report["result"])

    return 0


if __name__ == "__main__":
    sys.exit(main())
